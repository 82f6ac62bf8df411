"""
Tests for cooperative settings and operator authentication
"""

import pytest
from decimal import Decimal
from fastapi.testclient import TestClient

from app.core.dependencies import get_current_user
from app.core.exceptions import ValidationError
from app.core.security import create_access_token, decode_access_token, verify_callback_token
from app.db.base import get_db
from app.main import app
from app.services.koperasi import get_koperasi_settings, update_koperasi_settings


class TestKoperasiSettingsService:
    """Test settings service functions"""

    def test_defaults_created_on_first_read(self, db):
        row = get_koperasi_settings(db)
        assert row.name == "Koperasi"
        assert row.default_interest_rate == Decimal("0")
        assert get_koperasi_settings(db).id == row.id

    def test_partial_update(self, db):
        update_koperasi_settings(db, {"name": "Koperasi Tani Makmur", "phone": "0271-123456"})
        row = update_koperasi_settings(db, {"default_interest_rate": Decimal("1.5")})

        assert row.name == "Koperasi Tani Makmur"
        assert row.phone == "0271-123456"
        assert row.default_interest_rate == Decimal("1.5")

    def test_none_clears_only_nullable_fields(self, db):
        update_koperasi_settings(db, {"name": "Koperasi Tani", "phone": "0271"})
        row = update_koperasi_settings(db, {"name": None, "phone": None})

        assert row.name == "Koperasi Tani"
        assert row.phone is None

    def test_negative_rate_rejected(self, db):
        with pytest.raises(ValidationError):
            update_koperasi_settings(db, {"default_interest_rate": Decimal("-1")})

    def test_unknown_keys_ignored(self, db):
        row = update_koperasi_settings(db, {"id": "not-a-uuid", "name": "Koperasi Baru"})
        assert row.name == "Koperasi Baru"


class TestSettingsEndpoints:
    """GET/PUT /api/settings"""

    def test_get_settings(self, client):
        r = client.get("/api/settings")
        assert r.status_code == 200
        assert r.json()["name"] == "Koperasi"

    def test_admin_can_update(self, client):
        r = client.put("/api/settings", json={"name": "Koperasi Sejahtera", "notifications_enabled": False})
        assert r.status_code == 200
        data = r.json()
        assert data["name"] == "Koperasi Sejahtera"
        assert data["notifications_enabled"] is False
        assert data["due_date_reminder"] is True

    def test_operator_cannot_update(self, client, operator_user):
        app.dependency_overrides[get_current_user] = lambda: operator_user

        r = client.put("/api/settings", json={"name": "Koperasi Lain"})
        assert r.status_code == 403

        r = client.get("/api/settings")
        assert r.status_code == 200

    def test_rate_out_of_range(self, client):
        r = client.put("/api/settings", json={"default_interest_rate": "-2"})
        assert r.status_code == 422


class TestOperatorAuth:
    """Bearer token checks without dependency overrides"""

    @pytest.fixture
    def raw_client(self, db):
        def override_get_db():
            yield db

        app.dependency_overrides[get_db] = override_get_db
        yield TestClient(app)
        app.dependency_overrides.clear()

    def test_token_round_trip(self, admin_user):
        token = create_access_token({"sub": str(admin_user.id)})
        assert decode_access_token(token)["sub"] == str(admin_user.id)

    def test_garbage_token(self):
        assert decode_access_token("not.a.jwt") is None

    def test_missing_token(self, raw_client):
        r = raw_client.get("/api/members")
        assert r.status_code in (401, 403)

    def test_valid_token(self, raw_client, admin_user):
        token = create_access_token({"sub": str(admin_user.id)})
        r = raw_client.get("/api/members", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 200

    def test_inactive_operator(self, raw_client, db, operator_user):
        operator_user.is_active = False
        db.commit()
        token = create_access_token({"sub": str(operator_user.id)})

        r = raw_client.get("/api/members", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 403

    def test_token_for_unknown_user(self, raw_client):
        token = create_access_token({"sub": "00000000-0000-0000-0000-000000000000"})
        r = raw_client.get("/api/members", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 401

    def test_callback_token_comparison(self):
        assert verify_callback_token("test-callback-token") is True
        assert verify_callback_token("test-callback-tokex") is False
        assert verify_callback_token(None) is False
        assert verify_callback_token("") is False
