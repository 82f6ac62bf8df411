"""Pytest configuration and fixtures."""

import os

# Settings are read at import time, so the test environment goes in first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["XENDIT_SECRET_KEY"] = "xnd_development_test"
os.environ["XENDIT_CALLBACK_TOKEN"] = "test-callback-token"
os.environ["ENABLE_SCHEDULER"] = "false"

from datetime import date, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.dependencies import get_current_user, get_payment_gateway
from app.core.exceptions import GatewayError
from app.db.base import get_db
from app.main import app
from app.models import Base
from app.models.loan import Loan, LoanCategory, LoanStatus
from app.models.member import Member
from app.models.user import User, UserRoleEnum
from app.services.gateway import Invoice


class FakeGateway:
    """Stands in for XenditClient; records every invoice request."""

    def __init__(self):
        self.calls = []
        self.error = None
        self._counter = 0

    def create_invoice(self, external_id, amount, description, payer_email=None, success_redirect_url=None):
        self.calls.append({
            "external_id": external_id,
            "amount": amount,
            "description": description,
            "payer_email": payer_email,
        })
        if self.error is not None:
            raise self.error
        self._counter += 1
        invoice_id = f"inv_{self._counter:04d}"
        return Invoice(
            invoice_id=invoice_id,
            invoice_url=f"https://checkout.xendit.co/web/{invoice_id}",
            external_id=external_id,
            status="PENDING",
        )

    def fail_with(self, message="Xendit API error [400]: bad request", status_code=400):
        self.error = GatewayError(message, status_code=status_code)

    def close(self):
        pass


@pytest.fixture(autouse=True)
def audit_dir(tmp_path, monkeypatch):
    """Keep audit files out of the project tree."""
    logs_dir = tmp_path / "logs"
    monkeypatch.setattr("app.core.audit.LOGS_DIR", logs_dir)
    return logs_dir


@pytest.fixture
def engine():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def admin_user(db):
    user = User(email="admin@koperasi.id", full_name="Admin Koperasi", role=UserRoleEnum.ADMIN, is_active=True)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def operator_user(db):
    user = User(email="kasir@koperasi.id", full_name="Kasir", role=UserRoleEnum.OPERATOR, is_active=True)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def client(db, admin_user, gateway):
    """TestClient authenticated as an admin, wired to the test database and fake gateway."""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = lambda: admin_user
    app.dependency_overrides[get_payment_gateway] = lambda: gateway

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def member(db):
    member = Member(name="Siti Aminah", nik="3201010101010001", address="Desa Sukamaju RT 02", phone="081234567890")
    db.add(member)
    db.commit()
    db.refresh(member)
    return member


@pytest.fixture
def make_loan(db):
    """Factory for loans inserted directly, bypassing the service layer."""

    def _make_loan(
        total_amount="5000000",
        interest_rate="1.5",
        status=LoanStatus.ACTIVE,
        category=LoanCategory.UANG,
        due_date=None,
        member_id=None,
        borrower_name="Budi Santoso",
        borrower_nik="3201020202020002",
        borrower_phone="085700001111",
    ):
        loan = Loan(
            member_id=member_id,
            borrower_name=None if member_id else borrower_name,
            borrower_nik=None if member_id else borrower_nik,
            borrower_phone=None if member_id else borrower_phone,
            category=category,
            total_amount=Decimal(total_amount),
            interest_rate=Decimal(interest_rate),
            due_date=due_date or date.today() + timedelta(days=30),
            status=status,
        )
        db.add(loan)
        db.commit()
        db.refresh(loan)
        return loan

    return _make_loan
