"""
Tests for dashboard statistics, global search and health
"""

from decimal import Decimal

from app.models.loan import LoanCategory, LoanStatus
from app.services.reporting import get_dashboard_stats
from app.services.search import global_search


class TestDashboardStats:
    """Test get_dashboard_stats"""

    def test_empty_database(self, db):
        stats = get_dashboard_stats(db)
        assert stats["total_members"] == 0
        assert stats["total_loans"] == 0
        assert stats["total_loan_amount"] == Decimal("0")
        assert set(stats["loans_by_category"]) == {c.value for c in LoanCategory}
        assert all(v == 0 for v in stats["count_by_category"].values())

    def test_counts_and_category_exposure(self, db, member, make_loan):
        make_loan(total_amount="1000000", category=LoanCategory.UANG)
        make_loan(total_amount="250000", category=LoanCategory.SEMBAKO)
        make_loan(total_amount="400000", category=LoanCategory.UANG, status=LoanStatus.PAID)
        make_loan(total_amount="300000", category=LoanCategory.OBAT, status=LoanStatus.OVERDUE)

        stats = get_dashboard_stats(db)

        assert stats["total_members"] == 1
        assert stats["total_loans"] == 4
        assert stats["total_loan_amount"] == Decimal("1950000")
        assert stats["active_loans"] == 2
        assert stats["paid_loans"] == 1
        assert stats["overdue_loans"] == 1
        # active loans only
        assert stats["loans_by_category"]["uang"] == Decimal("1000000")
        assert stats["count_by_category"]["uang"] == 1
        assert stats["loans_by_category"]["obat"] == Decimal("0")

    def test_stats_endpoint(self, client, make_loan):
        make_loan(total_amount="1000000")

        r = client.get("/api/dashboard/stats")
        assert r.status_code == 200
        data = r.json()
        assert data["total_loans"] == 1
        assert Decimal(data["loans_by_category"]["uang"]) == Decimal("1000000")


class TestGlobalSearch:
    """Test global_search"""

    def test_short_query_returns_nothing(self, db, make_loan):
        make_loan(borrower_name="Budi Santoso")
        assert global_search(db, "b") == []
        assert global_search(db, "  ") == []

    def test_matches_borrower_case_insensitive(self, db, make_loan):
        loan = make_loan(borrower_name="Budi Santoso", category=LoanCategory.ALAT_PERTANIAN)

        results = global_search(db, "santoso")

        assert len(results) == 1
        result = results[0]
        assert result["type"] == "loan"
        assert result["id"] == str(loan.id)
        assert result["category_label"] == "Alat Pertanian"
        assert result["status"] == "active"

    def test_matches_by_nik_and_phone(self, db, make_loan):
        make_loan(borrower_name="Budi", borrower_nik="3201020202020002", borrower_phone="085700001111")

        assert len(global_search(db, "32010202")) == 1
        assert len(global_search(db, "0857000")) == 1

    def test_member_and_member_loans(self, db, member, make_loan):
        loan = make_loan(member_id=member.id)

        results = global_search(db, "aminah")

        by_type = {r["type"]: r for r in results}
        assert set(by_type) == {"member", "loan"}
        assert by_type["member"]["id"] == str(member.id)
        assert by_type["loan"]["id"] == str(loan.id)
        assert by_type["loan"]["name"] == "Siti Aminah"

    def test_loan_matched_twice_reported_once(self, db, member, make_loan):
        loan = make_loan(member_id=member.id)
        loan.borrower_name = "Siti Aminah"
        db.commit()

        results = global_search(db, "aminah")

        loan_ids = [r["id"] for r in results if r["type"] == "loan"]
        assert loan_ids == [str(loan.id)]

    def test_results_are_capped(self, db, make_loan):
        for i in range(15):
            make_loan(borrower_name=f"Petani {i}", borrower_nik=f"NIK{i:03d}")

        results = global_search(db, "petani")
        assert len(results) == 10

    def test_search_endpoint(self, client, make_loan):
        make_loan(borrower_name="Budi Santoso")

        r = client.get("/api/search", params={"q": "budi"})
        assert r.status_code == 200
        assert len(r.json()["results"]) == 1

        r = client.get("/api/search", params={"q": "b"})
        assert r.json() == {"results": []}


class TestRootAndHealth:
    """Test root and health endpoints"""

    def test_root(self, client):
        r = client.get("/")
        assert r.status_code == 200
        assert r.json()["message"] == "Koperasi Dashboard API"

    def test_health(self, client):
        r = client.get("/api/health")
        assert r.status_code == 200
        data = r.json()
        assert data["status"] == "healthy"
        assert data["services"]["database"] == "connected"
