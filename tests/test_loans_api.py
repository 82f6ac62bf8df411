"""
Integration tests for loan endpoints
"""

from datetime import date, timedelta
from decimal import Decimal

from app.models.loan import LoanCategory, LoanStatus
from app.models.payment import Payment
from app.services.koperasi import update_koperasi_settings
from app.services.payment import record_manual_payment

DUE = (date.today() + timedelta(days=30)).isoformat()


class TestIssueLoan:
    """POST /api/loans"""

    def test_goods_loan_total_from_items(self, client):
        r = client.post("/api/loans", json={
            "borrower_name": "Budi Santoso",
            "borrower_nik": "3201020202020002",
            "category": "sembako",
            "interest_rate": "0",
            "due_date": DUE,
            "items": [
                {"name": "Beras", "quantity": 2, "unit": "karung", "price": "50000"},
                {"name": "Minyak goreng", "quantity": 3, "unit": "liter", "price": "12000"},
            ],
        })
        assert r.status_code == 201
        data = r.json()
        assert Decimal(data["total_amount"]) == Decimal("136000")
        assert len(data["items"]) == 2
        assert data["status"] == "active"
        assert Decimal(data["total_due"]) == Decimal("136000")
        assert Decimal(data["outstanding"]) == Decimal("136000")

    def test_cash_loan_for_member(self, client, member):
        r = client.post("/api/loans", json={
            "member_id": str(member.id),
            "category": "uang",
            "total_amount": "5000000",
            "interest_rate": "1.5",
            "due_date": DUE,
        })
        assert r.status_code == 201
        data = r.json()
        assert data["member"]["name"] == "Siti Aminah"
        assert Decimal(data["total_due"]) == Decimal("5075000.00")
        assert Decimal(data["total_paid"]) == Decimal("0")

    def test_default_interest_rate(self, client, db):
        update_koperasi_settings(db, {"default_interest_rate": Decimal("2.5")})

        r = client.post("/api/loans", json={
            "borrower_name": "Wati",
            "category": "uang",
            "total_amount": "1000000",
            "due_date": DUE,
        })
        assert r.status_code == 201
        assert Decimal(r.json()["interest_rate"]) == Decimal("2.5")
        assert Decimal(r.json()["total_due"]) == Decimal("1025000.00")

    def test_borrower_required(self, client):
        r = client.post("/api/loans", json={"category": "uang", "total_amount": "1000", "due_date": DUE})
        assert r.status_code == 400

    def test_unknown_member(self, client):
        r = client.post("/api/loans", json={
            "member_id": "00000000-0000-0000-0000-000000000000",
            "category": "uang",
            "total_amount": "1000",
            "due_date": DUE,
        })
        assert r.status_code == 404

    def test_zero_amount_rejected(self, client):
        r = client.post("/api/loans", json={
            "borrower_name": "Wati",
            "category": "barang",
            "due_date": DUE,
            "items": [],
        })
        assert r.status_code == 400


class TestLoanQueries:
    """List, detail, history and borrowers"""

    def test_filter_by_category_and_status(self, client, make_loan):
        make_loan(category=LoanCategory.UANG)
        make_loan(category=LoanCategory.OBAT)
        make_loan(category=LoanCategory.OBAT, status=LoanStatus.PAID)

        assert len(client.get("/api/loans").json()) == 3
        assert len(client.get("/api/loans", params={"category": "obat"}).json()) == 2
        assert len(client.get("/api/loans", params={"category": "obat", "status": "paid"}).json()) == 1

    def test_detail_includes_balance(self, client, db, make_loan):
        loan = make_loan(total_amount="5000000", interest_rate="1.5")
        record_manual_payment(db, loan.id, Decimal("2000000"))

        r = client.get(f"/api/loans/{loan.id}")
        assert r.status_code == 200
        data = r.json()
        assert Decimal(data["total_paid"]) == Decimal("2000000")
        assert Decimal(data["outstanding"]) == Decimal("3075000")

    def test_unknown_loan(self, client):
        assert client.get("/api/loans/00000000-0000-0000-0000-000000000000").status_code == 404

    def test_history_lists_paid_loans(self, client, make_loan):
        make_loan()
        paid = make_loan(status=LoanStatus.PAID)

        data = client.get("/api/loans/history").json()
        assert [d["id"] for d in data] == [str(paid.id)]

    def test_due_soon(self, client, make_loan):
        later = make_loan(due_date=date.today() + timedelta(days=5))
        sooner = make_loan(due_date=date.today() + timedelta(days=1))
        make_loan(due_date=date.today() + timedelta(days=30))
        make_loan(due_date=date.today() + timedelta(days=2), status=LoanStatus.PAID)

        r = client.get("/api/loans/due-soon")
        assert r.status_code == 200
        assert [d["id"] for d in r.json()] == [str(sooner.id), str(later.id)]

    def test_borrowers_grouped_by_nik(self, client, make_loan, member):
        make_loan(total_amount="100000", borrower_name="Budi", borrower_nik="111")
        make_loan(total_amount="200000", borrower_name="Budi", borrower_nik="111", status=LoanStatus.PAID)
        make_loan(total_amount="50000", borrower_name="Wati", borrower_nik=None, borrower_phone=None)
        make_loan(member_id=member.id)

        data = {b["id"]: b for b in client.get("/api/loans/borrowers").json()}
        assert set(data) == {"111", "Wati"}
        assert data["111"]["total_loans"] == 2
        assert data["111"]["active_loans"] == 1
        assert Decimal(data["111"]["total_amount"]) == Decimal("300000")
        assert data["Wati"]["nik"] is None


class TestLoanStatusAndDelete:
    """Operator overrides and deletion"""

    def test_reopen_paid_loan(self, client, make_loan):
        loan = make_loan(status=LoanStatus.PAID)

        r = client.patch(f"/api/loans/{loan.id}/status", json={"status": "active"})
        assert r.status_code == 200
        assert r.json()["status"] == "active"

    def test_invalid_status(self, client, make_loan):
        loan = make_loan()
        r = client.patch(f"/api/loans/{loan.id}/status", json={"status": "forgiven"})
        assert r.status_code == 422

    def test_delete_removes_payments(self, client, db, make_loan):
        loan = make_loan()
        record_manual_payment(db, loan.id, Decimal("1000"))

        r = client.delete(f"/api/loans/{loan.id}")
        assert r.status_code == 200
        db.expire_all()
        assert db.query(Payment).count() == 0
        assert client.get(f"/api/loans/{loan.id}").status_code == 404


class TestPaymentEndpoints:
    """Manual payments and invoices through the API"""

    def test_manual_payment_settles(self, client, make_loan):
        loan = make_loan(total_amount="100000", interest_rate="0")

        r = client.post(f"/api/loans/{loan.id}/payments", json={"amount": "100000", "idempotency_key": "k1"})
        assert r.status_code == 201
        assert r.json()["status"] == "paid"

        assert client.get(f"/api/loans/{loan.id}").json()["status"] == "paid"

    def test_manual_payment_replay(self, client, make_loan):
        loan = make_loan(total_amount="100000", interest_rate="0")
        body = {"amount": "40000", "idempotency_key": "k2"}

        first = client.post(f"/api/loans/{loan.id}/payments", json=body)
        second = client.post(f"/api/loans/{loan.id}/payments", json=body)

        assert first.json()["id"] == second.json()["id"]
        assert len(client.get(f"/api/loans/{loan.id}/payments").json()) == 1

    def test_non_positive_amount(self, client, make_loan):
        loan = make_loan()
        r = client.post(f"/api/loans/{loan.id}/payments", json={"amount": "0"})
        assert r.status_code == 422

    def test_sub_cent_amount_rejected(self, client, make_loan):
        loan = make_loan()

        r = client.post(f"/api/loans/{loan.id}/payments", json={"amount": "0.001"})
        assert r.status_code == 400
        r = client.post(f"/api/loans/{loan.id}/invoices", json={"amount": "1000.005"})
        assert r.status_code == 400

        assert client.get(f"/api/loans/{loan.id}/payments").json() == []

    def test_manual_payment_unknown_loan(self, client):
        r = client.post("/api/loans/00000000-0000-0000-0000-000000000000/payments", json={"amount": "1000"})
        assert r.status_code == 404

    def test_create_invoice(self, client, make_loan, gateway):
        loan = make_loan()

        r = client.post(f"/api/loans/{loan.id}/invoices", json={"amount": "5075000", "payer_email": "siti@koperasi.id"})
        assert r.status_code == 201
        data = r.json()
        assert data["invoice_url"] == "https://checkout.xendit.co/web/inv_0001"
        assert data["external_id"].startswith(f"LOAN-{loan.id}-")

        payments = client.get("/api/payments", params={"loan_id": str(loan.id)}).json()
        assert payments[0]["status"] == "pending"
        assert payments[0]["method"] == "hosted_gateway"

    def test_invoice_gateway_failure(self, client, make_loan, gateway):
        loan = make_loan()
        gateway.fail_with()

        r = client.post(f"/api/loans/{loan.id}/invoices", json={"amount": "1000"})
        assert r.status_code == 502
        assert client.get("/api/payments").json() == []
