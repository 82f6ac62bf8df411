from decimal import Decimal
from typing import Dict
from sqlalchemy.orm import Session
from app.models.loan import Loan, LoanCategory, LoanStatus
from app.models.member import Member


def get_dashboard_stats(db: Session) -> Dict:
    """
    Headline numbers for the dashboard.

    Per-category figures cover ACTIVE loans only: outstanding exposure, not
    lifetime volume.
    """
    loans = db.query(Loan.category, Loan.status, Loan.total_amount).all()
    total_members = db.query(Member).count()

    status_counts = {status: 0 for status in LoanStatus}
    amount_by_category = {category.value: Decimal("0") for category in LoanCategory}
    count_by_category = {category.value: 0 for category in LoanCategory}
    total_loan_amount = Decimal("0")

    for category, status, amount in loans:
        amount = Decimal(str(amount or 0))
        total_loan_amount += amount
        status_counts[status] += 1
        if status == LoanStatus.ACTIVE:
            amount_by_category[category.value] += amount
            count_by_category[category.value] += 1

    return {
        "total_members": total_members,
        "total_loans": len(loans),
        "total_loan_amount": total_loan_amount,
        "active_loans": status_counts[LoanStatus.ACTIVE],
        "overdue_loans": status_counts[LoanStatus.OVERDUE],
        "paid_loans": status_counts[LoanStatus.PAID],
        "loans_by_category": amount_by_category,
        "count_by_category": count_by_category,
    }
