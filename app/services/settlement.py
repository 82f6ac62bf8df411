"""Loan settlement: decide from confirmed payments whether a loan is paid off."""

import logging
from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import BackendUnavailable, NotFoundError
from app.models.loan import Loan, LoanStatus
from app.models.payment import Payment, PaymentStatus

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


def compute_total_due(principal: Decimal, interest_rate: Decimal) -> Decimal:
    """Principal plus flat interest, exact: principal * (1 + rate/100)."""
    principal = Decimal(str(principal or 0))
    rate = Decimal(str(interest_rate or 0))
    return principal + principal * rate / HUNDRED


def sum_paid_payments(db: Session, loan_id: UUID) -> Decimal:
    """Sum of all PAID payments for a loan."""
    amounts: List[Tuple[Decimal]] = db.query(Payment.amount).filter(
        Payment.loan_id == loan_id,
        Payment.status == PaymentStatus.PAID,
    ).all()
    return sum((Decimal(str(a)) for (a,) in amounts), Decimal("0"))


def fetch_loan_terms(db: Session, loan_id: UUID) -> Optional[Tuple[Decimal, Decimal, LoanStatus]]:
    """Return (principal, interest_rate, status) or None when the loan does not exist."""
    row = db.query(Loan.total_amount, Loan.interest_rate, Loan.status).filter(
        Loan.id == loan_id
    ).first()
    if row is None:
        return None
    return row.total_amount, row.interest_rate, row.status


def reconcile_loan(db: Session, loan_id: UUID) -> LoanStatus:
    """
    Mark the loan PAID when confirmed payments cover principal plus interest.

    Never moves a loan out of PAID, and leaves ACTIVE/OVERDUE alone while the
    total is short. The status write is conditional (``status != 'paid'``) so
    concurrent runs for the same loan cannot overwrite each other with a
    stale value.

    Raises:
        NotFoundError: the loan does not exist.
        BackendUnavailable: a read or the write failed; nothing is written.
    """
    try:
        total_paid = sum_paid_payments(db, loan_id)
        terms = fetch_loan_terms(db, loan_id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Settlement read failed for loan %s: %s", loan_id, e)
        raise BackendUnavailable(f"Could not read loan {loan_id}: {e}") from e

    if terms is None:
        raise NotFoundError(f"Loan {loan_id} not found")

    principal, interest_rate, status = terms
    total_due = compute_total_due(principal, interest_rate)

    if total_paid < total_due:
        logger.debug("Loan %s not settled: paid=%s due=%s", loan_id, total_paid, total_due)
        return status

    if status == LoanStatus.PAID:
        return status

    try:
        updated = db.query(Loan).filter(
            Loan.id == loan_id,
            Loan.status != LoanStatus.PAID,
        ).update({Loan.status: LoanStatus.PAID}, synchronize_session=False)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Settlement write failed for loan %s: %s", loan_id, e)
        raise BackendUnavailable(f"Could not update loan {loan_id}: {e}") from e

    if updated:
        logger.info("Loan %s settled: paid=%s due=%s", loan_id, total_paid, total_due)
    db.expire_all()
    return LoanStatus.PAID
