import logging
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from app.core.exceptions import NotFoundError, ValidationError
from app.models.loan import Loan, LoanCategory, LoanItem, LoanStatus
from app.models.member import Member
from app.services.koperasi import get_koperasi_settings
from app.services.settlement import compute_total_due, sum_paid_payments

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
DUE_SOON_DAYS = 7


def create_loan(
    db: Session,
    category: LoanCategory,
    due_date: date,
    items: Optional[List[Dict]] = None,
    total_amount: Optional[Decimal] = None,
    interest_rate: Optional[Decimal] = None,
    member_id: Optional[UUID] = None,
    borrower_name: Optional[str] = None,
    borrower_nik: Optional[str] = None,
    borrower_phone: Optional[str] = None,
    borrower_address: Optional[str] = None,
    notes: Optional[str] = None,
) -> Loan:
    """
    Issue a loan to a member or a non-member borrower.

    ``total_amount`` defaults to the sum of quantity x price over ``items``;
    ``interest_rate`` defaults to the cooperative's default rate.
    """
    items = items or []

    if member_id:
        member = db.query(Member).filter(Member.id == member_id).first()
        if not member:
            raise NotFoundError("Member not found")
    elif not (borrower_name and borrower_name.strip()):
        raise ValidationError("Either member_id or borrower_name is required")

    for item in items:
        if int(item.get("quantity", 1)) <= 0:
            raise ValidationError(f"Item '{item.get('name')}' must have a positive quantity")
        if Decimal(str(item.get("price", 0))) < 0:
            raise ValidationError(f"Item '{item.get('name')}' cannot have a negative price")

    if total_amount is None:
        total_amount = sum(
            (Decimal(str(i.get("price", 0))) * int(i.get("quantity", 1)) for i in items),
            Decimal("0"),
        )
    total_amount = Decimal(str(total_amount))
    if total_amount <= 0:
        raise ValidationError("Loan amount must be greater than zero")

    if interest_rate is None:
        interest_rate = get_koperasi_settings(db).default_interest_rate
    interest_rate = Decimal(str(interest_rate))
    if interest_rate < 0:
        raise ValidationError("Interest rate cannot be negative")

    loan = Loan(
        member_id=member_id,
        borrower_name=borrower_name.strip() if borrower_name else None,
        borrower_nik=borrower_nik or None,
        borrower_phone=borrower_phone or None,
        borrower_address=borrower_address or None,
        category=category,
        total_amount=total_amount,
        interest_rate=interest_rate,
        due_date=due_date,
        status=LoanStatus.ACTIVE,
        notes=notes or None,
    )
    for item in items:
        loan.items.append(LoanItem(
            name=item["name"],
            quantity=int(item.get("quantity", 1)),
            unit=item.get("unit") or "pcs",
            price=Decimal(str(item.get("price", 0))),
        ))

    db.add(loan)
    db.commit()
    db.refresh(loan)
    logger.info("Loan %s issued: %s %s at %s%%", loan.id, category.value, total_amount, interest_rate)
    return loan


def list_loans(
    db: Session,
    category: Optional[LoanCategory] = None,
    status: Optional[LoanStatus] = None,
) -> List[Loan]:
    """Loans, newest first, with members and items loaded."""
    query = db.query(Loan).options(selectinload(Loan.member), selectinload(Loan.items))
    if category:
        query = query.filter(Loan.category == category)
    if status:
        query = query.filter(Loan.status == status)
    return query.order_by(Loan.created_at.desc()).all()


def get_loan(db: Session, loan_id: UUID) -> Loan:
    loan = db.query(Loan).options(
        selectinload(Loan.member), selectinload(Loan.items)
    ).filter(Loan.id == loan_id).first()
    if not loan:
        raise NotFoundError("Loan not found")
    return loan


def loan_balance(db: Session, loan: Loan) -> Dict[str, Decimal]:
    """Amount due with interest, confirmed total paid, and what is left."""
    total_due = compute_total_due(loan.total_amount, loan.interest_rate)
    total_paid = sum_paid_payments(db, loan.id)
    outstanding = max(total_due - total_paid, Decimal("0"))
    return {
        "total_due": total_due.quantize(CENT, rounding=ROUND_HALF_UP),
        "total_paid": total_paid.quantize(CENT, rounding=ROUND_HALF_UP),
        "outstanding": outstanding.quantize(CENT, rounding=ROUND_HALF_UP),
    }


def update_loan_status(db: Session, loan_id: UUID, status: LoanStatus) -> Loan:
    """Operator override. The only way a PAID loan goes back to ACTIVE."""
    loan = get_loan(db, loan_id)
    old_status = loan.status
    loan.status = status
    db.commit()
    db.refresh(loan)
    logger.info("Loan %s status overridden %s -> %s", loan_id, old_status.value, status.value)
    return loan


def delete_loan(db: Session, loan_id: UUID) -> None:
    """Delete a loan with its items and payments."""
    loan = get_loan(db, loan_id)
    db.delete(loan)
    db.commit()
    logger.info("Loan %s deleted", loan_id)


def list_loan_history(db: Session) -> List[Loan]:
    """Paid loans, most recently settled first."""
    return db.query(Loan).options(
        selectinload(Loan.member), selectinload(Loan.items)
    ).filter(
        Loan.status == LoanStatus.PAID
    ).order_by(Loan.updated_at.desc(), Loan.created_at.desc()).all()


def list_due_soon_loans(db: Session, today: Optional[date] = None, days: int = DUE_SOON_DAYS) -> List[Loan]:
    """ACTIVE loans falling due between today and ``days`` from now, soonest first."""
    today = today or date.today()
    return db.query(Loan).options(
        selectinload(Loan.member), selectinload(Loan.items)
    ).filter(
        Loan.status == LoanStatus.ACTIVE,
        Loan.due_date >= today,
        Loan.due_date <= today + timedelta(days=days),
    ).order_by(Loan.due_date.asc(), Loan.created_at.asc()).all()


def list_borrowers(db: Session) -> List[Dict]:
    """
    Non-member borrowers grouped by NIK (falling back to name).

    Phone and address are taken from the newest loan that has them.
    """
    loans = db.query(Loan).filter(
        Loan.borrower_name.isnot(None)
    ).order_by(Loan.created_at.desc()).all()

    borrowers: Dict[str, Dict] = {}
    for loan in loans:
        key = loan.borrower_nik or loan.borrower_name
        if not key:
            continue
        entry = borrowers.get(key)
        if entry is None:
            entry = {
                "id": key,
                "name": loan.borrower_name,
                "nik": loan.borrower_nik,
                "phone": loan.borrower_phone,
                "address": loan.borrower_address,
                "total_loans": 0,
                "active_loans": 0,
                "total_amount": Decimal("0"),
                "last_loan_date": loan.created_at,
            }
            borrowers[key] = entry
        entry["phone"] = entry["phone"] or loan.borrower_phone
        entry["address"] = entry["address"] or loan.borrower_address
        entry["total_loans"] += 1
        if loan.status == LoanStatus.ACTIVE:
            entry["active_loans"] += 1
        entry["total_amount"] += Decimal(str(loan.total_amount or 0))

    return list(borrowers.values())


def mark_overdue_loans(db: Session, today: Optional[date] = None) -> List[Loan]:
    """
    Move ACTIVE loans past their due date to OVERDUE.

    The write is conditional on the row still being ACTIVE, so a loan
    settled in the meantime stays PAID.
    """
    today = today or date.today()
    candidates = db.query(Loan).filter(
        Loan.status == LoanStatus.ACTIVE,
        Loan.due_date < today,
    ).all()

    marked: List[Loan] = []
    for loan in candidates:
        updated = db.query(Loan).filter(
            Loan.id == loan.id,
            Loan.status == LoanStatus.ACTIVE,
        ).update({Loan.status: LoanStatus.OVERDUE}, synchronize_session=False)
        if updated:
            marked.append(loan)

    if marked:
        db.commit()
        for loan in marked:
            db.refresh(loan)
        logger.info("Marked %d loan(s) overdue", len(marked))
    return marked
