from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.core.exceptions import DuplicateError, NotFoundError, ValidationError
from app.models.member import Member
from app.models.loan import Loan
from uuid import UUID
from typing import List, Optional


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def list_members(db: Session) -> List[Member]:
    """All members, newest first."""
    return db.query(Member).order_by(Member.created_at.desc()).all()


def get_member(db: Session, member_id: UUID) -> Member:
    member = db.query(Member).filter(Member.id == member_id).first()
    if not member:
        raise NotFoundError("Member not found")
    return member


def create_member(
    db: Session,
    name: str,
    nik: str,
    address: str = None,
    phone: str = None
) -> Member:
    """Register a new member. NIK must be unique."""
    name = _clean(name)
    nik = _clean(nik)
    if not name or not nik:
        raise ValidationError("Name and NIK are required")

    existing = db.query(Member).filter(Member.nik == nik).first()
    if existing:
        raise DuplicateError(f"A member with NIK {nik} already exists")

    member = Member(
        name=name,
        nik=nik,
        address=_clean(address),
        phone=_clean(phone)
    )
    db.add(member)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateError(f"A member with NIK {nik} already exists")
    db.refresh(member)
    return member


def update_member(
    db: Session,
    member_id: UUID,
    name: str,
    nik: str,
    address: str = None,
    phone: str = None
) -> Member:
    """Replace a member's details."""
    member = get_member(db, member_id)
    name = _clean(name)
    nik = _clean(nik)
    if not name or not nik:
        raise ValidationError("Name and NIK are required")

    if nik != member.nik:
        clash = db.query(Member).filter(Member.nik == nik, Member.id != member_id).first()
        if clash:
            raise DuplicateError(f"A member with NIK {nik} already exists")

    member.name = name
    member.nik = nik
    member.address = _clean(address)
    member.phone = _clean(phone)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateError(f"A member with NIK {nik} already exists")
    db.refresh(member)
    return member


def delete_member(db: Session, member_id: UUID) -> None:
    """
    Delete a member while keeping their loans.

    The member's identity is copied onto each loan's borrower fields so the
    loan still names who owes it.
    """
    member = get_member(db, member_id)

    loans = db.query(Loan).filter(Loan.member_id == member_id).all()
    for loan in loans:
        loan.borrower_name = loan.borrower_name or member.name
        loan.borrower_nik = loan.borrower_nik or member.nik
        loan.borrower_phone = loan.borrower_phone or member.phone
        loan.borrower_address = loan.borrower_address or member.address
        loan.member_id = None

    db.delete(member)
    db.commit()
