"""Global search across loans and members."""

from typing import Dict, List

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from app.models.loan import CATEGORY_LABELS, Loan, LoanCategory
from app.models.member import Member

MIN_QUERY_LENGTH = 2
RESULT_LIMIT = 10


def _category_label(category: LoanCategory) -> str:
    return CATEGORY_LABELS.get(category, category.value)


def _loan_result(loan: Loan, prefer_member: bool) -> Dict:
    member = loan.member
    if prefer_member and member:
        name = member.name or loan.borrower_name
        nik = member.nik or loan.borrower_nik
        phone = member.phone or loan.borrower_phone
    else:
        name = loan.borrower_name or (member.name if member else None)
        nik = loan.borrower_nik or (member.nik if member else None)
        phone = loan.borrower_phone or (member.phone if member else None)
    return {
        "id": str(loan.id),
        "type": "loan",
        "name": name or "Unknown",
        "nik": nik,
        "phone": phone,
        "category": loan.category.value,
        "category_label": _category_label(loan.category),
        "status": loan.status.value,
        "amount": loan.total_amount,
        "due_date": loan.due_date,
    }


def global_search(db: Session, query: str) -> List[Dict]:
    """
    Case-insensitive substring search.

    Three lookups, each capped at RESULT_LIMIT: loans by borrower fields,
    members by name/NIK/phone, and loans by their member's fields. A loan
    matched by both loan lookups is reported once.
    """
    query = (query or "").strip()
    if len(query) < MIN_QUERY_LENGTH:
        return []

    pattern = f"%{query.lower()}%"
    results: List[Dict] = []

    loans = db.query(Loan).options(joinedload(Loan.member)).filter(
        or_(
            Loan.borrower_name.ilike(pattern),
            Loan.borrower_nik.ilike(pattern),
            Loan.borrower_phone.ilike(pattern),
        )
    ).limit(RESULT_LIMIT).all()
    for loan in loans:
        results.append(_loan_result(loan, prefer_member=False))

    members = db.query(Member).filter(
        or_(
            Member.name.ilike(pattern),
            Member.nik.ilike(pattern),
            Member.phone.ilike(pattern),
        )
    ).limit(RESULT_LIMIT).all()
    for member in members:
        results.append({
            "id": str(member.id),
            "type": "member",
            "name": member.name,
            "nik": member.nik,
            "phone": member.phone,
        })

    seen_loans = {r["id"] for r in results if r["type"] == "loan"}
    member_loans = db.query(Loan).join(Loan.member).options(joinedload(Loan.member)).filter(
        or_(
            Member.name.ilike(pattern),
            Member.nik.ilike(pattern),
            Member.phone.ilike(pattern),
        )
    ).limit(RESULT_LIMIT).all()
    for loan in member_loans:
        if str(loan.id) in seen_loans:
            continue
        results.append(_loan_result(loan, prefer_member=True))

    return results
