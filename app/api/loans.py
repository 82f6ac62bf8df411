from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.db.base import get_db
from app.core.audit import audit_operator
from app.core.dependencies import get_current_user
from app.core.exceptions import NotFoundError, ValidationError
from app.models.loan import Loan, LoanCategory, LoanStatus
from app.models.user import User
from app.schemas.loan import (
    BorrowerResponse,
    LoanCreate,
    LoanDetailResponse,
    LoanResponse,
    LoanStatusUpdate,
)
from app.services import loan as loan_service
from typing import List, Optional
from uuid import UUID

router = APIRouter(prefix="/api/loans", tags=["loans"])


def _loan_detail(db: Session, loan: Loan) -> LoanDetailResponse:
    base = LoanResponse.model_validate(loan).model_dump()
    return LoanDetailResponse(**base, **loan_service.loan_balance(db, loan))


@router.get("", response_model=List[LoanResponse])
def list_loans(
    category: Optional[LoanCategory] = None,
    status: Optional[LoanStatus] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List loans, newest first, optionally filtered by category and status."""
    return loan_service.list_loans(db, category=category, status=status)


@router.post("", response_model=LoanDetailResponse, status_code=201)
def create_loan(
    loan_in: LoanCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Issue a new loan with its line items."""
    try:
        loan = loan_service.create_loan(
            db=db,
            category=loan_in.category,
            due_date=loan_in.due_date,
            items=[item.model_dump() for item in loan_in.items],
            total_amount=loan_in.total_amount,
            interest_rate=loan_in.interest_rate,
            member_id=loan_in.member_id,
            borrower_name=loan_in.borrower_name,
            borrower_nik=loan_in.borrower_nik,
            borrower_phone=loan_in.borrower_phone,
            borrower_address=loan_in.borrower_address,
            notes=loan_in.notes,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    audit_operator(current_user, "Issue loan", f"loan_id={loan.id} amount={loan.total_amount}")
    return _loan_detail(db, loan)


@router.get("/history", response_model=List[LoanResponse])
def get_loan_history(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Paid loans, most recently settled first."""
    return loan_service.list_loan_history(db)


@router.get("/borrowers", response_model=List[BorrowerResponse])
def get_borrowers(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Non-member borrowers with their loan totals."""
    return loan_service.list_borrowers(db)


@router.get("/due-soon", response_model=List[LoanResponse])
def get_due_soon_loans(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Active loans due within the next week, soonest first."""
    return loan_service.list_due_soon_loans(db)


@router.get("/{loan_id}", response_model=LoanDetailResponse)
def get_loan(
    loan_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a loan with items and balance (receipt data)."""
    try:
        loan = loan_service.get_loan(db, loan_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _loan_detail(db, loan)


@router.patch("/{loan_id}/status", response_model=LoanDetailResponse)
def override_loan_status(
    loan_id: UUID,
    status_in: LoanStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Manually set a loan's status (e.g. reopen a loan marked paid by mistake)."""
    try:
        loan = loan_service.update_loan_status(db, loan_id, status_in.status)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    audit_operator(current_user, "Override loan status", f"loan_id={loan_id} status={status_in.status.value}")
    return _loan_detail(db, loan)


@router.delete("/{loan_id}")
def delete_loan(
    loan_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a loan together with its items and payments."""
    try:
        loan_service.delete_loan(db, loan_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    audit_operator(current_user, "Delete loan", f"loan_id={loan_id}")
    return {"message": "Loan deleted successfully"}
