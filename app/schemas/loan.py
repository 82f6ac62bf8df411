from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID
from app.models.loan import LoanCategory, LoanStatus
from app.schemas.member import MemberSummary


class LoanItemInput(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    quantity: int = Field(1, gt=0)
    unit: str = Field("pcs", max_length=30)
    price: Decimal = Field(..., ge=0, description="Price per unit")


class LoanCreate(BaseModel):
    """Schema for issuing a loan. Either member_id or borrower_name is required."""
    member_id: Optional[UUID] = None
    borrower_name: Optional[str] = Field(None, max_length=150)
    borrower_nik: Optional[str] = Field(None, max_length=32)
    borrower_phone: Optional[str] = Field(None, max_length=30)
    borrower_address: Optional[str] = None
    category: LoanCategory
    total_amount: Optional[Decimal] = Field(None, gt=0, description="Principal; defaults to the sum of items")
    interest_rate: Optional[Decimal] = Field(None, ge=0, le=100, description="Flat interest percentage, e.g. 1.5")
    due_date: date
    notes: Optional[str] = None
    items: List[LoanItemInput] = Field(default_factory=list)


class LoanStatusUpdate(BaseModel):
    status: LoanStatus


class LoanItemResponse(BaseModel):
    id: UUID
    name: str
    quantity: int
    unit: str
    price: Decimal

    class Config:
        from_attributes = True


class LoanResponse(BaseModel):
    id: UUID
    member_id: Optional[UUID] = None
    member: Optional[MemberSummary] = None
    borrower_name: Optional[str] = None
    borrower_nik: Optional[str] = None
    borrower_phone: Optional[str] = None
    borrower_address: Optional[str] = None
    category: LoanCategory
    total_amount: Decimal
    interest_rate: Decimal
    due_date: date
    status: LoanStatus
    notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    items: List[LoanItemResponse] = Field(default_factory=list)

    class Config:
        from_attributes = True


class LoanDetailResponse(LoanResponse):
    """Loan with its running balance."""
    total_due: Decimal
    total_paid: Decimal
    outstanding: Decimal


class BorrowerResponse(BaseModel):
    id: str
    name: str
    nik: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    total_loans: int
    active_loans: int
    total_amount: Decimal
    last_loan_date: Optional[datetime] = None
