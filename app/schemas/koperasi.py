from pydantic import BaseModel, Field
from typing import Optional, Dict
from datetime import datetime
from decimal import Decimal
from uuid import UUID


class KoperasiSettingsResponse(BaseModel):
    id: UUID
    name: str
    address: str
    phone: Optional[str] = None
    email: Optional[str] = None
    default_interest_rate: Decimal
    notifications_enabled: bool
    due_date_reminder: bool
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class KoperasiSettingsUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    address: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[str] = Field(None, max_length=255)
    default_interest_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    notifications_enabled: Optional[bool] = None
    due_date_reminder: Optional[bool] = None


class DashboardStatsResponse(BaseModel):
    total_members: int
    total_loans: int
    total_loan_amount: Decimal
    active_loans: int
    overdue_loans: int
    paid_loans: int
    loans_by_category: Dict[str, Decimal]
    count_by_category: Dict[str, int]
