from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime
from uuid import UUID


class MemberInput(BaseModel):
    """Schema for creating or replacing a member."""
    name: str = Field(..., min_length=1, max_length=150, description="Full name")
    nik: str = Field(..., min_length=1, max_length=32, description="National ID number (NIK)")
    address: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=30)


class MemberResponse(BaseModel):
    id: UUID
    name: str
    nik: str
    address: Optional[str] = None
    phone: Optional[str] = None
    join_date: date
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MemberSummary(BaseModel):
    id: UUID
    name: str

    class Config:
        from_attributes = True
