from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from uuid import UUID
from app.models.organization import OrganizationMemberType


class OrganizationMemberCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    position: str = Field(..., min_length=1, max_length=100, description="Title on the board, e.g. Ketua")
    member_type: OrganizationMemberType
    photo_url: Optional[str] = Field(None, max_length=500)
    sort_order: Optional[int] = Field(None, ge=0, description="Defaults to the end of the board")


class OrganizationMemberUpdate(BaseModel):
    """Fields left out keep their current value."""
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    position: Optional[str] = Field(None, min_length=1, max_length=100)
    photo_url: Optional[str] = Field(None, max_length=500)
    sort_order: Optional[int] = Field(None, ge=0)


class OrganizationMemberResponse(BaseModel):
    id: UUID
    name: str
    position: str
    member_type: OrganizationMemberType
    photo_url: Optional[str] = None
    sort_order: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
