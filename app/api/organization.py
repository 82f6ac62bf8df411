from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.db.base import get_db
from app.core.audit import audit_operator
from app.core.dependencies import get_current_user
from app.core.exceptions import NotFoundError, ValidationError
from app.models.organization import OrganizationMemberType
from app.models.user import User
from app.schemas.organization import (
    OrganizationMemberCreate,
    OrganizationMemberResponse,
    OrganizationMemberUpdate,
)
from app.services import organization as organization_service
from typing import List, Optional
from uuid import UUID

router = APIRouter(prefix="/api/organization", tags=["organization"])


@router.get("", response_model=List[OrganizationMemberResponse])
def list_organization_members(
    member_type: Optional[OrganizationMemberType] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Pengurus and pengawas in board order."""
    return organization_service.list_organization_members(db, member_type=member_type)


@router.post("", response_model=OrganizationMemberResponse, status_code=201)
def create_organization_member(
    officer_in: OrganizationMemberCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add an officer to the organization structure."""
    try:
        officer = organization_service.create_organization_member(
            db=db,
            name=officer_in.name,
            position=officer_in.position,
            member_type=officer_in.member_type,
            photo_url=officer_in.photo_url,
            sort_order=officer_in.sort_order
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    audit_operator(current_user, "Add organization member", f"officer_id={officer.id} type={officer.member_type.value}")
    return officer


@router.get("/{officer_id}", response_model=OrganizationMemberResponse)
def get_organization_member(
    officer_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return organization_service.get_organization_member(db, officer_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.patch("/{officer_id}", response_model=OrganizationMemberResponse)
def update_organization_member(
    officer_id: UUID,
    officer_update: OrganizationMemberUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Change an officer's name, position, photo or place on the board."""
    updates = officer_update.model_dump(exclude_unset=True)
    try:
        officer = organization_service.update_organization_member(db, officer_id, updates)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    audit_operator(current_user, "Update organization member", f"officer_id={officer_id} fields={sorted(updates)}")
    return officer


@router.delete("/{officer_id}")
def delete_organization_member(
    officer_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        organization_service.delete_organization_member(db, officer_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    audit_operator(current_user, "Delete organization member", f"officer_id={officer_id}")
    return {"message": "Organization member deleted successfully"}
