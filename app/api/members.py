from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.db.base import get_db
from app.core.audit import audit_operator
from app.core.dependencies import get_current_user
from app.core.exceptions import DuplicateError, NotFoundError, ValidationError
from app.models.user import User
from app.schemas.member import MemberInput, MemberResponse
from app.services import member as member_service
from typing import List
from uuid import UUID

router = APIRouter(prefix="/api/members", tags=["members"])


@router.get("", response_model=List[MemberResponse])
def list_members(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List all members, newest first."""
    return member_service.list_members(db)


@router.post("", response_model=MemberResponse, status_code=201)
def create_member(
    member_in: MemberInput,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Register a new member."""
    try:
        member = member_service.create_member(
            db=db,
            name=member_in.name,
            nik=member_in.nik,
            address=member_in.address,
            phone=member_in.phone
        )
    except DuplicateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    audit_operator(current_user, "Create member", f"member_id={member.id}")
    return member


@router.get("/{member_id}", response_model=MemberResponse)
def get_member(
    member_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get one member."""
    try:
        return member_service.get_member(db, member_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/{member_id}", response_model=MemberResponse)
def update_member(
    member_id: UUID,
    member_in: MemberInput,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Replace a member's details."""
    try:
        member = member_service.update_member(
            db=db,
            member_id=member_id,
            name=member_in.name,
            nik=member_in.nik,
            address=member_in.address,
            phone=member_in.phone
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DuplicateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    audit_operator(current_user, "Update member", f"member_id={member_id}")
    return member


@router.delete("/{member_id}")
def delete_member(
    member_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a member. Their loans are kept under the member's name."""
    try:
        member_service.delete_member(db, member_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    audit_operator(current_user, "Delete member", f"member_id={member_id}")
    return {"message": "Member deleted successfully"}
