from sqlalchemy import func
from sqlalchemy.orm import Session
from app.core.exceptions import NotFoundError, ValidationError
from app.models.organization import OrganizationMember, OrganizationMemberType
from app.services.member import _clean
from uuid import UUID
from typing import List, Optional

EDITABLE_FIELDS = {"name", "position", "photo_url", "sort_order"}


def list_organization_members(
    db: Session,
    member_type: Optional[OrganizationMemberType] = None
) -> List[OrganizationMember]:
    """Officers in board order, optionally for one board."""
    query = db.query(OrganizationMember)
    if member_type:
        query = query.filter(OrganizationMember.member_type == member_type)
    return query.order_by(
        OrganizationMember.sort_order.asc(), OrganizationMember.name.asc()
    ).all()


def get_organization_member(db: Session, officer_id: UUID) -> OrganizationMember:
    officer = db.query(OrganizationMember).filter(OrganizationMember.id == officer_id).first()
    if not officer:
        raise NotFoundError("Organization member not found")
    return officer


def _next_sort_order(db: Session, member_type: OrganizationMemberType) -> int:
    current = db.query(func.max(OrganizationMember.sort_order)).filter(
        OrganizationMember.member_type == member_type
    ).scalar()
    return (current or 0) + 1


def create_organization_member(
    db: Session,
    name: str,
    position: str,
    member_type: OrganizationMemberType,
    photo_url: str = None,
    sort_order: int = None
) -> OrganizationMember:
    """Add an officer. Without a sort_order they go to the end of their board."""
    name = _clean(name)
    position = _clean(position)
    if not name or not position:
        raise ValidationError("Name and position are required")
    if sort_order is not None and sort_order < 0:
        raise ValidationError("Sort order cannot be negative")

    officer = OrganizationMember(
        name=name,
        position=position,
        member_type=member_type,
        photo_url=_clean(photo_url),
        sort_order=sort_order if sort_order is not None else _next_sort_order(db, member_type),
    )
    db.add(officer)
    db.commit()
    db.refresh(officer)
    return officer


def update_organization_member(db: Session, officer_id: UUID, updates: dict) -> OrganizationMember:
    """
    Apply a partial update to an officer.

    Only name, position, photo_url and sort_order change; the board an
    officer sits on is fixed once added. A ``None`` photo_url clears the
    photo, a ``None`` anywhere else is ignored.
    """
    officer = get_organization_member(db, officer_id)

    changes = {k: v for k, v in updates.items() if k in EDITABLE_FIELDS}
    for key in ("name", "position"):
        if key in changes:
            if changes[key] is None:
                del changes[key]
                continue
            changes[key] = _clean(changes[key])
            if not changes[key]:
                raise ValidationError("Name and position are required")
    if "photo_url" in changes:
        changes["photo_url"] = _clean(changes["photo_url"])
    if "sort_order" in changes:
        if changes["sort_order"] is None:
            del changes["sort_order"]
        elif changes["sort_order"] < 0:
            raise ValidationError("Sort order cannot be negative")

    for key, value in changes.items():
        setattr(officer, key, value)
    db.commit()
    db.refresh(officer)
    return officer


def delete_organization_member(db: Session, officer_id: UUID) -> None:
    officer = get_organization_member(db, officer_id)
    db.delete(officer)
    db.commit()
