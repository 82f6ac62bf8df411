from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.db.base import get_db
from app.core.audit import audit_operator
from app.core.dependencies import require_admin, get_current_user
from app.core.exceptions import ValidationError
from app.models.user import User
from app.schemas.koperasi import KoperasiSettingsResponse, KoperasiSettingsUpdate
from app.services.koperasi import get_koperasi_settings, update_koperasi_settings

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("", response_model=KoperasiSettingsResponse)
def get_settings(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get the cooperative's profile and defaults."""
    return get_koperasi_settings(db)


@router.put("", response_model=KoperasiSettingsResponse)
def update_settings(
    settings_update: KoperasiSettingsUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Update the cooperative's profile and defaults (Admin only)."""
    updates = settings_update.model_dump(exclude_unset=True)
    try:
        koperasi = update_koperasi_settings(db, updates)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    audit_operator(current_user, "Update settings", ", ".join(sorted(updates)))
    return koperasi
