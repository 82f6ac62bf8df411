from decimal import Decimal
from sqlalchemy.orm import Session
from app.core.exceptions import ValidationError
from app.models.system import KoperasiSettings

NULLABLE_FIELDS = ("phone", "email")

EDITABLE_FIELDS = (
    "name",
    "address",
    "phone",
    "email",
    "default_interest_rate",
    "notifications_enabled",
    "due_date_reminder",
)


def get_koperasi_settings(db: Session) -> KoperasiSettings:
    """Return the settings row, creating it with defaults on first use."""
    settings_row = db.query(KoperasiSettings).first()
    if settings_row is None:
        settings_row = KoperasiSettings(
            name="Koperasi",
            address="",
            default_interest_rate=Decimal("0"),
            notifications_enabled=True,
            due_date_reminder=True,
        )
        db.add(settings_row)
        db.commit()
        db.refresh(settings_row)
    return settings_row


def update_koperasi_settings(db: Session, updates: dict) -> KoperasiSettings:
    """Apply a partial update. Unknown keys are ignored."""
    settings_row = get_koperasi_settings(db)

    rate = updates.get("default_interest_rate")
    if rate is not None and Decimal(str(rate)) < 0:
        raise ValidationError("Default interest rate cannot be negative")

    for key, value in updates.items():
        if key not in EDITABLE_FIELDS:
            continue
        if value is None and key not in NULLABLE_FIELDS:
            continue
        setattr(settings_row, key, value)

    db.commit()
    db.refresh(settings_row)
    return settings_row
