from sqlalchemy import Column, String, Boolean, DateTime, Numeric, Text, Uuid, text, func
import uuid
from app.db.base import Base


class KoperasiSettings(Base):
    """Cooperative profile and defaults (single row)."""
    __tablename__ = "koperasi_settings"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(150), nullable=False, default="Koperasi")
    address = Column(Text, nullable=False, default="")
    phone = Column(String(30), nullable=True)
    email = Column(String(255), nullable=True)
    default_interest_rate = Column(Numeric(5, 2), nullable=False, default=0)
    notifications_enabled = Column(Boolean, nullable=False, default=True)
    due_date_reminder = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(DateTime, nullable=True, onupdate=func.now())
