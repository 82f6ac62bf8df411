from sqlalchemy import Column, String, Date, DateTime, Text, Uuid, text, func
from sqlalchemy.orm import relationship
import uuid
from datetime import date
from app.db.base import Base


class Member(Base):
    """Registered cooperative member (anggota)."""
    __tablename__ = "member"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(150), nullable=False, index=True)
    nik = Column(String(32), nullable=False, unique=True, index=True)  # National ID number
    address = Column(Text, nullable=True)
    phone = Column(String(30), nullable=True)
    join_date = Column(Date, nullable=False, default=date.today)
    created_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(DateTime, nullable=True, onupdate=func.now())

    # Relationships
    loans = relationship("Loan", back_populates="member")
