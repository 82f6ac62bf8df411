from sqlalchemy import Column, String, Integer, DateTime, Enum as SQLEnum, Uuid, text, func
import uuid
from app.db.base import Base
import enum


class OrganizationMemberType(str, enum.Enum):
    """Which board an officer sits on."""
    PENGURUS = "pengurus"  # management board
    PENGAWAS = "pengawas"  # supervisory board


class OrganizationMember(Base):
    """Officer shown on the cooperative's organization structure."""
    __tablename__ = "organization_member"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(150), nullable=False)
    position = Column(String(100), nullable=False)  # e.g. Ketua, Sekretaris, Bendahara
    photo_url = Column(String(500), nullable=True)
    member_type = Column(SQLEnum(OrganizationMemberType, native_enum=False, values_callable=lambda obj: [e.value for e in obj]), nullable=False, index=True)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(DateTime, nullable=True, onupdate=func.now())
