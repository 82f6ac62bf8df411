from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum, Uuid, text
import uuid
from app.db.base import Base
import enum


class UserRoleEnum(str, enum.Enum):
    """Operator role."""
    ADMIN = "admin"
    OPERATOR = "operator"


class User(Base):
    """Dashboard operator (cooperative staff)."""
    __tablename__ = "user"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), nullable=False, unique=True, index=True)
    full_name = Column(String(150), nullable=True)
    role = Column(SQLEnum(UserRoleEnum, native_enum=False, values_callable=lambda obj: [e.value for e in obj]), default=UserRoleEnum.OPERATOR, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
