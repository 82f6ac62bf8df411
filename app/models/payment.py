from sqlalchemy import Column, String, ForeignKey, DateTime, Numeric, Enum as SQLEnum, Text, Uuid, text, func
from sqlalchemy.orm import relationship
import uuid
from app.db.base import Base
import enum


class PaymentMethod(str, enum.Enum):
    """How the payment was made."""
    MANUAL = "manual"
    HOSTED_GATEWAY = "hosted_gateway"


class PaymentStatus(str, enum.Enum):
    """Payment status. Only PAID counts toward settlement."""
    PENDING = "pending"
    PAID = "paid"
    EXPIRED = "expired"
    FAILED = "failed"


TERMINAL_PAYMENT_STATUSES = (PaymentStatus.PAID, PaymentStatus.EXPIRED, PaymentStatus.FAILED)


class Payment(Base):
    """Payment attempt or settlement against a loan."""
    __tablename__ = "payment"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    loan_id = Column(Uuid(as_uuid=True), ForeignKey("loan.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    method = Column(SQLEnum(PaymentMethod, native_enum=False, values_callable=lambda obj: [e.value for e in obj]), nullable=False)
    status = Column(SQLEnum(PaymentStatus, native_enum=False, values_callable=lambda obj: [e.value for e in obj]), default=PaymentStatus.PENDING, nullable=False, index=True)
    external_reference = Column(String(100), nullable=True, unique=True, index=True)  # our id sent to the gateway
    gateway_invoice_id = Column(String(100), nullable=True)
    invoice_url = Column(String(500), nullable=True)
    gateway_transaction_id = Column(String(100), nullable=True)
    gateway_payment_method = Column(String(50), nullable=True)  # e.g. "BANK_TRANSFER", "QRIS"
    idempotency_key = Column(String(100), nullable=True, unique=True, index=True)
    notes = Column(Text, nullable=True)
    paid_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(DateTime, nullable=True, onupdate=func.now())

    # Relationships
    loan = relationship("Loan", back_populates="payments")
