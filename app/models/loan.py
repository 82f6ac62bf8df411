from sqlalchemy import Column, String, ForeignKey, Date, DateTime, Numeric, Integer, Enum as SQLEnum, Text, Uuid, text, func
from sqlalchemy.orm import relationship
import uuid
from app.db.base import Base
import enum


class LoanCategory(str, enum.Enum):
    """What was lent."""
    UANG = "uang"                      # cash
    SEMBAKO = "sembako"                # staple goods
    ALAT_PERTANIAN = "alat_pertanian"  # farm tools
    OBAT = "obat"                      # medicine
    BARANG = "barang"                  # general goods
    ELEKTRONIK = "elektronik"
    KENDARAAN = "kendaraan"


CATEGORY_LABELS = {
    LoanCategory.UANG: "Pinjaman Uang",
    LoanCategory.SEMBAKO: "Sembako",
    LoanCategory.ALAT_PERTANIAN: "Alat Pertanian",
    LoanCategory.OBAT: "Obat-obatan",
    LoanCategory.BARANG: "Barang",
    LoanCategory.ELEKTRONIK: "Elektronik",
    LoanCategory.KENDARAAN: "Kendaraan",
}


class LoanStatus(str, enum.Enum):
    """Loan lifecycle status."""
    ACTIVE = "active"
    PAID = "paid"
    OVERDUE = "overdue"


class Loan(Base):
    """Loan issued to a member or to a non-member borrower."""
    __tablename__ = "loan"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    member_id = Column(Uuid(as_uuid=True), ForeignKey("member.id", ondelete="SET NULL"), nullable=True, index=True)
    borrower_name = Column(String(150), nullable=True, index=True)
    borrower_nik = Column(String(32), nullable=True, index=True)
    borrower_phone = Column(String(30), nullable=True)
    borrower_address = Column(Text, nullable=True)
    category = Column(SQLEnum(LoanCategory, native_enum=False, values_callable=lambda obj: [e.value for e in obj]), nullable=False, index=True)
    total_amount = Column(Numeric(15, 2), nullable=False)  # principal
    interest_rate = Column(Numeric(5, 2), nullable=False, default=0)  # percent, 1.5 == 1.5%
    due_date = Column(Date, nullable=False)
    status = Column(SQLEnum(LoanStatus, native_enum=False, values_callable=lambda obj: [e.value for e in obj]), default=LoanStatus.ACTIVE, nullable=False, index=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(DateTime, nullable=True, onupdate=func.now())

    # Relationships
    member = relationship("Member", back_populates="loans")
    items = relationship("LoanItem", back_populates="loan", cascade="all, delete-orphan")
    payments = relationship("Payment", back_populates="loan", cascade="all, delete-orphan")


class LoanItem(Base):
    """Line item of a goods loan (e.g. 10 kg rice)."""
    __tablename__ = "loan_item"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    loan_id = Column(Uuid(as_uuid=True), ForeignKey("loan.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(150), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    unit = Column(String(30), nullable=False, default="pcs")
    price = Column(Numeric(15, 2), nullable=False)  # per unit

    # Relationships
    loan = relationship("Loan", back_populates="items")
