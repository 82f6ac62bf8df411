from app.db.base import Base

# Import all models so Alembic can detect them
from app.models.user import User
from app.models.member import Member
from app.models.loan import Loan, LoanItem
from app.models.payment import Payment
from app.models.system import KoperasiSettings
from app.models.organization import OrganizationMember

__all__ = [
    "Base",
    "User",
    "Member",
    "Loan",
    "LoanItem",
    "Payment",
    "KoperasiSettings",
    "OrganizationMember",
]
