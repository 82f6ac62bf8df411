"""
Create a dashboard operator and print a bearer token for it.
Usage: python scripts/create_operator.py --email admin@koperasi.id --role admin
"""
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from datetime import timedelta
from app.db.base import SessionLocal
from app.core.security import create_access_token
from app.models.user import User, UserRoleEnum


def create_operator(email: str, full_name: str = None, role: UserRoleEnum = UserRoleEnum.OPERATOR, expires_days: int = 30):
    """Create the operator if missing and issue a token for it."""
    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == email).first()
        if user:
            print(f"User with email {email} already exists, issuing a new token.")
        else:
            user = User(email=email, full_name=full_name, role=role, is_active=True)
            db.add(user)
            db.commit()
            db.refresh(user)
            print(f"✅ Operator created: {email} ({role.value})")

        token = create_access_token({"sub": str(user.id)}, expires_delta=timedelta(days=expires_days))
        print(f"\nBearer token (valid {expires_days} days):\n{token}")
    except Exception as e:
        db.rollback()
        print(f"❌ Error creating operator: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Create a dashboard operator")
    parser.add_argument("--email", required=True, help="Operator email")
    parser.add_argument("--full-name", default=None, help="Display name")
    parser.add_argument("--role", choices=[r.value for r in UserRoleEnum], default=UserRoleEnum.OPERATOR.value)
    parser.add_argument("--expires-days", type=int, default=30)

    args = parser.parse_args()
    create_operator(args.email, args.full_name, UserRoleEnum(args.role), args.expires_days)
