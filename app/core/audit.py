from datetime import datetime
from app.core.config import LOGS_DIR


def write_audit_log(user_name: str, user_role: str, action: str, details: str = ""):
    """Append one line to this month's operator audit file."""
    LOGS_DIR.mkdir(parents=True, exist_ok=True)
    month_str = datetime.now().strftime("%Y_%m")
    log_file = LOGS_DIR / f"audit_{month_str}.log"
    ts = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    with open(log_file, "a", encoding="utf-8") as f:
        f.write(f"{ts} | {user_role} | {user_name} | {action} | {details}\n")


def audit_operator(user, action: str, details: str = ""):
    """Audit an action taken by a dashboard operator."""
    user_name = user.full_name or user.email
    user_role = user.role.value if user.role else "operator"
    write_audit_log(user_name=user_name, user_role=user_role, action=action, details=details)
