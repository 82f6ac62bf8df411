from pydantic_settings import BaseSettings
from typing import Optional
from pathlib import Path

# Find .env file - check app/ directory first, then project root
BASE_DIR = Path(__file__).resolve().parent.parent.parent
APP_ENV = BASE_DIR / "app" / ".env"
ROOT_ENV = BASE_DIR / ".env"

# Use app/.env if it exists, otherwise try root .env
env_file = str(APP_ENV) if APP_ENV.exists() else (str(ROOT_ENV) if ROOT_ENV.exists() else ".env")


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str

    # JWT (operator access tokens)
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 30

    # Hosted invoice gateway (Xendit)
    XENDIT_API_URL: str = "https://api.xendit.co"
    XENDIT_SECRET_KEY: Optional[str] = None
    XENDIT_CALLBACK_TOKEN: Optional[str] = None
    INVOICE_CURRENCY: str = "IDR"
    INVOICE_DURATION_SECONDS: int = 86400  # 24 hours
    INVOICE_SUCCESS_REDIRECT_URL: Optional[str] = None
    GATEWAY_TIMEOUT_SECONDS: float = 10.0

    # SMTP
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: Optional[int] = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    FROM_EMAIL: Optional[str] = None
    REPLY_TO_EMAIL: Optional[str] = None

    # Scheduler
    ENABLE_SCHEDULER: bool = True
    SCHEDULER_INTERVAL_MINUTES: int = 60

    # Application
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = env_file
        case_sensitive = True


settings = Settings()

# Derived paths
LOGS_DIR = BASE_DIR / "logs"
