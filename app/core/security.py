import hmac
from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from app.core.config import settings


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt


def decode_access_token(token: str) -> Optional[dict]:
    """Decode and verify a JWT token."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return payload
    except JWTError:
        return None


def verify_callback_token(received: Optional[str]) -> bool:
    """
    Check the gateway's x-callback-token header against the configured secret.

    Returns False when no token is configured, so an unconfigured deployment
    never trusts inbound payment notifications.
    """
    expected = settings.XENDIT_CALLBACK_TOKEN
    if not expected or not received:
        return False
    return hmac.compare_digest(received.encode("utf-8"), expected.encode("utf-8"))
