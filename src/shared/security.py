"""Password hashing and JWT token helpers."""

from datetime import timedelta
from typing import Any

import bcrypt
from jose import JWTError, jwt
from protean.exceptions import ValidationError

from shared.clock import utcnow
from shared.settings import get_settings

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"

# bcrypt only looks at the first 72 bytes and rejects anything longer
MAX_PASSWORD_BYTES = 72


def password_too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > MAX_PASSWORD_BYTES


def hash_password(password: str) -> str:
    if password_too_long(password):
        raise ValidationError({"password": [f"Password must be at most {MAX_PASSWORD_BYTES} bytes long"]})
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    if not hashed_password or password_too_long(plain_password):
        return False
    return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))


def _encode(claims: dict[str, Any], token_type: str, expires_delta: timedelta) -> str:
    settings = get_settings()
    now = utcnow()
    payload = {**claims, "token_type": token_type, "iat": now, "exp": now + expires_delta}
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(subject: str, role: str, expires_delta: timedelta | None = None) -> str:
    settings = get_settings()
    return _encode(
        {"sub": subject, "role": role},
        ACCESS_TOKEN,
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_refresh_token(subject: str, role: str) -> str:
    settings = get_settings()
    return _encode({"sub": subject, "role": role}, REFRESH_TOKEN, timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS))


def create_token_pair(subject: str, role: str) -> dict[str, str]:
    return {
        "access_token": create_access_token(subject, role),
        "refresh_token": create_refresh_token(subject, role),
        "token_type": "bearer",
    }


def decode_token(token: str, expected_type: str = ACCESS_TOKEN) -> dict[str, Any]:
    """Decode and verify a token, raising ValidationError when it is unusable."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as exc:
        raise ValidationError({"token": [f"Invalid token: {exc}"]}) from exc

    if payload.get("token_type") != expected_type:
        raise ValidationError({"token": [f"Token type must be '{expected_type}'"]})
    if not payload.get("sub"):
        raise ValidationError({"token": ["Token has no subject"]})
    return payload
