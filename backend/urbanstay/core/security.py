# urbanstay/core/security.py

import re
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import jwt, JWTError
from passlib.context import CryptContext

from urbanstay.core.config import settings

# --------------------------------------
# Password hashing config
# --------------------------------------
# pbkdf2_sha256: no 72-byte input limit and no native bcrypt build needed
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# at least 8 chars with upper, lower, digit and one of @$!%*?&
PASSWORD_PATTERN = re.compile(r"^(?=.*[A-Z])(?=.*[a-z])(?=.*[0-9])(?=.*[@$!%*?&]).{8,}$")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def is_strong_password(password: str) -> bool:
    return bool(PASSWORD_PATTERN.match(password))


def generate_confirmation_token() -> str:
    """16 random bytes, hex encoded."""
    return secrets.token_hex(16)


def generate_otp() -> str:
    """Six random digits, zero padded."""
    return f"{secrets.randbelow(1_000_000):06d}"


# --------------------------------------
# Token creation helpers
# --------------------------------------

def _create_token(
    data: Dict[str, Any],
    expires_delta: timedelta,
    *,
    secret_key: str,
    token_type: str,
) -> str:
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    to_encode.update(
        {
            "iat": now,
            "exp": now + expires_delta,
            "type": token_type,
            # two tokens minted in the same second must still differ
            "jti": secrets.token_hex(8),
        }
    )
    return jwt.encode(to_encode, secret_key, algorithm=settings.JWT_ALGORITHM)


def create_access_token(data: Dict[str, Any]) -> str:
    expire = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return _create_token(
        data=data,
        expires_delta=expire,
        secret_key=settings.JWT_SECRET_KEY,
        token_type="access",
    )


def create_refresh_token(data: Dict[str, Any]) -> str:
    expire = timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    return _create_token(
        data=data,
        expires_delta=expire,
        secret_key=settings.JWT_REFRESH_SECRET_KEY,
        token_type="refresh",
    )


def create_token_pair(user) -> tuple[str, str]:
    data = {"user_id": user.id, "role": user.role}
    return create_access_token(data), create_refresh_token(data)


# --------------------------------------
# Token verification helpers
# --------------------------------------

def verify_access_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate an *access* token.
    Used by get_current_user.
    """
    payload = jwt.decode(
        token,
        settings.JWT_SECRET_KEY,
        algorithms=[settings.JWT_ALGORITHM],
    )

    if payload.get("type") != "access":
        raise JWTError("Invalid token type")

    if "user_id" not in payload:
        raise JWTError("Missing user_id in token")

    return payload


def verify_refresh_token(token: str) -> Dict[str, Any]:
    """
    Decode a refresh token. Caller still has to check it is not revoked.
    """
    payload = jwt.decode(
        token,
        settings.JWT_REFRESH_SECRET_KEY,
        algorithms=[settings.JWT_ALGORITHM],
    )

    if payload.get("type") != "refresh":
        raise JWTError("Invalid token type")

    if "user_id" not in payload:
        raise JWTError("Missing user_id in token")

    return payload
