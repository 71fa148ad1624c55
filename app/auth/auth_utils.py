import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import jwt, JWTError

from app.config.settings import Settings
from app.constants import BCRYPT_MAX_BYTES, OTP_LENGTH
from app.enums import TokenType


def hash_password(password: str) -> str:
    secret = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    return bcrypt.hashpw(secret, bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    secret = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    try:
        return bcrypt.checkpw(secret, hashed_password.encode("utf-8"))
    except ValueError:
        return False


def generate_otp() -> str:
    """
    6-digit numeric one-time passcode from a CSPRNG.
    """
    return f"{secrets.randbelow(10 ** OTP_LENGTH):0{OTP_LENGTH}d}"


def otp_matches(expected: Optional[str], provided: str) -> bool:
    if not expected:
        return False
    return hmac.compare_digest(expected.encode(), provided.encode())


def _encode(user_id: int, token_type: TokenType, expires_delta: timedelta, key: str, algorithm: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "user_id": user_id,
        "type": token_type.value,
        "iat": now,
        "exp": now + expires_delta,
        # Unique per token so a rotated pair never repeats the previous one
        "jti": secrets.token_hex(8),
    }
    return jwt.encode(payload, key, algorithm=algorithm)


def create_access_token(user_id: int, settings: Settings) -> str:
    return _encode(
        user_id,
        TokenType.ACCESS,
        timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        settings.SECRET_KEY,
        settings.ALGORITHM,
    )


def create_refresh_token(user_id: int, settings: Settings) -> str:
    return _encode(
        user_id,
        TokenType.REFRESH,
        timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        settings.REFRESH_SECRET_KEY,
        settings.ALGORITHM,
    )


def decode_token(token: str, token_type: TokenType, settings: Settings) -> Optional[int]:
    """
    Returns the user id carried by a valid token of the given type,
    or None when the token is malformed, expired, or of another type.
    """
    key = settings.SECRET_KEY if token_type == TokenType.ACCESS else settings.REFRESH_SECRET_KEY
    try:
        payload = jwt.decode(token, key, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None

    if payload.get("type") != token_type.value:
        return None
    user_id = payload.get("user_id")
    if not isinstance(user_id, int):
        return None
    return user_id
