from datetime import datetime, timedelta, timezone
import secrets
from typing import Dict, Optional, Tuple

import bcrypt
from jose import jwt

from gymledger.core.config import settings


def hash_password(plain_password: str) -> str:
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(plain_password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # In case the stored hash is invalid/corrupted
        return False


def create_access_token(
    *, subject: Dict, expires_minutes: Optional[int] = None
) -> str:
    if expires_minutes is None:
        expires_minutes = settings.access_token_expire_minutes

    to_encode = subject.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(
        to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm
    )
    return encoded_jwt


def create_reset_token(*, expires_hours: Optional[int] = None) -> Tuple[str, datetime]:
    """64 random bytes as 128 hex characters, and the expiry instant."""
    if expires_hours is None:
        expires_hours = settings.password_reset_token_hours
    expire = datetime.now(timezone.utc) + timedelta(hours=expires_hours)
    token = secrets.token_hex(64)
    return token, expire
