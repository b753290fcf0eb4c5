"""
Bearer token and password helpers for Prep Academy LMS.

Tokens are issued by the platform's identity layer and carry the username
in ``sub``; this backend decodes them to resolve the caller. Password hashes
are only produced for the bootstrap admin account.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from jose import JWTError, jwt
from passlib.context import CryptContext

from .config import settings


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    username: str,
    expires_delta: Optional[timedelta] = None,
    **claims: Any
) -> str:
    """
    Sign a token for ``username``.

    Extra keyword arguments become additional claims. Used by tests and
    local tooling; production tokens come from the identity layer.
    """
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    payload = dict(claims)
    payload.update({"sub": username, "iat": issued_at, "exp": issued_at + lifetime})
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Return the token's claims, or None if the signature or expiry check fails."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
