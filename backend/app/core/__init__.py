"""
Core module for Prep Academy LMS backend.

This module contains core functionality including:
- Configuration management
- Database connections
- Security utilities (JWT, password hashing)
- Domain errors
"""

from .config import settings
from .database import get_db, engine, SessionLocal, utcnow
from .security import (
    create_access_token,
    verify_password,
    get_password_hash,
    decode_access_token
)
from .exceptions import (
    GamificationError,
    ValidationError,
    NotFoundError,
    PermissionDeniedError,
    ConflictError
)

__all__ = [
    "settings",
    "get_db",
    "engine",
    "SessionLocal",
    "utcnow",
    "create_access_token",
    "verify_password",
    "get_password_hash",
    "decode_access_token",
    "GamificationError",
    "ValidationError",
    "NotFoundError",
    "PermissionDeniedError",
    "ConflictError"
]
