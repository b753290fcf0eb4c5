"""
Domain errors raised by the service layer.

Services raise these instead of HTTPException so they can run outside a
request; app.main maps each class to a status code.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(eq=False)
class GamificationError(Exception):
    """Base error for gamification operations."""

    message: str
    details: Optional[Dict[str, Any]] = field(default=None)

    status_code = 400
    title = "Bad Request"

    def __str__(self) -> str:
        return self.message


@dataclass(eq=False)
class ValidationError(GamificationError):
    """Input or state does not allow the operation (inactive event, full team...)."""


@dataclass(eq=False)
class NotFoundError(GamificationError):
    status_code = 404
    title = "Not Found"


@dataclass(eq=False)
class PermissionDeniedError(GamificationError):
    status_code = 403
    title = "Forbidden"


@dataclass(eq=False)
class ConflictError(GamificationError):
    status_code = 409
    title = "Conflict"
