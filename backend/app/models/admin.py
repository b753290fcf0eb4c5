"""
Audit trail for the admin API.

Every admin write (catalogue edits, manual point awards, event and challenge
management, leaderboard recomputes) adds one AdminLog row. Catalogue edits
commit the row together with the change; service-backed actions commit the
change first and the row right after it.
"""

from datetime import datetime
from typing import Optional, Dict, Any
from enum import Enum
from sqlalchemy import Integer, String, DateTime, ForeignKey, Index, JSON
from sqlalchemy.orm import relationship, Mapped, mapped_column

from app.core.database import Base, utcnow


class AdminAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    ACTIVATE = "ACTIVATE"
    DEACTIVATE = "DEACTIVATE"
    AWARD_POINTS = "AWARD_POINTS"
    RECOMPUTE = "RECOMPUTE"


class AdminLog(Base):
    __tablename__ = "admin_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)

    action: Mapped[str] = mapped_column(String(30), nullable=False)
    # badge, achievement, challenge, event, leaderboard or user
    entity_type: Mapped[str] = mapped_column(String(30), nullable=False)
    entity_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    details: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)

    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="admin_logs")

    __table_args__ = (
        Index("idx_admin_log_entity", "entity_type", "entity_id"),
        Index("idx_admin_log_action_created", "action", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<AdminLog(id={self.id}, action='{self.action}', entity_type='{self.entity_type}')>"

    @classmethod
    def for_request(
        cls,
        request,
        admin_id: int,
        action: AdminAction,
        entity_type: str,
        entity_id: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> "AdminLog":
        """Build a log entry stamped with the calling client's address and user agent."""
        return cls(
            user_id=admin_id,
            action=AdminAction(action).value,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details or {},
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent")
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "action": self.action,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "details": self.details,
            "ip_address": self.ip_address,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
