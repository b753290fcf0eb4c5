"""
Social and team models for Prep Academy LMS.

Defines FriendConnection, SocialInteraction, Team, TeamMembership and
TeamInvitation.
"""

from datetime import datetime
from typing import Optional, Dict, Any
from enum import Enum
from sqlalchemy import (
    Boolean, Integer, String, DateTime, Text, ForeignKey, UniqueConstraint,
    Index, CheckConstraint, JSON
)
from sqlalchemy.orm import relationship, Mapped, mapped_column

from app.core.database import Base, utcnow


class ConnectionStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"
    BLOCKED = "BLOCKED"


class InteractionType(str, Enum):
    ACHIEVEMENT_SHARE = "ACHIEVEMENT_SHARE"
    BADGE_SHARE = "BADGE_SHARE"
    INVITE_FRIEND = "INVITE_FRIEND"


class TeamRole(str, Enum):
    LEADER = "LEADER"
    CO_LEADER = "CO_LEADER"
    MEMBER = "MEMBER"


class InvitationStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"
    EXPIRED = "EXPIRED"


class FriendConnection(Base):
    """
    A friend request from user to friend; ACCEPTED connections are mutual.
    """
    __tablename__ = "friend_connections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    friend_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=ConnectionStatus.PENDING.value, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", foreign_keys=[user_id])
    friend = relationship("User", foreign_keys=[friend_id])

    __table_args__ = (
        UniqueConstraint("user_id", "friend_id", name="uq_friend_connection"),
        CheckConstraint("user_id != friend_id", name="check_no_self_friend"),
        Index("idx_friend_connection_friend", "friend_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<FriendConnection(user_id={self.user_id}, friend_id={self.friend_id}, status='{self.status}')>"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "friend_id": self.friend_id,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class SocialInteraction(Base):
    """
    A share or invite posted by a user, public when it has no receiver.
    """
    __tablename__ = "social_interactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    type: Mapped[str] = mapped_column(String(30), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    details: Mapped[Optional[Dict[str, Any]]] = mapped_column("metadata", JSON, nullable=True)

    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    receiver_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)
    is_public: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", foreign_keys=[user_id])
    receiver = relationship("User", foreign_keys=[receiver_id])

    __table_args__ = (
        Index("idx_social_interaction_user", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<SocialInteraction(id={self.id}, type='{self.type}', user_id={self.user_id})>"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "content": self.content,
            "metadata": self.details,
            "user_id": self.user_id,
            "receiver_id": self.receiver_id,
            "is_public": self.is_public,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class Team(Base):
    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    logo: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    max_members: Mapped[int] = mapped_column(Integer, default=10, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    memberships = relationship("TeamMembership", back_populates="team", cascade="all, delete-orphan")
    invitations = relationship("TeamInvitation", back_populates="team", cascade="all, delete-orphan")
    leaderboards = relationship("Leaderboard", back_populates="team")

    __table_args__ = (
        CheckConstraint("max_members > 0", name="check_team_size_positive"),
    )

    def __repr__(self) -> str:
        return f"<Team(id={self.id}, name='{self.name}')>"

    @property
    def is_full(self) -> bool:
        return len(self.memberships) >= self.max_members

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "logo": self.logo,
            "max_members": self.max_members,
            "member_count": len(self.memberships),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class TeamMembership(Base):
    __tablename__ = "team_memberships"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    team_id: Mapped[int] = mapped_column(Integer, ForeignKey("teams.id"), nullable=False)
    role: Mapped[str] = mapped_column(String(20), default=TeamRole.MEMBER.value, nullable=False)
    joined_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    user = relationship("User")
    team = relationship("Team", back_populates="memberships")

    __table_args__ = (
        UniqueConstraint("user_id", "team_id", name="uq_team_membership"),
    )

    def __repr__(self) -> str:
        return f"<TeamMembership(user_id={self.user_id}, team_id={self.team_id}, role='{self.role}')>"

    @property
    def can_invite(self) -> bool:
        return self.role in (TeamRole.LEADER.value, TeamRole.CO_LEADER.value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role,
            "joined_at": self.joined_at.isoformat() if self.joined_at else None,
            "user": self.user.to_summary() if self.user else None,
        }


class TeamInvitation(Base):
    __tablename__ = "team_invitations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    inviting_user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    invited_user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    team_id: Mapped[int] = mapped_column(Integer, ForeignKey("teams.id"), nullable=False)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default=InvitationStatus.PENDING.value, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    inviting_user = relationship("User", foreign_keys=[inviting_user_id])
    invited_user = relationship("User", foreign_keys=[invited_user_id])
    team = relationship("Team", back_populates="invitations")

    __table_args__ = (
        UniqueConstraint("invited_user_id", "team_id", name="uq_team_invitation"),
    )

    def __repr__(self) -> str:
        return f"<TeamInvitation(team_id={self.team_id}, invited_user_id={self.invited_user_id}, status='{self.status}')>"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "team_id": self.team_id,
            "inviting_user_id": self.inviting_user_id,
            "invited_user_id": self.invited_user_id,
            "message": self.message,
            "status": self.status,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
        }
