"""
Gamification models for Prep Academy LMS.

Defines UserPoints, PointTransaction, Badge, UserBadge, Achievement,
UserAchievement, Leaderboard and LeaderboardEntry.
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


class PointCategory(str, Enum):
    """Why points were awarded."""
    STREAK_BONUS = "STREAK_BONUS"
    COURSE_COMPLETION = "COURSE_COMPLETION"
    TEST_PERFORMANCE = "TEST_PERFORMANCE"
    STUDY_TIME = "STUDY_TIME"
    BADGE_EARNED = "BADGE_EARNED"
    ACHIEVEMENT_EARNED = "ACHIEVEMENT_EARNED"
    SOCIAL_INTERACTION = "SOCIAL_INTERACTION"
    TEAM_COMPETITION = "TEAM_COMPETITION"
    SEASONAL_EVENT = "SEASONAL_EVENT"
    CHALLENGE_COMPLETION = "CHALLENGE_COMPLETION"
    MANUAL_ADJUSTMENT = "MANUAL_ADJUSTMENT"


class BadgeCategory(str, Enum):
    COURSE_COMPLETION = "COURSE_COMPLETION"
    TEST_PERFORMANCE = "TEST_PERFORMANCE"
    STUDY_TIME = "STUDY_TIME"
    STREAK = "STREAK"
    SOCIAL = "SOCIAL"
    SPECIAL = "SPECIAL"


class AchievementCategory(str, Enum):
    ACADEMIC = "ACADEMIC"
    ENGAGEMENT = "ENGAGEMENT"
    MILESTONE = "MILESTONE"
    SOCIAL = "SOCIAL"
    SPECIAL = "SPECIAL"


class LeaderboardCategory(str, Enum):
    POINTS = "POINTS"
    COURSE_COMPLETION = "COURSE_COMPLETION"
    TEST_SCORES = "TEST_SCORES"
    STUDY_TIME = "STUDY_TIME"
    STREAK = "STREAK"
    TEAM = "TEAM"
    SEASONAL = "SEASONAL"
    SOCIAL = "SOCIAL"
    OVERALL = "OVERALL"


class TimeFrame(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    ALL_TIME = "ALL_TIME"
    SEASONAL = "SEASONAL"


class UserPoints(Base):
    """
    Running points, level, experience and login streak for a user.
    """
    __tablename__ = "user_points"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), unique=True, nullable=False)

    points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    level: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    experience: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Streak tracking
    streak: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    longest_streak: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="points")

    __table_args__ = (
        CheckConstraint("level >= 1", name="check_level_positive"),
        CheckConstraint("experience >= 0", name="check_experience_positive"),
        CheckConstraint("streak >= 0", name="check_streak_positive"),
        CheckConstraint("longest_streak >= streak", name="check_longest_streak"),
        Index("idx_user_points_points", "points"),
    )

    def __repr__(self) -> str:
        return f"<UserPoints(user_id={self.user_id}, points={self.points}, level={self.level})>"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "points": self.points,
            "level": self.level,
            "experience": self.experience,
            "streak": self.streak,
            "longest_streak": self.longest_streak,
            "last_login": self.last_login.isoformat() if self.last_login else None,
        }


class PointTransaction(Base):
    """
    Points history for users.
    """
    __tablename__ = "point_transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)

    points: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[str] = mapped_column(String(30), nullable=False)
    reason: Mapped[str] = mapped_column(String(255), nullable=False)
    # "metadata" is reserved on declarative classes
    details: Mapped[Optional[Dict[str, Any]]] = mapped_column("metadata", JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="point_transactions")

    __table_args__ = (
        CheckConstraint("points != 0", name="check_points_not_zero"),
        Index("idx_point_tx_user_created", "user_id", "created_at"),
        Index("idx_point_tx_user_category", "user_id", "category"),
    )

    def __repr__(self) -> str:
        return f"<PointTransaction(user_id={self.user_id}, points={self.points}, category='{self.category}')>"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "points": self.points,
            "category": self.category,
            "reason": self.reason,
            "metadata": self.details,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class Badge(Base):
    """
    A badge awarded automatically when its criteria are met.

    criteria is ``{"type": <metric>, "value": <threshold>, "condition": "gte"|"lte"|"eq"}``.
    """
    __tablename__ = "badges"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    icon: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    category: Mapped[str] = mapped_column(String(30), nullable=False)
    points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    criteria: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    awards = relationship("UserBadge", back_populates="badge", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("points >= 0", name="check_badge_points_positive"),
        Index("idx_badge_category_active", "category", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<Badge(id={self.id}, name='{self.name}', category='{self.category}')>"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "category": self.category,
            "points": self.points,
            "criteria": self.criteria,
            "is_active": self.is_active,
        }


class UserBadge(Base):
    __tablename__ = "user_badges"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    badge_id: Mapped[int] = mapped_column(Integer, ForeignKey("badges.id"), nullable=False)
    earned_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="badges")
    badge = relationship("Badge", back_populates="awards")

    __table_args__ = (
        UniqueConstraint("user_id", "badge_id", name="uq_user_badge"),
    )

    def __repr__(self) -> str:
        return f"<UserBadge(user_id={self.user_id}, badge_id={self.badge_id})>"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "earned_at": self.earned_at.isoformat() if self.earned_at else None,
            "badge": self.badge.to_dict() if self.badge else None,
        }


class Achievement(Base):
    """
    An achievement, evaluated with the same criteria shape as badges.
    """
    __tablename__ = "achievements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    icon: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    category: Mapped[str] = mapped_column(String(30), nullable=False)
    points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    criteria: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    awards = relationship("UserAchievement", back_populates="achievement", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("points >= 0", name="check_achievement_points_positive"),
        Index("idx_achievement_category_active", "category", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<Achievement(id={self.id}, name='{self.name}', category='{self.category}')>"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "category": self.category,
            "points": self.points,
            "criteria": self.criteria,
            "is_active": self.is_active,
        }


class UserAchievement(Base):
    __tablename__ = "user_achievements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    achievement_id: Mapped[int] = mapped_column(Integer, ForeignKey("achievements.id"), nullable=False)
    unlocked_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="achievements")
    achievement = relationship("Achievement", back_populates="awards")

    __table_args__ = (
        UniqueConstraint("user_id", "achievement_id", name="uq_user_achievement"),
    )

    def __repr__(self) -> str:
        return f"<UserAchievement(user_id={self.user_id}, achievement_id={self.achievement_id})>"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "unlocked_at": self.unlocked_at.isoformat() if self.unlocked_at else None,
            "achievement": self.achievement.to_dict() if self.achievement else None,
        }


class Leaderboard(Base):
    """
    A ranked board for one category and time frame, optionally bound to a
    team or a seasonal event.
    """
    __tablename__ = "leaderboards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(30), nullable=False)
    time_frame: Mapped[str] = mapped_column(String(20), default=TimeFrame.ALL_TIME.value, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_team: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    team_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("teams.id"), nullable=True)
    event_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("events.id"), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    entries = relationship(
        "LeaderboardEntry",
        back_populates="leaderboard",
        cascade="all, delete-orphan",
        order_by="LeaderboardEntry.rank"
    )
    team = relationship("Team", back_populates="leaderboards")
    event = relationship("Event", back_populates="leaderboards")

    __table_args__ = (
        Index("idx_leaderboard_category_frame", "category", "time_frame", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<Leaderboard(id={self.id}, category='{self.category}', time_frame='{self.time_frame}')>"


class LeaderboardEntry(Base):
    __tablename__ = "leaderboard_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    leaderboard_id: Mapped[int] = mapped_column(Integer, ForeignKey("leaderboards.id"), nullable=False)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)

    rank: Mapped[int] = mapped_column(Integer, nullable=False)
    score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    leaderboard = relationship("Leaderboard", back_populates="entries")
    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("user_id", "leaderboard_id", name="uq_user_leaderboard"),
        CheckConstraint("rank >= 1", name="check_rank_positive"),
        Index("idx_leaderboard_entry_rank", "leaderboard_id", "rank"),
    )

    def __repr__(self) -> str:
        return f"<LeaderboardEntry(leaderboard_id={self.leaderboard_id}, user_id={self.user_id}, rank={self.rank})>"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rank": self.rank,
            "score": self.score,
            "user": self.user.to_summary() if self.user else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
