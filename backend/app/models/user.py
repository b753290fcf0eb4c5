"""
User model for Prep Academy LMS.

Defines the User table with authentication fields, role and profile
information. Points, levels and streaks live in UserPoints.
"""

from datetime import datetime
from typing import Optional
from enum import Enum
from sqlalchemy import (
    Boolean, Integer, String, DateTime, Index, CheckConstraint
)
from sqlalchemy.orm import relationship, Mapped, mapped_column

from app.core.database import Base, utcnow


class UserRole(str, Enum):
    """Platform roles."""
    STUDENT = "STUDENT"
    TUTOR = "TUTOR"
    ADMIN = "ADMIN"
    OWNER = "OWNER"


class User(Base):
    """
    Platform account. Students earn points; ADMIN and OWNER accounts reach the admin API.
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # Identity
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False
    )
    username: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        index=True,
        nullable=False
    )
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(String(20), default=UserRole.STUDENT.value, nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Relationships
    points = relationship("UserPoints", back_populates="user", uselist=False, cascade="all, delete-orphan")
    point_transactions = relationship("PointTransaction", back_populates="user", cascade="all, delete-orphan")
    badges = relationship("UserBadge", back_populates="user", cascade="all, delete-orphan")
    achievements = relationship("UserAchievement", back_populates="user", cascade="all, delete-orphan")
    enrollments = relationship("CourseEnrollment", back_populates="student", cascade="all, delete-orphan")
    admin_logs = relationship("AdminLog", back_populates="user", cascade="all, delete-orphan")

    # Table constraints
    __table_args__ = (
        CheckConstraint(
            "role IN ('STUDENT', 'TUTOR', 'ADMIN', 'OWNER')",
            name="check_user_role"
        ),
        Index("idx_user_role_active", "role", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"

    @property
    def display_name(self) -> str:
        return self.name or self.username

    @property
    def is_admin(self) -> bool:
        return self.role in (UserRole.ADMIN.value, UserRole.OWNER.value)

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT.value

    def to_summary(self) -> dict:
        """Short public representation used in leaderboards and member lists."""
        return {
            "id": self.id,
            "name": self.display_name,
            "email": self.email
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "last_login_at": self.last_login_at.isoformat() if self.last_login_at else None,
        }
