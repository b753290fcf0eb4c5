"""
Seasonal event and challenge models for Prep Academy LMS.

Defines Event, EventParticipation, Challenge and ChallengeSubmission.
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


class EventStatus(str, Enum):
    UPCOMING = "UPCOMING"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class EventType(str, Enum):
    SEASONAL_CHALLENGE = "SEASONAL_CHALLENGE"
    TIME_LIMITED_QUIZ = "TIME_LIMITED_QUIZ"
    TEAM_COMPETITION = "TEAM_COMPETITION"
    STUDY_MARATHON = "STUDY_MARATHON"


class ChallengeType(str, Enum):
    INDIVIDUAL = "INDIVIDUAL"
    TEAM = "TEAM"
    QUIZ = "QUIZ"
    PROJECT = "PROJECT"


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple-choice"
    TRUE_FALSE = "true-false"
    SHORT_ANSWER = "short-answer"


class Event(Base):
    """
    A time-boxed seasonal event with its own leaderboard.

    rewards is ``{"points": int, "badges": [...], "achievements": [...], "specialRewards": [...]}``.
    """
    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(30), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=EventStatus.UPCOMING.value, nullable=False)

    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    rules: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    rewards: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    max_participants: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_team_event: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    participations = relationship("EventParticipation", back_populates="event", cascade="all, delete-orphan")
    challenges = relationship("Challenge", back_populates="event")
    leaderboards = relationship("Leaderboard", back_populates="event")

    __table_args__ = (
        CheckConstraint("end_date > start_date", name="check_event_dates"),
        Index("idx_event_status_start", "status", "start_date"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, name='{self.name}', status='{self.status}')>"

    def to_dict(self, include_participants: bool = False) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "status": self.status,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "rules": self.rules,
            "rewards": self.rewards,
            "max_participants": self.max_participants,
            "is_team_event": self.is_team_event,
            "participant_count": len(self.participations),
        }
        if include_participants:
            data["participants"] = [
                {"id": p.user.id, "name": p.user.display_name}
                for p in self.participations
            ]
        return data


class EventParticipation(Base):
    __tablename__ = "event_participations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    event_id: Mapped[int] = mapped_column(Integer, ForeignKey("events.id"), nullable=False)
    team_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("teams.id"), nullable=True)
    score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    joined_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    user = relationship("User")
    event = relationship("Event", back_populates="participations")
    team = relationship("Team")

    __table_args__ = (
        UniqueConstraint("user_id", "event_id", name="uq_event_participation"),
        Index("idx_event_participation_score", "event_id", "score"),
    )

    def __repr__(self) -> str:
        return f"<EventParticipation(user_id={self.user_id}, event_id={self.event_id}, score={self.score})>"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "event_id": self.event_id,
            "team_id": self.team_id,
            "score": self.score,
            "joined_at": self.joined_at.isoformat() if self.joined_at else None,
        }


class Challenge(Base):
    """
    A challenge, optionally part of an event, optionally graded by a quiz.

    rules is ``{"timeLimit": minutes, "maxAttempts": n, "requiredScore": n, "teamSize": n}``;
    quiz is ``{"questions": [...], "totalPoints": n, "passingScore": n}``.
    """
    __tablename__ = "challenges"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(30), nullable=False)

    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    rules: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    rewards: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    event_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("events.id"), nullable=True)
    max_participants: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    has_quiz: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    quiz: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    event = relationship("Event", back_populates="challenges")
    submissions = relationship("ChallengeSubmission", back_populates="challenge", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("end_date > start_date", name="check_challenge_dates"),
        Index("idx_challenge_active_dates", "is_active", "start_date", "end_date"),
    )

    def __repr__(self) -> str:
        return f"<Challenge(id={self.id}, name='{self.name}', type='{self.type}')>"

    def is_open(self, now: datetime) -> bool:
        return self.is_active and self.start_date <= now <= self.end_date

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "rules": self.rules,
            "rewards": self.rewards,
            "event_id": self.event_id,
            "max_participants": self.max_participants,
            "is_active": self.is_active,
            "has_quiz": self.has_quiz,
            "quiz": self.quiz,
            "submission_count": len(self.submissions),
        }


class ChallengeSubmission(Base):
    __tablename__ = "challenge_submissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    challenge_id: Mapped[int] = mapped_column(Integer, ForeignKey("challenges.id"), nullable=False)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    content: Mapped[Any] = mapped_column(JSON, nullable=False)
    score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    submitted_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    challenge = relationship("Challenge", back_populates="submissions")
    user = relationship("User")

    __table_args__ = (
        Index("idx_challenge_submission_user", "challenge_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<ChallengeSubmission(challenge_id={self.challenge_id}, user_id={self.user_id}, score={self.score})>"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "challenge_id": self.challenge_id,
            "user_id": self.user_id,
            "content": self.content,
            "score": self.score,
            "submitted_at": self.submitted_at.isoformat() if self.submitted_at else None,
        }
