"""
Request schemas for the admin API.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Literal
from pydantic import BaseModel, Field, field_validator, model_validator

from app.core.database import as_naive_utc
from app.models.gamification import BadgeCategory, AchievementCategory, PointCategory
from app.models.events import EventType, ChallengeType, QuestionType


class Criteria(BaseModel):
    type: str
    value: float
    condition: Literal["gte", "lte", "eq"] = "gte"


class BadgeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str
    icon: Optional[str] = Field(None, max_length=50)
    category: BadgeCategory
    points: int = Field(0, ge=0)
    criteria: Optional[Criteria] = None


class AchievementCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str
    icon: Optional[str] = Field(None, max_length=50)
    category: AchievementCategory
    points: int = Field(0, ge=0)
    criteria: Optional[Criteria] = None


class PointAward(BaseModel):
    user_id: int
    points: int
    reason: str = Field(..., min_length=1, max_length=255)
    category: PointCategory = PointCategory.MANUAL_ADJUSTMENT

    @model_validator(mode="after")
    def check_points(self) -> "PointAward":
        if self.points == 0:
            raise ValueError("points must be non-zero")
        return self


class ToggleActive(BaseModel):
    is_active: bool


class QuizQuestion(BaseModel):
    id: str
    question: str
    type: QuestionType
    options: List[str] = []
    correctAnswer: Any


class Quiz(BaseModel):
    questions: List[QuizQuestion] = []
    totalPoints: int = Field(100, ge=0)
    passingScore: int = Field(0, ge=0)


class EventCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str
    type: EventType
    start_date: datetime
    end_date: datetime
    rules: Optional[Dict[str, Any]] = None
    rewards: Optional[Dict[str, Any]] = None
    max_participants: Optional[int] = Field(None, ge=1)
    is_team_event: bool = False

    @field_validator("start_date", "end_date")
    @classmethod
    def to_naive_utc(cls, v: datetime) -> datetime:
        return as_naive_utc(v)


class ChallengeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str
    type: ChallengeType
    start_date: datetime
    end_date: datetime
    rules: Optional[Dict[str, Any]] = None
    rewards: Optional[Dict[str, Any]] = None
    event_id: Optional[int] = None
    max_participants: Optional[int] = Field(None, ge=1)
    has_quiz: bool = False
    quiz: Optional[Quiz] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def to_naive_utc(cls, v: datetime) -> datetime:
        return as_naive_utc(v)

    @model_validator(mode="after")
    def check_quiz(self) -> "ChallengeCreate":
        if self.has_quiz and self.quiz is None:
            raise ValueError("quiz is required when has_quiz is set")
        return self
