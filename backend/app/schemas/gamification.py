"""
Request schemas for the gamification API.
"""

from typing import Any, Dict, Optional, Literal
from pydantic import BaseModel, Field, EmailStr, model_validator

from app.models.progress import ProgressStatus


class MaterialProgressUpdate(BaseModel):
    time_spent: int = Field(0, ge=0, description="Seconds spent since the last update")
    status: Optional[ProgressStatus] = None


class TestSubmissionCreate(BaseModel):
    __test__ = False

    score: int = Field(..., ge=0, le=100)


class FriendRequestCreate(BaseModel):
    friend_email: EmailStr
    message: Optional[str] = Field(None, max_length=500)


class ShareRequest(BaseModel):
    """Share an earned badge or achievement; exactly one id must be set."""
    type: Literal["achievement", "badge"]
    user_achievement_id: Optional[int] = None
    user_badge_id: Optional[int] = None
    message: Optional[str] = Field(None, max_length=500)
    receiver_id: Optional[int] = None

    @model_validator(mode="after")
    def check_target(self) -> "ShareRequest":
        if self.type == "achievement" and self.user_achievement_id is None:
            raise ValueError("user_achievement_id is required to share an achievement")
        if self.type == "badge" and self.user_badge_id is None:
            raise ValueError("user_badge_id is required to share a badge")
        return self


class TeamCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    logo: Optional[str] = Field(None, max_length=500)
    max_members: Optional[int] = Field(None, ge=1, le=100)


class TeamInvitationCreate(BaseModel):
    email: EmailStr
    message: Optional[str] = Field(None, max_length=500)


class EventJoin(BaseModel):
    team_id: Optional[int] = None


class ChallengeSubmissionCreate(BaseModel):
    content: Any


class QuizSubmission(BaseModel):
    answers: Dict[str, Any]
