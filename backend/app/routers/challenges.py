"""
Challenges router for Prep Academy LMS.
"""

from dataclasses import asdict
from typing import Dict, Any
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.user import User
from app.routers.auth import get_current_user
from app.schemas.gamification import ChallengeSubmissionCreate, QuizSubmission
from app.services.gamification import GamificationService


router = APIRouter()


@router.post("/{challenge_id}/submit", status_code=status.HTTP_201_CREATED)
async def submit_challenge(
    challenge_id: int,
    submission_data: ChallengeSubmissionCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    submission = GamificationService(db).submit_challenge(
        challenge_id,
        current_user.id,
        submission_data.content
    )
    return submission.to_dict()


@router.post("/{challenge_id}/quiz", status_code=status.HTTP_201_CREATED)
async def submit_challenge_quiz(
    challenge_id: int,
    quiz_data: QuizSubmission,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    result = GamificationService(db).submit_challenge_quiz(
        challenge_id,
        current_user.id,
        quiz_data.answers
    )
    return {"success": True, "submission": asdict(result)}
