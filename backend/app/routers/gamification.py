"""
Gamification router for Prep Academy LMS.

Profile, leaderboards and the activity hooks (daily login, material
progress, test submissions) that feed the points engine.
"""

from typing import Dict, Any
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.user import User
from app.models.gamification import LeaderboardCategory, TimeFrame
from app.routers.auth import get_current_user
from app.schemas.gamification import MaterialProgressUpdate, TestSubmissionCreate
from app.services.gamification import GamificationService


router = APIRouter()

PROFILE_LEADERBOARDS = (
    LeaderboardCategory.POINTS,
    LeaderboardCategory.COURSE_COMPLETION,
    LeaderboardCategory.TEST_SCORES,
    LeaderboardCategory.STUDY_TIME,
    LeaderboardCategory.STREAK,
)


@router.get("/profile")
async def get_profile(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Get the user's points, badges, achievements, recent transactions and
    the all-time leaderboards.
    """
    service = GamificationService(db)
    profile = service.get_user_profile(current_user.id)

    profile["leaderboards"] = {
        category.value.lower(): service.get_leaderboard(category.value, TimeFrame.ALL_TIME.value, limit=10)
        for category in PROFILE_LEADERBOARDS
    }
    return profile


@router.get("/leaderboard")
async def get_leaderboard(
    category: LeaderboardCategory = LeaderboardCategory.POINTS,
    time_frame: TimeFrame = TimeFrame.ALL_TIME,
    limit: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    service = GamificationService(db)
    return {
        "category": category.value,
        "time_frame": time_frame.value,
        "entries": service.get_leaderboard(category.value, time_frame.value, limit)
    }


@router.post("/login")
async def record_daily_login(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Record today's login and update the streak.
    """
    result = GamificationService(db).check_daily_login(current_user.id)
    return {"streak": result.streak, "bonus": result.bonus}


@router.post("/materials/{material_id}/progress")
async def update_material_progress(
    material_id: int,
    progress_data: MaterialProgressUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    progress, study_points, course_completed = GamificationService(db).record_material_progress(
        current_user.id,
        material_id,
        status=progress_data.status.value if progress_data.status else None,
        time_spent=progress_data.time_spent
    )
    return {
        "material_id": material_id,
        "status": progress.status,
        "time_spent": progress.time_spent,
        "study_points_awarded": study_points,
        "course_completed": course_completed
    }


@router.post("/tests/{test_id}/submissions", status_code=status.HTTP_201_CREATED)
async def submit_test(
    test_id: int,
    submission_data: TestSubmissionCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    submission, points, course_completed = GamificationService(db).record_test_submission(
        current_user.id,
        test_id,
        submission_data.score
    )
    return {
        "id": submission.id,
        "test_id": test_id,
        "score": submission.score,
        "points_awarded": points,
        "course_completed": course_completed
    }
