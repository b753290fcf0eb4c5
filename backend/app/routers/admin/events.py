"""
Admin events and challenges router for Prep Academy LMS.

Creates seasonal events and challenges, refreshes event statuses and
toggles challenges on and off.
"""

from typing import Dict, Any
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.user import User
from app.models.admin import AdminLog, AdminAction
from app.routers.auth import get_current_admin_user
from app.schemas.admin import EventCreate, ChallengeCreate, ToggleActive
from app.services.gamification import GamificationService


router = APIRouter()


@router.post("/events", status_code=status.HTTP_201_CREATED)
async def create_event(
    event_data: EventCreate,
    request: Request,
    current_admin: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    event = GamificationService(db).create_seasonal_event(
        name=event_data.name,
        description=event_data.description,
        event_type=event_data.type.value,
        start_date=event_data.start_date,
        end_date=event_data.end_date,
        rules=event_data.rules,
        rewards=event_data.rewards,
        max_participants=event_data.max_participants,
        is_team_event=event_data.is_team_event
    )

    db.add(AdminLog.for_request(
        request,
        current_admin.id,
        AdminAction.CREATE,
        entity_type="event",
        entity_id=event.id,
        details={"name": event.name, "status": event.status}
    ))
    db.commit()

    return event.to_dict()


@router.post("/events/refresh-status")
async def refresh_event_statuses(
    request: Request,
    current_admin: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    changed = GamificationService(db).refresh_event_statuses()

    db.add(AdminLog.for_request(
        request,
        current_admin.id,
        AdminAction.UPDATE,
        entity_type="event",
        details={"status_changes": changed}
    ))
    db.commit()

    return {"updated": changed}


@router.get("/challenges")
async def list_challenges(
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    challenges = GamificationService(db).list_challenges()
    return {"challenges": [challenge.to_dict() for challenge in challenges]}


@router.post("/challenges", status_code=status.HTTP_201_CREATED)
async def create_challenge(
    challenge_data: ChallengeCreate,
    request: Request,
    current_admin: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    challenge = GamificationService(db).create_challenge(
        name=challenge_data.name,
        description=challenge_data.description,
        challenge_type=challenge_data.type.value,
        start_date=challenge_data.start_date,
        end_date=challenge_data.end_date,
        rules=challenge_data.rules,
        rewards=challenge_data.rewards,
        event_id=challenge_data.event_id,
        max_participants=challenge_data.max_participants,
        has_quiz=challenge_data.has_quiz,
        quiz=challenge_data.quiz.model_dump(mode="json") if challenge_data.quiz else None
    )

    db.add(AdminLog.for_request(
        request,
        current_admin.id,
        AdminAction.CREATE,
        entity_type="challenge",
        entity_id=challenge.id,
        details={"name": challenge.name, "has_quiz": challenge.has_quiz}
    ))
    db.commit()

    return challenge.to_dict()


@router.patch("/challenges/{challenge_id}")
async def toggle_challenge(
    challenge_id: int,
    toggle: ToggleActive,
    request: Request,
    current_admin: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    challenge = GamificationService(db).set_challenge_active(challenge_id, toggle.is_active)

    db.add(AdminLog.for_request(
        request,
        current_admin.id,
        AdminAction.ACTIVATE if toggle.is_active else AdminAction.DEACTIVATE,
        entity_type="challenge",
        entity_id=challenge.id
    ))
    db.commit()

    return challenge.to_dict()
