"""
Seasonal events router for Prep Academy LMS.
"""

from typing import Dict, Any, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.user import User
from app.routers.auth import get_current_user
from app.schemas.gamification import EventJoin
from app.services.gamification import GamificationService


router = APIRouter()


@router.get("")
async def list_active_events(
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Active events and those starting soon, earliest first.
    """
    events = GamificationService(db).get_active_events()
    return {"events": [event.to_dict(include_participants=True) for event in events]}


@router.post("/{event_id}/join", status_code=status.HTTP_201_CREATED)
async def join_event(
    event_id: int,
    join_data: Optional[EventJoin] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    participation = GamificationService(db).join_event(
        event_id,
        current_user.id,
        team_id=join_data.team_id if join_data else None
    )
    return participation.to_dict()


@router.get("/{event_id}/leaderboard")
async def get_event_leaderboard(
    event_id: int,
    limit: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return {
        "event_id": event_id,
        "entries": GamificationService(db).get_event_leaderboard(event_id, limit)
    }
