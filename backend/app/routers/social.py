"""
Social router for Prep Academy LMS.

Friend requests and sharing of earned badges and achievements.
"""

from typing import Dict, Any
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.user import User
from app.routers.auth import get_current_user
from app.schemas.gamification import FriendRequestCreate, ShareRequest
from app.services.gamification import GamificationService


router = APIRouter()


@router.get("/friends")
async def list_friends(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    friends = GamificationService(db).get_friends_list(current_user.id)
    return {"friends": [friend.to_summary() for friend in friends]}


@router.post("/friends", status_code=status.HTTP_201_CREATED)
async def send_friend_request(
    request_data: FriendRequestCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    connection = GamificationService(db).send_friend_request(
        current_user.id,
        request_data.friend_email,
        request_data.message
    )
    return connection.to_dict()


@router.post("/friends/{connection_id}/accept")
async def accept_friend_request(
    connection_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    connection = GamificationService(db).accept_friend_request(connection_id, current_user.id)
    return connection.to_dict()


@router.post("/share", status_code=status.HTTP_201_CREATED)
async def share(
    share_data: ShareRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Share an earned achievement or badge publicly or with one user.
    """
    service = GamificationService(db)
    if share_data.type == "achievement":
        interaction = service.share_achievement(
            current_user.id,
            share_data.user_achievement_id,
            share_data.message,
            share_data.receiver_id
        )
    else:
        interaction = service.share_badge(
            current_user.id,
            share_data.user_badge_id,
            share_data.message,
            share_data.receiver_id
        )
    return interaction.to_dict()
