"""
Teams router for Prep Academy LMS.
"""

from typing import Dict, Any
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.user import User
from app.routers.auth import get_current_user
from app.schemas.gamification import TeamCreate, TeamInvitationCreate
from app.services.gamification import GamificationService


router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_team(
    team_data: TeamCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    team = GamificationService(db).create_team(
        current_user.id,
        team_data.name,
        description=team_data.description,
        logo=team_data.logo,
        max_members=team_data.max_members
    )
    return team.to_dict()


@router.get("/{team_id}/members")
async def get_team_members(
    team_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    members = GamificationService(db).get_team_members(team_id)
    return {"team_id": team_id, "members": [m.to_dict() for m in members]}


@router.get("/{team_id}/leaderboard")
async def get_team_leaderboard(
    team_id: int,
    limit: int = Query(50, ge=1, le=100),
    refresh: bool = False,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Team leaderboard. Joining a team re-ranks it; pass ``refresh=true`` to pick up
    point changes made since.
    """
    service = GamificationService(db)
    if refresh:
        service.update_team_leaderboard(team_id)
    return {"team_id": team_id, "entries": service.get_team_leaderboard(team_id, limit=limit)}


@router.post("/{team_id}/invitations", status_code=status.HTTP_201_CREATED)
async def invite_to_team(
    team_id: int,
    invitation_data: TeamInvitationCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    invitation = GamificationService(db).invite_to_team(
        team_id,
        current_user.id,
        invitation_data.email,
        invitation_data.message
    )
    return invitation.to_dict()


@router.post("/invitations/{invitation_id}/accept")
async def accept_team_invitation(
    invitation_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    membership = GamificationService(db).accept_team_invitation(invitation_id, current_user.id)
    return membership.to_dict()
