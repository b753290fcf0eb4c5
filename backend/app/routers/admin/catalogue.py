"""
Admin badge and achievement catalogue router for Prep Academy LMS.

Lists, creates and activates/deactivates badges and achievements.
"""

from typing import Dict, Any, Optional
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.user import User
from app.models.gamification import Badge, Achievement
from app.models.admin import AdminLog, AdminAction
from app.routers.auth import get_current_admin_user
from app.schemas.admin import BadgeCreate, AchievementCreate, ToggleActive


router = APIRouter()


@router.get("/badges")
async def list_badges(
    category: Optional[str] = None,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    query = db.query(Badge)
    if category:
        query = query.filter(Badge.category == category)
    badges = query.order_by(Badge.category, Badge.points).all()

    return {
        "badges": [
            dict(badge.to_dict(), awarded_count=len(badge.awards))
            for badge in badges
        ]
    }


@router.post("/badges", status_code=status.HTTP_201_CREATED)
async def create_badge(
    badge_data: BadgeCreate,
    request: Request,
    current_admin: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    existing = db.query(Badge).filter(Badge.name == badge_data.name).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Badge with this name already exists"
        )

    badge = Badge(
        name=badge_data.name,
        description=badge_data.description,
        icon=badge_data.icon,
        category=badge_data.category.value,
        points=badge_data.points,
        criteria=badge_data.criteria.model_dump() if badge_data.criteria else None,
        is_active=True
    )
    db.add(badge)
    db.flush()

    db.add(AdminLog.for_request(
        request,
        current_admin.id,
        AdminAction.CREATE,
        entity_type="badge",
        entity_id=badge.id,
        details={"name": badge.name, "category": badge.category}
    ))
    db.commit()
    db.refresh(badge)

    return badge.to_dict()


@router.patch("/badges/{badge_id}")
async def toggle_badge(
    badge_id: int,
    toggle: ToggleActive,
    request: Request,
    current_admin: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    badge = db.query(Badge).filter(Badge.id == badge_id).first()
    if not badge:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Badge not found"
        )

    badge.is_active = toggle.is_active
    db.add(AdminLog.for_request(
        request,
        current_admin.id,
        AdminAction.ACTIVATE if toggle.is_active else AdminAction.DEACTIVATE,
        entity_type="badge",
        entity_id=badge.id
    ))
    db.commit()
    db.refresh(badge)

    return badge.to_dict()


@router.get("/achievements")
async def list_achievements(
    category: Optional[str] = None,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    query = db.query(Achievement)
    if category:
        query = query.filter(Achievement.category == category)
    achievements = query.order_by(Achievement.category, Achievement.points).all()

    return {
        "achievements": [
            dict(achievement.to_dict(), unlocked_count=len(achievement.awards))
            for achievement in achievements
        ]
    }


@router.post("/achievements", status_code=status.HTTP_201_CREATED)
async def create_achievement(
    achievement_data: AchievementCreate,
    request: Request,
    current_admin: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    existing = db.query(Achievement).filter(Achievement.name == achievement_data.name).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Achievement with this name already exists"
        )

    achievement = Achievement(
        name=achievement_data.name,
        description=achievement_data.description,
        icon=achievement_data.icon,
        category=achievement_data.category.value,
        points=achievement_data.points,
        criteria=achievement_data.criteria.model_dump() if achievement_data.criteria else None,
        is_active=True
    )
    db.add(achievement)
    db.flush()

    db.add(AdminLog.for_request(
        request,
        current_admin.id,
        AdminAction.CREATE,
        entity_type="achievement",
        entity_id=achievement.id,
        details={"name": achievement.name, "category": achievement.category}
    ))
    db.commit()
    db.refresh(achievement)

    return achievement.to_dict()


@router.patch("/achievements/{achievement_id}")
async def toggle_achievement(
    achievement_id: int,
    toggle: ToggleActive,
    request: Request,
    current_admin: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    achievement = db.query(Achievement).filter(Achievement.id == achievement_id).first()
    if not achievement:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Achievement not found"
        )

    achievement.is_active = toggle.is_active
    db.add(AdminLog.for_request(
        request,
        current_admin.id,
        AdminAction.ACTIVATE if toggle.is_active else AdminAction.DEACTIVATE,
        entity_type="achievement",
        entity_id=achievement.id
    ))
    db.commit()
    db.refresh(achievement)

    return achievement.to_dict()
