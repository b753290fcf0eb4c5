"""
Admin routers for Prep Academy LMS.

Everything here requires an ADMIN or OWNER caller:
- catalogue: Badge and achievement management
- events: Seasonal event and challenge management
- dashboard, manual point awards, leaderboard recompute and audit logs
"""

from typing import Dict, Any
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from sqlalchemy import func

from app.core.database import get_db, DatabaseManager
from app.models.user import User
from app.models.admin import AdminLog, AdminAction
from app.routers.auth import get_current_admin_user
from app.schemas.admin import PointAward
from app.services.gamification import GamificationService

from .catalogue import router as catalogue_router
from .events import router as events_router


admin_router = APIRouter()

admin_router.include_router(
    catalogue_router,
    tags=["admin-catalogue"],
    dependencies=[Depends(get_current_admin_user)]
)

admin_router.include_router(
    events_router,
    tags=["admin-events"],
    dependencies=[Depends(get_current_admin_user)]
)


@admin_router.get("/dashboard")
async def get_admin_dashboard(
    admin_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
) -> dict:
    """
    Get admin dashboard overview with gamification statistics.
    """
    from app.models.gamification import (
        UserPoints, PointTransaction, Badge, UserBadge, Achievement, UserAchievement
    )
    from app.models.social import Team
    from app.models.events import Event, EventStatus, Challenge

    total_users = db.query(User).count()
    active_users = db.query(User).filter(User.is_active == True).count()  # noqa: E712

    total_points = db.query(func.sum(UserPoints.points)).scalar() or 0
    average_level = db.query(func.avg(UserPoints.level)).scalar() or 0

    top_badges = db.query(
        Badge.name,
        func.count(UserBadge.id).label("awarded")
    ).join(UserBadge).group_by(Badge.id, Badge.name).order_by(
        func.count(UserBadge.id).desc()
    ).limit(5).all()

    recent_transactions = db.query(PointTransaction).order_by(
        PointTransaction.created_at.desc(),
        PointTransaction.id.desc()
    ).limit(10).all()

    return {
        "statistics": {
            "users": {
                "total": total_users,
                "active": active_users
            },
            "points": {
                "total": int(total_points),
                "average_level": round(float(average_level), 2)
            },
            "catalogue": {
                "badges": db.query(Badge).count(),
                "badges_awarded": db.query(UserBadge).count(),
                "achievements": db.query(Achievement).count(),
                "achievements_unlocked": db.query(UserAchievement).count()
            },
            "community": {
                "teams": db.query(Team).count(),
                "active_events": db.query(Event).filter(
                    Event.status == EventStatus.ACTIVE.value
                ).count(),
                "active_challenges": db.query(Challenge).filter(
                    Challenge.is_active == True  # noqa: E712
                ).count()
            }
        },
        "top_badges": [
            {"name": name, "awarded": awarded}
            for name, awarded in top_badges
        ],
        "recent_transactions": [
            dict(tx.to_dict(), user_id=tx.user_id)
            for tx in recent_transactions
        ],
        "tables": DatabaseManager.get_table_stats(db)
    }


@admin_router.post("/points")
async def award_points(
    award: PointAward,
    request: Request,
    admin_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Manually add or deduct points for a user.
    """
    transaction, user_points = GamificationService(db).award_points(
        award.user_id,
        award.points,
        award.category.value,
        award.reason,
        {"awarded_by": admin_user.id}
    )

    db.add(AdminLog.for_request(
        request,
        admin_user.id,
        AdminAction.AWARD_POINTS,
        entity_type="user",
        entity_id=award.user_id,
        details={"points": award.points, "reason": award.reason}
    ))
    db.commit()

    return {
        "transaction": transaction.to_dict(),
        "user_points": user_points.to_dict()
    }


@admin_router.post("/leaderboards/recompute")
async def recompute_leaderboards(
    request: Request,
    admin_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    results = GamificationService(db).update_leaderboards()

    db.add(AdminLog.for_request(
        request,
        admin_user.id,
        AdminAction.RECOMPUTE,
        entity_type="leaderboard",
        details={"entries": results}
    ))
    db.commit()

    return {"leaderboards": results}


@admin_router.get("/logs")
async def get_admin_logs(
    skip: int = 0,
    limit: int = 50,
    action: str = None,
    entity_type: str = None,
    admin_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
) -> dict:
    """Audit trail, newest first, optionally narrowed by action or entity type."""
    query = db.query(AdminLog)

    if action:
        query = query.filter(AdminLog.action == action)
    if entity_type:
        query = query.filter(AdminLog.entity_type == entity_type)

    total = query.count()

    logs = query.order_by(
        AdminLog.created_at.desc(),
        AdminLog.id.desc()
    ).offset(skip).limit(limit).all()

    return {
        "total": total,
        "skip": skip,
        "limit": limit,
        "logs": [log.to_dict() for log in logs]
    }


__all__ = ["admin_router", "get_current_admin_user"]
