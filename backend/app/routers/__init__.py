"""
API routers for Prep Academy LMS.

This module contains all API endpoint routers:
- gamification: Profile, leaderboards and activity hooks
- social: Friends and sharing
- teams: Teams, invitations and team leaderboards
- events: Seasonal events
- challenges: Challenge and quiz submissions
- admin: Administrative endpoints for the gamification catalogue
- health: Liveness check
"""

from fastapi import APIRouter

# Import individual routers
from .gamification import router as gamification_router
from .social import router as social_router
from .teams import router as teams_router
from .events import router as events_router
from .challenges import router as challenges_router
from .health import router as health_router

# Import admin sub-routers
from .admin import admin_router

# Create main API router
api_router = APIRouter()

# Include all routers with their prefixes
api_router.include_router(
    gamification_router,
    prefix="/gamification",
    tags=["gamification"]
)

api_router.include_router(
    social_router,
    prefix="/social",
    tags=["social"]
)

api_router.include_router(
    teams_router,
    prefix="/teams",
    tags=["teams"]
)

api_router.include_router(
    events_router,
    prefix="/events",
    tags=["events"]
)

api_router.include_router(
    challenges_router,
    prefix="/challenges",
    tags=["challenges"]
)

api_router.include_router(
    admin_router,
    prefix="/admin",
    tags=["admin"]
)

api_router.include_router(
    health_router,
    tags=["health"]
)

# Export all routers
__all__ = [
    "api_router",
    "gamification_router",
    "social_router",
    "teams_router",
    "events_router",
    "challenges_router",
    "health_router",
    "admin_router"
]
