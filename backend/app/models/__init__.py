"""
Database models for Prep Academy LMS.

This module contains all SQLAlchemy models for the application:
- User models for authentication and profiles
- Course models for learning content structure
- Progress models for enrollments, material progress and test submissions
- Gamification models for points, badges, achievements and leaderboards
- Social models for friends and teams
- Event models for seasonal events and challenges
- Admin models for the audit log
"""

from app.core.database import Base

# Import all models to ensure they're registered with SQLAlchemy
from .user import User, UserRole
from .course import Course, Topic, Subtopic, Material, Test, ContentStatus, MaterialType
from .progress import (
    CourseEnrollment, MaterialProgress, TestSubmission, EnrollmentStatus, ProgressStatus
)
from .gamification import (
    UserPoints, PointTransaction, Badge, UserBadge, Achievement, UserAchievement,
    Leaderboard, LeaderboardEntry, PointCategory, BadgeCategory, AchievementCategory,
    LeaderboardCategory, TimeFrame
)
from .social import (
    FriendConnection, SocialInteraction, Team, TeamMembership, TeamInvitation,
    ConnectionStatus, InteractionType, TeamRole, InvitationStatus
)
from .events import (
    Event, EventParticipation, Challenge, ChallengeSubmission, EventStatus,
    EventType, ChallengeType, QuestionType
)
from .admin import AdminLog, AdminAction

# Export all models
__all__ = [
    "Base",
    "User",
    "UserRole",
    "Course",
    "Topic",
    "Subtopic",
    "Material",
    "Test",
    "ContentStatus",
    "MaterialType",
    "CourseEnrollment",
    "MaterialProgress",
    "TestSubmission",
    "EnrollmentStatus",
    "ProgressStatus",
    "UserPoints",
    "PointTransaction",
    "Badge",
    "UserBadge",
    "Achievement",
    "UserAchievement",
    "Leaderboard",
    "LeaderboardEntry",
    "PointCategory",
    "BadgeCategory",
    "AchievementCategory",
    "LeaderboardCategory",
    "TimeFrame",
    "FriendConnection",
    "SocialInteraction",
    "Team",
    "TeamMembership",
    "TeamInvitation",
    "ConnectionStatus",
    "InteractionType",
    "TeamRole",
    "InvitationStatus",
    "Event",
    "EventParticipation",
    "Challenge",
    "ChallengeSubmission",
    "EventStatus",
    "EventType",
    "ChallengeType",
    "QuestionType",
    "AdminLog",
    "AdminAction"
]
