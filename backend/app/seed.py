"""
Default gamification catalogue loaded by ``init_db``.

Each row is a dict of model keyword arguments; rows are matched by name so
re-running the seed never duplicates or overwrites an edited entry.
"""

from app.models.gamification import (
    BadgeCategory, AchievementCategory, LeaderboardCategory, TimeFrame
)


def _criteria(metric: str, value, condition: str = "gte") -> dict:
    return {"type": metric, "value": value, "condition": condition}


DEFAULT_BADGES = [
    {
        "name": "First Steps",
        "description": "Complete your first course",
        "icon": "trophy",
        "category": BadgeCategory.COURSE_COMPLETION.value,
        "points": 100,
        "criteria": _criteria("course_completion_count", 1),
    },
    {
        "name": "Course Master",
        "description": "Complete 5 courses",
        "icon": "crown",
        "category": BadgeCategory.COURSE_COMPLETION.value,
        "points": 500,
        "criteria": _criteria("course_completion_count", 5),
    },
    {
        "name": "Perfect Score",
        "description": "Achieve 100% on a test",
        "icon": "star",
        "category": BadgeCategory.TEST_PERFORMANCE.value,
        "points": 200,
        "criteria": _criteria("test_score_average", 100, "eq"),
    },
    {
        "name": "Excellence",
        "description": "Maintain 90%+ average on tests",
        "icon": "award",
        "category": BadgeCategory.TEST_PERFORMANCE.value,
        "points": 300,
        "criteria": _criteria("test_score_average", 90),
    },
    {
        "name": "Dedicated Learner",
        "description": "Study for 10+ hours",
        "icon": "book",
        "category": BadgeCategory.STUDY_TIME.value,
        "points": 150,
        "criteria": _criteria("study_time_total", 10),
    },
    {
        "name": "Study Champion",
        "description": "Study for 50+ hours",
        "icon": "zap",
        "category": BadgeCategory.STUDY_TIME.value,
        "points": 400,
        "criteria": _criteria("study_time_total", 50),
    },
    {
        "name": "Streak Master",
        "description": "Maintain a 7-day login streak",
        "icon": "flame",
        "category": BadgeCategory.STREAK.value,
        "points": 200,
        "criteria": _criteria("streak_days", 7),
    },
    {
        "name": "Unstoppable",
        "description": "Maintain a 30-day login streak",
        "icon": "fire",
        "category": BadgeCategory.STREAK.value,
        "points": 1000,
        "criteria": _criteria("streak_days", 30),
    },
    {
        "name": "Social Butterfly",
        "description": "Share 10 achievements or badges",
        "icon": "users",
        "category": BadgeCategory.SOCIAL.value,
        "points": 100,
        "criteria": _criteria("social_interactions", 10),
    },
    {
        "name": "Team Player",
        "description": "Join your first team",
        "icon": "team",
        "category": BadgeCategory.SOCIAL.value,
        "points": 200,
        "criteria": _criteria("team_joined", 1),
    },
    {
        "name": "Event Champion",
        "description": "Participate in 5 seasonal events",
        "icon": "calendar",
        "category": BadgeCategory.SPECIAL.value,
        "points": 300,
        "criteria": _criteria("event_participation_count", 5),
    },
    {
        "name": "Challenge Master",
        "description": "Complete 10 challenges",
        "icon": "target",
        "category": BadgeCategory.SPECIAL.value,
        "points": 250,
        "criteria": _criteria("challenge_completion_count", 10),
    },
]


DEFAULT_ACHIEVEMENTS = [
    {
        "name": "Academic Excellence",
        "description": "Achieve 95%+ average across all tests",
        "icon": "award",
        "category": AchievementCategory.ACADEMIC.value,
        "points": 500,
        "criteria": _criteria("test_score_average", 95),
    },
    {
        "name": "Milestone Reacher",
        "description": "Earn 1000+ total points",
        "icon": "target",
        "category": AchievementCategory.MILESTONE.value,
        "points": 100,
        "criteria": _criteria("total_points", 1000),
    },
    {
        "name": "Level Up Master",
        "description": "Reach level 10",
        "icon": "trending",
        "category": AchievementCategory.MILESTONE.value,
        "points": 500,
        "criteria": _criteria("user_level", 10),
    },
    {
        "name": "Social Connector",
        "description": "Connect with 10 friends",
        "icon": "users",
        "category": AchievementCategory.SOCIAL.value,
        "points": 200,
        "criteria": _criteria("friend_count", 10),
    },
    {
        "name": "Team Leader",
        "description": "Lead a team",
        "icon": "crown",
        "category": AchievementCategory.SOCIAL.value,
        "points": 600,
        "criteria": _criteria("team_leadership", 1),
    },
    {
        "name": "Challenge Hunter",
        "description": "Complete 10 challenges",
        "icon": "zap",
        "category": AchievementCategory.ENGAGEMENT.value,
        "points": 250,
        "criteria": _criteria("challenge_completion_count", 10),
    },
]


DEFAULT_LEADERBOARDS = [
    {
        "name": "Points Leaderboard",
        "description": "Overall points ranking",
        "category": LeaderboardCategory.POINTS.value,
        "time_frame": TimeFrame.ALL_TIME.value,
    },
    {
        "name": "Course Completion Leaderboard",
        "description": "Most courses completed",
        "category": LeaderboardCategory.COURSE_COMPLETION.value,
        "time_frame": TimeFrame.ALL_TIME.value,
    },
    {
        "name": "Test Scores Leaderboard",
        "description": "Highest test score averages",
        "category": LeaderboardCategory.TEST_SCORES.value,
        "time_frame": TimeFrame.ALL_TIME.value,
    },
    {
        "name": "Study Time Leaderboard",
        "description": "Most study hours logged",
        "category": LeaderboardCategory.STUDY_TIME.value,
        "time_frame": TimeFrame.ALL_TIME.value,
    },
    {
        "name": "Streak Leaderboard",
        "description": "Longest daily login streaks",
        "category": LeaderboardCategory.STREAK.value,
        "time_frame": TimeFrame.ALL_TIME.value,
    },
]
