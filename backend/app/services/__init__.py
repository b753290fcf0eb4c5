"""
Service layer for Prep Academy LMS.
"""

from .gamification import GamificationService, StreakResult, QuizResult

__all__ = [
    "GamificationService",
    "StreakResult",
    "QuizResult"
]
