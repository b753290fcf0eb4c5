"""
Gamification engine for Prep Academy LMS.

GamificationService turns learner activity (logins, test scores, study time,
course completions, social and event participation) into points, levels,
streaks, badges, achievements and ranked leaderboards.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, distinct, or_, and_
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import utcnow, as_naive_utc
from app.core.exceptions import (
    ValidationError, NotFoundError, PermissionDeniedError, ConflictError
)
from app.models.user import User, UserRole
from app.models.course import Course, Topic, Material, Test
from app.models.progress import (
    CourseEnrollment, MaterialProgress, TestSubmission, EnrollmentStatus, ProgressStatus
)
from app.models.gamification import (
    UserPoints, PointTransaction, Badge, UserBadge, Achievement, UserAchievement,
    Leaderboard, LeaderboardEntry, PointCategory, BadgeCategory, LeaderboardCategory,
    TimeFrame
)
from app.models.social import (
    FriendConnection, SocialInteraction, Team, TeamMembership, TeamInvitation,
    ConnectionStatus, InteractionType, TeamRole, InvitationStatus
)
from app.models.events import (
    Event, EventParticipation, Challenge, ChallengeSubmission, EventStatus, QuestionType
)


logger = logging.getLogger(__name__)


# Test score tiers, highest first: (minimum score, points)
TEST_SCORE_TIERS = ((90, 100), (80, 75), (70, 50), (60, 25))

TEAM_ROLE_ORDER = {
    TeamRole.LEADER.value: 0,
    TeamRole.CO_LEADER.value: 1,
    TeamRole.MEMBER.value: 2,
}

# Rolling windows for the time-framed points leaderboards
POINTS_WINDOWS = {
    TimeFrame.DAILY.value: timedelta(days=1),
    TimeFrame.WEEKLY.value: timedelta(days=7),
    TimeFrame.MONTHLY.value: timedelta(days=30),
}


@dataclass
class StreakResult:
    streak: int
    bonus: int


@dataclass
class QuizResult:
    submission_id: int
    score: int
    total_points: int
    passed: bool
    correct_answers: int
    total_questions: int


class GamificationService:
    """
    Points, badges, achievements, leaderboards, social features, teams,
    seasonal events and challenges over a single database session.

    Each public method commits its own unit of work.
    """

    def __init__(self, db: Session):
        self.db = db
        self._metrics = {
            "course_completion_count": self._completed_course_count,
            "test_score_average": self._test_score_average,
            "study_time_total": self._study_hours_total,
            "streak_days": self._streak_days,
            "total_points": self._total_points,
            "user_level": self._user_level,
            "friend_count": self._friend_count,
            "team_joined": self._team_count,
            "team_leadership": self._team_leadership_count,
            "social_interactions": self._share_count,
            "event_participation_count": self._event_participation_count,
            "challenge_completion_count": self._challenge_completion_count,
        }

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _get_user(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found")
        return user

    def _get_user_by_email(self, email: str) -> User:
        user = self.db.query(User).filter(User.email == email).first()
        if not user:
            raise NotFoundError("User not found")
        return user

    def _get_team(self, team_id: int) -> Team:
        team = self.db.query(Team).filter(Team.id == team_id).first()
        if not team:
            raise NotFoundError("Team not found")
        return team

    def _get_event(self, event_id: int) -> Event:
        event = self.db.query(Event).filter(Event.id == event_id).first()
        if not event:
            raise NotFoundError("Event not found")
        return event

    def _get_challenge(self, challenge_id: int) -> Challenge:
        challenge = self.db.query(Challenge).filter(Challenge.id == challenge_id).first()
        if not challenge:
            raise NotFoundError("Challenge not found")
        return challenge

    def _team_member_count(self, team_id: int) -> int:
        return self.db.query(TeamMembership).filter(TeamMembership.team_id == team_id).count()

    def _get_membership(self, team_id: int, user_id: int) -> Optional[TeamMembership]:
        return self.db.query(TeamMembership).filter(
            TeamMembership.team_id == team_id,
            TeamMembership.user_id == user_id
        ).first()

    # ------------------------------------------------------------------
    # Points and levels
    # ------------------------------------------------------------------

    @staticmethod
    def calculate_level(experience: int) -> int:
        return experience // settings.XP_PER_LEVEL + 1

    def initialize_user_points(self, user_id: int) -> UserPoints:
        """Return the user's points record, creating an empty one on first use."""
        user_points = self.db.query(UserPoints).filter(UserPoints.user_id == user_id).first()
        if user_points:
            return user_points

        self._get_user(user_id)
        user_points = UserPoints(
            user_id=user_id,
            points=0,
            level=1,
            experience=0,
            streak=0,
            longest_streak=0
        )
        self.db.add(user_points)
        self.db.commit()
        self.db.refresh(user_points)
        return user_points

    def award_points(
        self,
        user_id: int,
        points: int,
        category: str,
        reason: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> Tuple[PointTransaction, UserPoints]:
        """
        Record a point transaction and apply it to the user's totals.

        Negative awards reduce points but still count towards experience, so
        the level never goes down.
        """
        if not points:
            raise ValidationError("Point awards must be non-zero")

        user_points = self.initialize_user_points(user_id)

        transaction = PointTransaction(
            user_id=user_id,
            points=points,
            category=category.value if isinstance(category, PointCategory) else category,
            reason=reason,
            details=metadata
        )
        self.db.add(transaction)

        user_points.points += points
        user_points.experience += abs(points)
        new_level = self.calculate_level(user_points.experience)
        if new_level > user_points.level:
            logger.info(f"User {user_id} reached level {new_level}")
            user_points.level = new_level

        self.db.commit()
        self.db.refresh(transaction)
        self.db.refresh(user_points)

        logger.info(f"Awarded {points} points to user {user_id} ({transaction.category}: {reason})")
        return transaction, user_points

    # ------------------------------------------------------------------
    # Activity hooks
    # ------------------------------------------------------------------

    def check_daily_login(self, user_id: int, now: Optional[datetime] = None) -> StreakResult:
        """
        Update the login streak using calendar days.

        Consecutive days extend the streak and pay a capped bonus, a gap of
        more than one day restarts it at 1, repeat logins on the same day are
        ignored.
        """
        now = now or utcnow()
        user_points = self.initialize_user_points(user_id)
        bonus = 0

        if user_points.last_login is None:
            user_points.streak = 1
        else:
            days = (now.date() - user_points.last_login.date()).days
            if days <= 0:
                return StreakResult(streak=user_points.streak, bonus=0)
            if days == 1:
                user_points.streak += 1
                bonus = min(
                    user_points.streak * settings.STREAK_BONUS_PER_DAY,
                    settings.STREAK_BONUS_CAP
                )
            else:
                logger.info(f"User {user_id} lost a {user_points.streak}-day streak")
                user_points.streak = 1

        user_points.last_login = now
        user_points.longest_streak = max(user_points.longest_streak, user_points.streak)
        self.db.commit()

        streak = user_points.streak
        if bonus:
            self.award_points(
                user_id,
                bonus,
                PointCategory.STREAK_BONUS,
                f"Daily Login Streak ({streak} days)",
                {"streak": streak}
            )

        self.check_badge_eligibility(user_id, BadgeCategory.STREAK.value)
        self.check_achievement_eligibility(user_id)
        return StreakResult(streak=streak, bonus=bonus)

    def check_course_completion(self, user_id: int, course_id: int) -> bool:
        """
        Mark the enrollment COMPLETED and pay the completion reward the first
        time every material is completed and every test has a submission.
        """
        course = self.db.query(Course).filter(Course.id == course_id).first()
        if not course:
            raise NotFoundError("Course not found")

        total_materials = self.db.query(Material).join(Topic).filter(
            Topic.course_id == course_id
        ).count()
        total_tests = self.db.query(Test).join(Topic).filter(
            Topic.course_id == course_id
        ).count()
        if total_materials + total_tests == 0:
            return False

        completed_materials = self.db.query(MaterialProgress).join(Material).join(Topic).filter(
            Topic.course_id == course_id,
            MaterialProgress.student_id == user_id,
            MaterialProgress.status == ProgressStatus.COMPLETED.value
        ).count()
        submitted_tests = self.db.query(func.count(distinct(TestSubmission.test_id))).select_from(TestSubmission).join(Test).join(Topic).filter(
            Topic.course_id == course_id,
            TestSubmission.student_id == user_id
        ).scalar() or 0

        if completed_materials < total_materials or submitted_tests < total_tests:
            return False

        enrollment = self.db.query(CourseEnrollment).filter(
            CourseEnrollment.student_id == user_id,
            CourseEnrollment.course_id == course_id
        ).first()
        if enrollment and enrollment.is_completed:
            return True

        if not enrollment:
            enrollment = CourseEnrollment(student_id=user_id, course_id=course_id)
            self.db.add(enrollment)
        enrollment.status = EnrollmentStatus.COMPLETED.value
        enrollment.completed_at = utcnow()
        self.db.commit()

        logger.info(f"User {user_id} completed course {course_id}")
        self.award_points(
            user_id,
            settings.COURSE_COMPLETION_POINTS,
            PointCategory.COURSE_COMPLETION,
            f"Course Completed: {course.title}",
            {"course_id": course_id}
        )
        self.check_badge_eligibility(user_id, BadgeCategory.COURSE_COMPLETION.value)
        self.check_achievement_eligibility(user_id)
        return True

    @staticmethod
    def points_for_score(score: int) -> int:
        for minimum, points in TEST_SCORE_TIERS:
            if score >= minimum:
                return points
        return 0

    def check_test_performance(self, user_id: int, test_id: int, score: int) -> int:
        """Award tiered points for a test score. Returns the points awarded."""
        if score < 0 or score > 100:
            raise ValidationError("Score must be between 0 and 100")

        points = self.points_for_score(score)
        if points:
            self.award_points(
                user_id,
                points,
                PointCategory.TEST_PERFORMANCE,
                f"Test Performance: {score}%",
                {"test_id": test_id, "score": score}
            )

        if score >= 80:
            self.check_badge_eligibility(
                user_id,
                BadgeCategory.TEST_PERFORMANCE.value,
                {"type": "EXCELLENT" if score >= 90 else "GOOD", "score": score}
            )

        self.check_achievement_eligibility(user_id)
        return points

    def check_study_time(self, user_id: int, material_id: int) -> int:
        """
        Pay study points for time accumulated on a material.

        Only the difference between what the accumulated time is worth and
        what was already paid is awarded. Returns the points awarded.
        """
        progress = self.db.query(MaterialProgress).filter(
            MaterialProgress.material_id == material_id,
            MaterialProgress.student_id == user_id
        ).first()
        if not progress:
            return 0

        hours = progress.hours_spent
        earned = math.floor(hours * settings.STUDY_POINTS_PER_HOUR)
        due = earned - progress.study_points_awarded

        if due > 0:
            progress.study_points_awarded = earned
            self.db.commit()
            self.award_points(
                user_id,
                due,
                PointCategory.STUDY_TIME,
                f"Study Time: {hours:.1f} hours",
                {"material_id": material_id, "hours": round(hours, 2)}
            )

        if due > 0 or hours >= settings.DEDICATED_LEARNER_HOURS:
            self.check_badge_eligibility(user_id, BadgeCategory.STUDY_TIME.value)
            self.check_achievement_eligibility(user_id)

        return max(due, 0)

    def record_material_progress(
        self,
        user_id: int,
        material_id: int,
        status: Optional[str] = None,
        time_spent: int = 0
    ) -> Tuple[MaterialProgress, int, bool]:
        """
        Add study time to a material and optionally change its status.

        Returns the progress row, the study points awarded and whether the
        course is now complete.
        """
        if time_spent < 0:
            raise ValidationError("time_spent must not be negative")
        if status is not None and status not in {s.value for s in ProgressStatus}:
            raise ValidationError(f"Unknown progress status: {status}")

        material = self.db.query(Material).filter(Material.id == material_id).first()
        if not material:
            raise NotFoundError("Material not found")

        progress = self.db.query(MaterialProgress).filter(
            MaterialProgress.material_id == material_id,
            MaterialProgress.student_id == user_id
        ).first()
        if not progress:
            progress = MaterialProgress(
                material_id=material_id,
                student_id=user_id,
                status=ProgressStatus.NOT_STARTED.value,
                time_spent=0,
                study_points_awarded=0
            )
            self.db.add(progress)

        now = utcnow()
        progress.time_spent += time_spent
        progress.last_accessed = now

        if progress.status != ProgressStatus.COMPLETED.value:
            if status:
                progress.status = status
            elif progress.time_spent > 0:
                progress.status = ProgressStatus.IN_PROGRESS.value
            if progress.status == ProgressStatus.COMPLETED.value:
                progress.completed_at = now

        self.db.commit()
        self.db.refresh(progress)

        study_points = self.check_study_time(user_id, material_id)
        course_completed = False
        if progress.status == ProgressStatus.COMPLETED.value:
            course_completed = self.check_course_completion(user_id, material.topic.course_id)
        return progress, study_points, course_completed

    def record_test_submission(
        self,
        user_id: int,
        test_id: int,
        score: int
    ) -> Tuple[TestSubmission, int, bool]:
        """
        Store a graded submission and run the test and course hooks.

        Returns the submission, the points awarded and whether the course is
        now complete.
        """
        if score < 0 or score > 100:
            raise ValidationError("Score must be between 0 and 100")

        test = self.db.query(Test).filter(Test.id == test_id).first()
        if not test:
            raise NotFoundError("Test not found")

        submission = TestSubmission(test_id=test_id, student_id=user_id, score=score)
        self.db.add(submission)
        self.db.commit()
        self.db.refresh(submission)

        points = self.check_test_performance(user_id, test_id, score)
        course_completed = self.check_course_completion(user_id, test.topic.course_id)
        return submission, points, course_completed

    # ------------------------------------------------------------------
    # Badges and achievements
    # ------------------------------------------------------------------

    def check_badge_eligibility(
        self,
        user_id: int,
        category: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> List[UserBadge]:
        """Award every active badge of the category whose criteria the user now meets."""
        badges = self.db.query(Badge).filter(
            Badge.category == category,
            Badge.is_active == True  # noqa: E712
        ).all()
        earned = {
            badge_id for (badge_id,) in self.db.query(UserBadge.badge_id).filter(
                UserBadge.user_id == user_id
            )
        }

        awarded = []
        for badge in badges:
            if badge.id in earned or not badge.criteria or not badge.criteria.get("type"):
                continue
            if self.evaluate_criteria(user_id, badge.criteria):
                awarded.append(self.award_badge(user_id, badge.id))

        if awarded and metadata:
            logger.debug(f"Badge check for user {user_id} triggered by {metadata}")
        return awarded

    def check_achievement_eligibility(
        self,
        user_id: int,
        category: Optional[str] = None
    ) -> List[UserAchievement]:
        query = self.db.query(Achievement).filter(Achievement.is_active == True)  # noqa: E712
        if category:
            query = query.filter(Achievement.category == category)
        achievements = query.all()
        unlocked = {
            achievement_id for (achievement_id,) in self.db.query(UserAchievement.achievement_id).filter(
                UserAchievement.user_id == user_id
            )
        }

        awarded = []
        for achievement in achievements:
            if achievement.id in unlocked or not achievement.criteria or not achievement.criteria.get("type"):
                continue
            if self.evaluate_criteria(user_id, achievement.criteria):
                awarded.append(self.award_achievement(user_id, achievement.id))
        return awarded

    def evaluate_criteria(self, user_id: int, criteria: Optional[Dict[str, Any]]) -> bool:
        """
        Evaluate ``{"type", "value", "condition"}`` against the user's stats.

        Unknown metrics and metrics with no data (no test submissions, no
        points record) evaluate to False.
        """
        if not criteria:
            return False
        metric = self._metrics.get(criteria.get("type"))
        if metric is None:
            return False
        actual = metric(user_id)
        if actual is None:
            return False
        return self.compare_values(actual, criteria.get("value"), criteria.get("condition"))

    @staticmethod
    def compare_values(actual, expected, condition: Optional[str]) -> bool:
        if expected is None:
            return False
        if condition == "gte":
            return actual >= expected
        if condition == "lte":
            return actual <= expected
        if condition == "eq":
            return actual == expected
        return False

    def award_badge(self, user_id: int, badge_id: int) -> UserBadge:
        """Give a badge once; the first award also pays the badge's points."""
        badge = self.db.query(Badge).filter(Badge.id == badge_id).first()
        if not badge:
            raise NotFoundError("Badge not found")

        existing = self.db.query(UserBadge).filter(
            UserBadge.user_id == user_id,
            UserBadge.badge_id == badge_id
        ).first()
        if existing:
            return existing

        user_badge = UserBadge(user_id=user_id, badge_id=badge_id)
        self.db.add(user_badge)
        self.db.commit()
        self.db.refresh(user_badge)
        logger.info(f"User {user_id} earned badge '{badge.name}'")

        if badge.points:
            self.award_points(
                user_id,
                badge.points,
                PointCategory.BADGE_EARNED,
                f"Badge Earned: {badge.name}",
                {"badge_id": badge.id}
            )
        return user_badge

    def award_achievement(self, user_id: int, achievement_id: int) -> UserAchievement:
        achievement = self.db.query(Achievement).filter(Achievement.id == achievement_id).first()
        if not achievement:
            raise NotFoundError("Achievement not found")

        existing = self.db.query(UserAchievement).filter(
            UserAchievement.user_id == user_id,
            UserAchievement.achievement_id == achievement_id
        ).first()
        if existing:
            return existing

        user_achievement = UserAchievement(user_id=user_id, achievement_id=achievement_id)
        self.db.add(user_achievement)
        self.db.commit()
        self.db.refresh(user_achievement)
        logger.info(f"User {user_id} unlocked achievement '{achievement.name}'")

        if achievement.points:
            self.award_points(
                user_id,
                achievement.points,
                PointCategory.ACHIEVEMENT_EARNED,
                f"Achievement Unlocked: {achievement.name}",
                {"achievement_id": achievement.id}
            )
        return user_achievement

    # Criteria metrics. None means "no data" and fails every comparison.

    def _completed_course_count(self, user_id: int) -> int:
        return self.db.query(CourseEnrollment).filter(
            CourseEnrollment.student_id == user_id,
            CourseEnrollment.status == EnrollmentStatus.COMPLETED.value
        ).count()

    def _test_score_average(self, user_id: int) -> Optional[float]:
        return self.db.query(func.avg(TestSubmission.score)).filter(
            TestSubmission.student_id == user_id
        ).scalar()

    def _study_hours_total(self, user_id: int) -> float:
        seconds = self.db.query(func.sum(MaterialProgress.time_spent)).filter(
            MaterialProgress.student_id == user_id
        ).scalar() or 0
        return seconds / 3600

    def _points_record(self, user_id: int) -> Optional[UserPoints]:
        return self.db.query(UserPoints).filter(UserPoints.user_id == user_id).first()

    def _streak_days(self, user_id: int) -> Optional[int]:
        record = self._points_record(user_id)
        return record.streak if record else None

    def _total_points(self, user_id: int) -> Optional[int]:
        record = self._points_record(user_id)
        return record.points if record else None

    def _user_level(self, user_id: int) -> Optional[int]:
        record = self._points_record(user_id)
        return record.level if record else None

    def _friend_count(self, user_id: int) -> int:
        return self.db.query(FriendConnection).filter(
            or_(FriendConnection.user_id == user_id, FriendConnection.friend_id == user_id),
            FriendConnection.status == ConnectionStatus.ACCEPTED.value
        ).count()

    def _team_count(self, user_id: int) -> int:
        return self.db.query(TeamMembership).filter(TeamMembership.user_id == user_id).count()

    def _team_leadership_count(self, user_id: int) -> int:
        return self.db.query(TeamMembership).filter(
            TeamMembership.user_id == user_id,
            TeamMembership.role == TeamRole.LEADER.value
        ).count()

    def _share_count(self, user_id: int) -> int:
        return self.db.query(SocialInteraction).filter(
            SocialInteraction.user_id == user_id,
            SocialInteraction.type.in_([
                InteractionType.ACHIEVEMENT_SHARE.value,
                InteractionType.BADGE_SHARE.value
            ])
        ).count()

    def _event_participation_count(self, user_id: int) -> int:
        return self.db.query(EventParticipation).filter(EventParticipation.user_id == user_id).count()

    def _challenge_completion_count(self, user_id: int) -> int:
        return self.db.query(func.count(distinct(ChallengeSubmission.challenge_id))).filter(
            ChallengeSubmission.user_id == user_id
        ).scalar() or 0

    # ------------------------------------------------------------------
    # Profile and leaderboards
    # ------------------------------------------------------------------

    def get_user_profile(self, user_id: int) -> Dict[str, Any]:
        user_points = self.initialize_user_points(user_id)

        badges = self.db.query(UserBadge).filter(
            UserBadge.user_id == user_id
        ).order_by(UserBadge.earned_at.desc()).all()
        achievements = self.db.query(UserAchievement).filter(
            UserAchievement.user_id == user_id
        ).order_by(UserAchievement.unlocked_at.desc()).all()
        transactions = self.db.query(PointTransaction).filter(
            PointTransaction.user_id == user_id
        ).order_by(
            PointTransaction.created_at.desc(),
            PointTransaction.id.desc()
        ).limit(settings.RECENT_TRANSACTIONS_LIMIT).all()

        return {
            "points": user_points.to_dict(),
            "badges": [b.to_dict() for b in badges],
            "achievements": [a.to_dict() for a in achievements],
            "recent_transactions": [t.to_dict() for t in transactions],
        }

    def _global_leaderboard(self, category: str, time_frame: str):
        return self.db.query(Leaderboard).filter(
            Leaderboard.category == category,
            Leaderboard.time_frame == time_frame,
            Leaderboard.team_id.is_(None),
            Leaderboard.event_id.is_(None)
        )

    def get_leaderboard(
        self,
        category: str = LeaderboardCategory.POINTS.value,
        time_frame: str = TimeFrame.ALL_TIME.value,
        limit: int = 50
    ) -> List[Dict[str, Any]]:
        leaderboard = self._global_leaderboard(category, time_frame).filter(
            Leaderboard.is_active == True  # noqa: E712
        ).first()
        if not leaderboard:
            return []

        entries = self.db.query(LeaderboardEntry).filter(
            LeaderboardEntry.leaderboard_id == leaderboard.id
        ).order_by(LeaderboardEntry.rank).limit(limit).all()
        return [entry.to_dict() for entry in entries]

    def get_or_create_leaderboard(self, category: str, time_frame: str) -> Leaderboard:
        leaderboard = self._global_leaderboard(category, time_frame).first()
        if leaderboard:
            return leaderboard

        leaderboard = Leaderboard(
            name=f"{category} {time_frame}",
            description=f"{category} leaderboard for {time_frame}",
            category=category,
            time_frame=time_frame
        )
        self.db.add(leaderboard)
        self.db.commit()
        self.db.refresh(leaderboard)
        logger.info(f"Created leaderboard '{leaderboard.name}'")
        return leaderboard

    def _write_rankings(self, leaderboard: Leaderboard, scores: List[Tuple[int, int]]) -> int:
        """
        Replace a leaderboard's entries with the top scores.

        Ranks follow score descending with user id as tie-break; users who
        fall off the board lose their entry.
        """
        ranked = sorted(scores, key=lambda row: (-row[1], row[0]))[:settings.LEADERBOARD_SIZE]
        existing = {
            entry.user_id: entry for entry in self.db.query(LeaderboardEntry).filter(
                LeaderboardEntry.leaderboard_id == leaderboard.id
            )
        }

        now = utcnow()
        for position, (user_id, score) in enumerate(ranked, start=1):
            entry = existing.pop(user_id, None)
            if entry is None:
                entry = LeaderboardEntry(leaderboard_id=leaderboard.id, user_id=user_id)
                self.db.add(entry)
            entry.rank = position
            entry.score = int(score)
            entry.updated_at = now

        for stale in existing.values():
            self.db.delete(stale)

        leaderboard.updated_at = now
        self.db.commit()
        return len(ranked)

    def _student_ids(self) -> List[int]:
        return [
            user_id for (user_id,) in self.db.query(User.id).filter(
                User.role == UserRole.STUDENT.value
            )
        ]

    def update_leaderboards(self, now: Optional[datetime] = None) -> Dict[str, int]:
        """Recompute every global leaderboard. Returns entry counts by board name."""
        now = now or utcnow()
        results = {}

        def write(category: str, time_frame: str, scores: List[Tuple[int, int]]) -> None:
            leaderboard = self.get_or_create_leaderboard(category, time_frame)
            results[leaderboard.name] = self._write_rankings(leaderboard, scores)

        points = self.db.query(UserPoints.user_id, UserPoints.points).all()
        write(LeaderboardCategory.POINTS.value, TimeFrame.ALL_TIME.value, points)

        for time_frame, window in POINTS_WINDOWS.items():
            windowed = self.db.query(
                PointTransaction.user_id,
                func.sum(PointTransaction.points)
            ).filter(
                PointTransaction.created_at >= now - window,
                PointTransaction.created_at <= now
            ).group_by(PointTransaction.user_id).all()
            write(LeaderboardCategory.POINTS.value, time_frame, windowed)

        students = self._student_ids()

        completions = dict(self.db.query(
            CourseEnrollment.student_id,
            func.count(CourseEnrollment.id)
        ).filter(
            CourseEnrollment.status == EnrollmentStatus.COMPLETED.value
        ).group_by(CourseEnrollment.student_id).all())
        write(
            LeaderboardCategory.COURSE_COMPLETION.value,
            TimeFrame.ALL_TIME.value,
            [(user_id, completions.get(user_id, 0)) for user_id in students]
        )

        averages = dict(self.db.query(
            TestSubmission.student_id,
            func.avg(TestSubmission.score)
        ).group_by(TestSubmission.student_id).all())
        write(
            LeaderboardCategory.TEST_SCORES.value,
            TimeFrame.ALL_TIME.value,
            [(user_id, round(averages[user_id])) for user_id in students if user_id in averages]
        )

        seconds = dict(self.db.query(
            MaterialProgress.student_id,
            func.sum(MaterialProgress.time_spent)
        ).group_by(MaterialProgress.student_id).all())
        write(
            LeaderboardCategory.STUDY_TIME.value,
            TimeFrame.ALL_TIME.value,
            [(user_id, round((seconds.get(user_id) or 0) / 3600)) for user_id in students]
        )

        streaks = self.db.query(UserPoints.user_id, UserPoints.streak).all()
        write(LeaderboardCategory.STREAK.value, TimeFrame.ALL_TIME.value, streaks)

        logger.info(f"Leaderboards recomputed: {results}")
        return results

    # ------------------------------------------------------------------
    # Social
    # ------------------------------------------------------------------

    def _share(
        self,
        user_id: int,
        interaction_type: InteractionType,
        title: str,
        kind: str,
        details: Dict[str, Any],
        message: Optional[str],
        receiver_id: Optional[int]
    ) -> SocialInteraction:
        if receiver_id is not None:
            self._get_user(receiver_id)

        interaction = SocialInteraction(
            type=interaction_type.value,
            content=message or f"I just earned the {title} {kind}!",
            details=details,
            user_id=user_id,
            receiver_id=receiver_id,
            is_public=receiver_id is None
        )
        self.db.add(interaction)
        self.db.commit()
        self.db.refresh(interaction)

        self.award_points(
            user_id,
            settings.SHARE_POINTS,
            PointCategory.SOCIAL_INTERACTION,
            f"Shared {kind}: {title}",
            {"interaction_id": interaction.id}
        )
        self.check_badge_eligibility(user_id, BadgeCategory.SOCIAL.value)
        self.check_achievement_eligibility(user_id)
        return interaction

    def share_achievement(
        self,
        user_id: int,
        user_achievement_id: int,
        message: Optional[str] = None,
        receiver_id: Optional[int] = None
    ) -> SocialInteraction:
        user_achievement = self.db.query(UserAchievement).filter(
            UserAchievement.id == user_achievement_id,
            UserAchievement.user_id == user_id
        ).first()
        if not user_achievement:
            raise NotFoundError("Achievement not found")

        achievement = user_achievement.achievement
        return self._share(
            user_id,
            InteractionType.ACHIEVEMENT_SHARE,
            achievement.name,
            "achievement",
            {"achievement_id": achievement.id, "achievement_name": achievement.name},
            message,
            receiver_id
        )

    def share_badge(
        self,
        user_id: int,
        user_badge_id: int,
        message: Optional[str] = None,
        receiver_id: Optional[int] = None
    ) -> SocialInteraction:
        user_badge = self.db.query(UserBadge).filter(
            UserBadge.id == user_badge_id,
            UserBadge.user_id == user_id
        ).first()
        if not user_badge:
            raise NotFoundError("Badge not found")

        badge = user_badge.badge
        return self._share(
            user_id,
            InteractionType.BADGE_SHARE,
            badge.name,
            "badge",
            {"badge_id": badge.id, "badge_name": badge.name},
            message,
            receiver_id
        )

    def send_friend_request(
        self,
        user_id: int,
        friend_email: str,
        message: Optional[str] = None
    ) -> FriendConnection:
        user = self._get_user(user_id)
        friend = self._get_user_by_email(friend_email)
        if friend.id == user_id:
            raise ValidationError("You cannot send a friend request to yourself")

        existing = self.db.query(FriendConnection).filter(
            or_(
                and_(FriendConnection.user_id == user_id, FriendConnection.friend_id == friend.id),
                and_(FriendConnection.user_id == friend.id, FriendConnection.friend_id == user_id)
            )
        ).first()
        if existing:
            raise ConflictError("Friend connection already exists", {"status": existing.status})

        connection = FriendConnection(
            user_id=user_id,
            friend_id=friend.id,
            status=ConnectionStatus.PENDING.value
        )
        self.db.add(connection)
        self.db.add(SocialInteraction(
            type=InteractionType.INVITE_FRIEND.value,
            content=message or f"{user.display_name} sent you a friend request",
            details={"friend_email": friend_email},
            user_id=user_id,
            receiver_id=friend.id,
            is_public=False
        ))
        self.db.commit()
        self.db.refresh(connection)

        logger.info(f"User {user_id} sent a friend request to user {friend.id}")
        return connection

    def accept_friend_request(self, connection_id: int, user_id: int) -> FriendConnection:
        connection = self.db.query(FriendConnection).filter(
            FriendConnection.id == connection_id,
            FriendConnection.friend_id == user_id
        ).first()
        if not connection:
            raise NotFoundError("Friend request not found")
        if connection.status != ConnectionStatus.PENDING.value:
            raise ConflictError(f"Friend request is already {connection.status.lower()}")

        connection.status = ConnectionStatus.ACCEPTED.value
        self.db.commit()
        self.db.refresh(connection)

        for member_id in (connection.user_id, connection.friend_id):
            self.award_points(
                member_id,
                settings.FRIEND_ACCEPT_POINTS,
                PointCategory.SOCIAL_INTERACTION,
                "New friend connection",
                {"connection_id": connection.id}
            )
            self.check_achievement_eligibility(member_id)
        return connection

    def get_friends_list(self, user_id: int) -> List[User]:
        connections = self.db.query(FriendConnection).filter(
            or_(FriendConnection.user_id == user_id, FriendConnection.friend_id == user_id),
            FriendConnection.status == ConnectionStatus.ACCEPTED.value
        ).all()
        return [c.friend if c.user_id == user_id else c.user for c in connections]

    # ------------------------------------------------------------------
    # Teams
    # ------------------------------------------------------------------

    def create_team(
        self,
        user_id: int,
        name: str,
        description: Optional[str] = None,
        logo: Optional[str] = None,
        max_members: Optional[int] = None
    ) -> Team:
        """Create a team led by the user, with its own leaderboard."""
        self._get_user(user_id)
        max_members = max_members if max_members is not None else settings.DEFAULT_TEAM_SIZE
        if max_members < 1:
            raise ValidationError("A team needs room for at least one member")

        team = Team(name=name, description=description, logo=logo, max_members=max_members)
        self.db.add(team)
        self.db.flush()

        self.db.add(TeamMembership(user_id=user_id, team_id=team.id, role=TeamRole.LEADER.value))
        self.db.add(Leaderboard(
            name=f"{name} Team Leaderboard",
            description=f"Leaderboard for team {name}",
            category=LeaderboardCategory.TEAM.value,
            time_frame=TimeFrame.ALL_TIME.value,
            is_team=True,
            team_id=team.id
        ))
        self.db.commit()
        self.db.refresh(team)

        logger.info(f"User {user_id} created team {team.id} '{name}'")
        self.check_badge_eligibility(user_id, BadgeCategory.SOCIAL.value)
        self.check_achievement_eligibility(user_id)
        return team

    def invite_to_team(
        self,
        team_id: int,
        inviting_user_id: int,
        invited_user_email: str,
        message: Optional[str] = None
    ) -> TeamInvitation:
        team = self._get_team(team_id)

        inviter = self._get_membership(team_id, inviting_user_id)
        if not inviter or not inviter.can_invite:
            raise PermissionDeniedError("Only team leaders can invite members")

        invited = self._get_user_by_email(invited_user_email)
        if self._get_membership(team_id, invited.id):
            raise ConflictError("User is already a team member")

        if self._team_member_count(team_id) >= team.max_members:
            raise ValidationError("Team is full")

        invitation = self.db.query(TeamInvitation).filter(
            TeamInvitation.team_id == team_id,
            TeamInvitation.invited_user_id == invited.id
        ).first()
        expires_at = utcnow() + timedelta(days=settings.TEAM_INVITATION_TTL_DAYS)

        if invitation and invitation.status in (
            InvitationStatus.PENDING.value, InvitationStatus.ACCEPTED.value
        ):
            raise ConflictError("Invitation already sent")

        if invitation:
            # Declined or expired invitations can be re-issued
            invitation.inviting_user_id = inviting_user_id
            invitation.status = InvitationStatus.PENDING.value
            invitation.message = message
            invitation.expires_at = expires_at
        else:
            invitation = TeamInvitation(
                inviting_user_id=inviting_user_id,
                invited_user_id=invited.id,
                team_id=team_id,
                message=message,
                status=InvitationStatus.PENDING.value,
                expires_at=expires_at
            )
            self.db.add(invitation)

        self.db.commit()
        self.db.refresh(invitation)
        logger.info(f"User {inviting_user_id} invited user {invited.id} to team {team_id}")
        return invitation

    def accept_team_invitation(
        self,
        invitation_id: int,
        user_id: int,
        now: Optional[datetime] = None
    ) -> TeamMembership:
        now = now or utcnow()
        invitation = self.db.query(TeamInvitation).filter(
            TeamInvitation.id == invitation_id,
            TeamInvitation.invited_user_id == user_id
        ).first()
        if not invitation:
            raise NotFoundError("Invitation not found")
        if invitation.status != InvitationStatus.PENDING.value:
            raise ConflictError(f"Invitation is already {invitation.status.lower()}")

        if invitation.expires_at < now:
            invitation.status = InvitationStatus.EXPIRED.value
            self.db.commit()
            raise ValidationError("Invitation has expired")

        team = invitation.team
        if self._team_member_count(team.id) >= team.max_members:
            raise ValidationError("Team is full")

        membership = TeamMembership(user_id=user_id, team_id=team.id, role=TeamRole.MEMBER.value)
        self.db.add(membership)
        invitation.status = InvitationStatus.ACCEPTED.value
        self.db.commit()
        self.db.refresh(membership)

        logger.info(f"User {user_id} joined team {team.id}")
        self.award_points(
            user_id,
            settings.TEAM_JOIN_POINTS,
            PointCategory.TEAM_COMPETITION,
            f"Joined team: {team.name}",
            {"team_id": team.id}
        )
        self.check_badge_eligibility(user_id, BadgeCategory.SOCIAL.value)
        self.check_achievement_eligibility(user_id)
        self.update_team_leaderboard(team.id)
        return membership

    def get_team_members(self, team_id: int) -> List[TeamMembership]:
        self._get_team(team_id)
        memberships = self.db.query(TeamMembership).filter(TeamMembership.team_id == team_id).all()
        return sorted(
            memberships,
            key=lambda m: (TEAM_ROLE_ORDER.get(m.role, len(TEAM_ROLE_ORDER)), m.joined_at, m.id)
        )

    def _team_leaderboard(self, team_id: int, category: str, time_frame: str) -> Optional[Leaderboard]:
        return self.db.query(Leaderboard).filter(
            Leaderboard.team_id == team_id,
            Leaderboard.category == category,
            Leaderboard.time_frame == time_frame
        ).first()

    def get_team_leaderboard(
        self,
        team_id: int,
        category: str = LeaderboardCategory.TEAM.value,
        time_frame: str = TimeFrame.ALL_TIME.value,
        limit: int = 50
    ) -> List[Dict[str, Any]]:
        self._get_team(team_id)
        leaderboard = self._team_leaderboard(team_id, category, time_frame)
        if not leaderboard:
            return []

        entries = self.db.query(LeaderboardEntry).filter(
            LeaderboardEntry.leaderboard_id == leaderboard.id
        ).order_by(
            LeaderboardEntry.score.desc(),
            LeaderboardEntry.user_id
        ).limit(limit).all()

        rows = []
        for position, entry in enumerate(entries, start=1):
            row = entry.to_dict()
            row["rank"] = position
            rows.append(row)
        return rows

    def update_team_leaderboard(self, team_id: int) -> int:
        """Rank the team's members by total points. Returns the entry count."""
        team = self._get_team(team_id)
        leaderboard = self._team_leaderboard(
            team_id, LeaderboardCategory.TEAM.value, TimeFrame.ALL_TIME.value
        )
        if not leaderboard:
            leaderboard = Leaderboard(
                name=f"{team.name} Team Leaderboard",
                description=f"Leaderboard for team {team.name}",
                category=LeaderboardCategory.TEAM.value,
                time_frame=TimeFrame.ALL_TIME.value,
                is_team=True,
                team_id=team_id
            )
            self.db.add(leaderboard)
            self.db.flush()

        member_ids = [
            user_id for (user_id,) in self.db.query(TeamMembership.user_id).filter(
                TeamMembership.team_id == team_id
            )
        ]
        points = dict(self.db.query(UserPoints.user_id, UserPoints.points).filter(
            UserPoints.user_id.in_(member_ids)
        ).all()) if member_ids else {}

        return self._write_rankings(
            leaderboard,
            [(user_id, points.get(user_id, 0)) for user_id in member_ids]
        )

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    @staticmethod
    def _scheduled_status(start_date: datetime, end_date: datetime, now: datetime) -> str:
        if now >= end_date:
            return EventStatus.COMPLETED.value
        if now >= start_date:
            return EventStatus.ACTIVE.value
        return EventStatus.UPCOMING.value

    def create_seasonal_event(
        self,
        name: str,
        description: str,
        event_type: str,
        start_date: datetime,
        end_date: datetime,
        rules: Optional[Dict[str, Any]] = None,
        rewards: Optional[Dict[str, Any]] = None,
        max_participants: Optional[int] = None,
        is_team_event: bool = False,
        now: Optional[datetime] = None
    ) -> Event:
        start_date, end_date = as_naive_utc(start_date), as_naive_utc(end_date)
        if end_date <= start_date:
            raise ValidationError("Event end date must be after its start date")

        event = Event(
            name=name,
            description=description,
            type=event_type,
            status=self._scheduled_status(start_date, end_date, now or utcnow()),
            start_date=start_date,
            end_date=end_date,
            rules=rules,
            rewards=rewards,
            max_participants=max_participants,
            is_team_event=is_team_event
        )
        self.db.add(event)
        self.db.flush()

        self.db.add(Leaderboard(
            name=f"{name} Leaderboard",
            description=f"Leaderboard for {name}",
            category=LeaderboardCategory.SEASONAL.value,
            time_frame=TimeFrame.SEASONAL.value,
            is_team=is_team_event,
            event_id=event.id
        ))
        self.db.commit()
        self.db.refresh(event)

        logger.info(f"Created event {event.id} '{name}' ({event.status})")
        return event

    def refresh_event_statuses(self, now: Optional[datetime] = None) -> int:
        """Move scheduled events along UPCOMING -> ACTIVE -> COMPLETED. Returns the number changed."""
        now = now or utcnow()
        events = self.db.query(Event).filter(
            Event.status.in_([EventStatus.UPCOMING.value, EventStatus.ACTIVE.value])
        ).all()

        changed = 0
        for event in events:
            status = self._scheduled_status(event.start_date, event.end_date, now)
            if status != event.status:
                event.status = status
                changed += 1

        self.db.commit()
        if changed:
            logger.info(f"Updated status of {changed} events")
        return changed

    def join_event(
        self,
        event_id: int,
        user_id: int,
        team_id: Optional[int] = None
    ) -> EventParticipation:
        event = self._get_event(event_id)
        if event.status != EventStatus.ACTIVE.value:
            raise ValidationError("Event is not active")

        existing = self.db.query(EventParticipation).filter(
            EventParticipation.event_id == event_id,
            EventParticipation.user_id == user_id
        ).first()
        if existing:
            raise ConflictError("Already participating in this event")

        if event.max_participants is not None:
            count = self.db.query(EventParticipation).filter(
                EventParticipation.event_id == event_id
            ).count()
            if count >= event.max_participants:
                raise ValidationError("Event is full")

        if team_id is not None and not self._get_membership(team_id, user_id):
            raise ValidationError("User is not a member of this team")

        participation = EventParticipation(user_id=user_id, event_id=event_id, team_id=team_id)
        self.db.add(participation)
        self.db.commit()
        self.db.refresh(participation)

        logger.info(f"User {user_id} joined event {event_id}")
        self.award_points(
            user_id,
            settings.EVENT_JOIN_POINTS,
            PointCategory.SEASONAL_EVENT,
            f"Joined event: {event.name}",
            {"event_id": event_id}
        )
        self.check_badge_eligibility(user_id, BadgeCategory.SPECIAL.value)
        self.check_achievement_eligibility(user_id)
        return participation

    def get_active_events(self, now: Optional[datetime] = None) -> List[Event]:
        now = now or utcnow()
        horizon = now + timedelta(hours=settings.EVENT_LOOKAHEAD_HOURS)
        return self.db.query(Event).filter(
            or_(
                Event.status == EventStatus.ACTIVE.value,
                and_(
                    Event.status == EventStatus.UPCOMING.value,
                    Event.start_date <= horizon
                )
            )
        ).order_by(Event.start_date).all()

    def get_event_leaderboard(self, event_id: int, limit: int = 50) -> List[Dict[str, Any]]:
        self._get_event(event_id)
        participations = self.db.query(EventParticipation).filter(
            EventParticipation.event_id == event_id
        ).order_by(
            EventParticipation.score.desc(),
            EventParticipation.joined_at,
            EventParticipation.id
        ).limit(limit).all()

        return [
            {
                "rank": position,
                "score": p.score,
                "team_id": p.team_id,
                "user": p.user.to_summary(),
            }
            for position, p in enumerate(participations, start=1)
        ]

    # ------------------------------------------------------------------
    # Challenges
    # ------------------------------------------------------------------

    def create_challenge(
        self,
        name: str,
        description: str,
        challenge_type: str,
        start_date: datetime,
        end_date: datetime,
        rules: Optional[Dict[str, Any]] = None,
        rewards: Optional[Dict[str, Any]] = None,
        event_id: Optional[int] = None,
        max_participants: Optional[int] = None,
        has_quiz: bool = False,
        quiz: Optional[Dict[str, Any]] = None
    ) -> Challenge:
        start_date, end_date = as_naive_utc(start_date), as_naive_utc(end_date)
        if end_date <= start_date:
            raise ValidationError("Challenge end date must be after its start date")
        if event_id is not None:
            self._get_event(event_id)

        challenge = Challenge(
            name=name,
            description=description,
            type=challenge_type,
            start_date=start_date,
            end_date=end_date,
            rules=rules,
            rewards=rewards,
            event_id=event_id,
            max_participants=max_participants,
            is_active=True,
            has_quiz=has_quiz,
            quiz=quiz if has_quiz else None
        )
        self.db.add(challenge)
        self.db.commit()
        self.db.refresh(challenge)

        logger.info(f"Created challenge {challenge.id} '{name}'")
        return challenge

    def set_challenge_active(self, challenge_id: int, is_active: bool) -> Challenge:
        challenge = self._get_challenge(challenge_id)
        challenge.is_active = is_active
        self.db.commit()
        self.db.refresh(challenge)
        return challenge

    def list_challenges(self) -> List[Challenge]:
        return self.db.query(Challenge).order_by(
            Challenge.created_at.desc(),
            Challenge.id.desc()
        ).all()

    def _user_submission_count(self, challenge_id: int, user_id: int) -> int:
        return self.db.query(ChallengeSubmission).filter(
            ChallengeSubmission.challenge_id == challenge_id,
            ChallengeSubmission.user_id == user_id
        ).count()

    def _check_capacity(self, challenge: Challenge) -> None:
        if challenge.max_participants is None:
            return
        participants = self.db.query(distinct(ChallengeSubmission.user_id)).filter(
            ChallengeSubmission.challenge_id == challenge.id
        ).count()
        if participants >= challenge.max_participants:
            raise ValidationError("Challenge is full")

    def submit_challenge(
        self,
        challenge_id: int,
        user_id: int,
        content: Any,
        now: Optional[datetime] = None
    ) -> ChallengeSubmission:
        now = now or utcnow()
        challenge = self._get_challenge(challenge_id)
        if not challenge.is_open(now):
            raise ValidationError("Challenge is not active")

        attempts = self._user_submission_count(challenge_id, user_id)
        max_attempts = (challenge.rules or {}).get("maxAttempts")
        if max_attempts and attempts >= max_attempts:
            raise ConflictError("Maximum attempts reached", {"max_attempts": max_attempts})
        if attempts == 0:
            self._check_capacity(challenge)

        submission = ChallengeSubmission(challenge_id=challenge_id, user_id=user_id, content=content)
        self.db.add(submission)
        self.db.commit()
        self.db.refresh(submission)

        logger.info(f"User {user_id} submitted challenge {challenge_id}")
        self.award_points(
            user_id,
            settings.CHALLENGE_SUBMIT_POINTS,
            PointCategory.SEASONAL_EVENT,
            f"Challenge submission: {challenge.name}",
            {"challenge_id": challenge_id}
        )
        self.check_badge_eligibility(user_id, BadgeCategory.SPECIAL.value)
        self.check_achievement_eligibility(user_id)
        return submission

    @staticmethod
    def grade_answer(question: Dict[str, Any], answer: Any) -> bool:
        """Exact match for choice questions, case-insensitive containment for short answers."""
        if answer is None or answer == "":
            return False
        expected = question.get("correctAnswer")
        if expected is None:
            return False

        question_type = question.get("type")
        if question_type in (QuestionType.MULTIPLE_CHOICE.value, QuestionType.TRUE_FALSE.value):
            return answer == expected
        if question_type == QuestionType.SHORT_ANSWER.value:
            given = str(answer).strip().lower()
            correct = str(expected).strip().lower()
            return bool(given) and (given in correct or correct in given)
        return False

    def submit_challenge_quiz(
        self,
        challenge_id: int,
        user_id: int,
        answers: Dict[str, Any],
        now: Optional[datetime] = None
    ) -> QuizResult:
        """
        Grade a quiz attempt; answers are keyed by question id.

        A passing score pays the challenge's reward points and counts towards
        the user's score in the challenge's event.
        """
        now = now or utcnow()
        challenge = self._get_challenge(challenge_id)
        if not challenge.has_quiz or not challenge.quiz:
            raise ValidationError("This challenge does not have a quiz")
        if not challenge.is_open(now):
            raise ValidationError("Challenge is not active")
        if self._user_submission_count(challenge_id, user_id):
            raise ConflictError("You have already submitted this challenge")
        self._check_capacity(challenge)

        quiz = challenge.quiz
        questions = quiz.get("questions") or []
        total_points = quiz.get("totalPoints", 0)

        correct = 0
        for question in questions:
            answer = answers.get(str(question.get("id")))
            if self.grade_answer(question, answer):
                correct += 1

        score = round(correct / len(questions) * total_points) if questions else 0
        passed = score >= quiz.get("passingScore", 0)

        submission = ChallengeSubmission(
            challenge_id=challenge_id,
            user_id=user_id,
            content=answers,
            score=score
        )
        self.db.add(submission)

        if passed and challenge.event_id is not None:
            participation = self.db.query(EventParticipation).filter(
                EventParticipation.event_id == challenge.event_id,
                EventParticipation.user_id == user_id
            ).first()
            if participation:
                participation.score += score

        self.db.commit()
        self.db.refresh(submission)
        logger.info(f"User {user_id} scored {score}/{total_points} on challenge {challenge_id}")

        reward_points = (challenge.rewards or {}).get("points")
        if passed and reward_points:
            self.award_points(
                user_id,
                reward_points,
                PointCategory.CHALLENGE_COMPLETION,
                f"Completed challenge: {challenge.name}",
                {
                    "challenge_id": challenge_id,
                    "score": score,
                    "total_points": total_points
                }
            )

        self.check_badge_eligibility(user_id, BadgeCategory.SPECIAL.value)
        self.check_achievement_eligibility(user_id)
        return QuizResult(
            submission_id=submission.id,
            score=score,
            total_points=total_points,
            passed=passed,
            correct_answers=correct,
            total_questions=len(questions)
        )
