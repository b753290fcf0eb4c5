"""
Tests for course, test and study time hooks and the badge and achievement
engine they drive
"""
import pytest

from app.core.exceptions import NotFoundError, ValidationError
from app.models.course import Course
from app.models.gamification import (
    Badge, BadgeCategory, PointTransaction, UserAchievement, UserBadge, UserPoints
)
from app.models.progress import CourseEnrollment, EnrollmentStatus, ProgressStatus
from app.services.gamification import GamificationService


def _points(db, user_id):
    return db.query(UserPoints).filter_by(user_id=user_id).one().points


def _badge_names(db, user_id):
    return {ub.badge.name for ub in db.query(UserBadge).filter_by(user_id=user_id)}


def _achievement_names(db, user_id):
    return {ua.achievement.name for ua in db.query(UserAchievement).filter_by(user_id=user_id)}


class TestCourseCompletion:
    def test_completion_requires_every_material_and_test(self, service, db, student, course):
        first, second = course.topics[0].materials
        test = course.topics[0].tests[0]

        _, _, completed = service.record_material_progress(
            student.id, first.id, status=ProgressStatus.COMPLETED.value
        )
        assert completed is False
        _, _, completed = service.record_material_progress(
            student.id, second.id, status=ProgressStatus.COMPLETED.value
        )
        assert completed is False

        submission, points, completed = service.record_test_submission(student.id, test.id, 95)

        assert submission.score == 95
        assert points == 100
        assert completed is True
        enrollment = db.query(CourseEnrollment).filter_by(student_id=student.id).one()
        assert enrollment.status == EnrollmentStatus.COMPLETED.value
        assert enrollment.completed_at is not None
        assert _points(db, student.id) == 600

    def test_completion_reward_paid_once(self, service, db, student, course):
        for material in course.topics[0].materials:
            service.record_material_progress(student.id, material.id, status="COMPLETED")
        service.record_test_submission(student.id, course.topics[0].tests[0].id, 50)
        assert _points(db, student.id) == 500

        assert service.check_course_completion(student.id, course.id) is True
        assert _points(db, student.id) == 500

    def test_empty_course_is_never_complete(self, service, db, student):
        empty = Course(title="Empty", slug="empty")
        db.add(empty)
        db.commit()

        assert service.check_course_completion(student.id, empty.id) is False

    def test_unknown_course(self, service, student):
        with pytest.raises(NotFoundError):
            service.check_course_completion(student.id, 404)

    def test_completed_material_stays_completed(self, service, student, course):
        material = course.topics[0].materials[0]
        service.record_material_progress(student.id, material.id, status="COMPLETED")
        progress, _, _ = service.record_material_progress(
            student.id, material.id, status="IN_PROGRESS", time_spent=60
        )

        assert progress.status == ProgressStatus.COMPLETED.value
        assert progress.time_spent == 60


class TestStudyTime:
    def test_study_points_paid_incrementally(self, service, db, student, course):
        material = course.topics[0].materials[0]

        progress, points, _ = service.record_material_progress(student.id, material.id, time_spent=3600)
        assert points == 10
        assert progress.status == ProgressStatus.IN_PROGRESS.value

        _, points, _ = service.record_material_progress(student.id, material.id, time_spent=1800)
        assert points == 5

        progress, points, _ = service.record_material_progress(student.id, material.id, time_spent=0)
        assert points == 0
        assert progress.study_points_awarded == 15
        assert db.query(PointTransaction).filter_by(
            user_id=student.id, category="STUDY_TIME"
        ).count() == 2

    def test_rejects_bad_input(self, service, student, course):
        material = course.topics[0].materials[0]
        with pytest.raises(ValidationError):
            service.record_material_progress(student.id, material.id, time_spent=-1)
        with pytest.raises(ValidationError):
            service.record_material_progress(student.id, material.id, status="DONE")
        with pytest.raises(NotFoundError):
            service.record_material_progress(student.id, 404, time_spent=10)

    def test_ten_hours_earns_dedicated_learner(self, service, db, catalogue, student, course):
        material = course.topics[0].materials[0]
        _, points, _ = service.record_material_progress(student.id, material.id, time_spent=10 * 3600)

        assert points == 100
        assert _badge_names(db, student.id) == {"Dedicated Learner"}


class TestTestPerformance:
    @pytest.mark.parametrize("score,points", [
        (100, 100), (90, 100), (89, 75), (80, 75), (70, 50), (60, 25), (59, 0), (0, 0),
    ])
    def test_points_for_score(self, score, points):
        assert GamificationService.points_for_score(score) == points

    def test_low_score_awards_nothing(self, service, db, student, course):
        _, points, completed = service.record_test_submission(
            student.id, course.topics[0].tests[0].id, 50
        )

        assert points == 0
        assert completed is False
        assert db.query(PointTransaction).filter_by(user_id=student.id).count() == 0

    def test_score_out_of_range(self, service, student, course):
        with pytest.raises(ValidationError):
            service.record_test_submission(student.id, course.topics[0].tests[0].id, 101)

    def test_perfect_score_earns_badges_and_achievement(self, service, db, catalogue, student, course):
        test = course.topics[0].tests[0]
        service.record_test_submission(student.id, test.id, 100)

        assert _badge_names(db, student.id) == {"Perfect Score", "Excellence"}
        assert "Academic Excellence" in _achievement_names(db, student.id)

        # Badges are never awarded twice
        service.record_test_submission(student.id, test.id, 100)
        assert db.query(UserBadge).filter_by(user_id=student.id).count() == 2

    def test_course_completion_earns_first_steps(self, service, db, catalogue, student, course):
        for material in course.topics[0].materials:
            service.record_material_progress(student.id, material.id, status="COMPLETED")
        service.record_test_submission(student.id, course.topics[0].tests[0].id, 65)

        assert "First Steps" in _badge_names(db, student.id)


class TestCriteria:
    @pytest.mark.parametrize("actual,expected,condition,result", [
        (5, 5, "gte", True),
        (4, 5, "gte", False),
        (3, 5, "lte", True),
        (100.0, 100, "eq", True),
        (99, 100, "eq", False),
        (5, 5, "gt", False),
        (5, None, "gte", False),
    ])
    def test_compare_values(self, actual, expected, condition, result):
        assert GamificationService.compare_values(actual, expected, condition) is result

    def test_unknown_metric_is_false(self, service, student):
        assert service.evaluate_criteria(student.id, {"type": "karma", "value": 1, "condition": "gte"}) is False

    def test_metric_without_data_is_false(self, service, student):
        # No submissions means no average, even for "lte"
        criteria = {"type": "test_score_average", "value": 100, "condition": "lte"}
        assert service.evaluate_criteria(student.id, criteria) is False

    def test_inactive_badges_are_skipped(self, service, db, catalogue, student, course):
        db.query(Badge).filter(Badge.name == "Perfect Score").update({"is_active": False})
        db.commit()

        service.record_test_submission(student.id, course.topics[0].tests[0].id, 100)

        assert "Perfect Score" not in _badge_names(db, student.id)

    def test_award_badge_is_idempotent(self, service, db, student):
        badge = Badge(
            name="Early Bird",
            description="Manual badge",
            category=BadgeCategory.SPECIAL.value,
            points=40
        )
        db.add(badge)
        db.commit()

        first = service.award_badge(student.id, badge.id)
        second = service.award_badge(student.id, badge.id)

        assert first.id == second.id
        assert _points(db, student.id) == 40
        reasons = [tx.reason for tx in db.query(PointTransaction).filter_by(user_id=student.id)]
        assert reasons == ["Badge Earned: Early Bird"]
