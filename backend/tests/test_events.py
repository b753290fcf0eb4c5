"""
Tests for seasonal events, challenges and challenge quizzes
"""
from datetime import timedelta, timezone

import pytest

from app.core.database import utcnow
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.events import ChallengeType, EventParticipation, EventStatus, EventType
from app.models.gamification import Leaderboard, PointTransaction, UserPoints
from app.services.gamification import GamificationService


QUIZ = {
    "questions": [
        {"id": "q1", "question": "2 + 2?", "type": "multiple-choice",
         "options": ["3", "4", "5"], "correctAnswer": "4"},
        {"id": "q2", "question": "Zero is even", "type": "true-false",
         "options": [], "correctAnswer": True},
        {"id": "q3", "question": "Name the process plants use to make food", "type": "short-answer",
         "options": [], "correctAnswer": "photosynthesis"},
    ],
    "totalPoints": 90,
    "passingScore": 60,
}


@pytest.fixture
def event(service, active_window):
    start, end = active_window
    return service.create_seasonal_event(
        "Spring Sprint",
        "Study as much as you can",
        EventType.STUDY_MARATHON.value,
        start,
        end,
        rewards={"points": 100}
    )


@pytest.fixture
def quiz_challenge(service, active_window, event):
    start, end = active_window
    return service.create_challenge(
        "Warm-up quiz",
        "Three quick questions",
        ChallengeType.QUIZ.value,
        start,
        end,
        rewards={"points": 40},
        event_id=event.id,
        has_quiz=True,
        quiz=QUIZ
    )


def _event(service, name, start, end, **kwargs):
    return service.create_seasonal_event(name, "", EventType.SEASONAL_CHALLENGE.value, start, end, **kwargs)


class TestEventLifecycle:
    def test_status_follows_schedule(self, service, db, event):
        assert event.status == EventStatus.ACTIVE.value
        board = db.query(Leaderboard).filter_by(event_id=event.id).one()
        assert board.name == "Spring Sprint Leaderboard"
        assert (board.category, board.time_frame) == ("SEASONAL", "SEASONAL")

    def test_future_event_is_upcoming(self, service):
        now = utcnow()
        event = _event(service, "Summer", now + timedelta(days=3), now + timedelta(days=10))

        assert event.status == EventStatus.UPCOMING.value

    def test_offset_aware_dates_stored_as_utc(self, service):
        now = utcnow().replace(microsecond=0)
        almaty = timezone(timedelta(hours=5))
        start = (now - timedelta(hours=1)).replace(tzinfo=timezone.utc).astimezone(almaty)
        end = (now + timedelta(days=1)).replace(tzinfo=timezone.utc)

        event = _event(service, "Offset", start, end)
        challenge = service.create_challenge("Offset", "", ChallengeType.QUIZ.value, start, end)

        assert event.status == EventStatus.ACTIVE.value
        assert (event.start_date, event.end_date) == (now - timedelta(hours=1), now + timedelta(days=1))
        assert challenge.start_date.tzinfo is None
        assert challenge.start_date == now - timedelta(hours=1)

    def test_end_must_follow_start(self, service):
        now = utcnow()
        with pytest.raises(ValidationError):
            _event(service, "Backwards", now, now - timedelta(hours=1))

    def test_refresh_moves_events_along(self, service, db):
        now = utcnow()
        upcoming = _event(service, "Soon", now + timedelta(hours=1), now + timedelta(hours=3))
        running = _event(service, "Running", now - timedelta(hours=1), now + timedelta(hours=2))

        changed = service.refresh_event_statuses(now=now + timedelta(hours=2, minutes=30))

        assert changed == 2
        assert upcoming.status == EventStatus.ACTIVE.value
        assert running.status == EventStatus.COMPLETED.value

    def test_active_events_include_those_starting_soon(self, service):
        now = utcnow()
        active = _event(service, "Now", now - timedelta(hours=1), now + timedelta(days=1))
        soon = _event(service, "Tonight", now + timedelta(hours=6), now + timedelta(days=1))
        _event(service, "Next week", now + timedelta(days=7), now + timedelta(days=8))
        _event(service, "Past", now - timedelta(days=3), now - timedelta(days=2))

        assert service.get_active_events(now=now) == [active, soon]


class TestJoinEvent:
    def test_join_awards_points(self, service, db, student, event):
        participation = service.join_event(event.id, student.id)

        assert participation.score == 0
        assert db.query(UserPoints).filter_by(user_id=student.id).one().points == 25

    def test_join_twice(self, service, student, event):
        service.join_event(event.id, student.id)
        with pytest.raises(ConflictError):
            service.join_event(event.id, student.id)

    def test_inactive_event(self, service, student):
        now = utcnow()
        event = _event(service, "Later", now + timedelta(days=2), now + timedelta(days=3))

        with pytest.raises(ValidationError, match="not active"):
            service.join_event(event.id, student.id)

    def test_full_event(self, service, student, other_student, active_window):
        event = _event(service, "Tiny", *active_window, max_participants=1)
        service.join_event(event.id, student.id)

        with pytest.raises(ValidationError, match="full"):
            service.join_event(event.id, other_student.id)

    def test_team_must_include_user(self, service, student, other_student, event):
        team = service.create_team(student.id, "Sprinters")

        with pytest.raises(ValidationError, match="not a member"):
            service.join_event(event.id, other_student.id, team_id=team.id)

        participation = service.join_event(event.id, student.id, team_id=team.id)
        assert participation.team_id == team.id

    def test_unknown_event(self, service, student):
        with pytest.raises(NotFoundError):
            service.join_event(404, student.id)

    def test_event_leaderboard_orders_by_score(self, service, db, student, other_student, event):
        service.join_event(event.id, student.id)
        late = service.join_event(event.id, other_student.id)
        late.score = 70
        db.commit()

        rows = service.get_event_leaderboard(event.id)

        assert [(row["rank"], row["user"]["id"], row["score"]) for row in rows] == [
            (1, other_student.id, 70),
            (2, student.id, 0),
        ]


class TestChallenges:
    def test_submit(self, service, db, student, active_window):
        challenge = service.create_challenge("Essay", "Write one page", ChallengeType.INDIVIDUAL.value, *active_window)

        submission = service.submit_challenge(challenge.id, student.id, {"text": "My essay"})

        assert submission.content == {"text": "My essay"}
        assert submission.score is None
        assert db.query(PointTransaction).filter_by(user_id=student.id).one().points == 15

    def test_inactive_or_closed(self, service, student, active_window):
        challenge = service.create_challenge("Essay", "", ChallengeType.INDIVIDUAL.value, *active_window)

        with pytest.raises(ValidationError, match="not active"):
            service.submit_challenge(challenge.id, student.id, "late", now=active_window[1] + timedelta(seconds=1))

        service.set_challenge_active(challenge.id, False)
        with pytest.raises(ValidationError, match="not active"):
            service.submit_challenge(challenge.id, student.id, "text")

    def test_max_attempts(self, service, student, active_window):
        challenge = service.create_challenge(
            "Essay", "", ChallengeType.INDIVIDUAL.value, *active_window, rules={"maxAttempts": 2}
        )
        service.submit_challenge(challenge.id, student.id, "first")
        service.submit_challenge(challenge.id, student.id, "second")

        with pytest.raises(ConflictError):
            service.submit_challenge(challenge.id, student.id, "third")

    def test_capacity_counts_distinct_users(self, service, student, other_student, active_window):
        challenge = service.create_challenge(
            "Essay", "", ChallengeType.INDIVIDUAL.value, *active_window, max_participants=1
        )
        service.submit_challenge(challenge.id, student.id, "first")
        service.submit_challenge(challenge.id, student.id, "revised")

        with pytest.raises(ValidationError, match="full"):
            service.submit_challenge(challenge.id, other_student.id, "mine")

    def test_unknown_event(self, service, active_window):
        with pytest.raises(NotFoundError):
            service.create_challenge("Orphan", "", ChallengeType.TEAM.value, *active_window, event_id=404)


class TestQuiz:
    @pytest.mark.parametrize("question,answer,correct", [
        (QUIZ["questions"][0], "4", True),
        (QUIZ["questions"][0], "5", False),
        (QUIZ["questions"][1], True, True),
        (QUIZ["questions"][1], "true", False),
        (QUIZ["questions"][2], "  Photosynthesis ", True),
        (QUIZ["questions"][2], "photo", True),
        (QUIZ["questions"][2], "respiration", False),
        (QUIZ["questions"][2], "", False),
        (QUIZ["questions"][0], None, False),
    ])
    def test_grade_answer(self, question, answer, correct):
        assert GamificationService.grade_answer(question, answer) is correct

    def test_passing_attempt_pays_reward_and_event_score(self, service, db, student, event, quiz_challenge):
        service.join_event(event.id, student.id)

        result = service.submit_challenge_quiz(
            quiz_challenge.id, student.id, {"q1": "4", "q2": True, "q3": "Photosynthesis"}
        )

        assert (result.score, result.total_points, result.passed) == (90, 90, True)
        assert (result.correct_answers, result.total_questions) == (3, 3)
        participation = db.query(EventParticipation).filter_by(user_id=student.id).one()
        assert participation.score == 90
        reward = db.query(PointTransaction).filter_by(category="CHALLENGE_COMPLETION").one()
        assert reward.points == 40

    def test_failing_attempt(self, service, db, student, quiz_challenge):
        result = service.submit_challenge_quiz(quiz_challenge.id, student.id, {"q1": "4"})

        assert result.score == 30
        assert result.passed is False
        assert db.query(PointTransaction).filter_by(category="CHALLENGE_COMPLETION").count() == 0

    def test_single_attempt(self, service, student, quiz_challenge):
        service.submit_challenge_quiz(quiz_challenge.id, student.id, {})

        with pytest.raises(ConflictError):
            service.submit_challenge_quiz(quiz_challenge.id, student.id, {"q1": "4"})

    def test_challenge_without_quiz(self, service, student, active_window):
        challenge = service.create_challenge("Essay", "", ChallengeType.INDIVIDUAL.value, *active_window)

        with pytest.raises(ValidationError, match="quiz"):
            service.submit_challenge_quiz(challenge.id, student.id, {"q1": "4"})

    def test_quiz_window(self, service, student, quiz_challenge):
        with pytest.raises(ValidationError, match="not active"):
            service.submit_challenge_quiz(
                quiz_challenge.id, student.id, {}, now=quiz_challenge.start_date - timedelta(minutes=1)
            )
