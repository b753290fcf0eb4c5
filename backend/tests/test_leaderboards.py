"""
Tests for leaderboard recomputation and the user profile
"""
from datetime import timedelta

from app.core.config import settings
from app.core.database import utcnow
from app.models.gamification import Leaderboard, LeaderboardEntry, PointTransaction


def _ranking(service, category="POINTS", time_frame="ALL_TIME"):
    return [
        (row["rank"], row["user"]["id"], row["score"])
        for row in service.get_leaderboard(category, time_frame)
    ]


class TestUpdateLeaderboards:
    def test_points_ranking_breaks_ties_by_user_id(self, service, make_user):
        first, second, third = make_user("anna"), make_user("boris"), make_user("carl")
        service.award_points(first.id, 300, "MANUAL_ADJUSTMENT", "Seed")
        service.award_points(second.id, 500, "MANUAL_ADJUSTMENT", "Seed")
        service.award_points(third.id, 300, "MANUAL_ADJUSTMENT", "Seed")

        results = service.update_leaderboards()

        assert results["POINTS ALL_TIME"] == 3
        assert _ranking(service) == [
            (1, second.id, 500),
            (2, first.id, 300),
            (3, third.id, 300),
        ]

    def test_seeded_board_is_reused(self, service, db, catalogue, student):
        service.award_points(student.id, 10, "MANUAL_ADJUSTMENT", "Seed")

        results = service.update_leaderboards()

        assert results["Points Leaderboard"] == 1
        assert db.query(Leaderboard).filter_by(category="POINTS", time_frame="ALL_TIME").count() == 1

    def test_users_falling_off_the_board_lose_their_entry(self, service, db, make_user, monkeypatch):
        users = [make_user(name) for name in ("anna", "boris", "carl")]
        for points, user in zip((100, 200, 300), users):
            service.award_points(user.id, points, "MANUAL_ADJUSTMENT", "Seed")
        service.update_leaderboards()

        monkeypatch.setattr(settings, "LEADERBOARD_SIZE", 2)
        service.update_leaderboards()

        ranking = _ranking(service)
        assert [user_id for _, user_id, _ in ranking] == [users[2].id, users[1].id]
        board = service.get_or_create_leaderboard("POINTS", "ALL_TIME")
        assert db.query(LeaderboardEntry).filter_by(leaderboard_id=board.id).count() == 2

    def test_time_framed_points_use_rolling_windows(self, service, db, student):
        now = utcnow()
        transaction, _ = service.award_points(student.id, 100, "MANUAL_ADJUSTMENT", "Old")
        transaction.created_at = now - timedelta(days=10)
        db.commit()
        service.award_points(student.id, 30, "MANUAL_ADJUSTMENT", "Recent")

        service.update_leaderboards(now=now + timedelta(minutes=1))

        assert _ranking(service, time_frame="WEEKLY") == [(1, student.id, 30)]
        assert _ranking(service, time_frame="MONTHLY") == [(1, student.id, 130)]

    def test_activity_boards(self, service, student, other_student, course):
        test = course.topics[0].tests[0]
        service.record_test_submission(student.id, test.id, 90)
        service.record_test_submission(student.id, test.id, 70)
        service.record_test_submission(other_student.id, test.id, 85)
        service.record_material_progress(other_student.id, course.topics[0].materials[0].id, time_spent=7200)

        service.update_leaderboards()

        assert _ranking(service, "TEST_SCORES") == [
            (1, other_student.id, 85),
            (2, student.id, 80),
        ]
        assert _ranking(service, "STUDY_TIME") == [
            (1, other_student.id, 2),
            (2, student.id, 0),
        ]

    def test_admins_are_not_ranked_on_activity_boards(self, service, student, admin, course):
        service.record_test_submission(admin.id, course.topics[0].tests[0].id, 100)

        service.update_leaderboards()

        ranked = [user_id for _, user_id, _ in _ranking(service, "COURSE_COMPLETION")]
        assert ranked == [student.id]
        assert _ranking(service, "TEST_SCORES") == []

    def test_missing_board_returns_empty_list(self, service):
        assert service.get_leaderboard("STREAK", "DAILY") == []


class TestProfile:
    def test_profile_lists_recent_transactions_newest_first(self, service, student):
        for number in range(12):
            service.award_points(student.id, number + 1, "MANUAL_ADJUSTMENT", f"Award {number}")

        profile = service.get_user_profile(student.id)

        assert profile["points"]["points"] == sum(range(1, 13))
        assert len(profile["recent_transactions"]) == settings.RECENT_TRANSACTIONS_LIMIT
        assert profile["recent_transactions"][0]["reason"] == "Award 11"
        assert profile["badges"] == []
        assert profile["achievements"] == []

    def test_profile_creates_points_record(self, service, db, student):
        profile = service.get_user_profile(student.id)

        assert profile["points"]["level"] == 1
        assert db.query(PointTransaction).count() == 0
