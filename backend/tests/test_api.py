"""
API tests: authentication, error mapping, user endpoints and the admin
surface
"""
from datetime import timedelta

from app.core.database import utcnow
from app.models.admin import AdminLog
from app.models.gamification import UserBadge


API = "/api/v1"


class TestAuth:
    def test_missing_token(self, client):
        response = client.get(f"{API}/gamification/profile")
        assert response.status_code == 401

    def test_invalid_token(self, client):
        response = client.get(
            f"{API}/gamification/profile",
            headers={"Authorization": "Bearer not-a-token"}
        )
        assert response.status_code == 401

    def test_inactive_user(self, client, make_user, auth_headers):
        user = make_user("ghost", is_active=False)
        response = client.get(f"{API}/gamification/profile", headers=auth_headers(user))
        assert response.status_code == 403

    def test_admin_only(self, client, student, auth_headers):
        response = client.get(f"{API}/admin/dashboard", headers=auth_headers(student))
        assert response.status_code == 403
        assert response.json()["detail"] == "Admin access required"

        response = client.get(f"{API}/admin/badges", headers=auth_headers(student))
        assert response.status_code == 403


class TestHealth:
    def test_health(self, client):
        response = client.get(f"{API}/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestGamificationEndpoints:
    def test_login_and_profile(self, client, catalogue, student, auth_headers):
        headers = auth_headers(student)

        response = client.post(f"{API}/gamification/login", headers=headers)
        assert response.status_code == 200
        assert response.json() == {"streak": 1, "bonus": 0}

        response = client.get(f"{API}/gamification/profile", headers=headers)
        assert response.status_code == 200
        profile = response.json()
        assert profile["points"]["streak"] == 1
        assert set(profile["leaderboards"]) == {
            "points", "course_completion", "test_scores", "study_time", "streak"
        }

    def test_progress_and_test_submission(self, client, student, course, auth_headers):
        headers = auth_headers(student)
        material = course.topics[0].materials[0]
        test = course.topics[0].tests[0]

        response = client.post(
            f"{API}/gamification/materials/{material.id}/progress",
            json={"time_spent": 3600},
            headers=headers
        )
        assert response.status_code == 200
        assert response.json()["study_points_awarded"] == 10
        assert response.json()["status"] == "IN_PROGRESS"

        response = client.post(
            f"{API}/gamification/tests/{test.id}/submissions",
            json={"score": 85},
            headers=headers
        )
        assert response.status_code == 201
        assert response.json()["points_awarded"] == 75
        assert response.json()["course_completed"] is False

    def test_score_validation(self, client, student, course, auth_headers):
        response = client.post(
            f"{API}/gamification/tests/{course.topics[0].tests[0].id}/submissions",
            json={"score": 120},
            headers=auth_headers(student)
        )
        assert response.status_code == 422

    def test_unknown_material_maps_to_404(self, client, student, auth_headers):
        response = client.post(
            f"{API}/gamification/materials/404/progress",
            json={"time_spent": 10},
            headers=auth_headers(student)
        )
        assert response.status_code == 404
        assert response.json() == {"error": "Not Found", "detail": "Material not found"}

    def test_leaderboard(self, client, service, student):
        service.award_points(student.id, 42, "MANUAL_ADJUSTMENT", "Seed")
        service.update_leaderboards()

        response = client.get(f"{API}/gamification/leaderboard", params={"category": "POINTS"})

        assert response.status_code == 200
        body = response.json()
        assert body["time_frame"] == "ALL_TIME"
        assert body["entries"][0]["score"] == 42


class TestSocialEndpoints:
    def test_friend_flow(self, client, student, other_student, auth_headers):
        response = client.post(
            f"{API}/social/friends",
            json={"friend_email": other_student.email},
            headers=auth_headers(student)
        )
        assert response.status_code == 201
        connection_id = response.json()["id"]

        response = client.post(
            f"{API}/social/friends/{connection_id}/accept",
            headers=auth_headers(other_student)
        )
        assert response.status_code == 200
        assert response.json()["status"] == "ACCEPTED"

        response = client.get(f"{API}/social/friends", headers=auth_headers(student))
        assert [friend["id"] for friend in response.json()["friends"]] == [other_student.id]

    def test_self_request_maps_to_400(self, client, student, auth_headers):
        response = client.post(
            f"{API}/social/friends",
            json={"friend_email": student.email},
            headers=auth_headers(student)
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Bad Request"

    def test_share_requires_matching_id(self, client, student, auth_headers):
        response = client.post(
            f"{API}/social/share",
            json={"type": "badge", "user_achievement_id": 1},
            headers=auth_headers(student)
        )
        assert response.status_code == 422


class TestTeamEndpoints:
    def test_team_flow(self, client, student, other_student, auth_headers):
        response = client.post(
            f"{API}/teams",
            json={"name": "Derivatives", "max_members": 5},
            headers=auth_headers(student)
        )
        assert response.status_code == 201
        team_id = response.json()["id"]

        response = client.post(
            f"{API}/teams/{team_id}/invitations",
            json={"email": other_student.email},
            headers=auth_headers(student)
        )
        assert response.status_code == 201
        invitation_id = response.json()["id"]

        # Only the leader may invite
        response = client.post(
            f"{API}/teams/{team_id}/invitations",
            json={"email": student.email},
            headers=auth_headers(other_student)
        )
        assert response.status_code == 403

        response = client.post(
            f"{API}/teams/invitations/{invitation_id}/accept",
            headers=auth_headers(other_student)
        )
        assert response.status_code == 200
        assert response.json()["role"] == "MEMBER"

        response = client.get(
            f"{API}/teams/{team_id}/leaderboard",
            params={"refresh": "true"},
            headers=auth_headers(student)
        )
        assert response.json()["entries"][0]["user"]["id"] == other_student.id


class TestAdminEndpoints:
    def test_award_points_is_logged(self, client, db, admin, student, auth_headers):
        response = client.post(
            f"{API}/admin/points",
            json={"user_id": student.id, "points": 250, "reason": "Olympiad winner"},
            headers=auth_headers(admin)
        )

        assert response.status_code == 200
        assert response.json()["user_points"]["points"] == 250
        log = db.query(AdminLog).one()
        assert (log.action, log.entity_type, log.entity_id) == ("AWARD_POINTS", "user", student.id)

    def test_zero_point_award_rejected(self, client, admin, student, auth_headers):
        response = client.post(
            f"{API}/admin/points",
            json={"user_id": student.id, "points": 0, "reason": "Nothing"},
            headers=auth_headers(admin)
        )
        assert response.status_code == 422

    def test_badge_catalogue(self, client, db, service, admin, student, auth_headers):
        badge = {
            "name": "Bookworm",
            "description": "Five hours of reading",
            "category": "STUDY_TIME",
            "points": 50,
            "criteria": {"type": "study_time_total", "value": 5, "condition": "gte"},
        }
        response = client.post(f"{API}/admin/badges", json=badge, headers=auth_headers(admin))
        assert response.status_code == 201
        badge_id = response.json()["id"]

        response = client.post(f"{API}/admin/badges", json=badge, headers=auth_headers(admin))
        assert response.status_code == 409

        response = client.patch(
            f"{API}/admin/badges/{badge_id}",
            json={"is_active": False},
            headers=auth_headers(admin)
        )
        assert response.status_code == 200
        assert response.json()["is_active"] is False

        assert service.check_badge_eligibility(student.id, "STUDY_TIME") == []
        assert db.query(UserBadge).count() == 0

    def test_event_and_quiz_challenge(self, client, db, admin, student, auth_headers):
        now = utcnow()
        window = {
            "start_date": (now - timedelta(hours=1)).isoformat(),
            "end_date": (now + timedelta(days=1)).isoformat(),
        }

        response = client.post(
            f"{API}/admin/events",
            json={"name": "Quiz Night", "description": "", "type": "TIME_LIMITED_QUIZ", **window},
            headers=auth_headers(admin)
        )
        assert response.status_code == 201
        assert response.json()["status"] == "ACTIVE"
        event_id = response.json()["id"]

        response = client.post(
            f"{API}/admin/challenges",
            json={
                "name": "Capitals",
                "description": "",
                "type": "QUIZ",
                "event_id": event_id,
                "has_quiz": True,
                "quiz": {
                    "questions": [{
                        "id": "1",
                        "question": "Capital of Kazakhstan?",
                        "type": "short-answer",
                        "correctAnswer": "Astana",
                    }],
                    "totalPoints": 10,
                    "passingScore": 10,
                },
                **window
            },
            headers=auth_headers(admin)
        )
        assert response.status_code == 201
        challenge_id = response.json()["id"]

        response = client.get(f"{API}/events", headers=auth_headers(student))
        assert [event["id"] for event in response.json()["events"]] == [event_id]

        response = client.post(f"{API}/events/{event_id}/join", headers=auth_headers(student))
        assert response.status_code == 201

        response = client.post(
            f"{API}/challenges/{challenge_id}/quiz",
            json={"answers": {"1": "astana"}},
            headers=auth_headers(student)
        )
        assert response.status_code == 201
        assert response.json()["submission"]["passed"] is True

        response = client.get(f"{API}/events/{event_id}/leaderboard")
        assert response.json()["entries"][0]["score"] == 10

        actions = {(log.action, log.entity_type) for log in db.query(AdminLog)}
        assert actions == {("CREATE", "event"), ("CREATE", "challenge")}

    def test_challenge_quiz_required(self, client, admin, auth_headers):
        now = utcnow()
        response = client.post(
            f"{API}/admin/challenges",
            json={
                "name": "Broken",
                "description": "",
                "type": "QUIZ",
                "start_date": now.isoformat(),
                "end_date": (now + timedelta(days=1)).isoformat(),
                "has_quiz": True,
            },
            headers=auth_headers(admin)
        )
        assert response.status_code == 422

    def test_event_dates_with_utc_offset(self, client, admin, auth_headers):
        now = utcnow().replace(microsecond=0)
        start, end = now - timedelta(hours=1), now + timedelta(days=1)

        response = client.post(
            f"{API}/admin/events",
            json={
                "name": "Zulu Sprint",
                "description": "",
                "type": "STUDY_MARATHON",
                "start_date": start.isoformat() + "Z",
                "end_date": (end + timedelta(hours=5)).isoformat() + "+05:00",
            },
            headers=auth_headers(admin)
        )

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "ACTIVE"
        assert (body["start_date"], body["end_date"]) == (start.isoformat(), end.isoformat())

        response = client.post(
            f"{API}/admin/challenges",
            json={
                "name": "Zulu",
                "description": "",
                "type": "QUIZ",
                "start_date": start.isoformat() + "Z",
                "end_date": end.isoformat() + "Z",
            },
            headers=auth_headers(admin)
        )

        assert response.status_code == 201
        assert response.json()["start_date"] == start.isoformat()
