"""
Tests for friend connections and sharing
"""
import pytest

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.gamification import Badge, BadgeCategory, UserBadge, UserPoints
from app.models.social import ConnectionStatus, InteractionType, SocialInteraction


@pytest.fixture
def earned_badge(service, db, student) -> UserBadge:
    badge = Badge(name="Night Owl", description="Study after midnight", category=BadgeCategory.SPECIAL.value)
    db.add(badge)
    db.commit()
    return service.award_badge(student.id, badge.id)


class TestFriends:
    def test_request_and_accept(self, service, db, student, other_student):
        connection = service.send_friend_request(student.id, other_student.email, "Study buddies?")

        assert connection.status == ConnectionStatus.PENDING.value
        invite = db.query(SocialInteraction).filter_by(type=InteractionType.INVITE_FRIEND.value).one()
        assert invite.receiver_id == other_student.id
        assert invite.content == "Study buddies?"
        assert service.get_friends_list(student.id) == []

        accepted = service.accept_friend_request(connection.id, other_student.id)

        assert accepted.status == ConnectionStatus.ACCEPTED.value
        assert service.get_friends_list(student.id) == [other_student]
        assert service.get_friends_list(other_student.id) == [student]
        for user in (student, other_student):
            assert db.query(UserPoints).filter_by(user_id=user.id).one().points == 20

    def test_cannot_befriend_yourself(self, service, student):
        with pytest.raises(ValidationError):
            service.send_friend_request(student.id, student.email)

    def test_unknown_email(self, service, student):
        with pytest.raises(NotFoundError):
            service.send_friend_request(student.id, "nobody@academy.kz")

    def test_duplicate_request_in_either_direction(self, service, student, other_student):
        service.send_friend_request(student.id, other_student.email)

        with pytest.raises(ConflictError):
            service.send_friend_request(student.id, other_student.email)
        with pytest.raises(ConflictError):
            service.send_friend_request(other_student.id, student.email)

    def test_only_the_addressee_can_accept(self, service, student, other_student):
        connection = service.send_friend_request(student.id, other_student.email)

        with pytest.raises(NotFoundError):
            service.accept_friend_request(connection.id, student.id)

    def test_accepting_twice(self, service, student, other_student):
        connection = service.send_friend_request(student.id, other_student.email)
        service.accept_friend_request(connection.id, other_student.id)

        with pytest.raises(ConflictError):
            service.accept_friend_request(connection.id, other_student.id)


class TestSharing:
    def test_share_badge_publicly(self, service, db, student, earned_badge):
        interaction = service.share_badge(student.id, earned_badge.id)

        assert interaction.type == InteractionType.BADGE_SHARE.value
        assert interaction.content == "I just earned the Night Owl badge!"
        assert interaction.is_public is True
        assert interaction.details["badge_name"] == "Night Owl"
        assert db.query(UserPoints).filter_by(user_id=student.id).one().points == 10

    def test_share_with_one_user(self, service, student, other_student, earned_badge):
        interaction = service.share_badge(student.id, earned_badge.id, "Look!", other_student.id)

        assert interaction.receiver_id == other_student.id
        assert interaction.is_public is False
        assert interaction.content == "Look!"

    def test_cannot_share_someone_elses_badge(self, service, other_student, earned_badge):
        with pytest.raises(NotFoundError):
            service.share_badge(other_student.id, earned_badge.id)

    def test_unknown_achievement(self, service, student):
        with pytest.raises(NotFoundError):
            service.share_achievement(student.id, 404)

    def test_ten_shares_earn_social_butterfly(self, service, db, catalogue, student, other_student, earned_badge):
        for _ in range(9):
            service.share_badge(student.id, earned_badge.id)
        # Friend invitations do not count as shares
        service.send_friend_request(student.id, other_student.email)
        names = {ub.badge.name for ub in db.query(UserBadge).filter_by(user_id=student.id)}
        assert "Social Butterfly" not in names

        service.share_badge(student.id, earned_badge.id)

        names = {ub.badge.name for ub in db.query(UserBadge).filter_by(user_id=student.id)}
        assert "Social Butterfly" in names
