"""
Unit tests for UserService and NotificationService.
"""

import pytest
from datetime import timedelta
from django.utils import timezone
from complaints.exceptions import InvalidInput, NotificationNotFound, UserNotFound
from complaints.models import Challenge, Citizen, Notification, PointTransaction, UserChallenge
from complaints.services.notification_service import NotificationService
from complaints.services.user_service import UserService


@pytest.mark.django_db
class TestLogin:
    """Test cases for phone login."""

    def setup_method(self):
        self.service = UserService()

    def test_first_login_creates_account(self):
        result = self.service.login("+919800000001", "Asha")

        assert result["created"] is True
        assert result["user"].name == "Asha"
        assert len(result["token"]) == 64
        assert Citizen.objects.count() == 1

    def test_repeat_login_reuses_account_with_fresh_token(self):
        first = self.service.login("+919800000001")
        second = self.service.login("+919800000001", "Asha")

        assert second["created"] is False
        assert second["user"].pk == first["user"].pk
        assert second["token"] != first["token"]
        assert second["user"].name == "Asha"

    def test_blank_phone(self):
        with pytest.raises(InvalidInput):
            self.service.login("   ")


@pytest.mark.django_db
class TestProfile:
    """Test cases for profile lookup and update."""

    def setup_method(self):
        self.service = UserService()

    def test_update_profile(self, create_user):
        user = create_user()

        updated = self.service.update_profile(user.pk, name="Ravi", language="kn")

        assert updated.name == "Ravi"
        assert updated.language == "kn"

    def test_unsupported_language(self, create_user):
        user = create_user()

        with pytest.raises(InvalidInput) as excinfo:
            self.service.update_profile(user.pk, language="fr")

        assert "kn" in excinfo.value.details["allowed"]

    def test_unknown_user(self):
        with pytest.raises(UserNotFound):
            self.service.get_profile(31337)

    def test_active_challenges_with_progress(self, create_user):
        user = create_user()
        now = timezone.now()
        active = Challenge.objects.create(
            title="Report five",
            description="Report five issues",
            target_action=PointTransaction.ACTION_REPORT_COMPLAINT,
            target_count=5,
            reward_points=50,
            starts_at=now - timedelta(days=1),
            ends_at=now + timedelta(days=1),
        )
        Challenge.objects.create(
            title="Expired",
            description="Old challenge",
            target_action=PointTransaction.ACTION_REPORT_COMPLAINT,
            target_count=1,
            reward_points=10,
            starts_at=now - timedelta(days=10),
            ends_at=now - timedelta(days=3),
        )
        UserChallenge.objects.create(user=user, challenge=active, progress=2)

        challenges = self.service.challenges(user.pk)

        assert [c.pk for c in challenges] == [active.pk]
        assert challenges[0].progress == 2
        assert challenges[0].completed is False


@pytest.mark.django_db
class TestNotifications:
    """Test cases for the notification center."""

    def setup_method(self):
        self.service = NotificationService()

    def test_list_and_mark_read(self, create_user):
        user = create_user()
        first = self.service.notify(user, "Hello", "Body", Notification.TYPE_VERIFICATION)
        self.service.notify(user, "Again", "Body", Notification.TYPE_VERIFICATION)

        self.service.mark_read(first.pk)

        assert len(self.service.list_for_user(user.pk)) == 2
        unread = self.service.list_for_user(user.pk, unread_only=True)
        assert [n.title for n in unread] == ["Again"]

    def test_unknown_notification(self):
        with pytest.raises(NotificationNotFound):
            self.service.mark_read(555)

    def test_unknown_user(self):
        with pytest.raises(UserNotFound):
            self.service.list_for_user(555)
