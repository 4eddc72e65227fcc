import logging
from complaints.exceptions import NotificationNotFound, UserNotFound
from complaints.models import Citizen, Notification

logger = logging.getLogger(__name__)


class NotificationService:
    """In-app notification center. Nothing is pushed to devices from here."""

    def notify(self, user: Citizen, title: str, body: str, type: str, data: dict = None):
        notification = Notification.objects.create(
            user=user, title=title, body=body, type=type, data=data
        )
        logger.debug(f"Notification {notification.pk} created for user {user.pk}: {title}")
        return notification

    def list_for_user(self, user_id: int, unread_only: bool = False):
        if not Citizen.objects.filter(pk=user_id).exists():
            raise UserNotFound(f"User {user_id} not found")
        queryset = Notification.objects.filter(user_id=user_id)
        if unread_only:
            queryset = queryset.filter(is_read=False)
        return list(queryset)

    def mark_read(self, notification_id: int) -> Notification:
        notification = Notification.objects.filter(pk=notification_id).first()
        if notification is None:
            raise NotificationNotFound(f"Notification {notification_id} not found")
        if not notification.is_read:
            notification.is_read = True
            notification.save(update_fields=["is_read"])
        return notification
