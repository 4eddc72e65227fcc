from django.db import models
from .citizen import Citizen


class Notification(models.Model):
    """In-app notification shown in the user's notification center."""

    TYPE_STATUS_UPDATE = "status_update"
    TYPE_BADGE_EARNED = "badge_earned"
    TYPE_VERIFICATION = "verification"

    TYPE_CHOICES = [
        (TYPE_STATUS_UPDATE, "Status update"),
        (TYPE_BADGE_EARNED, "Badge earned"),
        (TYPE_VERIFICATION, "Verification"),
    ]

    user = models.ForeignKey(Citizen, on_delete=models.CASCADE, related_name="notifications")
    title = models.CharField(max_length=200)
    body = models.TextField()
    type = models.CharField(max_length=50, choices=TYPE_CHOICES)
    data = models.JSONField(blank=True, null=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "notifications"
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.user_id}: {self.title}"
