from django.db import models


class Citizen(models.Model):
    """Account holder identified by phone number. Stored in the ``users`` table."""

    phone = models.CharField(max_length=20, unique=True, db_index=True)
    name = models.CharField(max_length=100, blank=True, null=True)
    avatar_url = models.TextField(blank=True, null=True)
    points = models.PositiveIntegerField(
        default=0, help_text="Only ever incremented by the gamification engine"
    )
    total_reports = models.PositiveIntegerField(default=0)
    total_verifications = models.PositiveIntegerField(default=0)
    streak = models.PositiveIntegerField(default=0, help_text="Consecutive active days")
    last_active_date = models.DateField(blank=True, null=True)
    language = models.CharField(max_length=10, default="en")
    auth_token = models.CharField(max_length=64, blank=True, null=True, unique=True)
    badges = models.ManyToManyField(
        "complaints.Badge", through="complaints.UserBadge", related_name="holders"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "users"
        ordering = ["-points", "id"]
        indexes = [
            models.Index(fields=["points"]),
        ]

    def __str__(self):
        return f"{self.name or 'Anonymous'} ({self.phone})"

    @property
    def rank(self) -> int:
        """Position among all users ordered by points, ties sharing a rank."""
        return Citizen.objects.filter(points__gt=self.points).count() + 1
