from django.db import models
from .citizen import Citizen


class Badge(models.Model):
    """Static achievement definition, seeded rather than user-created."""

    CATEGORY_REPORTS = "reports"
    CATEGORY_VERIFICATIONS = "verifications"
    CATEGORY_STREAK = "streak"
    CATEGORY_AREA = "area"
    CATEGORY_TIMING = "timing"
    CATEGORY_COMPLAINT_TYPE = "category"

    CATEGORY_CHOICES = [
        (CATEGORY_REPORTS, "Reports"),
        (CATEGORY_VERIFICATIONS, "Verifications"),
        (CATEGORY_STREAK, "Streak"),
        (CATEGORY_AREA, "Area"),
        (CATEGORY_TIMING, "Timing"),
        (CATEGORY_COMPLAINT_TYPE, "Complaint category"),
    ]

    # Criteria for timing badges
    CRITERION_FIRST_OF_DAY = "first_of_day"
    CRITERION_NIGHT_REPORT = "night_report"

    key = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=100)
    description = models.TextField()
    icon = models.CharField(max_length=10)
    threshold = models.PositiveIntegerField()
    category = models.CharField(max_length=50, choices=CATEGORY_CHOICES)
    criterion = models.CharField(
        max_length=50,
        blank=True,
        null=True,
        help_text="Timing rule, or complaint category for category badges",
    )

    class Meta:
        db_table = "badges"
        ordering = ["id"]

    def __str__(self):
        return f"{self.icon} {self.name}"


class UserBadge(models.Model):
    user = models.ForeignKey(Citizen, on_delete=models.CASCADE, related_name="user_badges")
    badge = models.ForeignKey(Badge, on_delete=models.CASCADE, related_name="user_badges")
    earned_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "user_badges"
        ordering = ["earned_at", "id"]
        constraints = [
            models.UniqueConstraint(fields=["user", "badge"], name="unique_user_badge"),
        ]

    def __str__(self):
        return f"{self.user_id} earned {self.badge.key}"


class PointTransaction(models.Model):
    """Immutable ledger entry; a user's points equal the sum of their transactions."""

    ACTION_REPORT_COMPLAINT = "report_complaint"
    ACTION_COMPLAINT_RESOLVED = "complaint_resolved"
    ACTION_VERIFY_COMPLAINT = "verify_complaint"
    ACTION_FIRST_IN_AREA = "first_in_area"
    ACTION_DAILY_STREAK = "daily_streak"

    ACTION_CHOICES = [
        (ACTION_REPORT_COMPLAINT, "Reported a complaint"),
        (ACTION_COMPLAINT_RESOLVED, "Complaint resolved"),
        (ACTION_VERIFY_COMPLAINT, "Verified a complaint"),
        (ACTION_FIRST_IN_AREA, "First report in area"),
        (ACTION_DAILY_STREAK, "Daily streak"),
    ]

    user = models.ForeignKey(
        Citizen, on_delete=models.CASCADE, related_name="point_transactions"
    )
    points = models.PositiveIntegerField()
    action = models.CharField(max_length=50, choices=ACTION_CHOICES, db_index=True)
    description = models.TextField(blank=True, null=True)
    reference_type = models.CharField(max_length=50, blank=True, null=True)
    reference_id = models.BigIntegerField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "point_transactions"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["reference_type", "reference_id", "action"]),
        ]

    def __str__(self):
        return f"+{self.points} {self.action} for {self.user_id}"


class Challenge(models.Model):
    title = models.CharField(max_length=200)
    description = models.TextField()
    target_action = models.CharField(max_length=50, choices=PointTransaction.ACTION_CHOICES)
    target_count = models.PositiveIntegerField()
    reward_points = models.PositiveIntegerField()
    starts_at = models.DateTimeField()
    ends_at = models.DateTimeField()
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "challenges"
        ordering = ["ends_at"]

    def __str__(self):
        return self.title


class UserChallenge(models.Model):
    user = models.ForeignKey(Citizen, on_delete=models.CASCADE, related_name="challenges")
    challenge = models.ForeignKey(
        Challenge, on_delete=models.CASCADE, related_name="participants"
    )
    progress = models.PositiveIntegerField(default=0)
    completed = models.BooleanField(default=False)

    class Meta:
        db_table = "user_challenges"
        constraints = [
            models.UniqueConstraint(fields=["user", "challenge"], name="unique_user_challenge"),
        ]

    def __str__(self):
        return f"{self.user_id} - {self.challenge.title} ({self.progress})"
