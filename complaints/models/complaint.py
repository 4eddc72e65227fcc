from django.db import models
from .citizen import Citizen


class Complaint(models.Model):
    """
    A citizen-submitted report of a civic issue.
    The status is driven by the lifecycle service and always matches the
    latest entry of its status history.
    """

    CATEGORY_POTHOLE = "pothole"
    CATEGORY_GARBAGE = "garbage"
    CATEGORY_STREETLIGHT = "streetlight"
    CATEGORY_DRAINAGE = "drainage"
    CATEGORY_OTHER = "other"

    CATEGORY_CHOICES = [
        (CATEGORY_POTHOLE, "Pothole"),
        (CATEGORY_GARBAGE, "Garbage"),
        (CATEGORY_STREETLIGHT, "Streetlight"),
        (CATEGORY_DRAINAGE, "Drainage"),
        (CATEGORY_OTHER, "Other"),
    ]

    SEVERITY_CHOICES = [
        ("low", "Low"),
        ("medium", "Medium"),
        ("high", "High"),
    ]

    STATUS_REPORTED = "Reported"
    STATUS_ASSIGNED = "Assigned"
    STATUS_IN_PROGRESS = "In Progress"
    STATUS_RESOLVED = "Resolved"

    STATUS_CHOICES = [
        (STATUS_REPORTED, "Reported"),  # Initial state on submission
        (STATUS_ASSIGNED, "Assigned"),
        (STATUS_IN_PROGRESS, "In Progress"),
        (STATUS_RESOLVED, "Resolved"),  # Terminal for the automatic path
    ]

    OPEN_STATUSES = [STATUS_REPORTED, STATUS_ASSIGNED, STATUS_IN_PROGRESS]

    VERIFICATION_VERIFIED = "verified"
    VERIFICATION_FIXED = "community_verified_fixed"

    VERIFICATION_STATUS_CHOICES = [
        (VERIFICATION_VERIFIED, "Verified by community"),
        (VERIFICATION_FIXED, "Community verified fixed"),
    ]

    complaint_id = models.CharField(max_length=50, unique=True, db_index=True, editable=False)
    user = models.ForeignKey(
        Citizen,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name="complaints",
    )
    image = models.TextField(help_text="Base64 encoded photo")
    perceptual_hash = models.CharField(max_length=64, blank=True, null=True)
    latitude = models.FloatField()
    longitude = models.FloatField()
    location = models.TextField(help_text="Resolved location label")
    category = models.CharField(max_length=50, choices=CATEGORY_CHOICES, db_index=True)
    severity = models.CharField(max_length=20, choices=SEVERITY_CHOICES)
    status = models.CharField(
        max_length=50, choices=STATUS_CHOICES, default=STATUS_REPORTED, db_index=True
    )
    description = models.TextField()
    notes = models.TextField(blank=True, null=True)
    confidence_score = models.PositiveSmallIntegerField(blank=True, null=True)
    ai_models_used = models.JSONField(blank=True, null=True)
    verification_count = models.PositiveIntegerField(default=0)
    verification_status = models.CharField(
        max_length=50, choices=VERIFICATION_STATUS_CHOICES, blank=True, null=True
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "complaints"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["latitude", "longitude"]),
            models.Index(fields=["status", "created_at"]),
        ]

    def __str__(self):
        return f"{self.complaint_id} - {self.category} ({self.status})"


class StatusHistory(models.Model):
    """Append-only record of one status transition."""

    complaint = models.ForeignKey(
        Complaint, on_delete=models.CASCADE, related_name="status_history"
    )
    status = models.CharField(max_length=50, choices=Complaint.STATUS_CHOICES)
    notes = models.TextField(blank=True, null=True)
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "status_history"
        ordering = ["timestamp", "id"]

    def __str__(self):
        return f"{self.complaint.complaint_id} -> {self.status}"


class Verification(models.Model):
    """One community vote on whether a complaint still reflects reality."""

    VOTE_YES = "yes"  # Issue still exists
    VOTE_NO = "no"  # Issue is resolved
    VOTE_CANT_VERIFY = "cant_verify"  # Abstain

    VOTE_CHOICES = [
        (VOTE_YES, "Issue still exists"),
        (VOTE_NO, "Issue resolved"),
        (VOTE_CANT_VERIFY, "Can't verify"),
    ]

    complaint = models.ForeignKey(
        Complaint, on_delete=models.CASCADE, related_name="verifications"
    )
    user = models.ForeignKey(Citizen, on_delete=models.CASCADE, related_name="verifications")
    status = models.CharField(max_length=20, choices=VOTE_CHOICES)
    photo = models.TextField(blank=True, null=True)
    comment = models.TextField(blank=True, null=True)
    latitude = models.FloatField(blank=True, null=True)
    longitude = models.FloatField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "verifications"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["complaint", "status"]),
        ]

    def __str__(self):
        return f"{self.user_id} voted {self.status} on {self.complaint_id}"
