from django.contrib import admin
from complaints.models import (
    Badge,
    Challenge,
    Citizen,
    Complaint,
    Hotspot,
    Notification,
    PointTransaction,
    StatusHistory,
    UserBadge,
    UserChallenge,
    Verification,
)


class StatusHistoryInline(admin.TabularInline):
    model = StatusHistory
    extra = 0
    readonly_fields = ("status", "notes", "timestamp")
    can_delete = False


class VerificationInline(admin.TabularInline):
    model = Verification
    extra = 0
    readonly_fields = ("user", "status", "comment", "created_at")
    exclude = ("photo",)
    can_delete = False


@admin.register(Complaint)
class ComplaintAdmin(admin.ModelAdmin):
    list_display = (
        "complaint_id",
        "category",
        "severity",
        "status",
        "verification_count",
        "verification_status",
        "created_at",
    )
    list_filter = ("status", "category", "severity", "verification_status")
    search_fields = ("complaint_id", "location", "description")
    # Status changes must go through the lifecycle service to keep history consistent
    readonly_fields = (
        "complaint_id",
        "status",
        "verification_count",
        "verification_status",
        "created_at",
        "updated_at",
    )
    exclude = ("image",)
    inlines = [StatusHistoryInline, VerificationInline]


@admin.register(Citizen)
class CitizenAdmin(admin.ModelAdmin):
    list_display = ("phone", "name", "points", "total_reports", "total_verifications", "streak")
    search_fields = ("phone", "name")
    readonly_fields = ("points", "auth_token", "created_at", "updated_at")


@admin.register(Badge)
class BadgeAdmin(admin.ModelAdmin):
    list_display = ("key", "name", "category", "criterion", "threshold")
    list_filter = ("category",)


@admin.register(UserBadge)
class UserBadgeAdmin(admin.ModelAdmin):
    list_display = ("user", "badge", "earned_at")
    readonly_fields = ("earned_at",)


@admin.register(PointTransaction)
class PointTransactionAdmin(admin.ModelAdmin):
    list_display = ("user", "points", "action", "reference_type", "reference_id", "created_at")
    list_filter = ("action",)
    readonly_fields = [field.name for field in PointTransaction._meta.fields]


@admin.register(Hotspot)
class HotspotAdmin(admin.ModelAdmin):
    list_display = ("category", "risk_score", "latitude", "longitude", "predicted_date")


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("user", "title", "type", "is_read", "created_at")
    list_filter = ("type", "is_read")


@admin.register(Challenge)
class ChallengeAdmin(admin.ModelAdmin):
    list_display = ("title", "target_action", "target_count", "reward_points", "is_active")


@admin.register(UserChallenge)
class UserChallengeAdmin(admin.ModelAdmin):
    list_display = ("user", "challenge", "progress", "completed")
