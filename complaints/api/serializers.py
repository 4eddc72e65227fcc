from rest_framework import serializers
from complaints.models import (
    Badge,
    Challenge,
    Citizen,
    Complaint,
    Hotspot,
    Notification,
    StatusHistory,
    Verification,
)


class StatusHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = StatusHistory
        fields = ["status", "timestamp", "notes"]


class VerificationSerializer(serializers.ModelSerializer):
    userId = serializers.IntegerField(source="user_id", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Verification
        fields = ["id", "userId", "status", "comment", "latitude", "longitude", "createdAt"]


class ComplaintSerializer(serializers.ModelSerializer):
    """Complaint as consumed by the mobile client."""

    id = serializers.CharField(source="complaint_id", read_only=True)
    userId = serializers.IntegerField(source="user_id", read_only=True)
    confidenceScore = serializers.IntegerField(source="confidence_score", read_only=True)
    verificationCount = serializers.IntegerField(source="verification_count", read_only=True)
    verificationStatus = serializers.CharField(source="verification_status", read_only=True)
    statusHistory = StatusHistorySerializer(source="status_history", many=True, read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Complaint
        fields = [
            "id",
            "userId",
            "image",
            "latitude",
            "longitude",
            "location",
            "category",
            "severity",
            "status",
            "description",
            "notes",
            "confidenceScore",
            "verificationCount",
            "verificationStatus",
            "statusHistory",
            "createdAt",
            "updatedAt",
        ]


class ComplaintDetailSerializer(ComplaintSerializer):
    verifications = VerificationSerializer(many=True, read_only=True)

    class Meta(ComplaintSerializer.Meta):
        fields = ComplaintSerializer.Meta.fields + ["verifications"]


class NearbyComplaintSerializer(ComplaintSerializer):
    distanceKm = serializers.SerializerMethodField()

    class Meta(ComplaintSerializer.Meta):
        fields = ComplaintSerializer.Meta.fields + ["distanceKm"]

    def get_distanceKm(self, obj):
        distance = getattr(obj, "distance_km", None)
        return round(distance, 3) if distance is not None else None


class ComplaintCreateSerializer(serializers.Serializer):
    image = serializers.CharField()
    latitude = serializers.FloatField(min_value=-90, max_value=90)
    longitude = serializers.FloatField(min_value=-180, max_value=180)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    userId = serializers.IntegerField(required=False, allow_null=True)


class StatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Complaint.STATUS_CHOICES)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class VerifySerializer(serializers.Serializer):
    userId = serializers.IntegerField()
    status = serializers.ChoiceField(choices=Verification.VOTE_CHOICES)
    photo = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    comment = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    latitude = serializers.FloatField(required=False, allow_null=True, min_value=-90, max_value=90)
    longitude = serializers.FloatField(
        required=False, allow_null=True, min_value=-180, max_value=180
    )


class BadgeSerializer(serializers.ModelSerializer):
    class Meta:
        model = Badge
        fields = ["id", "key", "name", "description", "icon", "threshold", "category"]


class UserSerializer(serializers.ModelSerializer):
    """Profile with earned badges and computed rank."""

    avatarUrl = serializers.CharField(source="avatar_url", read_only=True)
    totalReports = serializers.IntegerField(source="total_reports", read_only=True)
    totalVerifications = serializers.IntegerField(source="total_verifications", read_only=True)
    badges = BadgeSerializer(many=True, read_only=True)
    rank = serializers.IntegerField(read_only=True)

    class Meta:
        model = Citizen
        fields = [
            "id",
            "phone",
            "name",
            "avatarUrl",
            "points",
            "totalReports",
            "totalVerifications",
            "streak",
            "language",
            "badges",
            "rank",
        ]


class LeaderboardEntrySerializer(serializers.ModelSerializer):
    totalReports = serializers.IntegerField(source="total_reports", read_only=True)
    totalVerifications = serializers.IntegerField(source="total_verifications", read_only=True)
    rank = serializers.IntegerField(source="computed_rank", read_only=True)

    class Meta:
        model = Citizen
        fields = ["id", "name", "points", "totalReports", "totalVerifications", "rank"]


class LoginSerializer(serializers.Serializer):
    phone = serializers.CharField(max_length=20)
    name = serializers.CharField(max_length=100, required=False, allow_blank=True)


class ProfileUpdateSerializer(serializers.Serializer):
    userId = serializers.IntegerField()
    name = serializers.CharField(max_length=100, required=False)
    language = serializers.CharField(max_length=10, required=False)


class HotspotSerializer(serializers.ModelSerializer):
    riskScore = serializers.IntegerField(source="risk_score", read_only=True)
    predictedDate = serializers.DateTimeField(source="predicted_date", read_only=True)
    recommendedAction = serializers.CharField(source="recommended_action", read_only=True)

    class Meta:
        model = Hotspot
        fields = [
            "id",
            "latitude",
            "longitude",
            "category",
            "riskScore",
            "predictedDate",
            "factors",
            "recommendedAction",
        ]


class NotificationSerializer(serializers.ModelSerializer):
    read = serializers.BooleanField(source="is_read", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Notification
        fields = ["id", "title", "body", "type", "data", "read", "createdAt"]


class ChallengeSerializer(serializers.ModelSerializer):
    targetAction = serializers.CharField(source="target_action", read_only=True)
    targetCount = serializers.IntegerField(source="target_count", read_only=True)
    rewardPoints = serializers.IntegerField(source="reward_points", read_only=True)
    endsAt = serializers.DateTimeField(source="ends_at", read_only=True)
    progress = serializers.IntegerField(read_only=True)
    completed = serializers.BooleanField(read_only=True)

    class Meta:
        model = Challenge
        fields = [
            "id",
            "title",
            "description",
            "targetAction",
            "targetCount",
            "rewardPoints",
            "endsAt",
            "progress",
            "completed",
        ]
