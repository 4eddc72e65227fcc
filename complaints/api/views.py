import math
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from complaints.api.serializers import (
    BadgeSerializer,
    ChallengeSerializer,
    ComplaintCreateSerializer,
    ComplaintDetailSerializer,
    ComplaintSerializer,
    HotspotSerializer,
    LeaderboardEntrySerializer,
    LoginSerializer,
    NearbyComplaintSerializer,
    NotificationSerializer,
    ProfileUpdateSerializer,
    StatusUpdateSerializer,
    UserSerializer,
    VerifySerializer,
)
from complaints.exceptions import InvalidInput
from complaints.models import Badge, Hotspot
from complaints.services.complaint_service import ComplaintService
from complaints.services.gamification_service import GamificationService
from complaints.services.geo_service import GeoService
from complaints.services.lifecycle_service import LifecycleService
from complaints.services.notification_service import NotificationService
from complaints.services.user_service import UserService
from complaints.services.verification_service import VerificationService

LEADERBOARD_DEFAULT_LIMIT = 50
LEADERBOARD_MAX_LIMIT = 100


def _float_param(request, name, required=True):
    raw = request.query_params.get(name)
    if raw in (None, ""):
        if required:
            raise InvalidInput(f"Query parameter '{name}' is required")
        return None
    try:
        value = float(raw)
    except ValueError:
        raise InvalidInput(f"Query parameter '{name}' must be a number")
    if not math.isfinite(value):
        raise InvalidInput(f"Query parameter '{name}' must be a number")
    return value


def _int_param(request, name, default=None):
    raw = request.query_params.get(name)
    if raw in (None, ""):
        if default is None:
            raise InvalidInput(f"Query parameter '{name}' is required")
        return default
    try:
        return int(raw)
    except ValueError:
        raise InvalidInput(f"Query parameter '{name}' must be an integer")


def _with_rewards(payload: dict, result: dict) -> dict:
    payload["pointsEarned"] = result["points_earned"]
    payload["newBadges"] = BadgeSerializer(result["new_badges"], many=True).data
    if result["warnings"]:
        payload["warnings"] = result["warnings"]
    return payload


class ComplaintListView(APIView):
    """
    GET  /api/complaints?category=&status=   newest first
    POST /api/complaints                     submit a complaint

    Request body for POST:
    {
        "image": "<base64>",
        "latitude": 12.9716,
        "longitude": 77.5946,
        "notes": "Big pothole near the bus stop",
        "userId": 1
    }
    """

    def get(self, request):
        service = ComplaintService()
        complaints = service.list_complaints(
            category=request.query_params.get("category") or None,
            status=request.query_params.get("status") or None,
        )
        return Response(ComplaintSerializer(complaints, many=True).data)

    def post(self, request):
        serializer = ComplaintCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        service = ComplaintService()
        result = service.create_complaint(
            {
                "image": data["image"],
                "latitude": data["latitude"],
                "longitude": data["longitude"],
                "notes": data.get("notes") or None,
                "user_id": data.get("userId"),
            }
        )

        payload = dict(ComplaintSerializer(result["complaint"]).data)
        return Response(_with_rewards(payload, result), status=status.HTTP_201_CREATED)


class ComplaintDetailView(APIView):
    """
    GET /api/complaints/{complaint_id}

    Includes the status history and every verification vote.
    """

    def get(self, request, complaint_id):
        complaint = ComplaintService().get_complaint(complaint_id)
        return Response(ComplaintDetailSerializer(complaint).data)


class ComplaintStatusView(APIView):
    """
    PUT /api/complaints/{complaint_id}/status

    Request body:
    {
        "status": "Assigned",
        "notes": "dispatched"
    }
    """

    def put(self, request, complaint_id):
        serializer = StatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        service = LifecycleService()
        result = service.transition(
            complaint_id,
            serializer.validated_data["status"],
            serializer.validated_data.get("notes") or None,
        )

        complaint = ComplaintService().get_complaint(complaint_id)
        payload = dict(ComplaintDetailSerializer(complaint).data)
        if result["warnings"]:
            payload["warnings"] = result["warnings"]
        return Response(payload)


class ComplaintVerifyView(APIView):
    """
    POST /api/complaints/{complaint_id}/verify

    Not idempotent: each call records another vote.

    Request body:
    {
        "userId": 7,
        "status": "yes" | "no" | "cant_verify",
        "photo": "<base64>",
        "comment": "Still there this morning"
    }
    """

    def post(self, request, complaint_id):
        serializer = VerifySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        service = VerificationService()
        result = service.cast_vote(
            complaint_id,
            data["userId"],
            data["status"],
            photo=data.get("photo") or None,
            comment=data.get("comment") or None,
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
        )

        payload = {
            "complaint": ComplaintDetailSerializer(result["complaint"]).data,
            "consensus": result["consensus"],
        }
        return Response(_with_rewards(payload, result), status=status.HTTP_201_CREATED)


class NearbyUnverifiedView(APIView):
    """
    GET /api/complaints/nearby-unverified?lat=&lng=&radius=

    ``radius`` is in kilometers.
    """

    def get(self, request):
        latitude = _float_param(request, "lat")
        longitude = _float_param(request, "lng")
        radius = _float_param(request, "radius", required=False)
        if radius is not None and radius <= 0:
            raise InvalidInput("Query parameter 'radius' must be positive")

        complaints = GeoService().nearby_unverified(latitude, longitude, radius)
        return Response(NearbyComplaintSerializer(complaints, many=True).data)


class StatsView(APIView):
    """GET /api/stats"""

    def get(self, request):
        return Response(ComplaintService().get_stats())


class LeaderboardView(APIView):
    """GET /api/leaderboard?limit="""

    def get(self, request):
        limit = _int_param(request, "limit", default=LEADERBOARD_DEFAULT_LIMIT)
        limit = max(1, min(limit, LEADERBOARD_MAX_LIMIT))
        users = GamificationService().leaderboard(limit)
        return Response(LeaderboardEntrySerializer(users, many=True).data)


class BadgeListView(APIView):
    """GET /api/badges"""

    def get(self, request):
        return Response(BadgeSerializer(Badge.objects.all(), many=True).data)


class HotspotListView(APIView):
    """GET /api/hotspots"""

    def get(self, request):
        return Response(HotspotSerializer(Hotspot.objects.all(), many=True).data)


class LoginView(APIView):
    """
    POST /api/auth/login

    Request body:
    {
        "phone": "+919876543210",
        "name": "Asha"
    }
    """

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = UserService().login(
            serializer.validated_data["phone"], serializer.validated_data.get("name")
        )
        return Response(
            {
                "success": True,
                "user": UserSerializer(result["user"]).data,
                "token": result["token"],
            },
            status=status.HTTP_201_CREATED if result["created"] else status.HTTP_200_OK,
        )


class ProfileView(APIView):
    """
    GET /api/user/profile?userId=
    PUT /api/user/profile   {"userId": 1, "name": "...", "language": "kn"}
    """

    def get(self, request):
        user = UserService().get_profile(_int_param(request, "userId"))
        return Response(UserSerializer(user).data)

    def put(self, request):
        serializer = ProfileUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        user = UserService().update_profile(
            data["userId"], name=data.get("name"), language=data.get("language")
        )
        return Response(UserSerializer(user).data)


class ChallengeListView(APIView):
    """GET /api/challenges?userId="""

    def get(self, request):
        challenges = UserService().challenges(_int_param(request, "userId"))
        return Response(ChallengeSerializer(challenges, many=True).data)


class NotificationListView(APIView):
    """GET /api/notifications?userId=&unread=true"""

    def get(self, request):
        unread_only = request.query_params.get("unread", "").lower() in ("1", "true", "yes")
        notifications = NotificationService().list_for_user(
            _int_param(request, "userId"), unread_only=unread_only
        )
        return Response(NotificationSerializer(notifications, many=True).data)


class NotificationReadView(APIView):
    """PUT /api/notifications/{notification_id}/read"""

    def put(self, request, notification_id):
        notification = NotificationService().mark_read(notification_id)
        return Response(NotificationSerializer(notification).data)
