from django.urls import path
from complaints.api.views import (
    BadgeListView,
    ChallengeListView,
    ComplaintDetailView,
    ComplaintListView,
    ComplaintStatusView,
    ComplaintVerifyView,
    HotspotListView,
    LeaderboardView,
    LoginView,
    NearbyUnverifiedView,
    NotificationListView,
    NotificationReadView,
    ProfileView,
    StatsView,
)

urlpatterns = [
    # Complaint endpoints
    path("complaints", ComplaintListView.as_view(), name="complaint-list"),
    # Must stay ahead of the detail route
    path(
        "complaints/nearby-unverified",
        NearbyUnverifiedView.as_view(),
        name="complaint-nearby-unverified",
    ),
    path("complaints/<str:complaint_id>", ComplaintDetailView.as_view(), name="complaint-detail"),
    path(
        "complaints/<str:complaint_id>/status",
        ComplaintStatusView.as_view(),
        name="complaint-status",
    ),
    path(
        "complaints/<str:complaint_id>/verify",
        ComplaintVerifyView.as_view(),
        name="complaint-verify",
    ),
    path("stats", StatsView.as_view(), name="stats"),
    # Gamification endpoints
    path("leaderboard", LeaderboardView.as_view(), name="leaderboard"),
    path("badges", BadgeListView.as_view(), name="badge-list"),
    path("challenges", ChallengeListView.as_view(), name="challenge-list"),
    path("hotspots", HotspotListView.as_view(), name="hotspot-list"),
    # User endpoints
    path("auth/login", LoginView.as_view(), name="login"),
    path("user/profile", ProfileView.as_view(), name="user-profile"),
    path("notifications", NotificationListView.as_view(), name="notification-list"),
    path(
        "notifications/<int:notification_id>/read",
        NotificationReadView.as_view(),
        name="notification-read",
    ),
]
