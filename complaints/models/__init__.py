from .citizen import Citizen
from .complaint import Complaint, StatusHistory, Verification
from .gamification import Badge, UserBadge, PointTransaction, Challenge, UserChallenge
from .hotspot import Hotspot
from .notification import Notification

__all__ = [
    "Citizen",
    "Complaint",
    "StatusHistory",
    "Verification",
    "Badge",
    "UserBadge",
    "PointTransaction",
    "Challenge",
    "UserChallenge",
    "Hotspot",
    "Notification",
]
