import logging
import random
import string
import time
from django.db import transaction
from django.db.models import Count
from django.utils import timezone
from complaints.exceptions import ComplaintNotFound, InvalidInput, UserNotFound
from complaints.models import Citizen, Complaint, StatusHistory
from complaints.services.classifier import get_classifier
from complaints.services.followups import FollowUps
from complaints.services.gamification_service import GamificationService
from complaints.services.geo_service import GeoService, reverse_geocode

logger = logging.getLogger(__name__)

BASE36_ALPHABET = string.digits + string.ascii_uppercase

DESCRIPTION_TEMPLATES = {
    Complaint.CATEGORY_POTHOLE: [
        "Large pothole detected on the main road, causing traffic disruption and potential vehicle damage.",
        "Deep pothole identified near the junction, filled with water and hard to see for drivers.",
        "Crumbling asphalt with sharp edges detected, posing immediate risk to two-wheelers.",
    ],
    Complaint.CATEGORY_GARBAGE: [
        "Overflowing garbage bin with waste spilling onto the sidewalk, creating unsanitary conditions.",
        "Accumulated municipal waste not collected for several days, affecting nearby residents.",
        "Plastic waste scattered across the area, indicating need for more frequent collection.",
    ],
    Complaint.CATEGORY_STREETLIGHT: [
        "Non-functional streetlight creating a safety hazard for pedestrians and vehicles after sunset.",
        "Flickering streetlight with intermittent functionality and inadequate illumination.",
        "Broken light fixture with exposed wiring, posing electrocution risk during rain.",
    ],
    Complaint.CATEGORY_DRAINAGE: [
        "Clogged storm drain causing water accumulation on the road and a mosquito breeding ground.",
        "Missing drain cover exposing an open manhole, dangerous for pedestrians at night.",
        "Sewage backup visible on the street surface, causing foul smell and contamination risk.",
    ],
    Complaint.CATEGORY_OTHER: [
        "Damaged road signage creating confusion for drivers at the junction.",
        "Broken footpath tiles creating a tripping hazard for pedestrians.",
        "Overgrown vegetation obstructing visibility at the intersection.",
    ],
}

CATEGORIES = [choice for choice, _ in Complaint.CATEGORY_CHOICES]
STATUSES = [choice for choice, _ in Complaint.STATUS_CHOICES]


def _base36(number: int) -> str:
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits)) or "0"


def generate_complaint_id() -> str:
    """``NN`` + base36 millisecond timestamp + 4 random base36 characters."""
    suffix = "".join(random.choices(BASE36_ALPHABET, k=4))
    return f"NN{_base36(int(time.time() * 1000))}{suffix}"


def describe(category: str, location: str) -> str:
    templates = DESCRIPTION_TEMPLATES.get(category, DESCRIPTION_TEMPLATES[Complaint.CATEGORY_OTHER])
    return f"{random.choice(templates)} Location: {location}."


class ComplaintService:
    """Submission, lookup and aggregate statistics for complaints."""

    def __init__(self, classifier=None):
        self.classifier = classifier or get_classifier()
        self.gamification = GamificationService()
        self.geo = GeoService()

    def list_complaints(self, category: str = None, status: str = None):
        """Complaints newest first, optionally filtered by category and status."""
        if category and category not in CATEGORIES:
            raise InvalidInput(f"Invalid category: {category}", details={"allowed": CATEGORIES})
        if status and status not in STATUSES:
            raise InvalidInput(f"Invalid status: {status}", details={"allowed": STATUSES})

        queryset = Complaint.objects.prefetch_related("status_history").order_by("-created_at", "-id")
        if category:
            queryset = queryset.filter(category=category)
        if status:
            queryset = queryset.filter(status=status)
        return list(queryset)

    def get_complaint(self, complaint_id: str) -> Complaint:
        complaint = (
            Complaint.objects.prefetch_related("status_history", "verifications")
            .filter(complaint_id=complaint_id)
            .first()
        )
        if complaint is None:
            raise ComplaintNotFound(f"Complaint {complaint_id} not found")
        return complaint

    def create_complaint(self, data: dict) -> dict:
        """
        Submit a new complaint.

        Creates the complaint in ``Reported`` with its first history entry, then
        credits the reporter. Crediting is a follow-up: if it fails the complaint
        still exists and the failure is reported in ``warnings``.

        Args:
            data: ``image``, ``latitude``, ``longitude`` and optional ``notes``,
                  ``user_id``

        Returns:
            dict: ``complaint``, ``points_earned``, ``new_badges``, ``warnings``
        """
        user = None
        if data.get("user_id") is not None:
            user = Citizen.objects.filter(pk=data["user_id"]).first()
            if user is None:
                raise UserNotFound(f"User {data['user_id']} not found")

        latitude = data["latitude"]
        longitude = data["longitude"]
        notes = data.get("notes")

        classification = self.classifier.classify(data["image"], notes)
        location = reverse_geocode(latitude, longitude)

        followups = FollowUps()
        reward = None
        with transaction.atomic():
            first_in_area = not self.geo.has_open_complaint_nearby(
                latitude, longitude, classification.category
            )
            complaint = Complaint.objects.create(
                complaint_id=generate_complaint_id(),
                user=user,
                image=data["image"],
                latitude=latitude,
                longitude=longitude,
                location=location,
                category=classification.category,
                severity=classification.severity,
                status=Complaint.STATUS_REPORTED,
                description=describe(classification.category, location),
                notes=notes,
                confidence_score=classification.confidence,
                ai_models_used=list(classification.models_used),
            )
            StatusHistory.objects.create(complaint=complaint, status=Complaint.STATUS_REPORTED)

            if user is not None:
                reward = followups.run(
                    "report_points",
                    self.gamification.record_report,
                    user.pk,
                    complaint,
                    first_in_area,
                )

        logger.info(f"Created complaint: {complaint.complaint_id} - {complaint.category}")
        if followups.degraded:
            logger.warning(f"Complaint {complaint.complaint_id} created with {followups.warnings}")
        return {
            "complaint": complaint,
            "points_earned": reward["points_earned"] if reward else 0,
            "new_badges": reward["new_badges"] if reward else [],
            "warnings": followups.warnings,
        }

    def apply_classification(self, complaint_id: str, category: str, confidence: int = None):
        """Apply a category produced asynchronously by the image model."""
        if category not in CATEGORIES:
            raise InvalidInput(f"Invalid category: {category}", details={"allowed": CATEGORIES})
        if confidence is not None:
            try:
                confidence = int(confidence)
            except (TypeError, ValueError):
                raise InvalidInput(
                    "confidence must be an integer", details={"confidence": repr(confidence)}
                )

        with transaction.atomic():
            complaint = Complaint.objects.select_for_update().filter(complaint_id=complaint_id).first()
            if complaint is None:
                raise ComplaintNotFound(f"Complaint {complaint_id} not found")

            complaint.category = category
            update_fields = ["category", "updated_at"]
            if confidence is not None:
                complaint.confidence_score = max(0, min(100, confidence))
                update_fields.append("confidence_score")
            complaint.save(update_fields=update_fields)

        logger.info(f"Complaint {complaint_id} reclassified as {category}")
        return complaint

    def get_stats(self) -> dict:
        """Totals by category and status, plus open, resolved and today counts."""
        by_category = dict.fromkeys(CATEGORIES, 0)
        for row in Complaint.objects.values("category").annotate(total=Count("id")):
            by_category[row["category"]] = row["total"]

        by_status = dict.fromkeys(STATUSES, 0)
        for row in Complaint.objects.values("status").annotate(total=Count("id")):
            by_status[row["status"]] = row["total"]

        today_start = timezone.localtime().replace(hour=0, minute=0, second=0, microsecond=0)

        return {
            "total": sum(by_status.values()),
            "open": sum(by_status[status] for status in Complaint.OPEN_STATUSES),
            "resolved": by_status[Complaint.STATUS_RESOLVED],
            "today": Complaint.objects.filter(created_at__gte=today_start).count(),
            "byCategory": by_category,
            "byStatus": by_status,
        }
