import logging
from django.db import transaction
from complaints.exceptions import ComplaintNotFound, InvalidStatus
from complaints.models import Complaint, Notification, StatusHistory
from complaints.services.followups import FollowUps
from complaints.services.gamification_service import GamificationService
from complaints.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

VALID_STATUSES = [choice for choice, _ in Complaint.STATUS_CHOICES]


def lock_complaint(complaint_id: str) -> Complaint:
    """
    Fetch a complaint holding its row lock until the surrounding transaction
    ends. Every status or verification change goes through this lock.
    """
    complaint = Complaint.objects.select_for_update().filter(complaint_id=complaint_id).first()
    if complaint is None:
        raise ComplaintNotFound(f"Complaint {complaint_id} not found")
    return complaint


class LifecycleService:
    """
    State machine for complaint status: Reported -> Assigned -> In Progress -> Resolved.

    Manual updates may set any status from any other. Automatic transitions
    (community consensus) only ever move a complaint to Resolved.
    """

    def __init__(self):
        self.gamification = GamificationService()
        self.notifications = NotificationService()

    def transition(self, complaint_id: str, new_status: str, notes: str = None) -> dict:
        """
        Move a complaint to ``new_status`` and append the history entry.

        Args:
            complaint_id: External complaint identifier
            new_status: One of Complaint.STATUS_CHOICES
            notes: Optional note stored with the history entry

        Returns:
            dict: ``complaint`` and the ``warnings`` of degraded follow-ups

        Raises:
            InvalidStatus: ``new_status`` is not a known status
            ComplaintNotFound: no complaint has this identifier
        """
        if new_status not in VALID_STATUSES:
            raise InvalidStatus(
                f"Invalid status: {new_status}", details={"allowed": VALID_STATUSES}
            )

        followups = FollowUps()
        with transaction.atomic():
            complaint = lock_complaint(complaint_id)
            self.apply(complaint, new_status, notes, followups)

        return {"complaint": complaint, "warnings": followups.warnings}

    def apply(self, complaint: Complaint, new_status: str, notes: str, followups: FollowUps):
        """
        Transition a complaint whose row lock the caller already holds.

        Notifications and resolution points run as follow-ups: their failure
        never reverts the transition itself.
        """
        previous_status = complaint.status
        complaint.status = new_status
        complaint.save(update_fields=["status", "verification_status", "updated_at"])
        StatusHistory.objects.create(complaint=complaint, status=new_status, notes=notes)

        logger.info(
            f"Complaint {complaint.complaint_id} moved {previous_status} -> {new_status}"
        )

        if complaint.user_id is not None:
            followups.run(
                "status_notification",
                self.notifications.notify,
                complaint.user,
                title=f"Complaint {new_status}",
                body=notes or f"Your complaint {complaint.complaint_id} is now {new_status}.",
                type=Notification.TYPE_STATUS_UPDATE,
                data={"complaintId": complaint.complaint_id, "status": new_status},
            )

        if new_status == Complaint.STATUS_RESOLVED:
            followups.run("resolution_points", self.gamification.record_resolution, complaint)
