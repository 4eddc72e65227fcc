import logging
from django.conf import settings
from django.db import transaction
from django.db.models import Count, F, Q
from complaints.exceptions import InvalidVote, UserNotFound
from complaints.models import Citizen, Complaint, Notification, Verification
from complaints.rabbitmq.publisher import publish_complaint_verified
from complaints.services.followups import FollowUps
from complaints.services.gamification_service import GamificationService
from complaints.services.lifecycle_service import LifecycleService, lock_complaint
from complaints.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

VALID_VOTES = [choice for choice, _ in Verification.VOTE_CHOICES]

# Consensus outcomes
CONSENSUS_NONE = "none"
CONSENSUS_VERIFIED = Complaint.VERIFICATION_VERIFIED
CONSENSUS_FIXED = Complaint.VERIFICATION_FIXED

AUTO_RESOLVE_NOTE = "Auto-resolved: community verified the issue is fixed"


class VerificationService:
    """
    Community verification of complaints.

    Voting is not idempotent: every call records a new vote, including repeat
    votes by the same user, and each one counts towards consensus.
    """

    def __init__(self):
        self.lifecycle = LifecycleService()
        self.gamification = GamificationService()
        self.notifications = NotificationService()

    def cast_vote(
        self,
        complaint_id: str,
        user_id: int,
        vote: str,
        photo: str = None,
        comment: str = None,
        latitude: float = None,
        longitude: float = None,
    ) -> dict:
        """
        Record a vote and re-evaluate consensus for the complaint.

        The insert, the counter bump, the tally and any resulting transition
        happen under the complaint's row lock, so concurrent votes are
        serialized and a threshold crossing cannot be missed. Crediting the
        voter runs afterwards as a follow-up.

        Returns:
            dict: ``complaint`` (reloaded with history and verifications),
            ``consensus``, ``tally``, ``points_earned``, ``new_badges``, ``warnings``
        """
        if vote not in VALID_VOTES:
            raise InvalidVote(f"Invalid verification status: {vote}", details={"allowed": VALID_VOTES})

        user = Citizen.objects.filter(pk=user_id).first()
        if user is None:
            raise UserNotFound(f"User {user_id} not found")

        followups = FollowUps()
        with transaction.atomic():
            complaint = lock_complaint(complaint_id)

            Verification.objects.create(
                complaint=complaint,
                user=user,
                status=vote,
                photo=photo,
                comment=comment,
                latitude=latitude,
                longitude=longitude,
            )
            Complaint.objects.filter(pk=complaint.pk).update(
                verification_count=F("verification_count") + 1
            )
            complaint.refresh_from_db()

            tally = self.tally(complaint)
            consensus = self._apply_consensus(complaint, tally, followups)

        logger.info(
            f"User {user.pk} voted {vote} on {complaint.complaint_id} "
            f"(yes={tally['yes']}, no={tally['no']}, consensus={consensus})"
        )

        reward = followups.run(
            "verification_points", self.gamification.record_verification, user.pk, complaint
        )
        if followups.degraded:
            logger.warning(f"Vote on {complaint.complaint_id} recorded with {followups.warnings}")

        complaint = Complaint.objects.prefetch_related("status_history", "verifications").get(
            pk=complaint.pk
        )
        return {
            "complaint": complaint,
            "consensus": consensus,
            "tally": tally,
            "points_earned": reward["points_earned"] if reward else 0,
            "new_badges": reward["new_badges"] if reward else [],
            "warnings": followups.warnings,
        }

    def tally(self, complaint: Complaint) -> dict:
        """Count every vote ever cast on the complaint."""
        counts = Verification.objects.filter(complaint=complaint).aggregate(
            yes=Count("id", filter=Q(status=Verification.VOTE_YES)),
            no=Count("id", filter=Q(status=Verification.VOTE_NO)),
            total=Count("id"),
        )
        return {"yes": counts["yes"], "no": counts["no"], "total": counts["total"]}

    def _apply_consensus(self, complaint: Complaint, tally: dict, followups: FollowUps) -> str:
        """
        First match wins:
        enough "yes" votes mark the complaint verified without touching its status;
        otherwise enough "no" votes mark it fixed and resolve it.
        """
        if tally["yes"] >= settings.VERIFICATION_YES_THRESHOLD:
            if complaint.verification_status != Complaint.VERIFICATION_VERIFIED:
                complaint.verification_status = Complaint.VERIFICATION_VERIFIED
                complaint.save(update_fields=["verification_status", "updated_at"])
                self._announce(complaint, tally, followups)
            return CONSENSUS_VERIFIED

        if tally["no"] >= settings.VERIFICATION_NO_THRESHOLD:
            if complaint.verification_status == Complaint.VERIFICATION_FIXED:
                # Verdict already recorded: a complaint reopened by hand stays open
                return CONSENSUS_FIXED

            complaint.verification_status = Complaint.VERIFICATION_FIXED
            if complaint.status != Complaint.STATUS_RESOLVED:
                self.lifecycle.apply(
                    complaint, Complaint.STATUS_RESOLVED, AUTO_RESOLVE_NOTE, followups
                )
            else:
                # Already resolved by hand: record the verdict without a second transition
                complaint.save(update_fields=["verification_status", "updated_at"])

            self._announce(complaint, tally, followups)
            return CONSENSUS_FIXED

        return CONSENSUS_NONE

    def _announce(self, complaint: Complaint, tally: dict, followups: FollowUps):
        logger.info(
            f"Community consensus on {complaint.complaint_id}: {complaint.verification_status}"
        )
        if complaint.user_id is not None:
            followups.run(
                "verification_notification",
                self.notifications.notify,
                complaint.user,
                title="Community verified your complaint",
                body=f"Neighbours marked {complaint.complaint_id} as {complaint.verification_status}.",
                type=Notification.TYPE_VERIFICATION,
                data={
                    "complaintId": complaint.complaint_id,
                    "verificationStatus": complaint.verification_status,
                },
            )
        transaction.on_commit(
            lambda: publish_complaint_verified(
                complaint.complaint_id, complaint.verification_status, tally["yes"], tally["no"]
            )
        )
