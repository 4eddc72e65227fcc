import logging
from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import receiver
from complaints.models import StatusHistory
from complaints.rabbitmq.publisher import publish_complaint_status_changed

logger = logging.getLogger(__name__)


@receiver(post_save, sender=StatusHistory)
def status_history_post_save(sender, instance, created, **kwargs):
    """Publish complaint.status.changed once the transition has committed."""
    if not created:
        return

    complaint = instance.complaint
    logger.debug(f"Queueing status event for {complaint.complaint_id} ({instance.status})")
    transaction.on_commit(
        lambda: publish_complaint_status_changed(
            complaint.complaint_id, instance.status, instance.notes, complaint.user_id
        )
    )
