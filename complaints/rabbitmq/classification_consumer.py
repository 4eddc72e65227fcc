"""
RabbitMQ consumer for classification.completed events.

The image model service classifies uploaded photos asynchronously and
publishes its verdict here. Receiving one re-categorizes the complaint.

Usage:
    python manage.py run_classification_consumer
"""
import logging
from django.conf import settings
from complaints.exceptions import InvalidInput
from complaints.rabbitmq.consumer import RabbitMQConsumer, create_message_handler
from complaints.services.complaint_service import ComplaintService

logger = logging.getLogger(__name__)


def handle_classification_completed(message: dict):
    """
    Handle classification.completed events from the image model service.

    Expected message format:
    {
        "complaintId": "NNLX2K9QZ4AB1",
        "category": "pothole",
        "confidence": 91
    }

    Raises:
        InvalidInput: required fields are missing or the category is unknown
        ComplaintNotFound: no complaint has this identifier
    """
    complaint_id = message.get("complaintId")
    category = message.get("category")

    if not complaint_id or not category:
        logger.error(f"classification.completed event missing fields: {message}")
        raise InvalidInput("complaintId and category are required")

    logger.info(f"[Classification] {complaint_id} classified as {category}")
    ComplaintService().apply_classification(complaint_id, category, message.get("confidence"))


def main():
    """Run the classification.completed consumer."""
    queue_name = settings.RABBITMQ_CLASSIFICATION_COMPLETED_QUEUE

    print(f"\n{'=' * 60}")
    print("Starting classification.completed consumer")
    print(f"Queue: {queue_name}")
    print(f"RabbitMQ Host: {settings.RABBITMQ_HOST}:{settings.RABBITMQ_PORT}")
    print(f"{'=' * 60}\n")

    consumer = RabbitMQConsumer(queue_name)
    callback = create_message_handler(handle_classification_completed)

    try:
        print(f"[Classification] Listening for events on '{queue_name}'...\n")
        consumer.consume(callback)
    except KeyboardInterrupt:
        print("\n[Classification] Consumer stopped by user")
        consumer.stop()
