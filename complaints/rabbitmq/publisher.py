import json
import logging
import pika
from django.conf import settings

logger = logging.getLogger(__name__)


class RabbitMQPublisher:
    """RabbitMQ publisher for complaint lifecycle events."""

    def __init__(self):
        """Initialize RabbitMQ publisher with configuration from settings."""
        self.connection = None
        self.channel = None
        self._initialize_connection()

    def _initialize_connection(self):
        """Initialize the RabbitMQ connection and channel."""
        try:
            credentials = pika.PlainCredentials(settings.RABBITMQ_USER, settings.RABBITMQ_PASSWORD)
            parameters = pika.ConnectionParameters(
                host=settings.RABBITMQ_HOST,
                port=settings.RABBITMQ_PORT,
                virtual_host=settings.RABBITMQ_VHOST,
                credentials=credentials,
                heartbeat=600,
                blocked_connection_timeout=300,
            )
            self.connection = pika.BlockingConnection(parameters)
            self.channel = self.connection.channel()

            # Declare queues to ensure they exist
            for queue in (
                settings.RABBITMQ_COMPLAINT_STATUS_CHANGED_QUEUE,
                settings.RABBITMQ_COMPLAINT_VERIFIED_QUEUE,
                settings.RABBITMQ_BADGE_UNLOCKED_QUEUE,
            ):
                self.channel.queue_declare(queue=queue, durable=True)

            logger.info("RabbitMQ publisher initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize RabbitMQ publisher: {str(e)}")
            self.connection = None
            self.channel = None

    def publish(self, queue: str, message: dict) -> bool:
        """
        Publish a persistent JSON message to a queue.

        Returns:
            bool: True if successful, False otherwise
        """
        if not self.channel:
            logger.warning("RabbitMQ channel not initialized, attempting to reconnect")
            self._initialize_connection()
            if not self.channel:
                logger.error("Failed to reconnect to RabbitMQ")
                return False

        try:
            self.channel.basic_publish(
                exchange="",
                routing_key=queue,
                body=json.dumps(message),
                properties=pika.BasicProperties(
                    delivery_mode=2, content_type="application/json"  # Make message persistent
                ),
            )
            logger.info(f"Published {queue} event: {message}")
            return True

        except Exception as e:
            logger.error(f"Failed to publish {queue} event: {str(e)}")
            # Try to reconnect for next time
            self._close()
            return False

    def _close(self):
        """Close the RabbitMQ connection."""
        try:
            if self.connection and not self.connection.is_closed:
                self.connection.close()
                logger.info("RabbitMQ connection closed")
        except Exception as e:
            logger.error(f"Error closing RabbitMQ connection: {str(e)}")
        finally:
            self.connection = None
            self.channel = None

    def __del__(self):
        """Cleanup on object destruction."""
        self._close()


# Global publisher instance
_publisher = None


def get_publisher() -> RabbitMQPublisher:
    """Get or create the global publisher instance."""
    global _publisher
    if _publisher is None:
        _publisher = RabbitMQPublisher()
    return _publisher


def _publish(queue: str, message: dict) -> bool:
    if not settings.EVENTS_ENABLED:
        logger.debug(f"Events disabled, skipping {queue}")
        return False
    return get_publisher().publish(queue, message)


def publish_complaint_status_changed(
    complaint_id: str, status: str, notes: str = None, user_id: int = None
) -> bool:
    """
    Publish a complaint.status.changed event.

    Args:
        complaint_id: External complaint identifier
        status: The status the complaint moved to
        notes: Optional note attached to the transition
        user_id: Owner of the complaint, if any

    Returns:
        bool: True if successful, False otherwise
    """
    return _publish(
        settings.RABBITMQ_COMPLAINT_STATUS_CHANGED_QUEUE,
        {"complaintId": complaint_id, "status": status, "notes": notes, "userId": user_id},
    )


def publish_complaint_verified(
    complaint_id: str, verification_status: str, yes_votes: int, no_votes: int
) -> bool:
    """Publish a complaint.verified event when community consensus is reached."""
    return _publish(
        settings.RABBITMQ_COMPLAINT_VERIFIED_QUEUE,
        {
            "complaintId": complaint_id,
            "verificationStatus": verification_status,
            "yesVotes": yes_votes,
            "noVotes": no_votes,
        },
    )


def publish_badge_unlocked(user_id: int, badge_key: str) -> bool:
    """Publish a badge.unlocked event."""
    return _publish(
        settings.RABBITMQ_BADGE_UNLOCKED_QUEUE, {"userId": user_id, "badgeKey": badge_key}
    )
