import json
import logging
import pika
from django.conf import settings
from rest_framework.exceptions import NotFound, ValidationError

logger = logging.getLogger(__name__)


class RabbitMQConsumer:
    """Blocking consumer bound to a single durable queue."""

    def __init__(self, queue_name: str, prefetch_count: int = 1):
        self.queue_name = queue_name
        self.prefetch_count = prefetch_count
        self.connection = None
        self.channel = None
        self._initialize_connection()

    def _initialize_connection(self):
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
            self.channel.queue_declare(queue=self.queue_name, durable=True)
            self.channel.basic_qos(prefetch_count=self.prefetch_count)

            logger.info(f"RabbitMQ consumer initialized for queue: {self.queue_name}")
        except Exception as e:
            logger.error(f"Failed to initialize RabbitMQ consumer for {self.queue_name}: {str(e)}")
            self.connection = None
            self.channel = None

    def consume(self, callback):
        """
        Block and dispatch every delivery on the queue to ``callback``.

        Args:
            callback: pika ``on_message_callback``; see ``create_message_handler``
        """
        if not self.channel:
            logger.error(f"Cannot consume from {self.queue_name}: channel not initialized")
            return

        try:
            logger.info(f"Starting to consume from queue: {self.queue_name}")
            self.channel.basic_consume(
                queue=self.queue_name, on_message_callback=callback, auto_ack=False
            )
            self.channel.start_consuming()
        except KeyboardInterrupt:
            logger.info("Consumer interrupted by user")
            self.stop()
        except Exception as e:
            logger.error(f"Error consuming from {self.queue_name}: {str(e)}")
            self.stop()

    def stop(self):
        try:
            if self.channel:
                self.channel.stop_consuming()
            if self.connection and not self.connection.is_closed:
                self.connection.close()
                logger.info(f"Consumer for {self.queue_name} stopped")
        except Exception as e:
            logger.error(f"Error stopping consumer: {str(e)}")


def create_message_handler(handler_func):
    """
    Wrap ``handler_func(message: dict)`` into a pika callback.

    Malformed payloads and unknown complaints are dropped; any other failure
    is requeued for another attempt.
    """

    def callback(ch, method, properties, body):
        try:
            message = json.loads(body.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"Failed to decode message: {str(e)}")
            ch.basic_nack(delivery_tag=method.delivery_tag, requeue=False)
            return

        if not isinstance(message, dict):
            logger.error(f"Dropping message that is not a JSON object: {body!r}")
            ch.basic_nack(delivery_tag=method.delivery_tag, requeue=False)
            return

        try:
            handler_func(message)
        except (ValidationError, NotFound) as e:
            logger.warning(f"Dropping message {message}: {str(e)}")
            ch.basic_nack(delivery_tag=method.delivery_tag, requeue=False)
            return
        except Exception as e:
            logger.error(f"Error processing message {message}: {str(e)}")
            ch.basic_nack(delivery_tag=method.delivery_tag, requeue=True)
            return

        ch.basic_ack(delivery_tag=method.delivery_tag)
        logger.debug("Message processed and acknowledged")

    return callback
