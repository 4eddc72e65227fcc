"""
Django management command to run the classification.completed consumer.

Usage:
    python manage.py run_classification_consumer
"""

from django.core.management.base import BaseCommand
from complaints.rabbitmq.classification_consumer import main


class Command(BaseCommand):
    help = "Run RabbitMQ consumer for classification.completed events"

    def handle(self, *args, **options):
        self.stdout.write(self.style.SUCCESS("Starting classification.completed consumer..."))
        main()
