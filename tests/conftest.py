"""
Pytest configuration and shared fixtures for the test suite.
"""

import pytest
from unittest.mock import MagicMock
from complaints.models import Badge, Citizen, Complaint, StatusHistory
from complaints.services.complaint_service import generate_complaint_id

CITY_CENTER = (12.9716, 77.5946)


@pytest.fixture
def mock_rabbitmq_publisher(mocker):
    """Mock the event publishers so no test talks to a broker."""
    return {
        "status_changed": mocker.patch(
            "complaints.signals.publish_complaint_status_changed", return_value=True
        ),
        "verified": mocker.patch(
            "complaints.services.verification_service.publish_complaint_verified",
            return_value=True,
        ),
        "badge_unlocked": mocker.patch(
            "complaints.services.gamification_service.publish_badge_unlocked", return_value=True
        ),
    }


@pytest.fixture
def mock_requests_post(mocker):
    """Mock requests.post for external API calls."""
    return mocker.patch("complaints.services.classifier.requests.post")


@pytest.fixture
def mock_pika_connection(mocker):
    """Mock pika RabbitMQ connection."""
    mock_connection = MagicMock()
    mock_channel = MagicMock()
    mock_connection.channel.return_value = mock_channel

    mocker.patch("pika.BlockingConnection", return_value=mock_connection)
    return mock_connection, mock_channel


@pytest.fixture
def create_user(db):
    """Factory fixture to create a citizen account."""
    counter = {"value": 0}

    def _create_user(**kwargs):
        counter["value"] += 1
        defaults = {
            "phone": f"+91987650{counter['value']:04d}",
            "name": f"Citizen {counter['value']}",
        }
        defaults.update(kwargs)
        return Citizen.objects.create(**defaults)

    return _create_user


@pytest.fixture
def create_complaint(db):
    """Factory fixture to create a complaint with its initial history entry."""

    def _create_complaint(**kwargs):
        data = {
            "complaint_id": generate_complaint_id(),
            "image": "aGVsbG8=",
            "latitude": CITY_CENTER[0],
            "longitude": CITY_CENTER[1],
            "location": "MG Road, near Trinity Metro Station",
            "category": Complaint.CATEGORY_POTHOLE,
            "severity": "medium",
            "status": Complaint.STATUS_REPORTED,
            "description": "Pothole near the metro station.",
        }
        data.update(kwargs)
        complaint = Complaint.objects.create(**data)
        StatusHistory.objects.create(complaint=complaint, status=complaint.status)
        return complaint

    return _create_complaint


@pytest.fixture
def badges(db):
    """The seeded badge catalog."""
    from complaints.management.commands.seed_data import BADGES

    return Badge.objects.bulk_create([Badge(**badge) for badge in BADGES])
