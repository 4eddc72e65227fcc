"""
Tests for the seed_data management command.
"""

import pytest
from io import StringIO
from django.core.management import call_command
from complaints.models import Badge, Complaint, Hotspot, StatusHistory


@pytest.mark.django_db
class TestSeedData:
    """Test cases for seeding reference and demo data."""

    def test_seeds_every_table(self):
        call_command("seed_data", stdout=StringIO())

        assert Badge.objects.count() == 10
        assert Complaint.objects.count() == 30
        assert Hotspot.objects.count() == 8
        assert Badge.objects.get(key="pothole_patrol").criterion == "pothole"

    def test_history_matches_status(self):
        call_command("seed_data", stdout=StringIO())

        for complaint in Complaint.objects.prefetch_related("status_history"):
            history = list(complaint.status_history.all())
            assert history[0].status == Complaint.STATUS_REPORTED
            assert history[-1].status == complaint.status
            timestamps = [entry.timestamp for entry in history]
            assert timestamps == sorted(timestamps)

    def test_idempotent(self):
        call_command("seed_data", stdout=StringIO())
        call_command("seed_data", stdout=StringIO())

        assert Badge.objects.count() == 10
        assert Complaint.objects.count() == 30
        assert StatusHistory.objects.filter(status=Complaint.STATUS_REPORTED).count() == 30
