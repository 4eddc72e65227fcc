"""
Unit tests for ComplaintService.
"""

import re
import pytest
from complaints.exceptions import ComplaintNotFound, InvalidInput, UserNotFound
from complaints.models import Complaint, PointTransaction
from complaints.services.classifier import ClassificationResult, Classifier
from complaints.services.complaint_service import ComplaintService, generate_complaint_id


class FixedClassifier(Classifier):
    def __init__(self, category):
        self.category = category

    def classify(self, image, notes=None):
        return ClassificationResult(category=self.category, confidence=97, severity="high", models_used=("test",))


def submission(**kwargs):
    data = {"image": "aGVsbG8=", "latitude": 12.9716, "longitude": 77.5946, "notes": None, "user_id": None}
    data.update(kwargs)
    return data


class TestComplaintId:
    def test_format(self):
        complaint_id = generate_complaint_id()

        assert re.fullmatch(r"NN[0-9A-Z]+", complaint_id)
        assert len(complaint_id) > 6

    def test_consecutive_ids_differ(self):
        assert generate_complaint_id() != generate_complaint_id()


@pytest.mark.django_db
class TestCreateComplaint:
    """Test cases for complaint submission."""

    def test_anonymous_submission(self):
        result = ComplaintService().create_complaint(submission())

        complaint = result["complaint"]
        assert complaint.status == Complaint.STATUS_REPORTED
        assert complaint.category == Complaint.CATEGORY_OTHER
        assert complaint.location == "MG Road, near Trinity Metro Station"
        assert complaint.location in complaint.description
        assert [entry.status for entry in complaint.status_history.all()] == [Complaint.STATUS_REPORTED]
        assert result["points_earned"] == 0

    def test_classifier_output_is_stored(self):
        service = ComplaintService(classifier=FixedClassifier(Complaint.CATEGORY_DRAINAGE))

        complaint = service.create_complaint(submission())["complaint"]

        assert complaint.category == Complaint.CATEGORY_DRAINAGE
        assert complaint.severity == "high"
        assert complaint.confidence_score == 97
        assert complaint.ai_models_used == ["test"]

    def test_reporter_earns_report_and_first_in_area_points(self, create_user):
        user = create_user()

        result = ComplaintService().create_complaint(submission(user_id=user.pk, notes="pothole"))

        user.refresh_from_db()
        assert result["points_earned"] == 25
        assert user.points == 25
        assert user.total_reports == 1
        assert user.streak == 1

    def test_no_first_in_area_bonus_when_open_complaint_exists(self, create_user, create_complaint):
        create_complaint(category=Complaint.CATEGORY_POTHOLE)
        user = create_user()

        result = ComplaintService().create_complaint(submission(user_id=user.pk, notes="pothole"))

        assert result["points_earned"] == 10
        assert not PointTransaction.objects.filter(action=PointTransaction.ACTION_FIRST_IN_AREA).exists()

    def test_unknown_user(self):
        with pytest.raises(UserNotFound):
            ComplaintService().create_complaint(submission(user_id=98765))

        assert not Complaint.objects.exists()

    def test_failed_reward_keeps_complaint(self, mocker, create_user):
        service = ComplaintService()
        mocker.patch.object(service.gamification, "record_report", side_effect=RuntimeError("boom"))

        result = service.create_complaint(submission(user_id=create_user().pk))

        assert result["warnings"] == ["report_points_failed"]
        assert Complaint.objects.filter(pk=result["complaint"].pk).exists()


@pytest.mark.django_db
class TestQueries:
    """Test cases for listing, lookup, stats and reclassification."""

    def setup_method(self):
        self.service = ComplaintService()

    def test_list_newest_first_with_filters(self, create_complaint):
        older = create_complaint(category=Complaint.CATEGORY_GARBAGE)
        newer = create_complaint(category=Complaint.CATEGORY_GARBAGE, status=Complaint.STATUS_ASSIGNED)
        create_complaint(category=Complaint.CATEGORY_POTHOLE)

        garbage = self.service.list_complaints(category=Complaint.CATEGORY_GARBAGE)
        assigned = self.service.list_complaints(status=Complaint.STATUS_ASSIGNED)

        assert [c.pk for c in garbage] == [newer.pk, older.pk]
        assert [c.pk for c in assigned] == [newer.pk]

    def test_list_rejects_unknown_filters(self):
        with pytest.raises(InvalidInput):
            self.service.list_complaints(category="graffiti")
        with pytest.raises(InvalidInput):
            self.service.list_complaints(status="Closed")

    def test_get_unknown_complaint(self):
        with pytest.raises(ComplaintNotFound):
            self.service.get_complaint("NNNOPE")

    def test_stats(self, create_complaint):
        create_complaint(category=Complaint.CATEGORY_POTHOLE)
        create_complaint(category=Complaint.CATEGORY_POTHOLE, status=Complaint.STATUS_IN_PROGRESS)
        create_complaint(category=Complaint.CATEGORY_GARBAGE, status=Complaint.STATUS_RESOLVED)

        stats = self.service.get_stats()

        assert stats["total"] == 3
        assert stats["open"] == 2
        assert stats["resolved"] == 1
        assert stats["today"] == 3
        assert stats["byCategory"][Complaint.CATEGORY_POTHOLE] == 2
        assert stats["byCategory"][Complaint.CATEGORY_DRAINAGE] == 0
        assert stats["byStatus"][Complaint.STATUS_IN_PROGRESS] == 1

    def test_apply_classification(self, create_complaint):
        complaint = create_complaint(category=Complaint.CATEGORY_OTHER)

        self.service.apply_classification(complaint.complaint_id, Complaint.CATEGORY_STREETLIGHT, 140)

        complaint.refresh_from_db()
        assert complaint.category == Complaint.CATEGORY_STREETLIGHT
        assert complaint.confidence_score == 100
