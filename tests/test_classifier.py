"""
Unit tests for complaint classifiers.
"""

import pytest
import requests
from complaints.models import Complaint
from complaints.services.classifier import HttpClassifier, KeywordClassifier, get_classifier


class TestKeywordClassifier:
    """Test cases for keyword classification."""

    def setup_method(self):
        self.classifier = KeywordClassifier()

    def test_no_notes_defaults_to_other(self):
        result = self.classifier.classify("aGVsbG8=")

        assert result.category == Complaint.CATEGORY_OTHER
        assert result.confidence == 50
        assert result.severity == "medium"

    @pytest.mark.parametrize(
        "notes,category",
        [
            ("Huge pothole on the left lane", Complaint.CATEGORY_POTHOLE),
            ("Trash piling up near the market", Complaint.CATEGORY_GARBAGE),
            ("Street lamp broken since Monday", Complaint.CATEGORY_STREETLIGHT),
            ("Blocked drain after the rain", Complaint.CATEGORY_DRAINAGE),
        ],
    )
    def test_keywords(self, notes, category):
        result = self.classifier.classify("aGVsbG8=", notes)

        assert result.category == category
        assert result.confidence == 85

    def test_severity_keywords(self):
        assert self.classifier.classify("x", "Deep pothole, dangerous").severity == "high"
        assert self.classifier.classify("x", "Minor crack").severity == "low"

    def test_default_classifier_from_settings(self):
        assert isinstance(get_classifier(), KeywordClassifier)


class TestHttpClassifier:
    """Test cases for the HTTP model client."""

    def setup_method(self):
        self.classifier = HttpClassifier(api_url="http://model.test/classify", timeout=2)

    def test_model_answer_is_used(self, mock_requests_post):
        mock_requests_post.return_value.status_code = 200
        mock_requests_post.return_value.json.return_value = {
            "category": "garbage",
            "confidence": 93,
            "severity": "high",
            "models": ["clip"],
        }

        result = self.classifier.classify("aGVsbG8=", "pothole?")

        assert result.category == Complaint.CATEGORY_GARBAGE
        assert result.confidence == 93
        assert result.severity == "high"
        assert result.models_used == ("clip",)
        mock_requests_post.assert_called_once_with(
            "http://model.test/classify", json={"image": "aGVsbG8=", "notes": "pothole?"}, timeout=2
        )

    def test_confidence_is_clamped(self, mock_requests_post):
        mock_requests_post.return_value.status_code = 200
        mock_requests_post.return_value.json.return_value = {"category": "other", "confidence": 180}

        assert self.classifier.classify("x").confidence == 100

    def test_error_status_falls_back_to_keywords(self, mock_requests_post):
        mock_requests_post.return_value.status_code = 503

        result = self.classifier.classify("x", "overflowing garbage")

        assert result.category == Complaint.CATEGORY_GARBAGE
        assert result.models_used == ("keyword",)

    def test_unknown_category_falls_back(self, mock_requests_post):
        mock_requests_post.return_value.status_code = 200
        mock_requests_post.return_value.json.return_value = {"category": "graffiti", "confidence": 90}

        assert self.classifier.classify("x").category == Complaint.CATEGORY_OTHER

    def test_connection_error_falls_back(self, mock_requests_post):
        mock_requests_post.side_effect = requests.ConnectionError("refused")

        result = self.classifier.classify("x", "street light out")

        assert result.category == Complaint.CATEGORY_STREETLIGHT

    def test_null_confidence_falls_back(self, mock_requests_post):
        mock_requests_post.return_value.status_code = 200
        mock_requests_post.return_value.json.return_value = {"category": "pothole", "confidence": None}

        result = self.classifier.classify("x", "garbage everywhere")

        assert result.category == Complaint.CATEGORY_GARBAGE
        assert result.models_used == ("keyword",)

    def test_non_object_body_falls_back(self, mock_requests_post):
        mock_requests_post.return_value.status_code = 200
        mock_requests_post.return_value.json.return_value = ["pothole"]

        result = self.classifier.classify("x")

        assert result.category == Complaint.CATEGORY_OTHER
        assert result.models_used == ("keyword",)
