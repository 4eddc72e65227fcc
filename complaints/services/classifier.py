"""
Pluggable complaint classification.

The service only depends on ``Classifier.classify(image, notes)``; the class in
use is chosen by the ``COMPLAINT_CLASSIFIER`` setting so a real model can be
dropped in without touching the lifecycle or verification code.
"""

import logging
from dataclasses import dataclass
import requests
from django.conf import settings
from django.utils.module_loading import import_string
from complaints.models import Complaint

logger = logging.getLogger(__name__)

CATEGORY_KEYWORDS = [
    (Complaint.CATEGORY_POTHOLE, ["pothole", "hole", "crack", "road damage"]),
    (Complaint.CATEGORY_GARBAGE, ["garbage", "trash", "waste", "litter"]),
    (Complaint.CATEGORY_STREETLIGHT, ["streetlight", "light", "lamp", "dark"]),
    (Complaint.CATEGORY_DRAINAGE, ["drain", "sewer", "water", "flood"]),
]

HIGH_SEVERITY_KEYWORDS = ["accident", "dangerous", "deep", "urgent", "injur", "open manhole"]
LOW_SEVERITY_KEYWORDS = ["minor", "small", "slight"]


@dataclass
class ClassificationResult:
    category: str
    confidence: int
    severity: str = "medium"
    models_used: tuple = ()


class Classifier:
    """Interface for complaint classifiers."""

    def classify(self, image: str, notes: str = None) -> ClassificationResult:
        raise NotImplementedError


class KeywordClassifier(Classifier):
    """
    Keyword matching over the reporter's notes.
    Falls back to ``other`` when there are no notes or nothing matches.
    """

    def classify(self, image: str, notes: str = None) -> ClassificationResult:
        text = (notes or "").lower()

        category = Complaint.CATEGORY_OTHER
        confidence = 50
        for candidate, keywords in CATEGORY_KEYWORDS:
            if any(keyword in text for keyword in keywords):
                category = candidate
                confidence = 85
                break

        return ClassificationResult(
            category=category,
            confidence=confidence,
            severity=self.assess_severity(text),
            models_used=("keyword",),
        )

    @staticmethod
    def assess_severity(text: str) -> str:
        if any(keyword in text for keyword in HIGH_SEVERITY_KEYWORDS):
            return "high"
        if any(keyword in text for keyword in LOW_SEVERITY_KEYWORDS):
            return "low"
        return "medium"


class HttpClassifier(Classifier):
    """
    Calls an external image model over HTTP.

    Expected response body: ``{"category": str, "confidence": int, "severity"?: str,
    "models"?: [str]}``. Any transport error or unusable answer falls back to
    keyword matching so a report is never rejected because the model is down.
    """

    def __init__(self, api_url: str = None, timeout: int = None):
        self.api_url = api_url or settings.CLASSIFIER_API_URL
        self.timeout = timeout or settings.CLASSIFIER_TIMEOUT
        self.fallback = KeywordClassifier()

    def classify(self, image: str, notes: str = None) -> ClassificationResult:
        try:
            response = requests.post(
                self.api_url, json={"image": image, "notes": notes}, timeout=self.timeout
            )
            if response.status_code != 200:
                logger.warning(
                    f"Classifier returned {response.status_code}, using keyword fallback"
                )
                return self.fallback.classify(image, notes)

            data = response.json()
            if not isinstance(data, dict):
                logger.warning(f"Classifier returned a non-object body: {data!r}")
                return self.fallback.classify(image, notes)

            category = data.get("category")
            valid_categories = [choice for choice, _ in Complaint.CATEGORY_CHOICES]
            if category not in valid_categories:
                logger.warning(f"Classifier returned unknown category {category!r}")
                return self.fallback.classify(image, notes)

            confidence = max(0, min(100, int(data.get("confidence", 0))))
            severity = data.get("severity")
            if severity not in ("low", "medium", "high"):
                severity = KeywordClassifier.assess_severity((notes or "").lower())

            return ClassificationResult(
                category=category,
                confidence=confidence,
                severity=severity,
                models_used=tuple(data.get("models", ())),
            )
        except (requests.RequestException, ValueError, TypeError) as e:
            logger.error(f"Error calling classifier at {self.api_url}: {str(e)}")
            return self.fallback.classify(image, notes)


def get_classifier() -> Classifier:
    """Instantiate the classifier configured in settings."""
    return import_string(settings.COMPLAINT_CLASSIFIER)()
