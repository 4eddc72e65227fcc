"""
Domain errors raised by the service layer.

They extend DRF's exception classes so the API layer can let them propagate
and have them rendered by ``complaints.api.exceptions.error_handler``.
"""

from rest_framework import status
from rest_framework.exceptions import APIException, NotFound, ValidationError


class ComplaintNotFound(NotFound):
    default_detail = "Complaint not found"
    default_code = "complaint_not_found"


class UserNotFound(NotFound):
    default_detail = "User not found"
    default_code = "user_not_found"


class NotificationNotFound(NotFound):
    default_detail = "Notification not found"
    default_code = "notification_not_found"


class InvalidInput(ValidationError):
    default_detail = "Invalid request body"
    default_code = "invalid"

    def __init__(self, message=None, details=None):
        super().__init__(detail=message or self.default_detail, code=self.default_code)
        self.message = message or self.default_detail
        self.details = details


class InvalidStatus(InvalidInput):
    default_detail = "Invalid status"
    default_code = "invalid_status"


class InvalidVote(InvalidInput):
    default_detail = "Invalid verification status"
    default_code = "invalid_vote"


class InternalFailure(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"
    default_code = "internal_failure"
