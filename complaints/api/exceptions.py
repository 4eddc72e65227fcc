import logging
from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler
from complaints.exceptions import InternalFailure, InvalidInput

logger = logging.getLogger(__name__)


def error_handler(exc, context):
    """
    Render every API error as ``{"error": str, "details"?: ...}``.

    Unexpected exceptions are logged and turned into a generic 500 so no
    internal detail reaches the client.
    """
    if isinstance(exc, DatabaseError):
        logger.error(f"Database error: {str(exc)}", exc_info=exc)
        exc = InternalFailure()

    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.error(
            f"Unhandled error in {view.__class__.__name__ if view else 'unknown view'}: {str(exc)}",
            exc_info=exc,
        )
        return Response(
            {"error": "Internal server error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    if isinstance(exc, InvalidInput):
        body = {"error": exc.message}
        if exc.details is not None:
            body["details"] = exc.details
    elif isinstance(exc, ValidationError):
        body = {"error": "Invalid request body", "details": response.data}
    elif isinstance(exc, APIException) and response.status_code >= 500:
        logger.error(f"Internal failure: {str(exc)}")
        body = {"error": "Internal server error"}
    else:
        body = {"error": str(exc.detail) if hasattr(exc, "detail") else str(exc)}

    response.data = body
    return response
