import logging

from django.db import InterfaceError, OperationalError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class DriveError(Exception):
    """Base class for errors raised by the drive services."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "error"

    def __init__(self, message=None):
        self.message = message or self.default_message()
        super().__init__(self.message)

    def default_message(self):
        return "Request failed."


class ValidationError(DriveError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"

    def default_message(self):
        return "Invalid request."


class QuotaExceededError(ValidationError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    code = "quota_exceeded"

    def default_message(self):
        return "Storage quota exceeded."


class NotFoundError(DriveError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"

    def default_message(self):
        return "Resource not found."


class InsufficientPermissionError(DriveError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "permission_denied"

    def default_message(self):
        return "You do not have permission to perform this action."


class ConflictError(DriveError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"

    def default_message(self):
        return "Request conflicts with the current state of the resource."


class DependencyError(DriveError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "dependency_unavailable"

    def default_message(self):
        return "A backing service is unavailable."


def drive_exception_handler(exc, context):
    """Render drive errors as {"error", "message"} and fall back to DRF for the rest."""
    if isinstance(exc, (OperationalError, InterfaceError)):
        logger.error("Database unavailable: %s", exc)
        exc = DependencyError("Database unavailable.")

    if isinstance(exc, DriveError):
        if isinstance(exc, DependencyError):
            logger.warning("Dependency failure in %s: %s", context.get("view").__class__.__name__, exc.message)
        return Response({"error": exc.code, "message": exc.message}, status=exc.status_code)

    return exception_handler(exc, context)
