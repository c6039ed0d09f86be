"""
Service-layer error base class and the DRF exception handler that renders it.

Services raise ServiceError subclasses with a stable `code`; views do not
need to catch them. The handler turns them into
{"error": <message>, "code": <code>} with the subclass's HTTP status.
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """
    Base exception for business rule violations raised by service classes.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "service_error"
    default_message = "The request could not be processed."

    def __init__(self, message=None, code=None, details=None):
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.details = details
        super().__init__(self.message)


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "not_found"
    default_message = "Not found."


class ConflictError(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "conflict"
    default_message = "The request conflicts with the current state."


class InvalidStatusTransition(ServiceError):
    """Raised when a lifecycle status change is not allowed from the current status."""

    default_code = "invalid_status_transition"

    def __init__(self, current, requested, message=None):
        self.current = current
        self.requested = requested
        super().__init__(
            message or f"Cannot change status from '{current}' to '{requested}'."
        )


def api_exception_handler(exc, context):
    """
    DRF EXCEPTION_HANDLER.

    ServiceError -> JSON error body with its status code.
    Everything else -> DRF's default handling.
    """
    if isinstance(exc, ServiceError):
        request = context.get('request')
        view = context.get('view')
        logger.warning(
            f"{exc.__class__.__name__} in {view.__class__.__name__ if view else 'unknown view'}: {exc.message}",
            extra={
                'code': exc.code,
                'path': getattr(request, 'path', None),
                'method': getattr(request, 'method', None),
            },
        )
        data = {"error": exc.message, "code": exc.code}
        if exc.details:
            data["details"] = exc.details
        return Response(data, status=exc.status_code)

    return exception_handler(exc, context)
