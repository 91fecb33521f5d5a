"""DRF exception handler that renders domain errors as HTTP responses."""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from core.exceptions import (
    AgencyError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)

logger = logging.getLogger("agency")

STATUS_BY_ERROR = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidTransitionError, status.HTTP_409_CONFLICT),
    (ConflictError, status.HTTP_409_CONFLICT),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (UnauthorizedError, status.HTTP_403_FORBIDDEN),
)


def status_for(exc: AgencyError) -> int:
    for error_class, http_status in STATUS_BY_ERROR:
        if isinstance(exc, error_class):
            return http_status
    return status.HTTP_400_BAD_REQUEST


def exception_handler(exc, context):
    """Map ``AgencyError`` subclasses to a ``{"detail", "code", ...}`` body.

    Anything else goes through DRF's default handler.
    """
    if not isinstance(exc, AgencyError):
        return drf_exception_handler(exc, context)

    http_status = status_for(exc)
    view = context.get("view")
    logger.info(
        "%s on %s: %s",
        exc.code,
        view.__class__.__name__ if view is not None else "-",
        exc,
    )
    return Response(exc.as_dict(), status=http_status)
