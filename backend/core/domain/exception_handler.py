"""
core.domain.exception_handler — turns domain errors into HTTP responses.

Every ``DomainError`` subclass leaves the API as
``{"detail": <message>, "code": <exc.code>}`` with a status picked
from ``_STATUS_MAP``:

    PermissionDenied   403  access_denied
    NotFound           404  not_found
    InvalidTransition  409  illegal_transition  (+ current, target)
    Conflict           409  conflict
    InvalidDate        400  invalid_date
    DomainError        400  validation_error

DRF's own exceptions (serializer validation, authentication,
throttling) keep DRF's default handling.  Wired up through
``REST_FRAMEWORK["EXCEPTION_HANDLER"]`` in ``backend/settings.py``.
"""

from __future__ import annotations

import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_default_handler

from core.domain.exceptions import (
    Conflict,
    DomainError,
    InvalidDate,
    InvalidTransition,
    NotFound,
    PermissionDenied,
)

logger = logging.getLogger(__name__)


def _error_body(exc: DomainError) -> dict:
    """``{"detail", "code"}``, plus ``current``/``target`` for a structured transition error."""
    body = {"detail": str(exc), "code": exc.code}
    if isinstance(exc, InvalidTransition) and exc.current and exc.target:
        body["current"] = exc.current
        body["target"] = exc.target
    return body


# Domain exception → HTTP status code (most specific first)
_STATUS_MAP: dict[type, int] = {
    PermissionDenied:  403,
    NotFound:          404,
    InvalidTransition: 409,
    Conflict:          409,
    InvalidDate:       400,
    DomainError:       400,
}


def domain_exception_handler(exc: Exception, context: dict) -> Response | None:
    """
    Defer to DRF first; map anything it leaves unhandled that is a
    ``DomainError``.  Other exceptions return ``None`` so DRF re-raises
    them as a 500.
    """
    response = drf_default_handler(exc, context)
    if response is not None:
        return response

    if not isinstance(exc, DomainError):
        return None

    status_code = next(
        code for exc_class, code in _STATUS_MAP.items() if isinstance(exc, exc_class)
    )
    view = context.get("view")
    logger.warning(
        "%s (%s) -> %d in %s: %s",
        type(exc).__name__, exc.code, status_code,
        type(view).__name__ if view is not None else "unknown", exc,
    )
    return Response(_error_body(exc), status=status_code)
