"""
core.domain.exceptions — Domain-specific exception hierarchy.

These exceptions represent business-rule violations inside service layers.
They are deliberately **not** DRF exceptions so that the domain layer stays
framework-agnostic.  The global DRF exception handler in
``core.domain.exception_handler`` maps them to HTTP responses of the shape
``{"detail": <message>, "code": <kind>}``.

Mapping cheatsheet
------------------
┌─────────────────────┬────────────────────┬──────┐
│ Domain Exception    │ code               │ HTTP │
├─────────────────────┼────────────────────┼──────┤
│ DomainError         │ validation_error   │ 400  │
│ InvalidDate         │ invalid_date       │ 400  │
│ PermissionDenied    │ access_denied      │ 403  │
│ NotFound            │ not_found          │ 404  │
│ Conflict            │ conflict           │ 409  │
│ InvalidTransition   │ illegal_transition │ 409  │
└─────────────────────┴────────────────────┴──────┘

Recommended usage inside a service::

    from core.domain.exceptions import InvalidTransition

    if new_status not in ALLOWED_TRANSITIONS[current_status]:
        raise InvalidTransition(current=current_status, target=new_status)
"""

from __future__ import annotations


class DomainError(Exception):
    """
    Base class for all domain / business-rule errors.

    Raised directly for malformed input that slipped past serializer
    validation (e.g. an unknown seriousness class).  Maps to HTTP 400.
    """

    code = "validation_error"

    def __init__(self, message: str = "A business rule was violated.") -> None:
        self.message = message
        super().__init__(self.message)


class InvalidDate(DomainError):
    """
    A supplied date breaks a date-ordering rule, e.g. a disposal date
    earlier than the filing date.

    Maps to HTTP 400.
    """

    code = "invalid_date"

    def __init__(self, message: str = "The supplied date is not valid for this record.") -> None:
        super().__init__(message)


class PermissionDenied(DomainError):
    """
    The authenticated user's role or station scope does not cover this
    operation.

    Maps to HTTP 403.
    """

    code = "access_denied"

    def __init__(self, message: str = "You do not have permission to perform this action.") -> None:
        super().__init__(message)


class NotFound(DomainError):
    """
    The requested resource does not exist, is inactive, or is not
    visible to the requesting user given their station scope.

    Maps to HTTP 404.
    """

    code = "not_found"

    def __init__(self, message: str = "The requested resource was not found.") -> None:
        super().__init__(message)


class Conflict(DomainError):
    """
    The operation conflicts with the current state of the resource.

    Typical usage: duplicate FIR number on creation.
    Maps to HTTP 409.
    """

    code = "conflict"

    def __init__(self, message: str = "The operation conflicts with the current state.") -> None:
        super().__init__(message)


class InvalidTransition(Conflict):
    """
    A disposal-status transition that is not allowed from the current status.

    Inherits from ``Conflict`` because an invalid transition IS a conflict
    with the resource's current state.  Maps to HTTP 409.

    Example::

        raise InvalidTransition(
            current="registered",
            target="finalized",
            reason="An FIR must be chargesheeted before it is finalized.",
        )
    """

    code = "illegal_transition"

    def __init__(
        self,
        message: str | None = None,
        *,
        current: str | None = None,
        target: str | None = None,
        reason: str | None = None,
    ) -> None:
        if message is None:
            parts = ["Invalid disposal transition"]
            if current and target:
                parts.append(f"from '{current}' to '{target}'")
            message = " ".join(parts) + "."
            if reason:
                message = f"{message} {reason}"
        super().__init__(message)
        self.current = current
        self.target = target
        self.reason = reason
