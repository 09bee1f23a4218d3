"""
core.domain — Shared domain utilities for cross-app service layers.

Modules
-------
exceptions         Domain-specific exceptions that map cleanly to HTTP responses.
exception_handler  DRF ``EXCEPTION_HANDLER`` for the exceptions above.
transactions       Row-locking helper for ``transaction.atomic`` blocks.
access             Role-scoped queryset selectors.

Usage from any app::

    from core.domain.exceptions import DomainError, InvalidTransition
    from core.domain.transactions import lock_for_update
    from core.domain.access import apply_role_scope
"""
