"""
core.domain.access — Role-scoped queryset selectors (shared patterns).

This module provides shared utilities that each app's service layer
calls to obtain querysets narrowed to the requesting user's stations.

╔══════════════════════════════════════════════════════════════════╗
║  IMPORTANT — Per-app scoping logic does NOT live here.         ║
║  Each app's ``services.py`` owns its own scope config.         ║
║  This module provides:                                         ║
║    1) ``apply_role_scope`` — role-keyed scope dispatch.        ║
║    2) ``require_role`` — guard on the user's role.             ║
║    3) ``get_user_role_name`` — role resolution helper.         ║
╚══════════════════════════════════════════════════════════════════╝

Architecture overview
---------------------
    ┌─────────┐      ┌────────────────┐      ┌──────────────────┐
    │  View   │─────▶│  App service   │─────▶│ core.domain      │
    │ (thin)  │      │ (owns logic)   │      │   .access        │
    └─────────┘      └────────────────┘      │ (shared helpers) │
                                             └──────────────────┘

Usage in an app's service layer::

    from core.domain.access import apply_role_scope

    FIR_SCOPE_CONFIG = {
        "admin": lambda qs, u: qs,
        "station_officer": lambda qs, u: qs.filter(police_station_id=u.station_id),
    }

    qs = apply_role_scope(FIR.objects.all(), user, scope_config=FIR_SCOPE_CONFIG)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from django.db.models import QuerySet

if TYPE_CHECKING:
    from accounts.models import User

# Takes (queryset, user) and returns a filtered queryset.
ScopeFilter = Callable[[QuerySet, "User"], QuerySet]

# Role name → scope filter.
ScopeConfig = dict[str, ScopeFilter]


def get_user_role_name(user: User) -> str | None:
    """
    Return the role name for a user, or ``None`` if unassigned.

    Superusers are always treated as ``"admin"`` regardless of the
    stored role.

    Args:
        user: Authenticated User instance.

    Returns:
        Role value string (see ``accounts.models.UserRole``), or ``None``.
    """
    if getattr(user, "is_superuser", False):
        return "admin"
    return getattr(user, "role", None) or None


def apply_role_scope(
    queryset: QuerySet,
    user: User,
    *,
    scope_config: ScopeConfig,
    default: str = "none",
) -> QuerySet:
    """
    Apply the scope filter registered for the user's role.

    Args:
        queryset:     Base (unfiltered) queryset.
        user:         The authenticated user.
        scope_config: Mapping of role name → ``filter_fn(qs, user)``.
        default:      What to do when the role has no entry.
                      ``"none"`` (default) → empty queryset.
                      ``"all"`` → return unfiltered.

    Returns:
        The (possibly filtered) queryset.
    """
    role_name = get_user_role_name(user)

    if role_name and role_name in scope_config:
        return scope_config[role_name](queryset, user)

    if default == "none":
        return queryset.none()
    return queryset


def require_role(user: User, *allowed_roles: str, message: str = "") -> None:
    """
    Guard that raises ``PermissionDenied`` if the user's role is not
    among ``allowed_roles``.

    Raises:
        core.domain.exceptions.PermissionDenied

    Example::

        require_role(user, "admin", message="Only administrators can delete FIRs.")
    """
    from core.domain.exceptions import PermissionDenied as DomainPermissionDenied

    role_name = get_user_role_name(user)
    if role_name not in allowed_roles:
        raise DomainPermissionDenied(
            message
            or (
                f"Role '{role_name}' is not permitted for this operation. "
                f"Required: {', '.join(allowed_roles)}."
            )
        )
