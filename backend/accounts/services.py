"""
Accounts app service layer.

Token claims and profile helpers.  Views stay thin and delegate here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from core.domain.access import get_user_role_name

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from .models import User


class AuthenticationService:
    """JWT issuing and station-scope resolution for the current user."""

    @staticmethod
    def build_scope_claims(user: User) -> dict[str, Any]:
        """
        Claims added to every access token.

        Returns
        -------
        dict
            ``{"role": "station_officer", "station_ids": [3]}``;
            ``station_ids`` is ``None`` for administrators.
        """
        station_ids = user.scoped_station_ids
        return {
            "role": get_user_role_name(user),
            "station_ids": sorted(station_ids) if station_ids is not None else None,
        }

    @staticmethod
    def get_scope_stations(user: User) -> QuerySet | None:
        """Active stations in the user's scope, or ``None`` when unrestricted."""
        from stations.models import Station

        station_ids = user.scoped_station_ids
        if station_ids is None:
            return None
        return Station.objects.filter(pk__in=station_ids, is_active=True).order_by("name")
