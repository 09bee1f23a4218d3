"""
Stations app service layer — the Station Registry.

Every consumer that needs "the list of stations" (hierarchy endpoint,
performance report, FIR creation) goes through ``StationRegistryService``
so that the active-flag and role scoping are applied in one place.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from django.db.models import QuerySet

from core.domain.access import apply_role_scope
from core.domain.exceptions import NotFound

from .models import District, Station

if TYPE_CHECKING:
    from accounts.models import User


_STATION_SCOPE_CONFIG = {
    "admin": lambda qs, u: qs,
    "station_officer": lambda qs, u: qs.filter(pk__in=u.scoped_station_ids),
    "subdivision_officer": lambda qs, u: qs.filter(pk__in=u.scoped_station_ids),
}


class StationRegistryService:
    """Read access to the authoritative station registry."""

    @staticmethod
    def get_scoped_queryset(user: User) -> QuerySet:
        """Active stations visible to ``user``."""
        qs = Station.objects.filter(is_active=True)
        return apply_role_scope(qs, user, scope_config=_STATION_SCOPE_CONFIG)

    @staticmethod
    def list_active_stations(
        user: User,
        filters: dict[str, Any] | None = None,
    ) -> QuerySet:
        """
        Return active stations within ``user``'s scope, narrowed by
        optional ``filters``.

        Parameters
        ----------
        user : User
            Requesting user.
        filters : dict, optional
            Recognised keys: ``stations`` (iterable of ids),
            ``subdivision`` (exact name), ``district`` (``District`` value).

        Returns
        -------
        QuerySet[Station]
            Ordered by name.
        """
        filters = filters or {}
        qs = StationRegistryService.get_scoped_queryset(user)

        if filters.get("stations") is not None:
            qs = qs.filter(pk__in=filters["stations"])
        if filters.get("subdivision"):
            qs = qs.filter(subdivision=filters["subdivision"])
        if filters.get("district"):
            qs = qs.filter(district=filters["district"])

        return qs.order_by("name")

    @staticmethod
    def get_station_detail(user: User, station_id: int) -> Station:
        """
        Raises
        ------
        NotFound
            The station does not exist, is inactive, or is outside scope.
        """
        try:
            return StationRegistryService.get_scoped_queryset(user).get(pk=station_id)
        except Station.DoesNotExist:
            raise NotFound(f"Station with id {station_id} not found.")

    @staticmethod
    def get_active_station(station_id: int) -> Station:
        """Fetch an active station regardless of scope (write paths)."""
        try:
            return Station.objects.get(pk=station_id, is_active=True)
        except Station.DoesNotExist:
            raise NotFound(f"Station with id {station_id} not found or inactive.")

    @staticmethod
    def get_hierarchy(user: User) -> list[dict[str, Any]]:
        """
        Build the District → Subdivision → Station tree for ``user``.

        Special units are returned under their own district with
        ``is_special_unit=True``; their "subdivisions" are the flat unit
        groupings.

        Returns
        -------
        list[dict]
            One entry per district that has at least one visible station,
            in ``District`` declaration order::

                [
                    {
                        "district": "north_district",
                        "label": "North District",
                        "is_special_unit": False,
                        "subdivisions": [
                            {
                                "name": "Panaji",
                                "stations": [
                                    {"id": 1, "name": "Agacaim PS", "code": "AGACAIMPS"},
                                    ...
                                ],
                            },
                        ],
                    },
                ]
        """
        stations = StationRegistryService.get_scoped_queryset(user).order_by(
            "subdivision", "name",
        )

        tree: dict[str, dict[str, list[dict[str, Any]]]] = {}
        for station in stations:
            tree.setdefault(station.district, {}).setdefault(
                station.subdivision, [],
            ).append({"id": station.pk, "name": station.name, "code": station.code})

        return [
            {
                "district": district.value,
                "label": district.label,
                "is_special_unit": district == District.SPECIAL_UNIT,
                "subdivisions": [
                    {"name": name, "stations": members}
                    for name, members in tree[district.value].items()
                ],
            }
            for district in District
            if district.value in tree
        ]
