"""
Core app services — **Service Layer**.

Contains cross-app aggregation logic.  Views delegate all business logic
to the service classes defined here, keeping views thin and ensuring
testability.

╔══════════════════════════════════════════════════════════════════════╗
║  CROSS-APP IMPORT RULEBOOK                                         ║
║                                                                    ║
║  The core app is the ONLY app allowed to aggregate over models     ║
║  from several apps.  To prevent circular imports at load time:     ║
║                                                                    ║
║  1. NEVER import models or services from other apps at the         ║
║     **module level**.  Import inside the function that needs them. ║
║                                                                    ║
║  2. Preferred pattern:                                             ║
║       from django.apps import apps                                 ║
║       FIR = apps.get_model("firs", "FIR")                          ║
║                                                                    ║
║  3. Choice/enum classes (``DisposalStatus``, ``UrgencyTier``,      ║
║     ``District``) live in the respective app's ``models.py``.      ║
║     Import them lazily inside methods too.                         ║
║                                                                    ║
║  4. Urgency tiers always come from                                 ║
║     ``firs.services.UrgencyClassifierService``; never re-derive    ║
║     the day thresholds here.                                       ║
╚══════════════════════════════════════════════════════════════════════╝
"""

from __future__ import annotations

import datetime
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from django.apps import apps
from django.db.models import Count, Q, QuerySet
from django.db.models.functions import TruncMonth
from django.utils import timezone

from core.constants import MONTHLY_TREND_MONTHS, RECENT_FIRS_LIMIT
from core.domain.exceptions import DomainError

if TYPE_CHECKING:
    from accounts.models import User

logger = logging.getLogger(__name__)


def round_percentage(part: int, whole: int) -> int:
    """
    ``round(part / whole * 100)`` with halves rounded up, in integer
    arithmetic.  ``0`` when ``whole`` is ``0``.

    >>> round_percentage(4, 10)
    40
    >>> round_percentage(1, 8)
    13
    """
    if whole == 0:
        return 0
    return (part * 200 + whole) // (2 * whole)


def _empty_counts() -> dict[str, Any]:
    from firs.models import UrgencyTier

    return {
        "total_cases": 0,
        "registered_count": 0,
        "chargesheeted_count": 0,
        "finalized_count": 0,
        "on_time_chargesheeted_count": 0,
        "urgency_histogram": {tier.value: 0 for tier in UrgencyTier},
    }


# ════════════════════════════════════════════════════════════════════
#  Performance Aggregator
# ════════════════════════════════════════════════════════════════════

def aggregate_performance(
    stations: Iterable[Mapping[str, Any]],
    cases: Iterable[Mapping[str, Any]],
    *,
    today: datetime.date,
    order: str = "performance",
) -> dict[str, Any]:
    """
    Reduce a case population to per-station metrics plus a system summary.

    Pure function over plain rows; ``PerformanceAggregationService``
    feeds it from the ORM.

    Parameters
    ----------
    stations : iterable of mappings
        Enumerated stations, each with ``id``, ``name``, ``code``,
        ``subdivision`` and ``district``.  Every one of them appears in the
        output, including stations with no cases.
    cases : iterable of mappings
        Each with ``police_station_id``, ``disposal_status``,
        ``disposal_date`` and ``disposal_due_date``.  Cases whose station
        was not enumerated are ignored.
    today : date
        Reference date for urgency tiers of Registered cases.
    order : {"performance", "name"}
        ``"performance"`` sorts by ascending ``performance_percentage``
        (worst first, ties by name); ``"name"`` sorts alphabetically.

    Returns
    -------
    dict
        ``{"stations": [...], "summary": {...}}``.  Per station:
        ``total_cases``, ``registered_count``, ``chargesheeted_count``,
        ``finalized_count``, ``on_time_chargesheeted_count``,
        ``urgency_histogram``, ``performance_percentage``,
        ``completion_rate``.  The summary carries the summed counts,
        system-wide ``performance_percentage`` / ``completion_rate``,
        ``total_stations`` and ``average_performance_percentage`` (simple
        mean of the station percentages, two decimals).

    Notes
    -----
    ``performance_percentage`` measures timeliness: chargesheeted on or
    before the due date over all cases.  ``completion_rate`` is
    (chargesheeted + finalized) over all cases.  They are different
    metrics and both are always reported.
    """
    from firs.models import DisposalStatus
    from firs.services import UrgencyClassifierService

    if order not in PerformanceAggregationService.ORDER_CHOICES:
        raise DomainError(f"Unsupported order {order!r}.")

    status_counters = {
        DisposalStatus.REGISTERED: "registered_count",
        DisposalStatus.CHARGESHEETED: "chargesheeted_count",
        DisposalStatus.FINALIZED: "finalized_count",
    }

    rows: dict[int, dict[str, Any]] = {}
    for station in stations:
        rows[station["id"]] = {
            "station_id": station["id"],
            "station_name": station["name"],
            "station_code": station["code"],
            "subdivision": station["subdivision"],
            "district": station["district"],
            **_empty_counts(),
        }

    for case in cases:
        row = rows.get(case["police_station_id"])
        if row is None:
            continue
        status = case["disposal_status"]
        row["total_cases"] += 1
        if status in status_counters:
            row[status_counters[status]] += 1

        if status == DisposalStatus.REGISTERED:
            tier = UrgencyClassifierService.classify(case["disposal_due_date"], today)
            row["urgency_histogram"][tier] += 1
        elif (
            status == DisposalStatus.CHARGESHEETED
            and case["disposal_date"] is not None
            and case["disposal_date"] <= case["disposal_due_date"]
        ):
            row["on_time_chargesheeted_count"] += 1

    station_rows = list(rows.values())
    totals = _empty_counts()
    for row in station_rows:
        row["performance_percentage"] = round_percentage(
            row["on_time_chargesheeted_count"], row["total_cases"],
        )
        row["completion_rate"] = round_percentage(
            row["chargesheeted_count"] + row["finalized_count"], row["total_cases"],
        )
        for key, value in row.items():
            if key == "urgency_histogram":
                for tier, count in value.items():
                    totals["urgency_histogram"][tier] += count
            elif key in totals:
                totals[key] += value

    if station_rows:
        mean = Decimal(sum(r["performance_percentage"] for r in station_rows)) / len(station_rows)
        average = float(mean.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
    else:
        average = 0.0

    summary = {
        **totals,
        "total_stations": len(station_rows),
        "performance_percentage": round_percentage(
            totals["on_time_chargesheeted_count"], totals["total_cases"],
        ),
        "completion_rate": round_percentage(
            totals["chargesheeted_count"] + totals["finalized_count"],
            totals["total_cases"],
        ),
        "average_performance_percentage": average,
    }

    if order == "name":
        station_rows.sort(key=lambda r: (r["station_name"].casefold(), r["station_id"]))
    else:
        station_rows.sort(
            key=lambda r: (r["performance_percentage"], r["station_name"].casefold(), r["station_id"]),
        )

    return {"stations": station_rows, "summary": summary}


class PerformanceAggregationService:
    """
    Produces the station performance report consumed by
    ``PerformanceReportSerializer``.

    The report is **role-scoped**: the requested station filter is first
    narrowed by ``firs.services.FIRScopeService`` (out-of-scope stations
    silently drop out), then stations are enumerated from the station
    registry and the active FIRs of those stations are reduced by
    ``aggregate_performance``.

    Recognised filter keys: ``stations``, ``subdivision``, ``district``,
    ``disposal_status``, ``filed_after``, ``filed_before``.
    """

    ORDER_CHOICES: tuple[str, ...] = ("performance", "name")

    def __init__(
        self,
        user: User,
        filters: dict[str, Any] | None = None,
        *,
        order: str = "performance",
        today: datetime.date | None = None,
    ) -> None:
        self.user = user
        self.filters = dict(filters or {})
        self.order = order
        self.today = today or timezone.localdate()

    def get_report(self) -> dict[str, Any]:
        """Return ``{"stations", "summary", "generated_on", "order"}``."""
        from firs.services import FIRQueryService, FIRScopeService
        from stations.services import StationRegistryService

        FIR = apps.get_model("firs", "FIR")

        effective = FIRScopeService.scope_filters(self.user, self.filters)

        # Restricted users always get a concrete list; empty means nothing.
        requested_stations = effective.get("stations")
        if self.user.scoped_station_ids is None and not requested_stations:
            requested_stations = None

        stations = StationRegistryService.list_active_stations(
            self.user,
            {
                "stations": requested_stations,
                "subdivision": effective.get("subdivision"),
                "district": effective.get("district"),
            },
        )
        station_rows = list(stations.values("id", "name", "code", "subdivision", "district"))

        case_qs = FIR.objects.filter(
            is_active=True,
            police_station_id__in=[row["id"] for row in station_rows],
        )
        case_qs = FIRQueryService.apply_filters(
            case_qs,
            {
                key: effective.get(key)
                for key in ("disposal_status", "filed_after", "filed_before")
            },
        )
        cases = case_qs.values(
            "police_station_id", "disposal_status", "disposal_date", "disposal_due_date",
        )

        report = aggregate_performance(
            station_rows, cases, today=self.today, order=self.order,
        )
        report["generated_on"] = self.today
        report["order"] = self.order

        logger.info(
            "Performance report for %s: %d station(s), %d case(s)",
            self.user, report["summary"]["total_stations"], report["summary"]["total_cases"],
        )
        return report


# ════════════════════════════════════════════════════════════════════
#  Dashboard Aggregation Service
# ════════════════════════════════════════════════════════════════════

class DashboardAggregationService:
    """
    Produces the overview statistics dict consumed by
    ``DashboardStatsSerializer``.

    Scoped exactly like the FIR list: administrators see every station,
    station and subdivision officers see their own stations only.

    Contents: counts per disposal status, overdue count (Registered FIRs
    in the ``exceeded`` tier), completion and overdue rates, the urgency
    histogram of Registered FIRs, monthly filing trends for the last
    ``MONTHLY_TREND_MONTHS`` calendar months and the most recently filed
    FIRs.
    """

    def __init__(
        self,
        user: User,
        filters: dict[str, Any] | None = None,
        *,
        today: datetime.date | None = None,
    ) -> None:
        self.user = user
        self.filters = dict(filters or {})
        self.today = today or timezone.localdate()

    # ── Public API ──────────────────────────────────────────────────

    def get_stats(self) -> dict[str, Any]:
        """Return the full dashboard statistics dictionary."""
        from firs.models import DisposalStatus, UrgencyTier
        from firs.services import UrgencyClassifierService

        fir_qs = self._get_fir_queryset()

        tier_counts = {
            f"tier_{tier.value}": Count(
                "id", filter=UrgencyClassifierService.tier_q([tier], self.today),
            )
            for tier in UrgencyTier
        }
        aggregates = fir_qs.aggregate(
            total_cases=Count("id"),
            registered_count=Count("id", filter=Q(disposal_status=DisposalStatus.REGISTERED)),
            chargesheeted_count=Count("id", filter=Q(disposal_status=DisposalStatus.CHARGESHEETED)),
            finalized_count=Count("id", filter=Q(disposal_status=DisposalStatus.FINALIZED)),
            **tier_counts,
        )

        total = aggregates["total_cases"]
        overdue = aggregates[f"tier_{UrgencyTier.EXCEEDED.value}"]
        disposed = aggregates["chargesheeted_count"] + aggregates["finalized_count"]

        return {
            "total_cases": total,
            "registered_count": aggregates["registered_count"],
            "chargesheeted_count": aggregates["chargesheeted_count"],
            "finalized_count": aggregates["finalized_count"],
            "overdue_count": overdue,
            "completion_rate": round_percentage(disposed, total),
            "overdue_rate": round_percentage(overdue, total),
            "urgency_summary": {
                tier.value: aggregates[f"tier_{tier.value}"] for tier in UrgencyTier
            },
            "monthly_trends": self._get_monthly_trends(fir_qs),
            "recent_firs": self._get_recent_firs(fir_qs),
            "generated_on": self.today,
        }

    # ── Private helpers ─────────────────────────────────────────────

    def _get_fir_queryset(self) -> QuerySet:
        """Active FIRs scoped to the requesting user, without ordering."""
        from firs.services import FIRQueryService

        return FIRQueryService.get_filtered_queryset(
            self.user, self.filters, today=self.today,
        ).order_by().prefetch_related(None)

    def _trend_start(self) -> datetime.date:
        """First day of the oldest month in the trend window."""
        year, month = self.today.year, self.today.month - (MONTHLY_TREND_MONTHS - 1)
        while month <= 0:
            month += 12
            year -= 1
        return datetime.date(year, month, 1)

    def _get_monthly_trends(self, fir_qs: QuerySet) -> list[dict[str, Any]]:
        """Group FIRs filed in the trend window by filing month."""
        from firs.models import DisposalStatus

        rows = (
            fir_qs
            .filter(filing_date__gte=self._trend_start())
            .annotate(month=TruncMonth("filing_date"))
            .values("month")
            .annotate(
                total_cases=Count("id"),
                registered_count=Count("id", filter=Q(disposal_status=DisposalStatus.REGISTERED)),
                chargesheeted_count=Count("id", filter=Q(disposal_status=DisposalStatus.CHARGESHEETED)),
                finalized_count=Count("id", filter=Q(disposal_status=DisposalStatus.FINALIZED)),
            )
            .order_by("month")
        )
        return [
            {
                "month": row["month"].strftime("%Y-%m"),
                "total_cases": row["total_cases"],
                "registered_count": row["registered_count"],
                "chargesheeted_count": row["chargesheeted_count"],
                "finalized_count": row["finalized_count"],
            }
            for row in rows
        ]

    def _get_recent_firs(self, fir_qs: QuerySet) -> list[dict[str, Any]]:
        """Most recently filed FIRs (``RECENT_FIRS_LIMIT``)."""
        recent = (
            fir_qs
            .select_related("police_station", "created_by")
            .order_by("-filing_date", "-id")[:RECENT_FIRS_LIMIT]
        )
        return [
            {
                "id": fir.pk,
                "fir_number": fir.fir_number,
                "filing_date": fir.filing_date,
                "disposal_status": fir.disposal_status,
                "police_station": fir.police_station.name,
                "created_by": fir.created_by.username,
            }
            for fir in recent
        ]


# ════════════════════════════════════════════════════════════════════
#  System Constants Service
# ════════════════════════════════════════════════════════════════════

class SystemConstantsService:
    """
    Gathers all system-wide choice enumerations into a single dict for
    the frontend.

    This service is **stateless**; it does not depend on the requesting
    user.
    """

    @staticmethod
    def get_constants() -> dict[str, Any]:
        """Return all system constants as a dict."""
        from accounts.models import UserRole
        from firs.models import DisposalStatus, SeriousnessClass, UrgencyTier
        from firs.services import TIER_DAY_RANGES
        from stations.models import District

        to_list = SystemConstantsService._choices_to_list
        tier_labels = dict(UrgencyTier.choices)
        urgency_tiers = [
            {
                "value": str(tier),
                "label": str(tier_labels[tier]),
                "min_days": low,
                "max_days": high,
            }
            for tier, low, high in TIER_DAY_RANGES
        ]

        return {
            "seriousness_classes": to_list(SeriousnessClass),
            "disposal_statuses": to_list(DisposalStatus),
            "urgency_tiers": urgency_tiers,
            "districts": to_list(District),
            "user_roles": to_list(UserRole),
        }

    @staticmethod
    def _choices_to_list(
        choices_class: type,
    ) -> list[dict[str, str]]:
        """
        Convert a Django ``TextChoices`` or ``IntegerChoices`` class to
        a list of ``{"value": ..., "label": ...}`` dicts.
        """
        return [
            {"value": str(value), "label": str(label)}
            for value, label in choices_class.choices
        ]
