"""
FIRs app Service Layer.

This module is the **single source of truth** for all business logic
in the ``firs`` app.  Views must remain thin: validate input via
serializers, call a service method, and return the result wrapped in
a DRF ``Response``.

Architecture
------------
- ``DeadlineCalculatorService`` — Disposal due date from filing date + class.
- ``UrgencyClassifierService``  — Days remaining → ``UrgencyTier``.
- ``FIRScopeService``           — Narrow requested filters to the actor's stations.
- ``FIRQueryService``           — Filtered / sorted / paginated querysets.
- ``FIRCreationService``        — Filing a new FIR.
- ``FIRUpdateService``          — Editing and soft-deleting an FIR.
- ``DisposalService``           — Forward-only disposal state machine.
- ``FIRRemarkService``          — Append-only remarks.

Disposal State-Machine Overview
-------------------------------
  REGISTERED → CHARGESHEETED → FINALIZED

  * Every step is one-way; skipping a step, repeating the current
    status or moving backwards raises ``InvalidTransition``.
  * Leaving REGISTERED sets ``disposal_date``, which must not precede
    ``filing_date``.
"""

from __future__ import annotations

import datetime
import logging
import math
from typing import TYPE_CHECKING, Any, Iterable

from django.core.paginator import Paginator
from django.db import IntegrityError, transaction
from django.db.models import Q, QuerySet
from django.utils import timezone

from core.constants import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    ORANGE_MIN_DAYS,
    RED_MIN_DAYS,
    SAFE_ABOVE_DAYS,
    YELLOW_MIN_DAYS,
)
from core.domain.access import apply_role_scope, require_role
from core.domain.exceptions import (
    Conflict,
    DomainError,
    InvalidDate,
    InvalidTransition,
    NotFound,
    PermissionDenied,
)
from core.domain.transactions import lock_for_update

from .models import FIR, ChargeSection, DisposalStatus, FIRRemark, SeriousnessClass, UrgencyTier

if TYPE_CHECKING:
    from accounts.models import User

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  Valid transition map
# ═══════════════════════════════════════════════════════════════════

#: Maps current status → set of statuses it may move to.
ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    DisposalStatus.REGISTERED: {DisposalStatus.CHARGESHEETED},
    DisposalStatus.CHARGESHEETED: {DisposalStatus.FINALIZED},
    DisposalStatus.FINALIZED: set(),
}

#: ``(tier, min_days, max_days)`` — inclusive bounds on days remaining,
#: ``None`` meaning unbounded.  Ordered from least to most urgent.
TIER_DAY_RANGES: list[tuple[str, int | None, int | None]] = [
    (UrgencyTier.SAFE, SAFE_ABOVE_DAYS + 1, None),
    (UrgencyTier.YELLOW, YELLOW_MIN_DAYS, SAFE_ABOVE_DAYS),
    (UrgencyTier.ORANGE, ORANGE_MIN_DAYS, YELLOW_MIN_DAYS - 1),
    (UrgencyTier.RED, RED_MIN_DAYS, ORANGE_MIN_DAYS - 1),
    (UrgencyTier.EXCEEDED, None, RED_MIN_DAYS - 1),
]

#: Accepted values of the ``ordering`` query parameter.
ORDERING_FIELDS: tuple[str, ...] = (
    "filing_date", "-filing_date",
    "disposal_due_date", "-disposal_due_date",
    "fir_number", "-fir_number",
    "created_at", "-created_at",
)


# ═══════════════════════════════════════════════════════════════════
#  Deadline Calculator
# ═══════════════════════════════════════════════════════════════════

class DeadlineCalculatorService:
    """
    Computes the statutory disposal due date of an FIR.

    Called exactly once, when the FIR is created.  The result is stored
    on ``FIR.disposal_due_date`` and never re-derived, even if the
    seriousness class is edited later.
    """

    @staticmethod
    def compute_due_date(
        filing_date: datetime.date,
        seriousness_days: int,
    ) -> datetime.date:
        """
        Parameters
        ----------
        filing_date : date | datetime
            Date the FIR was filed.  For a ``datetime`` only the calendar
            date is used, so the time of day and timezone never shift
            the result.
        seriousness_days : int
            One of ``SeriousnessClass`` (60, 90, 180).

        Returns
        -------
        date
            ``filing_date + seriousness_days`` calendar days.

        Raises
        ------
        DomainError
            ``seriousness_days`` is not a valid seriousness class.
        """
        if seriousness_days not in SeriousnessClass.values:
            raise DomainError(
                f"Invalid seriousness class {seriousness_days!r}. "
                f"Allowed values: {', '.join(str(v) for v in SeriousnessClass.values)}."
            )
        if isinstance(filing_date, datetime.datetime):
            filing_date = filing_date.date()
        return filing_date + datetime.timedelta(days=int(seriousness_days))


# ═══════════════════════════════════════════════════════════════════
#  Urgency Classifier
# ═══════════════════════════════════════════════════════════════════

class UrgencyClassifierService:
    """
    **Single Source of Truth** for urgency tiers.

    The dashboard list, the performance report and the overview all
    classify through this class; the tier boundaries come from
    ``TIER_DAY_RANGES`` (built from ``core.constants``).

    ==================  ==========
    days remaining      tier
    ==================  ==========
    d > 15              safe
    10 <= d <= 15       yellow
    5 <= d < 10         orange
    0 < d < 5           red
    d <= 0              exceeded
    ==================  ==========
    """

    @staticmethod
    def days_remaining(
        due_date: datetime.date,
        now: datetime.date | datetime.datetime,
    ) -> int:
        """
        ``ceil((due_date - now) / 1 day)``.

        With a plain ``date`` for ``now`` this is the whole-day
        difference.  With a ``datetime`` the due date is taken as
        midnight in ``now``'s timezone, so any part of a day still left
        counts as a full day.
        """
        if isinstance(now, datetime.datetime):
            due_start = datetime.datetime.combine(due_date, datetime.time.min, tzinfo=now.tzinfo)
            return math.ceil((due_start - now).total_seconds() / 86400)
        return (due_date - now).days

    @staticmethod
    def classify_days(days: int) -> str:
        """Map a days-remaining count to exactly one ``UrgencyTier``."""
        for tier, low, high in TIER_DAY_RANGES:
            if (low is None or days >= low) and (high is None or days <= high):
                return tier
        raise AssertionError(f"No urgency tier covers {days} days.")

    @staticmethod
    def classify(
        due_date: datetime.date,
        now: datetime.date | datetime.datetime,
    ) -> str:
        return UrgencyClassifierService.classify_days(
            UrgencyClassifierService.days_remaining(due_date, now),
        )

    @staticmethod
    def classify_fir(fir: FIR, today: datetime.date) -> str | None:
        """
        Tier of a Registered FIR; ``None`` once it has been disposed of
        (chargesheeted or finalized FIRs are not tiered).
        """
        if fir.disposal_status != DisposalStatus.REGISTERED:
            return None
        return UrgencyClassifierService.classify(fir.disposal_due_date, today)

    @staticmethod
    def due_date_bounds(
        tier: str,
        today: datetime.date,
    ) -> tuple[datetime.date | None, datetime.date | None]:
        """
        Inclusive ``(earliest, latest)`` due dates that fall in ``tier``
        on ``today``.  ``None`` marks an open end.

        Lets the query layer filter by tier inside the database with the
        same boundaries ``classify`` uses.
        """
        for candidate, low, high in TIER_DAY_RANGES:
            if candidate == tier:
                earliest = today + datetime.timedelta(days=low) if low is not None else None
                latest = today + datetime.timedelta(days=high) if high is not None else None
                return earliest, latest
        raise DomainError(f"Unknown urgency tier {tier!r}.")

    @staticmethod
    def tier_q(tiers: Iterable[str], today: datetime.date) -> Q:
        """``Q`` matching Registered FIRs whose due date falls in any of ``tiers``."""
        combined = Q()
        for tier in tiers:
            earliest, latest = UrgencyClassifierService.due_date_bounds(tier, today)
            condition = Q()
            if earliest is not None:
                condition &= Q(disposal_due_date__gte=earliest)
            if latest is not None:
                condition &= Q(disposal_due_date__lte=latest)
            combined |= condition
        return Q(disposal_status=DisposalStatus.REGISTERED) & combined


# ═══════════════════════════════════════════════════════════════════
#  Role-Scoped View Filter
# ═══════════════════════════════════════════════════════════════════

class FIRScopeService:
    """
    Narrows what an actor may see or change.

    * admin / superuser — requested filters pass through unchanged.
    * station officer — intersected with their own station.
    * subdivision officer — intersected with their station list.

    Reads silently drop out-of-scope stations (possibly leaving nothing);
    writes that name an out-of-scope station are denied.
    """

    @staticmethod
    def scope_filters(
        user: User,
        requested: dict[str, Any] | None = None,
        *,
        for_write: bool = False,
    ) -> dict[str, Any]:
        """
        Return the effective filter dict for ``user``.

        Parameters
        ----------
        user : User
        requested : dict, optional
            Caller-supplied filters.  Only the ``stations`` key (iterable of
            station ids; empty or missing means "all") is rewritten; every
            other key is copied unchanged.
        for_write : bool
            ``True`` for mutating operations.

        Returns
        -------
        dict
            For restricted users ``stations`` is always a concrete sorted
            list (empty when nothing is in scope).

        Raises
        ------
        PermissionDenied
            ``for_write`` and ``requested["stations"]`` names a station
            outside the user's scope.
        """
        effective = dict(requested or {})
        allowed = user.scoped_station_ids
        if allowed is None:
            return effective

        requested_ids = set(effective.get("stations") or ())
        if not requested_ids:
            effective["stations"] = sorted(allowed)
            return effective

        outside = requested_ids - allowed
        if outside and for_write:
            raise PermissionDenied(
                "You are not authorised for station(s): "
                f"{', '.join(str(pk) for pk in sorted(outside))}."
            )
        effective["stations"] = sorted(requested_ids & allowed)
        return effective

    @staticmethod
    def ensure_can_write(user: User, station_id: int) -> None:
        """
        Raises
        ------
        PermissionDenied
            ``station_id`` is outside the user's scope.
        """
        FIRScopeService.scope_filters(user, {"stations": [station_id]}, for_write=True)


# ═══════════════════════════════════════════════════════════════════
#  Query Service
# ═══════════════════════════════════════════════════════════════════

_FIR_SCOPE_CONFIG = {
    "admin": lambda qs, u: qs,
    "station_officer": lambda qs, u: qs.filter(police_station_id__in=u.scoped_station_ids),
    "subdivision_officer": lambda qs, u: qs.filter(police_station_id__in=u.scoped_station_ids),
}


class FIRQueryService:
    """
    Builds role-scoped, filtered querysets of active FIRs.

    Recognised filter keys
    ----------------------
    ``stations``         iterable of station ids
    ``subdivision``      station subdivision name
    ``district``         ``stations.models.District`` value
    ``disposal_status``  iterable of ``DisposalStatus`` values
    ``urgency``          iterable of ``UrgencyTier`` values (Registered only)
    ``filed_after``      filing date lower bound (inclusive)
    ``filed_before``     filing date upper bound (inclusive)
    ``search``           substring of the FIR number
    """

    @staticmethod
    def base_queryset() -> QuerySet:
        return (
            FIR.objects.filter(is_active=True)
            .select_related("police_station", "created_by")
            .prefetch_related("charge_sections")
        )

    @staticmethod
    def apply_filters(
        queryset: QuerySet,
        filters: dict[str, Any],
        today: datetime.date | None = None,
    ) -> QuerySet:
        if filters.get("stations") is not None:
            queryset = queryset.filter(police_station_id__in=list(filters["stations"]))
        if filters.get("subdivision"):
            queryset = queryset.filter(police_station__subdivision=filters["subdivision"])
        if filters.get("district"):
            queryset = queryset.filter(police_station__district=filters["district"])
        if filters.get("disposal_status"):
            queryset = queryset.filter(disposal_status__in=list(filters["disposal_status"]))
        if filters.get("filed_after"):
            queryset = queryset.filter(filing_date__gte=filters["filed_after"])
        if filters.get("filed_before"):
            queryset = queryset.filter(filing_date__lte=filters["filed_before"])
        if filters.get("search"):
            queryset = queryset.filter(fir_number__icontains=filters["search"])
        if filters.get("urgency"):
            today = today or timezone.localdate()
            queryset = queryset.filter(
                UrgencyClassifierService.tier_q(filters["urgency"], today),
            )
        return queryset

    @staticmethod
    def get_filtered_queryset(
        user: User,
        filters: dict[str, Any] | None = None,
        *,
        ordering: str = "-filing_date",
        today: datetime.date | None = None,
    ) -> QuerySet:
        """
        Active FIRs visible to ``user`` narrowed by ``filters``.

        Stations outside the user's scope simply match nothing.
        """
        qs = apply_role_scope(
            FIRQueryService.base_queryset(),
            user,
            scope_config=_FIR_SCOPE_CONFIG,
        )
        qs = FIRQueryService.apply_filters(qs, filters or {}, today)
        if ordering not in ORDERING_FIELDS:
            raise DomainError(f"Unsupported ordering {ordering!r}.")
        return qs.order_by(ordering, "-id" if ordering.startswith("-") else "id")

    @staticmethod
    def get_dashboard_page(
        user: User,
        filters: dict[str, Any] | None = None,
        *,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        ordering: str = "-filing_date",
        today: datetime.date | None = None,
    ) -> dict[str, Any]:
        """
        One page of the dashboard FIR list.

        Returns
        -------
        dict
            ``{"results": [FIR, ...], "today": date, "pagination": {...}}``.
            Out-of-range page numbers are clamped to the nearest valid page.
        """
        today = today or timezone.localdate()
        qs = FIRQueryService.get_filtered_queryset(
            user, filters, ordering=ordering, today=today,
        )
        paginator = Paginator(qs, min(max(page_size, 1), MAX_PAGE_SIZE))
        page_obj = paginator.get_page(page)
        return {
            "results": list(page_obj.object_list),
            "today": today,
            "pagination": {
                "current_page": page_obj.number,
                "total_pages": paginator.num_pages,
                "total_items": paginator.count,
                "items_per_page": paginator.per_page,
                "has_next": page_obj.has_next(),
                "has_previous": page_obj.has_previous(),
            },
        }

    @staticmethod
    def get_fir_detail(user: User, fir_id: int) -> FIR:
        """
        Raises
        ------
        NotFound
            Missing, inactive or outside the user's scope.
        """
        qs = apply_role_scope(
            FIRQueryService.base_queryset(),
            user,
            scope_config=_FIR_SCOPE_CONFIG,
        )
        try:
            return qs.get(pk=fir_id)
        except FIR.DoesNotExist:
            raise NotFound(f"FIR with id {fir_id} not found.")

    @staticmethod
    def get_fir_for_write(fir_id: int) -> FIR:
        """
        Active FIR regardless of scope.  Write paths check scope
        explicitly afterwards so an out-of-scope write is a 403, not a 404.
        """
        try:
            return FIRQueryService.base_queryset().get(pk=fir_id)
        except FIR.DoesNotExist:
            raise NotFound(f"FIR with id {fir_id} not found.")


# ═══════════════════════════════════════════════════════════════════
#  Creation / Update
# ═══════════════════════════════════════════════════════════════════

def _validate_charge_sections(sections: list[dict[str, str]]) -> list[dict[str, str]]:
    if not sections:
        raise DomainError("At least one charge section is required.")
    cleaned = []
    for entry in sections:
        act = (entry.get("act") or "").strip()
        section = (entry.get("section") or "").strip()
        if not act or not section:
            raise DomainError("Each charge section needs both an act and a section.")
        cleaned.append({"act": act, "section": section})
    return cleaned


def _replace_charge_sections(fir: FIR, sections: list[dict[str, str]]) -> None:
    fir.charge_sections.all().delete()
    ChargeSection.objects.bulk_create([
        ChargeSection(fir=fir, act=entry["act"], section=entry["section"], position=index)
        for index, entry in enumerate(sections)
    ])


class FIRCreationService:
    """Files new FIRs."""

    @staticmethod
    @transaction.atomic
    def create_fir(
        validated_data: dict[str, Any],
        requesting_user: User,
        *,
        today: datetime.date | None = None,
    ) -> FIR:
        """
        Create an FIR and fix its disposal due date.

        Parameters
        ----------
        validated_data : dict
            Keys: ``fir_number``, ``police_station`` (station id),
            ``filing_date``, ``seriousness_days``, ``charge_sections``
            (list of ``{"act", "section"}``), optional ``description``.
        requesting_user : User

        Returns
        -------
        FIR

        Raises
        ------
        PermissionDenied
            Station outside the user's scope.
        NotFound
            Station missing or inactive.
        DomainError
            Future filing date, bad seriousness class or charge sections.
        Conflict
            FIR number already in use.
        """
        from stations.services import StationRegistryService

        station_id = validated_data["police_station"]
        FIRScopeService.ensure_can_write(requesting_user, station_id)
        station = StationRegistryService.get_active_station(station_id)

        today = today or timezone.localdate()
        filing_date = validated_data["filing_date"]
        if filing_date > today:
            raise DomainError("Filing date cannot be in the future.")

        sections = _validate_charge_sections(validated_data.get("charge_sections") or [])
        seriousness_days = validated_data["seriousness_days"]
        due_date = DeadlineCalculatorService.compute_due_date(filing_date, seriousness_days)

        fir_number = validated_data["fir_number"].strip()
        if FIR.objects.filter(fir_number=fir_number).exists():
            raise Conflict(f"FIR number '{fir_number}' already exists.")

        try:
            with transaction.atomic():
                fir = FIR.objects.create(
                    fir_number=fir_number,
                    police_station=station,
                    filing_date=filing_date,
                    seriousness_days=seriousness_days,
                    disposal_due_date=due_date,
                    description=validated_data.get("description", ""),
                    created_by=requesting_user,
                )
        except IntegrityError as exc:
            # Lost a race with a concurrent filing of the same number.
            raise Conflict(f"FIR number '{fir_number}' already exists.") from exc
        _replace_charge_sections(fir, sections)

        logger.info(
            "FIR %s (pk=%d) filed at %s by %s, due %s",
            fir.fir_number, fir.pk, station.code, requesting_user, due_date,
        )
        return fir


class FIRUpdateService:
    """Edits and soft-deletes existing FIRs."""

    #: Fields an update may touch.  FIR number, station and filing date
    #: are fixed at creation; status and dates go through ``DisposalService``.
    EDITABLE_FIELDS: tuple[str, ...] = ("description", "seriousness_days", "charge_sections")

    @staticmethod
    @transaction.atomic
    def update_fir(fir: FIR, validated_data: dict[str, Any], requesting_user: User) -> FIR:
        """
        Apply editable changes to ``fir``.

        Changing ``seriousness_days`` does **not** move
        ``disposal_due_date``; the deadline is fixed at filing.

        Raises
        ------
        PermissionDenied
            FIR's station outside the user's scope.
        DomainError
            Bad seriousness class or charge sections.
        """
        FIRScopeService.ensure_can_write(requesting_user, fir.police_station_id)

        update_fields = []
        if "description" in validated_data:
            fir.description = validated_data["description"]
            update_fields.append("description")
        if "seriousness_days" in validated_data:
            if validated_data["seriousness_days"] not in SeriousnessClass.values:
                raise DomainError(
                    f"Invalid seriousness class {validated_data['seriousness_days']!r}."
                )
            fir.seriousness_days = validated_data["seriousness_days"]
            update_fields.append("seriousness_days")
        if "charge_sections" in validated_data:
            _replace_charge_sections(fir, _validate_charge_sections(validated_data["charge_sections"]))

        if update_fields:
            fir.save(update_fields=[*update_fields, "updated_at"])

        logger.info("FIR %s (pk=%d) updated by %s", fir.fir_number, fir.pk, requesting_user)
        return FIRQueryService.get_fir_for_write(fir.pk)

    @staticmethod
    def deactivate_fir(fir: FIR, requesting_user: User) -> None:
        """
        Soft-delete ``fir``.  Administrators only.

        Raises
        ------
        PermissionDenied
            Requesting user is not an administrator.
        """
        require_role(requesting_user, "admin", message="Only administrators can delete FIRs.")
        fir.is_active = False
        fir.save(update_fields=["is_active", "updated_at"])
        logger.info("FIR %s (pk=%d) deactivated by %s", fir.fir_number, fir.pk, requesting_user)


# ═══════════════════════════════════════════════════════════════════
#  Disposal State Machine
# ═══════════════════════════════════════════════════════════════════

class DisposalService:
    """
    Validates and applies disposal-status transitions.

    All checks run before anything is written, on a row locked with
    ``select_for_update`` so two concurrent disposals of the same FIR
    serialise.
    """

    @staticmethod
    def validate_transition(current: str, target: str) -> None:
        """
        Raises
        ------
        InvalidTransition
            ``target`` is not a legal next status after ``current``.
        """
        if target not in ALLOWED_TRANSITIONS.get(current, set()):
            allowed = ALLOWED_TRANSITIONS.get(current, set())
            if allowed:
                reason = f"Allowed next status: {', '.join(sorted(allowed))}."
            else:
                reason = f"An FIR in status '{current}' cannot change status."
            raise InvalidTransition(current=str(current), target=str(target), reason=reason)

    @staticmethod
    def validate_disposal_date(fir: FIR, disposal_date: datetime.date) -> None:
        """
        Raises
        ------
        InvalidDate
            ``disposal_date`` precedes the FIR's filing date.
        """
        if disposal_date < fir.filing_date:
            raise InvalidDate(
                f"Disposal date {disposal_date.isoformat()} is before the "
                f"filing date {fir.filing_date.isoformat()}."
            )

    @staticmethod
    def apply_disposal(
        fir: FIR,
        new_status: str,
        disposal_date: datetime.date,
        requesting_user: User,
    ) -> FIR:
        """
        Move ``fir`` to ``new_status`` as of ``disposal_date``.

        ``disposal_date`` always holds the date of the latest transition,
        so finalizing a chargesheeted FIR replaces its chargesheet date.

        Check order: FIR exists and is active → user scope covers the
        FIR's station → transition is legal → disposal date is not
        before the filing date.

        Returns
        -------
        FIR
            The updated FIR.  It no longer has an urgency tier.

        Raises
        ------
        NotFound
        PermissionDenied
        InvalidTransition
        InvalidDate
        """
        with transaction.atomic():
            locked = lock_for_update(FIR, fir.pk)
            if not locked.is_active:
                raise NotFound(f"FIR with id {fir.pk} not found.")

            FIRScopeService.ensure_can_write(requesting_user, locked.police_station_id)
            DisposalService.validate_transition(locked.disposal_status, new_status)
            DisposalService.validate_disposal_date(locked, disposal_date)

            previous = locked.disposal_status
            locked.disposal_status = new_status
            locked.disposal_date = disposal_date
            locked.save(update_fields=["disposal_status", "disposal_date", "updated_at"])

        logger.info(
            "FIR %s (pk=%d) moved %s -> %s on %s by %s",
            locked.fir_number, locked.pk, previous, new_status,
            disposal_date, requesting_user,
        )
        return FIRQueryService.get_fir_for_write(locked.pk)


# ═══════════════════════════════════════════════════════════════════
#  Remarks
# ═══════════════════════════════════════════════════════════════════

class FIRRemarkService:
    """Append-only remark log.  Remarks are never edited or deleted."""

    @staticmethod
    def add_remark(fir: FIR, text: str, requesting_user: User) -> FIRRemark:
        FIRScopeService.ensure_can_write(requesting_user, fir.police_station_id)
        text = (text or "").strip()
        if not text:
            raise DomainError("Remark text cannot be empty.")
        remark = FIRRemark.objects.create(fir=fir, remark=text, added_by=requesting_user)
        logger.info("Remark added to FIR %s (pk=%d) by %s", fir.fir_number, fir.pk, requesting_user)
        return remark

    @staticmethod
    def list_remarks(fir: FIR) -> QuerySet:
        return fir.remarks.select_related("added_by").order_by("created_at", "id")
