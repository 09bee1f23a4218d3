"""
FIRs app serializers.

Contains all Request and Response serializers for the FIR API.
Serializers handle field definitions and field-level validation only.
**No workflow transitions or deadline calculations live here**; the
computed ``days_remaining`` / ``urgency_tier`` fields call into
``services.UrgencyClassifierService``.

Structure
---------
1. Filter / query-param serializers
2. FIR read serializers (list, detail, remarks)
3. FIR write serializers (create, update, disposal, remark)
"""

from __future__ import annotations

from typing import Any

from django.utils import timezone
from rest_framework import serializers

from core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from stations.models import District

from .models import (
    FIR,
    ChargeSection,
    DisposalStatus,
    FIRRemark,
    SeriousnessClass,
    UrgencyTier,
    fir_number_validator,
)
from .services import ORDERING_FIELDS, UrgencyClassifierService


# ═══════════════════════════════════════════════════════════════════
#  1. Filter / Query-Parameter Serializers
# ═══════════════════════════════════════════════════════════════════


class FIRFilterSerializer(serializers.Serializer):
    """
    Validates and cleans query-parameter filters for ``GET /api/firs/``.

    All fields are optional.  Multi-valued parameters are repeated, e.g.
    ``?stations=3&stations=7&urgency=red&urgency=exceeded``.
    """

    stations = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        required=False,
        help_text="Station ids. Stations outside your scope match nothing.",
    )
    subdivision = serializers.CharField(required=False, max_length=100)
    district = serializers.ChoiceField(choices=District.choices, required=False)
    disposal_status = serializers.MultipleChoiceField(
        choices=DisposalStatus.choices,
        required=False,
    )
    urgency = serializers.MultipleChoiceField(
        choices=UrgencyTier.choices,
        required=False,
        help_text="Urgency tiers; only Registered FIRs have one.",
    )
    filed_after = serializers.DateField(required=False, help_text="Filing date on or after (ISO 8601).")
    filed_before = serializers.DateField(required=False, help_text="Filing date on or before (ISO 8601).")
    search = serializers.CharField(required=False, max_length=50, help_text="Substring of the FIR number.")
    ordering = serializers.ChoiceField(
        choices=[(value, value) for value in ORDERING_FIELDS],
        required=False,
        default="-filing_date",
    )
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    page_size = serializers.IntegerField(
        required=False,
        min_value=1,
        max_value=MAX_PAGE_SIZE,
        default=DEFAULT_PAGE_SIZE,
    )

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        after = attrs.get("filed_after")
        before = attrs.get("filed_before")
        if after and before and after > before:
            raise serializers.ValidationError(
                "filed_after must be earlier than filed_before."
            )
        return attrs


# ═══════════════════════════════════════════════════════════════════
#  2. FIR Read Serializers
# ═══════════════════════════════════════════════════════════════════


class ChargeSectionSerializer(serializers.ModelSerializer):
    class Meta:
        model = ChargeSection
        fields = ["act", "section"]


class FIRRemarkSerializer(serializers.ModelSerializer):
    added_by_name = serializers.SerializerMethodField()

    class Meta:
        model = FIRRemark
        fields = ["id", "remark", "added_by", "added_by_name", "created_at"]
        read_only_fields = fields

    def get_added_by_name(self, obj: FIRRemark) -> str:
        return obj.added_by.get_full_name() or obj.added_by.username


class FIRListSerializer(serializers.ModelSerializer):
    """
    Dashboard row.

    ``days_remaining`` and ``urgency_tier`` are derived on read from the
    stored due date and ``context["today"]`` (defaults to the local date);
    both are ``null`` once the FIR has been disposed of.
    """

    police_station_name = serializers.CharField(source="police_station.name", read_only=True)
    police_station_code = serializers.CharField(source="police_station.code", read_only=True)
    subdivision = serializers.CharField(source="police_station.subdivision", read_only=True)
    disposal_status_display = serializers.CharField(
        source="get_disposal_status_display",
        read_only=True,
    )
    charge_sections = ChargeSectionSerializer(many=True, read_only=True)
    days_remaining = serializers.SerializerMethodField()
    urgency_tier = serializers.SerializerMethodField()

    class Meta:
        model = FIR
        fields = [
            "id",
            "fir_number",
            "police_station",
            "police_station_name",
            "police_station_code",
            "subdivision",
            "filing_date",
            "seriousness_days",
            "disposal_due_date",
            "disposal_status",
            "disposal_status_display",
            "disposal_date",
            "charge_sections",
            "days_remaining",
            "urgency_tier",
        ]
        read_only_fields = fields

    def _today(self):
        return self.context.get("today") or timezone.localdate()

    def get_days_remaining(self, obj: FIR) -> int | None:
        if obj.disposal_status != DisposalStatus.REGISTERED:
            return None
        return UrgencyClassifierService.days_remaining(obj.disposal_due_date, self._today())

    def get_urgency_tier(self, obj: FIR) -> str | None:
        return UrgencyClassifierService.classify_fir(obj, self._today())


class FIRDetailSerializer(FIRListSerializer):
    """Full FIR including description, creator and the remark log."""

    created_by_name = serializers.SerializerMethodField()
    remarks = FIRRemarkSerializer(many=True, read_only=True)

    class Meta(FIRListSerializer.Meta):
        fields = FIRListSerializer.Meta.fields + [
            "description",
            "is_active",
            "created_by",
            "created_by_name",
            "remarks",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_created_by_name(self, obj: FIR) -> str:
        return obj.created_by.get_full_name() or obj.created_by.username


# ═══════════════════════════════════════════════════════════════════
#  3. FIR Write Serializers
# ═══════════════════════════════════════════════════════════════════


class ChargeSectionInputSerializer(serializers.Serializer):
    act = serializers.CharField(max_length=100, trim_whitespace=True)
    section = serializers.CharField(max_length=50, trim_whitespace=True)


class FIRCreateSerializer(serializers.Serializer):
    """
    Request body for ``POST /api/firs/``.

    The disposal due date is not accepted from the client; it is derived
    from ``filing_date`` and ``seriousness_days`` by the service layer.
    """

    fir_number = serializers.CharField(max_length=50, validators=[fir_number_validator])
    police_station = serializers.IntegerField(min_value=1, help_text="Station id.")
    filing_date = serializers.DateField()
    seriousness_days = serializers.ChoiceField(choices=SeriousnessClass.choices)
    charge_sections = ChargeSectionInputSerializer(many=True, allow_empty=False)
    description = serializers.CharField(required=False, allow_blank=True, default="")


class FIRUpdateSerializer(serializers.Serializer):
    """
    Request body for ``PATCH /api/firs/{id}/``.

    FIR number, station and filing date cannot be changed.  Changing
    ``seriousness_days`` leaves the stored due date untouched.
    """

    description = serializers.CharField(required=False, allow_blank=True)
    seriousness_days = serializers.ChoiceField(choices=SeriousnessClass.choices, required=False)
    charge_sections = ChargeSectionInputSerializer(many=True, allow_empty=False, required=False)


class DisposalSerializer(serializers.Serializer):
    """
    Request body for ``POST /api/firs/{id}/disposal/``.

    Any status is accepted here; whether the move is legal is decided by
    the disposal state machine.
    """

    disposal_status = serializers.ChoiceField(choices=DisposalStatus.choices)
    disposal_date = serializers.DateField()


class RemarkCreateSerializer(serializers.Serializer):
    remark = serializers.CharField(max_length=2000)
