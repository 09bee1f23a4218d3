"""
Core app serializers.

**Response-only** serializers for the aggregated endpoints served by the
core app, plus the query-parameter serializer shared by the report and
dashboard views.

Architectural note
------------------
These serializers never import models from other apps directly.  They
work exclusively with plain Python dicts / lists produced by the service
layer; choice lists for the query parameters are pulled in lazily.
"""

from __future__ import annotations

from typing import Any

from rest_framework import serializers


def _disposal_status_choices() -> list[tuple[str, str]]:
    from firs.models import DisposalStatus

    return DisposalStatus.choices


def _district_choices() -> list[tuple[str, str]]:
    from stations.models import District

    return District.choices


# ════════════════════════════════════════════════════════════════════
#  Query parameters
# ════════════════════════════════════════════════════════════════════

class ReportFilterSerializer(serializers.Serializer):
    """
    Query parameters accepted by the performance report and the
    dashboard overview.  Repeated ``stations`` / ``disposal_status``
    parameters are combined.
    """

    stations = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        required=False,
        help_text="Station ids; omit for every station in scope.",
    )
    subdivision = serializers.CharField(required=False, max_length=100)
    district = serializers.ChoiceField(choices=(), required=False)
    disposal_status = serializers.MultipleChoiceField(choices=(), required=False)
    filed_after = serializers.DateField(required=False)
    filed_before = serializers.DateField(required=False)
    order = serializers.ChoiceField(
        choices=[("performance", "Worst performers first"), ("name", "Alphabetical")],
        default="performance",
        required=False,
    )

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.fields["district"].choices = _district_choices()
        self.fields["disposal_status"].choices = _disposal_status_choices()

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        after, before = attrs.get("filed_after"), attrs.get("filed_before")
        if after and before and after > before:
            raise serializers.ValidationError(
                {"filed_before": "Must be on or after filed_after."}
            )
        return attrs


# ════════════════════════════════════════════════════════════════════
#  Performance Report
# ════════════════════════════════════════════════════════════════════

class UrgencyHistogramSerializer(serializers.Serializer):
    """
    Registered cases per urgency tier.

    Example::

        {"safe": 12, "yellow": 3, "orange": 1, "red": 0, "exceeded": 2}
    """

    safe = serializers.IntegerField()
    yellow = serializers.IntegerField()
    orange = serializers.IntegerField()
    red = serializers.IntegerField()
    exceeded = serializers.IntegerField()


class _CaseCountsSerializer(serializers.Serializer):
    total_cases = serializers.IntegerField()
    registered_count = serializers.IntegerField()
    chargesheeted_count = serializers.IntegerField()
    finalized_count = serializers.IntegerField()
    on_time_chargesheeted_count = serializers.IntegerField(
        help_text="Chargesheeted on or before the disposal due date.",
    )
    urgency_histogram = UrgencyHistogramSerializer()
    performance_percentage = serializers.IntegerField(
        help_text="On-time chargesheeted / total cases, rounded half up.",
    )
    completion_rate = serializers.IntegerField(
        help_text="(Chargesheeted + finalized) / total cases, rounded half up.",
    )


class StationPerformanceSerializer(_CaseCountsSerializer):
    station_id = serializers.IntegerField()
    station_name = serializers.CharField()
    station_code = serializers.CharField()
    subdivision = serializers.CharField()
    district = serializers.CharField()


class PerformanceSummarySerializer(_CaseCountsSerializer):
    total_stations = serializers.IntegerField()
    average_performance_percentage = serializers.FloatField(
        help_text="Simple mean of the per-station percentages.",
    )


class PerformanceReportSerializer(serializers.Serializer):
    """Top-level payload of ``GET /api/core/reports/performance/``."""

    generated_on = serializers.DateField()
    order = serializers.CharField()
    stations = StationPerformanceSerializer(many=True)
    summary = PerformanceSummarySerializer()


# ════════════════════════════════════════════════════════════════════
#  Dashboard Statistics
# ════════════════════════════════════════════════════════════════════

class MonthlyTrendSerializer(serializers.Serializer):
    """
    FIRs filed in one calendar month.

    Example::

        {"month": "2024-03", "total_cases": 9, "registered_count": 4,
         "chargesheeted_count": 3, "finalized_count": 2}
    """

    month = serializers.CharField(help_text="YYYY-MM")
    total_cases = serializers.IntegerField()
    registered_count = serializers.IntegerField()
    chargesheeted_count = serializers.IntegerField()
    finalized_count = serializers.IntegerField()


class RecentFIRSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    fir_number = serializers.CharField()
    filing_date = serializers.DateField()
    disposal_status = serializers.CharField()
    police_station = serializers.CharField()
    created_by = serializers.CharField()


class DashboardStatsSerializer(serializers.Serializer):
    """
    Top-level dashboard statistics payload.

    All counts are scoped to the requesting user's stations.
    """

    generated_on = serializers.DateField()
    total_cases = serializers.IntegerField()
    registered_count = serializers.IntegerField()
    chargesheeted_count = serializers.IntegerField()
    finalized_count = serializers.IntegerField()
    overdue_count = serializers.IntegerField(
        help_text="Registered FIRs past their disposal due date.",
    )
    completion_rate = serializers.IntegerField()
    overdue_rate = serializers.IntegerField()
    urgency_summary = UrgencyHistogramSerializer()
    monthly_trends = MonthlyTrendSerializer(many=True)
    recent_firs = RecentFIRSerializer(many=True)


# ════════════════════════════════════════════════════════════════════
#  System Constants
# ════════════════════════════════════════════════════════════════════

class ChoiceItemSerializer(serializers.Serializer):
    """
    A single choice item for frontend dropdowns.

    Example::

        {"value": "chargesheeted", "label": "Chargesheeted"}
    """

    value = serializers.CharField()
    label = serializers.CharField()


class UrgencyTierItemSerializer(ChoiceItemSerializer):
    min_days = serializers.IntegerField(allow_null=True, help_text="Inclusive; null means unbounded.")
    max_days = serializers.IntegerField(allow_null=True, help_text="Inclusive; null means unbounded.")


class SystemConstantsSerializer(serializers.Serializer):
    """
    Exposes all system choice enumerations so the frontend can build
    dropdowns and urgency legends without hard-coding values.
    """

    seriousness_classes = ChoiceItemSerializer(many=True)
    disposal_statuses = ChoiceItemSerializer(many=True)
    urgency_tiers = UrgencyTierItemSerializer(many=True)
    districts = ChoiceItemSerializer(many=True)
    user_roles = ChoiceItemSerializer(many=True)
