"""
Core app views — **Thin Views**.

Each view delegates all business logic to the corresponding service in
``core.services``.  Views are responsible only for:

1. Extracting and validating query parameters from the request.
2. Calling the service with the authenticated user and parameters.
3. Serialising the result and returning an HTTP ``Response``.

No model imports, no aggregation logic, no cross-app queries.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from drf_spectacular.utils import OpenApiResponse, extend_schema

from .serializers import (
    DashboardStatsSerializer,
    PerformanceReportSerializer,
    ReportFilterSerializer,
    SystemConstantsSerializer,
)
from .services import (
    DashboardAggregationService,
    PerformanceAggregationService,
    SystemConstantsService,
)


class PerformanceReportView(APIView):
    """
    **GET /api/core/reports/performance/**

    Per-station and system-wide disposal performance.

    **Authentication**: Required (``IsAuthenticated``).

    **Query Parameters**: see ``ReportFilterSerializer``.  ``order`` is
    ``performance`` (worst first, default) or ``name``.

    **Response** (``200 OK``):
        Serialised by ``PerformanceReportSerializer``.  Every active
        station in scope appears, including stations with no cases.

    **Error Responses**:
        - ``400 Bad Request``: Invalid filter values.
        - ``401 Unauthorized``: Missing or invalid credentials.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Station performance report",
        parameters=[ReportFilterSerializer],
        responses={
            200: OpenApiResponse(response=PerformanceReportSerializer, description="Performance report."),
            400: OpenApiResponse(description="Invalid filter parameters."),
        },
        tags=["Reports"],
    )
    def get(self, request: Request) -> Response:
        filter_serializer = ReportFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        filters = dict(filter_serializer.validated_data)
        order = filters.pop("order", "performance")

        report = PerformanceAggregationService(
            user=request.user, filters=filters, order=order,
        ).get_report()
        return Response(PerformanceReportSerializer(report).data, status=status.HTTP_200_OK)


class DashboardStatsView(APIView):
    """
    **GET /api/core/dashboard/**

    Return aggregated dashboard statistics for the authenticated user.

    The response payload is **role-aware**: an administrator sees every
    station, while station and subdivision officers see only the FIRs of
    their own stations.  See ``DashboardAggregationService``.

    **Authentication**: Required (``IsAuthenticated``).

    **Query Parameters**: the station and date filters of
    ``ReportFilterSerializer`` (``order`` is ignored).

    **Response** (``200 OK``):
        Serialised by ``DashboardStatsSerializer``.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Dashboard statistics",
        parameters=[ReportFilterSerializer],
        responses={200: OpenApiResponse(response=DashboardStatsSerializer, description="Dashboard stats.")},
        tags=["Dashboard"],
    )
    def get(self, request: Request) -> Response:
        filter_serializer = ReportFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        filters = dict(filter_serializer.validated_data)
        filters.pop("order", None)

        service = DashboardAggregationService(user=request.user, filters=filters)
        data = service.get_stats()
        serializer = DashboardStatsSerializer(data)
        return Response(serializer.data, status=status.HTTP_200_OK)


class SystemConstantsView(APIView):
    """
    **GET /api/core/constants/**

    Return all system choice enumerations (seriousness classes, disposal
    statuses, urgency tiers with their day thresholds, districts, user
    roles) so the frontend never hard-codes them.

    **Authentication**: Required (``IsAuthenticated``).
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="System constants",
        responses={200: OpenApiResponse(response=SystemConstantsSerializer, description="Choice enumerations.")},
        tags=["System"],
    )
    def get(self, request: Request) -> Response:
        data = SystemConstantsService.get_constants()
        serializer = SystemConstantsSerializer(data)
        return Response(serializer.data, status=status.HTTP_200_OK)
