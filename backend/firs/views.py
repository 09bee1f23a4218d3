"""
FIRs app ViewSets.

Architecture: Views are intentionally thin.
Every view follows the strict three-step pattern:

    1. Parse / validate input via a serializer.
    2. Delegate all business logic to the appropriate service class.
    3. Serialize the result and return a DRF ``Response``.

ViewSets
--------
- ``FIRViewSet`` — list / create / retrieve / partial_update / destroy,
  plus the ``disposal`` and ``remarks`` actions.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from .serializers import (
    DisposalSerializer,
    FIRCreateSerializer,
    FIRDetailSerializer,
    FIRFilterSerializer,
    FIRListSerializer,
    FIRRemarkSerializer,
    FIRUpdateSerializer,
    RemarkCreateSerializer,
)
from .services import (
    DisposalService,
    FIRCreationService,
    FIRQueryService,
    FIRRemarkService,
    FIRUpdateService,
)

_PAGE_KEYS = ("page", "page_size", "ordering")


class FIRViewSet(viewsets.ViewSet):
    """
    /api/firs/

    Uses ``viewsets.ViewSet`` (not ``ModelViewSet``) so every action is
    explicitly defined.  Reads are scoped to the user's stations (other
    stations' FIRs are simply not found); writes on another station's
    FIR are refused with 403.
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"[0-9]+"

    # ── Standard CRUD ────────────────────────────────────────────────

    @extend_schema(
        summary="List FIRs (dashboard)",
        parameters=[FIRFilterSerializer],
        responses={200: FIRListSerializer(many=True)},
        tags=["FIRs"],
    )
    def list(self, request: Request) -> Response:
        """
        GET /api/firs/

        Returns ``{"results": [...], "pagination": {...}}``.  Each row
        carries ``days_remaining`` and ``urgency_tier``.
        """
        filter_serializer = FIRFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = dict(filter_serializer.validated_data)
        paging = {key: params.pop(key) for key in _PAGE_KEYS}

        page = FIRQueryService.get_dashboard_page(request.user, params, **paging)
        rows = FIRListSerializer(
            page["results"],
            many=True,
            context={"request": request, "today": page["today"]},
        )
        return Response(
            {"results": rows.data, "pagination": page["pagination"]},
            status=status.HTTP_200_OK,
        )

    @extend_schema(
        summary="File a new FIR",
        request=FIRCreateSerializer,
        responses={
            201: FIRDetailSerializer,
            403: OpenApiResponse(description="Station outside your scope."),
            404: OpenApiResponse(description="Station not found or inactive."),
            409: OpenApiResponse(description="FIR number already exists."),
        },
        tags=["FIRs"],
    )
    def create(self, request: Request) -> Response:
        serializer = FIRCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        fir = FIRCreationService.create_fir(serializer.validated_data, request.user)
        return Response(
            FIRDetailSerializer(fir, context={"request": request}).data,
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(
        summary="Retrieve an FIR",
        responses={200: FIRDetailSerializer, 404: OpenApiResponse(description="Not found.")},
        tags=["FIRs"],
    )
    def retrieve(self, request: Request, pk: str = None) -> Response:
        fir = FIRQueryService.get_fir_detail(request.user, pk)
        return Response(FIRDetailSerializer(fir, context={"request": request}).data)

    @extend_schema(
        summary="Edit an FIR",
        description="Only description, seriousness class and charge sections are editable. "
                    "The disposal due date is never recomputed.",
        request=FIRUpdateSerializer,
        responses={200: FIRDetailSerializer},
        tags=["FIRs"],
    )
    def partial_update(self, request: Request, pk: str = None) -> Response:
        fir = FIRQueryService.get_fir_for_write(pk)
        serializer = FIRUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        fir = FIRUpdateService.update_fir(fir, serializer.validated_data, request.user)
        return Response(FIRDetailSerializer(fir, context={"request": request}).data)

    @extend_schema(
        summary="Delete an FIR (admin, soft delete)",
        responses={204: None, 403: OpenApiResponse(description="Administrators only.")},
        tags=["FIRs"],
    )
    def destroy(self, request: Request, pk: str = None) -> Response:
        fir = FIRQueryService.get_fir_for_write(pk)
        FIRUpdateService.deactivate_fir(fir, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ── Workflow @actions ────────────────────────────────────────────

    @extend_schema(
        summary="Record a disposal",
        description="Registered → Chargesheeted → Finalized, one step at a time.",
        request=DisposalSerializer,
        responses={
            200: FIRDetailSerializer,
            400: OpenApiResponse(description="Disposal date before filing date."),
            403: OpenApiResponse(description="Station outside your scope."),
            409: OpenApiResponse(description="Illegal status transition."),
        },
        tags=["FIRs – Disposal"],
    )
    @action(detail=True, methods=["post"], url_path="disposal")
    def disposal(self, request: Request, pk: str = None) -> Response:
        fir = FIRQueryService.get_fir_for_write(pk)
        serializer = DisposalSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        fir = DisposalService.apply_disposal(
            fir,
            serializer.validated_data["disposal_status"],
            serializer.validated_data["disposal_date"],
            request.user,
        )
        return Response(FIRDetailSerializer(fir, context={"request": request}).data)

    @extend_schema(
        methods=["GET"],
        summary="List remarks",
        responses={200: FIRRemarkSerializer(many=True)},
        tags=["FIRs – Remarks"],
    )
    @extend_schema(
        methods=["POST"],
        summary="Append a remark",
        request=RemarkCreateSerializer,
        responses={201: FIRRemarkSerializer},
        tags=["FIRs – Remarks"],
    )
    @action(detail=True, methods=["get", "post"], url_path="remarks")
    def remarks(self, request: Request, pk: str = None) -> Response:
        if request.method == "GET":
            fir = FIRQueryService.get_fir_detail(request.user, pk)
            remarks = FIRRemarkService.list_remarks(fir)
            return Response(FIRRemarkSerializer(remarks, many=True).data)

        fir = FIRQueryService.get_fir_for_write(pk)
        serializer = RemarkCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        remark = FIRRemarkService.add_remark(
            fir, serializer.validated_data["remark"], request.user,
        )
        return Response(FIRRemarkSerializer(remark).data, status=status.HTTP_201_CREATED)
