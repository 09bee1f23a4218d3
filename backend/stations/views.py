"""
Stations app views.

Thin read-only endpoints over ``StationRegistryService``.
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from .serializers import (
    HierarchyDistrictSerializer,
    StationFilterSerializer,
    StationSerializer,
)
from .services import StationRegistryService


class StationViewSet(viewsets.ViewSet):
    """
    /api/stations/

    Lists only active stations within the requesting user's scope.
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"[0-9]+"

    @extend_schema(
        summary="List stations",
        parameters=[StationFilterSerializer],
        responses={200: StationSerializer(many=True)},
        tags=["Stations"],
    )
    def list(self, request: Request) -> Response:
        filter_serializer = StationFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        stations = StationRegistryService.list_active_stations(
            request.user, filter_serializer.validated_data,
        )
        return Response(StationSerializer(stations, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Retrieve a station",
        responses={200: StationSerializer},
        tags=["Stations"],
    )
    def retrieve(self, request: Request, pk: str = None) -> Response:
        station = StationRegistryService.get_station_detail(request.user, pk)
        return Response(StationSerializer(station).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Station hierarchy",
        description="District → Subdivision → Station, with special units listed flat.",
        responses={200: HierarchyDistrictSerializer(many=True)},
        tags=["Stations"],
    )
    @action(detail=False, methods=["get"], url_path="hierarchy")
    def hierarchy(self, request: Request) -> Response:
        tree = StationRegistryService.get_hierarchy(request.user)
        return Response(HierarchyDistrictSerializer(tree, many=True).data, status=status.HTTP_200_OK)
