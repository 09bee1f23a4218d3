"""
Stations app URL configuration.

Endpoint Map
------------
    GET /stations/             → StationViewSet.list
    GET /stations/{id}/        → StationViewSet.retrieve
    GET /stations/hierarchy/   → StationViewSet.hierarchy
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import StationViewSet

app_name = "stations"

router = DefaultRouter()
router.register(r"stations", StationViewSet, basename="station")

urlpatterns = [
    path("", include(router.urls)),
]
