"""
FIRs app URL configuration.

Included in the project-level ``urls.py`` as::

    path('api/', include('firs.urls')),

Endpoint Map
------------
    GET    /firs/                 → FIRViewSet.list
    POST   /firs/                 → FIRViewSet.create
    GET    /firs/{id}/            → FIRViewSet.retrieve
    PATCH  /firs/{id}/            → FIRViewSet.partial_update
    DELETE /firs/{id}/            → FIRViewSet.destroy (admin, soft delete)
    POST   /firs/{id}/disposal/   → FIRViewSet.disposal
    GET    /firs/{id}/remarks/    → FIRViewSet.remarks
    POST   /firs/{id}/remarks/    → FIRViewSet.remarks
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import FIRViewSet

app_name = "firs"

router = DefaultRouter()
router.register(r"firs", FIRViewSet, basename="fir")

urlpatterns = [
    path("", include(router.urls)),
]
