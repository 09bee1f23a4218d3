"""
Core app URL configuration.

Provides cross-app aggregation endpoints: the station performance report,
the dashboard overview and system-wide constants/enums.

URL prefix (registered in ``backend/urls.py``)::

    path('api/core/', include('core.urls'))

Endpoint summary
----------------
GET  /api/core/reports/performance/   — Per-station and system-wide performance.
GET  /api/core/dashboard/             — Aggregated dashboard statistics (role-aware).
GET  /api/core/constants/             — System choice enumerations for frontend dropdowns.
"""

from django.urls import path

from . import views

app_name = "core"

urlpatterns = [
    # ── Reports ──────────────────────────────────────────────────────
    path(
        "reports/performance/",
        views.PerformanceReportView.as_view(),
        name="performance-report",
    ),

    # ── Dashboard ────────────────────────────────────────────────────
    path(
        "dashboard/",
        views.DashboardStatsView.as_view(),
        name="dashboard-stats",
    ),

    # ── System Constants / Enums ─────────────────────────────────────
    path(
        "constants/",
        views.SystemConstantsView.as_view(),
        name="system-constants",
    ),
]
