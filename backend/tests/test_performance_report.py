"""
Performance report tests.

Covers the pure ``aggregate_performance`` reduction, the role-scoped
``PerformanceAggregationService`` and
``GET /api/core/reports/performance/`` (named URL: core:performance-report).
"""

from __future__ import annotations

import datetime

import pytest
from django.urls import reverse
from rest_framework import status

from core.domain.exceptions import DomainError
from core.services import PerformanceAggregationService, aggregate_performance, round_percentage
from firs.models import FIR
from stations.models import District

D = datetime.date
TODAY = D(2025, 2, 25)


# ════════════════════════════════════════════════════════════════════
#  round_percentage
# ════════════════════════════════════════════════════════════════════

class TestRoundPercentage:

    @pytest.mark.parametrize(
        "part,whole,expected",
        [
            (4, 10, 40),
            (0, 0, 0),
            (0, 7, 0),
            (7, 7, 100),
            (1, 8, 13),     # 12.5 rounds up
            (1, 3, 33),
            (2, 3, 67),
            (4, 14, 29),
        ],
    )
    def test_values(self, part, whole, expected):
        assert round_percentage(part, whole) == expected


# ════════════════════════════════════════════════════════════════════
#  aggregate_performance (pure)
# ════════════════════════════════════════════════════════════════════

def _station(pk: int, name: str) -> dict:
    return {"id": pk, "name": name, "code": name.upper().replace(" ", ""), "subdivision": "X", "district": "north_district"}


def _case(station_id: int, status: str, due: D, disposed: D | None = None) -> dict:
    return {
        "police_station_id": station_id,
        "disposal_status": status,
        "disposal_date": disposed,
        "disposal_due_date": due,
    }


class TestAggregatePerformance:

    def test_forty_percent_scenario(self):
        due = D(2025, 3, 2)
        cases = [_case(1, "chargesheeted", due, D(2025, 2, 1)) for _ in range(4)]
        cases += [_case(1, "registered", due) for _ in range(6)]

        report = aggregate_performance([_station(1, "Panaji PS")], cases, today=TODAY)
        row = report["stations"][0]

        assert row["total_cases"] == 10
        assert row["on_time_chargesheeted_count"] == 4
        assert row["performance_percentage"] == 40
        assert row["completion_rate"] == 40
        assert row["urgency_histogram"] == {"safe": 0, "yellow": 0, "orange": 6, "red": 0, "exceeded": 0}

    def test_chargesheet_on_due_date_is_on_time(self):
        due = D(2025, 3, 2)
        report = aggregate_performance(
            [_station(1, "A")], [_case(1, "chargesheeted", due, due)], today=TODAY,
        )
        assert report["stations"][0]["performance_percentage"] == 100

    def test_late_chargesheet_and_finalized_count_for_completion_only(self):
        due = D(2025, 1, 1)
        cases = [
            _case(1, "chargesheeted", due, D(2025, 1, 2)),
            _case(1, "finalized", due, D(2024, 12, 1)),
        ]
        row = aggregate_performance([_station(1, "A")], cases, today=TODAY)["stations"][0]
        assert row["performance_percentage"] == 0
        assert row["completion_rate"] == 100

    def test_zero_case_station_is_listed(self):
        report = aggregate_performance([_station(1, "A"), _station(2, "B")], [], today=TODAY)
        assert [r["station_id"] for r in report["stations"]] == [1, 2]
        for row in report["stations"]:
            assert row["total_cases"] == 0
            assert row["performance_percentage"] == 0
            assert row["completion_rate"] == 0
        assert report["summary"]["average_performance_percentage"] == 0.0

    def test_no_stations(self):
        report = aggregate_performance([], [], today=TODAY)
        assert report["stations"] == []
        assert report["summary"]["total_stations"] == 0
        assert report["summary"]["performance_percentage"] == 0
        assert report["summary"]["average_performance_percentage"] == 0.0

    def test_cases_of_unlisted_stations_ignored(self):
        report = aggregate_performance(
            [_station(1, "A")], [_case(99, "registered", TODAY)], today=TODAY,
        )
        assert report["summary"]["total_cases"] == 0

    def test_average_is_unweighted_mean(self):
        due = D(2025, 3, 2)
        cases = [_case(1, "chargesheeted", due, D(2025, 2, 1))]                  # A: 1/1 -> 100
        cases += [_case(2, "chargesheeted", due, D(2025, 2, 1))]                 # B: 1/9 -> 11
        cases += [_case(2, "registered", due) for _ in range(8)]
        report = aggregate_performance([_station(1, "A"), _station(2, "B"), _station(3, "C")], cases, today=TODAY)

        summary = report["summary"]
        assert summary["performance_percentage"] == 20                          # 2 / 10
        assert summary["average_performance_percentage"] == 37.0                # (100 + 11 + 0) / 3

    def test_average_rounds_to_two_decimals(self):
        due = D(2025, 3, 2)
        cases = [_case(1, "chargesheeted", due, D(2025, 2, 1))]
        report = aggregate_performance(
            [_station(1, "A"), _station(2, "B"), _station(3, "C")], cases, today=TODAY,
        )
        assert report["summary"]["average_performance_percentage"] == 33.33

    def test_sort_orders(self):
        due = D(2025, 3, 2)
        stations = [_station(1, "Zuari PS"), _station(2, "Agacaim PS"), _station(3, "Mapusa PS")]
        cases = [_case(1, "registered", due), _case(3, "chargesheeted", due, D(2025, 2, 1))]

        worst_first = aggregate_performance(stations, cases, today=TODAY)
        assert [r["station_name"] for r in worst_first["stations"]] == ["Agacaim PS", "Zuari PS", "Mapusa PS"]

        alphabetical = aggregate_performance(stations, cases, today=TODAY, order="name")
        assert [r["station_name"] for r in alphabetical["stations"]] == ["Agacaim PS", "Mapusa PS", "Zuari PS"]

    def test_unknown_order_rejected(self):
        with pytest.raises(DomainError):
            aggregate_performance([], [], today=TODAY, order="random")


# ════════════════════════════════════════════════════════════════════
#  PerformanceAggregationService + endpoint
# ════════════════════════════════════════════════════════════════════

@pytest.fixture()
def goa(create_station, create_user, create_fir):
    """
    Three stations:

    * Panaji PS: 10 FIRs due 2025-03-02, 4 chargesheeted on time, 6 open.
    * Mapusa PS: one late chargesheet, one finalized, one open and safe,
      one open and overdue (on 2025-02-25).
    * Vasco PS: no FIRs.
    """
    panaji = create_station(name="Panaji PS", subdivision="Panaji")
    mapusa = create_station(name="Mapusa PS", subdivision="Mapusa")
    vasco = create_station(name="Vasco PS", subdivision="Vasco", district=District.SOUTH)
    admin = create_user(username="report_admin")

    for index in range(10):
        if index < 4:
            create_fir(station=panaji, user=admin, filing_date=D(2025, 1, 1),
                       status="chargesheeted", disposal_date=D(2025, 2, 1))
        else:
            create_fir(station=panaji, user=admin, filing_date=D(2025, 1, 1))

    create_fir(station=mapusa, user=admin, filing_date=D(2024, 10, 1),
               status="chargesheeted", disposal_date=D(2024, 12, 5))
    create_fir(station=mapusa, user=admin, filing_date=D(2024, 10, 1),
               status="finalized", disposal_date=D(2024, 11, 1))
    create_fir(station=mapusa, user=admin, filing_date=D(2025, 2, 20))
    create_fir(station=mapusa, user=admin, filing_date=D(2024, 12, 1))

    return {"panaji": panaji, "mapusa": mapusa, "vasco": vasco, "admin": admin}


@pytest.mark.django_db
class TestPerformanceAggregationService:

    def test_admin_report(self, goa):
        report = PerformanceAggregationService(goa["admin"], today=TODAY).get_report()

        rows = {r["station_name"]: r for r in report["stations"]}
        assert [r["station_name"] for r in report["stations"]] == ["Mapusa PS", "Vasco PS", "Panaji PS"]

        assert rows["Panaji PS"]["performance_percentage"] == 40
        assert rows["Panaji PS"]["urgency_histogram"]["orange"] == 6

        mapusa = rows["Mapusa PS"]
        assert mapusa["total_cases"] == 4
        assert mapusa["chargesheeted_count"] == 1
        assert mapusa["finalized_count"] == 1
        assert mapusa["performance_percentage"] == 0
        assert mapusa["completion_rate"] == 50
        assert mapusa["urgency_histogram"] == {"safe": 1, "yellow": 0, "orange": 0, "red": 0, "exceeded": 1}

        assert rows["Vasco PS"]["total_cases"] == 0

        summary = report["summary"]
        assert summary["total_stations"] == 3
        assert summary["total_cases"] == 14
        assert summary["registered_count"] == 8
        assert summary["on_time_chargesheeted_count"] == 4
        assert summary["performance_percentage"] == 29
        assert summary["completion_rate"] == 43
        assert summary["average_performance_percentage"] == 13.33
        assert summary["urgency_histogram"] == {"safe": 1, "yellow": 0, "orange": 6, "red": 0, "exceeded": 1}

    def test_station_officer_sees_own_station_only(self, goa, create_user):
        officer = create_user(role="station_officer", station=goa["panaji"])
        report = PerformanceAggregationService(officer, today=TODAY).get_report()

        assert [r["station_name"] for r in report["stations"]] == ["Panaji PS"]
        assert report["summary"]["total_cases"] == 10
        assert report["summary"]["performance_percentage"] == 40

    def test_station_officer_asking_for_other_station_gets_nothing(self, goa, create_user):
        officer = create_user(role="station_officer", station=goa["panaji"])
        report = PerformanceAggregationService(
            officer, {"stations": [goa["mapusa"].pk]}, today=TODAY,
        ).get_report()

        assert report["stations"] == []
        assert report["summary"]["total_cases"] == 0

    def test_subdivision_officer(self, goa, create_user):
        sdpo = create_user(role="subdivision_officer", stations=[goa["panaji"], goa["vasco"]])
        report = PerformanceAggregationService(sdpo, order="name", today=TODAY).get_report()
        assert [r["station_name"] for r in report["stations"]] == ["Panaji PS", "Vasco PS"]
        assert report["summary"]["average_performance_percentage"] == 20.0

    def test_status_filter(self, goa):
        report = PerformanceAggregationService(
            goa["admin"], {"disposal_status": ["registered"]}, today=TODAY,
        ).get_report()
        assert report["summary"]["total_cases"] == 8
        assert report["summary"]["on_time_chargesheeted_count"] == 0

    def test_filing_date_filter(self, goa):
        report = PerformanceAggregationService(
            goa["admin"], {"filed_after": D(2025, 1, 1)}, today=TODAY,
        ).get_report()
        assert report["summary"]["total_cases"] == 11

    def test_inactive_station_and_fir_excluded(self, goa):
        goa["vasco"].is_active = False
        goa["vasco"].save()
        FIR.objects.filter(police_station=goa["mapusa"], filing_date=D(2024, 12, 1)).update(is_active=False)

        report = PerformanceAggregationService(goa["admin"], today=TODAY).get_report()
        assert report["summary"]["total_stations"] == 2
        assert report["summary"]["total_cases"] == 13


@pytest.mark.django_db
class TestPerformanceReportEndpoint:

    def test_requires_authentication(self, api_client):
        resp = api_client.get(reverse("core:performance-report"))
        assert resp.status_code == status.HTTP_401_UNAUTHORIZED

    def test_admin_alphabetical(self, goa, api_client, auth_header):
        api_client.credentials(HTTP_AUTHORIZATION=auth_header()["Authorization"])
        resp = api_client.get(reverse("core:performance-report"), {"order": "name"})

        assert resp.status_code == status.HTTP_200_OK
        data = resp.json()
        assert data["order"] == "name"
        assert [r["station_name"] for r in data["stations"]] == ["Mapusa PS", "Panaji PS", "Vasco PS"]
        assert data["stations"][1]["performance_percentage"] == 40
        assert data["summary"]["average_performance_percentage"] == 13.33
        assert data["summary"]["total_cases"] == 14

    def test_panaji_officer_scoped(self, goa, api_client, auth_header):
        header = auth_header(role="station_officer", station=goa["panaji"])
        api_client.credentials(HTTP_AUTHORIZATION=header["Authorization"])
        resp = api_client.get(reverse("core:performance-report"))

        data = resp.json()
        assert [r["station_name"] for r in data["stations"]] == ["Panaji PS"]
        assert data["summary"]["total_stations"] == 1

    def test_bad_order_is_400(self, goa, api_client, auth_header):
        api_client.credentials(HTTP_AUTHORIZATION=auth_header()["Authorization"])
        resp = api_client.get(reverse("core:performance-report"), {"order": "random"})
        assert resp.status_code == status.HTTP_400_BAD_REQUEST
