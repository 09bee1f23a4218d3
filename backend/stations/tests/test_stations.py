"""
Tests for the station registry: list / detail / hierarchy endpoints and
the ``seed_stations`` management command.
"""

from __future__ import annotations

from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from accounts.models import User, UserRole
from stations.management.commands.seed_stations import STATION_HIERARCHY, station_code_for
from stations.models import District, Station
from stations.services import StationRegistryService


class TestSeedStations(TestCase):

    def _seed(self) -> str:
        out = StringIO()
        call_command("seed_stations", stdout=out)
        return out.getvalue()

    def test_seeds_every_station(self):
        self._seed()
        expected = sum(len(names) for groups in STATION_HIERARCHY.values() for names in groups.values())
        self.assertEqual(Station.objects.count(), expected)
        panaji = Station.objects.get(name="Panaji PS")
        self.assertEqual(panaji.code, "PANAJIPS")
        self.assertEqual(panaji.subdivision, "Panaji")
        self.assertEqual(panaji.district, District.NORTH)
        self.assertEqual(Station.objects.get(name="CCPS").district, District.SPECIAL_UNIT)

    def test_idempotent(self):
        self._seed()
        count = Station.objects.count()
        output = self._seed()
        self.assertEqual(Station.objects.count(), count)
        self.assertIn("0 station(s) created, 0 station(s) updated", output)

    def test_repairs_drifted_subdivision(self):
        self._seed()
        Station.objects.filter(name="Mapusa PS").update(subdivision="Wrong")
        output = self._seed()
        self.assertEqual(Station.objects.get(name="Mapusa PS").subdivision, "Mapusa")
        self.assertIn("1 station(s) updated", output)

    def test_station_code_for(self):
        self.assertEqual(station_code_for("Old Goa PS"), "OLDGOAPS")
        self.assertEqual(station_code_for("SIT (LAND GRABBING)"), "SITLANDGRABBING")


class TestStationEndpoints(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.panaji = Station.objects.create(
            name="Panaji PS", code="PANAJIPS", subdivision="Panaji", district=District.NORTH,
        )
        cls.agacaim = Station.objects.create(
            name="Agacaim PS", code="AGACAIMPS", subdivision="Panaji", district=District.NORTH,
        )
        cls.margao = Station.objects.create(
            name="Margao Town PS", code="MARGAOTOWNPS", subdivision="Margao", district=District.SOUTH,
        )
        cls.ccps = Station.objects.create(
            name="CCPS", code="ccps", subdivision="Cyber Crime", district=District.SPECIAL_UNIT,
        )
        cls.closed = Station.objects.create(
            name="Old Goa PS", code="OLDGOAPS", subdivision="Panaji",
            district=District.NORTH, is_active=False,
        )
        cls.admin = User.objects.create_user(username="st_admin", password="x", role=UserRole.ADMIN)
        cls.officer = User.objects.create_user(
            username="st_officer", password="x",
            role=UserRole.STATION_OFFICER, station=cls.panaji,
        )
        cls.unassigned = User.objects.create_user(
            username="st_unassigned", password="x", role=UserRole.STATION_OFFICER,
        )

    def setUp(self):
        self.client = APIClient()

    def _login(self, user: User) -> None:
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {AccessToken.for_user(user)}")

    def test_code_is_uppercased_on_save(self):
        self.assertEqual(self.ccps.code, "CCPS")

    def test_list_excludes_inactive(self):
        self._login(self.admin)
        resp = self.client.get(reverse("stations:station-list"))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [row["name"] for row in resp.data],
            ["Agacaim PS", "CCPS", "Margao Town PS", "Panaji PS"],
        )

    def test_list_filters_by_district(self):
        self._login(self.admin)
        resp = self.client.get(reverse("stations:station-list"), {"district": "south_district"})
        self.assertEqual([row["name"] for row in resp.data], ["Margao Town PS"])

    def test_officer_sees_own_station(self):
        self._login(self.officer)
        resp = self.client.get(reverse("stations:station-list"))
        self.assertEqual([row["name"] for row in resp.data], ["Panaji PS"])

    def test_unassigned_officer_sees_nothing(self):
        self._login(self.unassigned)
        resp = self.client.get(reverse("stations:station-list"))
        self.assertEqual(resp.data, [])

    def test_detail_outside_scope_is_404(self):
        self._login(self.officer)
        resp = self.client.get(reverse("stations:station-detail", kwargs={"pk": self.margao.pk}))
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_detail_inactive_is_404(self):
        self._login(self.admin)
        resp = self.client.get(reverse("stations:station-detail", kwargs={"pk": self.closed.pk}))
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_hierarchy_shape(self):
        self._login(self.admin)
        resp = self.client.get(reverse("stations:station-hierarchy"))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [d["district"] for d in resp.data],
            ["north_district", "south_district", "special_unit"],
        )
        north = resp.data[0]
        self.assertFalse(north["is_special_unit"])
        self.assertEqual(north["subdivisions"][0]["name"], "Panaji")
        self.assertEqual(
            [s["name"] for s in north["subdivisions"][0]["stations"]],
            ["Agacaim PS", "Panaji PS"],
        )
        special = resp.data[2]
        self.assertTrue(special["is_special_unit"])
        self.assertEqual(special["subdivisions"][0]["stations"][0]["code"], "CCPS")

    def test_hierarchy_is_scoped(self):
        tree = StationRegistryService.get_hierarchy(self.officer)
        self.assertEqual(len(tree), 1)
        self.assertEqual(tree[0]["subdivisions"][0]["stations"][0]["id"], self.panaji.pk)
