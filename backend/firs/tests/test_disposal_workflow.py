"""
Integration tests — forward-only disposal workflow.

Service layer:  ``DisposalService.apply_disposal``
Endpoint:       POST /api/firs/{id}/disposal/   (named URL: firs:fir-disposal)

Error mapping (``core.domain.exception_handler``):
    InvalidTransition → 409 {"code": "illegal_transition"}
    InvalidDate       → 400 {"code": "invalid_date"}
    PermissionDenied  → 403 {"code": "access_denied"}
    NotFound          → 404 {"code": "not_found"}
"""

from __future__ import annotations

import datetime

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from accounts.models import User, UserRole
from core.domain.exceptions import InvalidDate, InvalidTransition, NotFound, PermissionDenied
from firs.models import FIR, DisposalStatus
from firs.services import DisposalService, FIRCreationService, UrgencyClassifierService
from stations.models import District, Station

D = datetime.date


def _file(station: Station, user: User, number: str, filed: datetime.date = D(2025, 1, 1)) -> FIR:
    return FIRCreationService.create_fir(
        {
            "fir_number": number,
            "police_station": station.pk,
            "filing_date": filed,
            "seriousness_days": 90,
            "charge_sections": [{"act": "BNS", "section": "318"}],
        },
        user,
        today=D(2025, 3, 1),
    )


class TestDisposalService(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.panaji = Station.objects.create(
            name="Panaji PS", code="PANAJIPS", subdivision="Panaji", district=District.NORTH,
        )
        cls.margao = Station.objects.create(
            name="Margao Town PS", code="MARGAOTOWNPS", subdivision="Margao", district=District.SOUTH,
        )
        cls.admin = User.objects.create_user(username="admin_disp", password="x", role=UserRole.ADMIN)
        cls.officer = User.objects.create_user(
            username="panaji_officer", password="x",
            role=UserRole.STATION_OFFICER, station=cls.panaji,
        )

    def test_registered_to_chargesheeted(self):
        fir = _file(self.panaji, self.admin, "1/2025")
        updated = DisposalService.apply_disposal(
            fir, DisposalStatus.CHARGESHEETED, D(2025, 2, 1), self.officer,
        )
        self.assertEqual(updated.disposal_status, DisposalStatus.CHARGESHEETED)
        self.assertEqual(updated.disposal_date, D(2025, 2, 1))
        self.assertIsNone(UrgencyClassifierService.classify_fir(updated, D(2025, 2, 2)))

    def test_full_pipeline(self):
        fir = _file(self.panaji, self.admin, "2/2025")
        fir = DisposalService.apply_disposal(fir, DisposalStatus.CHARGESHEETED, D(2025, 2, 1), self.admin)
        fir = DisposalService.apply_disposal(fir, DisposalStatus.FINALIZED, D(2025, 3, 1), self.admin)
        self.assertEqual(fir.disposal_status, DisposalStatus.FINALIZED)
        self.assertEqual(fir.disposal_date, D(2025, 3, 1))
        fir.refresh_from_db()
        self.assertEqual(fir.disposal_date, D(2025, 3, 1))

    def test_registered_cannot_skip_to_finalized(self):
        fir = _file(self.panaji, self.admin, "3/2025")
        with self.assertRaises(InvalidTransition):
            DisposalService.apply_disposal(fir, DisposalStatus.FINALIZED, D(2025, 2, 1), self.admin)
        fir.refresh_from_db()
        self.assertEqual(fir.disposal_status, DisposalStatus.REGISTERED)
        self.assertIsNone(fir.disposal_date)

    def test_finalized_is_terminal(self):
        fir = _file(self.panaji, self.admin, "4/2025")
        fir = DisposalService.apply_disposal(fir, DisposalStatus.CHARGESHEETED, D(2025, 2, 1), self.admin)
        fir = DisposalService.apply_disposal(fir, DisposalStatus.FINALIZED, D(2025, 3, 1), self.admin)
        for target in (DisposalStatus.REGISTERED, DisposalStatus.CHARGESHEETED, DisposalStatus.FINALIZED):
            with self.subTest(target=target):
                with self.assertRaises(InvalidTransition):
                    DisposalService.apply_disposal(fir, target, D(2025, 3, 2), self.admin)

    def test_no_backward_step(self):
        fir = _file(self.panaji, self.admin, "5/2025")
        fir = DisposalService.apply_disposal(fir, DisposalStatus.CHARGESHEETED, D(2025, 2, 1), self.admin)
        with self.assertRaises(InvalidTransition):
            DisposalService.apply_disposal(fir, DisposalStatus.REGISTERED, D(2025, 2, 2), self.admin)

    def test_disposal_before_filing_rejected(self):
        fir = _file(self.panaji, self.admin, "6/2025", filed=D(2025, 1, 10))
        with self.assertRaises(InvalidDate):
            DisposalService.apply_disposal(fir, DisposalStatus.CHARGESHEETED, D(2025, 1, 9), self.admin)
        fir.refresh_from_db()
        self.assertEqual(fir.disposal_status, DisposalStatus.REGISTERED)

    def test_disposal_on_filing_day_allowed(self):
        fir = _file(self.panaji, self.admin, "7/2025", filed=D(2025, 1, 10))
        fir = DisposalService.apply_disposal(fir, DisposalStatus.CHARGESHEETED, D(2025, 1, 10), self.admin)
        self.assertEqual(fir.disposal_date, D(2025, 1, 10))

    def test_out_of_scope_officer_denied(self):
        fir = _file(self.margao, self.admin, "8/2025")
        with self.assertRaises(PermissionDenied):
            DisposalService.apply_disposal(fir, DisposalStatus.CHARGESHEETED, D(2025, 2, 1), self.officer)

    def test_scope_checked_before_transition(self):
        fir = _file(self.margao, self.admin, "9/2025")
        with self.assertRaises(PermissionDenied):
            DisposalService.apply_disposal(fir, DisposalStatus.FINALIZED, D(2024, 1, 1), self.officer)

    def test_inactive_fir_not_found(self):
        fir = _file(self.panaji, self.admin, "10/2025")
        FIR.objects.filter(pk=fir.pk).update(is_active=False)
        with self.assertRaises(NotFound):
            DisposalService.apply_disposal(fir, DisposalStatus.CHARGESHEETED, D(2025, 2, 1), self.admin)


class TestDisposalEndpoint(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.panaji = Station.objects.create(
            name="Panaji PS", code="PANAJIPS", subdivision="Panaji", district=District.NORTH,
        )
        cls.margao = Station.objects.create(
            name="Margao Town PS", code="MARGAOTOWNPS", subdivision="Margao", district=District.SOUTH,
        )
        cls.admin = User.objects.create_user(username="admin_api", password="x", role=UserRole.ADMIN)
        cls.officer = User.objects.create_user(
            username="panaji_api_officer", password="x",
            role=UserRole.STATION_OFFICER, station=cls.panaji,
        )

    def setUp(self):
        self.client = APIClient()

    def _login(self, user: User) -> None:
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {AccessToken.for_user(user)}")

    def _url(self, fir: FIR) -> str:
        return reverse("firs:fir-disposal", kwargs={"pk": fir.pk})

    def test_chargesheet_returns_updated_fir(self):
        fir = _file(self.panaji, self.admin, "21/2025")
        self._login(self.officer)
        resp = self.client.post(
            self._url(fir),
            {"disposal_status": "chargesheeted", "disposal_date": "2025-02-01"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.data)
        self.assertEqual(resp.data["disposal_status"], "chargesheeted")
        self.assertEqual(resp.data["disposal_date"], "2025-02-01")
        self.assertIsNone(resp.data["urgency_tier"])
        self.assertIsNone(resp.data["days_remaining"])

    def test_illegal_transition_is_409(self):
        fir = _file(self.panaji, self.admin, "22/2025")
        self._login(self.admin)
        resp = self.client.post(
            self._url(fir),
            {"disposal_status": "finalized", "disposal_date": "2025-02-01"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(resp.data["code"], "illegal_transition")
        self.assertEqual(resp.data["current"], "registered")
        self.assertEqual(resp.data["target"], "finalized")

    def test_date_before_filing_is_400(self):
        fir = _file(self.panaji, self.admin, "23/2025")
        self._login(self.admin)
        resp = self.client.post(
            self._url(fir),
            {"disposal_status": "chargesheeted", "disposal_date": "2024-12-31"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["code"], "invalid_date")

    def test_other_station_is_403(self):
        fir = _file(self.margao, self.admin, "24/2025")
        self._login(self.officer)
        resp = self.client.post(
            self._url(fir),
            {"disposal_status": "chargesheeted", "disposal_date": "2025-02-01"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(resp.data["code"], "access_denied")

    def test_missing_fir_is_404(self):
        self._login(self.admin)
        resp = self.client.post(
            reverse("firs:fir-disposal", kwargs={"pk": 999999}),
            {"disposal_status": "chargesheeted", "disposal_date": "2025-02-01"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.data["code"], "not_found")

    def test_unknown_status_is_400(self):
        fir = _file(self.panaji, self.admin, "25/2025")
        self._login(self.admin)
        resp = self.client.post(
            self._url(fir),
            {"disposal_status": "closed", "disposal_date": "2025-02-01"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_anonymous_is_401(self):
        fir = _file(self.panaji, self.admin, "26/2025")
        resp = self.client.post(
            self._url(fir),
            {"disposal_status": "chargesheeted", "disposal_date": "2025-02-01"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
