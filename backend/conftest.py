"""
Root conftest.py — shared fixtures for the entire test suite.

Provides:
  - ``api_client`` fixture returning a DRF ``APIClient``.
  - ``create_station`` factory fixture for registry stations.
  - ``create_user`` factory fixture for creating test users.
  - ``create_fir`` factory fixture that files FIRs through the service layer.
  - ``auth_header`` fixture for authenticated requests (JWT).
"""

from __future__ import annotations

import datetime

import pytest
from rest_framework.test import APIClient


@pytest.fixture()
def api_client() -> APIClient:
    """Unauthenticated DRF test client."""
    return APIClient()


@pytest.fixture()
def create_station(db):
    """
    Factory fixture that creates an active station.

    Usage::

        def test_something(create_station):
            panaji = create_station(name="Panaji PS", subdivision="Panaji")
    """
    from stations.models import District, Station

    _counter = 0

    def _factory(
        *,
        name: str | None = None,
        code: str | None = None,
        subdivision: str = "Panaji",
        district: str = District.NORTH,
        **kwargs,
    ) -> Station:
        nonlocal _counter
        _counter += 1
        if name is None:
            name = f"Test PS {_counter}"
        if code is None:
            code = "".join(ch for ch in name.upper() if ch.isalnum())
        return Station.objects.create(
            name=name,
            code=code,
            subdivision=subdivision,
            district=district,
            **kwargs,
        )

    return _factory


@pytest.fixture()
def create_user(db):
    """
    Factory fixture that creates a user with sensible defaults.

    Usage::

        def test_something(create_user, create_station):
            officer = create_user(role="station_officer", station=create_station())
            sdpo = create_user(role="subdivision_officer", stations=[a, b])
    """
    from accounts.models import User, UserRole

    _counter = 0

    def _factory(
        *,
        username: str | None = None,
        password: str = "TestPass123!",
        email: str | None = None,
        role: str = UserRole.ADMIN,
        station=None,
        stations=(),
        is_active: bool = True,
        **kwargs,
    ) -> User:
        nonlocal _counter
        _counter += 1
        if username is None:
            username = f"testuser{_counter}"
        if email is None:
            email = f"{username}@test.local"

        user = User.objects.create_user(
            username=username,
            password=password,
            email=email,
            role=role,
            station=station,
            is_active=is_active,
            **kwargs,
        )
        if stations:
            user.stations.set(stations)
        return user

    return _factory


@pytest.fixture()
def create_fir(db):
    """
    Factory fixture that files an FIR through ``FIRCreationService``
    (so the due date is computed exactly as in production) and can then
    move it along the disposal pipeline.

    Usage::

        fir = create_fir(station=ps, user=admin, filing_date=date(2025, 1, 1))
        done = create_fir(
            station=ps, user=admin, filing_date=date(2025, 1, 1),
            status="chargesheeted", disposal_date=date(2025, 2, 1),
        )
    """
    from firs.models import DisposalStatus
    from firs.services import DisposalService, FIRCreationService

    _counter = 0

    def _factory(
        *,
        station,
        user,
        filing_date: datetime.date,
        seriousness_days: int = 60,
        status: str = DisposalStatus.REGISTERED,
        disposal_date: datetime.date | None = None,
        fir_number: str | None = None,
    ):
        nonlocal _counter
        _counter += 1
        if fir_number is None:
            fir_number = f"{_counter}/{filing_date.year}"

        fir = FIRCreationService.create_fir(
            {
                "fir_number": fir_number,
                "police_station": station.pk,
                "filing_date": filing_date,
                "seriousness_days": seriousness_days,
                "charge_sections": [{"act": "BNS", "section": "303"}],
            },
            user,
            today=max(filing_date, datetime.date.today()),
        )
        if status != DisposalStatus.REGISTERED:
            fir = DisposalService.apply_disposal(
                fir, DisposalStatus.CHARGESHEETED, disposal_date, user,
            )
        if status == DisposalStatus.FINALIZED:
            fir = DisposalService.apply_disposal(
                fir, DisposalStatus.FINALIZED, disposal_date, user,
            )
        return fir

    return _factory


@pytest.fixture()
def auth_header(create_user):
    """
    Returns a helper function that creates a user and returns an
    ``Authorization`` header dict with a valid JWT access token.

    Usage::

        def test_protected(auth_header, api_client):
            header = auth_header(username="alice")
            api_client.credentials(HTTP_AUTHORIZATION=header["Authorization"])
            resp = api_client.get("/api/core/dashboard/")
            assert resp.status_code != 401

    The returned dict looks like::

        {"Authorization": "Bearer eyJ..."}
    """
    from rest_framework_simplejwt.tokens import AccessToken

    def _make(
        *,
        username: str | None = None,
        **user_kwargs,
    ) -> dict[str, str]:
        user = create_user(username=username, **user_kwargs)
        token = AccessToken.for_user(user)
        return {"Authorization": f"Bearer {token}"}

    return _make
