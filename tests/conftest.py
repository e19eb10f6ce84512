"""Shared fixtures: temp preference store, in-memory booking rows, API client."""

from typing import Any, Dict

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_booking_repository, get_split_preference
from app.main import app
from app.services.booking_repository import BookingNotFoundError
from app.services.split_preference import DefaultSplitPreference, LocalPreferenceStorage


class InMemoryBookingRepository:
    """Stands in for the Supabase-backed repository."""

    def __init__(self, rows: Dict[str, Dict[str, Any]]):
        self.rows = rows

    def get_fees(self, booking_id: str) -> Dict[str, Any]:
        if booking_id not in self.rows:
            raise BookingNotFoundError(booking_id)
        return dict(self.rows[booking_id])

    def update_fees(self, booking_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        if booking_id not in self.rows:
            raise BookingNotFoundError(booking_id)
        self.rows[booking_id].update(fields)
        return dict(self.rows[booking_id])


@pytest.fixture
def preference(tmp_path) -> DefaultSplitPreference:
    return DefaultSplitPreference(LocalPreferenceStorage(tmp_path / "preferences.json"))


@pytest.fixture
def booking_repo() -> InMemoryBookingRepository:
    return InMemoryBookingRepository({
        "bk-150": {
            "id": "bk-150",
            "sell_fee": 150,
            "buy_fee": 127.5,
            "vat_rate": 20,
            "vat_in": 25.5,
            "vat_out": 30,
        },
    })


@pytest.fixture
def client(preference, booking_repo):
    app.dependency_overrides[get_split_preference] = lambda: preference
    app.dependency_overrides[get_booking_repository] = lambda: booking_repo
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
