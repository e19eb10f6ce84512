"""Tests for mapping booking records to and from the fee split engine."""

from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from app.services.booking_fees import (
    booking_fee_fields,
    engine_for_new_booking,
    engine_from_booking,
)
from app.services.booking_repository import BookingFeeRepository, BookingNotFoundError
from app.services.fee_split_engine import BookingFeeState, FeeSplitEngine


def _record(**overrides):
    record = {
        "id": "bk-1",
        "sell_fee": 150,
        "buy_fee": 127.5,
        "vat_rate": 20,
        "vat_in": 25.5,
        "vat_out": 30,
    }
    record.update(overrides)
    return record


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def test_engine_from_booking_derives_ratio_from_fees():
    engine = engine_from_booking(_record())

    assert engine.state.total_rate == Decimal("150")
    assert engine.state.split_ratio == Decimal("0.85")
    assert engine.state.vat_rate_artist == Decimal("20")
    assert engine.state.vat_rate_client == Decimal("20")


def test_engine_from_booking_clamps_stored_split():
    engine = engine_from_booking(_record(buy_fee=149, vat_in=None))
    assert engine.state.split_ratio == Decimal("0.95")


@pytest.mark.parametrize("overrides", [
    {"buy_fee": None},
    {"sell_fee": None},
    {"sell_fee": 0},
])
def test_engine_from_booking_falls_back_without_both_fees(overrides):
    engine = engine_from_booking(_record(**overrides))
    assert engine.state.split_ratio == Decimal("0.85")


def test_default_preference_does_not_apply_to_existing_bookings(preference):
    preference.save("0.9")
    engine = engine_from_booking(_record(buy_fee=None), preference)

    assert engine.state.split_ratio == Decimal("0.85")


def test_artist_vat_falls_back_to_vat_rate():
    engine = engine_from_booking(_record(vat_in=None, vat_rate=5))

    assert engine.state.vat_rate_artist == Decimal("5")
    assert engine.state.vat_rate_client == Decimal("5")


def test_missing_vat_columns_default_to_twenty():
    engine = engine_from_booking({"sell_fee": 100, "buy_fee": 80})

    assert engine.state.vat_rate_artist == Decimal("20")
    assert engine.state.vat_rate_client == Decimal("20")


def test_zero_vat_rate_is_kept():
    engine = engine_from_booking(_record(vat_rate=0, vat_in=0))

    assert engine.state.vat_rate_artist == Decimal("0")
    assert engine.state.vat_rate_client == Decimal("0")


def test_new_booking_uses_form_defaults():
    engine = engine_for_new_booking()
    amounts = engine.derived.rounded()

    assert engine.state.total_rate == Decimal("150")
    assert engine.state.split_ratio == Decimal("0.85")
    assert amounts.artist_net == Decimal("127.50")


def test_new_booking_uses_saved_default_split(preference):
    preference.save("0.925")
    engine = engine_for_new_booking(preference, total_rate="200")

    assert engine.state.split_ratio == Decimal("0.925")
    assert engine.derived.rounded().agency_net == Decimal("15.00")


# ---------------------------------------------------------------------------
# Saving
# ---------------------------------------------------------------------------

def test_booking_fee_fields():
    engine = FeeSplitEngine(BookingFeeState(total_rate=Decimal("150")))

    assert booking_fee_fields(engine) == {
        "buy_fee": 127.5,
        "sell_fee": 150.0,
        "vat_rate": 20.0,
        "vat_in": 25.5,
        "vat_out": 30.0,
    }


def test_split_ratio_is_not_persisted():
    engine = FeeSplitEngine(BookingFeeState(total_rate=Decimal("150")))
    assert "split_ratio" not in booking_fee_fields(engine)


def test_saved_fields_reload_to_same_state():
    engine = FeeSplitEngine(BookingFeeState(
        total_rate=Decimal("150"),
        split_ratio=Decimal("0.8"),
        vat_rate_artist=Decimal("5"),
        vat_rate_client=Decimal("20"),
    ))

    reloaded = engine_from_booking(booking_fee_fields(engine))

    assert reloaded.state.split_ratio == Decimal("0.8")
    assert reloaded.state.vat_rate_artist == Decimal("5")
    assert reloaded.state.vat_rate_client == Decimal("20")


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

def _supabase_returning(data):
    client = MagicMock()
    query = client.table.return_value
    response = SimpleNamespace(data=data)
    query.select.return_value.eq.return_value.limit.return_value.execute.return_value = response
    query.update.return_value.eq.return_value.execute.return_value = response
    return client


def test_repository_reads_fee_columns():
    client = _supabase_returning([_record()])
    repo = BookingFeeRepository(client)

    assert repo.get_fees("bk-1")["sell_fee"] == 150
    client.table.assert_called_with("bookings")
    client.table.return_value.select.assert_called_with(
        "id, sell_fee, buy_fee, vat_rate, vat_in, vat_out"
    )


def test_repository_missing_booking():
    repo = BookingFeeRepository(_supabase_returning([]))

    with pytest.raises(BookingNotFoundError):
        repo.get_fees("nope")
    with pytest.raises(BookingNotFoundError):
        repo.update_fees("nope", {"sell_fee": 1.0})


def test_repository_updates_fee_columns():
    client = _supabase_returning([_record(sell_fee=200)])
    repo = BookingFeeRepository(client)

    row = repo.update_fees("bk-1", {"sell_fee": 200.0})

    assert row["sell_fee"] == 200
    client.table.return_value.update.assert_called_with({"sell_fee": 200.0})
    client.table.return_value.update.return_value.eq.assert_called_with("id", "bk-1")
