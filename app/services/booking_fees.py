"""
Booking record <-> fee split engine mapping.

A booking row stores the fee split as `sell_fee` (total rate) and
`buy_fee` (artist net) plus VAT columns. The split ratio is never stored:
it is re-derived from buy_fee / sell_fee on every load.
"""

from decimal import Decimal
from typing import Any, Dict, Mapping, Optional

from app.services.currency import parse_amount, parse_decimal, quantize_money
from app.services.fee_split_engine import (
    BookingFeeState,
    DEFAULT_VAT_RATE,
    FALLBACK_SPLIT_RATIO,
    FeeSplitEngine,
    HUNDRED,
    clamp_split_ratio,
    parse_vat_rate,
)
from app.services.split_preference import DefaultSplitPreference

# Fee columns of the bookings table
BOOKING_FEE_COLUMNS = ["id", "sell_fee", "buy_fee", "vat_rate", "vat_in", "vat_out"]

# Sell fee pre-filled on the booking form for a new booking
NEW_BOOKING_TOTAL_RATE = Decimal("150")


def _split_ratio_from_record(record: Mapping[str, Any]) -> Decimal:
    sell_fee = parse_decimal(record.get("sell_fee"), None)
    buy_fee = parse_decimal(record.get("buy_fee"), None)
    if sell_fee is None or buy_fee is None or sell_fee <= 0:
        return FALLBACK_SPLIT_RATIO
    return clamp_split_ratio(buy_fee / sell_fee)


def _artist_vat_rate_from_record(record: Mapping[str, Any]) -> Decimal:
    """
    Artist-side VAT percentage.

    The record has a single `vat_rate` column (client side); the artist
    rate is recovered from vat_in / buy_fee when both are present.
    """
    buy_fee = parse_decimal(record.get("buy_fee"), None)
    vat_in = parse_decimal(record.get("vat_in"), None)
    if buy_fee is not None and vat_in is not None and buy_fee > 0:
        return parse_vat_rate(quantize_money(vat_in / buy_fee * HUNDRED))
    return parse_vat_rate(record.get("vat_rate"))


def engine_from_booking(
    record: Mapping[str, Any],
    preference: Optional[DefaultSplitPreference] = None,
) -> FeeSplitEngine:
    """Initialize an engine from an existing booking record."""
    state = BookingFeeState(
        total_rate=parse_amount(record.get("sell_fee")),
        split_ratio=_split_ratio_from_record(record),
        vat_rate_artist=_artist_vat_rate_from_record(record),
        vat_rate_client=parse_vat_rate(record.get("vat_rate")),
    )
    return FeeSplitEngine(state, preference=preference)


def engine_for_new_booking(
    preference: Optional[DefaultSplitPreference] = None,
    total_rate: Any = NEW_BOOKING_TOTAL_RATE,
) -> FeeSplitEngine:
    """Initialize an engine for a booking that has no record yet."""
    split_ratio = preference.initial_split_ratio() if preference else FALLBACK_SPLIT_RATIO
    state = BookingFeeState(
        total_rate=parse_amount(total_rate, NEW_BOOKING_TOTAL_RATE),
        split_ratio=split_ratio,
        vat_rate_artist=DEFAULT_VAT_RATE,
        vat_rate_client=DEFAULT_VAT_RATE,
    )
    return FeeSplitEngine(state, preference=preference)


def booking_fee_fields(engine: FeeSplitEngine) -> Dict[str, float]:
    """
    Booking columns to persist for the engine's current state.

    vat_out is the output VAT on the client invoice, charged on the full
    sell fee.
    """
    state = engine.state
    amounts = engine.derived.rounded()
    total_rate = quantize_money(state.total_rate)
    vat_out = quantize_money(state.total_rate * state.vat_rate_client / HUNDRED)

    return {
        "buy_fee": float(amounts.artist_net),
        "sell_fee": float(total_rate),
        "vat_rate": float(state.vat_rate_client),
        "vat_in": float(amounts.artist_vat),
        "vat_out": float(vat_out),
    }
