"""
Fee Split Engine - artist/agency split of a booking fee.

The gross fee (total rate) charged to the client is split between the
artist and the agency by a split ratio (artist share). VAT is applied
independently to each side:

- artist_net = total_rate × split_ratio
- agency_net = total_rate − artist_net (the agency commission)
- artist_vat / agency_vat = net × side VAT rate / 100

The split ratio can be edited directly (slider, percent, preset) or
back-solved from a typed artist or agency amount. Every entry point goes
through the same clamp, so commission always stays within [5%, 50%].
"""

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any, Dict, Optional, TYPE_CHECKING

from app.services.currency import (
    parse_amount,
    parse_decimal,
    quantize_money,
    quantize_percent,
)

if TYPE_CHECKING:
    from app.services.split_preference import DefaultSplitPreference

logger = logging.getLogger(__name__)

MIN_SPLIT_RATIO = Decimal("0.50")
MAX_SPLIT_RATIO = Decimal("0.95")
# Used when a ratio cannot be derived (zero total, unparsable input)
FALLBACK_SPLIT_RATIO = Decimal("0.85")
DEFAULT_VAT_RATE = Decimal("20")

HUNDRED = Decimal("100")
ONE = Decimal("1")
ZERO = Decimal("0")

COMMISSION_PRESETS: Dict[str, Dict[str, Any]] = {
    "commission_15": {"label": "15% commission", "split_ratio": Decimal("0.85")},
    "commission_7_5": {"label": "7.5% commission", "split_ratio": Decimal("0.925")},
}


class PreferenceStoreMissingError(Exception):
    """Raised when saving a default split on an engine with no preference store."""

    def __init__(self):
        self.message = "No default split preference store is attached to this engine"
        super().__init__(self.message)


def clamp(value: Decimal, lower: Decimal, upper: Decimal) -> Decimal:
    return max(lower, min(upper, value))


def clamp_split_ratio(ratio: Decimal) -> Decimal:
    return clamp(ratio, MIN_SPLIT_RATIO, MAX_SPLIT_RATIO)


def parse_vat_rate(value: Any) -> Decimal:
    """VAT percentage in [0, 100]; absent or unparsable -> 20."""
    return clamp(parse_decimal(value, DEFAULT_VAT_RATE), ZERO, HUNDRED)


@dataclass(frozen=True)
class BookingFeeState:
    """Inputs of a booking-edit session. Everything else is derived."""

    total_rate: Decimal = ZERO
    split_ratio: Decimal = FALLBACK_SPLIT_RATIO
    vat_rate_artist: Decimal = DEFAULT_VAT_RATE
    vat_rate_client: Decimal = DEFAULT_VAT_RATE

    @classmethod
    def from_values(
        cls,
        total_rate: Any = None,
        split_ratio: Any = None,
        vat_rate_artist: Any = None,
        vat_rate_client: Any = None,
    ) -> "BookingFeeState":
        """Build a normalized state from raw (possibly unparsable) values."""
        return cls(
            total_rate=parse_amount(total_rate),
            split_ratio=clamp_split_ratio(parse_decimal(split_ratio, FALLBACK_SPLIT_RATIO)),
            vat_rate_artist=parse_vat_rate(vat_rate_artist),
            vat_rate_client=parse_vat_rate(vat_rate_client),
        )


@dataclass(frozen=True)
class DerivedAmounts:
    """Amounts derived from a BookingFeeState, at full precision."""

    artist_net: Decimal
    agency_net: Decimal
    artist_vat: Decimal
    agency_vat: Decimal
    artist_total: Decimal
    agency_total: Decimal
    artist_percent: Decimal
    commission_percent: Decimal

    def rounded(self) -> "DerivedAmounts":
        """Currency amounts to 2 decimal places, percentages to 1."""
        return DerivedAmounts(
            artist_net=quantize_money(self.artist_net),
            agency_net=quantize_money(self.agency_net),
            artist_vat=quantize_money(self.artist_vat),
            agency_vat=quantize_money(self.agency_vat),
            artist_total=quantize_money(self.artist_total),
            agency_total=quantize_money(self.agency_total),
            artist_percent=quantize_percent(self.artist_percent),
            commission_percent=quantize_percent(self.commission_percent),
        )


def compute_derived(state: BookingFeeState) -> DerivedAmounts:
    """Recompute every derived amount from the fee inputs."""
    artist_net = state.total_rate * state.split_ratio
    agency_net = state.total_rate - artist_net
    artist_vat = artist_net * state.vat_rate_artist / HUNDRED
    agency_vat = agency_net * state.vat_rate_client / HUNDRED

    return DerivedAmounts(
        artist_net=artist_net,
        agency_net=agency_net,
        artist_vat=artist_vat,
        agency_vat=agency_vat,
        artist_total=artist_net + artist_vat,
        agency_total=agency_net + agency_vat,
        artist_percent=state.split_ratio * HUNDRED,
        commission_percent=(ONE - state.split_ratio) * HUNDRED,
    )


class FeeSplitEngine:
    """
    Keeps the total rate, split ratio and derived amounts consistent,
    whichever field was edited last.

    Every mutating operation stores its input, then recomputes the derived
    amounts synchronously, so `derived` always reflects the latest edit.
    """

    def __init__(
        self,
        state: Optional[BookingFeeState] = None,
        preference: Optional["DefaultSplitPreference"] = None,
    ):
        self._state = state or BookingFeeState()
        self._state = replace(self._state, split_ratio=clamp_split_ratio(self._state.split_ratio))
        self._preference = preference
        self._derived = compute_derived(self._state)
        self._last_edit_clamped = False

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def state(self) -> BookingFeeState:
        return self._state

    @property
    def derived(self) -> DerivedAmounts:
        return self._derived

    @property
    def last_edit_clamped(self) -> bool:
        """True when the last edit saturated the split ratio at a clamp boundary."""
        return self._last_edit_clamped

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def set_total_rate(self, new_total: Any) -> DerivedAmounts:
        """Change the gross fee, keeping the current split ratio."""
        return self._update(total_rate=parse_amount(new_total))

    def set_split_ratio_direct(self, ratio: Any) -> DerivedAmounts:
        """Primary edit path: slider or preset."""
        return self._store_ratio(parse_decimal(ratio, FALLBACK_SPLIT_RATIO))

    def set_artist_amount(self, new_artist_net: Any) -> DerivedAmounts:
        """Back-solve the split ratio from a typed artist net amount."""
        artist_net = parse_amount(new_artist_net)
        total = self._state.total_rate
        if total > 0:
            ratio = artist_net / total
        else:
            ratio = FALLBACK_SPLIT_RATIO
        return self._store_ratio(ratio)

    def set_agency_amount(self, new_agency_net: Any) -> DerivedAmounts:
        """Back-solve the split ratio from a typed agency net amount."""
        agency_net = parse_amount(new_agency_net)
        total = self._state.total_rate
        if total > 0:
            ratio = ONE - agency_net / total
        else:
            ratio = FALLBACK_SPLIT_RATIO
        return self._store_ratio(ratio)

    def set_artist_percent_direct(self, pct: Any) -> DerivedAmounts:
        pct = parse_decimal(pct, FALLBACK_SPLIT_RATIO * HUNDRED)
        return self._store_ratio(pct / HUNDRED)

    def set_commission_percent_direct(self, pct: Any) -> DerivedAmounts:
        pct = parse_decimal(pct, (ONE - FALLBACK_SPLIT_RATIO) * HUNDRED)
        return self._store_ratio(ONE - pct / HUNDRED)

    def apply_preset(self, preset: Any) -> DerivedAmounts:
        """Apply a preset given as a ratio or as a preset code."""
        if isinstance(preset, str) and preset in COMMISSION_PRESETS:
            preset = COMMISSION_PRESETS[preset]["split_ratio"]
        return self.set_split_ratio_direct(preset)

    def set_vat_rate_artist(self, rate: Any) -> DerivedAmounts:
        return self._update(vat_rate_artist=parse_vat_rate(rate))

    def set_vat_rate_client(self, rate: Any) -> DerivedAmounts:
        return self._update(vat_rate_client=parse_vat_rate(rate))

    def save_as_default(self) -> Decimal:
        """Persist the current split ratio as the default for new bookings."""
        if self._preference is None:
            raise PreferenceStoreMissingError()
        self._preference.save(self._state.split_ratio)
        return self._state.split_ratio

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _store_ratio(self, ratio: Decimal) -> DerivedAmounts:
        clamped = clamp_split_ratio(ratio)
        saturated = clamped != ratio
        if saturated:
            logger.debug(f"Split ratio {ratio} clamped to {clamped}")
        return self._update(clamped=saturated, split_ratio=clamped)

    def _update(self, clamped: bool = False, **changes) -> DerivedAmounts:
        self._last_edit_clamped = clamped
        self._state = replace(self._state, **changes)
        self._derived = compute_derived(self._state)
        return self._derived
