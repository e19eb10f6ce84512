"""
Booking fee split endpoints.

Stateless: the booking form keeps its fee state client-side and posts it
along with each edit; the response carries the recomputed state, the
rounded amounts and their GBP display strings.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, status
from pydantic import BaseModel

from app.api.deps import AppSettings, SplitPreference
from app.services.booking_fees import engine_for_new_booking
from app.services.currency import format_gbp, format_percent
from app.services.fee_split_engine import (
    BookingFeeState,
    COMMISSION_PRESETS,
    FeeSplitEngine,
    HUNDRED,
    ONE,
)

logger = logging.getLogger(__name__)
router = APIRouter()

# Raw form values: any JSON value. Non-numeric ones fall back to the field default
NumericInput = Any

EditAction = Literal[
    "set_total_rate",
    "set_split_ratio",
    "set_artist_amount",
    "set_agency_amount",
    "set_artist_percent",
    "set_commission_percent",
    "apply_preset",
    "set_vat_rate_artist",
    "set_vat_rate_client",
]

# Edit action -> FeeSplitEngine method
EDIT_HANDLERS = {
    "set_total_rate": "set_total_rate",
    "set_split_ratio": "set_split_ratio_direct",
    "set_artist_amount": "set_artist_amount",
    "set_agency_amount": "set_agency_amount",
    "set_artist_percent": "set_artist_percent_direct",
    "set_commission_percent": "set_commission_percent_direct",
    "apply_preset": "apply_preset",
    "set_vat_rate_artist": "set_vat_rate_artist",
    "set_vat_rate_client": "set_vat_rate_client",
}


# ============ SCHEMAS ============

class FeeStateInput(BaseModel):
    """Fee fields as typed in the form; unparsable values fall back to defaults."""
    total_rate: NumericInput = None
    split_ratio: NumericInput = None
    vat_rate_artist: NumericInput = None
    vat_rate_client: NumericInput = None

    def to_state(self) -> BookingFeeState:
        return BookingFeeState.from_values(
            total_rate=self.total_rate,
            split_ratio=self.split_ratio,
            vat_rate_artist=self.vat_rate_artist,
            vat_rate_client=self.vat_rate_client,
        )


class FeeEditRequest(BaseModel):
    state: FeeStateInput
    action: EditAction
    value: NumericInput = None


class FeeState(BaseModel):
    total_rate: Decimal
    split_ratio: Decimal
    vat_rate_artist: Decimal
    vat_rate_client: Decimal


class FeeAmounts(BaseModel):
    artist_net: float
    agency_net: float
    artist_vat: float
    agency_vat: float
    artist_total: float
    agency_total: float
    artist_percent: float
    commission_percent: float


class FeeBreakdown(BaseModel):
    state: FeeState
    amounts: FeeAmounts
    formatted: Dict[str, str]
    clamped: bool = False


class FeePreset(BaseModel):
    code: str
    label: str
    split_ratio: Decimal
    commission_percent: Decimal


class DefaultSplitResponse(BaseModel):
    split_ratio: Optional[Decimal] = None
    is_set: bool
    effective_split_ratio: Decimal


# ============ HELPERS ============

def build_breakdown(engine: FeeSplitEngine) -> FeeBreakdown:
    """Serialize an engine's current state and rounded amounts."""
    state = engine.state
    amounts = engine.derived.rounded()

    return FeeBreakdown(
        state=FeeState(
            total_rate=state.total_rate,
            split_ratio=state.split_ratio,
            vat_rate_artist=state.vat_rate_artist,
            vat_rate_client=state.vat_rate_client,
        ),
        amounts=FeeAmounts(
            artist_net=float(amounts.artist_net),
            agency_net=float(amounts.agency_net),
            artist_vat=float(amounts.artist_vat),
            agency_vat=float(amounts.agency_vat),
            artist_total=float(amounts.artist_total),
            agency_total=float(amounts.agency_total),
            artist_percent=float(amounts.artist_percent),
            commission_percent=float(amounts.commission_percent),
        ),
        formatted={
            "total_rate": format_gbp(state.total_rate),
            "artist_net": format_gbp(amounts.artist_net),
            "agency_net": format_gbp(amounts.agency_net),
            "artist_vat": format_gbp(amounts.artist_vat),
            "agency_vat": format_gbp(amounts.agency_vat),
            "artist_total": format_gbp(amounts.artist_total),
            "agency_total": format_gbp(amounts.agency_total),
            "artist_percent": format_percent(amounts.artist_percent),
            "commission_percent": format_percent(amounts.commission_percent),
        },
        clamped=engine.last_edit_clamped,
    )


def _default_split_response(preference) -> DefaultSplitResponse:
    saved = preference.load()
    return DefaultSplitResponse(
        split_ratio=saved,
        is_set=saved is not None,
        effective_split_ratio=preference.initial_split_ratio(),
    )


# ============ ENDPOINTS ============

@router.get("/presets", response_model=List[FeePreset])
async def list_presets():
    """Commission presets offered on the booking form."""
    return [
        FeePreset(
            code=code,
            label=preset["label"],
            split_ratio=preset["split_ratio"],
            commission_percent=(ONE - preset["split_ratio"]) * HUNDRED,
        )
        for code, preset in COMMISSION_PRESETS.items()
    ]


@router.post("/calculate", response_model=FeeBreakdown)
async def calculate_fees(data: FeeStateInput):
    """Normalize a fee state and compute its derived amounts."""
    engine = FeeSplitEngine(data.to_state())
    return build_breakdown(engine)


@router.post("/edit", response_model=FeeBreakdown)
async def edit_fees(data: FeeEditRequest):
    """
    Apply one edit to a fee state.

    Amount edits back-solve the split ratio; every ratio is clamped to
    [0.50, 0.95] and the response reports whether clamping kicked in.
    """
    engine = FeeSplitEngine(data.state.to_state())
    handler = getattr(engine, EDIT_HANDLERS[data.action])
    logger.debug(f"Fee edit {data.action}={data.value!r}")
    handler(data.value)
    return build_breakdown(engine)


@router.get("/new", response_model=FeeBreakdown)
async def new_booking_fees(preference: SplitPreference, settings: AppSettings):
    """Initial fee state for a new booking (uses the saved default split)."""
    engine = engine_for_new_booking(preference, total_rate=settings.new_booking_total_rate)
    return build_breakdown(engine)


@router.get("/default-split", response_model=DefaultSplitResponse)
async def get_default_split(preference: SplitPreference):
    return _default_split_response(preference)


@router.put("/default-split", response_model=DefaultSplitResponse)
async def save_default_split(data: FeeStateInput, preference: SplitPreference):
    """Save the posted state's split ratio as the default for new bookings."""
    engine = FeeSplitEngine(data.to_state(), preference=preference)
    engine.save_as_default()
    return _default_split_response(preference)


@router.delete("/default-split", status_code=status.HTTP_204_NO_CONTENT)
async def clear_default_split(preference: SplitPreference):
    preference.clear()
