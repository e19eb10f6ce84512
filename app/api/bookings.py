"""
Booking fee endpoints.
Loads a booking's fee split from its record and saves edited fees back.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from app.api.deps import BookingRepo
from app.api.fees import FeeBreakdown, FeeStateInput, build_breakdown
from app.services.booking_fees import booking_fee_fields, engine_from_booking
from app.services.booking_repository import BookingNotFoundError
from app.services.fee_split_engine import FeeSplitEngine

logger = logging.getLogger(__name__)
router = APIRouter()


# ============================================================================
# Schemas
# ============================================================================

class BookingFeesSaved(BaseModel):
    breakdown: FeeBreakdown
    record: Dict[str, Any]


# ============================================================================
# Endpoints
# ============================================================================

@router.get("/{booking_id}/fees", response_model=FeeBreakdown)
async def get_booking_fees(
    booking_id: str,
    repo: BookingRepo,
):
    """
    Fee split of an existing booking.
    The split ratio is re-derived from buy_fee / sell_fee.
    """
    try:
        record = repo.get_fees(booking_id)
    except BookingNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

    engine = engine_from_booking(record)
    return build_breakdown(engine)


@router.put("/{booking_id}/fees", response_model=BookingFeesSaved)
async def save_booking_fees(
    booking_id: str,
    data: FeeStateInput,
    repo: BookingRepo,
):
    """Persist the posted fee state into the booking record."""
    engine = FeeSplitEngine(data.to_state())
    fields = booking_fee_fields(engine)

    try:
        record = repo.update_fees(booking_id, fields)
    except BookingNotFoundError as e:
        logger.warning(f"Fee save rejected: {e.message}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

    return BookingFeesSaved(breakdown=build_breakdown(engine), record=record)
