"""
Booking fee persistence on the Supabase `bookings` table.

Only the fee columns are touched. Concurrent edits of the same booking
follow last-write-wins.
"""

import logging
from typing import Any, Dict

from supabase import Client

from app.services.booking_fees import BOOKING_FEE_COLUMNS

logger = logging.getLogger(__name__)

BOOKINGS_TABLE = "bookings"


class BookingNotFoundError(Exception):
    """Raised when no booking row matches the requested id."""

    def __init__(self, booking_id: str):
        self.booking_id = booking_id
        self.message = f"Booking {booking_id} not found"
        super().__init__(self.message)


class BookingFeeRepository:
    """Reads and writes the fee columns of booking rows."""

    def __init__(self, client: Client):
        self.client = client

    def get_fees(self, booking_id: str) -> Dict[str, Any]:
        response = (
            self.client.table(BOOKINGS_TABLE)
            .select(", ".join(BOOKING_FEE_COLUMNS))
            .eq("id", booking_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            raise BookingNotFoundError(booking_id)
        return response.data[0]

    def update_fees(self, booking_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        response = (
            self.client.table(BOOKINGS_TABLE)
            .update(fields)
            .eq("id", booking_id)
            .execute()
        )
        if not response.data:
            raise BookingNotFoundError(booking_id)

        logger.info(
            f"Booking {booking_id} fees saved: sell_fee={fields.get('sell_fee')}, "
            f"buy_fee={fields.get('buy_fee')}"
        )
        return response.data[0]
