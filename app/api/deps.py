"""
FastAPI dependencies for the booking repository and the default split
preference store.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, status

from app.config import Settings, get_settings
from app.services.booking_repository import BookingFeeRepository
from app.services.split_preference import DefaultSplitPreference, LocalPreferenceStorage
from app.services.supabase_client import SupabaseNotConfiguredError, get_supabase_client


def get_split_preference(
    settings: Annotated[Settings, Depends(get_settings)],
) -> DefaultSplitPreference:
    """Default split preference backed by the local preference file."""
    storage = LocalPreferenceStorage(settings.preference_store_path)
    return DefaultSplitPreference(storage)


def get_booking_repository() -> BookingFeeRepository:
    """
    Booking fee repository on the hosted database.
    Responds 503 when Supabase is not configured.
    """
    try:
        client = get_supabase_client()
    except SupabaseNotConfiguredError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=e.message,
        )
    return BookingFeeRepository(client)


# Type aliases for cleaner dependency injection
AppSettings = Annotated[Settings, Depends(get_settings)]
SplitPreference = Annotated[DefaultSplitPreference, Depends(get_split_preference)]
BookingRepo = Annotated[BookingFeeRepository, Depends(get_booking_repository)]
