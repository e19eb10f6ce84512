"""
API routes package.
"""

from app.api import (
    bookings,
    fees,
)

__all__ = [
    "bookings",
    "fees",
]
