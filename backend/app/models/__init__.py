from .booking import Booking, BookingStatus, VenueType
from .user import User, UserRole

__all__ = [
    "Booking",
    "BookingStatus",
    "VenueType",
    "User",
    "UserRole",
]
