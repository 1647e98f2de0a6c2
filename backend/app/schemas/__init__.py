from .auth import MessageResponse, VerificationCodeRequest, VerificationCodeSubmission
from .booking import (
    AvailabilityResponse,
    BookingCreate,
    BookingRead,
    BookingSubmitted,
    CalendarResponse,
    EquipmentNeeded,
    RejectRequest,
    RoomLayoutPreference,
    StatusCounts,
    TransitionResponse,
    TypeOfActivity,
)

__all__ = [
    "AvailabilityResponse",
    "BookingCreate",
    "BookingRead",
    "BookingSubmitted",
    "CalendarResponse",
    "EquipmentNeeded",
    "MessageResponse",
    "RejectRequest",
    "RoomLayoutPreference",
    "StatusCounts",
    "TransitionResponse",
    "TypeOfActivity",
    "VerificationCodeRequest",
    "VerificationCodeSubmission",
]
