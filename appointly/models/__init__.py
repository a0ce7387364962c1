from appointly.models.user import User, UserCreate, UserPublic
from appointly.models.availability import AvailabilityRule, AvailabilityRuleCreate, AvailabilityRulePublic
from appointly.models.reservation import (
    ContactInfo,
    Reservation,
    ReservationCreated,
    ReservationPublic,
    ReservationStatus,
)

__all__ = [
    "User",
    "UserCreate",
    "UserPublic",
    "AvailabilityRule",
    "AvailabilityRuleCreate",
    "AvailabilityRulePublic",
    "ContactInfo",
    "Reservation",
    "ReservationCreated",
    "ReservationPublic",
    "ReservationStatus",
]
