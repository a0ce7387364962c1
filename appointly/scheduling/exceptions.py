"""
Domain-specific exception hierarchy for slot scheduling and reservations.

Every failure of the scheduling core is raised as one of these types; the
HTTP layer maps ``status_code`` and ``code`` onto the response.
"""


class SchedulingError(Exception):
    """Base class for all scheduling errors."""

    status_code = 400
    code = "scheduling_error"
    default_message = "Scheduling request failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


# --- malformed input that reached the core ---

class InvalidInputError(SchedulingError):
    """Raised when a value cannot be interpreted at all."""

    status_code = 422
    code = "invalid_input"


class InvalidTimeSpec(InvalidInputError):
    code = "invalid_time_spec"
    default_message = "Invalid time format, expected HH:MM"


class UnknownTimezone(InvalidInputError):
    code = "unknown_timezone"
    default_message = "Unknown timezone identifier"


class InvalidRule(InvalidInputError):
    code = "invalid_rule"
    default_message = "Invalid availability rule"


# --- temporal policy ---

class PolicyViolation(SchedulingError):
    """Raised when a request breaks a booking time rule."""

    status_code = 400
    code = "policy_violation"


class LeadTimeTooShort(PolicyViolation):
    code = "lead_time_too_short"
    default_message = "Booking must be at least 2 hours in advance"


class HorizonExceeded(PolicyViolation):
    code = "horizon_exceeded"
    default_message = "Booking cannot be more than 14 days in advance"


class DurationOutOfBounds(PolicyViolation):
    code = "duration_out_of_bounds"
    default_message = "Slot duration must be between 15 minutes and 8 hours"


class DateRangeTooWide(PolicyViolation):
    code = "date_range_too_wide"
    default_message = "Date range cannot exceed 14 days"


class InvalidDateRange(PolicyViolation):
    code = "invalid_date_range"
    default_message = "From date must not be after to date"


# --- conflicts ---

class ConflictError(SchedulingError):
    status_code = 409
    code = "conflict"


class SlotAlreadyBooked(ConflictError):
    code = "slot_already_booked"
    default_message = "This time slot is already booked"


class RuleAlreadyExists(ConflictError):
    code = "rule_already_exists"
    default_message = "Availability rule already exists for this day. Delete the existing rule first."


# --- lookups ---

class NotFoundError(SchedulingError):
    status_code = 404
    code = "not_found"


class RuleNotFound(NotFoundError):
    code = "rule_not_found"
    default_message = "Availability rule not found"


class ReservationNotFound(NotFoundError):
    code = "reservation_not_found"
    default_message = "Booking not found"


# --- reservation lifecycle ---

class StateError(SchedulingError):
    status_code = 400
    code = "invalid_state"


class AlreadyCancelled(StateError):
    code = "already_cancelled"
    default_message = "Booking is already cancelled"


class TooLateToCancel(StateError):
    code = "too_late_to_cancel"
    default_message = "Cancellation must be at least 12 hours before the appointment time"


class AuthorizationError(SchedulingError):
    status_code = 401
    code = "unauthorized"


class InvalidCancelCode(AuthorizationError):
    code = "invalid_cancel_code"
    default_message = "Invalid cancel code"
