from datetime import UTC, date, datetime, time, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from appointly.scheduling.policy import validate_date_range
from appointly.scheduling.slots import CandidateSlot, generate_slots
from appointly.services.availability_service import list_rules_by_owner
from appointly.services.booking_service import list_confirmed_reservations, reservation_interval


def reservation_window(from_date: date, to_date: date) -> tuple[datetime, datetime]:
    """UTC window covering every local instant of the dates in any zone.

    Offsets run from UTC-12 to UTC+14, so one day of padding on each side is enough.
    """
    start = datetime.combine(from_date - timedelta(days=1), time.min, tzinfo=UTC)
    end = datetime.combine(to_date + timedelta(days=2), time.min, tzinfo=UTC)
    return start, end


async def list_slots(
    session: AsyncSession,
    owner_id: int,
    from_date: date,
    to_date: date,
    now: datetime,
    include_unavailable: bool = False,
) -> list[CandidateSlot]:
    """Slots for the owner's rules over ``[from_date, to_date]``.

    Busy and out-of-policy slots are dropped unless ``include_unavailable`` is set.
    """
    validate_date_range(from_date, to_date)
    rules = await list_rules_by_owner(session, owner_id)
    if not rules:
        return []
    window_start, window_end = reservation_window(from_date, to_date)
    reservations = await list_confirmed_reservations(session, owner_id, window_start, window_end)
    slots = generate_slots(
        from_date,
        to_date,
        rules,
        [reservation_interval(r) for r in reservations],
        now,
    )
    if include_unavailable:
        return slots
    return [s for s in slots if s.available]
