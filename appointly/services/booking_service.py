import logging
import secrets
import string
import uuid
from collections.abc import Callable
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from appointly.models.reservation import ContactInfo, Reservation, ReservationStatus
from appointly.models.user import User
from appointly.scheduling.exceptions import (
    AlreadyCancelled,
    InvalidCancelCode,
    ReservationNotFound,
    SlotAlreadyBooked,
    TooLateToCancel,
)
from appointly.scheduling.policy import Clock, meets_cancellation_notice, system_clock, validate_booking_window
from appointly.scheduling.slots import Interval
from appointly.scheduling.timezones import ensure_utc, from_naive_utc, to_naive_utc

logger = logging.getLogger(__name__)

CANCEL_CODE_ALPHABET = string.ascii_uppercase + string.digits
CANCEL_CODE_LENGTH = 6


def generate_cancel_code() -> str:
    """Six characters from A-Z0-9 (36**6 keyspace) drawn from ``secrets``."""
    return "".join(secrets.choice(CANCEL_CODE_ALPHABET) for _ in range(CANCEL_CODE_LENGTH))


def generate_public_id() -> str:
    return str(uuid.uuid4())


def reservation_interval(reservation: Reservation) -> Interval:
    return Interval(start=from_naive_utc(reservation.slot_start), end=from_naive_utc(reservation.slot_end))


async def list_confirmed_reservations(
    session: AsyncSession, owner_id: int, start: datetime, end: datetime
) -> list[Reservation]:
    """Confirmed reservations of ``owner_id`` overlapping ``[start, end)``."""
    result = await session.execute(
        select(Reservation)
        .where(
            Reservation.owner_id == owner_id,
            Reservation.status == ReservationStatus.confirmed.value,
            Reservation.slot_start < to_naive_utc(end),
            Reservation.slot_end > to_naive_utc(start),
        )
        .order_by(Reservation.slot_start)
    )
    return list(result.scalars().all())


async def _lock_owner(session: AsyncSession, owner_id: int) -> None:
    # Row lock on PostgreSQL; SQLite drops FOR UPDATE and relies on BEGIN IMMEDIATE
    await session.execute(select(User.id).where(User.id == owner_id).with_for_update())


async def insert_reservation_if_no_overlap(
    session: AsyncSession, reservation: Reservation
) -> Reservation:
    """Insert ``reservation`` unless it overlaps a confirmed one of the same owner.

    The lock, the overlap check and the insert share the caller's transaction,
    so two overlapping attempts for one owner cannot both commit.
    """
    await _lock_owner(session, reservation.owner_id)
    clashing = await list_confirmed_reservations(
        session,
        reservation.owner_id,
        from_naive_utc(reservation.slot_start),
        from_naive_utc(reservation.slot_end),
    )
    if clashing:
        raise SlotAlreadyBooked()
    try:
        async with session.begin_nested():
            session.add(reservation)
            await session.flush()
    except IntegrityError as e:
        raise SlotAlreadyBooked() from e
    await session.refresh(reservation)
    return reservation


async def get_reservation(session: AsyncSession, public_id: str) -> Reservation | None:
    result = await session.execute(select(Reservation).where(Reservation.public_id == public_id))
    return result.scalar_one_or_none()


async def update_reservation_status(
    session: AsyncSession, public_id: str, new_status: ReservationStatus
) -> None:
    """Move a confirmed reservation to ``new_status``; cancelled is terminal."""
    result = await session.execute(
        update(Reservation)
        .where(
            Reservation.public_id == public_id,
            Reservation.status == ReservationStatus.confirmed.value,
        )
        .values(status=new_status.value)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount:
        return
    if await get_reservation(session, public_id) is None:
        raise ReservationNotFound()
    raise AlreadyCancelled()


async def list_reservations_for_owner(session: AsyncSession, owner_id: int) -> list[Reservation]:
    result = await session.execute(
        select(Reservation)
        .where(Reservation.owner_id == owner_id)
        .order_by(Reservation.slot_start.desc())
    )
    return list(result.scalars().all())


class ReservationManager:
    """
    Books and cancels reservations under the temporal policy.

    ``clock``, ``code_generator`` and ``id_generator`` are injected so tests
    can fix "now" and the random values.
    """

    def __init__(
        self,
        session: AsyncSession,
        clock: Clock = system_clock,
        code_generator: Callable[[], str] = generate_cancel_code,
        id_generator: Callable[[], str] = generate_public_id,
    ):
        self.session = session
        self.clock = clock
        self.code_generator = code_generator
        self.id_generator = id_generator

    async def book(
        self, owner_id: int, start: datetime, end: datetime, contact: ContactInfo
    ) -> Reservation:
        start = ensure_utc(start)
        end = ensure_utc(end)
        now = self.clock()
        validate_booking_window(start, end, now)

        reservation = Reservation(
            owner_id=owner_id,
            public_id=self.id_generator(),
            cancel_code=self.code_generator(),
            contact_name=contact.name,
            contact_email=contact.email,
            slot_start=to_naive_utc(start),
            slot_end=to_naive_utc(end),
            status=ReservationStatus.confirmed.value,
            created_at=to_naive_utc(now),
        )
        try:
            reservation = await insert_reservation_if_no_overlap(self.session, reservation)
        except SlotAlreadyBooked:
            logger.info("Booking rejected for owner %s: %s-%s already booked", owner_id, start, end)
            raise
        logger.info(
            "Booking %s confirmed for owner %s (%s-%s)",
            reservation.public_id, owner_id, start.isoformat(), end.isoformat(),
        )
        return reservation

    async def cancel(self, public_id: str, cancel_code: str) -> datetime:
        """Cancel a confirmed reservation and return the cancellation instant."""
        reservation = await get_reservation(self.session, public_id)
        if reservation is None:
            raise ReservationNotFound()
        if reservation.status == ReservationStatus.cancelled.value:
            raise AlreadyCancelled()
        if not secrets.compare_digest(reservation.cancel_code.encode(), cancel_code.encode()):
            logger.warning("Cancel rejected for booking %s: cancel code mismatch", public_id)
            raise InvalidCancelCode()
        now = self.clock()
        if not meets_cancellation_notice(from_naive_utc(reservation.slot_start), now):
            raise TooLateToCancel()

        await update_reservation_status(self.session, public_id, ReservationStatus.cancelled)
        await self.session.refresh(reservation)
        logger.info("Booking %s cancelled", public_id)
        return now

    async def list_reservations(self, owner_id: int) -> list[Reservation]:
        return await list_reservations_for_owner(self.session, owner_id)
