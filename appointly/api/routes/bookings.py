import logging

from fastapi import APIRouter, Depends, status

from appointly.api.deps import get_current_user, get_reservation_manager
from appointly.api.schemas.scheduling import (
    BookingListResponse,
    BookRequest,
    BookResponse,
    CancelRequest,
    CancelResponse,
)
from appointly.models.reservation import ContactInfo, Reservation, ReservationCreated, ReservationPublic
from appointly.models.user import User
from appointly.scheduling.timezones import from_naive_utc
from appointly.services.booking_service import ReservationManager

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/bookings", tags=["bookings"])


def _to_public(r: Reservation) -> ReservationPublic:
    """Public shape; stored instants are naive UTC, send them with an offset."""
    return ReservationPublic(
        public_id=r.public_id,
        contact_name=r.contact_name,
        contact_email=r.contact_email,
        slot_start=from_naive_utc(r.slot_start),
        slot_end=from_naive_utc(r.slot_end),
        status=r.status,
        created_at=from_naive_utc(r.created_at),
    )


@router.post("", response_model=BookResponse, status_code=status.HTTP_201_CREATED)
async def book_slot(
    body: BookRequest,
    manager: ReservationManager = Depends(get_reservation_manager),
    current_user: User = Depends(get_current_user),
) -> BookResponse:
    reservation = await manager.book(
        current_user.id,
        body.slot_start,
        body.slot_end,
        ContactInfo(name=body.name, email=body.email),
    )
    public = _to_public(reservation)
    return BookResponse(
        booking=ReservationCreated(**public.model_dump(), cancel_code=reservation.cancel_code),
    )


@router.get("", response_model=BookingListResponse)
async def list_my_bookings(
    manager: ReservationManager = Depends(get_reservation_manager),
    current_user: User = Depends(get_current_user),
) -> BookingListResponse:
    reservations = await manager.list_reservations(current_user.id)
    return BookingListResponse(
        bookings=[_to_public(r) for r in reservations],
        count=len(reservations),
    )


@router.post("/cancel", response_model=CancelResponse)
async def cancel_booking(
    body: CancelRequest,
    manager: ReservationManager = Depends(get_reservation_manager),
) -> CancelResponse:
    """Public endpoint: the booking id and cancel code are the credentials."""
    booking_id = str(body.booking_id)
    cancelled_at = await manager.cancel(booking_id, body.cancel_code)
    return CancelResponse(booking_id=booking_id, cancelled_at=cancelled_at)
