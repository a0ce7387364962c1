from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from appointly.api.deps import get_clock, get_current_user, get_session
from appointly.api.schemas.scheduling import SlotInfo, SlotsResponse
from appointly.models.user import User
from appointly.scheduling.policy import Clock
from appointly.services.slot_service import list_slots

router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("", response_model=SlotsResponse)
async def available_slots(
    date_from: date = Query(..., alias="from"),
    date_to: date = Query(..., alias="to"),
    include_unavailable: bool = Query(False),
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_user),
) -> SlotsResponse:
    """Slots for the caller's calendar between two dates (inclusive, at most 14 days apart).

    Only bookable slots are returned unless include_unavailable=true.
    """
    slots = await list_slots(
        session,
        current_user.id,
        date_from,
        date_to,
        now=clock(),
        include_unavailable=include_unavailable,
    )
    slot_infos = [
        SlotInfo(
            start=s.start,
            end=s.end,
            start_local=s.start_local,
            end_local=s.end_local,
            timezone=s.timezone,
            duration_minutes=s.duration_minutes,
            available=s.available,
        )
        for s in slots
    ]
    return SlotsResponse(
        date_from=date_from,
        date_to=date_to,
        host_timezone=slots[0].timezone if slots else None,
        slots=slot_infos,
        count=len(slot_infos),
    )
