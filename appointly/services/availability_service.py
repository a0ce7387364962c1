import logging
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from appointly.models.availability import AvailabilityRule, AvailabilityRuleCreate
from appointly.scheduling.exceptions import InvalidRule, RuleAlreadyExists, RuleNotFound
from appointly.scheduling.policy import MAX_DURATION, MIN_DURATION
from appointly.scheduling.timezones import get_zone, parse_wall_time

logger = logging.getLogger(__name__)


def validate_rule(data: AvailabilityRuleCreate) -> AvailabilityRuleCreate:
    """Return a copy with parsed times; raise on any broken rule invariant."""
    if not 0 <= data.weekday <= 6:
        raise InvalidRule(f"weekday must be between 0 (Sunday) and 6 (Saturday), got {data.weekday}")
    start = parse_wall_time(data.start_time)
    end = parse_wall_time(data.end_time)
    if end <= start:
        raise InvalidRule("End time must be after start time")
    interval = timedelta(minutes=data.interval_minutes)
    if not MIN_DURATION <= interval <= MAX_DURATION:
        raise InvalidRule(
            f"interval_minutes must be between 15 and 480, got {data.interval_minutes}"
        )
    get_zone(data.timezone)
    return AvailabilityRuleCreate(
        weekday=data.weekday,
        start_time=start,
        end_time=end,
        interval_minutes=data.interval_minutes,
        timezone=data.timezone,
    )


async def list_rules_by_owner(session: AsyncSession, owner_id: int) -> list[AvailabilityRule]:
    result = await session.execute(
        select(AvailabilityRule)
        .where(AvailabilityRule.owner_id == owner_id)
        .order_by(AvailabilityRule.weekday, AvailabilityRule.start_time)
    )
    return list(result.scalars().all())


async def get_rule_for_weekday(
    session: AsyncSession, owner_id: int, weekday: int
) -> AvailabilityRule | None:
    result = await session.execute(
        select(AvailabilityRule).where(
            AvailabilityRule.owner_id == owner_id,
            AvailabilityRule.weekday == weekday,
        )
    )
    return result.scalar_one_or_none()


async def insert_rule(
    session: AsyncSession, owner_id: int, data: AvailabilityRuleCreate
) -> AvailabilityRule:
    clean = validate_rule(data)
    # Enforce one rule per weekday per owner
    if await get_rule_for_weekday(session, owner_id, clean.weekday):
        raise RuleAlreadyExists()
    rule = AvailabilityRule(
        owner_id=owner_id,
        weekday=clean.weekday,
        start_time=clean.start_time,
        end_time=clean.end_time,
        interval_minutes=clean.interval_minutes,
        timezone=clean.timezone,
    )
    try:
        # a concurrent create for the same weekday trips the unique constraint
        async with session.begin_nested():
            session.add(rule)
            await session.flush()
    except IntegrityError as e:
        raise RuleAlreadyExists() from e
    await session.refresh(rule)
    logger.info(
        "Availability rule %s created for owner %s (weekday %d, %s-%s %s)",
        rule.id, owner_id, rule.weekday, rule.start_time, rule.end_time, rule.timezone,
    )
    return rule


async def delete_rule(session: AsyncSession, owner_id: int, rule_id: int) -> None:
    result = await session.execute(
        select(AvailabilityRule).where(
            AvailabilityRule.id == rule_id,
            AvailabilityRule.owner_id == owner_id,
        )
    )
    rule = result.scalar_one_or_none()
    if not rule:
        raise RuleNotFound()
    await session.delete(rule)
    await session.flush()
    logger.info("Availability rule %s deleted for owner %s", rule_id, owner_id)
