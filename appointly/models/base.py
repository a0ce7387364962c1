from datetime import UTC, datetime

from sqlalchemy import DateTime

# TIMESTAMP WITHOUT TIME ZONE; values are naive UTC
NAIVE_UTC = DateTime(timezone=False)


def utc_naive_now() -> datetime:
    """Naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)
