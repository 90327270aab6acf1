# hrms/clock.py

from datetime import datetime, timezone
from typing import Callable, Optional

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Naive UTC now, matching the TIMESTAMP columns the tables use."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def get_clock() -> Clock:
    """FastAPI dependency; tests override it with a fixed clock."""
    return utcnow
