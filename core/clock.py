from datetime import datetime, timedelta
from typing import Optional


class Clock:
    """Single source of "now" for the engine."""

    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now()


class FixedClock(Clock):
    """A clock that only moves when told to. Used by tests and demos."""

    def __init__(self, start: Optional[datetime] = None):
        self._now = start or datetime.now()

    def now(self) -> datetime:
        return self._now

    def advance(self, **kwargs) -> datetime:
        self._now = self._now + timedelta(**kwargs)
        return self._now

    def set(self, value: datetime) -> None:
        self._now = value
