"""Clock collaborator.
Supplies "now" and "today" to the domain so date rules stay testable.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timezone
from typing import Optional


class Clock(ABC):
    """Source of the current time."""

    @abstractmethod
    def now(self) -> datetime:
        """Current timezone-aware UTC time."""
        pass

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    """Wall clock, UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """Clock frozen at a given moment. Used by tests and batch jobs."""

    def __init__(self, moment: datetime, today: Optional[date] = None):
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        self._moment = moment
        self._today = today

    @classmethod
    def on(cls, day: date) -> "FixedClock":
        """Clock frozen at midnight UTC of ``day``."""
        return cls(datetime(day.year, day.month, day.day, tzinfo=timezone.utc))

    def now(self) -> datetime:
        return self._moment

    def today(self) -> date:
        return self._today or self._moment.date()

    def set(self, moment: datetime) -> None:
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        self._moment = moment
        self._today = None
