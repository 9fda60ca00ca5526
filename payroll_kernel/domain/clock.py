"""
Injectable time source.

Services, the backup scheduler and the reminder ask a Clock for the time
instead of calling ``datetime.now()``.  All times are timezone-aware UTC.
"""

from abc import ABC, abstractmethod
from datetime import UTC, date, datetime, timedelta

DEFAULT_TEST_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


class Clock(ABC):

    @abstractmethod
    def now(self) -> datetime:
        ...

    def today(self) -> date:
        """Calendar date of ``now()``."""
        return self.now().date()


class SystemClock(Clock):

    def now(self) -> datetime:
        return datetime.now(UTC)


class DeterministicClock(Clock):
    """
    Frozen clock for tests: ``now()`` only moves when told to.

        clock = DeterministicClock(datetime(2024, 3, 15, 9, 0, tzinfo=UTC))
        clock.advance_minutes(15)
    """

    def __init__(self, start: datetime | None = None):
        self._current = start or DEFAULT_TEST_TIME

    def now(self) -> datetime:
        return self._current

    def set_time(self, time: datetime) -> None:
        self._current = time

    def advance(self, seconds: int = 1) -> None:
        self._current += timedelta(seconds=seconds)

    def advance_minutes(self, minutes: int) -> None:
        self._current += timedelta(minutes=minutes)

    def advance_days(self, days: int) -> None:
        self._current += timedelta(days=days)

    def tick(self) -> datetime:
        """One second forward; returns the new time."""
        self.advance()
        return self._current
