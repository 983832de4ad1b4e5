"""
Clock -- Deterministic time abstraction.

Responsibility:
    Provides an injectable clock so that aggregates never call
    ``datetime.now()`` or ``date.today()`` directly.  Pure engines do not
    use a clock at all; they receive explicit dates in their inputs.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O (except SystemClock,
    which is the one sanctioned I/O boundary for time).

Invariants enforced:
    (none directly -- enables deterministic "not in the future" checks)

Failure modes:
    - DeterministicClock raises TypeError for a non date/datetime start.

Audit relevance:
    Creation dates, payment dates and dispute timestamps recorded on the
    Debt aggregate are all traceable to an injected Clock instance.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone


class Clock(ABC):
    """
    Abstract clock interface.

    Contract:
        Aggregates that validate "not in the future" receive a Clock via
        their factory.  Domain code must NEVER call ``date.today()``.

    Guarantees:
        - ``now()`` returns a timezone-aware UTC ``datetime``.
        - ``today()`` returns the calendar date of ``now()``.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Get the current time."""
        ...

    def today(self) -> date:
        """Get the current calendar date."""
        return self.now().date()


class SystemClock(Clock):
    """
    Production clock that returns actual system time.

    Non-goals:
        Not suitable for deterministic replay or testing.
    """

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Test clock with controlled time.

    Contract:
        Used in tests for deterministic behaviour.  Accepts either a
        ``date`` (pinned to noon UTC) or an aware ``datetime``.

    Guarantees:
        ``now()`` returns the same value on repeated calls until
        ``advance_days()`` or ``set_time()`` is called.
    """

    def __init__(self, fixed_time: datetime | date | None = None):
        self._fixed_time = self._coerce(
            fixed_time or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        )

    @staticmethod
    def _coerce(value: datetime | date) -> datetime:
        if isinstance(value, datetime):
            return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day, 12, tzinfo=timezone.utc)
        raise TypeError(f"Clock time must be date or datetime, got {type(value)}")

    def now(self) -> datetime:
        return self._fixed_time

    def set_time(self, time: datetime | date) -> None:
        """Set the clock to a specific time."""
        self._fixed_time = self._coerce(time)

    def advance_days(self, days: int = 1) -> None:
        """Advance the clock by whole days."""
        self._fixed_time = self._fixed_time + timedelta(days=days)
