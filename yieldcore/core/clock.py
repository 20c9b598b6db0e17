"""Sources of the as-of time fed into every calculation.

The engine functions never read the clock themselves; callers obtain a
timestamp from a ``TimeSource`` and pass it in. ``SimulatedTimeSource``
backs the administrator "time machine" used for demos and testing.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Protocol

from yieldcore.utils.dates import TimestampLike, parse_timestamp, to_iso


class TimeSource(Protocol):
    def now(self) -> datetime: ...


class SystemTimeSource:
    def __init__(self, clock: Callable[[], datetime] | None = None):
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def now(self) -> datetime:
        return parse_timestamp(self._clock())


class SimulatedTimeSource:
    """Wall clock shifted by an administrator-chosen offset.

    ``SimulatedTimeSource.frozen_at(...)`` pins the time instead, so every
    call returns the same instant.
    """

    def __init__(
        self,
        app_time: TimestampLike,
        *,
        base: TimeSource | None = None,
        frozen: bool = False,
    ):
        self._base = base or SystemTimeSource()
        self._app_time = parse_timestamp(app_time)
        self._frozen = frozen
        self._offset = self._app_time - self._base.now()

    @classmethod
    def frozen_at(cls, app_time: TimestampLike) -> "SimulatedTimeSource":
        return cls(app_time, frozen=True)

    @property
    def offset(self) -> timedelta:
        return self._offset

    def now(self) -> datetime:
        if self._frozen:
            return self._app_time
        return self._base.now() + self._offset


def as_of_iso(source: TimeSource) -> str:
    return to_iso(source.now())
