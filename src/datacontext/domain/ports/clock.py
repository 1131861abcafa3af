"""Time source for audit stamping."""

from __future__ import annotations

import threading
from datetime import UTC, datetime
from typing import ClassVar, Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """UTC wall clock that never goes backwards within the process.

    The last reading is shared by all instances, so contexts created with their
    own default clock still stamp non-decreasing times.
    """

    _lock: ClassVar[threading.Lock] = threading.Lock()
    _last: ClassVar[datetime | None] = None

    def now(self) -> datetime:
        current = datetime.now(tz=UTC)
        with SystemClock._lock:
            last = SystemClock._last
            if last is not None and current < last:
                current = last
            SystemClock._last = current
        return current
