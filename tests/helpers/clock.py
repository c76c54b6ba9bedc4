"""Controllable clock for time-dependent tests."""

from datetime import datetime, timedelta, timezone
from typing import Optional

DEFAULT_START = datetime(2026, 3, 2, 12, 0, 0, tzinfo=timezone.utc)


class ManualClock:
    """Callable returning a fixed UTC time until advanced."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or DEFAULT_START

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> datetime:
        """Move forward by timedelta(**delta) and return the new time."""
        self.now = self.now + timedelta(**delta)
        return self.now

    def ago(self, **delta) -> datetime:
        return self.now - timedelta(**delta)
