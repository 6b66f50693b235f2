"""Clock abstraction used by the acquire loop."""

import asyncio
import time
from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    """Source of wall-clock time, deadline time and sleeping."""

    def now(self) -> datetime:
        """Current UTC wall-clock time (used for lease expiry)."""

    def monotonic(self) -> float:
        """Monotonic seconds (used for the give-up deadline)."""

    async def sleep(self, seconds: float) -> None:
        """Suspend the calling task."""


class SystemClock:
    """Clock backed by the system time and the running event loop."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def monotonic(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)
