"""Background task pruning expired sessions."""

import asyncio
import time
from typing import Callable, Optional

from app.session.store import SessionStore
from app.obs.logger import log_event
from app.obs.metrics import inc_counter


class SessionSweeper:
    """Calls SessionStore.sweep on a fixed period for the process lifetime."""

    def __init__(
        self,
        store: SessionStore,
        interval_seconds: float = 600,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.interval_seconds = interval_seconds
        self.clock = clock
        self._task: Optional[asyncio.Task] = None

    def tick(self) -> int:
        now = self.clock()
        removed = self.store.sweep(now)
        if removed:
            inc_counter("sessions_expired_total", amount=removed)
            log_event("sessions_swept", removed=removed, remaining=len(self.store))
        return removed

    async def run(self) -> None:
        # Missed ticks (e.g. host sleep) only delay removal
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await asyncio.to_thread(self.tick)
            except Exception as e:
                # Keep the loop alive; the next tick retries the sweep
                log_event("sweeper_error", level="ERROR", error=str(e))

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run())
            log_event("sweeper_started", interval_seconds=self.interval_seconds)
        return self._task

    async def stop(self) -> None:
        """Cancel the loop; used at application shutdown."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
