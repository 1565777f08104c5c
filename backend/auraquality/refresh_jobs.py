"""Periodic background refresh of the displayed reading.

Goals:
- Every tick re-fetches the currently displayed location silently: no
  loading indicator and the old reading stays up until the new one lands.
- A tick is skipped when nothing is loaded yet or a fetch is still in flight,
  so a slow fetch never stacks a second one behind it.
- The loop lives exactly as long as the owning session.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .session import DashboardSession

logger = logging.getLogger(__name__)


class ReadingRefreshController:
    def __init__(self, session: "DashboardSession", *, interval_seconds: float = 300.0):
        self.session = session
        self.interval_seconds = interval_seconds

        # Lazy-initialized to avoid event loop issues
        self._stop: Optional[asyncio.Event] = None
        self._loop_task: Optional[asyncio.Task] = None
        self._refresh_task: Optional[asyncio.Task] = None

    def _get_stop_event(self) -> asyncio.Event:
        """Get or create stop event in current event loop."""
        if self._stop is None:
            self._stop = asyncio.Event()
        return self._stop

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    def start(self):
        if self.running:
            return
        self._get_stop_event().clear()
        self._loop_task = asyncio.create_task(self._refresh_loop(), name="aura-reading-refresh")

    async def stop(self):
        self._get_stop_event().set()
        tasks = [t for t in (self._loop_task, self._refresh_task) if t is not None]
        for t in tasks:
            t.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._loop_task = None
        self._refresh_task = None

    def _refresh_pending(self) -> bool:
        return self._refresh_task is not None and not self._refresh_task.done()

    def tick(self) -> bool:
        """Start one silent refresh if the session allows it.

        Returns True when a fetch was started.
        """
        reading = self.session.reading
        if reading is None:
            logger.debug("[refresh] nothing loaded yet, skipping tick")
            return False
        if self.session.fetch_in_flight or self._refresh_pending():
            logger.debug("[refresh] fetch still in flight, skipping tick")
            return False

        logger.info("[refresh] refreshing %s", reading.location_name)
        self._refresh_task = asyncio.create_task(
            self.session.load_reading(reading.lat, reading.lng, reading.location_name, is_refresh=True),
            name="aura-reading-refresh-fetch",
        )
        return True

    async def _refresh_loop(self):
        interval = max(0.001, float(self.interval_seconds))
        stop_event = self._get_stop_event()

        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass
            else:
                break

            try:
                self.tick()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                # Keep the loop alive.
                logger.exception("[refresh] tick error: %s", e)
