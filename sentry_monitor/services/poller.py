"""
Fixed-period poll timer and the independent one-shot retry timer
"""

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class Poller:
    """Calls on_tick every `interval` seconds until stopped.

    The first tick happens one interval after start; the immediate fetch is
    triggered by the config message. The period never backs off.
    """

    def __init__(self, interval: float, on_tick: Callable[[], None]):
        self.interval = interval
        self.on_tick = on_tick
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        if self.running:
            return self._task
        self._task = asyncio.create_task(self._run())
        return self._task

    async def _run(self):
        while True:
            await asyncio.sleep(self.interval)
            try:
                self.on_tick()
            except Exception as e:
                logger.error(f"Error in poll tick: {e}")

    def stop(self):
        if self._task is not None:
            self._task.cancel()
            self._task = None


class RetryTimer:
    """At most one pending retry; scheduling a new one replaces the old one"""

    def __init__(self, callback: Callable[[], None]):
        self.callback = callback
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, delay: float):
        self.cancel()
        loop = asyncio.get_running_loop()
        logger.info(f"Retrying fetch in {delay:g} seconds")
        self._handle = loop.call_later(delay, self._fire)

    def cancel(self):
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self):
        self._handle = None
        logger.info("Retrying fetch...")
        self.callback()
