"""
Control side of the monitor: reacts to config/fetch messages, fetches and
formats issues, and reports results back to the widget
"""

import asyncio
import logging
from collections.abc import Callable, Coroutine
from datetime import UTC, datetime
from typing import Any

import aiohttp

from sentry_monitor.models.config import MonitorConfig
from sentry_monitor.models.errors import ConfigurationError, SentryMonitorError
from sentry_monitor.models.messages import (
    ConfigMessage,
    ControlMessage,
    ErrorMessage,
    FetchMessage,
    RenderMessage,
)
from sentry_monitor.services.issue_formatter import IssueFormatter
from sentry_monitor.services.poller import RetryTimer
from sentry_monitor.services.sentry_fetcher import SentryFetcher
from sentry_monitor.services.snapshot_cache import SnapshotCache

logger = logging.getLogger(__name__)


class MonitorService:
    def __init__(
        self,
        emit: Callable[[RenderMessage], None],
        session: aiohttp.ClientSession | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.emit = emit
        self.session = session
        self.clock = clock or (lambda: datetime.now(UTC))

        self.config: MonitorConfig | None = None
        self.fetcher: SentryFetcher | None = None
        self.formatter: IssueFormatter | None = None
        self.cache = SnapshotCache()
        self.retry_timer = RetryTimer(self._on_retry)

        # Overlapping ticks are skipped while a request is outstanding
        self.in_flight = False
        self._tasks: set[asyncio.Task] = set()

    async def handle_message(self, message: ControlMessage):
        if isinstance(message, ConfigMessage):
            self.configure(message.config)
            await self.fetch_issues()
        elif isinstance(message, FetchMessage):
            if self.config is not None:
                await self.fetch_issues()
            else:
                logger.warning("Fetch requested before configuration, ignoring")

    def configure(self, config: MonitorConfig):
        self.config = config
        self.fetcher = SentryFetcher(config, self.session)
        self.formatter = IssueFormatter(config)
        logger.info(f"Configured for organization '{config.org_slug}'")

    async def fetch_issues(self) -> bool:
        """Run one fetch cycle; returns False when the cycle was skipped"""
        if self.config is None or not self.config.is_configured():
            error = ConfigurationError(
                "Missing required configuration: sentryAuthToken or sentryOrgSlug"
            )
            logger.error(error.message)
            self.emit(ErrorMessage(error=error.message))
            return False

        if self.in_flight:
            logger.warning("Previous fetch still in flight, skipping this one")
            return False

        self.in_flight = True
        try:
            raw_data = await self.fetcher.fetch_issues()
            snapshot = self.formatter.format_issues(raw_data, now=self.clock())
        except SentryMonitorError as e:
            self._handle_error(e)
        except Exception as e:
            logger.error(f"Unexpected error fetching Sentry issues: {e}")
            self.emit(self.cache.fallback(f"Unexpected error: {e}", self.clock()))
        else:
            logger.info(f"Successfully fetched {len(snapshot.issues)} issues")
            self.emit(self.cache.store(snapshot))
        finally:
            self.in_flight = False

        return True

    def _handle_error(self, error: SentryMonitorError):
        self.emit(self.cache.fallback(error.message, self.clock()))
        if error.retry_after is not None:
            self.retry_timer.schedule(error.retry_after)

    def _on_retry(self):
        self.spawn(self.fetch_issues())

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def close(self):
        self.retry_timer.cancel()
        for task in list(self._tasks):
            task.cancel()
