import asyncio
import logging

import aiohttp

from sentry_monitor.models.config import AppConfig
from sentry_monitor.models.messages import ControlMessage, RenderMessage
from sentry_monitor.services.monitor_service import MonitorService
from sentry_monitor.widget import MonitorWidget

logger = logging.getLogger(__name__)


class SentryMonitor:
    """Wires the widget and the monitor service together and keeps them running"""

    def __init__(self, config: AppConfig):
        self.config = config
        self.session = None
        self.service: MonitorService | None = None
        self.widget: MonitorWidget | None = None
        self._stopped = asyncio.Event()

    async def start(self):
        try:
            self.session = aiohttp.ClientSession()
            org_slug = self.config.sentry.org_slug
            logger.info(f"Starting Sentry monitor for organization '{org_slug}'...")

            self._initialize_components()
            self.widget.start()

            if not self.widget.poller.running:
                logger.error("Widget is not configured, nothing to poll")
                return

            await self._stopped.wait()

        except Exception as e:
            logger.error(f"Error running monitor: {e}")
            raise
        finally:
            self._shutdown()
            if self.session:
                await self.session.close()

    def stop(self):
        self._stopped.set()

    def _initialize_components(self):
        self.service = MonitorService(self._deliver, self.session)
        self.widget = MonitorWidget(self.config.sentry, self._dispatch)

    def _dispatch(self, message: ControlMessage):
        """Widget -> service; the fetch runs in the background so ticks never block"""
        self.service.spawn(self.service.handle_message(message))

    def _deliver(self, message: RenderMessage):
        """Service -> widget"""
        operations = self.widget.receive(message)
        logger.info(f"Widget updated ({len(operations)} operations)")
        if self.config.debug:
            logger.debug(f"Widget content:\n{self.widget.surface.to_text()}")

    def _shutdown(self):
        if self.widget:
            self.widget.stop()
        if self.service:
            self.service.close()
