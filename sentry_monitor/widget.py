import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime

from sentry_monitor.models.config import MonitorConfig
from sentry_monitor.models.dom import DomOperation
from sentry_monitor.models.messages import (
    ConfigMessage,
    ControlMessage,
    ErrorMessage,
    FetchMessage,
    RenderMessage,
    UpdateMessage,
)
from sentry_monitor.models.widget import WidgetState
from sentry_monitor.services.poller import Poller
from sentry_monitor.services.widget_renderer import WidgetRenderer, WidgetSurface

logger = logging.getLogger(__name__)


class MonitorWidget:
    """Render side: owns the poll timer, the widget state and the surface"""

    def __init__(
        self,
        config: MonitorConfig,
        send: Callable[[ControlMessage], None],
        surface: WidgetSurface | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.config = config
        self.send = send
        self.surface = surface or WidgetSurface()
        self.clock = clock or (lambda: datetime.now(UTC))
        self.renderer = WidgetRenderer()
        self.state = WidgetState()
        self.poller = Poller(config.update_interval, self._on_tick)

    def start(self):
        logger.info("Starting Sentry monitor widget")

        missing = self.config.missing_fields()
        if missing:
            self.state.config_valid = False
            self.state.is_loading = False
            self.state.error = f"Missing required configuration: {', '.join(missing)}"
            logger.error(self.state.error)
            self.render()
            return

        self.render()
        self.send(ConfigMessage(config=self.config))
        self.poller.start()

    def stop(self):
        self.poller.stop()

    def _on_tick(self):
        self.send(FetchMessage())

    def receive(self, message: RenderMessage) -> list[DomOperation]:
        if isinstance(message, UpdateMessage):
            self.state.is_loading = False
            self._track_new_issues(message)
            self.state.snapshot = message
            self.state.error = message.error
        elif isinstance(message, ErrorMessage):
            self.state.is_loading = False
            self.state.error = message.error

        return self.render()

    def _track_new_issues(self, message: UpdateMessage):
        # Nothing pulses on the first snapshot
        if self.state.snapshot is None:
            return

        old_ids = set(self.state.snapshot.issue_ids())
        new_ids = [
            issue_id for issue_id in message.issue_ids() if issue_id not in old_ids
        ]
        if not new_ids:
            return

        logger.info(f"{len(new_ids)} new issues since the last update")
        tracked_at = self.clock()
        self.state.pulse.track(new_ids, tracked_at)
        asyncio.get_running_loop().call_later(
            self.state.pulse.ttl_seconds, self.expire_pulses, new_ids, tracked_at
        )

    def expire_pulses(
        self, issue_ids: list[str] | None = None, tracked_at: datetime | None = None
    ) -> list[DomOperation]:
        # Timer ids go even when the wall clock lags the loop clock
        expired = self.state.pulse.expire(self.clock())
        if issue_ids and tracked_at is not None:
            expired += self.state.pulse.release(issue_ids, tracked_at)
        if not expired:
            return []
        return self.render()

    def render(self) -> list[DomOperation]:
        tree, operations = self.renderer.render(self.state, self.clock())
        self.state.rendered = tree
        self.surface.apply(operations)
        return operations
