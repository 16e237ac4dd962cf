from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from sentry_monitor.models.dom import Element
from sentry_monitor.models.sentry import Snapshot

PULSE_SECONDS = 10.0


class WidgetPhase(str, Enum):
    CONFIG_INVALID = "config_invalid"
    LOADING = "loading"
    ERROR_NO_DATA = "error_no_data"
    NORMAL = "normal"


class PulseTracker(BaseModel):
    """Ids of newly appeared issues, each highlighted for a limited time"""

    ttl_seconds: float = PULSE_SECONDS
    added: dict[str, datetime] = {}

    def track(self, issue_ids: list[str], now: datetime):
        for issue_id in issue_ids:
            self.added[issue_id] = now

    def active(self, now: datetime) -> set[str]:
        return {
            issue_id
            for issue_id, added_at in self.added.items()
            if (now - added_at).total_seconds() < self.ttl_seconds
        }

    def expire(self, now: datetime) -> list[str]:
        expired = [
            issue_id
            for issue_id, added_at in self.added.items()
            if (now - added_at).total_seconds() >= self.ttl_seconds
        ]
        for issue_id in expired:
            del self.added[issue_id]
        return expired

    def release(self, issue_ids: list[str], added_at: datetime) -> list[str]:
        """Drop ids still carrying the given tracking time, whatever the clock says"""
        released = [
            issue_id for issue_id in issue_ids if self.added.get(issue_id) == added_at
        ]
        for issue_id in released:
            del self.added[issue_id]
        return released


class WidgetState(BaseModel):
    """Everything the renderer needs, owned by a single widget"""

    config_valid: bool = True
    is_loading: bool = True
    snapshot: Snapshot | None = None
    error: str | None = None
    pulse: PulseTracker = Field(default_factory=PulseTracker)
    rendered: Element | None = None

    @property
    def phase(self) -> WidgetPhase:
        if not self.config_valid:
            return WidgetPhase.CONFIG_INVALID
        if self.is_loading:
            return WidgetPhase.LOADING
        if self.error and self.snapshot is None:
            return WidgetPhase.ERROR_NO_DATA
        return WidgetPhase.NORMAL
