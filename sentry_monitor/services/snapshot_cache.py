import logging
from datetime import UTC, datetime

from sentry_monitor.models.messages import ErrorMessage, RenderMessage, UpdateMessage
from sentry_monitor.models.sentry import Snapshot

logger = logging.getLogger(__name__)


class SnapshotCache:
    """Keeps the last successful snapshot so failures can still show data"""

    def __init__(self):
        self.last_snapshot: Snapshot | None = None

    def store(self, snapshot: Snapshot) -> UpdateMessage:
        self.last_snapshot = snapshot
        return UpdateMessage.from_snapshot(snapshot)

    def fallback(self, error: str, now: datetime | None = None) -> RenderMessage:
        """Message to send after a failed fetch.

        The cached snapshot is re-sent unchanged apart from the error, so the
        widget never drops from showing data to showing nothing. There is no
        expiry: persistent failures keep showing the same stale issues.
        """
        if self.last_snapshot is not None:
            logger.info("Sending cached snapshot along with the error")
            return UpdateMessage.from_snapshot(self.last_snapshot, error=error)

        return ErrorMessage(error=error, last_updated=now or datetime.now(UTC))
