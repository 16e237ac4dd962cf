"""
Formatting of raw Sentry issues into the bounded, percentage-annotated
snapshot shown by the widget
"""

import logging
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from pydantic import ValidationError

from sentry_monitor.models.config import MonitorConfig
from sentry_monitor.models.errors import ParseError
from sentry_monitor.models.sentry import DisplayIssue, RawIssue, Snapshot

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 80


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def _elapsed_seconds(
    timestamp: str | datetime | None, now: datetime | None
) -> int | None:
    dt = parse_timestamp(timestamp)
    if dt is None:
        return None
    now = now or datetime.now(UTC)
    return max(0, int((now - dt).total_seconds()))


def format_time_ago(
    timestamp: str | datetime | None, now: datetime | None = None
) -> str:
    """Format a timestamp as 'X minutes ago' style text"""
    seconds = _elapsed_seconds(timestamp, now)
    if seconds is None:
        return "unknown"

    if seconds < 60:
        return "just now"
    if seconds < 120:
        return "1 minute ago"
    if seconds < 3600:
        return f"{seconds // 60} minutes ago"
    if seconds < 7200:
        return "1 hour ago"
    if seconds < 86400:
        return f"{seconds // 3600} hours ago"
    if seconds < 172800:
        return "1 day ago"
    if seconds < 2592000:
        return f"{seconds // 86400} days ago"
    if seconds < 5184000:
        return "1 month ago"
    return f"{seconds // 2592000} months ago"


def format_compact_time_ago(
    timestamp: str | datetime | None, now: datetime | None = None
) -> str:
    """Short form used in the widget header, e.g. '5m ago'"""
    seconds = _elapsed_seconds(timestamp, now)
    if seconds is None:
        return "unknown"

    if seconds < 60:
        return f"{seconds}s ago"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    if seconds < 2592000:
        return f"{seconds // 86400}d ago"
    return f"{seconds // 2592000}mo ago"


def truncate_text(text: str | None, length: int = TITLE_MAX_LENGTH) -> str:
    if not text:
        return ""
    if len(text) <= length:
        return text
    return text[: length - 3] + "..."


def calculate_percentage(count: int, total: int) -> float:
    """Share of total as a percentage, rounded half-up to one decimal"""
    if not total:
        return 0.0
    value = Decimal(str(count / total * 100))
    return float(value.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


class IssueFormatter:
    """Turns the raw issues array into a Snapshot for the widget"""

    def __init__(self, config: MonitorConfig):
        self.config = config

    def format_issues(self, raw_data: Any, now: datetime | None = None) -> Snapshot:
        if not isinstance(raw_data, list):
            logger.error(f"Expected array from Sentry API, got {type(raw_data)}")
            raise ParseError()

        now = now or datetime.now(UTC)

        try:
            raw_issues = [RawIssue.model_validate(item) for item in raw_data]
        except ValidationError as e:
            logger.error(f"Malformed issue in Sentry response: {e}")
            raise ParseError() from e

        # Percentages are relative to every returned issue, not just the shown ones
        total_count = sum(issue.count for issue in raw_issues)

        # A minimum of 0 keeps the historical meaning of 1
        min_events = self.config.min_events or 1
        selected = [issue for issue in raw_issues if issue.count >= min_events][
            : self.config.display_count
        ]

        try:
            issues = [
                self._to_display_issue(issue, total_count, now) for issue in selected
            ]
        except ValidationError as e:
            logger.error(f"Unusable issue fields in Sentry response: {e}")
            raise ParseError() from e

        return Snapshot(
            issues=issues,
            last_updated=now,
            total_issues=len(raw_issues),
            total_events=total_count,
        )

    def _to_display_issue(
        self, issue: RawIssue, total_count: int, now: datetime
    ) -> DisplayIssue:
        title = issue.display_title()
        metadata = issue.metadata or {}

        return DisplayIssue(
            id=issue.id,
            title=title,
            short_title=truncate_text(title),
            level=issue.level or "error",
            count=issue.count,
            users=issue.user_count,
            project=issue.project_slug(),
            first_seen=issue.first_seen,
            last_seen=issue.last_seen,
            time_ago=format_time_ago(issue.last_seen, now),
            percentage=calculate_percentage(issue.count, total_count),
            url=issue.permalink or self._fallback_permalink(issue.id),
            is_regression=issue.is_regression,
            environment=metadata.get("environment"),
            release=metadata.get("release"),
        )

    def _fallback_permalink(self, issue_id: str) -> str:
        return (
            f"https://{self.config.api_host}/organizations/"
            f"{self.config.org_slug}/issues/{issue_id}/"
        )
