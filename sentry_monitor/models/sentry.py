"""
Sentry models for raw API issues and the formatted dashboard snapshot
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def coerce_count(value: Any) -> int:
    """Sentry sends counts as strings; anything unreadable counts as zero"""
    if value is None or isinstance(value, bool):
        return 0
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


class RawIssue(BaseModel):
    """One entry of the issues endpoint's response array"""

    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    title: str | None = None
    level: str | None = None
    count: int = 0
    user_count: int = Field(default=0, alias="userCount")
    project: dict[str, Any] | None = None
    first_seen: str | None = Field(default=None, alias="firstSeen")
    last_seen: str | None = Field(default=None, alias="lastSeen")
    permalink: str | None = None
    is_regression: bool = Field(default=False, alias="isRegression")
    metadata: dict[str, Any] | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("count", "user_count", mode="before")
    @classmethod
    def _coerce_counts(cls, value: Any) -> int:
        return coerce_count(value)

    @field_validator("is_regression", mode="before")
    @classmethod
    def _coerce_flag(cls, value: Any) -> bool:
        return bool(value)

    def display_title(self) -> str:
        metadata = self.metadata or {}
        fallback = metadata.get("title")
        if not isinstance(fallback, str):
            fallback = None
        return self.title or fallback or "Unknown error"

    def project_slug(self) -> str:
        project = self.project or {}
        return project.get("slug") or "unknown"


class DisplayIssue(BaseModel):
    """Represents an issue as shown on one widget card"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    short_title: str
    level: str
    count: int
    users: int
    project: str
    first_seen: str | None = None
    last_seen: str | None = None
    time_ago: str
    percentage: float
    url: str
    is_regression: bool = False
    environment: str | None = None
    release: str | None = None


class Snapshot(BaseModel):
    """Formatted result of one successful fetch"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    issues: list[DisplayIssue] = []
    last_updated: datetime
    total_issues: int
    total_events: int = 0
    error: str | None = None

    def issue_ids(self) -> list[str]:
        return [issue.id for issue in self.issues]
