import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Friendly config names mapped onto the issues endpoint's sort values
SORT_ALIASES = {
    "freq": "freq",
    "last_seen": "date",
    "first_seen": "new",
}

API_SORT_VALUES = {"date", "new", "freq", "priority", "user", "trends"}


class MonitorConfig(BaseModel):
    """Configuration for one monitor widget, immutable once loaded"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    auth_token: str = Field(default="", alias="sentryAuthToken")
    org_slug: str = Field(default="", alias="sentryOrgSlug")
    project_slug: str = Field(default="", alias="sentryProjectSlug")
    update_interval_ms: int = Field(default=30000, alias="updateInterval", gt=0)
    display_count: int = Field(default=5, alias="displayCount", gt=0)
    time_range: str = Field(default="24h", alias="timeRange")
    sort_by: str = Field(default="freq", alias="sortBy")
    min_events: int = Field(default=1, alias="minEvents", ge=0)
    api_host: str = Field(default="sentry.io", alias="apiHost")
    request_timeout_s: float = Field(default=30.0, alias="requestTimeout", gt=0)

    @classmethod
    def from_env(cls):
        return cls(
            auth_token=os.getenv("SENTRY_AUTH_TOKEN", ""),
            org_slug=os.getenv("SENTRY_ORG", ""),
            project_slug=os.getenv("SENTRY_PROJECT", ""),
            update_interval_ms=int(os.getenv("SENTRY_UPDATE_INTERVAL", "30000")),
            display_count=int(os.getenv("SENTRY_DISPLAY_COUNT", "5")),
            time_range=os.getenv("SENTRY_TIME_RANGE", "24h"),
            sort_by=os.getenv("SENTRY_SORT_BY", "freq"),
            min_events=int(os.getenv("SENTRY_MIN_EVENTS", "1")),
            api_host=os.getenv("SENTRY_API_HOST", "sentry.io"),
            request_timeout_s=float(os.getenv("SENTRY_REQUEST_TIMEOUT", "30")),
        )

    @classmethod
    def from_host(cls, payload: Mapping[str, Any]):
        """Build from a host payload using the widget's camelCase keys"""
        return cls.model_validate(dict(payload))

    @property
    def update_interval(self) -> float:
        return self.update_interval_ms / 1000

    def missing_fields(self) -> list[str]:
        missing = []
        if not self.auth_token:
            missing.append("sentryAuthToken")
        if not self.org_slug:
            missing.append("sentryOrgSlug")
        return missing

    def is_configured(self) -> bool:
        return not self.missing_fields()

    def api_sort(self) -> str:
        """Sort value sent to the API; empty defers to the API's default order"""
        if self.sort_by in SORT_ALIASES:
            return SORT_ALIASES[self.sort_by]
        if self.sort_by in API_SORT_VALUES:
            return self.sort_by
        return ""


class AppConfig(BaseModel):
    sentry: MonitorConfig
    debug: bool = False

    @classmethod
    def from_env(cls):
        return cls(
            sentry=MonitorConfig.from_env(),
            debug=os.getenv("DEBUG", "false").lower() == "true",
        )
