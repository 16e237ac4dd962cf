"""
Messages exchanged between the widget (render side) and the monitor service
(control side)
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from sentry_monitor.models.config import MonitorConfig
from sentry_monitor.models.sentry import Snapshot


class ConfigMessage(BaseModel):
    """Sent once by the widget when it starts"""

    type: Literal["SENTRY_CONFIG"] = "SENTRY_CONFIG"
    config: MonitorConfig


class FetchMessage(BaseModel):
    """Sent by the widget on every poll tick"""

    type: Literal["SENTRY_FETCH"] = "SENTRY_FETCH"


class UpdateMessage(Snapshot):
    """Snapshot delivered to the widget, possibly stale and carrying an error"""

    type: Literal["SENTRY_UPDATE"] = "SENTRY_UPDATE"

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot, error: str | None = None):
        data = snapshot.model_dump()
        data["error"] = error
        return cls(**data)


class ErrorMessage(BaseModel):
    """Failure reported before any snapshot exists"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: Literal["SENTRY_ERROR"] = "SENTRY_ERROR"
    error: str
    last_updated: datetime | None = None


ControlMessage = ConfigMessage | FetchMessage
RenderMessage = UpdateMessage | ErrorMessage
