"""
Declarative rendering of the widget state into element operations
"""

import logging
from collections.abc import Iterable
from datetime import UTC, datetime

from sentry_monitor.models.dom import (
    DomOperation,
    Element,
    ReplaceContent,
    SetAttribute,
    SetText,
)
from sentry_monitor.models.sentry import DisplayIssue, Snapshot
from sentry_monitor.models.widget import WidgetPhase, WidgetState
from sentry_monitor.services.issue_formatter import format_compact_time_ago

logger = logging.getLogger(__name__)


def _div(class_name: str = "", text: str = "", key: str | None = None, **kwargs):
    return Element(class_name=class_name, text=text, key=key, **kwargs)


class WidgetRenderer:
    """Builds the element tree for a state and diffs it against the last one.

    When the keyed layout (phase plus the ordered issue ids) is unchanged the
    result is a list of SetText/SetAttribute patches for the values that
    differ; otherwise a single ReplaceContent rebuilds the widget.
    """

    def render(
        self, state: WidgetState, now: datetime | None = None
    ) -> tuple[Element, list[DomOperation]]:
        now = now or datetime.now(UTC)
        tree = self.build(state, now)
        previous = state.rendered

        if previous is None or not self._same_layout(previous, tree):
            logger.debug(f"Full render in phase {state.phase.value}")
            return tree, [ReplaceContent(root=tree)]

        operations = self._diff(previous, tree)
        logger.debug(f"In-place update with {len(operations)} operations")
        return tree, operations

    def build(self, state: WidgetState, now: datetime) -> Element:
        phase = state.phase
        if phase == WidgetPhase.CONFIG_INVALID:
            children = [self._config_panel()]
        elif phase == WidgetPhase.LOADING:
            children = [self._loading_panel()]
        elif phase == WidgetPhase.ERROR_NO_DATA:
            children = [self._error_panel(state.error)]
        else:
            children = self._normal_view(state, now)

        return Element(
            key="root",
            class_name="sentry-monitor",
            attrs={"data-phase": phase.value},
            children=children,
        )

    def _config_panel(self) -> Element:
        return _div(
            "sentry-error",
            children=[
                _div("error-icon", "⚙️"),
                _div("error-title", "Configure Sentry Monitor"),
                _div(
                    "error-message",
                    "Please set sentryAuthToken and sentryOrgSlug in your config.",
                ),
            ],
        )

    def _loading_panel(self) -> Element:
        return _div(
            "sentry-loading",
            children=[
                _div("loading-icon", "⏳"),
                _div("loading-text", "Fetching errors from Sentry..."),
            ],
        )

    def _error_panel(self, error: str | None) -> Element:
        return _div(
            "sentry-error",
            children=[
                _div("error-icon", "❌"),
                _div("error-title", "Failed to fetch Sentry data"),
                _div("error-message", error or "", key="error-message"),
                _div("error-hint", "Check your auth token and project configuration."),
            ],
        )

    def _normal_view(self, state: WidgetState, now: datetime) -> list[Element]:
        snapshot = state.snapshot
        children = [self._header(snapshot, now)]

        if snapshot and snapshot.issues:
            pulsing = state.pulse.active(now)
            children.append(
                _div(
                    "sentry-issues",
                    children=[
                        self._issue_card(issue, rank, issue.id in pulsing)
                        for rank, issue in enumerate(snapshot.issues, start=1)
                    ],
                )
            )
        else:
            children.append(
                _div(
                    "sentry-no-issues",
                    children=[
                        _div("success-icon", "✅"),
                        _div("success-text", "No unresolved issues found!"),
                    ],
                )
            )

        banner_class = "sentry-error-banner"
        if not state.error:
            banner_class += " hidden"
        children.append(
            _div(
                banner_class,
                f"⚠️ {state.error}" if state.error else "",
                key="error-banner",
            )
        )
        return children

    def _header(self, snapshot: Snapshot | None, now: datetime) -> Element:
        meta = ""
        if snapshot is not None:
            meta = (
                f"Last updated: {format_compact_time_ago(snapshot.last_updated, now)}"
                " | "
                f"Sample size: last {snapshot.total_issues} unresolved issues"
            )
        return _div(
            "sentry-header",
            children=[
                _div("header-title", "Sentry Error Monitor"),
                _div("header-meta", meta, key="header-meta"),
            ],
        )

    def _issue_card(self, issue: DisplayIssue, rank: int, is_new: bool) -> Element:
        key = f"card-{issue.id}"
        class_name = f"error-card error-level-{issue.level}"
        if is_new:
            class_name += " new-issue"

        return Element(
            key=key,
            class_name=class_name,
            attrs={"title": issue.title},
            children=[
                _div("error-rank", f"{rank}.", key=f"{key}-rank"),
                _div(
                    "error-main",
                    children=[
                        _div("error-title", issue.short_title, key=f"{key}-title"),
                        _div(
                            "error-project",
                            f"{issue.project} | {issue.count} events",
                            key=f"{key}-meta",
                        ),
                    ],
                ),
                _div(
                    "error-detail",
                    children=[
                        _div(
                            "error-seen", f"Last: {issue.time_ago}", key=f"{key}-seen"
                        ),
                        _div(
                            "percent-text",
                            f"{issue.percentage}% of all errors",
                            key=f"{key}-percent",
                        ),
                        _div(
                            "percent-bar",
                            children=[
                                _div(
                                    "percent-fill",
                                    key=f"{key}-fill",
                                    attrs={"style": f"width: {issue.percentage}%"},
                                )
                            ],
                        ),
                    ],
                ),
            ],
        )

    def _same_layout(self, previous: Element, current: Element) -> bool:
        return (
            previous.attrs.get("data-phase") == current.attrs.get("data-phase")
            and previous.keys() == current.keys()
        )

    def _diff(self, previous: Element, current: Element) -> list[DomOperation]:
        old_index = previous.index()
        operations: list[DomOperation] = []

        for key, element in current.index().items():
            old = old_index[key]
            if element.class_name != old.class_name:
                operations.append(
                    SetAttribute(key=key, name="class", value=element.class_name)
                )
            for name, value in element.attrs.items():
                if old.attrs.get(name) != value:
                    operations.append(SetAttribute(key=key, name=name, value=value))
            if element.text != old.text:
                operations.append(SetText(key=key, text=element.text))

        return operations


class WidgetSurface:
    """In-memory stand-in for a display, updated only through operations"""

    def __init__(self):
        self.root: Element | None = None
        self.rebuilds = 0
        self.patches = 0

    def apply(self, operations: Iterable[DomOperation]):
        for operation in operations:
            if isinstance(operation, ReplaceContent):
                self.root = operation.root.model_copy(deep=True)
                self.rebuilds += 1
                continue

            element = self.find(operation.key)
            if isinstance(operation, SetText):
                element.text = operation.text
            elif operation.name == "class":
                element.class_name = operation.value
            else:
                element.attrs[operation.name] = operation.value
            self.patches += 1

    def find(self, key: str) -> Element:
        if self.root is None:
            raise LookupError("Nothing has been rendered yet")
        index = self.root.index()
        if key not in index:
            raise LookupError(f"No element with key '{key}'")
        return index[key]

    def to_text(self) -> str:
        return self.root.to_text() if self.root is not None else ""
