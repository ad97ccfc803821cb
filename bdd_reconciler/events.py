"""Structured events emitted by the merge and enrichment engines.

Engines never print; they hand ``ReconcileEvent`` records to an injectable
sink. The default sink forwards them to the standard logging system.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

log = logging.getLogger(__name__)

type EventSink = Callable[["ReconcileEvent"], None]

# Events describing a decision are logged at INFO, the rest at DEBUG.
DECISION_EVENTS = frozenset(
    [
        "merge.started",
        "merge.completed",
        "merge.scenario_replaced",
        "enrich.started",
        "enrich.completed",
        "enrich.feature_unmatched",
        "enrich.outline_row_unmatched",
    ]
)


@dataclass(frozen=True, kw_only=True)
class ReconcileEvent:
    """A single structured event."""

    name: str
    attributes: Mapping[str, Any] = field(default_factory=dict)


def log_event(event: ReconcileEvent) -> None:
    """Forward an event to the module logger."""
    level = logging.INFO if event.name in DECISION_EVENTS else logging.DEBUG
    if not log.isEnabledFor(level):
        return
    details = " ".join(f"{key}={value!r}" for key, value in event.attributes.items())
    log.log(level, "%s %s", event.name, details)


def discard_event(event: ReconcileEvent) -> None:
    """Sink that drops every event."""


def collect_events() -> tuple[EventSink, list[ReconcileEvent]]:
    """Return a sink that records events together with the list it fills."""
    events: list[ReconcileEvent] = []
    return events.append, events
