"""Aggregation observability — a unified event model for source resolution.

Every source the coordinator touches produces an event:
- **SourceResolved**: parsed and placed into the metadata tree
- **SourceSkipped**: produced nothing (e.g. an empty external directory)
- **SourceFailed**: raised an error

All events are frozen dataclasses with nanosecond timestamps, safe for
concurrent production from worker threads.

Quick Start:
    >>> from trove.observability import EventCollector, EventLog
    >>> log = EventLog()
    >>> collector = EventCollector(log)
    >>> # Pass collector to AggregationCoordinator(..., collector=collector)

"""

from trove.observability.collector import EventCollector
from trove.observability.events import (
    AggregationFinished,
    SourceFailed,
    SourceResolved,
    SourceSkipped,
    TroveEvent,
    now_ns,
)
from trove.observability.log import EventLog

__all__ = [
    "AggregationFinished",
    "EventCollector",
    "EventLog",
    "SourceFailed",
    "SourceResolved",
    "SourceSkipped",
    "TroveEvent",
    "now_ns",
]
