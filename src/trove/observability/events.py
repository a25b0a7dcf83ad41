"""Event model for aggregation observability.

Defines event types emitted while metadata sources are resolved.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

import time
from dataclasses import dataclass
from typing import Literal


# ---------------------------------------------------------------------------
# Source events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SourceResolved:
    """A source was parsed and placed into the metadata tree.

    Attributes:
        key: Destination key in the metadata tree.
        path: Source path as configured.
        classification: Local/external file/directory.
        files: Number of data files parsed for this source.
        duration_ms: Time from dispatch to placement in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    key: str
    path: str
    classification: Literal[
        "local_file", "local_directory", "external_file", "external_directory"
    ]
    files: int
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class SourceSkipped:
    """A source produced nothing and was left out of the tree.

    Attributes:
        key: Destination key in the metadata tree.
        path: Source path as configured.
        reason: Why the source was skipped.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    key: str
    path: str
    reason: str
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class SourceFailed:
    """A source could not be resolved.

    Attributes:
        key: Destination key in the metadata tree.
        path: Source path as configured.
        error: Error class name.
        message: Error message.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    key: str
    path: str
    error: str
    message: str
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Stage events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AggregationFinished:
    """The aggregation stage settled.

    Attributes:
        sources: Number of specifications processed.
        errors: Number of errors recorded.
        duration_ms: Wall-clock time for the whole stage.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    sources: int
    errors: int
    duration_ms: float
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

type TroveEvent = SourceResolved | SourceSkipped | SourceFailed | AggregationFinished


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
