"""Collector — records aggregation events into an EventLog.

The coordinator reports through an ``EventCollector`` rather than appending
events directly, so callers can share one log across several runs.

Thread Safety:
    The collector delegates to ``EventLog`` which is internally locked.

"""

from __future__ import annotations

from trove.observability.events import (
    AggregationFinished,
    SourceFailed,
    SourceResolved,
    SourceSkipped,
    now_ns,
)
from trove.observability.log import EventLog


class EventCollector:
    """Event collector for an aggregation run.

    Args:
        log: The EventLog to store events in.

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    # ----- Source events -----

    def record_resolved(
        self,
        key: str,
        path: str,
        *,
        classification: str,
        files: int = 1,
        duration_ms: float = 0.0,
    ) -> None:
        """Record a source placed into the metadata tree."""
        self._log.append(
            SourceResolved(
                key=key,
                path=path,
                classification=classification,  # type: ignore[arg-type]
                files=files,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_skipped(self, key: str, path: str, *, reason: str) -> None:
        """Record a source that contributed nothing."""
        self._log.append(
            SourceSkipped(key=key, path=path, reason=reason, timestamp_ns=now_ns())
        )

    def record_failed(self, key: str, path: str, exc: BaseException) -> None:
        """Record a source that failed to resolve."""
        self._log.append(
            SourceFailed(
                key=key,
                path=path,
                error=type(exc).__name__,
                message=str(exc),
                timestamp_ns=now_ns(),
            )
        )

    # ----- Stage events -----

    def record_finished(
        self,
        *,
        sources: int,
        errors: int,
        duration_ms: float,
    ) -> None:
        """Record the end of an aggregation stage."""
        self._log.append(
            AggregationFinished(
                sources=sources,
                errors=errors,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )
