"""Event log — bounded store of aggregation events.

Events are kept in the order they were recorded. ``query`` filters by event
type, destination key (a key matches itself and every key nested under it,
so ``"nav"`` matches ``"nav.primary"``), source path fragment and timestamp.

Thread Safety:
    The coordinator records from the event-loop thread only. A single log
    may still be shared by several coordinators running in different
    threads (one per build), so appends and queries take a lock.

"""

import threading
from collections import deque

from trove.observability.events import TroveEvent


def _key_matches(event_key: str, key: str) -> bool:
    return event_key == key or event_key.startswith(key + ".")


class EventLog:
    """Bounded, ordered event store.

    Once ``max_events`` is reached the oldest events are dropped.

    Args:
        max_events: Maximum number of events to retain.

    """

    __slots__ = ("_events", "_lock")

    def __init__(self, max_events: int = 10_000) -> None:
        self._events: deque[TroveEvent] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def append(self, event: TroveEvent) -> None:
        """Record an event."""
        with self._lock:
            self._events.append(event)

    def query(
        self,
        *,
        event_type: type | None = None,
        key: str | None = None,
        path: str | None = None,
        since_ns: int = 0,
        limit: int | None = None,
    ) -> list[TroveEvent]:
        """Return matching events, oldest first.

        Args:
            event_type: Only events of this type.
            key: Only events for this destination key or keys nested under it.
                Stage events (which carry no key) never match.
            path: Only events whose source path contains this fragment.
            since_ns: Only events recorded at or after this timestamp.
            limit: Keep at most this many of the newest matches.

        """
        with self._lock:
            events = list(self._events)

        matches = [
            event for event in events
            if (event_type is None or isinstance(event, event_type))
            and event.timestamp_ns >= since_ns
            and (key is None or _key_matches(getattr(event, "key", None) or "", key))
            and (path is None or path in (getattr(event, "path", None) or ""))
        ]
        if limit is not None:
            matches = matches[-limit:] if limit > 0 else []
        return matches

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
