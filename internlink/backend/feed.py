import json
import logging
import queue
import threading
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

INSERT = "insert"
UPDATE = "update"
DELETE = "delete"

_EVENT_TYPES = {"INSERT": INSERT, "UPDATE": UPDATE, "DELETE": DELETE}


@dataclass
class ChangeEvent:
    type: str
    table: str
    new: dict | None = None
    old: dict | None = None

    @property
    def row(self) -> dict:
        return self.new if self.type != DELETE else (self.old or {})

    def as_dict(self) -> dict:
        return {"type": self.type, "table": self.table, "row": self.row, "old": self.old}


def event_type(name: str) -> str:
    return _EVENT_TYPES.get((name or "").upper(), (name or "").lower())


def matches(row: dict | None, filters: dict | None) -> bool:
    if not filters:
        return True
    if not row:
        return False
    return all(str(row.get(col)) == str(value) for col, value in filters.items())


@dataclass
class _Subscription:
    table: str
    callback: object
    event: str = "*"
    filters: dict = field(default_factory=dict)

    def wants(self, change: ChangeEvent) -> bool:
        if change.table != self.table:
            return False
        if self.event != "*" and event_type(self.event) != change.type:
            return False
        return matches(change.row, self.filters)


class ChangeFeed:
    """In-process change feed for the local store.

    Delivery is synchronous, in the thread that committed the write, and only
    covers writes made after the subscription started.
    """

    def __init__(self):
        self._subscriptions = []
        self._lock = threading.Lock()

    def subscribe(self, table: str, callback, *, event: str = "*", filters: dict | None = None):
        sub = _Subscription(table=table, callback=callback, event=event, filters=dict(filters or {}))
        with self._lock:
            self._subscriptions.append(sub)

        def unsubscribe():
            with self._lock:
                if sub in self._subscriptions:
                    self._subscriptions.remove(sub)

        return unsubscribe

    def publish(self, change: ChangeEvent) -> None:
        with self._lock:
            targets = [s for s in self._subscriptions if s.wants(change)]
        for sub in targets:
            try:
                sub.callback(change)
            except Exception:
                logger.exception("Change subscriber failed: table=%s type=%s", change.table, change.type)

    def subscriber_count(self, table: str | None = None) -> int:
        with self._lock:
            return sum(1 for s in self._subscriptions if table is None or s.table == table)


_CLOSED = object()


class EventStream:
    """Queue-backed, cancellable stream of items pushed from subscription callbacks.

    Iterating yields pushed items, and ``None`` whenever ``heartbeat`` seconds
    pass without one. ``close()`` runs every attached cancel action once and
    ends iteration.
    """

    def __init__(self, heartbeat: float = 15):
        self.heartbeat = heartbeat
        self._queue = queue.Queue()
        self._closed = threading.Event()
        self._cancels = []

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def attach(self, cancel):
        if self.closed:
            cancel()
        else:
            self._cancels.append(cancel)
        return self

    def push(self, item) -> None:
        if not self.closed:
            self._queue.put(item)

    def close(self) -> None:
        if self._closed.is_set():
            return
        self._closed.set()
        cancels, self._cancels = self._cancels, []
        for cancel in cancels:
            try:
                cancel()
            except Exception:
                logger.exception("Stream cancel action failed")
        self._queue.put(_CLOSED)

    def __iter__(self):
        while not self.closed:
            try:
                item = self._queue.get(timeout=self.heartbeat)
            except queue.Empty:
                yield None
                continue
            if item is _CLOSED:
                return
            yield item

    def sse(self, name: str = "message"):
        """Render as Server-Sent Event frames; items may be ``(event, payload)`` pairs."""
        try:
            yield "retry: 3000\n\n"
            for item in self:
                if item is None:
                    yield ": keep-alive\n\n"
                    continue
                event, payload = item if isinstance(item, tuple) else (name, item)
                yield f"event: {event}\ndata: {json.dumps(payload, default=str)}\n\n"
        finally:
            self.close()
