"""
Live collections: an initial snapshot kept current by a change feed.

A collection subscribes before it fetches, buffers events that arrive while
the snapshot is loading, then replays them on top of it. ``close()`` cancels
the subscription and turns any later snapshot or event into a no-op.
"""
import copy
from contextlib import contextmanager
import logging
import threading
import time
import uuid

from django.conf import settings
from django.core.cache import caches
from django.utils import timezone

from backend.errors import ServiceError
from backend.feed import DELETE, INSERT, UPDATE, ChangeEvent
from internships import services as internship_services
from messaging import services as messaging_services

from . import demo_data

logger = logging.getLogger(__name__)


def reconcile(items, change: ChangeEvent) -> list:
    """Apply one change: insert prepends, update replaces by id (or prepends), delete removes."""
    row = change.row or {}
    row_id = row.get("id")
    if row_id is None:
        return list(items)
    others = [item for item in items if item.get("id") != row_id]
    if change.type == INSERT:
        return [row] + others
    if change.type == UPDATE:
        if len(others) == len(items):
            return [row] + others
        return [row if item.get("id") == row_id else item for item in items]
    if change.type == DELETE:
        return others
    return list(items)


class LiveCollection:
    def __init__(self, fetch, subscribe, *, demo=(), project=None, name="collection"):
        self.name = name
        self._fetch = fetch
        self._subscribe = subscribe
        self._demo = demo
        self._project = project
        self.items = []
        self.loading = True
        self.degraded = False
        self.closed = False
        self._buffer = []
        self._listeners = []
        self._unsubscribe = None
        self._lock = threading.RLock()

    def __iter__(self):
        return iter(list(self.items))

    def __len__(self):
        return len(self.items)

    def open(self):
        try:
            self._unsubscribe = self._subscribe(self._on_change)
        except Exception:
            logger.exception("Live %s subscription failed; serving snapshot only", self.name)

        try:
            snapshot = list(self._fetch())
            degraded = False
        except ServiceError:
            logger.warning("Live %s snapshot failed; using demo data", self.name)
            snapshot = copy.deepcopy(list(self._demo))
            degraded = True

        with self._lock:
            if self.closed:
                return self
            items = snapshot
            for change in self._buffer:
                items = reconcile(items, change)
            self._buffer = None
            self.items = items
            self.degraded = degraded
            self.loading = False
        return self

    def _on_change(self, change: ChangeEvent) -> None:
        if self._project is not None:
            change = self._project(change)
            if change is None:
                return
        with self._lock:
            if self.closed:
                return
            if self._buffer is not None:
                self._buffer.append(change)
                return
            self.items = reconcile(self.items, change)
            items = list(self.items)
        for listener in list(self._listeners):
            listener(change, items)

    def listen(self, listener):
        """``listener(change, items)`` after each applied change; returns an unsubscribe."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def watch(self, on_snapshot, listener):
        """Hand the current items to ``on_snapshot``, then every later change to ``listener``."""
        with self._lock:
            on_snapshot(list(self.items))
            return self.listen(listener)

    def close(self) -> None:
        with self._lock:
            if self.closed:
                return
            self.closed = True
            unsubscribe, self._unsubscribe = self._unsubscribe, None
            self._listeners.clear()
        if unsubscribe is not None:
            unsubscribe()


# -----------------------------
# Job listings
# -----------------------------
def _active_only(change: ChangeEvent):
    if change.type in (INSERT, UPDATE) and (change.new or {}).get("status") != "active":
        return ChangeEvent(DELETE, change.table, old=change.new)
    return change


def live_job_listings() -> LiveCollection:
    return LiveCollection(
        internship_services.get_active_job_listings,
        internship_services.subscribe_to_job_listings,
        demo=demo_data.JOB_LISTINGS,
        project=_active_only,
        name="job listings",
    ).open()


# -----------------------------
# Applications
# -----------------------------
def live_applications(user_id, role: str) -> LiveCollection:
    if role == "intern":
        fetch = lambda: internship_services.get_applications_by_intern(user_id)  # noqa: E731
        project = None
        demo = demo_data.INTERN_APPLICATIONS
    else:
        fetch = lambda: internship_services.get_applications_by_employer(user_id)  # noqa: E731
        owned = _owned_job_ids(user_id)

        def project(change):
            return change if change.row.get("job_id") in owned else None

        demo = demo_data.EMPLOYER_APPLICATIONS

    return LiveCollection(
        fetch,
        lambda callback: internship_services.subscribe_to_applications(user_id, role, callback),
        demo=demo,
        project=project,
        name="applications",
    ).open()


def _owned_job_ids(employer_id) -> set:
    try:
        return {job["id"] for job in internship_services.get_job_listings_by_employer(employer_id)}
    except ServiceError:
        return set()


# -----------------------------
# Messages
# -----------------------------
class LiveMessages(LiveCollection):
    def __init__(self, user_id):
        super().__init__(
            lambda: messaging_services.get_messages_by_user(user_id),
            lambda callback: messaging_services.subscribe_to_messages(user_id, callback),
            demo=demo_data.MESSAGES,
            name="messages",
        )
        self.user_id = user_id

    def send(self, receiver_id, content, subject=None, application_id=None) -> dict:
        row = messaging_services.send_message(
            sender_id=self.user_id,
            receiver_id=receiver_id,
            content=content,
            subject=subject,
            application_id=application_id,
        )
        with self._lock:
            if not self.closed:
                self.items = reconcile(self.items, ChangeEvent(INSERT, "messages", new=row))
        return row


def live_messages(user_id) -> LiveMessages:
    return LiveMessages(user_id).open()


# -----------------------------
# Notifications
# -----------------------------
class NotificationFeed:
    """Newest-first notifications for one user, capped and persisted in the default cache."""

    TITLE = "InternLink"
    LOCK_TIMEOUT = 5

    def __init__(self, user_id, *, permission=None, notifier=None, size=None, cache_alias="default"):
        self.user_id = user_id
        self.size = size or settings.NOTIFICATION_FEED_SIZE
        self.permission = "default"
        self._request_permission = permission or (lambda: "default")
        self._notifier = notifier
        self._permission_requested = False
        self._unsubscribe = None
        self.cache = caches[cache_alias]

    @property
    def key(self) -> str:
        return f"notifications:{self.user_id}"

    @property
    def items(self) -> list:
        return list(self.cache.get(self.key) or [])

    def mount(self, subscribe: bool = True):
        if not self._permission_requested:
            self._permission_requested = True
            self.permission = self._request_permission()
        if subscribe and self._unsubscribe is None:
            self._unsubscribe = messaging_services.subscribe_to_user_notifications(self.user_id, self.receive)
        return self

    def unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    @contextmanager
    def _locked(self):
        lock_key = f"{self.key}:lock"
        deadline = time.monotonic() + self.LOCK_TIMEOUT
        while not self.cache.add(lock_key, 1, timeout=self.LOCK_TIMEOUT):
            if time.monotonic() > deadline:
                logger.warning("Notification feed lock expired: user_id=%s", self.user_id)
                break
            time.sleep(0.01)
        try:
            yield
        finally:
            self.cache.delete(lock_key)

    def receive(self, notification: dict) -> dict:
        """Store one notification; a repeat of a stored ``key`` returns the stored entry."""
        key = notification.get("key") or uuid.uuid4().hex
        with self._locked():
            items = self.items
            for existing in items:
                if existing.get("key") == key:
                    return existing
            item = {**notification, "key": key, "id": uuid.uuid4().hex, "received_at": timezone.now().isoformat()}
            self.cache.set(self.key, ([item] + items)[: self.size], timeout=None)
        if self.permission == "granted" and self._notifier is not None:
            self._notifier(self.TITLE, notification.get("message", ""))
        return item

    def clear(self) -> None:
        self.cache.delete(self.key)
