from django.core.cache import caches
from django.test import SimpleTestCase, override_settings
from django.urls import reverse

from backend.errors import DatabaseError
from backend.feed import DELETE, INSERT, UPDATE, ChangeEvent
from backend.testing import LOCMEM_CACHES, LocalBackendTestCase
from internships import services as internship_services

from . import demo_data
from .hooks import LiveCollection, NotificationFeed, live_job_listings, reconcile


def insert(row):
    return ChangeEvent(INSERT, "things", new=row)


def update(row, old=None):
    return ChangeEvent(UPDATE, "things", new=row, old=old)


def delete(row):
    return ChangeEvent(DELETE, "things", old=row)


class ReconcileTests(SimpleTestCase):
    def test_insert_prepends_and_is_idempotent(self):
        items = [{"id": 1}]
        once = reconcile(items, insert({"id": 2}))
        twice = reconcile(once, insert({"id": 2}))
        self.assertEqual(once, [{"id": 2}, {"id": 1}])
        self.assertEqual(twice, once)

    def test_update_replaces_row_by_id(self):
        items = [{"id": 1, "status": "applied", "title": "A"}, {"id": 2}]
        result = reconcile(items, update({"id": 1, "status": "accepted"}))
        self.assertEqual(result[0], {"id": 1, "status": "accepted"})
        self.assertEqual(len(result), 2)

    def test_update_of_unknown_row_prepends(self):
        self.assertEqual(reconcile([{"id": 1}], update({"id": 9})), [{"id": 9}, {"id": 1}])

    def test_delete_removes_and_tolerates_missing(self):
        items = [{"id": 1}, {"id": 2}]
        self.assertEqual(reconcile(items, delete({"id": 1})), [{"id": 2}])
        self.assertEqual(reconcile(items, delete({"id": 7})), items)

    def test_rows_without_id_are_ignored(self):
        items = [{"id": 1}]
        self.assertEqual(reconcile(items, insert({"title": "no id"})), items)


class FakeSource:
    """Captures the change callback and counts cancellations."""

    def __init__(self):
        self.callback = None
        self.cancelled = 0

    def subscribe(self, callback):
        self.callback = callback

        def cancel():
            self.cancelled += 1

        return cancel


class LiveCollectionTests(SimpleTestCase):
    def test_changes_during_snapshot_are_replayed(self):
        source = FakeSource()

        def fetch():
            source.callback(insert({"id": 3}))
            source.callback(delete({"id": 1}))
            return [{"id": 2}, {"id": 1}]

        collection = LiveCollection(fetch, source.subscribe).open()
        self.assertFalse(collection.loading)
        self.assertEqual([item["id"] for item in collection], [3, 2])

    def test_listeners_see_changes_after_snapshot(self):
        source = FakeSource()
        collection = LiveCollection(lambda: [], source.subscribe).open()
        seen = []
        collection.listen(lambda change, items: seen.append([item["id"] for item in items]))
        source.callback(insert({"id": 5}))
        self.assertEqual(seen, [[5]])

    def test_close_cancels_and_ignores_late_events(self):
        source = FakeSource()
        collection = LiveCollection(lambda: [{"id": 1}], source.subscribe).open()
        collection.close()
        collection.close()
        source.callback(insert({"id": 2}))
        self.assertEqual(source.cancelled, 1)
        self.assertEqual(len(collection), 1)

    def test_failed_snapshot_falls_back_to_demo_data(self):
        source = FakeSource()

        def fetch():
            raise DatabaseError("Failed to load rows. Please try again.")

        demo = [{"id": "demo-1"}]
        collection = LiveCollection(fetch, source.subscribe, demo=demo).open()
        self.assertTrue(collection.degraded)
        self.assertEqual(collection.items, demo)
        collection.items[0]["id"] = "changed"
        self.assertEqual(demo[0]["id"], "demo-1")

    def test_watch_hands_over_snapshot_then_changes(self):
        source = FakeSource()
        collection = LiveCollection(lambda: [{"id": 1}], source.subscribe).open()
        frames = []
        unsubscribe = collection.watch(
            lambda items: frames.append(("snapshot", [item["id"] for item in items])),
            lambda change, items: frames.append((change.type, change.row["id"])),
        )
        source.callback(insert({"id": 2}))
        unsubscribe()
        source.callback(insert({"id": 3}))
        self.assertEqual(frames, [("snapshot", [1]), (INSERT, 2)])

    def test_projection_can_drop_changes(self):
        source = FakeSource()
        collection = LiveCollection(lambda: [], source.subscribe, project=lambda change: None).open()
        source.callback(insert({"id": 1}))
        self.assertEqual(collection.items, [])


@override_settings(CACHES=LOCMEM_CACHES)
class NotificationFeedTests(SimpleTestCase):
    def setUp(self):
        caches["default"].clear()

    def test_keeps_only_the_newest_ten(self):
        feed = NotificationFeed("u1")
        for i in range(11):
            feed.receive({"type": "status_change", "message": f"n{i}"})
        messages = [item["message"] for item in feed.items]
        self.assertEqual(len(messages), 10)
        self.assertEqual(messages[0], "n10")
        self.assertNotIn("n0", messages)

    def test_desktop_notice_only_when_granted(self):
        shown = []
        denied = NotificationFeed("u1", permission=lambda: "denied", notifier=lambda *args: shown.append(args))
        denied.mount(subscribe=False).receive({"message": "hidden"})
        granted = NotificationFeed("u2", permission=lambda: "granted", notifier=lambda *args: shown.append(args))
        granted.mount(subscribe=False).receive({"message": "shown"})
        self.assertEqual(shown, [("InternLink", "shown")])

    def test_permission_is_requested_once(self):
        calls = []
        feed = NotificationFeed("u1", permission=lambda: calls.append(1) or "granted")
        feed.mount(subscribe=False)
        feed.mount(subscribe=False)
        self.assertEqual(calls, [1])
        self.assertEqual(feed.permission, "granted")

    def test_repeated_key_is_stored_once(self):
        shown = []
        feed = NotificationFeed("u1", permission=lambda: "granted", notifier=lambda *args: shown.append(args))
        feed.mount(subscribe=False)
        first = feed.receive({"key": "new_application:a1", "message": "New application received for Data Intern"})
        again = feed.receive({"key": "new_application:a1", "message": "New application received for Data Intern"})
        self.assertEqual(again["id"], first["id"])
        self.assertEqual(len(feed.items), 1)
        self.assertEqual(len(shown), 1)

    def test_clear(self):
        feed = NotificationFeed("u1")
        feed.receive({"message": "x"})
        feed.clear()
        self.assertEqual(feed.items, [])


class LiveListingTests(LocalBackendTestCase):
    def setUp(self):
        super().setUp()
        self.org = self.sign_up("org@example.com", "Org", "employer", company_name="TechCorp")

    def listing(self, **values):
        return internship_services.create_job_listing(
            {"employer_id": self.org["id"], "title": "Data Intern", "description": "SQL", **values}
        )

    def test_tracks_active_listings_only(self):
        collection = live_job_listings()
        try:
            active = self.listing(status="active")
            self.listing(status="draft")
            self.assertEqual([row["id"] for row in collection], [active["id"]])

            internship_services.update_job_listing(active["id"], {"status": "closed"})
            self.assertEqual(collection.items, [])
        finally:
            collection.close()
        self.assertEqual(self.backend.feed.subscriber_count("job_listings"), 0)

    def test_empty_store_is_not_degraded(self):
        collection = live_job_listings()
        collection.close()
        self.assertFalse(collection.degraded)
        self.assertNotEqual(collection.items, demo_data.JOB_LISTINGS)


class StreamViewTests(LocalBackendTestCase):
    def setUp(self):
        super().setUp()
        self.sign_up("ada@example.com", "Ada")
        self.login("ada@example.com")

    def test_stream_requires_sign_in(self):
        self.client.post(reverse("signout"))
        self.assertRedirects(self.client.get(reverse("stream_internships")), reverse("home"))

    def test_internships_stream_sends_snapshot_then_closes_subscription(self):
        resp = self.client.get(reverse("stream_internships"))
        self.assertEqual(resp["Content-Type"], "text/event-stream")
        self.assertEqual(resp["Cache-Control"], "no-cache")

        frames = iter(resp.streaming_content)
        self.assertEqual(next(frames), b"retry: 3000\n\n")
        self.assertTrue(next(frames).startswith(b"event: snapshot\ndata: "))
        self.assertEqual(self.backend.feed.subscriber_count("job_listings"), 1)

        resp.close()
        self.assertEqual(self.backend.feed.subscriber_count("job_listings"), 0)


class NotificationStreamTests(LocalBackendTestCase):
    def setUp(self):
        super().setUp()
        self.org = self.sign_up("org@example.com", "Org", "employer", company_name="TechCorp")
        self.intern = self.sign_up("ada@example.com", "Ada")
        self.listing = internship_services.create_job_listing(
            {"employer_id": self.org["id"], "title": "Data Intern", "description": "SQL", "status": "active"}
        )
        self.login("org@example.com")

    def open_stream(self):
        resp = self.client.get(reverse("stream_notifications"))
        self.assertEqual(next(iter(resp.streaming_content)), b"retry: 3000\n\n")
        return resp

    def test_two_open_streams_store_one_notification(self):
        first = self.open_stream()
        second = self.open_stream()
        try:
            internship_services.create_application({"intern_id": self.intern["id"], "job_id": self.listing["id"]})
        finally:
            first.close()
            second.close()
        self.assertEqual(self.backend.feed.subscriber_count("applications"), 0)

        items = NotificationFeed(self.org["id"]).items
        self.assertEqual([item["message"] for item in items], ["New application received for Data Intern"])
