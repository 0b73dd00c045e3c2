from types import SimpleNamespace
from unittest import mock

from django.contrib.sessions.backends.cache import SessionStore
from django.test import SimpleTestCase, override_settings

from .client import PLACEHOLDER_KEY, PLACEHOLDER_URL, BackendBinding, is_configured, resolve_binding
from .errors import AuthError, DatabaseError, MockAuthError, ServiceError, wrap_errors
from .feed import DELETE, INSERT, UPDATE, ChangeEvent, ChangeFeed, EventStream
from .gateway import Query, get_backend, reset_backend
from .local import LocalBackend
from .mock_auth import MockAuthStore, generate_user_id
from .supabase_backend import SupabaseBackend, or_expression, select_clause
from .testing import LOCMEM_CACHES, LocalBackendTestCase


class BindingTests(SimpleTestCase):
    def test_empty_url_selects_mock_mode_for_any_key(self):
        for key in ("", "anon", PLACEHOLDER_KEY, "eyJhbGciOi"):
            binding = resolve_binding("", key)
            self.assertTrue(binding.using_fallback)
            self.assertIsNone(binding.client)

    def test_placeholders_count_as_unconfigured(self):
        self.assertFalse(is_configured(PLACEHOLDER_URL, "real-key"))
        self.assertFalse(is_configured("https://x.supabase.co", PLACEHOLDER_KEY))
        self.assertFalse(is_configured("", "key"))

    def test_values_are_compared_as_given(self):
        self.assertTrue(is_configured(" https://x.supabase.co", "key"))
        self.assertTrue(is_configured(PLACEHOLDER_URL + " ", "key"))

    def test_supabase_package_imports_its_realtime_dependency(self):
        import realtime
        import supabase

        self.assertTrue(hasattr(realtime, "AuthorizationError"))
        self.assertTrue(callable(supabase.create_client))

    def test_configured_pair_builds_a_client(self):
        with mock.patch("backend.client.create_client", return_value=object()) as create:
            binding = resolve_binding("https://x.supabase.co", "key")
        create.assert_called_once_with("https://x.supabase.co", "key")
        self.assertFalse(binding.using_fallback)

    @override_settings(SUPABASE_URL="", SUPABASE_ANON_KEY="whatever", CACHES=LOCMEM_CACHES)
    def test_get_backend_is_local_without_url(self):
        reset_backend()
        try:
            self.assertIsInstance(get_backend(), LocalBackend)
        finally:
            reset_backend()


class ErrorWrappingTests(SimpleTestCase):
    def test_wrap_errors_reraises_as_kind_with_cause(self):
        with self.assertLogs("backend.errors", level="ERROR"):
            with self.assertRaises(DatabaseError) as ctx:
                with wrap_errors(DatabaseError, "load rows"):
                    raise ValueError("boom")
        self.assertEqual(str(ctx.exception), "Failed to load rows. Please try again.")
        self.assertIsInstance(ctx.exception.original_error, ValueError)

    def test_service_errors_pass_through_untouched(self):
        original = AuthError("nope", code="x")
        with self.assertRaises(AuthError) as ctx:
            with wrap_errors(DatabaseError, "anything"):
                raise original
        self.assertIs(ctx.exception, original)

    def test_provider_messages_become_friendly(self):
        err = AuthError.from_provider(Exception("Invalid login credentials"))
        self.assertEqual(err.code, "invalid_credentials")
        self.assertIn("check your credentials", err.message)
        self.assertIsInstance(MockAuthError("x"), ServiceError)


class FeedTests(SimpleTestCase):
    def test_subscribers_get_matching_events_only(self):
        feed = ChangeFeed()
        seen = []
        feed.subscribe("applications", seen.append, event="UPDATE", filters={"intern_id": "a"})
        feed.publish(ChangeEvent(INSERT, "applications", new={"id": 1, "intern_id": "a"}))
        feed.publish(ChangeEvent(UPDATE, "applications", new={"id": 1, "intern_id": "b"}))
        feed.publish(ChangeEvent(UPDATE, "applications", new={"id": 1, "intern_id": "a"}))
        self.assertEqual(len(seen), 1)

    def test_failing_subscriber_does_not_block_others(self):
        feed = ChangeFeed()
        seen = []

        def broken(change):
            raise RuntimeError("listener bug")

        feed.subscribe("messages", broken)
        feed.subscribe("messages", seen.append)
        with self.assertLogs("backend.feed", level="ERROR"):
            feed.publish(ChangeEvent(DELETE, "messages", old={"id": 3}))
        self.assertEqual(seen[0].row, {"id": 3})

    def test_unsubscribe_stops_delivery(self):
        feed = ChangeFeed()
        seen = []
        cancel = feed.subscribe("job_listings", seen.append)
        cancel()
        feed.publish(ChangeEvent(INSERT, "job_listings", new={"id": 1}))
        self.assertEqual(seen, [])
        self.assertEqual(feed.subscriber_count("job_listings"), 0)

    def test_event_stream_renders_frames_and_cancels_on_close(self):
        cancelled = []
        stream = EventStream(heartbeat=0.01).attach(lambda: cancelled.append(True))
        stream.push(("snapshot", {"items": []}))
        frames = stream.sse("message")
        self.assertEqual(next(frames), "retry: 3000\n\n")
        self.assertEqual(next(frames), 'event: snapshot\ndata: {"items": []}\n\n')
        self.assertEqual(next(frames), ": keep-alive\n\n")
        frames.close()
        self.assertTrue(stream.closed)
        self.assertEqual(cancelled, [True])


class SelectClauseTests(SimpleTestCase):
    def test_embeds_render_alias_hint_and_inner(self):
        query = (
            Query("applications")
            .embed("job_listings", "id", "title", inner=True)
            .embed("users", "id", "name", alias="reviewer", hint="reviews_reviewer_id_fkey")
        )
        self.assertEqual(
            select_clause(query.columns, query.embeds),
            "*,job_listings!inner(id,title),reviewer:users!reviews_reviewer_id_fkey(id,name)",
        )

    def test_or_groups(self):
        query = Query("messages").any_of({"sender_id": "a", "receiver_id": "b"}, {"sender_id": "b"})
        self.assertEqual(or_expression(query.groups[0]), "and(sender_id.eq.a,receiver_id.eq.b),sender_id.eq.b")


@override_settings(CACHES=LOCMEM_CACHES)
class MockAuthStoreTests(SimpleTestCase):
    def setUp(self):
        from django.core.cache import caches

        caches["mock_auth"].clear()
        self.store = MockAuthStore(scope="s1")

    def test_generated_ids_have_expected_shape(self):
        parts = generate_user_id().split("_")
        self.assertEqual(parts[0], "user")
        self.assertTrue(parts[1].isdigit())
        self.assertEqual(len(parts[2]), 9)

    def test_sign_up_grows_directory_and_sets_current(self):
        record = self.store.sign_up("a@example.com", "pw", "Ada", role="intern")
        self.assertEqual(len(self.store.users()), 1)
        self.assertEqual(self.store.current_user(), record)

    def test_duplicate_email_is_refused(self):
        self.store.sign_up("a@example.com", "pw", "Ada")
        with self.assertRaisesMessage(MockAuthError, "User already exists with this email"):
            self.store.sign_up("a@example.com", "pw", "Ada again")

    def test_unknown_email_sign_in_leaves_session_unchanged(self):
        record = self.store.sign_up("a@example.com", "pw", "Ada")
        with self.assertRaises(MockAuthError) as ctx:
            self.store.sign_in("nobody@example.com", "pw")
        self.assertEqual(ctx.exception.code, "invalid_credentials")
        self.assertEqual(self.store.current_user(), record)

    def test_current_pointer_is_scoped_per_session(self):
        self.store.sign_up("a@example.com", "pw", "Ada")
        other = MockAuthStore(scope="s2")
        self.assertIsNone(other.current_user())
        self.assertEqual(len(other.users()), 1)

    def test_session_pointer_waits_for_sign_in_and_cycles_key(self):
        session = SessionStore()
        store = MockAuthStore(session=session)
        self.assertIsNone(store.current_user())
        self.assertIsNone(session.session_key)

        store.sign_up("a@example.com", "pw", "Ada")
        first_key = session.session_key
        self.assertIsNotNone(first_key)

        store.sign_in("a@example.com", "pw")
        self.assertNotEqual(session.session_key, first_key)
        self.assertEqual(store.current_user()["email"], "a@example.com")
        self.assertIsNone(MockAuthStore(scope=first_key).current_user())

    def test_observers_fire_immediately_and_on_change(self):
        seen = []
        cancel = self.store.observe(seen.append)
        self.store.sign_up("a@example.com", "pw", "Ada")
        cancel()
        self.store.sign_out()
        self.assertEqual(seen[0], None)
        self.assertEqual(seen[1]["email"], "a@example.com")
        self.assertEqual(len(seen), 2)


class FakeTableClient:
    """Records which client each table call went through."""

    def __init__(self, name, used):
        self.name = name
        self.used = used

    def table(self, table):
        self.used.append(self.name)
        return self

    def select(self, *columns, **kwargs):
        return self

    def limit(self, n):
        return self

    def execute(self):
        return SimpleNamespace(data=[], count=3)


class SupabaseCountTests(SimpleTestCase):
    def test_count_many_uses_the_request_client(self):
        used = []
        backend = SupabaseBackend(
            BackendBinding(client=FakeTableClient("anon", used), using_fallback=False, url="https://x.supabase.co", key="k")
        )
        backend._local.client = FakeTableClient("admin-session", used)

        counts = backend.count_many([Query("users"), Query("job_listings")])
        self.assertEqual(counts, [3, 3])
        self.assertEqual(set(used), {"admin-session"})


class LocalBackendTests(LocalBackendTestCase):
    def test_sign_up_provisions_users_row_and_extension(self):
        user = self.sign_up("org@example.com", "Org", "employer", company_name="Acme")
        profile = self.backend.fetch_one(Query("users").embed("employer_profiles").where(id=user["id"]))
        self.assertEqual(profile["employer_profiles"]["company_name"], "Acme")

    def test_fetch_one_returns_none_when_nothing_matches(self):
        self.assertIsNone(self.backend.fetch_one(Query("users").where(email="missing@example.com")))

    def test_update_publishes_old_and_new(self):
        user = self.sign_up("i@example.com", "Ida")
        seen = []
        self.backend.subscribe("users", seen.append, event="UPDATE")
        self.backend.update(Query("users").where(id=user["id"]), {"name": "Ida B"})
        self.assertEqual(seen[0].old["name"], "Ida")
        self.assertEqual(seen[0].new["name"], "Ida B")

    def test_search_and_exclude(self):
        self.sign_up("ada@example.com", "Ada Lovelace")
        self.sign_up("root@example.com", "Root", "admin")
        rows = self.backend.fetch(Query("users").exclude(user_type="admin").search("love", "name", "email"))
        self.assertEqual([r["email"] for r in rows], ["ada@example.com"])

    def test_unknown_procedure_is_an_error(self):
        with self.assertRaises(LookupError):
            self.backend.rpc("no_such_function", {})
