from django.core.cache import caches
from django.test import TestCase, override_settings

from .gateway import Query, get_backend, reset_backend

LOCMEM_CACHES = {
    "default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache", "LOCATION": "test-default"},
    "mock_auth": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache", "LOCATION": "test-mock-auth"},
}


@override_settings(SUPABASE_URL="", SUPABASE_ANON_KEY="", CACHES=LOCMEM_CACHES)
class LocalBackendTestCase(TestCase):
    """TestCase running against the local store with a fresh mock directory per test."""

    def setUp(self):
        super().setUp()
        reset_backend()
        caches["default"].clear()
        caches["mock_auth"].clear()
        self.backend = get_backend()

    def tearDown(self):
        reset_backend()
        super().tearDown()

    def sign_up(self, email, name="Test User", user_type="intern", **metadata):
        """Register through the mock provider without touching a client session."""
        identity = self.backend.identity().sign_up(email, "secret123", {"name": name, "user_type": user_type, **metadata})
        return self.backend.fetch_one(Query("users").where(auth_user_id=identity.id))

    def login(self, email):
        """Sign in through the browser flow so the test client carries the session."""
        return self.client.post("/signin", {"email": email, "password": "secret123"})
