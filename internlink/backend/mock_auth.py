"""
Stand-in identity provider used when no managed backend is configured.

Records live in the ``mock_auth`` cache (file based by default) under two keys:
the whole directory and the current-session pointer. Passwords are accepted
but never verified; this is a development convenience, not an auth system.
"""
import logging
import random
import string
import threading
import time

from django.core.cache import caches
from django.utils import timezone

from .errors import MockAuthError

logger = logging.getLogger(__name__)

USERS_KEY = "mock_users"
CURRENT_USER_KEY = "mock_current_user"
_ALPHABET = string.digits + string.ascii_lowercase


def generate_user_id() -> str:
    suffix = "".join(random.choice(_ALPHABET) for _ in range(9))
    return f"user_{int(time.time() * 1000)}_{suffix}"


class MockAuthStore:
    """Directory plus a current-user pointer.

    With a ``session`` the pointer is keyed by its session key, and an
    anonymous session without a key has no current user. Signing in or up
    cycles the key the way ``django.contrib.auth.login`` does.
    """

    def __init__(self, scope: str = "", cache_alias: str = "mock_auth", session=None):
        self.scope = scope
        self.session = session
        self.cache = caches[cache_alias]
        self._observers = []
        self._lock = threading.Lock()

    @property
    def current_key(self):
        if self.session is not None:
            key = self.session.session_key
            return f"{CURRENT_USER_KEY}:{key}" if key else None
        return f"{CURRENT_USER_KEY}:{self.scope}" if self.scope else CURRENT_USER_KEY

    # -----------------------------
    # Persistence
    # -----------------------------
    def users(self) -> list:
        return list(self.cache.get(USERS_KEY) or [])

    def current_user(self):
        key = self.current_key
        return self.cache.get(key) if key else None

    def _save(self, users, current):
        self.cache.set(USERS_KEY, users, timeout=None)
        key = self.current_key
        if current is None:
            if key:
                self.cache.delete(key)
        else:
            self.cache.set(key, current, timeout=None)

    def _start_session(self):
        if self.session is None:
            return
        old_key = self.current_key
        if old_key:
            self.cache.delete(old_key)
        self.session.cycle_key()

    def _notify(self, current):
        for observer in list(self._observers):
            observer(current)

    # -----------------------------
    # Operations
    # -----------------------------
    def sign_up(self, email: str, password: str, name: str, role: str = "intern") -> dict:
        with self._lock:
            users = self.users()
            if any(u["email"] == email for u in users):
                raise MockAuthError("User already exists with this email")
            record = {
                "id": generate_user_id(),
                "email": email,
                "name": name,
                "role": role,
                "created_at": timezone.now().isoformat(),
            }
            users.append(record)
            self._start_session()
            self._save(users, record)
        logger.info("Mock sign up: email=%s role=%s", email, role)
        self._notify(record)
        return record

    def sign_in(self, email: str, password: str) -> dict:
        with self._lock:
            users = self.users()
            record = next((u for u in users if u["email"] == email), None)
            if record is None:
                raise MockAuthError("Invalid email or password", code="invalid_credentials")
            self._start_session()
            self._save(users, record)
        logger.info("Mock sign in: email=%s", email)
        self._notify(record)
        return record

    def sign_out(self) -> None:
        with self._lock:
            self._save(self.users(), None)
        self._notify(None)

    def observe(self, callback):
        """Register ``callback``; it fires now with the current state and on every change."""
        self._observers.append(callback)
        callback(self.current_user())

        def unsubscribe():
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    def remove(self, emails) -> int:
        """Drop directory records by email; returns how many were removed."""
        emails = set(emails)
        with self._lock:
            users = self.users()
            kept = [u for u in users if u["email"] not in emails]
            current = self.current_user()
            if current and current["email"] in emails:
                current = None
            self._save(kept, current)
        return len(users) - len(kept)
