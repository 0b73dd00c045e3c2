"""
Authentication state for one browser session.

``AuthContext`` is the only writer of ``user``/``loading``. It is initialized
from the active identity provider, listens to that provider's auth-state
transitions for its lifetime, and is torn down when the request finishes.
"""
import logging
from dataclasses import dataclass, field

from backend.errors import AuthError, ServiceError

from . import services

logger = logging.getLogger(__name__)

ROLE_FOR_USER_TYPE = {"intern": "intern", "employer": "organization", "admin": "admin"}


@dataclass
class CurrentUser:
    id: str
    auth_id: str
    email: str
    name: str
    role: str
    status: str = "active"
    profile: dict = field(default_factory=dict)
    extension: dict | None = None

    @property
    def is_intern(self) -> bool:
        return self.role == "intern"

    @property
    def is_organization(self) -> bool:
        return self.role == "organization"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def display_name(self) -> str:
        if self.is_organization and self.extension:
            return self.extension.get("company_name") or self.name
        return self.name

    @classmethod
    def from_profile(cls, identity, row):
        role = ROLE_FOR_USER_TYPE.get(row.get("user_type"), "intern")
        extension = row.get("employer_profiles") if role == "organization" else row.get("intern_profiles")
        return cls(
            id=row["id"],
            auth_id=identity.id,
            email=row.get("email") or identity.email,
            name=row.get("name") or identity.email,
            role=role,
            status=row.get("status") or "active",
            profile=row,
            extension=extension,
        )

    @classmethod
    def from_identity(cls, identity):
        """Fallback when the provider knows the identity but no users row exists."""
        meta = identity.metadata or {}
        return cls(
            id=identity.id,
            auth_id=identity.id,
            email=identity.email,
            name=meta.get("name") or identity.email.split("@")[0],
            role=ROLE_FOR_USER_TYPE.get(meta.get("user_type"), "intern"),
        )


class AuthContext:
    def __init__(self, provider):
        self.provider = provider
        self.user = None
        self.loading = True
        self._observers = []
        self._unsubscribe = None

    def __repr__(self):
        return f"<AuthContext user={self.user.email if self.user else None} loading={self.loading}>"

    # -----------------------------
    # Lifecycle
    # -----------------------------
    def initialize(self):
        try:
            identity = services.get_current_identity(self.provider)
            try:
                self._publish(self._load(identity) if identity else None)
            except ServiceError:
                logger.exception("Could not load profile on initialize")
                self._publish(None)
            if self._unsubscribe is None:
                self._unsubscribe = self.provider.on_auth_state_change(self._on_auth_state_change)
        finally:
            self.loading = False
        return self

    def teardown(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._observers.clear()
        self.provider.close()

    def subscribe(self, observer):
        self._observers.append(observer)

        def unsubscribe():
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _publish(self, user) -> None:
        self.user = user
        for observer in list(self._observers):
            observer(user)

    def _load(self, identity):
        row = services.get_user_profile(identity.id)
        return CurrentUser.from_profile(identity, row) if row else CurrentUser.from_identity(identity)

    def _on_auth_state_change(self, event, identity):
        if identity is None:
            self._publish(None)
            return
        if event == "INITIAL_SESSION" and self.user and self.user.auth_id == identity.id:
            return
        try:
            self._publish(self._load(identity))
        except ServiceError:
            logger.exception("Profile refresh after auth change failed: event=%s", event)

    # -----------------------------
    # Operations
    # -----------------------------
    def sign_in(self, email, password):
        services.sign_in(self.provider, email, password)
        return self.refresh()

    def sign_up(self, email, password, name, role="intern", **extra):
        user_type = "employer" if role == "organization" else role
        services.sign_up(self.provider, email=email, password=password, name=name, user_type=user_type, **extra)
        return self.refresh()

    def sign_out(self) -> None:
        self.loading = True
        try:
            services.sign_out(self.provider)
            self._publish(None)
        finally:
            self.loading = False

    def update_profile(self, base=None, extension=None):
        """Patch the users row and/or the role extension, then republish the fresh profile."""
        if self.user is None:
            raise AuthError("No user logged in", code="not_authenticated")
        if base:
            services.update_user(self.user.id, base)
        if extension:
            if self.user.is_organization:
                services.update_employer_profile(self.user.id, extension)
            elif self.user.is_intern:
                services.update_intern_profile(self.user.id, extension)
        return self.refresh()

    def request_password_reset(self, email) -> None:
        services.request_password_reset(self.provider, email)

    def refresh(self):
        identity = services.get_current_identity(self.provider)
        self._publish(self._load(identity) if identity else None)
        return self.user
