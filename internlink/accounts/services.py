"""
User, profile and authentication services.

Every function talks to the active provider through ``get_backend()`` and
raises one wrapped error kind: ``DatabaseError`` for rows, ``AuthError`` for
identity operations.
"""
import logging

from django.conf import settings

from backend.errors import AuthError, DatabaseError, translate_auth_errors, wrap_errors
from backend.gateway import Query, get_backend

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def first_row(rows, what: str):
    if not rows:
        raise LookupError(f"No {what} matched")
    return rows[0]


def one(value):
    """Embedded one-to-one relations can come back as an object or a one-item list."""
    if isinstance(value, list):
        return value[0] if value else None
    return value


# -----------------------------
# Users
# -----------------------------
def create_user(values: dict) -> dict:
    with wrap_errors(DatabaseError, "create user"):
        return get_backend().insert("users", values)


def get_user(user_id):
    with wrap_errors(DatabaseError, "get user"):
        return get_backend().fetch_one(Query("users").where(id=user_id))


def get_user_by_auth_id(auth_user_id):
    with wrap_errors(DatabaseError, "get user"):
        return get_backend().fetch_one(Query("users").where(auth_user_id=auth_user_id))


def update_user(user_id, updates: dict) -> dict:
    with wrap_errors(DatabaseError, "update user"):
        return first_row(get_backend().update(Query("users").where(id=user_id), updates), "user")


# -----------------------------
# Intern profiles
# -----------------------------
def create_intern_profile(values: dict) -> dict:
    with wrap_errors(DatabaseError, "create intern profile"):
        return get_backend().insert("intern_profiles", values)


def get_intern_profile(user_id):
    with wrap_errors(DatabaseError, "get intern profile"):
        return get_backend().fetch_one(Query("intern_profiles").where(user_id=user_id))


def update_intern_profile(user_id, updates: dict) -> dict:
    with wrap_errors(DatabaseError, "update intern profile"):
        rows = get_backend().update(Query("intern_profiles").where(user_id=user_id), updates)
        return first_row(rows, "intern profile")


def get_all_intern_profiles() -> list:
    query = Query("intern_profiles").embed("users", "name", "email", "profile_picture").order_by("-created_at")
    with wrap_errors(DatabaseError, "get intern profiles"):
        return get_backend().fetch(query)


# -----------------------------
# Employer profiles
# -----------------------------
def create_employer_profile(values: dict) -> dict:
    with wrap_errors(DatabaseError, "create employer profile"):
        return get_backend().insert("employer_profiles", values)


def get_employer_profile(user_id):
    with wrap_errors(DatabaseError, "get employer profile"):
        return get_backend().fetch_one(Query("employer_profiles").where(user_id=user_id))


def update_employer_profile(user_id, updates: dict) -> dict:
    with wrap_errors(DatabaseError, "update employer profile"):
        rows = get_backend().update(Query("employer_profiles").where(user_id=user_id), updates)
        return first_row(rows, "employer profile")


# -----------------------------
# Authentication
# -----------------------------
def validate_sign_up(email, password, name, user_type, company_name=None) -> None:
    if not email or not password or not name:
        raise AuthError("Email, password, and name are required", code="missing_fields")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise AuthError(AuthError.FRIENDLY_MESSAGES["password_too_short"], code="password_too_short")
    if user_type == "employer" and not company_name:
        raise AuthError("Company name is required for employers", code="missing_fields")


def get_user_profile(auth_user_id):
    """Base user row plus its role extension, or ``None`` when no row exists yet."""
    query = (
        Query("users")
        .where(auth_user_id=auth_user_id)
        .embed("intern_profiles")
        .embed("employer_profiles")
        .embed("admin_users")
    )
    with wrap_errors(AuthError, "load user profile"):
        row = get_backend().fetch_one(query)
    if row is None:
        return None
    for key in ("intern_profiles", "employer_profiles", "admin_users"):
        row[key] = one(row.get(key))
    return row


def sign_up(provider, *, email, password, name, user_type="intern", **extra):
    validate_sign_up(email, password, name, user_type, extra.get("company_name"))
    metadata = {"name": name, "user_type": user_type, **{k: v for k, v in extra.items() if v}}
    with translate_auth_errors("sign up"):
        identity = provider.sign_up(email, password, metadata)
    logger.info("User signed up: email=%s user_type=%s", email, user_type)
    return get_user_profile(identity.id) if identity else None


def sign_in(provider, email, password):
    if not email or not password:
        raise AuthError("Email and password are required", code="missing_fields")
    with translate_auth_errors("sign in"):
        identity = provider.sign_in(email, password)
    profile = get_user_profile(identity.id)
    if profile is None:
        raise AuthError("User profile not found. Please contact support.", code="profile_missing")
    if profile.get("status") == "banned":
        provider.sign_out()
        raise AuthError("This account has been suspended.", code="user_banned")
    logger.info("User signed in: email=%s", email)
    return profile


def sign_out(provider) -> None:
    with translate_auth_errors("sign out"):
        provider.sign_out()


def get_current_identity(provider):
    try:
        return provider.current()
    except Exception:
        logger.exception("Could not read current identity")
        return None


def request_password_reset(provider, email) -> None:
    if not email:
        raise AuthError("Email is required", code="missing_fields")
    with translate_auth_errors("request password reset"):
        provider.reset_password(email, settings.PASSWORD_RESET_REDIRECT_URL)
    logger.info("Password reset requested: email=%s", email)


def update_password(provider, new_password) -> None:
    if not new_password or len(new_password) < MIN_PASSWORD_LENGTH:
        raise AuthError(AuthError.FRIENDLY_MESSAGES["password_too_short"], code="password_too_short")
    with translate_auth_errors("update password"):
        provider.update_password(new_password)


def resend_confirmation(provider, email) -> None:
    if not email:
        raise AuthError("Email is required", code="missing_fields")
    with translate_auth_errors("resend confirmation"):
        provider.resend_confirmation(email)


def validate_session(provider) -> bool:
    return get_current_identity(provider) is not None
