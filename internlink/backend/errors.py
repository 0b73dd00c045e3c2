import logging
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base for the single wrapped error kind each service layer raises."""

    def __init__(self, message: str, original_error: Exception | None = None, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error
        self.code = code

    def __str__(self):
        return self.message


class DatabaseError(ServiceError):
    pass


class AdminError(ServiceError):
    pass


class AuthError(ServiceError):
    # provider error code -> message shown to the user
    FRIENDLY_MESSAGES = {
        "invalid_credentials": "Invalid email or password. Please check your credentials and try again.",
        "email_not_confirmed": "Please check your email and click the confirmation link before signing in.",
        "signup_disabled": "New registrations are currently disabled. Please contact support.",
        "email_address_invalid": "Please enter a valid email address.",
        "password_too_short": "Password must be at least 6 characters long.",
        "user_already_registered": "An account with this email already exists. Please sign in instead.",
        "weak_password": "Password is too weak. Please choose a stronger password.",
        "rate_limit_exceeded": "Too many attempts. Please wait a moment before trying again.",
    }

    @classmethod
    def from_provider(cls, exc: Exception, default: str = "An unexpected error occurred. Please try again."):
        if isinstance(exc, AuthError):
            return exc
        code = getattr(exc, "code", None)
        text = str(exc) or ""
        if code not in cls.FRIENDLY_MESSAGES:
            code = cls._code_from_text(text)
        message = cls.FRIENDLY_MESSAGES.get(code) or text or default
        return cls(message, original_error=exc, code=code)

    @staticmethod
    def _code_from_text(text: str):
        lowered = text.lower()
        if "invalid login credentials" in lowered or "invalid email or password" in lowered:
            return "invalid_credentials"
        if "email not confirmed" in lowered:
            return "email_not_confirmed"
        if "already registered" in lowered or "already exists" in lowered:
            return "user_already_registered"
        if "rate limit" in lowered:
            return "rate_limit_exceeded"
        return None


class MockAuthError(AuthError):
    pass


@contextmanager
def wrap_errors(kind: type[ServiceError], operation: str):
    """Log any failure inside the block and re-raise it as ``kind``.

    Errors that already belong to a service layer pass through untouched so a
    call chain never double-wraps.
    """
    try:
        yield
    except ServiceError:
        raise
    except Exception as exc:
        logger.exception("%s: failed to %s", kind.__name__, operation)
        raise kind(f"Failed to {operation}. Please try again.", original_error=exc) from exc


@contextmanager
def translate_auth_errors(operation: str):
    """Re-raise identity provider failures as ``AuthError`` with a friendly message."""
    try:
        yield
    except ServiceError:
        raise
    except Exception as exc:
        logger.warning("Auth operation failed: operation=%s error=%s", operation, exc)
        raise AuthError.from_provider(exc) from exc
