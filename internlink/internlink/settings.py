"""
Django settings for the internlink project.
"""
from pathlib import Path
import os
from django.core.exceptions import ImproperlyConfigured

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "django-insecure-k2v!p9u#internlink-dev-only-0c7e1d5a9f3b")
DEBUG = os.getenv("DJANGO_DEBUG", "1") == "1"

_default_allowed_hosts = ["127.0.0.1", "localhost", "testserver"]
ALLOWED_HOSTS = (
    os.getenv("DJANGO_ALLOWED_HOSTS", "").split(",")
    if os.getenv("DJANGO_ALLOWED_HOSTS")
    else _default_allowed_hosts
)

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "backend",
    "accounts",
    "internships",
    "messaging",
    "backoffice",
    "live",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "accounts.middleware.AuthContextMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "internlink.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
                "accounts.context_processors.current_user_nav",
                "messaging.context_processors.notification_bell",
                "messaging.context_processors.chat_widget",
            ],
        },
    }
]

WSGI_APPLICATION = "internlink.wsgi.application"

# -----------------------------
# Database
# -----------------------------
# SQLite backs the local (mock mode) store; PostgreSQL mirrors the hosted schema.
DB_ENGINE = os.getenv("DB_ENGINE", "sqlite").strip()
if DB_ENGINE in {"sqlite", "sqlite3", "django.db.backends.sqlite3"}:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": os.getenv("DB_NAME", str(BASE_DIR / "db.sqlite3")),
        }
    }
elif DB_ENGINE in {"postgresql", "django.db.backends.postgresql"}:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.getenv("DB_NAME", "internlink_db"),
            "USER": os.getenv("DB_USER", "internlink"),
            "PASSWORD": os.getenv("DB_PASSWORD", ""),
            "HOST": os.getenv("DB_HOST", "127.0.0.1"),
            "PORT": os.getenv("DB_PORT", "5432"),
        }
    }
else:
    raise ImproperlyConfigured("Unsupported DB_ENGINE. Use sqlite or postgresql.")

# -----------------------------
# Managed backend (Supabase)
# -----------------------------
# Missing or placeholder values switch the whole app to the local store + mock auth.
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")
SUPABASE_SIGNUP_TRIGGER_DELAY = float(os.getenv("SUPABASE_SIGNUP_TRIGGER_DELAY", "1.0"))
PASSWORD_RESET_REDIRECT_URL = os.getenv("PASSWORD_RESET_REDIRECT_URL", "http://localhost:8000/password-reset")
SSE_HEARTBEAT_SECONDS = int(os.getenv("SSE_HEARTBEAT_SECONDS", "15"))
NOTIFICATION_FEED_SIZE = 10

# -----------------------------
# Cache
# -----------------------------
# "mock_auth" holds the mock identity directory and must survive restarts.
MOCK_AUTH_CACHE_DIR = os.getenv("MOCK_AUTH_CACHE_DIR", str(BASE_DIR / "var" / "mock_auth"))
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "internlink-default",
    },
    "mock_auth": {
        "BACKEND": "django.core.cache.backends.filebased.FileBasedCache",
        "LOCATION": MOCK_AUTH_CACHE_DIR,
        "TIMEOUT": None,
    },
}

# -----------------------------
# Session management
# -----------------------------
SESSION_COOKIE_AGE = int(os.getenv("SESSION_COOKIE_AGE", "86400"))
SESSION_SAVE_EVERY_REQUEST = False
SESSION_EXPIRE_AT_BROWSER_CLOSE = os.getenv("SESSION_EXPIRE_AT_BROWSER_CLOSE", "0") == "1"

# -----------------------------
# Password validation (Django admin site accounts only)
# -----------------------------
AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = os.getenv("DJANGO_TIME_ZONE", "UTC")
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATICFILES_DIRS = [BASE_DIR / "static"]

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# -----------------------------
# Logging
# -----------------------------
LOG_DIR = Path(os.getenv("DJANGO_LOG_DIR", str(BASE_DIR / "logs")))
LOG_DIR.mkdir(parents=True, exist_ok=True)
LOG_LEVEL = os.getenv("DJANGO_LOG_LEVEL", "INFO")
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {"format": "[{levelname}] {asctime} {name}: {message}", "style": "{"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "standard"},
        "file": {
            "class": "logging.FileHandler",
            "filename": str(LOG_DIR / "app.log"),
            "formatter": "standard",
            "level": "INFO",
        },
    },
    "loggers": {
        "django": {"handlers": ["console", "file"], "level": "INFO", "propagate": False},
        **{
            app: {"handlers": ["console", "file"], "level": LOG_LEVEL, "propagate": False}
            for app in ("backend", "accounts", "internships", "messaging", "backoffice", "live")
        },
    },
    "root": {"handlers": ["console", "file"], "level": LOG_LEVEL},
}
