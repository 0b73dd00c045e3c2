import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from django.conf import settings
from supabase import create_client

logger = logging.getLogger(__name__)

PLACEHOLDER_URL = "your_supabase_project_url"
PLACEHOLDER_KEY = "your_supabase_anon_key"


@dataclass(frozen=True)
class BackendBinding:
    client: Any
    using_fallback: bool
    url: str = ""
    key: str = ""


def is_configured(url, key) -> bool:
    if not url or not key:
        return False
    return url != PLACEHOLDER_URL and key != PLACEHOLDER_KEY


def resolve_binding(url, key) -> BackendBinding:
    if not is_configured(url, key):
        logger.warning("Supabase not configured, using mock authentication")
        return BackendBinding(client=None, using_fallback=True)
    logger.info("Supabase client bound: url=%s", url)
    return BackendBinding(client=create_client(url, key), using_fallback=False, url=url, key=key)


@lru_cache(maxsize=1)
def get_binding() -> BackendBinding:
    return resolve_binding(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)


def is_using_mock_auth() -> bool:
    return get_binding().using_fallback
