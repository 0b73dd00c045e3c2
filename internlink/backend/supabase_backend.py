"""
Hosted provider: PostgREST reads/writes, GoTrue identities and Realtime change feeds.
"""
import asyncio
import logging
import threading
import time
import uuid
from concurrent.futures import ThreadPoolExecutor

from django.conf import settings
from postgrest.exceptions import APIError
from supabase import AuthError as ProviderAuthError
from supabase import ClientOptions, acreate_client, create_client

from .feed import ChangeEvent, event_type, matches
from .gateway import Backend, Identity, IdentityProvider

logger = logging.getLogger(__name__)

NO_ROWS = "PGRST116"
ACCESS_TOKEN_KEY = "supabase.access_token"
REFRESH_TOKEN_KEY = "supabase.refresh_token"

_OPERATORS = {"exact": "eq", "gt": "gt", "gte": "gte", "lt": "lt", "lte": "lte", "in": "in", "icontains": "ilike"}


def select_clause(columns, embeds) -> str:
    parts = list(columns)
    for embed in embeds:
        head = embed.name
        if embed.hint:
            head += f"!{embed.hint}"
        if embed.inner:
            head += "!inner"
        if embed.alias:
            head = f"{embed.alias}:{head}"
        parts.append(f"{head}({select_clause(embed.columns, embed.children)})")
    return ",".join(parts)


def _or_term(cond) -> str:
    if cond.value is None and cond.lookup == "exact":
        return f"{cond.column}.is.null"
    if cond.lookup == "icontains":
        return f"{cond.column}.ilike.%{cond.value}%"
    if cond.lookup == "in":
        return f"{cond.column}.in.({','.join(str(v) for v in cond.value)})"
    return f"{cond.column}.{_OPERATORS[cond.lookup]}.{cond.value}"


def or_expression(groups) -> str:
    terms = []
    for group in groups:
        if len(group) == 1:
            terms.append(_or_term(group[0]))
        else:
            terms.append(f"and({','.join(_or_term(c) for c in group)})")
    return ",".join(terms)


def apply_condition(builder, cond, negate=False):
    target = builder.not_ if negate and not (cond.lookup == "exact" and cond.value is not None) else builder
    column = cond.column
    if cond.value is None and cond.lookup == "exact":
        return target.is_(column, "null")
    if cond.lookup == "exact":
        return builder.neq(column, cond.value) if negate else builder.eq(column, cond.value)
    if cond.lookup == "icontains":
        return target.ilike(column, f"%{cond.value}%")
    if cond.lookup == "in":
        return target.in_(column, list(cond.value))
    return getattr(target, _OPERATORS[cond.lookup])(column, cond.value)


def apply_filters(builder, query):
    for cond in query.filters:
        builder = apply_condition(builder, cond)
    for cond in query.excludes:
        builder = apply_condition(builder, cond, negate=True)
    for groups in query.groups:
        builder = builder.or_(or_expression(groups))
    return builder


def normalize_payload(table: str, payload: dict) -> ChangeEvent:
    """Realtime payloads differ between client versions; reduce them to one shape."""
    data = payload.get("data", payload) if isinstance(payload, dict) else {}
    kind = data.get("eventType") or data.get("type") or ""
    new = data.get("new") or data.get("record") or None
    old = data.get("old") or data.get("old_record") or None
    return ChangeEvent(event_type(kind), data.get("table") or table, new=new, old=old)


class RealtimeBridge:
    """Runs the async realtime client on one daemon thread for the whole process."""

    def __init__(self, url: str, key: str):
        self.url = url
        self.key = key
        self._loop = None
        self._client = None
        self._lock = threading.Lock()

    def _run(self, coro, timeout=30):
        return asyncio.run_coroutine_threadsafe(coro, self._loop).result(timeout=timeout)

    def _ensure_started(self):
        with self._lock:
            if self._loop is not None:
                return
            self._loop = asyncio.new_event_loop()
            threading.Thread(target=self._loop.run_forever, name="supabase-realtime", daemon=True).start()
            self._client = self._run(acreate_client(self.url, self.key))
            logger.info("Realtime bridge started")

    async def _open(self, table, callback, event, filters):
        channel = self._client.channel(f"{table}_changes_{uuid.uuid4().hex[:8]}")
        server_filter = None
        if filters:
            col, value = next(iter(filters.items()))
            server_filter = f"{col}=eq.{value}"

        def handler(payload):
            change = normalize_payload(table, payload)
            if matches(change.row, filters):
                callback(change)

        channel.on_postgres_changes(event=event, schema="public", table=table, filter=server_filter, callback=handler)
        await channel.subscribe()
        return channel

    def subscribe(self, table, callback, *, event="*", filters=None):
        self._ensure_started()
        channel = self._run(self._open(table, callback, event, filters))

        def unsubscribe():
            try:
                self._run(self._client.remove_channel(channel))
            except Exception:
                logger.exception("Realtime unsubscribe failed: table=%s", table)

        return unsubscribe


def _count(client, query) -> int:
    builder = client.table(query.table).select(select_clause(query.columns, query.embeds), count="exact")
    response = apply_filters(builder, query).limit(1).execute()
    return response.count or 0


class SupabaseBackend(Backend):
    name = "supabase"

    def __init__(self, binding):
        self.binding = binding
        self._anon = binding.client
        self._local = threading.local()
        self.realtime = RealtimeBridge(binding.url, binding.key)

    @property
    def client(self):
        """The client bound to the current request's session, else the anonymous one."""
        return getattr(self._local, "client", None) or self._anon

    def _table(self, name):
        return self.client.table(name)

    def _select(self, query, **kwargs):
        builder = self._table(query.table).select(select_clause(query.columns, query.embeds), **kwargs)
        return apply_filters(builder, query)

    def fetch(self, query) -> list:
        builder = self._select(query)
        if query.ordering:
            column = query.ordering.lstrip("-")
            builder = builder.order(column, desc=query.ordering.startswith("-"))
        if query.bounds:
            builder = builder.range(*query.bounds)
        return builder.execute().data or []

    def fetch_one(self, query):
        try:
            return self._select(query).single().execute().data
        except APIError as exc:
            if exc.code == NO_ROWS:
                return None
            raise

    def count(self, query) -> int:
        return _count(self.client, query)

    def count_many(self, queries) -> list:
        """Counts run concurrently, all on the calling request's client."""
        queries = list(queries)
        client = self.client
        with ThreadPoolExecutor(max_workers=max(len(queries), 1)) as pool:
            return list(pool.map(lambda query: _count(client, query), queries))

    def insert(self, table, values) -> dict:
        data = self._table(table).insert(values).execute().data
        return data[0] if data else {}

    def update(self, query, values) -> list:
        return apply_filters(self._table(query.table).update(values), query).execute().data or []

    def delete(self, query) -> list:
        return apply_filters(self._table(query.table).delete(), query).execute().data or []

    def rpc(self, name, params):
        return self.client.rpc(name, params).execute().data

    def subscribe(self, table, callback, *, event="*", filters=None):
        return self.realtime.subscribe(table, callback, event=event, filters=filters)

    def identity(self, session=None):
        client = create_client(
            self.binding.url,
            self.binding.key,
            options=ClientOptions(auto_refresh_token=False, persist_session=False),
        )
        self._local.client = client
        return SupabaseIdentityProvider(client, session, release=self._release)

    def _release(self, client):
        if getattr(self._local, "client", None) is client:
            self._local.client = None


def _identity(user) -> Identity | None:
    if user is None:
        return None
    return Identity(id=user.id, email=user.email or "", metadata=dict(user.user_metadata or {}))


class SupabaseIdentityProvider(IdentityProvider):
    """GoTrue session whose tokens live in the Django session."""

    def __init__(self, client, session=None, release=None):
        self.client = client
        self.session = session if session is not None else {}
        self._release = release

    def _store_tokens(self, auth_session):
        if auth_session is None:
            return
        self.session[ACCESS_TOKEN_KEY] = auth_session.access_token
        self.session[REFRESH_TOKEN_KEY] = auth_session.refresh_token

    def _start_session(self):
        if hasattr(self.session, "cycle_key"):
            self.session.cycle_key()

    def _clear_tokens(self):
        self.session.pop(ACCESS_TOKEN_KEY, None)
        self.session.pop(REFRESH_TOKEN_KEY, None)

    def current(self):
        access = self.session.get(ACCESS_TOKEN_KEY)
        if not access:
            return None
        try:
            response = self.client.auth.set_session(access, self.session.get(REFRESH_TOKEN_KEY))
            self._store_tokens(response.session)
            return _identity(response.user)
        except ProviderAuthError:
            logger.warning("Stored Supabase session rejected; clearing tokens")
            self._clear_tokens()
            return None

    def sign_up(self, email, password, metadata):
        response = self.client.auth.sign_up({"email": email, "password": password, "options": {"data": metadata}})
        if response.session is not None:
            self._start_session()
        self._store_tokens(response.session)
        # the users row is created by a database trigger
        time.sleep(settings.SUPABASE_SIGNUP_TRIGGER_DELAY)
        return _identity(response.user)

    def sign_in(self, email, password):
        response = self.client.auth.sign_in_with_password({"email": email, "password": password})
        self._start_session()
        self._store_tokens(response.session)
        return _identity(response.user)

    def sign_out(self):
        try:
            self.client.auth.sign_out()
        finally:
            self._clear_tokens()

    def on_auth_state_change(self, callback):
        def handler(event, auth_session):
            callback(str(event), _identity(auth_session.user) if auth_session else None)

        subscription = self.client.auth.on_auth_state_change(handler)
        return subscription.unsubscribe

    def reset_password(self, email, redirect_to):
        self.client.auth.reset_password_for_email(email, {"redirect_to": redirect_to})

    def update_password(self, new_password):
        self.client.auth.update_user({"password": new_password})

    def resend_confirmation(self, email):
        self.client.auth.resend({"type": "signup", "email": email})

    def close(self):
        if self._release:
            self._release(self.client)
