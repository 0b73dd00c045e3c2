"""
Identity & data provider abstraction.

Services describe reads with :class:`Query` and hand them to a :class:`Backend`.
Two backends exist, picked once by :func:`get_backend`:

* ``SupabaseBackend`` - the hosted backend (PostgREST, GoTrue, Realtime).
* ``LocalBackend`` - Django ORM tables plus the mock auth store.
"""
import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from functools import lru_cache

from .client import get_binding

LOOKUPS = {"exact", "gt", "gte", "lt", "lte", "in", "icontains"}


@dataclass(frozen=True)
class Condition:
    path: tuple
    lookup: str
    value: object

    @property
    def column(self) -> str:
        return ".".join(self.path)


def parse_conditions(lookups: dict) -> list:
    conditions = []
    for key, value in lookups.items():
        parts = key.split("__")
        lookup = "exact"
        if len(parts) > 1 and parts[-1] in LOOKUPS:
            lookup = parts.pop()
        conditions.append(Condition(tuple(parts), lookup, value))
    return conditions


@dataclass
class Embed:
    name: str
    columns: tuple = ("*",)
    alias: str | None = None
    hint: str | None = None
    inner: bool = False
    children: tuple = ()

    @property
    def key(self) -> str:
        return self.alias or self.name


class Query:
    """Declarative select: filters, OR groups, embedded relations, order and range."""

    def __init__(self, table: str, *columns):
        self.table = table
        self.columns = tuple(columns) or ("*",)
        self.embeds = []
        self.filters = []
        self.excludes = []
        self.groups = []
        self.ordering = None
        self.bounds = None

    def __repr__(self):
        return f"<Query {self.table} filters={len(self.filters)} embeds={[e.key for e in self.embeds]}>"

    def clone(self) -> "Query":
        return copy.deepcopy(self)

    def embed(self, name, *columns, alias=None, hint=None, inner=False, children=()):
        self.embeds.append(Embed(name, tuple(columns) or ("*",), alias, hint, inner, tuple(children)))
        return self

    def where(self, **lookups):
        self.filters.extend(parse_conditions(lookups))
        return self

    def exclude(self, **lookups):
        self.excludes.extend(parse_conditions(lookups))
        return self

    def any_of(self, *groups):
        """OR across ``groups``; each group is a dict of lookups ANDed together."""
        self.groups.append([parse_conditions(g) for g in groups])
        return self

    def search(self, text: str, *columns):
        if text:
            self.any_of(*({f"{col}__icontains": text} for col in columns))
        return self

    def order_by(self, field_name: str):
        self.ordering = field_name
        return self

    def range(self, start: int, end: int):
        self.bounds = (start, end)
        return self

    def page(self, page: int, limit: int):
        start = (max(page, 1) - 1) * limit
        return self.range(start, start + limit - 1)


@dataclass
class Identity:
    id: str
    email: str
    metadata: dict = field(default_factory=dict)


class IdentityProvider(ABC):
    """Session-bound identity operations."""

    @abstractmethod
    def current(self) -> Identity | None: ...

    @abstractmethod
    def sign_up(self, email: str, password: str, metadata: dict) -> Identity: ...

    @abstractmethod
    def sign_in(self, email: str, password: str) -> Identity: ...

    @abstractmethod
    def sign_out(self) -> None: ...

    @abstractmethod
    def on_auth_state_change(self, callback):
        """``callback(event, identity)``; returns an unsubscribe callable."""

    @abstractmethod
    def reset_password(self, email: str, redirect_to: str) -> None: ...

    @abstractmethod
    def update_password(self, new_password: str) -> None: ...

    @abstractmethod
    def resend_confirmation(self, email: str) -> None: ...

    def close(self) -> None:
        """Release anything bound to the request; called on auth context teardown."""


class Backend(ABC):
    name = ""

    @abstractmethod
    def fetch(self, query: Query) -> list: ...

    @abstractmethod
    def fetch_one(self, query: Query) -> dict | None:
        """Single row or ``None`` when nothing matched."""

    @abstractmethod
    def count(self, query: Query) -> int: ...

    def count_many(self, queries) -> list:
        return [self.count(q) for q in queries]

    @abstractmethod
    def insert(self, table: str, values: dict) -> dict: ...

    @abstractmethod
    def update(self, query: Query, values: dict) -> list: ...

    @abstractmethod
    def delete(self, query: Query) -> list: ...

    @abstractmethod
    def rpc(self, name: str, params: dict): ...

    @abstractmethod
    def subscribe(self, table: str, callback, *, event: str = "*", filters: dict | None = None):
        """Forward change events on ``table`` to ``callback(ChangeEvent)``; returns unsubscribe."""

    @abstractmethod
    def identity(self, session) -> IdentityProvider: ...


@lru_cache(maxsize=1)
def get_backend() -> Backend:
    binding = get_binding()
    if binding.using_fallback:
        from .local import LocalBackend

        return LocalBackend()
    from .supabase_backend import SupabaseBackend

    return SupabaseBackend(binding)


def reset_backend() -> None:
    get_binding.cache_clear()
    get_backend.cache_clear()
