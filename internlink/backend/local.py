"""
Local provider: serves the hosted table schema from Django models.

Each model maps ``db_table`` to a backend table name and may declare an
``embeds`` dict (embed key -> dotted attribute path) describing the nested
selections the hosted API resolves through foreign keys.
"""
import datetime
import logging
import uuid
from decimal import Decimal

from django.apps import apps
from django.core.exceptions import FieldDoesNotExist, ObjectDoesNotExist
from django.db import models, transaction
from django.db.models import Q

from .feed import DELETE, INSERT, UPDATE, ChangeEvent, ChangeFeed
from .gateway import Backend, Identity, IdentityProvider
from .mock_auth import MockAuthStore

logger = logging.getLogger(__name__)

PROCEDURES = {}

# mock store role <-> users.user_type
ROLE_FOR_USER_TYPE = {"intern": "intern", "employer": "organization", "admin": "admin"}
USER_TYPE_FOR_ROLE = {v: k for k, v in ROLE_FOR_USER_TYPE.items()}


def register_procedure(name: str):
    """Register a local stand-in for a database function called through ``rpc``."""

    def decorator(func):
        PROCEDURES[name] = func
        return func

    return decorator


def to_json(value):
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (datetime.datetime, datetime.date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value


def model_for(table: str):
    for model in apps.get_models():
        if model._meta.db_table == table:
            return model
    raise LookupError(f"Unknown table: {table}")


def _embed_path(model, key: str) -> str:
    embeds = getattr(model, "embeds", {})
    if key not in embeds:
        raise LookupError(f"{model._meta.db_table} has no relation '{key}'")
    return embeds[key]


def _related_model(model, dotted: str):
    for attr in dotted.split("."):
        model = model._meta.get_field(attr).related_model
    return model


def orm_lookup(model, condition) -> str:
    """Translate a ``Condition`` path (embed keys + column) into an ORM lookup."""
    parts = []
    current = model
    for key in condition.path[:-1]:
        dotted = _embed_path(current, key)
        parts.append(dotted.replace(".", "__"))
        current = _related_model(current, dotted)
    parts.append(condition.path[-1])
    lookup = "__".join(parts)
    if condition.value is None and condition.lookup == "exact":
        return f"{lookup}__isnull"
    if condition.lookup != "exact":
        lookup = f"{lookup}__{condition.lookup}"
    return lookup


def _q(model, conditions) -> Q:
    q = Q()
    for cond in conditions:
        value = True if cond.value is None and cond.lookup == "exact" else cond.value
        q &= Q(**{orm_lookup(model, cond): value})
    return q


def serialize(obj, columns=("*",), embeds=()) -> dict:
    row = {f.attname: to_json(f.value_from_object(obj)) for f in obj._meta.concrete_fields}
    if "*" not in columns:
        row = {col: row.get(col) for col in columns}
    for embed in embeds:
        row[embed.key] = _resolve_embed(obj, embed)
    return row


def _resolve_embed(obj, embed):
    value = obj
    for attr in _embed_path(type(obj), embed.key).split("."):
        try:
            value = getattr(value, attr)
        except ObjectDoesNotExist:
            return None
        if value is None:
            return None
    if isinstance(value, models.Manager):
        return [serialize(item, embed.columns, embed.children) for item in value.all()]
    return serialize(value, embed.columns, embed.children)


class LocalBackend(Backend):
    name = "local"

    def __init__(self, feed: ChangeFeed | None = None):
        self.feed = feed or ChangeFeed()

    # -----------------------------
    # Reads
    # -----------------------------
    def queryset(self, query):
        model = model_for(query.table)
        qs = model.objects.all()
        if query.filters:
            qs = qs.filter(_q(model, query.filters))
        for cond in query.excludes:
            qs = qs.exclude(_q(model, [cond]))
        for groups in query.groups:
            either = Q()
            for group in groups:
                either |= _q(model, group)
            qs = qs.filter(either)
        for embed in query.embeds:
            if embed.inner:
                path = _embed_path(model, embed.key).replace(".", "__")
                qs = qs.filter(**{f"{path}__isnull": False})
        if query.ordering:
            qs = qs.order_by(query.ordering)
        return qs.distinct() if query.groups else qs

    def fetch(self, query) -> list:
        qs = self.queryset(query)
        if query.bounds:
            start, end = query.bounds
            qs = qs[start : end + 1]
        return [serialize(obj, query.columns, query.embeds) for obj in qs]

    def fetch_one(self, query):
        try:
            obj = self.queryset(query).get()
        except ObjectDoesNotExist:
            return None
        return serialize(obj, query.columns, query.embeds)

    def count(self, query) -> int:
        return self.queryset(query).count()

    # -----------------------------
    # Writes
    # -----------------------------
    def insert(self, table: str, values: dict) -> dict:
        model = model_for(table)
        obj = model(**values)
        obj.full_clean()
        obj.save()
        row = serialize(obj)
        logger.debug("Local insert: table=%s id=%s", table, row.get("id"))
        self.feed.publish(ChangeEvent(INSERT, table, new=row))
        return row

    def update(self, query, values: dict) -> list:
        model = model_for(query.table)
        allowed = {f.attname for f in model._meta.concrete_fields} | {f.name for f in model._meta.concrete_fields}
        unknown = set(values) - allowed
        if unknown:
            raise FieldDoesNotExist(f"{query.table} has no column(s) {sorted(unknown)}")

        changes = []
        with transaction.atomic():
            qs = self.queryset(query)
            if not query.groups:
                qs = qs.select_for_update()
            for obj in qs:
                old = serialize(obj)
                for key, value in values.items():
                    setattr(obj, key, value)
                obj.full_clean()
                obj.save()
                changes.append((old, serialize(obj)))
        for old, new in changes:
            self.feed.publish(ChangeEvent(UPDATE, query.table, new=new, old=old))
        return [new for _, new in changes]

    def delete(self, query) -> list:
        removed = []
        with transaction.atomic():
            for obj in self.queryset(query):
                removed.append(serialize(obj))
                obj.delete()
        for old in removed:
            self.feed.publish(ChangeEvent(DELETE, query.table, old=old))
        return removed

    def rpc(self, name: str, params: dict):
        procedure = PROCEDURES.get(name)
        if procedure is None:
            raise LookupError(f"Unknown procedure: {name}")
        return procedure(self, **params)

    def subscribe(self, table: str, callback, *, event: str = "*", filters=None):
        return self.feed.subscribe(table, callback, event=event, filters=filters)

    # -----------------------------
    # Identity
    # -----------------------------
    def identity(self, session=None):
        return MockIdentityProvider(self, MockAuthStore(session=session))

    def provision_user(self, identity: Identity, metadata: dict) -> dict:
        """Create the ``users`` row and role extension the hosted sign-up trigger would."""
        user_type = metadata.get("user_type", "intern")
        user = self.insert(
            "users",
            {
                "auth_user_id": identity.id,
                "user_type": user_type,
                "name": metadata.get("name") or identity.email.split("@")[0],
                "email": identity.email,
            },
        )
        if user_type == "intern":
            self.insert("intern_profiles", {"user_id": user["id"]})
        elif user_type == "employer":
            self.insert(
                "employer_profiles",
                {"user_id": user["id"], "company_name": metadata.get("company_name") or user["name"]},
            )
        elif user_type == "admin":
            self.insert("admin_users", {"user_id": user["id"], "admin_level": metadata.get("admin_level", "admin")})
        return user


def _identity(record) -> Identity | None:
    if not record:
        return None
    return Identity(
        id=record["id"],
        email=record["email"],
        metadata={"name": record.get("name"), "user_type": USER_TYPE_FOR_ROLE.get(record.get("role"), "intern")},
    )


class MockIdentityProvider(IdentityProvider):
    def __init__(self, backend: LocalBackend, store: MockAuthStore):
        self.backend = backend
        self.store = store

    def current(self):
        return _identity(self.store.current_user())

    def sign_up(self, email, password, metadata):
        role = ROLE_FOR_USER_TYPE.get(metadata.get("user_type", "intern"), "intern")
        identity = _identity(self.store.sign_up(email, password, metadata.get("name", ""), role=role))
        self.backend.provision_user(identity, metadata)
        return identity

    def sign_in(self, email, password):
        return _identity(self.store.sign_in(email, password))

    def sign_out(self):
        self.store.sign_out()

    def on_auth_state_change(self, callback):
        state = {"initial": True}

        def observer(record):
            if state.pop("initial", False):
                event = "INITIAL_SESSION"
            else:
                event = "SIGNED_IN" if record else "SIGNED_OUT"
            callback(event, _identity(record))

        return self.store.observe(observer)

    def reset_password(self, email, redirect_to):
        logger.info("Mock password reset requested (no email sent): email=%s", email)

    def update_password(self, new_password):
        logger.info("Mock password update accepted")

    def resend_confirmation(self, email):
        logger.info("Mock confirmation resend (no email sent): email=%s", email)
