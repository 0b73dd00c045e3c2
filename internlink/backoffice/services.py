"""
Administrative services: approvals, user and job moderation, reports,
analytics and the audit trail.

Every mutation is followed by a best-effort audit entry written through the
``log_admin_action`` procedure. A failed audit write is logged and never undoes
the mutation.
"""
import datetime
import logging
from collections import Counter

from django.utils import timezone
from django.utils.dateparse import parse_datetime

from backend.errors import AdminError, wrap_errors
from backend.gateway import Embed, Query, get_backend

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50


def _now() -> str:
    return timezone.now().isoformat()


def _single(rows, message: str) -> dict:
    if not rows:
        raise AdminError(message)
    return rows[0]


def log_admin_action(admin_id, action_type, target_type, target_id, old_values=None, new_values=None) -> None:
    params = {
        "p_admin_id": str(admin_id),
        "p_action_type": action_type,
        "p_target_type": target_type,
        "p_target_id": str(target_id),
        "p_old_values": old_values,
        "p_new_values": new_values,
    }
    try:
        get_backend().rpc("log_admin_action", params)
    except Exception:
        logger.exception("Failed to log admin action: action=%s target=%s:%s", action_type, target_type, target_id)
    else:
        logger.info("Admin action: admin_id=%s action=%s target=%s:%s", admin_id, action_type, target_type, target_id)


# -----------------------------
# Admin access
# -----------------------------
def check_admin_access(user_id):
    query = Query("admin_users").embed("users", "id", "name", "email", "user_type", "status").where(user_id=user_id)
    with wrap_errors(AdminError, "check admin access"):
        return get_backend().fetch_one(query)


def get_current_admin(auth_user_id):
    if not auth_user_id:
        return None
    query = (
        Query("users")
        .embed("admin_users", "admin_level", "permissions")
        .where(auth_user_id=auth_user_id, user_type="admin")
    )
    with wrap_errors(AdminError, "get current admin"):
        return get_backend().fetch_one(query)


# -----------------------------
# Organization approvals
# -----------------------------
def get_pending_approvals() -> list:
    query = (
        Query("organization_approvals")
        .embed("users", "id", "name", "email", "created_at")
        .where(status="pending")
        .order_by("-submitted_at")
    )
    with wrap_errors(AdminError, "get pending approvals"):
        return get_backend().fetch(query)


def submit_organization(user_id, fields: dict) -> dict:
    values = {**fields, "user_id": user_id, "status": "pending"}
    with wrap_errors(AdminError, "submit organization for approval"):
        row = get_backend().insert("organization_approvals", values)
    logger.info("Organization approval submitted: id=%s user_id=%s", row.get("id"), user_id)
    return row


def _review_organization(approval_id, admin_id, status, notes, operation):
    # only a pending approval can move, and only once
    query = Query("organization_approvals").where(id=approval_id, status="pending")
    updates = {"status": status, "admin_notes": notes, "reviewed_by": admin_id, "reviewed_at": _now()}
    with wrap_errors(AdminError, operation):
        return _single(get_backend().update(query, updates), "This approval has already been processed.")


def approve_organization(approval_id, admin_id, notes=None) -> dict:
    row = _review_organization(approval_id, admin_id, "approved", notes, "approve organization")
    log_admin_action(
        admin_id,
        "approve_organization",
        "organization_approval",
        approval_id,
        {"status": "pending"},
        {"status": "approved", "notes": notes},
    )
    return row


def reject_organization(approval_id, admin_id, reason) -> dict:
    row = _review_organization(approval_id, admin_id, "rejected", reason, "reject organization")
    log_admin_action(
        admin_id,
        "reject_organization",
        "organization_approval",
        approval_id,
        {"status": "pending"},
        {"status": "rejected", "reason": reason},
    )
    return row


# -----------------------------
# User management
# -----------------------------
def get_all_users(page=1, limit=DEFAULT_PAGE_SIZE, search=None) -> list:
    query = (
        Query("users")
        .embed("intern_profiles", "skills", "bio", "location")
        .embed("employer_profiles", "company_name", "industry", "location")
        .exclude(user_type="admin")
        .search(search, "name", "email")
        .order_by("-created_at")
        .page(page, limit)
    )
    with wrap_errors(AdminError, "get all users"):
        return get_backend().fetch(query)


def ban_user(user_id, admin_id, reason) -> dict:
    updates = {"status": "banned", "banned_at": _now(), "banned_by": admin_id, "ban_reason": reason}
    with wrap_errors(AdminError, "ban user"):
        row = _single(get_backend().update(Query("users").where(id=user_id), updates), "User not found.")
    log_admin_action(admin_id, "ban_user", "user", user_id, {"status": "active"}, {"status": "banned", "reason": reason})
    return row


def unban_user(user_id, admin_id) -> dict:
    updates = {"status": "active", "banned_at": None, "banned_by": None, "ban_reason": None}
    with wrap_errors(AdminError, "unban user"):
        row = _single(get_backend().update(Query("users").where(id=user_id), updates), "User not found.")
    log_admin_action(admin_id, "unban_user", "user", user_id, {"status": "banned"}, {"status": "active"})
    return row


def delete_user(user_id, admin_id) -> bool:
    backend = get_backend()
    with wrap_errors(AdminError, "delete user"):
        snapshot = backend.fetch_one(Query("users").where(id=user_id))
        backend.delete(Query("users").where(id=user_id))
    log_admin_action(admin_id, "delete_user", "user", user_id, snapshot, None)
    return True


# -----------------------------
# Job moderation
# -----------------------------
def get_all_job_listings(page=1, limit=DEFAULT_PAGE_SIZE, search=None) -> list:
    query = (
        Query("job_listings")
        .embed("employer_profiles", "company_name", "user_id", children=[Embed("users", ("name", "email"))])
        .search(search, "title", "description")
        .order_by("-created_at")
        .page(page, limit)
    )
    with wrap_errors(AdminError, "get all job listings"):
        return get_backend().fetch(query)


def moderate_job(job_id, admin_id, status, notes=None) -> dict:
    if status not in ("approved", "rejected", "flagged"):
        raise AdminError(f"Unknown moderation status: {status}")
    updates = {"moderation_status": status, "moderation_notes": notes, "moderated_by": admin_id, "moderated_at": _now()}
    with wrap_errors(AdminError, "moderate job"):
        row = _single(get_backend().update(Query("job_listings").where(id=job_id), updates), "Job listing not found.")
    log_admin_action(
        admin_id,
        "moderate_job",
        "job_listing",
        job_id,
        {"moderation_status": "pending"},
        {"moderation_status": status, "notes": notes},
    )
    return row


def delete_job(job_id, admin_id, reason) -> bool:
    backend = get_backend()
    with wrap_errors(AdminError, "delete job"):
        snapshot = backend.fetch_one(Query("job_listings").where(id=job_id))
        backend.delete(Query("job_listings").where(id=job_id))
    log_admin_action(admin_id, "delete_job", "job_listing", job_id, snapshot, {"reason": reason})
    return True


# -----------------------------
# Reports
# -----------------------------
def submit_report(reporter_id, reason, description=None, reported_user_id=None, reported_job_id=None) -> dict:
    values = {"reporter_id": reporter_id, "reason": reason, "description": description}
    if reported_user_id:
        values["reported_user_id"] = reported_user_id
    if reported_job_id:
        values["reported_job_id"] = reported_job_id
    with wrap_errors(AdminError, "submit report"):
        row = get_backend().insert("user_reports", values)
    logger.info("Report submitted: id=%s reporter_id=%s job_id=%s", row.get("id"), reporter_id, reported_job_id)
    return row


def get_all_reports(page=1, limit=DEFAULT_PAGE_SIZE, status=None) -> list:
    query = (
        Query("user_reports")
        .embed("users", "id", "name", "email", alias="reporter", hint="user_reports_reporter_id_fkey")
        .embed("users", "id", "name", "email", alias="reported_user", hint="user_reports_reported_user_id_fkey")
        .embed(
            "job_listings",
            "id",
            "title",
            alias="reported_job",
            children=[Embed("employer_profiles", ("company_name",))],
        )
        .order_by("-created_at")
        .page(page, limit)
    )
    if status:
        query.where(status=status)
    with wrap_errors(AdminError, "get all reports"):
        return get_backend().fetch(query)


def handle_report(report_id, admin_id, status, notes=None) -> dict:
    if status not in ("resolved", "dismissed"):
        raise AdminError(f"Unknown report status: {status}")
    updates = {"status": status, "admin_notes": notes, "handled_by": admin_id, "handled_at": _now()}
    with wrap_errors(AdminError, "handle report"):
        row = _single(get_backend().update(Query("user_reports").where(id=report_id), updates), "Report not found.")
    log_admin_action(admin_id, "handle_report", "user_report", report_id, {"status": "pending"}, {"status": status, "notes": notes})
    return row


# -----------------------------
# Analytics
# -----------------------------
METRICS = (
    ("total_users", lambda: Query("users").exclude(user_type="admin")),
    ("total_interns", lambda: Query("users").where(user_type="intern")),
    ("total_employers", lambda: Query("users").where(user_type="employer")),
    ("total_jobs", lambda: Query("job_listings")),
    ("active_jobs", lambda: Query("job_listings").where(status="active")),
    ("total_applications", lambda: Query("applications")),
    ("pending_approvals", lambda: Query("organization_approvals").where(status="pending")),
    ("pending_reports", lambda: Query("user_reports").where(status="pending")),
)


def get_dashboard_metrics() -> dict:
    with wrap_errors(AdminError, "get dashboard metrics"):
        counts = get_backend().count_many([build() for _, build in METRICS])
    return {name: count or 0 for (name, _), count in zip(METRICS, counts)}


def _day(value):
    parsed = parse_datetime(value) if value else None
    return parsed.date().isoformat() if parsed else None


def get_application_trends(days=30) -> list:
    since = timezone.now() - datetime.timedelta(days=days)
    query = Query("applications", "applied_at").where(applied_at__gte=since.isoformat()).order_by("applied_at")
    with wrap_errors(AdminError, "get application trends"):
        rows = get_backend().fetch(query)
    per_day = Counter(day for day in (_day(row.get("applied_at")) for row in rows) if day)
    return [{"date": day, "applications": count} for day, count in per_day.items()]


# -----------------------------
# Audit logs
# -----------------------------
def get_audit_logs(page=1, limit=DEFAULT_PAGE_SIZE, admin_id=None, action_type=None) -> list:
    query = Query("audit_logs").embed("users", "id", "name", "email", alias="admin").order_by("-created_at")
    if admin_id:
        query.where(admin_id=admin_id)
    if action_type:
        query.where(action_type=action_type)
    with wrap_errors(AdminError, "get audit logs"):
        return get_backend().fetch(query.page(page, limit))
