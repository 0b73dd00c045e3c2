"""
Job listing, application and review services.
"""
import logging

from backend.errors import DatabaseError, wrap_errors
from backend.gateway import Embed, Query, get_backend

logger = logging.getLogger(__name__)

DEFAULT_COVER_LETTER = "Application submitted through InternLink platform."


def _first(rows, what):
    if not rows:
        raise LookupError(f"No {what} matched")
    return rows[0]


# -----------------------------
# Job listings
# -----------------------------
def create_job_listing(values: dict) -> dict:
    with wrap_errors(DatabaseError, "create job listing"):
        row = get_backend().insert("job_listings", values)
    logger.info("Job listing created: id=%s employer_id=%s status=%s", row.get("id"), row.get("employer_id"), row.get("status"))
    return row


def get_active_job_listings() -> list:
    query = (
        Query("job_listings")
        .embed("employer_profiles", "company_name", "logo_url")
        .where(status="active")
        .order_by("-posted_at")
    )
    with wrap_errors(DatabaseError, "get job listings"):
        return get_backend().fetch(query)


def get_job_listing(job_id):
    query = Query("job_listings").embed("employer_profiles", "company_name", "logo_url", "website", "industry").where(id=job_id)
    with wrap_errors(DatabaseError, "get job listing"):
        return get_backend().fetch_one(query)


def get_job_listings_by_employer(employer_id) -> list:
    query = Query("job_listings").where(employer_id=employer_id).order_by("-posted_at")
    with wrap_errors(DatabaseError, "get employer job listings"):
        return get_backend().fetch(query)


def update_job_listing(job_id, updates: dict) -> dict:
    with wrap_errors(DatabaseError, "update job listing"):
        return _first(get_backend().update(Query("job_listings").where(id=job_id), updates), "job listing")


def delete_job_listing(job_id) -> None:
    with wrap_errors(DatabaseError, "delete job listing"):
        get_backend().delete(Query("job_listings").where(id=job_id))
    logger.info("Job listing deleted: id=%s", job_id)


def subscribe_to_job_listings(callback):
    return get_backend().subscribe("job_listings", callback)


# -----------------------------
# Applications
# -----------------------------
def create_application(values: dict) -> dict:
    values = {"status": "applied", **values}
    with wrap_errors(DatabaseError, "create application"):
        row = get_backend().insert("applications", values)
    logger.info("Application created: id=%s intern_id=%s job_id=%s", row.get("id"), row.get("intern_id"), row.get("job_id"))
    return row


def get_application(application_id):
    query = Query("applications").embed("job_listings", "id", "title", "employer_id").where(id=application_id)
    with wrap_errors(DatabaseError, "get application"):
        return get_backend().fetch_one(query)


def get_applications_by_intern(intern_id) -> list:
    query = (
        Query("applications")
        .embed("job_listings", "*", children=[Embed("employer_profiles", ("company_name", "logo_url"))])
        .where(intern_id=intern_id)
        .order_by("-applied_at")
    )
    with wrap_errors(DatabaseError, "get applications"):
        return get_backend().fetch(query)


def get_applications_by_employer(employer_id) -> list:
    query = (
        Query("applications")
        .embed("job_listings", "id", "title", "employer_id", inner=True)
        .embed("users", "id", "name", "email", "profile_picture", hint="applications_intern_id_fkey")
        .embed("intern_profiles", "skills", "bio", "resume_url")
        .where(job_listings__employer_id=employer_id)
        .order_by("-applied_at")
    )
    with wrap_errors(DatabaseError, "get employer applications"):
        return get_backend().fetch(query)


def update_application_status(application_id, status: str, notes: str | None = None) -> dict:
    updates = {"status": status}
    if notes is not None:
        updates["notes"] = notes
    with wrap_errors(DatabaseError, "update application status"):
        row = _first(get_backend().update(Query("applications").where(id=application_id), updates), "application")
    logger.info("Application status changed: id=%s status=%s", application_id, status)
    return row


def delete_application(application_id) -> None:
    with wrap_errors(DatabaseError, "delete application"):
        get_backend().delete(Query("applications").where(id=application_id))
    logger.info("Application deleted: id=%s", application_id)


def subscribe_to_applications(user_id, role: str, callback):
    """Interns only hear about their own rows; employers get every row and filter by job ownership."""
    filters = {"intern_id": user_id} if role == "intern" else None
    return get_backend().subscribe("applications", callback, filters=filters)


# -----------------------------
# Reviews
# -----------------------------
def create_review(values: dict) -> dict:
    with wrap_errors(DatabaseError, "create review"):
        row = get_backend().insert("reviews", values)
    logger.info("Review created: reviewer_id=%s reviewee_id=%s rating=%s", row.get("reviewer_id"), row.get("reviewee_id"), row.get("rating"))
    return row


def get_reviews_for_user(user_id) -> list:
    query = Query("reviews").embed("users", "id", "name", "profile_picture", alias="reviewer", hint="reviews_reviewer_id_fkey")
    query.where(reviewee_id=user_id).order_by("-created_at")
    with wrap_errors(DatabaseError, "get reviews"):
        return get_backend().fetch(query)


def get_reviews_by_user(user_id) -> list:
    query = Query("reviews").embed("users", "id", "name", "profile_picture", alias="reviewee", hint="reviews_reviewee_id_fkey")
    query.where(reviewer_id=user_id).order_by("-created_at")
    with wrap_errors(DatabaseError, "get reviews"):
        return get_backend().fetch(query)
