import logging

from django.contrib import messages
from django.core.paginator import Paginator
from django.http import Http404
from django.shortcuts import redirect, render
from django.views.decorators.http import require_http_methods, require_POST

from accounts.decorators import intern_required, login_required, organization_required, redirect_back
from backend.errors import ServiceError
from backoffice import services as backoffice_services
from live import demo_data
from live.hooks import live_applications, live_job_listings

from . import services
from .forms import (
    ApplicationForm,
    ApplicationStatusForm,
    InternshipFilterForm,
    JobListingForm,
    ListingStatusForm,
    ReportForm,
    ReviewForm,
)

logger = logging.getLogger(__name__)

APPLIED_SESSION_KEY = "applied_internships"
TRACKER_FILTERS = ("all", "pending", "reviewing", "interviewing", "accepted", "rejected")


def _paginate(request, items, per_page=10):
    paginator = Paginator(items, per_page)
    return paginator.get_page(request.GET.get("page") or 1)


def _snapshot(collection):
    try:
        return list(collection.items), collection.degraded
    finally:
        collection.close()


def filter_internships(listings, q="", remote=False, paid=False, location="", skills=()) -> list:
    """Search title, company, description and skills; then narrow by the checkbox filters."""
    results = list(listings)
    query = (q or "").strip().lower()
    if query:

        def matches(listing):
            company = ((listing.get("employer_profiles") or {}).get("company_name") or "").lower()
            return (
                query in (listing.get("title") or "").lower()
                or query in company
                or query in (listing.get("description") or "").lower()
                or any(query in skill.lower() for skill in listing.get("skills_required") or [])
            )

        results = [listing for listing in results if matches(listing)]
    if remote:
        results = [listing for listing in results if listing.get("job_type") == "remote"]
    if paid:
        results = [listing for listing in results if listing.get("is_paid")]
    if location:
        wanted = location.strip().lower()
        results = [listing for listing in results if (listing.get("location") or "").lower() == wanted]
    if skills:
        results = [listing for listing in results if set(skills) & set(listing.get("skills_required") or [])]
    return results


def display_status(status: str) -> str:
    return "pending" if status == "applied" else status


def _applied_ids(request) -> set:
    ids = set(request.session.get(APPLIED_SESSION_KEY, []))
    user = request.auth.user
    if user is not None and user.is_intern:
        try:
            ids |= {str(app["job_id"]) for app in services.get_applications_by_intern(user.id)}
        except ServiceError:
            logger.warning("Could not load applied ids: user_id=%s", user.id)
    return ids


def _remember_applied(request, job_id) -> None:
    ids = request.session.get(APPLIED_SESSION_KEY, [])
    if str(job_id) not in ids:
        request.session[APPLIED_SESSION_KEY] = ids + [str(job_id)]


def _forget_applied(request, job_id) -> None:
    ids = request.session.get(APPLIED_SESSION_KEY, [])
    request.session[APPLIED_SESSION_KEY] = [i for i in ids if i != str(job_id)]


def _listing_or_404(job_id):
    try:
        listing = services.get_job_listing(job_id)
    except ServiceError:
        listing = None
    if listing is None:
        listing = next((job for job in demo_data.JOB_LISTINGS if job["id"] == str(job_id)), None)
    if listing is None:
        raise Http404("Internship not found")
    return listing


# -----------------------------
# Browse
# -----------------------------
@login_required
def internship_list(request):
    form = InternshipFilterForm(request.GET or None)
    listings, degraded = _snapshot(live_job_listings())
    total = len(listings)
    if form.is_bound and form.is_valid():
        listings = filter_internships(listings, **form.cleaned_data)
    page_obj = _paginate(request, listings)
    return render(
        request,
        "internships/internship_list.html",
        {
            "form": form,
            "page_obj": page_obj,
            "internships": list(page_obj.object_list),
            "shown": len(listings),
            "total": total,
            "degraded": degraded,
            "applied_ids": _applied_ids(request),
            "is_filtered": form.is_bound and form.is_filtered(),
        },
    )


@login_required
def internship_detail(request, job_id):
    listing = _listing_or_404(job_id)
    return render(
        request,
        "internships/internship_detail.html",
        {
            "internship": listing,
            "applied": str(listing["id"]) in _applied_ids(request),
            "apply_form": ApplicationForm(),
            "report_form": ReportForm(),
        },
    )


@intern_required
@require_POST
def apply(request, job_id):
    user = request.auth.user
    listing = _listing_or_404(job_id)
    if str(listing["id"]) in _applied_ids(request):
        messages.info(request, "You already applied to this internship.")
        return redirect("applications")

    form = ApplicationForm(request.POST)
    cover_letter = (form.cleaned_data.get("cover_letter") or "").strip() if form.is_valid() else ""
    try:
        application = services.create_application(
            {
                "intern_id": user.id,
                "job_id": listing["id"],
                "cover_letter": cover_letter or services.DEFAULT_COVER_LETTER,
            }
        )
    except ServiceError:
        messages.error(request, "Failed to submit application. Please try again.")
        return redirect("internship_detail", job_id=job_id)

    _remember_applied(request, listing["id"])
    logger.info("Application submitted: app_id=%s job_id=%s user_id=%s", application.get("id"), listing["id"], user.id)
    messages.success(request, f"Application submitted for {listing['title']}!")
    return redirect("applications")


@login_required
@require_POST
def report(request, job_id):
    form = ReportForm(request.POST)
    if not form.is_valid():
        messages.error(request, "Please choose a reason for the report.")
        return redirect("internship_detail", job_id=job_id)
    try:
        backoffice_services.submit_report(
            request.auth.user.id,
            form.cleaned_data["reason"],
            description=form.cleaned_data.get("description") or None,
            reported_job_id=job_id,
        )
    except ServiceError as exc:
        messages.error(request, str(exc))
    else:
        messages.success(request, "Thanks, our moderators will take a look.")
    return redirect("internship_detail", job_id=job_id)


# -----------------------------
# Intern: application tracker
# -----------------------------
@intern_required
def applications(request):
    user = request.auth.user
    status = (request.GET.get("status") or "all").lower()
    if status not in TRACKER_FILTERS:
        status = "all"

    rows, degraded = _snapshot(live_applications(user.id, "intern"))
    for row in rows:
        row["display_status"] = display_status(row.get("status"))

    counts = {
        "all": len(rows),
        "pending": sum(1 for r in rows if r["display_status"] == "pending"),
        "accepted": sum(1 for r in rows if r["display_status"] == "accepted"),
        "rejected": sum(1 for r in rows if r["display_status"] == "rejected"),
    }
    visible = rows if status == "all" else [r for r in rows if r["display_status"] == status]
    return render(
        request,
        "internships/applications.html",
        {
            "applications": visible,
            "status": status,
            "counts": counts,
            "degraded": degraded,
            "review_form": ReviewForm(),
        },
    )


def _own_application(application_id, intern_id):
    try:
        application = services.get_application(application_id)
    except ServiceError:
        application = None
    if application is None or str(application.get("intern_id")) != str(intern_id):
        raise Http404("Application not found")
    return application


@intern_required
@require_POST
def withdraw(request, application_id):
    application = _own_application(application_id, request.auth.user.id)
    try:
        services.delete_application(application["id"])
    except ServiceError:
        messages.error(request, "Failed to withdraw application. Please try again.")
        return redirect("applications")
    _forget_applied(request, application["job_id"])
    messages.success(request, "Application withdrawn.")
    return redirect("applications")


@login_required
@require_POST
def review(request, application_id):
    user = request.auth.user
    try:
        application = services.get_application(application_id)
    except ServiceError:
        application = None
    if application is None:
        raise Http404("Application not found")

    job = application.get("job_listings") or {}
    if user.is_intern and str(application.get("intern_id")) == str(user.id):
        reviewee_id, review_type, back = job.get("employer_id"), "intern_to_employer", "applications"
    elif user.is_organization and str(job.get("employer_id")) == str(user.id):
        reviewee_id, review_type, back = application.get("intern_id"), "employer_to_intern", "organization_dashboard"
    else:
        raise Http404("Application not found")

    if application.get("status") != "accepted":
        messages.error(request, "Reviews can only be left for accepted applications.")
        return redirect(back)

    form = ReviewForm(request.POST)
    if not form.is_valid():
        messages.error(request, "Please pick a rating between 1 and 5.")
        return redirect(back)
    try:
        services.create_review(
            {
                "reviewer_id": user.id,
                "reviewee_id": reviewee_id,
                "application_id": application["id"],
                "rating": form.cleaned_data["rating"],
                "comment": form.cleaned_data.get("comment") or None,
                "review_type": review_type,
            }
        )
    except ServiceError as exc:
        messages.error(request, str(exc))
    else:
        messages.success(request, "Thanks for your review!")
    return redirect(back)


# -----------------------------
# Organization dashboard
# -----------------------------
def dashboard_stats(listings, applications) -> dict:
    return {
        "active_internships": sum(1 for job in listings if job.get("status") == "active"),
        "total_applications": len(applications),
        "pending_reviews": sum(1 for app in applications if app.get("status") in ("applied", "reviewing")),
        "accepted": sum(1 for app in applications if app.get("status") == "accepted"),
    }


def _render_dashboard(request, form):
    user = request.auth.user
    try:
        listings = services.get_job_listings_by_employer(user.id)
    except ServiceError as exc:
        messages.error(request, str(exc))
        listings = []
    applicants, degraded = _snapshot(live_applications(user.id, "organization"))
    return render(
        request,
        "internships/organization_dashboard.html",
        {
            "form": form,
            "listings": listings,
            "applicants": applicants,
            "degraded": degraded,
            "stats": dashboard_stats(listings, applicants),
            "status_form": ApplicationStatusForm(),
            "listing_status_form": ListingStatusForm(),
        },
    )


@organization_required
def organization_dashboard(request):
    return _render_dashboard(request, JobListingForm())


@organization_required
@require_http_methods(["GET", "POST"])
def post_internship(request):
    if request.method == "GET":
        return redirect("organization_dashboard")
    form = JobListingForm(request.POST)
    if not form.is_valid():
        logger.warning("Job listing form invalid: errors=%s", form.errors)
        return _render_dashboard(request, form)
    try:
        listing = services.create_job_listing(form.listing_values(request.auth.user.id))
    except ServiceError:
        messages.error(request, "Failed to post internship. Please try again.")
        return _render_dashboard(request, form)
    messages.success(request, f"Internship '{listing['title']}' posted.")
    return redirect("organization_dashboard")


def _owned_listing(job_id, employer_id):
    try:
        listing = services.get_job_listing(job_id)
    except ServiceError:
        listing = None
    if listing is None or str(listing.get("employer_id")) != str(employer_id):
        raise Http404("Internship not found")
    return listing


@organization_required
@require_POST
def listing_status(request, job_id):
    listing = _owned_listing(job_id, request.auth.user.id)
    form = ListingStatusForm(request.POST)
    if form.is_valid():
        try:
            services.update_job_listing(listing["id"], {"status": form.cleaned_data["status"]})
        except ServiceError as exc:
            messages.error(request, str(exc))
        else:
            logger.info("Listing status changed: job_id=%s status=%s", listing["id"], form.cleaned_data["status"])
            messages.success(request, "Internship updated.")
    return redirect_back(request, "organization_dashboard")


@organization_required
@require_POST
def listing_delete(request, job_id):
    listing = _owned_listing(job_id, request.auth.user.id)
    try:
        services.delete_job_listing(listing["id"])
    except ServiceError as exc:
        messages.error(request, str(exc))
    else:
        messages.success(request, "Internship deleted.")
    return redirect("organization_dashboard")


@organization_required
@require_POST
def application_status(request, application_id):
    user = request.auth.user
    try:
        application = services.get_application(application_id)
    except ServiceError:
        application = None
    job = (application or {}).get("job_listings") or {}
    if application is None or str(job.get("employer_id")) != str(user.id):
        raise Http404("Application not found")

    form = ApplicationStatusForm(request.POST)
    if not form.is_valid():
        messages.error(request, "Unknown application status.")
        return redirect("organization_dashboard")
    try:
        services.update_application_status(
            application["id"], form.cleaned_data["status"], form.cleaned_data.get("notes") or None
        )
    except ServiceError as exc:
        messages.error(request, str(exc))
    else:
        messages.success(request, "Application status updated.")
    return redirect("organization_dashboard")
