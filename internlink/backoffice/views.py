import logging

from django.contrib import messages
from django.shortcuts import redirect, render
from django.views.decorators.http import require_http_methods, require_POST

from accounts.decorators import admin_required
from accounts.forms import SignInForm
from backend.errors import AuthError, ServiceError

from . import services
from .forms import ApprovalDecisionForm, JobActionForm, ReportActionForm, UserActionForm

logger = logging.getLogger(__name__)

DEMO_METRICS = {
    "total_users": 1247,
    "total_interns": 892,
    "total_employers": 355,
    "total_jobs": 156,
    "active_jobs": 89,
    "total_applications": 2341,
    "pending_approvals": 12,
    "pending_reports": 5,
}

DEMO_TRENDS = [
    {"date": "Jan 1", "applications": 45},
    {"date": "Jan 2", "applications": 52},
    {"date": "Jan 3", "applications": 38},
    {"date": "Jan 4", "applications": 61},
    {"date": "Jan 5", "applications": 55},
]

REPORT_STATUSES = ("pending", "resolved", "dismissed")


def _page(request) -> int:
    try:
        return max(int(request.GET.get("page") or 1), 1)
    except ValueError:
        return 1


# -----------------------------
# Admin session
# -----------------------------
@require_http_methods(["GET", "POST"])
def admin_login(request):
    user = request.auth.user
    if user is not None and user.is_admin:
        return redirect("admin_dashboard")

    form = SignInForm(request.POST or None)
    if request.method == "POST" and form.is_valid():
        email = form.cleaned_data["email"]
        try:
            user = request.auth.sign_in(email, form.cleaned_data["password"])
        except AuthError as exc:
            logger.warning("Admin sign in rejected: email=%s code=%s", email, exc.code)
            messages.error(request, str(exc))
        else:
            if user is not None and user.is_admin:
                logger.info("Admin signed in: user_id=%s", user.id)
                return redirect("admin_dashboard")
            logger.warning("Non-admin attempted admin sign in: email=%s", email)
            request.auth.sign_out()
            messages.error(request, "This account does not have admin access.")
    return render(request, "backoffice/login.html", {"form": form})


@require_POST
def admin_logout(request):
    try:
        request.auth.sign_out()
    except AuthError as exc:
        messages.error(request, str(exc))
    return redirect("admin_login")


# -----------------------------
# Dashboard
# -----------------------------
@admin_required
def dashboard(request):
    demo = False
    try:
        metrics = services.get_dashboard_metrics()
        trends = services.get_application_trends()
    except ServiceError:
        logger.warning("Dashboard metrics unavailable; showing demo figures")
        metrics, trends, demo = dict(DEMO_METRICS), list(DEMO_TRENDS), True
    try:
        recent = services.get_audit_logs(limit=10)
    except ServiceError:
        recent = []
    return render(
        request,
        "backoffice/dashboard.html",
        {"metrics": metrics, "trends": trends, "recent_actions": recent, "demo": demo},
    )


# -----------------------------
# Organization approvals
# -----------------------------
@admin_required
@require_http_methods(["GET", "POST"])
def approvals(request):
    admin = request.auth.user
    if request.method == "POST":
        form = ApprovalDecisionForm(request.POST)
        approval_id = request.POST.get("approval_id")
        if form.is_valid() and approval_id:
            try:
                if form.cleaned_data["decision"] == "approve":
                    services.approve_organization(approval_id, admin.id, form.note_text())
                    messages.success(request, "Organization approved.")
                else:
                    services.reject_organization(approval_id, admin.id, form.note_text())
                    messages.success(request, "Organization rejected.")
            except ServiceError:
                messages.error(request, "Failed to process approval. Please try again.")
        else:
            messages.error(request, "Failed to process approval. Please try again.")
        return redirect("admin_approvals")

    try:
        pending = services.get_pending_approvals()
    except ServiceError:
        messages.error(request, "Could not load pending approvals.")
        pending = []
    return render(request, "backoffice/approvals.html", {"approvals": pending, "form": ApprovalDecisionForm()})


# -----------------------------
# Users
# -----------------------------
@admin_required
@require_http_methods(["GET", "POST"])
def users(request):
    admin = request.auth.user
    if request.method == "POST":
        form = UserActionForm(request.POST)
        user_id = request.POST.get("user_id")
        if form.is_valid() and user_id:
            action = form.cleaned_data["action"]
            try:
                if action == "ban":
                    services.ban_user(user_id, admin.id, form.cleaned_data["reason"])
                elif action == "unban":
                    services.unban_user(user_id, admin.id)
                else:
                    services.delete_user(user_id, admin.id)
            except ServiceError as exc:
                messages.error(request, str(exc))
            else:
                messages.success(request, f"User {action} applied.")
        else:
            messages.error(request, "; ".join(e for errors in form.errors.values() for e in errors) or "Invalid request.")
        return redirect("admin_users")

    search = (request.GET.get("q") or "").strip()
    page = _page(request)
    try:
        rows = services.get_all_users(page=page, search=search or None)
    except ServiceError as exc:
        messages.error(request, str(exc))
        rows = []
    return render(
        request,
        "backoffice/users.html",
        {"users": rows, "q": search, "page": page, "has_next": len(rows) == services.DEFAULT_PAGE_SIZE},
    )


# -----------------------------
# Jobs
# -----------------------------
@admin_required
@require_http_methods(["GET", "POST"])
def jobs(request):
    admin = request.auth.user
    if request.method == "POST":
        form = JobActionForm(request.POST)
        job_id = request.POST.get("job_id")
        if form.is_valid() and job_id:
            action, notes = form.cleaned_data["action"], form.cleaned_data.get("notes") or None
            try:
                if action == "delete":
                    services.delete_job(job_id, admin.id, notes or "Removed by admin")
                else:
                    services.moderate_job(job_id, admin.id, action, notes)
            except ServiceError as exc:
                messages.error(request, str(exc))
            else:
                messages.success(request, "Job listing updated.")
        else:
            messages.error(request, "Invalid request.")
        return redirect("admin_jobs")

    search = (request.GET.get("q") or "").strip()
    page = _page(request)
    try:
        rows = services.get_all_job_listings(page=page, search=search or None)
    except ServiceError as exc:
        messages.error(request, str(exc))
        rows = []
    return render(
        request,
        "backoffice/jobs.html",
        {"jobs": rows, "q": search, "page": page, "has_next": len(rows) == services.DEFAULT_PAGE_SIZE},
    )


# -----------------------------
# Reports
# -----------------------------
@admin_required
@require_http_methods(["GET", "POST"])
def reports(request):
    admin = request.auth.user
    if request.method == "POST":
        form = ReportActionForm(request.POST)
        report_id = request.POST.get("report_id")
        if form.is_valid() and report_id:
            try:
                services.handle_report(report_id, admin.id, form.cleaned_data["status"], form.cleaned_data.get("notes") or None)
            except ServiceError as exc:
                messages.error(request, str(exc))
            else:
                messages.success(request, f"Report {form.cleaned_data['status']}.")
        else:
            messages.error(request, "Invalid request.")
        return redirect("admin_reports")

    status = request.GET.get("status") or ""
    if status not in REPORT_STATUSES:
        status = ""
    try:
        rows = services.get_all_reports(page=_page(request), status=status or None)
    except ServiceError as exc:
        messages.error(request, str(exc))
        rows = []
    return render(request, "backoffice/reports.html", {"reports": rows, "status": status, "statuses": REPORT_STATUSES})


# -----------------------------
# Audit log
# -----------------------------
@admin_required
def audit(request):
    action_type = (request.GET.get("action") or "").strip()
    page = _page(request)
    try:
        rows = services.get_audit_logs(page=page, action_type=action_type or None)
    except ServiceError as exc:
        messages.error(request, str(exc))
        rows = []
    return render(
        request,
        "backoffice/audit.html",
        {"logs": rows, "action": action_type, "page": page, "has_next": len(rows) == services.DEFAULT_PAGE_SIZE},
    )
