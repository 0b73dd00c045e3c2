import logging

from django.contrib import messages
from django.shortcuts import redirect, render
from django.views.decorators.http import require_http_methods, require_POST

from backend.errors import AuthError, ServiceError
from backoffice import services as backoffice_services
from internships import services as internship_services

from .decorators import home_for, login_required
from .forms import (
    EducationForm,
    EmployerProfileForm,
    InternProfileForm,
    InternSignUpForm,
    OrganizationSignUpForm,
    PasswordResetForm,
    SignInForm,
)

logger = logging.getLogger(__name__)


def home(request):
    user = request.auth.user
    if user is not None and not user.is_intern:
        return redirect(home_for(user))
    return render(request, "accounts/home.html", {"signin_form": SignInForm()})


@require_http_methods(["GET", "POST"])
def signin(request):
    if request.auth.user is not None:
        return redirect(home_for(request.auth.user))

    form = SignInForm(request.POST or None)
    if request.method == "POST":
        if form.is_valid():
            email = form.cleaned_data["email"]
            try:
                user = request.auth.sign_in(email, form.cleaned_data["password"])
            except AuthError as exc:
                logger.warning("Sign in rejected: email=%s code=%s", email, exc.code)
                messages.error(request, str(exc))
            else:
                messages.success(request, f"Welcome back, {user.display_name}!")
                return redirect(home_for(user))
        else:
            logger.warning("Sign in form invalid: errors=%s", form.errors)
    return render(request, "accounts/home.html", {"signin_form": form})


@require_POST
def signout(request):
    try:
        request.auth.sign_out()
    except AuthError as exc:
        messages.error(request, str(exc))
        return redirect("home")
    messages.info(request, "You have been signed out.")
    return redirect("home")


def signup_choose(request):
    """Single entry point for sign up: user chooses intern vs organization."""
    if request.auth.user is not None:
        return redirect(home_for(request.auth.user))
    return render(request, "accounts/signup_choose.html")


CONFIRM_EMAIL_MESSAGE = "Account created! Check your email to confirm it, then sign in."


def _awaiting_confirmation(request, email):
    """Sign up succeeded but the provider opened no session (email confirmation pending)."""
    logger.info("Sign up awaiting email confirmation: email=%s", email)
    messages.info(request, CONFIRM_EMAIL_MESSAGE)
    return redirect("home")


# -----------------------------
# Sign up: intern
# -----------------------------
@require_http_methods(["GET", "POST"])
def signup_intern(request):
    form = InternSignUpForm(request.POST or None)
    if request.method == "POST":
        if form.is_valid():
            data = form.cleaned_data
            try:
                user = request.auth.sign_up(data["email"], data["password"], data["name"], role="intern")
                if user is None:
                    return _awaiting_confirmation(request, data["email"])
                request.auth.update_profile(extension=form.profile_values())
            except ServiceError as exc:
                logger.warning("Intern sign up failed: email=%s error=%s", data["email"], exc)
                messages.error(request, str(exc))
            else:
                logger.info("Intern registered: email=%s", data["email"])
                messages.success(request, "Account created! Welcome to InternLink.")
                return redirect("internship_list")
        else:
            logger.warning("Intern sign up form invalid: errors=%s", form.errors)
    return render(request, "accounts/signup_intern.html", {"form": form})


# -----------------------------
# Sign up: organization
# -----------------------------
@require_http_methods(["GET", "POST"])
def signup_organization(request):
    form = OrganizationSignUpForm(request.POST or None)
    if request.method == "POST":
        if form.is_valid():
            data = form.cleaned_data
            try:
                user = request.auth.sign_up(
                    data["email"],
                    data["password"],
                    data["contact_name"],
                    role="organization",
                    company_name=data["organization_name"],
                )
                if user is None:
                    return _awaiting_confirmation(request, data["email"])
                request.auth.update_profile(extension=form.profile_values())
            except ServiceError as exc:
                logger.warning("Organization sign up failed: email=%s error=%s", data["email"], exc)
                messages.error(request, str(exc))
            else:
                try:
                    backoffice_services.submit_organization(user.id, form.approval_values())
                except ServiceError:
                    logger.exception("Approval request not recorded: user_id=%s", user.id)
                    messages.warning(request, "We could not queue your organization for review yet.")
                logger.info("Organization registered: email=%s company=%s", data["email"], data["organization_name"])
                messages.success(request, "Organization account created! An admin will review your details shortly.")
                return redirect("organization_dashboard")
        else:
            logger.warning("Organization sign up form invalid: errors=%s", form.errors)
    return render(request, "accounts/signup_organization.html", {"form": form})


@require_http_methods(["GET", "POST"])
def password_reset(request):
    form = PasswordResetForm(request.POST or None)
    if request.method == "POST" and form.is_valid():
        try:
            request.auth.request_password_reset(form.cleaned_data["email"])
        except AuthError as exc:
            messages.error(request, str(exc))
        else:
            messages.success(request, "If an account exists for that email, a reset link is on its way.")
            return redirect("home")
    return render(request, "accounts/password_reset.html", {"form": form})


# -----------------------------
# Profile
# -----------------------------
def _profile_form_class(user):
    return EmployerProfileForm if user.is_organization else InternProfileForm


@login_required
@require_http_methods(["GET", "POST"])
def profile(request):
    user = request.auth.user
    form_class = _profile_form_class(user)
    form = form_class(initial=form_class.initial_for(user))
    education_form = EducationForm()

    if request.method == "POST":
        action = request.POST.get("action", "save")
        try:
            if action == "save":
                form = form_class(request.POST)
                if form.is_valid():
                    base, extension = form.split()
                    request.auth.update_profile(base=base, extension=extension)
                    logger.info("Profile updated: user_id=%s", user.id)
                    messages.success(request, "Profile updated.")
                    return redirect("profile")
                logger.warning("Profile form invalid: errors=%s", form.errors)
            elif action == "add_education" and user.is_intern:
                education_form = EducationForm(request.POST)
                if education_form.is_valid():
                    entries = list((user.extension or {}).get("education") or [])
                    entries.append(education_form.entry())
                    request.auth.update_profile(extension={"education": entries})
                    messages.success(request, "Education added.")
                    return redirect("profile")
            elif action == "remove_education" and user.is_intern:
                entry_id = request.POST.get("entry_id")
                entries = [e for e in (user.extension or {}).get("education") or [] if e.get("id") != entry_id]
                request.auth.update_profile(extension={"education": entries})
                messages.success(request, "Education removed.")
                return redirect("profile")
        except ServiceError as exc:
            messages.error(request, str(exc))

    try:
        reviews = internship_services.get_reviews_for_user(user.id)
    except ServiceError:
        reviews = []

    return render(
        request,
        "accounts/profile.html",
        {
            "form": form,
            "education_form": education_form,
            "education": (user.extension or {}).get("education") or [],
            "reviews": reviews,
        },
    )
