from functools import wraps

from django.contrib import messages
from django.shortcuts import redirect
from django.utils.http import url_has_allowed_host_and_scheme


def home_for(user) -> str:
    """URL name a signed-in user lands on."""
    if user is None:
        return "home"
    if user.is_admin:
        return "admin_dashboard"
    if user.is_organization:
        return "organization_dashboard"
    return "internship_list"


def login_required(view_func):
    """Signed-out users outside the public pages go back to the landing page."""

    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        if request.auth.user is None:
            messages.info(request, "Please sign in to continue.")
            return redirect("home")
        return view_func(request, *args, **kwargs)

    return _wrapped


def role_required(role: str):
    """Ensure the signed-in user has the given role."""

    def decorator(view_func):
        @login_required
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            user = request.auth.user
            if user.role != role:
                messages.error(request, "Access denied.")
                return redirect(home_for(user))
            return view_func(request, *args, **kwargs)

        return _wrapped

    return decorator


intern_required = role_required("intern")
organization_required = role_required("organization")


def admin_required(view_func):
    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        user = request.auth.user
        if user is None or not user.is_admin:
            messages.error(request, "Admin access required.")
            return redirect("admin_login")
        return view_func(request, *args, **kwargs)

    return _wrapped


def redirect_back(request, default: str, **kwargs):
    """Redirect to a same-site ``next`` POST value, else to ``default``."""
    target = request.POST.get("next")
    if target and url_has_allowed_host_and_scheme(target, allowed_hosts={request.get_host()}):
        return redirect(target)
    return redirect(default, **kwargs)
