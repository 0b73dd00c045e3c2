import logging

from django.contrib import messages
from django.http import Http404, JsonResponse
from django.shortcuts import redirect, render
from django.views.decorators.http import require_http_methods, require_POST

from accounts import services as account_services
from accounts.decorators import login_required, redirect_back
from backend.errors import ServiceError
from live.hooks import NotificationFeed, live_messages

from . import services
from .chat import ChatSession, get_contact, search_contacts
from .forms import ChatMessageForm, MessageForm

logger = logging.getLogger(__name__)

PERMISSION_SESSION_KEY = "notification_permission"
PERMISSION_STATES = ("default", "granted", "denied")


def _conversations(user_id, rows) -> list:
    """Latest message and unread count per counterpart, newest conversation first."""
    threads = {}
    for row in rows:
        mine = str(row.get("sender_id")) == str(user_id)
        other_id = str(row.get("receiver_id") if mine else row.get("sender_id"))
        other = row.get("receiver") if mine else row.get("sender")
        thread = threads.setdefault(other_id, {"user_id": other_id, "user": other, "latest": row, "unread": 0})
        if not mine and not row.get("is_read"):
            thread["unread"] += 1
    return list(threads.values())


# -----------------------------
# Inbox
# -----------------------------
@login_required
def inbox(request):
    user = request.auth.user
    feed = live_messages(user.id)
    try:
        rows = feed.items
        degraded = feed.degraded
    finally:
        feed.close()
    return render(
        request,
        "messaging/inbox.html",
        {"conversations": _conversations(user.id, rows), "degraded": degraded},
    )


@login_required
@require_http_methods(["GET", "POST"])
def conversation(request, user_id):
    user = request.auth.user
    try:
        other = account_services.get_user(user_id)
    except ServiceError:
        other = None
    if other is None:
        raise Http404("User not found")

    form = MessageForm(request.POST or None)
    if request.method == "POST":
        if form.is_valid():
            try:
                services.send_message(
                    sender_id=user.id,
                    receiver_id=other["id"],
                    content=form.cleaned_data["content"],
                    subject=form.cleaned_data.get("subject") or None,
                )
            except ServiceError as exc:
                messages.error(request, str(exc))
            else:
                return redirect("conversation", user_id=other["id"])
        else:
            logger.warning("Message form invalid: errors=%s", form.errors)

    try:
        thread = services.get_conversation(user.id, other["id"])
    except ServiceError as exc:
        messages.error(request, str(exc))
        thread = []

    for row in thread:
        if str(row.get("receiver_id")) == str(user.id) and not row.get("is_read"):
            try:
                services.mark_as_read(row["id"], reader_id=user.id)
            except ServiceError:
                logger.warning("Could not mark message read: id=%s", row["id"])

    return render(request, "messaging/conversation.html", {"other": other, "thread": thread, "form": form})


@login_required
@require_POST
def mark_read(request, message_id):
    try:
        services.mark_as_read(message_id, reader_id=request.auth.user.id)
    except ServiceError as exc:
        messages.error(request, str(exc))
    return redirect_back(request, "inbox")


# -----------------------------
# Demo chat widget
# -----------------------------
@login_required
def chat_list(request):
    term = request.GET.get("q", "")
    return render(request, "messaging/chat_list.html", {"contacts": search_contacts(term), "q": term})


@login_required
@require_http_methods(["GET", "POST"])
def chat_window(request, contact_id):
    contact = get_contact(contact_id)
    if contact is None:
        raise Http404("Unknown contact")
    chat = ChatSession(request.session)
    chat.open(contact_id)

    form = ChatMessageForm(request.POST or None)
    if request.method == "POST" and form.is_valid():
        chat.send(contact_id, form.cleaned_data["content"])
        return redirect("chat_window", contact_id=contact_id)

    return render(
        request,
        "messaging/chat_window.html",
        {"contact": contact, "transcript": chat.transcript(contact_id), "form": ChatMessageForm()},
    )


@login_required
@require_POST
def chat_minimize(request, contact_id):
    ChatSession(request.session).toggle_minimize(contact_id)
    return redirect_back(request, "chat_list")


@login_required
@require_POST
def chat_close(request, contact_id):
    ChatSession(request.session).close(contact_id)
    return redirect_back(request, "chat_list")


# -----------------------------
# Notifications
# -----------------------------
@login_required
@require_POST
def notifications_clear(request):
    NotificationFeed(request.auth.user.id).clear()
    return redirect_back(request, "home")


@login_required
@require_POST
def notifications_permission(request):
    state = request.POST.get("permission", "default")
    if state not in PERMISSION_STATES:
        return JsonResponse({"error": "Unknown permission state"}, status=400)
    request.session[PERMISSION_SESSION_KEY] = state
    return JsonResponse({"permission": state})
