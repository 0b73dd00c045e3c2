from live.hooks import NotificationFeed

from .chat import ChatSession, search_contacts


def notification_bell(request):
    auth = getattr(request, "auth", None)
    if auth is None or auth.user is None:
        return {"notifications": [], "notification_count": 0}
    items = NotificationFeed(auth.user.id).items
    return {"notifications": items, "notification_count": len(items)}


def chat_widget(request):
    auth = getattr(request, "auth", None)
    if auth is None or auth.user is None:
        return {}
    chat = ChatSession(request.session)
    return {
        "chat_contacts": search_contacts(),
        "chat_windows": [
            {"contact": contact, "minimized": chat.is_minimized(contact["id"]), "messages": chat.transcript(contact["id"])}
            for contact in chat.open_windows
        ],
    }
