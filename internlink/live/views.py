"""
Server-Sent Event streams over the live collections.

Each stream sends the current snapshot first, then one frame per applied
change. Closing the response (client disconnect) closes the collection and
cancels its backend subscription.
"""
import logging

from django.conf import settings
from django.http import StreamingHttpResponse

from accounts.decorators import login_required
from backend.feed import EventStream
from messaging import services as messaging_services
from messaging.views import PERMISSION_SESSION_KEY

from .hooks import NotificationFeed, live_applications, live_job_listings, live_messages

logger = logging.getLogger(__name__)


def _event_response(stream: EventStream, name: str) -> StreamingHttpResponse:
    response = StreamingHttpResponse(stream.sse(name), content_type="text/event-stream")
    response["Cache-Control"] = "no-cache"
    response["X-Accel-Buffering"] = "no"
    return response


def _collection_stream(collection, name: str) -> StreamingHttpResponse:
    stream = EventStream(heartbeat=settings.SSE_HEARTBEAT_SECONDS)
    stream.attach(
        collection.watch(
            lambda items: stream.push(("snapshot", {"items": items, "degraded": collection.degraded})),
            lambda change, items: stream.push((name, change.as_dict())),
        )
    )
    stream.attach(collection.close)
    return _event_response(stream, name)


@login_required
def internships_stream(request):
    return _collection_stream(live_job_listings(), "internship")


@login_required
def applications_stream(request):
    user = request.auth.user
    logger.info("Applications stream opened: user_id=%s role=%s", user.id, user.role)
    return _collection_stream(live_applications(user.id, user.role), "application")


@login_required
def messages_stream(request):
    return _collection_stream(live_messages(request.auth.user.id), "message")


@login_required
def notifications_stream(request):
    user = request.auth.user
    stream = EventStream(heartbeat=settings.SSE_HEARTBEAT_SECONDS)
    permission = request.session.get(PERMISSION_SESSION_KEY, "default")
    feed = NotificationFeed(
        user.id,
        permission=lambda: permission,
        notifier=lambda title, body: stream.push(("desktop", {"title": title, "body": body})),
    ).mount(subscribe=False)

    def on_notification(notification):
        stream.push(("notification", feed.receive(notification)))

    stream.push(("snapshot", {"items": feed.items, "permission": feed.permission}))
    stream.attach(messaging_services.subscribe_to_user_notifications(user.id, on_notification))
    return _event_response(stream, "notification")
