"""
Direct messages and the per-user notification subscription.
"""
import logging

from backend.errors import DatabaseError, wrap_errors
from backend.feed import INSERT, UPDATE
from backend.gateway import Query, get_backend

logger = logging.getLogger(__name__)


def _with_participants(query: Query) -> Query:
    return query.embed(
        "users", "id", "name", "profile_picture", alias="sender", hint="messages_sender_id_fkey"
    ).embed("users", "id", "name", "profile_picture", alias="receiver", hint="messages_receiver_id_fkey")


def send_message(sender_id, receiver_id, content, subject=None, application_id=None) -> dict:
    values = {"sender_id": sender_id, "receiver_id": receiver_id, "content": content}
    if subject:
        values["subject"] = subject
    if application_id:
        values["application_id"] = application_id
    with wrap_errors(DatabaseError, "send message"):
        row = get_backend().insert("messages", values)
    logger.info("Message sent: id=%s sender_id=%s receiver_id=%s", row.get("id"), sender_id, receiver_id)
    return row


def get_conversation(user_a, user_b) -> list:
    query = _with_participants(Query("messages")).any_of(
        {"sender_id": user_a, "receiver_id": user_b},
        {"sender_id": user_b, "receiver_id": user_a},
    )
    with wrap_errors(DatabaseError, "get conversation"):
        return get_backend().fetch(query.order_by("sent_at"))


def get_messages_by_user(user_id) -> list:
    query = _with_participants(Query("messages")).any_of({"sender_id": user_id}, {"receiver_id": user_id})
    with wrap_errors(DatabaseError, "get messages"):
        return get_backend().fetch(query.order_by("-sent_at"))


def mark_as_read(message_id, reader_id=None) -> list:
    """Flip ``is_read`` to true; there is no way back to unread."""
    query = Query("messages").where(id=message_id)
    if reader_id is not None:
        query.where(receiver_id=reader_id)
    with wrap_errors(DatabaseError, "mark message as read"):
        return get_backend().update(query, {"is_read": True})


def subscribe_to_messages(user_id, callback):
    return get_backend().subscribe("messages", callback, event="INSERT", filters={"receiver_id": user_id})


# -----------------------------
# Notifications
# -----------------------------
def subscribe_to_user_notifications(user_id, callback):
    """Turn application changes that concern ``user_id`` into notification dicts.

    Employers hear about new applications on their listings; interns hear
    about status changes on their own applications.
    """
    backend = get_backend()

    def on_new_application(change):
        if change.type != INSERT:
            return
        row = change.row
        job = backend.fetch_one(Query("job_listings", "employer_id", "title").where(id=row.get("job_id")))
        if job and str(job.get("employer_id")) == str(user_id):
            callback(
                {
                    "key": f"new_application:{row.get('id')}",
                    "type": "new_application",
                    "message": f"New application received for {job.get('title')}",
                    "data": row,
                }
            )

    def on_status_change(change):
        if change.type != UPDATE:
            return
        old_status = (change.old or {}).get("status")
        new_status = change.row.get("status")
        if old_status != new_status:
            callback(
                {
                    "key": f"status_change:{change.row.get('id')}:{new_status}:{change.row.get('updated_at')}",
                    "type": "status_change",
                    "message": f"Application status changed to {new_status}",
                    "data": change.row,
                }
            )

    cancels = [
        backend.subscribe("applications", on_new_application, event="INSERT"),
        backend.subscribe("applications", on_status_change, event="UPDATE", filters={"intern_id": user_id}),
    ]

    def unsubscribe():
        for cancel in cancels:
            cancel()

    return unsubscribe
