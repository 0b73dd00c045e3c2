import uuid

from django.db import models
from django.utils import timezone

from accounts.models import User
from internships.models import Application


class Message(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    sender = models.ForeignKey(User, on_delete=models.CASCADE, related_name="sent_messages")
    receiver = models.ForeignKey(User, on_delete=models.CASCADE, related_name="received_messages")
    application = models.ForeignKey(Application, on_delete=models.SET_NULL, blank=True, null=True, related_name="messages")
    subject = models.CharField(max_length=255, blank=True, null=True)
    content = models.TextField()
    is_read = models.BooleanField(default=False)
    sent_at = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(default=timezone.now)

    embeds = {"sender": "sender", "receiver": "receiver", "applications": "application"}

    class Meta:
        db_table = "messages"
        ordering = ["-sent_at"]

    def __str__(self):
        return f"Message({self.sender_id} -> {self.receiver_id})"
