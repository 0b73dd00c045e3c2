from django.contrib import admin

from .models import Message


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ("sender", "receiver", "subject", "is_read", "sent_at")
    list_filter = ("is_read",)
    search_fields = ("subject", "content", "sender__email", "receiver__email")
