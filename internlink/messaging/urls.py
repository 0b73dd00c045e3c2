from django.urls import path

from . import views

urlpatterns = [
    path("messages", views.inbox, name="inbox"),
    path("messages/<str:user_id>", views.conversation, name="conversation"),
    path("messages/<str:message_id>/read", views.mark_read, name="mark_message_read"),
    path("chat", views.chat_list, name="chat_list"),
    path("chat/<str:contact_id>", views.chat_window, name="chat_window"),
    path("chat/<str:contact_id>/minimize", views.chat_minimize, name="chat_minimize"),
    path("chat/<str:contact_id>/close", views.chat_close, name="chat_close"),
    path("notifications/clear", views.notifications_clear, name="notifications_clear"),
    path("notifications/permission", views.notifications_permission, name="notifications_permission"),
]
