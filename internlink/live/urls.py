from django.urls import path

from . import views

urlpatterns = [
    path("stream/internships", views.internships_stream, name="stream_internships"),
    path("stream/applications", views.applications_stream, name="stream_applications"),
    path("stream/messages", views.messages_stream, name="stream_messages"),
    path("stream/notifications", views.notifications_stream, name="stream_notifications"),
]
