from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("django-admin/", admin.site.urls),
    path("", include("accounts.urls")),
    path("", include("internships.urls")),
    path("", include("messaging.urls")),
    path("", include("backoffice.urls")),
    path("", include("live.urls")),
]
