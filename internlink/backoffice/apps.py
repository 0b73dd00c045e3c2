from django.apps import AppConfig


class BackofficeConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "backoffice"
    verbose_name = "Admin back office"

    def ready(self):
        # registers local stand-ins for the hosted database functions
        from . import procedures  # noqa: F401
