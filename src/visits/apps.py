"""App config for doctor visit assignments and recorded visits."""
from django.apps import AppConfig


class VisitsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "visits"
    verbose_name = "Visites medicales"

    def ready(self):
        import visits.signals  # noqa: F401
