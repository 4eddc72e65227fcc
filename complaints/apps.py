from django.apps import AppConfig


class ComplaintsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "complaints"

    def ready(self):
        """Import signal handlers and other app initialization code."""
        import complaints.signals  # noqa
