from django.apps import AppConfig


class LoyaltyConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "loyalty"

    def ready(self):
        """
        Import signals when the app is ready to ensure they are registered.
        """
        import loyalty.signals  # noqa: F401
