from django.apps import AppConfig


class ClerkIntegrationConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.clerk_integration"
    label = "clerk_integration"
    verbose_name = "Clerk Integration"
