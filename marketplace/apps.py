"""
Course Marketplace Application Configuration

Django application configuration for the course marketplace: catalog,
educator authoring, checkout and enrollment.

Author: Course Marketplace Team
Version: 1.0.0
"""

from django.apps import AppConfig


class MarketplaceConfig(AppConfig):
    """
    Configuration class for the marketplace Django application.

    Attributes:
        default_auto_field: Default primary key field type for models
        name: Application name for Django registration
        verbose_name: Human-readable application name for admin interface
    """

    default_auto_field: str = "django.db.models.BigAutoField"
    name: str = "marketplace"
    verbose_name: str = "Course Marketplace"
