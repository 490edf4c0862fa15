"""
Stripe Integration AppConfig
============================

Registers `core.stripe_integration` with Django. Webhook events are handled
synchronously by `views.StripeWebhookView`, so there are no signal receivers
to wire up in `ready()`.

Author: Course Marketplace Team
Date: 2025-09-03
"""

from django.apps import AppConfig


class StripeIntegrationConfig(AppConfig):
    """
    App configuration for the `core.stripe_integration` package.
    """

    default_auto_field = "django.db.models.BigAutoField"
    name = "core.stripe_integration"
    label = "stripe_integration"
    verbose_name = "Stripe Integration"
