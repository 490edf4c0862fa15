from django.urls import path

from .views import StripeWebhookView

app_name = "stripe_integration"

urlpatterns = [
    path("stripe", StripeWebhookView.as_view(), name="stripe-webhook"),
]
