from django.urls import path

from .views import ClerkWebhookView

app_name = "clerk_integration"

urlpatterns = [
    path("clerk", ClerkWebhookView.as_view(), name="clerk-webhook"),
]
