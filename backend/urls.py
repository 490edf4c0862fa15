"""
URL configuration for the course marketplace backend.

- /            health text
- /admin/      Django admin (Jazzmin)
- /api/        marketplace REST API
- /stripe      Stripe webhook
- /clerk       Clerk webhook
"""

from django.contrib import admin
from django.urls import include, path

from marketplace.views import ApiRootView

urlpatterns = [
    path("", ApiRootView.as_view(), name="api-root"),
    path("admin/", admin.site.urls),
    path("api/", include("marketplace.urls")),
    path("", include("core.stripe_integration.urls")),
    path("", include("core.clerk_integration.urls")),
]
