"""
Clerk Webhook View

Endpoint
--------
POST /clerk (raw body, `svix-id` / `svix-timestamp` / `svix-signature` headers)

Keeps the local user mirror in sync with Clerk:
- `user.created` / `user.updated` → create or update the user row
- `user.deleted` → delete the user row (edges, progress, ratings and
  purchases cascade)

Responses:
- 400 when the svix signature does not verify (nothing is changed)
- 200 for every verified event, also for types we do not act on

Author: Course Marketplace Team
Version: 1.0.0
"""

import logging

from django.conf import settings
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from svix.webhooks import Webhook, WebhookVerificationError

from marketplace.exceptions import WebhookSignatureError
from marketplace.services import get_account_service

from .exceptions import ClerkConfigurationException

logger = logging.getLogger(__name__)

SVIX_HEADERS = ("svix-id", "svix-timestamp", "svix-signature")


class ClerkWebhookView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def _verify(self, request) -> dict:
        if not settings.CLERK_WEBHOOK_SECRET:
            raise ClerkConfigurationException("CLERK_WEBHOOK_SECRET is not configured")

        headers = {name: request.headers.get(name, "") for name in SVIX_HEADERS}
        try:
            return Webhook(settings.CLERK_WEBHOOK_SECRET).verify(request.body, headers)
        except WebhookVerificationError as exc:
            logger.warning("Rejected Clerk webhook: %s", exc)
            raise WebhookSignatureError(f"Webhook Error: {exc}")

    def post(self, request):
        event = self._verify(request)
        event_type = event.get("type")
        data = event.get("data") or {}
        accounts = get_account_service()

        logger.info("[clerk webhook] %s (user=%s)", event_type, data.get("id"))

        if event_type in ("user.created", "user.updated"):
            accounts.upsert_from_clerk(data)
            message = "User created" if event_type == "user.created" else "User updated"
            code = status.HTTP_201_CREATED if event_type == "user.created" else status.HTTP_200_OK
            return Response({"success": True, "message": message}, status=code)

        if event_type == "user.deleted":
            if data.get("id"):
                accounts.delete_user(data["id"])
            return Response({"success": True, "message": "User deleted"})

        logger.debug("Unhandled Clerk event type: %s", event_type)
        return Response({"success": True, "message": "Event ignored"})
