"""
Stripe Integration Views (core.stripe_integration)
==================================================

Endpoints
---------

1. StripeWebhookView
   - URL: /stripe
   - Method: POST
   - Auth: None (authenticated by the `Stripe-Signature` header)
   - Purpose:
       Receives Stripe events, verifies them against `STRIPE_WEBHOOK_SECRET`
       and hands them to `StripeWebhookHandler`.
   - Responses:
       400 on signature failure (nothing is changed), 500 when applying the
       event fails (Stripe retries), 200 otherwise, also for event types we
       do not act on.

Author: Course Marketplace Team
Date: 2025-09-03
"""

import logging

from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from marketplace.exceptions import WebhookSignatureError
from marketplace.services import get_enrollment_service, get_payment_gateway

from .exceptions import InvalidWebhookSignature
from .webhooks import StripeWebhookHandler

logger = logging.getLogger(__name__)


class StripeWebhookView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        gateway = get_payment_gateway()
        payload = request.body

        try:
            event = gateway.construct_event(payload, request.headers.get("Stripe-Signature"))
        except InvalidWebhookSignature as exc:
            logger.warning("Rejected Stripe webhook: %s", exc.message)
            raise WebhookSignatureError(f"Webhook Error: {exc.message}")

        StripeWebhookHandler(gateway, get_enrollment_service()).handle(event)
        return Response({"received": True})
