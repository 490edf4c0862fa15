"""
Stripe Webhook Handlers for Course Purchases
============================================

Overview
--------
Post-processing of verified Stripe events. The view (`views.StripeWebhookView`)
verifies the signature; everything here only ever sees trusted events and
must be idempotent, because Stripe delivers events at least once and in no
guaranteed order.

Event Handling Matrix
---------------------
- `checkout.session.completed`                → enroll (paid) / processing (unpaid)
- `checkout.session.async_payment_succeeded`  → enroll
- `payment_intent.succeeded`                  → enroll (metadata via the session)
- `checkout.session.async_payment_failed`     → purchase failed
- `checkout.session.expired`                  → purchase failed
- `payment_intent.payment_failed`             → purchase failed (metadata via the session)
- anything else                               → acknowledged, no action

Metadata contract
-----------------
Checkout Sessions are created by `CheckoutService` with
`{"purchaseId", "userId", "courseId", "courseTitle"}`. When the purchase row
cannot be found the user/course ids are used directly.

Error policy
------------
A payment that references a missing user or course is terminal: it is logged
and the event is acknowledged. Any other processing error is logged and
re-raised, so the view answers 500 and Stripe redelivers the event.

Author: Course Marketplace Team
Date: 2025-09-03
"""

import logging
from typing import Any, Dict, Optional

from .gateway import PaymentGateway

logger = logging.getLogger(__name__)

CHECKOUT_SUCCESS_EVENTS = frozenset(
    {"checkout.session.completed", "checkout.session.async_payment_succeeded"}
)
CHECKOUT_FAILURE_EVENTS = frozenset(
    {"checkout.session.async_payment_failed", "checkout.session.expired"}
)
PAID_STATUSES = frozenset({"paid", "no_payment_required"})


def _extract_data_object(event: Dict[str, Any]) -> Dict[str, Any]:
    """The event's `data.object` payload, or `{}` if the shape is unexpected."""
    data = event.get("data")
    if isinstance(data, dict) and isinstance(data.get("object"), dict):
        return data["object"]
    return {}


class StripeWebhookHandler:
    """
    Dispatches verified Stripe events to the enrollment service.

    Attributes:
        gateway: Used to look up the Checkout Session of a PaymentIntent
        enrollment: `marketplace.services.EnrollmentService`
    """

    def __init__(self, gateway: PaymentGateway, enrollment) -> None:
        self.gateway = gateway
        self.enrollment = enrollment

    def handle(self, event: Dict[str, Any]) -> Optional[str]:
        """
        Apply one verified event.

        Returns:
            The name of the handler that ran, or None for unhandled types.

        Raises:
            Any processing error, after logging it with the event id.
        """
        event_type = event.get("type")
        obj = _extract_data_object(event)

        logger.info("[webhook] %s (event_id=%s)", event_type, event.get("id"))

        try:
            if event_type in CHECKOUT_SUCCESS_EVENTS:
                self._handle_checkout_session_success(event_type, obj)
                return "checkout_success"

            if event_type == "payment_intent.succeeded":
                self._handle_payment_intent_succeeded(obj)
                return "payment_intent_succeeded"

            if event_type in CHECKOUT_FAILURE_EVENTS:
                self._handle_checkout_session_failure(obj)
                return "checkout_failure"

            if event_type == "payment_intent.payment_failed":
                self._handle_payment_intent_failed(obj)
                return "payment_intent_failed"

            # Not an error: we simply don't act on every event type.
            logger.debug("Unhandled event type: %s", event_type)
            return None

        except Exception:
            logger.exception("Error handling event %s (event_id=%s)", event_type, event.get("id"))
            raise

    # ---------- concrete handlers ----------

    def _apply_success(self, session: Dict[str, Any]) -> None:
        metadata = session.get("metadata") or {}
        amount_total = session.get("amount_total")
        amount = (
            self.gateway.from_minor_units(amount_total, session.get("currency"))
            if amount_total is not None
            else None
        )

        self.enrollment.record_payment_success(
            purchase_id=metadata.get("purchaseId"),
            user_id=metadata.get("userId"),
            course_id=metadata.get("courseId"),
            reference=session.get("id") or "",
            amount=amount,
        )

    def _handle_checkout_session_success(self, event_type: str, session: Dict[str, Any]) -> None:
        """
        Handle `checkout.session.completed` / `async_payment_succeeded`.

        A completed session with an unpaid status belongs to a delayed payment
        method; the purchase waits in `processing` for the async outcome.
        """
        payment_status = session.get("payment_status")
        logger.info(
            "%s session=%s payment_status=%s metadata=%s",
            event_type,
            session.get("id"),
            payment_status,
            session.get("metadata"),
        )

        if event_type == "checkout.session.completed" and payment_status not in PAID_STATUSES:
            metadata = session.get("metadata") or {}
            self.enrollment.record_payment_processing(
                purchase_id=metadata.get("purchaseId"), reference=session.get("id") or ""
            )
            return

        self._apply_success(session)

    def _handle_payment_intent_succeeded(self, payment_intent: Dict[str, Any]) -> None:
        pi_id = payment_intent.get("id")
        logger.info("payment_intent.succeeded pi=%s", pi_id)

        session = self.gateway.find_session_for_payment_intent(pi_id)
        if session is None:
            logger.warning("No checkout session found for payment intent %s", pi_id)
            return
        self._apply_success(session)

    def _handle_checkout_session_failure(self, session: Dict[str, Any]) -> None:
        metadata = session.get("metadata") or {}
        self.enrollment.record_payment_failure(
            purchase_id=metadata.get("purchaseId"), reference=session.get("id") or ""
        )

    def _handle_payment_intent_failed(self, payment_intent: Dict[str, Any]) -> None:
        pi_id = payment_intent.get("id")
        logger.info("payment_intent.payment_failed pi=%s", pi_id)

        session = self.gateway.find_session_for_payment_intent(pi_id)
        if session is None:
            logger.warning("No checkout session found for failed payment intent %s", pi_id)
            return
        self._handle_checkout_session_failure(session)
