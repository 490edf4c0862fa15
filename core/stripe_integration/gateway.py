"""
Stripe Payment Gateway
======================

Thin wrapper around the official `stripe` SDK. It is the only place in the
project that talks to Stripe, so services receive a `PaymentGateway` instance
and tests can replace it with a fake.

Responsibilities
----------------
- Create one-off Checkout Sessions with inline `price_data` line items.
- Verify webhook signatures and decode the event payload.
- Find the Checkout Session behind a PaymentIntent (for `payment_intent.*`
  events, whose own metadata is empty).
- Know the provider's minimum chargeable amount per currency.

Author: Course Marketplace Team
Date: 2025-09-03
"""

import json
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional

import stripe
from django.conf import settings

from .exceptions import CheckoutSessionException, InvalidWebhookSignature

logger = logging.getLogger(__name__)

# Stripe minimum charge amounts, in major units of each currency.
MINIMUM_CHARGE_AMOUNTS: Dict[str, Decimal] = {
    "usd": Decimal("0.50"),
    "eur": Decimal("0.50"),
    "gbp": Decimal("0.30"),
    "inr": Decimal("0.50"),
    "jpy": Decimal("50"),
    "aud": Decimal("0.50"),
    "cad": Decimal("0.50"),
    "chf": Decimal("0.50"),
    "nzd": Decimal("0.50"),
    "sgd": Decimal("0.50"),
    "brl": Decimal("0.50"),
    "dkk": Decimal("2.50"),
    "nok": Decimal("3.00"),
    "sek": Decimal("3.00"),
    "hkd": Decimal("4.00"),
    "mxn": Decimal("10.00"),
}
DEFAULT_MINIMUM_CHARGE = Decimal("0.50")

ZERO_DECIMAL_CURRENCIES = frozenset({"jpy", "krw", "vnd", "clp", "isk", "ugx"})


def _plain(value: Any) -> Any:
    """Convert StripeObjects (and nested ones) into plain dicts and lists."""
    if hasattr(value, "to_dict"):
        value = value.to_dict()
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value


class PaymentGateway:
    """
    Stripe-backed payment gateway.

    Example:
        >>> gateway = PaymentGateway()
        >>> gateway.minimum_charge("gbp")
        Decimal('0.30')
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        webhook_secret: Optional[str] = None,
        currency: Optional[str] = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.STRIPE_SECRET_KEY
        self.webhook_secret = (
            webhook_secret if webhook_secret is not None else settings.STRIPE_WEBHOOK_SECRET
        )
        self.currency = (currency or settings.CURRENCY).lower()

    # ---------- amounts ----------

    def minimum_charge(self, currency: Optional[str] = None) -> Decimal:
        return MINIMUM_CHARGE_AMOUNTS.get((currency or self.currency).lower(), DEFAULT_MINIMUM_CHARGE)

    def to_minor_units(self, amount: Decimal, currency: Optional[str] = None) -> int:
        """Amount in the smallest currency unit as Stripe expects it (cents for usd)."""
        currency = (currency or self.currency).lower()
        amount = Decimal(amount)
        if currency not in ZERO_DECIMAL_CURRENCIES:
            amount = amount * 100
        return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    def from_minor_units(self, amount: int, currency: Optional[str] = None) -> Decimal:
        currency = (currency or self.currency).lower()
        if currency in ZERO_DECIMAL_CURRENCIES:
            return Decimal(amount)
        return (Decimal(amount) / 100).quantize(Decimal("0.01"))

    # ---------- checkout ----------

    def create_checkout_session(
        self,
        *,
        amount: Decimal,
        product_name: str,
        success_url: str,
        cancel_url: str,
        metadata: Dict[str, str],
        description: str = "",
        image_url: str = "",
        currency: Optional[str] = None,
    ):
        """
        Create a one-off Checkout Session for a single line item.

        Returns:
            The Stripe Checkout Session (`.id`, `.url`).

        Raises:
            CheckoutSessionException: If Stripe rejects the request.
        """
        currency = (currency or self.currency).lower()
        product_data: Dict[str, Any] = {"name": product_name}
        if description:
            product_data["description"] = description
        if image_url:
            product_data["images"] = [image_url]

        params = dict(
            mode="payment",
            line_items=[
                {
                    "price_data": {
                        "currency": currency,
                        "product_data": product_data,
                        "unit_amount": self.to_minor_units(amount, currency),
                    },
                    "quantity": 1,
                }
            ],
            success_url=success_url,
            cancel_url=cancel_url,
            metadata={key: str(value) for key, value in metadata.items()},
        )

        try:
            session = stripe.checkout.Session.create(api_key=self.api_key, **params)
        except stripe.StripeError as exc:
            logger.error("Stripe checkout session creation failed: %s", exc)
            raise CheckoutSessionException(
                getattr(exc, "user_message", None) or str(exc),
                stripe_code=getattr(exc, "code", None),
            )

        logger.info("Created checkout session %s (metadata=%s)", session.id, params["metadata"])
        return session

    def find_session_for_payment_intent(self, payment_intent_id: str) -> Optional[Dict[str, Any]]:
        """
        The Checkout Session that produced a PaymentIntent, as a plain dict.

        Returns:
            The session dict, or None if Stripe lists no session.
        """
        try:
            sessions = stripe.checkout.Session.list(
                payment_intent=payment_intent_id, limit=1, api_key=self.api_key
            )
        except stripe.StripeError as exc:
            raise CheckoutSessionException(str(exc), stripe_code=getattr(exc, "code", None))

        data = list(sessions.data or [])
        if not data:
            return None
        return _plain(data[0])

    # ---------- webhooks ----------

    def construct_event(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        """
        Verify a webhook payload against its `Stripe-Signature` header.

        Returns:
            The decoded event as a plain dict.

        Raises:
            InvalidWebhookSignature: If the header is missing or does not match.
        """
        if not signature:
            raise InvalidWebhookSignature("Missing Stripe-Signature header")
        if isinstance(payload, bytes):
            try:
                payload = payload.decode("utf-8")
            except UnicodeDecodeError:
                raise InvalidWebhookSignature("Invalid payload encoding")

        try:
            stripe.WebhookSignature.verify_header(
                payload,
                signature,
                self.webhook_secret,
                stripe.Webhook.DEFAULT_TOLERANCE,
            )
        except stripe.SignatureVerificationError as exc:
            raise InvalidWebhookSignature(str(exc))

        try:
            return json.loads(payload)
        except ValueError as exc:
            raise InvalidWebhookSignature(f"Invalid payload: {exc}")
