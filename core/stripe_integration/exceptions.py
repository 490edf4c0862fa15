"""
Stripe Integration Exceptions

Errors raised by `PaymentGateway`. They wrap the Stripe SDK errors so callers
never depend on the SDK's exception module layout.

Author: Course Marketplace Team
Version: 1.0.0
"""

from typing import Optional


class PaymentGatewayException(Exception):
    """
    Base exception for payment provider failures.

    Attributes:
        message (str): Human-readable error message
        stripe_code (Optional[str]): Stripe error code, if the SDK reported one
    """

    def __init__(self, message: str, stripe_code: Optional[str] = None) -> None:
        self.message = message
        self.stripe_code = stripe_code
        super().__init__(self.message)


class CheckoutSessionException(PaymentGatewayException):
    """Creating or listing a Checkout Session failed."""


class InvalidWebhookSignature(PaymentGatewayException):
    """The `Stripe-Signature` header does not match the payload."""
