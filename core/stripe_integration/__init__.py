"""
Stripe Integration Package
==========================

All Stripe-related logic of the marketplace backend.

Scope
-----
- `gateway.PaymentGateway`: Checkout Session creation, PaymentIntent lookup,
  webhook signature verification and per-currency minimum charges.
- `webhooks.StripeWebhookHandler`: applies verified events to purchases and
  enrollments through `marketplace.services.EnrollmentService`.
- `views.StripeWebhookView`: the public webhook endpoint (`/stripe`).

Configuration
-------------
`STRIPE_SECRET_KEY`, `STRIPE_WEBHOOK_SECRET` and `CURRENCY` in settings.

Author: Course Marketplace Team
Date: 2025-09-03
"""
