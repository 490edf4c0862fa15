"""
Clerk Integration Package
=========================

Identity provider glue:

- `client.ClerkClient`: Clerk backend API (profile lookup, role metadata)
- `views.ClerkWebhookView`: svix-verified `user.*` webhooks (`/clerk`)

Session tokens themselves are verified in `backend.custom_auth`.

Author: Course Marketplace Team
Version: 1.0.0
"""
