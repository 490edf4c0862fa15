"""
Core integrations of the course marketplace backend.

- stripe_integration: payment gateway and Stripe webhooks
- clerk_integration: Clerk backend API client and identity webhooks
"""
