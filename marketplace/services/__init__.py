"""
Marketplace Services Package

Services are plain classes that receive their collaborators in the
constructor. Views obtain them through the factory functions below, which
tests patch to inject fakes.

Structure:
├── accounts/        # Local user mirror of Clerk identities
├── authoring/       # Educator course management and reports
├── catalog/         # Public course listing and detail
├── checkout/        # Purchase initiation (Stripe Checkout / bypass)
├── cloud_storage/   # Thumbnail storage (S3 compatible)
└── enrollment/      # Enrollment edge, reconciliation, progress, ratings

Author: Course Marketplace Team
Version: 1.0.0
"""

from django.conf import settings

from core.clerk_integration.client import ClerkClient
from core.stripe_integration.gateway import PaymentGateway

from .accounts import AccountService
from .authoring import AuthoringService
from .catalog import CatalogService
from .checkout import CheckoutService
from .cloud_storage import MediaStorageService
from .enrollment import EnrollmentService


def get_clerk_client() -> ClerkClient:
    return ClerkClient()


def get_account_service() -> AccountService:
    return AccountService(clerk=get_clerk_client() if settings.CLERK_SECRET_KEY else None)


def get_media_storage() -> MediaStorageService:
    return MediaStorageService()


def get_catalog_service() -> CatalogService:
    return CatalogService()


def get_authoring_service() -> AuthoringService:
    return AuthoringService(storage=get_media_storage())


def get_enrollment_service() -> EnrollmentService:
    return EnrollmentService()


def get_payment_gateway() -> PaymentGateway:
    return PaymentGateway()


def get_checkout_service() -> CheckoutService:
    return CheckoutService(gateway=get_payment_gateway(), enrollment=get_enrollment_service())


__all__ = [
    "AccountService",
    "AuthoringService",
    "CatalogService",
    "CheckoutService",
    "EnrollmentService",
    "MediaStorageService",
    "get_account_service",
    "get_authoring_service",
    "get_catalog_service",
    "get_checkout_service",
    "get_clerk_client",
    "get_enrollment_service",
    "get_media_storage",
    "get_payment_gateway",
]
