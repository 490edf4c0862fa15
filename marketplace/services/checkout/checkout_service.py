"""
Checkout Service for the Course Marketplace

Starts a course purchase:

1. Reject when the user is already enrolled.
2. Compute the charge (`price - price * discount / 100`, rounded to cents).
3. Create a `pending` Purchase.
4. Either complete it immediately (development payment bypass) or raise the
   charge to the provider minimum when needed and open a Stripe Checkout
   Session whose metadata carries purchase, user and course ids.

The webhook (`core.stripe_integration.webhooks`) finishes the purchase.

Author: Course Marketplace Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from django.conf import settings

from core.stripe_integration.exceptions import PaymentGatewayException
from core.stripe_integration.gateway import PaymentGateway
from marketplace.exceptions import AlreadyEnrolled, CourseNotFound, UpstreamServiceError
from marketplace.models import Course, Enrollment, Purchase, User
from marketplace.services.enrollment import EnrollmentService, parse_id

logger = logging.getLogger(__name__)

ENROLLMENTS_PATH = "/loading/my-enrollments"


@dataclass
class CheckoutResult:
    """Outcome of a purchase request: a Stripe URL or a local redirect."""

    purchase: Purchase
    session_url: Optional[str] = None
    redirect_url: Optional[str] = None


class CheckoutService:
    """
    Purchase initiation.

    Attributes:
        gateway: Payment gateway used to open Checkout Sessions
        enrollment: Enrollment service for the bypass path
        bypass_enabled: Skip the payment provider (development only)
    """

    def __init__(
        self,
        gateway: PaymentGateway,
        enrollment: EnrollmentService,
        bypass_enabled: Optional[bool] = None,
    ) -> None:
        self.gateway = gateway
        self.enrollment = enrollment
        self.bypass_enabled = (
            settings.PAYMENT_BYPASS_ENABLED if bypass_enabled is None else bypass_enabled
        )

    def purchase(self, user: User, course_id: Any, origin: Optional[str] = None) -> CheckoutResult:
        """
        Start a purchase of `course_id` for `user`.

        Raises:
            CourseNotFound: Unknown course id.
            AlreadyEnrolled: The enrollment edge already exists.
            UpstreamServiceError: Stripe rejected the session; the purchase
                is marked failed.
        """
        pk = parse_id(course_id)
        course = Course.objects.filter(pk=pk).first() if pk is not None else None
        if course is None:
            raise CourseNotFound()

        if user.is_enrolled_in(course.pk):
            logger.info("User %s is already enrolled in course %s", user.pk, course.pk)
            raise AlreadyEnrolled()

        purchase = Purchase.objects.create(
            user=user,
            course=course,
            amount=course.discounted_price,
        )
        logger.info("Created purchase %s (%s %s)", purchase.pk, purchase.amount, self.gateway.currency)

        if self.bypass_enabled:
            return self._complete_without_payment(purchase)

        self._apply_minimum_charge(purchase)
        return self._open_checkout_session(purchase, course, origin or settings.FRONTEND_URL)

    def _complete_without_payment(self, purchase: Purchase) -> CheckoutResult:
        logger.warning("Payment bypass active, completing purchase %s without Stripe", purchase.pk)
        self.enrollment.complete_purchase(purchase, source=Enrollment.Source.BYPASS)
        return CheckoutResult(purchase=purchase, redirect_url=ENROLLMENTS_PATH)

    def _apply_minimum_charge(self, purchase: Purchase) -> None:
        minimum = self.gateway.minimum_charge()
        if purchase.amount >= minimum:
            return

        logger.info(
            "Purchase %s amount %s below %s minimum %s, adjusting",
            purchase.pk,
            purchase.amount,
            self.gateway.currency,
            minimum,
        )
        purchase.original_amount = purchase.amount
        purchase.amount = minimum
        purchase.price_adjusted = True
        purchase.save(update_fields=["amount", "original_amount", "price_adjusted", "updated_at"])

    def _open_checkout_session(self, purchase: Purchase, course: Course, origin: str) -> CheckoutResult:
        origin = origin.rstrip("/")
        try:
            session = self.gateway.create_checkout_session(
                amount=purchase.amount,
                product_name=course.title,
                description=f"Enrollment for course: {course.title}",
                image_url=course.thumbnail,
                success_url=f"{origin}{ENROLLMENTS_PATH}",
                cancel_url=f"{origin}/course/{course.pk}",
                metadata={
                    "purchaseId": purchase.pk,
                    "userId": purchase.user_id,
                    "courseId": course.pk,
                    "courseTitle": course.title,
                },
            )
        except PaymentGatewayException as exc:
            purchase.advance(Purchase.Status.FAILED)
            raise UpstreamServiceError(exc.message, service="stripe")

        purchase.stripe_session_id = session.id
        purchase.save(update_fields=["stripe_session_id", "updated_at"])
        return CheckoutResult(purchase=purchase, session_url=session.url)
