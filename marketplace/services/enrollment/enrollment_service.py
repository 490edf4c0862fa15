"""
Enrollment Service for the Course Marketplace

Owns every write to the enrollment edge and the purchase lifecycle outside
checkout initiation.

Write paths that create the (user, course) edge:
- Stripe webhook success (`record_payment_success`)
- Development payment bypass (`CheckoutService`)
- Direct enrollment (`direct_enroll`)
- Read repair (`enrollment_status`)

All of them go through `enroll`, which is idempotent: the edge is created with
`get_or_create` under a unique constraint and verified after the write. A
missing edge after the write is re-applied with `update_or_create`.

Author: Course Marketplace Team
Version: 1.0.0
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from django.db import transaction
from django.db.models import Q, QuerySet
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from marketplace.exceptions import AlreadyEnrolled, CourseNotFound, NotEnrolled
from marketplace.models import (
    Course,
    CourseProgress,
    CourseRating,
    Enrollment,
    Purchase,
    User,
    InvalidPurchaseTransition,
)

logger = logging.getLogger(__name__)


def parse_id(value: Any) -> Optional[int]:
    """Integer id from metadata or request values, None when unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


class EnrollmentService:
    """
    Enrollment edge writes, payment reconciliation and learner operations.

    Example:
        >>> service = EnrollmentService()
        >>> service.enroll(user, course, source=Enrollment.Source.DIRECT)
        True
    """

    # ---------- edge writes ----------

    def enroll(self, user: User, course: Course, source: str = Enrollment.Source.CHECKOUT) -> bool:
        """
        Idempotently create the enrollment edge.

        Returns:
            True if a new edge was created, False if it already existed.
        """
        with transaction.atomic():
            _, created = Enrollment.objects.get_or_create(
                user=user, course=course, defaults={"source": source}
            )

        if created:
            logger.info("Enrolled user %s into course %s (source=%s)", user.pk, course.pk, source)
        else:
            logger.info("Enrollment already exists for user %s and course %s", user.pk, course.pk)

        if not Enrollment.objects.filter(user=user, course=course).exists():
            logger.warning(
                "Enrollment of user %s in course %s missing after write, re-applying",
                user.pk,
                course.pk,
            )
            Enrollment.objects.update_or_create(
                user=user, course=course, defaults={"source": source}
            )
        return created

    def is_enrolled(self, user: User, course_id: int) -> bool:
        return user.is_enrolled_in(course_id)

    def _has_completed_purchase(self, user: User, course_id: int) -> bool:
        return Purchase.objects.filter(
            user=user, course_id=course_id, status=Purchase.Status.COMPLETED
        ).exists()

    def _get_course(self, course_id: Any) -> Course:
        pk = parse_id(course_id)
        course = Course.objects.filter(pk=pk).first() if pk is not None else None
        if course is None:
            raise CourseNotFound()
        return course

    # ---------- payment reconciliation ----------

    def _find_purchase(self, purchase_id: Any, reference: str = "") -> Optional[Purchase]:
        pk = parse_id(purchase_id)
        purchase = Purchase.objects.filter(pk=pk).first() if pk is not None else None
        if purchase is None and reference:
            purchase = Purchase.objects.filter(stripe_session_id=reference).first()
        return purchase

    def complete_purchase(self, purchase: Purchase, source: str = Enrollment.Source.CHECKOUT) -> Purchase:
        """Mark a purchase completed and write the enrollment edge for it."""
        purchase.advance(Purchase.Status.COMPLETED)
        self.enroll(purchase.user, purchase.course, source=source)
        return purchase

    def record_payment_success(
        self,
        *,
        purchase_id: Any = None,
        user_id: Optional[str] = None,
        course_id: Any = None,
        reference: str = "",
        amount: Optional[Decimal] = None,
    ) -> Optional[Purchase]:
        """
        Apply a successful payment.

        The purchase is resolved by id; when that fails the user and course
        ids from the payment metadata are used directly. A missing user or
        course is a terminal failure: it is logged and None is returned.

        Returns:
            The completed purchase, or None for a terminal failure.
        """
        with transaction.atomic():
            purchases = Purchase.objects.select_for_update()
            pk = parse_id(purchase_id)
            purchase = purchases.filter(pk=pk).first() if pk is not None else None
            if purchase is None and reference:
                purchase = purchases.filter(stripe_session_id=reference).first()

            if purchase is not None:
                user_id, course_pk = purchase.user_id, purchase.course_id
            else:
                logger.warning(
                    "Purchase %s not found, falling back to metadata user=%s course=%s",
                    purchase_id,
                    user_id,
                    course_id,
                )
                course_pk = parse_id(course_id)

            user = User.objects.filter(pk=user_id).first() if user_id else None
            course = Course.objects.filter(pk=course_pk).first() if course_pk else None
            if user is None or course is None:
                logger.error(
                    "Payment %s cannot be applied: user %s %s, course %s %s",
                    reference or purchase_id,
                    user_id,
                    "found" if user else "missing",
                    course_pk,
                    "found" if course else "missing",
                )
                return None

            self.enroll(user, course, source=Enrollment.Source.CHECKOUT)

            if purchase is None:
                purchase = Purchase.objects.create(
                    user=user,
                    course=course,
                    amount=amount if amount is not None else course.discounted_price,
                    status=Purchase.Status.COMPLETED,
                    completed_at=timezone.now(),
                    stripe_session_id=reference,
                )
                logger.info("Created reconciliation purchase %s for %s", purchase.pk, reference)
                return purchase

            try:
                purchase.advance(Purchase.Status.COMPLETED)
            except InvalidPurchaseTransition as exc:
                logger.error("Purchase %s not completed: %s", purchase.pk, exc)
            if reference and not purchase.stripe_session_id:
                purchase.stripe_session_id = reference
                purchase.save(update_fields=["stripe_session_id", "updated_at"])

        logger.info("Purchase %s completed (ref=%s)", purchase.pk, reference)
        return purchase

    def record_payment_processing(self, *, purchase_id: Any = None, reference: str = "") -> Optional[Purchase]:
        """A checkout finished but the payment is still settling (async methods)."""
        purchase = self._find_purchase(purchase_id, reference)
        if purchase is None:
            logger.warning("Processing payment for unknown purchase %s (ref=%s)", purchase_id, reference)
            return None
        if purchase.status == Purchase.Status.PENDING:
            purchase.advance(Purchase.Status.PROCESSING)
            logger.info("Purchase %s is processing (ref=%s)", purchase.pk, reference)
        return purchase

    def record_payment_failure(self, *, purchase_id: Any = None, reference: str = "") -> Optional[Purchase]:
        """Mark the matched purchase failed. No enrollment side effects."""
        purchase = self._find_purchase(purchase_id, reference)
        if purchase is None:
            logger.warning("Payment failure for unknown purchase %s (ref=%s)", purchase_id, reference)
            return None

        if not purchase.is_open:
            logger.info("Purchase %s already %s, ignoring failure", purchase.pk, purchase.status)
            return purchase

        purchase.advance(Purchase.Status.FAILED)
        logger.info("Purchase %s marked failed (ref=%s)", purchase.pk, reference)
        return purchase

    # ---------- learner operations ----------

    def enrolled_courses(self, user: User) -> QuerySet:
        """
        Courses the user may access: the enrollment edges united with the
        courses of completed purchases, without duplicates.
        """
        return (
            Course.objects.filter(
                Q(enrollments__user=user)
                | Q(purchases__user=user, purchases__status=Purchase.Status.COMPLETED)
            )
            .distinct()
            .select_related("educator")
            .prefetch_related("enrollments", "ratings")
        )

    def direct_enroll(self, user: User, course_id: Any) -> Purchase:
        """Enroll without payment: a completed purchase plus the edge."""
        course = self._get_course(course_id)
        if self.is_enrolled(user, course.pk):
            raise AlreadyEnrolled()

        with transaction.atomic():
            purchase = Purchase.objects.create(
                user=user,
                course=course,
                amount=course.discounted_price,
                status=Purchase.Status.COMPLETED,
                completed_at=timezone.now(),
            )
            self.enroll(user, course, source=Enrollment.Source.DIRECT)

        logger.info("Direct enrollment of %s into %s (purchase %s)", user.pk, course.pk, purchase.pk)
        return purchase

    def unenroll(self, user: User, course_id: Any) -> None:
        """
        Remove the edge, progress and purchases of (user, course).

        The course may already be deleted; its id is then only known through
        the purchase rows.
        """
        pk = parse_id(course_id)
        if pk is None:
            raise CourseNotFound()
        if not (self.is_enrolled(user, pk) or self._has_completed_purchase(user, pk)):
            raise NotEnrolled()

        with transaction.atomic():
            edges, _ = Enrollment.objects.filter(user=user, course_id=pk).delete()
            CourseProgress.objects.filter(user=user, course_id=pk).delete()
            purchases, _ = Purchase.objects.filter(user=user, course_id=pk).delete()

        logger.info(
            "Unenrolled user %s from course %s (%s edges, %s purchase rows removed)",
            user.pk,
            pk,
            edges,
            purchases,
        )

    def enrollment_status(self, user: User, course_id: Any) -> Dict[str, bool]:
        """
        Enrollment state of one course, repairing a missing edge when a
        completed purchase exists.
        """
        pk = parse_id(course_id)
        if pk is None:
            raise CourseNotFound()

        if self.is_enrolled(user, pk):
            return {"isEnrolled": True, "isPending": False}

        if self._has_completed_purchase(user, pk):
            course = Course.objects.filter(pk=pk).first()
            if course is not None:
                logger.warning(
                    "Completed purchase without enrollment for user %s course %s, repairing",
                    user.pk,
                    pk,
                )
                self.enroll(user, course, source=Enrollment.Source.REPAIR)
                return {"isEnrolled": True, "isPending": False}

        is_pending = Purchase.objects.filter(
            user=user, course_id=pk, status__in=Purchase.OPEN_STATUSES
        ).exists()
        return {"isEnrolled": False, "isPending": is_pending}

    # ---------- progress & ratings ----------

    def _require_enrollment(self, user: User, course_id: Any) -> Course:
        course = self._get_course(course_id)
        if not self.is_enrolled(user, course.pk):
            raise NotEnrolled()
        return course

    def update_progress(
        self, user: User, course_id: Any, lecture_id: str, chapter_id: str = ""
    ) -> Tuple[CourseProgress, bool]:
        """Mark a lecture completed. Returns the progress row and whether it changed."""
        course = self._require_enrollment(user, course_id)
        if not course.has_lecture(lecture_id):
            raise ValidationError({"lectureId": ["Lecture not found in this course"]})

        with transaction.atomic():
            progress, _ = CourseProgress.objects.select_for_update().get_or_create(
                user=user, course=course
            )
            added = progress.mark_lecture_completed(lecture_id, chapter_id)
            progress.save()
        return progress, added

    def get_progress(self, user: User, course_id: Any) -> Optional[CourseProgress]:
        pk = parse_id(course_id)
        if pk is None:
            raise CourseNotFound()
        return CourseProgress.objects.filter(user=user, course_id=pk).first()

    def add_rating(self, user: User, course_id: Any, rating: int) -> CourseRating:
        course = self._require_enrollment(user, course_id)
        entry, created = CourseRating.objects.update_or_create(
            course=course, user=user, defaults={"rating": rating}
        )
        logger.info(
            "%s rating %s for course %s by %s", "Added" if created else "Updated", rating, course.pk, user.pk
        )
        return entry
