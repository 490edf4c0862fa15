"""
Marketplace Purchase Model

A Purchase tracks one payment attempt of a user for a course. It is created
`pending` when checkout starts and moved forward by the Stripe webhook, the
development bypass or direct enrollment.

Allowed transitions:

    pending    -> processing | completed | failed
    processing -> completed | failed
    completed  -> refunded

Author: Course Marketplace Team
Version: 1.0.0
"""

from decimal import Decimal
from datetime import datetime
from typing import Optional

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class InvalidPurchaseTransition(Exception):
    """Raised when a purchase would move backwards in its lifecycle."""

    def __init__(self, current: str, requested: str) -> None:
        self.current = current
        self.requested = requested
        super().__init__(f"Purchase cannot move from '{current}' to '{requested}'")


class Purchase(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        PROCESSING = "processing", _("Processing")
        COMPLETED = "completed", _("Completed")
        FAILED = "failed", _("Failed")
        REFUNDED = "refunded", _("Refunded")

    TRANSITIONS = {
        Status.PENDING: {Status.PROCESSING, Status.COMPLETED, Status.FAILED},
        Status.PROCESSING: {Status.COMPLETED, Status.FAILED},
        Status.COMPLETED: {Status.REFUNDED},
        Status.FAILED: set(),
        Status.REFUNDED: set(),
    }
    OPEN_STATUSES = (Status.PENDING, Status.PROCESSING)

    user = models.ForeignKey(
        "marketplace.User",
        on_delete=models.CASCADE,
        related_name="purchases",
        verbose_name=_("User"),
    )
    # Plain reference: the course id must survive a course deletion so that
    # unenroll can still find and clean up the purchase rows.
    course = models.ForeignKey(
        "marketplace.Course",
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name="purchases",
        verbose_name=_("Course"),
    )
    amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
        verbose_name=_("Charged Amount"),
    )
    original_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        verbose_name=_("Original Amount"),
        help_text=_("Intended price before the minimum-charge adjustment"),
    )
    price_adjusted = models.BooleanField(default=False, verbose_name=_("Price Adjusted"))
    status = models.CharField(
        max_length=12,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
        verbose_name=_("Status"),
    )
    completed_at = models.DateTimeField(null=True, blank=True, verbose_name=_("Completed At"))
    stripe_session_id = models.CharField(max_length=255, blank=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Purchase")
        verbose_name_plural = _("Purchases")
        db_table = "marketplace_purchase"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "course", "status"], name="purchase_user_course_status"),
        ]

    def __str__(self) -> str:
        return f"Purchase {self.pk} - {self.user_id} - {self.course_id} - {self.status}"

    @property
    def is_open(self) -> bool:
        return self.status in self.OPEN_STATUSES

    def can_advance(self, status: str) -> bool:
        return status == self.status or status in self.TRANSITIONS[self.Status(self.status)]

    def advance(self, status: str, *, at: Optional[datetime] = None, save: bool = True) -> bool:
        """
        Move the purchase forward to `status`.

        Returns:
            True if the status changed, False for a same-state no-op.

        Raises:
            InvalidPurchaseTransition: For backwards or terminal transitions.
        """
        if status == self.status:
            return False
        if not self.can_advance(status):
            raise InvalidPurchaseTransition(self.status, status)

        self.status = status
        update_fields = ["status", "updated_at"]
        if status == self.Status.COMPLETED:
            self.completed_at = at or timezone.now()
            update_fields.append("completed_at")
        if save:
            self.save(update_fields=update_fields)
        return True
