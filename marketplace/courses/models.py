"""
Marketplace Course Models

A course is stored as one row whose chapter/lecture tree lives in a JSON
column, mirroring the document the client authors and renders:

    content = [
        {
            "chapterId": "...", "chapterOrder": 1, "chapterTitle": "...",
            "chapterContent": [
                {"lectureId": "...", "lectureTitle": "...", "lectureDuration": 16,
                 "lectureUrl": "https://...", "isPreviewFree": true, "lectureOrder": 1},
            ],
        },
    ]

Models:
- Course: Authored course with pricing, publication flag and content tree
- CourseRating: One star rating per (course, user)

Author: Course Marketplace Team
Version: 1.0.0
"""

import copy
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

CENT = Decimal("0.01")


def compute_discounted_price(price: Decimal, discount: int) -> Decimal:
    """
    Price after a percentage discount, rounded to cents.

    >>> compute_discounted_price(Decimal("100"), 20)
    Decimal('80.00')
    """
    price = Decimal(price)
    amount = price - price * Decimal(discount) / Decimal(100)
    return max(amount, Decimal("0")).quantize(CENT, rounding=ROUND_HALF_UP)


class Course(models.Model):
    """
    Authored course.

    Attributes:
        title: Course title
        description: Rich text (HTML) description
        price: List price in the configured currency
        discount: Percentage discount in [0, 100]
        thumbnail: Public URL of the thumbnail in media storage
        is_published: Visible in the public catalog
        educator: Owning educator (set from the authenticated identity)
        content: Ordered chapter/lecture tree (see module docstring)

    Example:
        >>> course.discounted_price
        Decimal('80.00')
    """

    title = models.CharField(max_length=255, verbose_name=_("Title"))
    description = models.TextField(blank=True, verbose_name=_("Description"))
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
        verbose_name=_("Price"),
    )
    discount = models.PositiveSmallIntegerField(
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        verbose_name=_("Discount (%)"),
    )
    thumbnail = models.URLField(max_length=500, blank=True, verbose_name=_("Thumbnail"))
    is_published = models.BooleanField(default=True, verbose_name=_("Published"))
    educator = models.ForeignKey(
        "marketplace.User",
        on_delete=models.SET_NULL,
        null=True,
        related_name="authored_courses",
        verbose_name=_("Educator"),
    )
    content = models.JSONField(default=list, blank=True, verbose_name=_("Course Content"))
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Course")
        verbose_name_plural = _("Courses")
        db_table = "marketplace_course"
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(discount__gte=0) & models.Q(discount__lte=100),
                name="course_discount_between_0_and_100",
            ),
            models.CheckConstraint(
                condition=models.Q(price__gte=0), name="course_price_not_negative"
            ),
        ]

    def __str__(self) -> str:
        return self.title

    @property
    def discounted_price(self) -> Decimal:
        return compute_discounted_price(self.price, self.discount)

    def iter_lectures(self):
        for chapter in self.content or []:
            for lecture in chapter.get("chapterContent") or []:
                yield chapter, lecture

    def has_lecture(self, lecture_id: str) -> bool:
        return any(lecture.get("lectureId") == lecture_id for _, lecture in self.iter_lectures())

    def content_with_gated_previews(self) -> List[Dict[str, Any]]:
        """Copy of the content tree with URLs blanked for non-preview lectures."""
        content = copy.deepcopy(self.content or [])
        for chapter in content:
            for lecture in chapter.get("chapterContent") or []:
                if not lecture.get("isPreviewFree"):
                    lecture["lectureUrl"] = ""
        return content

    def content_without_urls(self) -> List[Dict[str, Any]]:
        """Copy of the content tree without any lecture URL, used by listings."""
        content = copy.deepcopy(self.content or [])
        for chapter in content:
            for lecture in chapter.get("chapterContent") or []:
                lecture.pop("lectureUrl", None)
        return content


class CourseRating(models.Model):
    """Star rating of one user for one course."""

    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name="ratings",
    )
    user = models.ForeignKey(
        "marketplace.User",
        on_delete=models.CASCADE,
        related_name="course_ratings",
    )
    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)],
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Course Rating")
        verbose_name_plural = _("Course Ratings")
        db_table = "marketplace_course_rating"
        constraints = [
            models.UniqueConstraint(
                fields=["course", "user"], name="unique_rating_per_course_user"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.user_id} rated {self.course_id}: {self.rating}"
