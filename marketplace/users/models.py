"""
Marketplace User Models

This module defines the learner/educator side of the marketplace. Identities
are owned by Clerk; the rows here mirror them so courses and purchases can
reference a user by its Clerk id.

Models:
- User: Local mirror of a Clerk identity
- Enrollment: The user <-> course access edge
- CourseProgress: Per-course lecture progress of a user

The enrollment edge is the single source for both `User.enrolled_courses`
and `Course.enrolled_students`. A unique constraint on (user, course) makes
repeated writes from the webhook, the direct-enroll path and read repair
collapse into one row.

Author: Course Marketplace Team
Version: 1.0.0
"""

from django.db import models
from django.utils.translation import gettext_lazy as _

DEFAULT_AVATAR_URL = "https://ui-avatars.com/api/?name=User"


class User(models.Model):
    """
    Local mirror of a Clerk user.

    Attributes:
        id: Clerk user id (e.g. "user_2rQdh0N2ajZphM4A9vTjvqVZ4iv")
        name: Display name
        email: Primary e-mail address
        image_url: Avatar URL
        enrolled_courses: Courses the user can access (through Enrollment)
    """

    id = models.CharField(
        primary_key=True,
        max_length=64,
        verbose_name=_("Clerk User ID"),
    )
    name = models.CharField(max_length=200, verbose_name=_("Name"))
    email = models.EmailField(blank=True, verbose_name=_("E-mail"))
    image_url = models.URLField(
        max_length=500,
        default=DEFAULT_AVATAR_URL,
        verbose_name=_("Image URL"),
    )
    enrolled_courses = models.ManyToManyField(
        "marketplace.Course",
        through="marketplace.Enrollment",
        related_name="enrolled_students",
        blank=True,
        verbose_name=_("Enrolled Courses"),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("User")
        verbose_name_plural = _("Users")
        db_table = "marketplace_user"
        ordering = ["name"]

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"

    def is_enrolled_in(self, course_id) -> bool:
        """Presence check by value against the enrollment edge."""
        return Enrollment.objects.filter(user=self, course_id=course_id).exists()


class Enrollment(models.Model):
    """
    Access edge between a user and a course.

    `source` records which write path created the edge, which helps when
    reconciling payments by hand.
    """

    class Source(models.TextChoices):
        CHECKOUT = "checkout", _("Stripe Checkout")
        DIRECT = "direct", _("Direct Enrollment")
        BYPASS = "bypass", _("Development Bypass")
        REPAIR = "repair", _("Read Repair")
        ADMIN = "admin", _("Admin")

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name="enrollments",
        verbose_name=_("User"),
    )
    course = models.ForeignKey(
        "marketplace.Course",
        on_delete=models.CASCADE,
        related_name="enrollments",
        verbose_name=_("Course"),
    )
    source = models.CharField(
        max_length=16,
        choices=Source.choices,
        default=Source.CHECKOUT,
        verbose_name=_("Source"),
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Enrollment")
        verbose_name_plural = _("Enrollments")
        db_table = "marketplace_enrollment"
        constraints = [
            models.UniqueConstraint(
                fields=["user", "course"], name="unique_enrollment_per_user_course"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.user_id} -> {self.course_id} ({self.source})"


class CourseProgress(models.Model):
    """Lecture completion and last-watched pointer of one user in one course."""

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name="course_progress",
    )
    course = models.ForeignKey(
        "marketplace.Course",
        on_delete=models.CASCADE,
        related_name="progress_entries",
    )
    completed_lectures = models.JSONField(default=list, blank=True)
    last_watched_chapter = models.CharField(max_length=64, blank=True)
    last_watched_lecture = models.CharField(max_length=64, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Course Progress")
        verbose_name_plural = _("Course Progress")
        db_table = "marketplace_course_progress"
        constraints = [
            models.UniqueConstraint(
                fields=["user", "course"], name="unique_progress_per_user_course"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.user_id} @ {self.course_id}: {len(self.completed_lectures)} lectures"

    def mark_lecture_completed(self, lecture_id: str, chapter_id: str = "") -> bool:
        """
        Add a lecture id to the completed set and move the last-watched pointer.

        Returns:
            True if the lecture was not completed before.
        """
        added = lecture_id not in self.completed_lectures
        if added:
            self.completed_lectures = [*self.completed_lectures, lecture_id]
        self.last_watched_lecture = lecture_id
        if chapter_id:
            self.last_watched_chapter = chapter_id
        return added
