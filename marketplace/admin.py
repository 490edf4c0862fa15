"""
Course Marketplace Django Admin Configuration

Back office views for the marketplace models, styled by Jazzmin.

Sections:
- Users: Clerk user mirror with enrollment edges inline
- Courses: Catalog entries with ratings inline
- Purchases: Payment lifecycle records (read mostly)
- Progress: Lecture completion per learner

Purchases may reference a course that has since been deleted, so purchase
lists show the raw course id instead of following the relation.

Author: Course Marketplace Team
Version: 1.0.0
"""

from django.contrib import admin
from django.db.models import Count, QuerySet
from django.http import HttpRequest
from django.utils.translation import gettext_lazy as _

from .models import Course, CourseProgress, CourseRating, Enrollment, Purchase, User

# --- Users ---


class EnrollmentInline(admin.TabularInline):
    """Enrollment edges of a user."""

    model = Enrollment
    extra = 0
    fields = ("course", "source", "created_at")
    readonly_fields = ("created_at",)
    autocomplete_fields = ("course",)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "email", "enrollment_count", "created_at")
    search_fields = ("id", "name", "email")
    ordering = ("-created_at",)
    readonly_fields = ("created_at", "updated_at")
    inlines = [EnrollmentInline]

    @admin.display(description=_("Enrollments"), ordering="enrollment_total")
    def enrollment_count(self, instance: User) -> int:
        return instance.enrollment_total

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        return super().get_queryset(request).annotate(enrollment_total=Count("enrollments"))


# --- Courses ---


class CourseRatingInline(admin.TabularInline):
    model = CourseRating
    extra = 0
    fields = ("user", "rating", "updated_at")
    readonly_fields = ("updated_at",)


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    """
    Administration interface for courses.

    The chapter/lecture tree is stored as JSON and edited as such.
    """

    list_display = ("title", "educator", "price", "discount", "is_published", "created_at")
    list_filter = ("is_published", "created_at")
    search_fields = ("title", "description", "educator__name")
    list_select_related = ("educator",)
    autocomplete_fields = ("educator",)
    readonly_fields = ("created_at", "updated_at")
    inlines = [CourseRatingInline]

    fieldsets = (
        (_("Basic Information"), {"fields": ("title", "description", "educator", "thumbnail")}),
        (_("Pricing"), {"fields": ("price", "discount", "is_published")}),
        (_("Content"), {"fields": ("content",)}),
        (_("Timestamps"), {"fields": ("created_at", "updated_at"), "classes": ("collapse",)}),
    )


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ("user", "course", "source", "created_at")
    list_filter = ("source",)
    search_fields = ("user__id", "user__email", "course__title")
    list_select_related = ("user", "course")


# --- Purchases ---


@admin.register(Purchase)
class PurchaseAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "user",
        "course_id",
        "amount",
        "original_amount",
        "price_adjusted",
        "status",
        "created_at",
        "completed_at",
    )
    list_filter = ("status", "price_adjusted", "created_at")
    search_fields = ("user__id", "user__email", "stripe_session_id")
    list_select_related = ("user",)
    raw_id_fields = ("course",)
    readonly_fields = ("stripe_session_id", "created_at", "updated_at", "completed_at")


# --- Progress ---


@admin.register(CourseProgress)
class CourseProgressAdmin(admin.ModelAdmin):
    list_display = ("user", "course", "completed_count", "updated_at")
    search_fields = ("user__id", "course__title")
    list_select_related = ("user", "course")

    @admin.display(description=_("Completed Lectures"))
    def completed_count(self, instance: CourseProgress) -> int:
        return len(instance.completed_lectures or [])
