"""
Course Marketplace URL Configuration

URL Structure (mounted under /api/):
- courses: Public catalog
- educator/: Course authoring and educator reports
- user/: Profile, checkout, enrollment, progress and ratings

Paths carry no trailing slash to match the client.

Author: Course Marketplace Team
Version: 1.0.0
"""

from typing import List

from django.urls import URLPattern, path

from .courses import views as course_views
from .users import views as user_views
from .views import DatabaseCheckView

app_name = "marketplace"

# --- Public catalog ---

course_urlpatterns: List[URLPattern] = [
    path("courses", course_views.CourseListView.as_view(), name="course-list"),
    path("courses/<int:course_id>", course_views.CourseDetailView.as_view(), name="course-detail"),
]

# --- Educator authoring ---

educator_urlpatterns: List[URLPattern] = [
    path("educator/update-role", course_views.UpdateRoleView.as_view(), name="educator-update-role"),
    path("educator/add-course", course_views.AddCourseView.as_view(), name="educator-add-course"),
    path("educator/courses", course_views.EducatorCourseListView.as_view(), name="educator-courses"),
    path(
        "educator/courses/<int:course_id>",
        course_views.EducatorCourseDeleteView.as_view(),
        name="educator-course-delete",
    ),
    path("educator/dashboard", course_views.EducatorDashboardView.as_view(), name="educator-dashboard"),
    path(
        "educator/enrolled-students",
        course_views.EnrolledStudentsView.as_view(),
        name="educator-enrolled-students",
    ),
]

# --- Learner ---

user_urlpatterns: List[URLPattern] = [
    path("user/data", user_views.UserDataView.as_view(), name="user-data"),
    path("user/enrolled-courses", user_views.EnrolledCoursesView.as_view(), name="user-enrolled-courses"),
    path("user/purchase", user_views.PurchaseCourseView.as_view(), name="user-purchase"),
    path("user/direct-enroll", user_views.DirectEnrollView.as_view(), name="user-direct-enroll"),
    path("user/unenroll", user_views.UnenrollView.as_view(), name="user-unenroll"),
    path(
        "user/enrollment-status/<int:course_id>",
        user_views.EnrollmentStatusView.as_view(),
        name="user-enrollment-status",
    ),
    path(
        "user/update-course-progress",
        user_views.UpdateCourseProgressView.as_view(),
        name="user-update-course-progress",
    ),
    path(
        "user/get-course-progress",
        user_views.GetCourseProgressView.as_view(),
        name="user-get-course-progress",
    ),
    path("user/add-rating", user_views.AddRatingView.as_view(), name="user-add-rating"),
]

urlpatterns: List[URLPattern] = [
    path("test-db", DatabaseCheckView.as_view(), name="test-db"),
    *course_urlpatterns,
    *educator_urlpatterns,
    *user_urlpatterns,
]
