"""
User Views Package

Learner endpoints: profile, enrollment, checkout, progress and ratings.

Author: Course Marketplace Team
Version: 1.0.0
"""

from .user_views import (
    DirectEnrollView,
    EnrolledCoursesView,
    EnrollmentStatusView,
    PurchaseCourseView,
    UnenrollView,
    UserDataView,
)
from .progress_views import AddRatingView, GetCourseProgressView, UpdateCourseProgressView
