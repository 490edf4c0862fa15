"""
Course Views Package

Public catalog views and educator authoring views.

Author: Course Marketplace Team
Version: 1.0.0
"""

from .catalog_views import CourseDetailView, CourseListView
from .educator_views import (
    AddCourseView,
    EducatorCourseDeleteView,
    EducatorCourseListView,
    EducatorDashboardView,
    EnrolledStudentsView,
    UpdateRoleView,
)
