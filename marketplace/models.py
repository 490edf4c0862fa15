"""
Marketplace Models Registry

Central models registry for the marketplace app. Models live in logical
submodules and are imported here so Django registers them under the single
`marketplace` app label.

Architecture:
- users/: Clerk user mirror, enrollment edge, course progress
- courses/: Courses and ratings
- purchases/: Payment lifecycle records

Author: Course Marketplace Team
Version: 1.0.0
"""

from .users.models import User, Enrollment, CourseProgress, DEFAULT_AVATAR_URL
from .courses.models import Course, CourseRating, compute_discounted_price
from .purchases.models import Purchase, InvalidPurchaseTransition

__all__ = [
    "User",
    "Enrollment",
    "CourseProgress",
    "DEFAULT_AVATAR_URL",
    "Course",
    "CourseRating",
    "compute_discounted_price",
    "Purchase",
    "InvalidPurchaseTransition",
]
