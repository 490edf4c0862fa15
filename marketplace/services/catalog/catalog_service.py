"""
Catalog Service for the Course Marketplace

Read side of the course catalog.

- `list_courses`: published courses without lecture URLs, educator embedded.
  A successful listing is kept in the cache as a snapshot; when the database
  is unavailable the snapshot (or a placeholder set) is served instead and
  marked with `source="fallback"`.
- `get_course`: one course with URLs only for free preview lectures.

Author: Course Marketplace Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from django.core.cache import cache
from django.db import DatabaseError

from marketplace.courses.serializers import CourseDetailSerializer, CourseListSerializer
from marketplace.exceptions import CourseNotFound
from marketplace.models import Course
from marketplace.services.enrollment import parse_id

logger = logging.getLogger(__name__)

CATALOG_SNAPSHOT_KEY = "marketplace:catalog:snapshot"
CATALOG_SNAPSHOT_TIMEOUT = 60 * 60 * 24

PLACEHOLDER_COURSES: List[Dict[str, Any]] = [
    {
        "_id": "fallback-course-1",
        "courseTitle": "Course catalog temporarily unavailable",
        "courseDescription": "<p>Our course catalog cannot be loaded right now. Please try again shortly.</p>",
        "coursePrice": 0,
        "discount": 0,
        "discountedPrice": 0,
        "courseThumbnail": "https://placehold.co/600x400?text=Catalog+Unavailable",
        "isPublished": True,
        "educator": {
            "_id": "fallback-educator",
            "name": "System",
            "imageUrl": "https://placehold.co/150x150?text=SYS",
        },
        "courseContent": [],
        "enrolledStudents": [],
        "courseRatings": [],
        "createdAt": None,
        "updatedAt": None,
    },
]


@dataclass
class CatalogListing:
    courses: List[Dict[str, Any]]
    source: str = "database"


class CatalogService:
    def __init__(self, cache_backend=None) -> None:
        self.cache = cache_backend or cache

    def _queryset(self, published_only: bool):
        queryset = Course.objects.select_related("educator").prefetch_related("enrollments", "ratings")
        if published_only:
            queryset = queryset.filter(is_published=True)
        return queryset

    def list_courses(self, published_only: bool = True) -> CatalogListing:
        try:
            courses = CourseListSerializer(self._queryset(published_only), many=True).data
        except DatabaseError as exc:
            logger.error("Course catalog query failed, serving fallback: %s", exc)
            snapshot = self.cache.get(CATALOG_SNAPSHOT_KEY)
            return CatalogListing(courses=snapshot or PLACEHOLDER_COURSES, source="fallback")

        logger.info("Listing %s courses", len(courses))
        if published_only:
            self.cache.set(CATALOG_SNAPSHOT_KEY, courses, CATALOG_SNAPSHOT_TIMEOUT)
        return CatalogListing(courses=courses)

    def get_course(self, course_id: Any) -> Dict[str, Any]:
        pk = parse_id(course_id)
        course = self._queryset(published_only=False).filter(pk=pk).first() if pk is not None else None
        if course is None:
            raise CourseNotFound()
        return CourseDetailSerializer(course).data
