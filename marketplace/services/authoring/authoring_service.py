"""
Authoring Service for the Course Marketplace

Educator side of the catalog: create, list and delete own courses, plus the
dashboard and enrolled-students reports.

Ownership is always taken from the authenticated identity. Deleting is only
possible while a course has no enrolled students; the thumbnail is removed
from media storage afterwards on a best-effort basis.

Author: Course Marketplace Team
Version: 1.0.0
"""

import logging
import uuid
from decimal import Decimal
from typing import Any, Dict, List

from django.db import transaction
from django.db.models import Sum

from marketplace.exceptions import (
    CourseHasEnrolledStudents,
    CourseNotFound,
    NotCourseOwner,
    UpstreamServiceError,
)
from marketplace.models import Course, Enrollment, Purchase, User
from marketplace.services.cloud_storage import MediaStorageService
from marketplace.services.enrollment import parse_id

logger = logging.getLogger(__name__)


def build_content_tree(chapters: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Normalize validated chapters into the stored content tree: plain dicts,
    ordered by chapter/lecture order, every node with an id.
    """
    content = []
    for chapter in sorted(chapters, key=lambda item: item["chapterOrder"]):
        lectures = [
            {
                "lectureId": lecture.get("lectureId") or uuid.uuid4().hex[:12],
                "lectureTitle": lecture["lectureTitle"],
                "lectureDuration": lecture["lectureDuration"],
                "lectureUrl": lecture["lectureUrl"],
                "isPreviewFree": bool(lecture.get("isPreviewFree", False)),
                "lectureOrder": lecture["lectureOrder"],
            }
            for lecture in sorted(chapter["chapterContent"], key=lambda item: item["lectureOrder"])
        ]
        content.append(
            {
                "chapterId": chapter.get("chapterId") or uuid.uuid4().hex[:12],
                "chapterOrder": chapter["chapterOrder"],
                "chapterTitle": chapter["chapterTitle"],
                "chapterContent": lectures,
            }
        )
    return content


class AuthoringService:
    """
    Course authoring for educators.

    Attributes:
        storage: Media storage for thumbnails
    """

    def __init__(self, storage: MediaStorageService) -> None:
        self.storage = storage

    def create_course(self, educator: User, data: Dict[str, Any], thumbnail) -> Course:
        """
        Persist a course from validated `courseData`.

        The thumbnail is uploaded first; when the database write fails the
        upload is removed again.
        """
        thumbnail_url = self.storage.upload_thumbnail(thumbnail)

        try:
            with transaction.atomic():
                course = Course.objects.create(
                    title=data["courseTitle"].strip(),
                    description=data.get("courseDescription", ""),
                    price=data["coursePrice"],
                    discount=data.get("discount", 0),
                    is_published=data.get("isPublished", True),
                    thumbnail=thumbnail_url,
                    educator=educator,
                    content=build_content_tree(data["courseContent"]),
                )
        except Exception:
            self._delete_thumbnail(thumbnail_url)
            raise

        logger.info("Educator %s created course %s '%s'", educator.pk, course.pk, course.title)
        return course

    def educator_courses(self, educator_id: str):
        return (
            Course.objects.filter(educator_id=educator_id)
            .select_related("educator")
            .prefetch_related("enrollments", "ratings")
            .order_by("-created_at")
        )

    def delete_course(self, educator_id: str, course_id: Any) -> None:
        pk = parse_id(course_id)
        course = Course.objects.filter(pk=pk).first() if pk is not None else None
        if course is None:
            raise CourseNotFound()
        if course.educator_id != educator_id:
            logger.warning("User %s tried to delete course %s of %s", educator_id, pk, course.educator_id)
            raise NotCourseOwner()
        if course.enrollments.exists():
            raise CourseHasEnrolledStudents()

        thumbnail_url = course.thumbnail
        course.delete()
        logger.info("Educator %s deleted course %s", educator_id, pk)

        self._delete_thumbnail(thumbnail_url)

    def _delete_thumbnail(self, url: str) -> None:
        if not url:
            return
        try:
            self.storage.delete_by_url(url)
        except UpstreamServiceError as exc:
            logger.warning("Thumbnail %s could not be deleted: %s", url, exc)

    # ---------- reports ----------

    def dashboard(self, educator_id: str) -> Dict[str, Any]:
        course_ids = list(Course.objects.filter(educator_id=educator_id).values_list("pk", flat=True))
        total_earnings = (
            Purchase.objects.filter(
                course_id__in=course_ids, status=Purchase.Status.COMPLETED
            ).aggregate(total=Sum("amount"))["total"]
            or Decimal("0.00")
        )

        enrollments = (
            Enrollment.objects.filter(course_id__in=course_ids)
            .select_related("user", "course")
            .order_by("-created_at")
        )
        enrolled_students_data = [
            {
                "courseTitle": enrollment.course.title,
                "student": {
                    "_id": enrollment.user.pk,
                    "name": enrollment.user.name,
                    "imageUrl": enrollment.user.image_url,
                },
            }
            for enrollment in enrollments
        ]

        return {
            "totalEarnings": total_earnings,
            "enrolledStudentsData": enrolled_students_data,
            "totalCourses": len(course_ids),
        }

    def enrolled_students(self, educator_id: str) -> List[Dict[str, Any]]:
        purchases = (
            Purchase.objects.filter(
                course__educator_id=educator_id, status=Purchase.Status.COMPLETED
            )
            .select_related("user", "course")
            .order_by("-created_at")
        )
        return [
            {
                "student": {
                    "_id": purchase.user.pk,
                    "name": purchase.user.name,
                    "imageUrl": purchase.user.image_url,
                },
                "courseTitle": purchase.course.title,
                "purchaseDate": purchase.created_at,
            }
            for purchase in purchases
        ]
