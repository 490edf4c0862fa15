"""
Course Progress and Rating Views

Views:
- UpdateCourseProgressView: POST /api/user/update-course-progress
- GetCourseProgressView: POST /api/user/get-course-progress
- AddRatingView: POST /api/user/add-rating

Author: Course Marketplace Team
Version: 1.0.0
"""

from rest_framework.response import Response

from marketplace.services import get_enrollment_service
from marketplace.users.serializers import (
    CourseProgressSerializer,
    ProgressUpdateSerializer,
    RatingSerializer,
)

from .user_views import LearnerAPIView


class UpdateCourseProgressView(LearnerAPIView):
    def post(self, request):
        body = ProgressUpdateSerializer(data=request.data)
        body.is_valid(raise_exception=True)

        progress, added = get_enrollment_service().update_progress(
            self.get_profile(request),
            body.validated_data["courseId"],
            body.validated_data["lectureId"],
            body.validated_data["chapterId"],
        )
        return Response(
            {
                "success": True,
                "message": "Progress Updated" if added else "Lecture Already Completed",
                "progressData": CourseProgressSerializer(progress).data,
            }
        )


class GetCourseProgressView(LearnerAPIView):
    def post(self, request):
        progress = get_enrollment_service().get_progress(
            self.get_profile(request), self.get_course_id(request)
        )
        data = CourseProgressSerializer(progress).data if progress else None
        return Response({"success": True, "progressData": data})


class AddRatingView(LearnerAPIView):
    def post(self, request):
        body = RatingSerializer(data=request.data)
        body.is_valid(raise_exception=True)

        get_enrollment_service().add_rating(
            self.get_profile(request),
            body.validated_data["courseId"],
            body.validated_data["rating"],
        )
        return Response({"success": True, "message": "Rating added"})
