"""
Educator Views

Authoring endpoints. All of them except `UpdateRoleView` require the educator
role claim in the Clerk session token (`IsEducator`).

Views:
- UpdateRoleView: GET /api/educator/update-role
- AddCourseView: POST /api/educator/add-course (multipart: courseData + image)
- EducatorCourseListView: GET /api/educator/courses
- EducatorCourseDeleteView: DELETE /api/educator/courses/<id>
- EducatorDashboardView: GET /api/educator/dashboard
- EnrolledStudentsView: GET /api/educator/enrolled-students

Author: Course Marketplace Team
Version: 1.0.0
"""

import logging

from rest_framework import status
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.custom_auth import EDUCATOR_ROLE
from core.clerk_integration.exceptions import ClerkException
from marketplace.courses.serializers import (
    AddCourseFormSerializer,
    CourseCreateSerializer,
    CourseSerializer,
)
from marketplace.exceptions import UpstreamServiceError
from marketplace.permissions import IsEducator
from marketplace.services import (
    get_account_service,
    get_authoring_service,
    get_clerk_client,
)

logger = logging.getLogger(__name__)


class UpdateRoleView(APIView):
    """Grants the educator role in Clerk. Takes effect with the next session token."""

    permission_classes = [IsAuthenticated]

    def get(self, request):
        try:
            get_clerk_client().set_role(request.user.id, EDUCATOR_ROLE)
        except ClerkException as exc:
            raise UpstreamServiceError(exc.message, service="clerk")
        return Response({"success": True, "message": "You can publish a course now"})


class AddCourseView(APIView):
    permission_classes = [IsEducator]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):
        form = AddCourseFormSerializer(data=request.data)
        form.is_valid(raise_exception=True)

        course_data = CourseCreateSerializer(data=form.validated_data["courseData"])
        course_data.is_valid(raise_exception=True)

        educator = get_account_service().ensure_user(request.user)
        course = get_authoring_service().create_course(
            educator, course_data.validated_data, form.validated_data["image"]
        )
        return Response(
            {"success": True, "message": "Course Added", "courseId": course.pk},
            status=status.HTTP_201_CREATED,
        )


class EducatorCourseListView(APIView):
    permission_classes = [IsEducator]

    def get(self, request):
        courses = get_authoring_service().educator_courses(request.user.id)
        return Response({"success": True, "courses": CourseSerializer(courses, many=True).data})


class EducatorCourseDeleteView(APIView):
    permission_classes = [IsEducator]

    def delete(self, request, course_id):
        get_authoring_service().delete_course(request.user.id, course_id)
        return Response({"success": True, "message": "Course deleted successfully"})


class EducatorDashboardView(APIView):
    permission_classes = [IsEducator]

    def get(self, request):
        return Response(
            {"success": True, "dashboardData": get_authoring_service().dashboard(request.user.id)}
        )


class EnrolledStudentsView(APIView):
    permission_classes = [IsEducator]

    def get(self, request):
        return Response(
            {
                "success": True,
                "enrolledStudents": get_authoring_service().enrolled_students(request.user.id),
            }
        )
