"""
Learner Views

Authenticated endpoints of the current user. The local user row is created
on first access from the Clerk identity.

Views:
- UserDataView: GET /api/user/data
- EnrolledCoursesView: GET /api/user/enrolled-courses
- PurchaseCourseView: POST /api/user/purchase
- DirectEnrollView: POST /api/user/direct-enroll
- UnenrollView: POST /api/user/unenroll
- EnrollmentStatusView: GET /api/user/enrollment-status/<courseId>

Author: Course Marketplace Team
Version: 1.0.0
"""

from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from marketplace.courses.serializers import CourseSerializer
from marketplace.services import (
    get_account_service,
    get_checkout_service,
    get_enrollment_service,
)
from marketplace.users.serializers import CourseIdSerializer, UserSerializer


class LearnerAPIView(APIView):
    """Base view resolving `request.user` to the local user row."""

    permission_classes = [IsAuthenticated]

    def get_profile(self, request):
        return get_account_service().ensure_user(request.user)

    def get_course_id(self, request):
        serializer = CourseIdSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data["courseId"]


class UserDataView(LearnerAPIView):
    def get(self, request):
        return Response({"success": True, "user": UserSerializer(self.get_profile(request)).data})


class EnrolledCoursesView(LearnerAPIView):
    def get(self, request):
        courses = get_enrollment_service().enrolled_courses(self.get_profile(request))
        return Response({"success": True, "enrolledCourses": CourseSerializer(courses, many=True).data})


class PurchaseCourseView(LearnerAPIView):
    def post(self, request):
        course_id = self.get_course_id(request)
        result = get_checkout_service().purchase(
            self.get_profile(request), course_id, origin=request.headers.get("Origin")
        )
        if result.redirect_url:
            return Response(
                {"success": True, "message": "Enrollment successful", "redirectUrl": result.redirect_url}
            )
        return Response({"success": True, "session_url": result.session_url})


class DirectEnrollView(LearnerAPIView):
    def post(self, request):
        course_id = self.get_course_id(request)
        purchase = get_enrollment_service().direct_enroll(self.get_profile(request), course_id)
        return Response(
            {
                "success": True,
                "message": "Successfully enrolled in the course",
                "purchaseId": purchase.pk,
            }
        )


class UnenrollView(LearnerAPIView):
    def post(self, request):
        course_id = self.get_course_id(request)
        get_enrollment_service().unenroll(self.get_profile(request), course_id)
        return Response({"success": True, "message": "Successfully unenrolled from the course"})


class EnrollmentStatusView(LearnerAPIView):
    def get(self, request, course_id):
        status = get_enrollment_service().enrollment_status(self.get_profile(request), course_id)
        return Response({"success": True, **status})
