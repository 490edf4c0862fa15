"""
Course Catalog Views

Public, unauthenticated read endpoints of the catalog.

Views:
- CourseListView: GET /api/courses (published courses, no lecture URLs)
- CourseDetailView: GET /api/courses/<id> (free preview URLs only)

Author: Course Marketplace Team
Version: 1.0.0
"""

from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from marketplace.services import get_catalog_service


class CourseListView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        listing = get_catalog_service().list_courses()
        return Response({"success": True, "courses": listing.courses, "source": listing.source})


class CourseDetailView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request, course_id):
        course_data = get_catalog_service().get_course(course_id)
        return Response({"success": True, "courseData": course_data})
