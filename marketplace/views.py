"""
Operational Views

- ApiRootView: GET / (liveness)
- DatabaseCheckView: GET /api/test-db (database connectivity and counts)

Author: Course Marketplace Team
Version: 1.0.0
"""

import logging

from django.db import DatabaseError
from django.http import HttpResponse
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from marketplace.models import Course, Purchase, User

logger = logging.getLogger(__name__)


class ApiRootView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        return HttpResponse("API Working", content_type="text/plain")


class DatabaseCheckView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        try:
            counts = {
                "courses": Course.objects.count(),
                "users": User.objects.count(),
                "purchases": Purchase.objects.count(),
            }
        except DatabaseError as exc:
            logger.error("Database check failed: %s", exc)
            return Response(
                {"success": False, "message": f"Database connection failed: {exc}"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return Response({"success": True, "message": "Database connection working", "counts": counts})
