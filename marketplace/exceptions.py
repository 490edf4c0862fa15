"""
Marketplace API Exceptions

All domain errors are DRF `APIException` subclasses so views can simply raise
them. `api_exception_handler` renders every error in the envelope the client
expects:

    {"success": false, "message": "Course not found"}

Validation errors additionally carry the field errors under `errors`.

Author: Course Marketplace Team
Version: 1.0.0
"""

import logging
from typing import Any, Optional

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class EducatorRoleRequired(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Unauthorized Access: educator role required"
    default_code = "educator_role_required"


class NotCourseOwner(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You are not authorized to delete this course"
    default_code = "not_course_owner"


class CourseNotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Course not found"
    default_code = "course_not_found"


class UserNotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "User not found"
    default_code = "user_not_found"


class PurchaseNotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Purchase not found"
    default_code = "purchase_not_found"


class AlreadyEnrolled(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "You are already enrolled in this course"
    default_code = "already_enrolled"


class NotEnrolled(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "You are not enrolled in this course"
    default_code = "not_enrolled"


class CourseHasEnrolledStudents(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Cannot delete a course with enrolled students"
    default_code = "course_has_enrolled_students"


class UpstreamServiceError(APIException):
    """A payment, identity or storage provider call failed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Upstream service error"
    default_code = "upstream_error"

    def __init__(self, detail: Optional[str] = None, service: str = "") -> None:
        self.service = service
        super().__init__(detail)


class WebhookSignatureError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Webhook signature verification failed"
    default_code = "invalid_signature"


def _first_message(detail: Any) -> str:
    """Pick the first human readable message out of a DRF error structure."""
    if isinstance(detail, dict):
        for key, value in detail.items():
            message = _first_message(value)
            if key in ("detail", "non_field_errors"):
                return message
            return f"{key}: {message}"
        return ""
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ""
    return str(detail)


def api_exception_handler(exc: Exception, context: dict) -> Optional[Response]:
    """
    DRF exception handler producing `{"success": false, "message": ...}`.

    Unknown exceptions are logged and answered with a 500 envelope.
    """
    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.exception(
            "Unhandled error in %s: %s", view.__class__.__name__ if view else "view", exc
        )
        return Response(
            {"success": False, "message": "Internal server error"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    body = {"success": False, "message": _first_message(response.data)}
    if isinstance(exc, ValidationError):
        body["errors"] = response.data
    elif isinstance(exc, Http404):
        body["message"] = "Not found"
    response.data = body
    return response
