from .enrollment_service import EnrollmentService, parse_id

__all__ = ["EnrollmentService", "parse_id"]
