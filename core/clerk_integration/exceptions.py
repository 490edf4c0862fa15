"""
Clerk Integration Custom Exceptions

Errors raised by the Clerk backend API client and the Clerk webhook receiver.

Author: Course Marketplace Team
Version: 1.0.0
"""

from typing import Any, Dict, Optional


class ClerkException(Exception):
    """
    Base exception class for all Clerk related errors.

    Attributes:
        message (str): Human-readable error message
        status_code (Optional[int]): HTTP status code if applicable
        details (Dict[str, Any]): Error payload returned by Clerk
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "status_code": self.status_code,
            "details": self.details,
            "exception_type": self.__class__.__name__,
        }


class ClerkAPIException(ClerkException):
    """A call to the Clerk backend API failed or returned an error status."""


class ClerkConfigurationException(ClerkException):
    """A required Clerk setting (secret key, webhook secret) is missing."""
