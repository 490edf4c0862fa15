"""
Clerk Backend API Client

Minimal client for the Clerk backend API used by the marketplace:

- `get_user(user_id)`: fetch a Clerk user (profile sync)
- `set_role(user_id, role)`: merge `{"role": role}` into the user's public
  metadata, which Clerk then exposes in the session token

Author: Course Marketplace Team
Version: 1.0.0
"""

import logging
from typing import Any, Dict, Optional

import requests
from django.conf import settings

from .exceptions import ClerkAPIException, ClerkConfigurationException

logger = logging.getLogger(__name__)


class ClerkClient:
    """
    Clerk backend API client authenticated with the instance secret key.

    Attributes:
        REQUEST_TIMEOUT (int): HTTP request timeout in seconds
    """

    REQUEST_TIMEOUT = 15

    def __init__(
        self,
        secret_key: Optional[str] = None,
        api_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.secret_key = secret_key if secret_key is not None else settings.CLERK_SECRET_KEY
        self.api_url = (api_url or settings.CLERK_API_URL).rstrip("/")
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        if not self.secret_key:
            raise ClerkConfigurationException("CLERK_SECRET_KEY is not configured")

        url = f"{self.api_url}{path}"
        headers = {
            "Authorization": f"Bearer {self.secret_key}",
            "Accept": "application/json",
        }

        try:
            logger.debug("Clerk API %s %s", method, url)
            response = self.session.request(
                method, url, headers=headers, timeout=self.REQUEST_TIMEOUT, **kwargs
            )
        except requests.exceptions.Timeout:
            raise ClerkAPIException(
                f"Clerk API request timed out after {self.REQUEST_TIMEOUT}s"
            )
        except requests.exceptions.RequestException as e:
            raise ClerkAPIException(f"Clerk API request failed: {str(e)}")

        if response.status_code >= 400:
            try:
                details = response.json()
            except ValueError:
                details = {"body": response.text}
            errors = details.get("errors") if isinstance(details, dict) else None
            first = errors[0] if isinstance(errors, list) and errors else None
            message = first.get("message") if isinstance(first, dict) else None
            logger.error("Clerk API %s %s -> %s: %s", method, path, response.status_code, details)
            raise ClerkAPIException(
                message or f"Clerk API returned {response.status_code}",
                status_code=response.status_code,
                details=details,
            )

        return response.json()

    def get_user(self, user_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/users/{user_id}")

    def set_role(self, user_id: str, role: str) -> Dict[str, Any]:
        """Merge the role into the user's public metadata."""
        user = self._request(
            "PATCH",
            f"/users/{user_id}/metadata",
            json={"public_metadata": {"role": role}},
        )
        logger.info("Set Clerk role of %s to %s", user_id, role)
        return user
