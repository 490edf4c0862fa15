"""
Account Service for the Course Marketplace

Keeps the local `User` mirror in sync with Clerk identities.

Two entry points create or change user rows:
- First authenticated access (`ensure_user`): the row is created from the
  session token claims, completed from the Clerk backend API when the token
  carries no profile claims.
- Clerk webhooks (`upsert_from_clerk`, `delete_user`).

Author: Course Marketplace Team
Version: 1.0.0
"""

import logging
from typing import Any, Dict, Optional

from django.db import transaction

from core.clerk_integration.client import ClerkClient
from core.clerk_integration.exceptions import ClerkException
from marketplace.models import DEFAULT_AVATAR_URL, User

logger = logging.getLogger(__name__)

DEFAULT_USER_NAME = "User"


def profile_from_clerk_user(data: Dict[str, Any]) -> Dict[str, str]:
    """
    Map a Clerk user object (API response or webhook `data`) to User fields.

    Example:
        >>> profile_from_clerk_user({"first_name": "Ada", "last_name": "Lovelace",
        ...     "email_addresses": [{"email_address": "ada@example.com"}]})["name"]
        'Ada Lovelace'
    """
    first = (data.get("first_name") or "").strip()
    last = (data.get("last_name") or "").strip()
    name = " ".join(part for part in (first, last) if part) or data.get("username") or ""

    email = ""
    addresses = data.get("email_addresses") or []
    primary_id = data.get("primary_email_address_id")
    for address in addresses:
        if primary_id is None or address.get("id") == primary_id:
            email = address.get("email_address") or ""
            break
    if not email and addresses:
        email = addresses[0].get("email_address") or ""

    return {
        "name": name or DEFAULT_USER_NAME,
        "email": email,
        "image_url": data.get("image_url") or DEFAULT_AVATAR_URL,
    }


class AccountService:
    """Creates, updates and deletes local user rows."""

    def __init__(self, clerk: Optional[ClerkClient] = None) -> None:
        self.clerk = clerk

    def _profile_for_identity(self, identity) -> Dict[str, str]:
        profile = {
            "name": getattr(identity, "full_name", "") or "",
            "email": getattr(identity, "email", "") or "",
            "image_url": getattr(identity, "image_url", "") or "",
        }
        if not profile["name"] and self.clerk is not None:
            try:
                return profile_from_clerk_user(self.clerk.get_user(identity.id))
            except ClerkException as exc:
                logger.warning("Could not load Clerk profile of %s: %s", identity.id, exc)

        profile["name"] = profile["name"] or DEFAULT_USER_NAME
        profile["image_url"] = profile["image_url"] or DEFAULT_AVATAR_URL
        return profile

    def ensure_user(self, identity) -> User:
        """
        Fetch the user row of an authenticated identity, creating it if missing.
        """
        user = User.objects.filter(pk=identity.id).first()
        if user is not None:
            return user

        profile = self._profile_for_identity(identity)
        with transaction.atomic():
            user, created = User.objects.get_or_create(pk=identity.id, defaults=profile)
        if created:
            logger.info("Created user %s on first access", user.pk)
        return user

    def upsert_from_clerk(self, data: Dict[str, Any]) -> User:
        """Create or update a user from a Clerk `user.created`/`user.updated` payload."""
        user_id = data.get("id")
        if not user_id:
            raise ValueError("Clerk user payload has no id")

        with transaction.atomic():
            user, created = User.objects.update_or_create(
                pk=user_id, defaults=profile_from_clerk_user(data)
            )
        logger.info("%s user %s from Clerk", "Created" if created else "Updated", user_id)
        return user

    def delete_user(self, user_id: str) -> bool:
        """
        Delete a user and everything that cascades from it (enrollments,
        progress, ratings, purchases). Authored courses are kept without owner.
        """
        deleted, _ = User.objects.filter(pk=user_id).delete()
        if deleted:
            logger.info("Deleted user %s (%s rows)", user_id, deleted)
        else:
            logger.info("User %s already absent", user_id)
        return bool(deleted)
