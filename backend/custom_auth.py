from functools import cached_property
from typing import Any, Optional

from django.conf import settings
from rest_framework import HTTP_HEADER_ENCODING
from rest_framework.request import Request

from rest_framework_simplejwt.authentication import JWTStatelessUserAuthentication
from rest_framework_simplejwt.models import TokenUser
from rest_framework_simplejwt.tokens import Token

EDUCATOR_ROLE = "educator"


def resolve_claim(payload: Any, dotted_path: str) -> Any:
    """Walk a dotted claim path ("metadata.role") through nested token claims."""
    value = payload
    for part in dotted_path.split("."):
        if not isinstance(value, dict) and not hasattr(value, "get"):
            return None
        value = value.get(part)
        if value is None:
            return None
    return value


class ClerkTokenUser(TokenUser):
    """
    Stateless user built from a verified Clerk session token.

    The id is the Clerk user id (`sub`); profile claims are optional and only
    present when the Clerk session template adds them.
    """

    @cached_property
    def username(self) -> str:
        return self.id

    @cached_property
    def role(self) -> Optional[str]:
        return resolve_claim(self.token, settings.CLERK_ROLE_CLAIM)

    @property
    def is_educator(self) -> bool:
        return self.role == EDUCATOR_ROLE

    @cached_property
    def email(self) -> str:
        return self.token.get("email", "") or ""

    @cached_property
    def full_name(self) -> str:
        return self.token.get("name", "") or ""

    @cached_property
    def image_url(self) -> str:
        return self.token.get("image_url", "") or ""


class ClerkJWTAuthentication(JWTStatelessUserAuthentication):
    """
    Clerk session authentication. Reads the token from the Authorization header
    and falls back to the `__session` cookie Clerk sets for same-site frontends.
    Everything else (signature, expiry, issuer) is handled by simplejwt.
    """

    www_authenticate_realm = "api"
    media_type = "application/json"

    def authenticate(self, request: Request) -> Optional[tuple[TokenUser, Token]]:
        header = self.get_header(request)
        if header is not None:
            raw_token = self.get_raw_token(header)
        else:
            cookie = request.COOKIES.get(settings.CLERK_SESSION_COOKIE) or None
            raw_token = cookie.encode(HTTP_HEADER_ENCODING) if cookie else None

        if raw_token is None:
            return None

        validated_token = self.get_validated_token(raw_token)

        return self.get_user(validated_token), validated_token
