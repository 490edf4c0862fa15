from rest_framework.permissions import BasePermission

from marketplace.exceptions import EducatorRoleRequired

# ------------------------------------------------------------
# Educator gate: the role claim is read from the verified Clerk
# session token (see backend.custom_auth.ClerkTokenUser.role).
# ------------------------------------------------------------


def has_educator_role(user) -> bool:
    """Returns True if the authenticated identity carries the educator role."""
    return bool(getattr(user, "is_educator", False))


class IsEducator(BasePermission):
    """Allows access only to authenticated identities with the educator role."""

    message = EducatorRoleRequired.default_detail

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False

        if not has_educator_role(request.user):
            raise EducatorRoleRequired()
        return True

