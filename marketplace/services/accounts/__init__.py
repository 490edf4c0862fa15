from .account_service import AccountService, profile_from_clerk_user

__all__ = ["AccountService", "profile_from_clerk_user"]
