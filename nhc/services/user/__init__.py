"""User services."""

from nhc.services.user.user_service import UserService

__all__ = [
    "UserService",
]
