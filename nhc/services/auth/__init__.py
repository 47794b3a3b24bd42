"""Auth services."""

from nhc.services.auth.roles import Role, UserStatus, has_role, is_org_admin, is_global_admin, can_assign_role
from nhc.services.auth.oauth_providers import (
    OAuthProfile,
    OAuthProvider,
    FacebookOAuthProvider,
    GoogleOAuthProvider,
)

__all__ = [
    "Role",
    "UserStatus",
    "has_role",
    "is_org_admin",
    "is_global_admin",
    "can_assign_role",
    "OAuthProfile",
    "OAuthProvider",
    "FacebookOAuthProvider",
    "GoogleOAuthProvider",
]
