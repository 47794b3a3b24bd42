"""
User roles and account statuses.

Roles form a strict hierarchy; a caller satisfies a requirement when
their role ranks at or above the required one. Unknown role strings
never satisfy any requirement.
"""

from enum import Enum
from typing import Optional, Union


class Role(str, Enum):
    USER = "user"
    ORG_ADMIN = "org_admin"
    ORG_SUPER_ADMIN = "org_super_admin"
    GLOBAL_ADMIN = "global_admin"
    GLOBAL_SUPER_ADMIN = "global_super_admin"


class UserStatus(str, Enum):
    UNKNOWN = "unknown"
    UNCONFIRMED = "unconfirmed"
    UNREGISTERED = "unregistered"
    REGISTERED = "registered"
    PENDING = "pending"


ROLE_HIERARCHY = (
    Role.USER,
    Role.ORG_ADMIN,
    Role.ORG_SUPER_ADMIN,
    Role.GLOBAL_ADMIN,
    Role.GLOBAL_SUPER_ADMIN,
)

# Roles an organization-scoped admin may address in bulk messages
ORG_SCOPED_ROLES = (Role.USER, Role.ORG_ADMIN, Role.ORG_SUPER_ADMIN)


def parse_role(value: Union[str, Role, None]) -> Optional[Role]:
    """Return the Role for a stored value, or None if it isn't one."""
    if isinstance(value, Role):
        return value
    try:
        return Role(value)
    except ValueError:
        return None


def role_rank(value: Union[str, Role, None]) -> int:
    """Position of a role in the hierarchy; -1 for unknown roles."""
    role = parse_role(value)
    if role is None:
        return -1
    return ROLE_HIERARCHY.index(role)


def has_role(user_role: Union[str, Role, None], required: Role) -> bool:
    """Check whether user_role ranks at or above the required role."""
    rank = role_rank(user_role)
    return rank >= 0 and rank >= ROLE_HIERARCHY.index(required)


def is_org_admin(user_role: Union[str, Role, None]) -> bool:
    """Any administrative role, organization-scoped or global."""
    return has_role(user_role, Role.ORG_ADMIN)


def is_global_admin(user_role: Union[str, Role, None]) -> bool:
    return has_role(user_role, Role.GLOBAL_ADMIN)


def can_assign_role(actor_role: Union[str, Role, None], target_role: Union[str, Role, None]) -> bool:
    """An actor may only hand out roles at or below its own."""
    target_rank = role_rank(target_role)
    return target_rank >= 0 and role_rank(actor_role) >= target_rank
