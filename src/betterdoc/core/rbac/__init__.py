"""RBAC core domain."""

from betterdoc.core.rbac.matrix import (
    PRIVILEGED_ACTION_PERMISSIONS,
    ROLE_PERMISSIONS,
    has_permission,
    is_privileged_action,
    normalize_role,
    permission_for_action,
    permissions_of,
    require_permission,
    role_rank,
)
from betterdoc.core.rbac.repository import MembershipRepository
from betterdoc.core.rbac.types import (
    ROLE_HIERARCHY,
    AccessProfile,
    AuditTargetType,
    Permission,
    PrivilegedAction,
    Role,
    TeamMembership,
)

__all__ = [
    "AccessProfile",
    "AuditTargetType",
    "MembershipRepository",
    "PRIVILEGED_ACTION_PERMISSIONS",
    "Permission",
    "PrivilegedAction",
    "ROLE_HIERARCHY",
    "ROLE_PERMISSIONS",
    "Role",
    "TeamMembership",
    "has_permission",
    "is_privileged_action",
    "normalize_role",
    "permission_for_action",
    "permissions_of",
    "require_permission",
    "role_rank",
]
