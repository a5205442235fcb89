"""Static role/permission matrix.

Every (role, permission) pair is answered by table lookup so the matrix
can be audited entry by entry and its monotonicity checked mechanically.

- Reader: tips.read
- Contributor: tips.read, tips.create
- Reviewer: tips.read, tips.create, tips.publish, tips.deprecate, audit.read
- Admin: all Reviewer capabilities + roles.assign + integration.configure
"""

from betterdoc.core.exceptions import PermissionDeniedError
from betterdoc.core.rbac.types import ROLE_HIERARCHY, Permission, PrivilegedAction, Role

ROLE_PERMISSIONS: dict[Role, tuple[Permission, ...]] = {
    Role.READER: (Permission.TIPS_READ,),
    Role.CONTRIBUTOR: (
        Permission.TIPS_READ,
        Permission.TIPS_CREATE,
    ),
    Role.REVIEWER: (
        Permission.TIPS_READ,
        Permission.TIPS_CREATE,
        Permission.TIPS_PUBLISH,
        Permission.TIPS_DEPRECATE,
        Permission.AUDIT_READ,
    ),
    Role.ADMIN: (
        Permission.TIPS_READ,
        Permission.TIPS_CREATE,
        Permission.TIPS_PUBLISH,
        Permission.TIPS_DEPRECATE,
        Permission.ROLES_ASSIGN,
        Permission.INTEGRATION_CONFIGURE,
        Permission.AUDIT_READ,
    ),
}

PRIVILEGED_ACTION_PERMISSIONS: dict[PrivilegedAction, Permission] = {
    PrivilegedAction.TIP_PUBLISH: Permission.TIPS_PUBLISH,
    PrivilegedAction.TIP_DEPRECATE: Permission.TIPS_DEPRECATE,
    PrivilegedAction.ROLE_ASSIGN: Permission.ROLES_ASSIGN,
    PrivilegedAction.INTEGRATION_CONFIGURE: Permission.INTEGRATION_CONFIGURE,
}

LOWEST_ROLE = ROLE_HIERARCHY[0]

_ROLES_BY_NAME = {role.value: role for role in Role}
_PRIVILEGED_ACTIONS_BY_NAME = {action.value: action for action in PrivilegedAction}


def permissions_of(role: Role) -> frozenset[Permission]:
    """Get the fixed permission set of a role."""
    return frozenset(ROLE_PERMISSIONS[role])


def has_permission(role: Role, permission: Permission) -> bool:
    """Check whether a role holds a permission."""
    return permission in ROLE_PERMISSIONS[role]


def normalize_role(value: str | None) -> Role:
    """Interpret untrusted role data, failing closed to least privilege.

    Only an exact, case-sensitive role name is accepted. Missing,
    empty or unknown values map to the lowest role.

    Args:
        value: Raw role value from storage or a request.

    Returns:
        The matching Role, or Role.READER.
    """
    if not value:
        return LOWEST_ROLE
    if isinstance(value, Role):
        return value
    return _ROLES_BY_NAME.get(value, LOWEST_ROLE)


def require_permission(role: Role, permission: Permission) -> Role:
    """Ensure a role holds a permission.

    Args:
        role: The actor's effective role.
        permission: Permission the operation requires.

    Returns:
        The role, for chaining into audit records.

    Raises:
        PermissionDeniedError: If the role lacks the permission.
    """
    if not has_permission(role, permission):
        raise PermissionDeniedError(role, permission)
    return role


def permission_for_action(action: PrivilegedAction) -> Permission:
    """Get the permission that gates a privileged action."""
    return PRIVILEGED_ACTION_PERMISSIONS[action]


def is_privileged_action(value: str) -> bool:
    """Check whether an action name must be audited."""
    return value in _PRIVILEGED_ACTIONS_BY_NAME


def role_rank(role: Role) -> int:
    """Position of a role in the capability ordering (0 is lowest)."""
    return ROLE_HIERARCHY.index(role)
