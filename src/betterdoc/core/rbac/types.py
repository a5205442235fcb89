"""RBAC domain types."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID


class Role(str, Enum):
    """Team roles, ordered by increasing capability."""

    READER = "Reader"
    CONTRIBUTOR = "Contributor"
    REVIEWER = "Reviewer"
    ADMIN = "Admin"


class Permission(str, Enum):
    """Atomic capabilities a role may hold."""

    TIPS_READ = "tips.read"
    TIPS_CREATE = "tips.create"
    TIPS_PUBLISH = "tips.publish"
    TIPS_DEPRECATE = "tips.deprecate"
    ROLES_ASSIGN = "roles.assign"
    INTEGRATION_CONFIGURE = "integration.configure"
    AUDIT_READ = "audit.read"


class PrivilegedAction(str, Enum):
    """Permission-gated actions that must be recorded in the audit log."""

    TIP_PUBLISH = "tip.publish"
    TIP_DEPRECATE = "tip.deprecate"
    ROLE_ASSIGN = "role.assign"
    INTEGRATION_CONFIGURE = "integration.configure"


class AuditTargetType(str, Enum):
    """Entity types a privileged action can target."""

    TIP = "tip"
    MEMBERSHIP = "membership"
    INTEGRATION = "integration"


# Lowest to highest; each role holds every permission of the roles before it.
ROLE_HIERARCHY: tuple[Role, ...] = (
    Role.READER,
    Role.CONTRIBUTOR,
    Role.REVIEWER,
    Role.ADMIN,
)


@dataclass
class TeamMembership:
    """A user's role within a team."""

    team_id: UUID
    user_id: UUID
    role: Role
    assigned_by: UUID | None
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class AccessProfile:
    """Effective role and permissions of a user in a team."""

    team_id: UUID
    user_id: UUID
    role: Role
    permissions: tuple[Permission, ...]
    is_member: bool
