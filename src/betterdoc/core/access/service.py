"""Access control service: team roles, privileged actions and their audit trail."""

from typing import Any
from uuid import UUID

import structlog

from betterdoc.adapters.audit.types import AuditLogCreate, AuditLogEntry
from betterdoc.core.access.repository import AuditLog, IntegrationRepository
from betterdoc.core.access.types import (
    IntegrationChange,
    RoleAssignment,
    TipStatus,
    TipStatusChange,
)
from betterdoc.core.exceptions import (
    MemberNotFoundError,
    MembershipError,
    PermissionDeniedError,
)
from betterdoc.core.rbac import (
    AccessProfile,
    AuditTargetType,
    MembershipRepository,
    Permission,
    PrivilegedAction,
    Role,
    TeamMembership,
    normalize_role,
    permission_for_action,
    permissions_of,
    require_permission,
    role_rank,
)

logger = structlog.get_logger()

MAX_AUDIT_EVENTS = 100
DEFAULT_AUDIT_EVENTS = 20

_TIP_TRANSITIONS = {
    PrivilegedAction.TIP_PUBLISH: (TipStatus.PUBLISHED, "Published"),
    PrivilegedAction.TIP_DEPRECATE: (TipStatus.DEPRECATED, "Deprecated"),
}


class AccessControlService:
    """Service for role checks and audited privileged actions.

    Every membership change runs in one unit of work on the membership
    store: the team is locked, the actor is authorized, invariants are
    checked, and the write and its audit entry are stored together.
    """

    def __init__(
        self,
        memberships: MembershipRepository,
        audit_log: AuditLog,
        integrations: IntegrationRepository,
    ) -> None:
        """Initialize with storage collaborators.

        Args:
            memberships: Team membership storage.
            audit_log: Append-only audit log.
            integrations: Per-team integration settings.
        """
        self._memberships = memberships
        self._audit_log = audit_log
        self._integrations = integrations

    async def get_role(self, team_id: UUID, user_id: UUID) -> Role:
        """Get a user's effective role; non-members are readers."""
        raw_role = await self._memberships.get_member_role(team_id, user_id)
        return normalize_role(raw_role)

    async def get_access_profile(self, team_id: UUID, user_id: UUID) -> AccessProfile:
        """Get a user's effective role and permissions in a team."""
        raw_role = await self._memberships.get_member_role(team_id, user_id)
        role = normalize_role(raw_role)
        return AccessProfile(
            team_id=team_id,
            user_id=user_id,
            role=role,
            permissions=tuple(p for p in Permission if p in permissions_of(role)),
            is_member=raw_role is not None,
        )

    async def require(self, actor_id: UUID, team_id: UUID, permission: Permission) -> Role:
        """Get the actor's role, ensuring it holds a permission.

        Raises:
            PermissionDeniedError: If the role lacks the permission.
        """
        role = await self.get_role(team_id, actor_id)
        try:
            return require_permission(role, permission)
        except PermissionDeniedError:
            logger.warning(
                "permission_denied",
                actor_id=str(actor_id),
                team_id=str(team_id),
                role=role.value,
                permission=permission.value,
            )
            raise

    async def authorize_action(
        self, actor_id: UUID, team_id: UUID, action: PrivilegedAction
    ) -> Role:
        """Check the permission gating a privileged action."""
        return await self.require(actor_id, team_id, permission_for_action(action))

    async def record_action(
        self,
        actor_id: UUID,
        team_id: UUID,
        actor_role: Role,
        action: PrivilegedAction,
        target_type: AuditTargetType,
        target_id: str,
        summary: str,
        metadata: dict[str, Any] | None = None,
    ) -> UUID:
        """Record a completed privileged action.

        Call only after the action succeeded; the log is append-only.

        Returns:
            ID of the audit entry.
        """
        entry = AuditLogCreate(
            team_id=team_id,
            actor_id=actor_id,
            actor_role=actor_role,
            action=action,
            target_type=target_type,
            target_id=target_id,
            summary=summary,
            metadata=metadata,
        )
        audit_event_id = await self._audit_log.record(entry)
        logger.info(
            "privileged_action_recorded",
            action=action.value,
            actor_id=str(actor_id),
            target_type=target_type.value,
            target_id=target_id,
        )
        return audit_event_id

    async def list_members(self, actor_id: UUID, team_id: UUID) -> list[TeamMembership]:
        """List a team's members, highest role first, then by join time.

        Raises:
            PermissionDeniedError: If the actor is not a member of the team.
        """
        if await self._memberships.get_member_role(team_id, actor_id) is None:
            raise PermissionDeniedError(
                Role.READER, message="Team membership is required to list members."
            )
        members = await self._memberships.list_members(team_id)
        return sorted(members, key=lambda m: (-role_rank(m.role), m.created_at))

    async def assign_role(
        self,
        actor_id: UUID,
        team_id: UUID,
        target_user_id: UUID,
        role: Role,
    ) -> RoleAssignment:
        """Assign a team role to a user.

        Raises:
            PermissionDeniedError: If the actor cannot assign roles.
            MembershipError: If the change would remove the team's last admin.
        """
        async with self._memberships.transaction():
            await self._memberships.lock_team(team_id)
            actor_role = await self.authorize_action(
                actor_id, team_id, PrivilegedAction.ROLE_ASSIGN
            )

            current = await self._memberships.get_member_role(team_id, target_user_id)
            previous_role = normalize_role(current) if current is not None else None
            if previous_role == Role.ADMIN and role != Role.ADMIN:
                await self._ensure_another_admin(team_id)

            membership = await self._memberships.upsert_member(
                team_id, target_user_id, role, assigned_by=actor_id
            )
            audit_event_id = await self.record_action(
                actor_id=actor_id,
                team_id=team_id,
                actor_role=actor_role,
                action=PrivilegedAction.ROLE_ASSIGN,
                target_type=AuditTargetType.MEMBERSHIP,
                target_id=str(target_user_id),
                summary=f"Assigned {role.value} to {target_user_id}",
                metadata={
                    "previous_role": previous_role.value if previous_role else None,
                    "role": role.value,
                },
            )
        return RoleAssignment(membership=membership, audit_event_id=audit_event_id)

    async def remove_member(self, actor_id: UUID, team_id: UUID, member_id: UUID) -> UUID:
        """Remove a user from a team.

        Returns:
            ID of the audit entry.

        Raises:
            PermissionDeniedError: If the actor cannot assign roles.
            MemberNotFoundError: If the user is not a member.
            MembershipError: If the user is the team's last admin.
        """
        async with self._memberships.transaction():
            await self._memberships.lock_team(team_id)
            actor_role = await self.authorize_action(
                actor_id, team_id, PrivilegedAction.ROLE_ASSIGN
            )

            current = await self._memberships.get_member_role(team_id, member_id)
            if current is None:
                raise MemberNotFoundError("Member not found.")
            previous_role = normalize_role(current)
            if previous_role == Role.ADMIN:
                await self._ensure_another_admin(team_id)

            await self._memberships.remove_member(team_id, member_id)
            audit_event_id = await self.record_action(
                actor_id=actor_id,
                team_id=team_id,
                actor_role=actor_role,
                action=PrivilegedAction.ROLE_ASSIGN,
                target_type=AuditTargetType.MEMBERSHIP,
                target_id=str(member_id),
                summary=f"Removed {member_id} from the team",
                metadata={"previous_role": previous_role.value, "role": None},
            )
        return audit_event_id

    async def bootstrap_first_admin(self, actor_id: UUID, team_id: UUID) -> RoleAssignment:
        """Make the actor the first admin of a team with no members.

        Raises:
            PermissionDeniedError: If the team already has members.
        """
        async with self._memberships.transaction():
            await self._memberships.lock_team(team_id)
            if await self._memberships.count_members(team_id) > 0:
                raise PermissionDeniedError(
                    Role.READER,
                    message="Bootstrap admin is unavailable because memberships already exist.",
                )

            membership = await self._memberships.upsert_member(
                team_id, actor_id, Role.ADMIN, assigned_by=actor_id
            )
            audit_event_id = await self.record_action(
                actor_id=actor_id,
                team_id=team_id,
                actor_role=Role.ADMIN,
                action=PrivilegedAction.ROLE_ASSIGN,
                target_type=AuditTargetType.MEMBERSHIP,
                target_id=str(actor_id),
                summary=f"Bootstrapped first admin membership for {actor_id}",
                metadata={"previous_role": None, "role": Role.ADMIN.value},
            )
        logger.info("team_admin_bootstrapped", team_id=str(team_id), user_id=str(actor_id))
        return RoleAssignment(membership=membership, audit_event_id=audit_event_id)

    async def publish_tip(
        self, actor_id: UUID, team_id: UUID, tip_id: str, title: str
    ) -> TipStatusChange:
        """Authorize and audit publishing a tip. Requires tips.publish."""
        return await self._change_tip_status(
            actor_id, team_id, tip_id, title, PrivilegedAction.TIP_PUBLISH
        )

    async def deprecate_tip(
        self, actor_id: UUID, team_id: UUID, tip_id: str, title: str
    ) -> TipStatusChange:
        """Authorize and audit deprecating a tip. Requires tips.deprecate."""
        return await self._change_tip_status(
            actor_id, team_id, tip_id, title, PrivilegedAction.TIP_DEPRECATE
        )

    async def configure_integration(
        self, actor_id: UUID, team_id: UUID, key: str, enabled: bool
    ) -> IntegrationChange:
        """Enable or disable an integration for a team.

        Raises:
            PermissionDeniedError: If the actor cannot configure integrations.
        """
        async with self._memberships.transaction():
            actor_role = await self.authorize_action(
                actor_id, team_id, PrivilegedAction.INTEGRATION_CONFIGURE
            )
            config = await self._integrations.upsert_config(
                team_id, key, enabled, updated_by=actor_id
            )
            audit_event_id = await self.record_action(
                actor_id=actor_id,
                team_id=team_id,
                actor_role=actor_role,
                action=PrivilegedAction.INTEGRATION_CONFIGURE,
                target_type=AuditTargetType.INTEGRATION,
                target_id=str(config.id),
                summary=f'Set integration "{key}" enabled={str(enabled).lower()}',
                metadata={"key": key, "enabled": enabled, "config_version": config.config_version},
            )
        return IntegrationChange(config=config, audit_event_id=audit_event_id)

    async def list_audit_events(
        self, actor_id: UUID, team_id: UUID, limit: int = DEFAULT_AUDIT_EVENTS
    ) -> list[AuditLogEntry]:
        """List recent audit events of a team. Requires audit.read."""
        await self.require(actor_id, team_id, Permission.AUDIT_READ)
        limit = min(max(limit, 1), MAX_AUDIT_EVENTS)
        return await self._audit_log.list_recent(team_id, limit=limit)

    async def _change_tip_status(
        self,
        actor_id: UUID,
        team_id: UUID,
        tip_id: str,
        title: str,
        action: PrivilegedAction,
    ) -> TipStatusChange:
        status, verb = _TIP_TRANSITIONS[action]
        actor_role = await self.authorize_action(actor_id, team_id, action)
        audit_event_id = await self.record_action(
            actor_id=actor_id,
            team_id=team_id,
            actor_role=actor_role,
            action=action,
            target_type=AuditTargetType.TIP,
            target_id=tip_id,
            summary=f'{verb} tip "{title}"',
            metadata={"status": status.value},
        )
        return TipStatusChange(tip_id=tip_id, status=status, audit_event_id=audit_event_id)

    async def _ensure_another_admin(self, team_id: UUID) -> None:
        """Raise unless the team has more than one admin. Call under lock_team."""
        members = await self._memberships.list_members(team_id)
        if sum(1 for m in members if m.role == Role.ADMIN) <= 1:
            raise MembershipError("At least one admin must remain in the team.")
