"""Access control API routes."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from pydantic import BaseModel, Field

from betterdoc.core.access import (
    AccessControlService,
    RoleAssignment,
    TipStatus,
    TipStatusChange,
)
from betterdoc.core.exceptions import (
    MemberNotFoundError,
    MembershipError,
    PermissionDeniedError,
)
from betterdoc.core.rbac import AuditTargetType, Permission, PrivilegedAction, Role
from betterdoc.entrypoints.api.deps import get_access_service
from betterdoc.entrypoints.api.middleware.jwt_auth import IdentityContext, verify_jwt

router = APIRouter(prefix="/teams/{team_id}", tags=["access"])

# Annotated types for dependency injection
AccessServiceDep = Annotated[AccessControlService, Depends(get_access_service)]
AuthDep = Annotated[IdentityContext, Depends(verify_jwt)]


class AccessProfileResponse(BaseModel):
    """Effective role and permissions of the caller."""

    team_id: UUID
    user_id: UUID
    role: Role
    permissions: list[Permission]
    is_member: bool


class RoleAssignRequest(BaseModel):
    """Role assignment request."""

    role: Role


class RoleAssignmentResponse(BaseModel):
    """Role assignment outcome."""

    team_id: UUID
    user_id: UUID
    role: Role
    audit_event_id: UUID


class AuditEventResponse(BaseModel):
    """A single audit event."""

    id: UUID
    timestamp: datetime
    actor_id: UUID
    actor_role: Role
    action: PrivilegedAction
    target_type: AuditTargetType
    target_id: str
    summary: str
    metadata: dict[str, Any] | None = None

class AuditEventListResponse(BaseModel):
    """Recent audit events of a team."""

    items: list[AuditEventResponse]
    total: int


class MemberResponse(BaseModel):
    """A team member."""

    user_id: UUID
    role: Role
    assigned_by: UUID | None
    created_at: datetime


class MemberListResponse(BaseModel):
    """Members of a team, highest role first."""

    items: list[MemberResponse]
    total: int


class MemberRemovalResponse(BaseModel):
    """Member removal outcome."""

    team_id: UUID
    user_id: UUID
    removed: bool
    audit_event_id: UUID


class TipStatusRequest(BaseModel):
    """Tip status change request."""

    title: str = Field(min_length=1, max_length=200)


class TipStatusResponse(BaseModel):
    """Tip status change outcome."""

    tip_id: str
    status: TipStatus
    audit_event_id: UUID


class IntegrationConfigRequest(BaseModel):
    """Integration configuration request."""

    enabled: bool


class IntegrationConfigResponse(BaseModel):
    """Integration configuration outcome."""

    id: UUID
    key: str
    enabled: bool
    config_version: int
    audit_event_id: UUID


def _assignment_response(assignment: RoleAssignment) -> RoleAssignmentResponse:
    membership = assignment.membership
    return RoleAssignmentResponse(
        team_id=membership.team_id,
        user_id=membership.user_id,
        role=membership.role,
        audit_event_id=assignment.audit_event_id,
    )


@router.get("/access", response_model=AccessProfileResponse)
async def get_access_profile(
    team_id: UUID,
    auth: AuthDep,
    service: AccessServiceDep,
) -> AccessProfileResponse:
    """Get the caller's role and permissions in a team."""
    profile = await service.get_access_profile(team_id, auth.user_id)
    return AccessProfileResponse(
        team_id=profile.team_id,
        user_id=profile.user_id,
        role=profile.role,
        permissions=list(profile.permissions),
        is_member=profile.is_member,
    )


@router.put("/members/{user_id}/role", response_model=RoleAssignmentResponse)
async def assign_role(
    team_id: UUID,
    user_id: UUID,
    body: RoleAssignRequest,
    auth: AuthDep,
    service: AccessServiceDep,
) -> RoleAssignmentResponse:
    """Assign a role to a team member.

    Requires the roles.assign permission. Recorded in the audit log.
    """
    try:
        assignment = await service.assign_role(auth.user_id, team_id, user_id, body.role)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e)) from None
    except MembershipError as e:
        raise HTTPException(status_code=409, detail=str(e)) from None

    return _assignment_response(assignment)


@router.post(
    "/bootstrap-admin",
    response_model=RoleAssignmentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def bootstrap_admin(
    team_id: UUID,
    auth: AuthDep,
    service: AccessServiceDep,
) -> RoleAssignmentResponse:
    """Make the caller the first admin of a team without members."""
    try:
        assignment = await service.bootstrap_first_admin(auth.user_id, team_id)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=409, detail=str(e)) from None

    return _assignment_response(assignment)


@router.get("/audit-events", response_model=AuditEventListResponse)
async def list_audit_events(
    team_id: UUID,
    auth: AuthDep,
    service: AccessServiceDep,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> AuditEventListResponse:
    """List recent privileged actions in a team.

    Requires the audit.read permission.
    """
    try:
        entries = await service.list_audit_events(auth.user_id, team_id, limit=limit)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e)) from None

    items = [
        AuditEventResponse(
            id=entry.id,
            timestamp=entry.timestamp,
            actor_id=entry.actor_id,
            actor_role=entry.actor_role,
            action=entry.action,
            target_type=entry.target_type,
            target_id=entry.target_id,
            summary=entry.summary,
            metadata=entry.metadata,
        )
        for entry in entries
    ]
    return AuditEventListResponse(items=items, total=len(items))


@router.get("/members", response_model=MemberListResponse)
async def list_members(
    team_id: UUID,
    auth: AuthDep,
    service: AccessServiceDep,
) -> MemberListResponse:
    """List the members of a team. Only members may list them."""
    try:
        members = await service.list_members(auth.user_id, team_id)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e)) from None

    items = [
        MemberResponse(
            user_id=m.user_id,
            role=m.role,
            assigned_by=m.assigned_by,
            created_at=m.created_at,
        )
        for m in members
    ]
    return MemberListResponse(items=items, total=len(items))


@router.delete("/members/{user_id}", response_model=MemberRemovalResponse)
async def remove_member(
    team_id: UUID,
    user_id: UUID,
    auth: AuthDep,
    service: AccessServiceDep,
) -> MemberRemovalResponse:
    """Remove a member from a team.

    Requires the roles.assign permission. Recorded in the audit log.
    """
    try:
        audit_event_id = await service.remove_member(auth.user_id, team_id, user_id)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e)) from None
    except MemberNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None
    except MembershipError as e:
        raise HTTPException(status_code=409, detail=str(e)) from None

    return MemberRemovalResponse(
        team_id=team_id, user_id=user_id, removed=True, audit_event_id=audit_event_id
    )


def _tip_response(change: TipStatusChange) -> TipStatusResponse:
    return TipStatusResponse(
        tip_id=change.tip_id, status=change.status, audit_event_id=change.audit_event_id
    )


@router.post("/tips/{tip_id}/publish", response_model=TipStatusResponse)
async def publish_tip(
    team_id: UUID,
    tip_id: str,
    body: TipStatusRequest,
    auth: AuthDep,
    service: AccessServiceDep,
) -> TipStatusResponse:
    """Authorize and record publishing a tip.

    Requires the tips.publish permission. Recorded in the audit log.
    """
    try:
        change = await service.publish_tip(auth.user_id, team_id, tip_id, body.title)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e)) from None

    return _tip_response(change)


@router.post("/tips/{tip_id}/deprecate", response_model=TipStatusResponse)
async def deprecate_tip(
    team_id: UUID,
    tip_id: str,
    body: TipStatusRequest,
    auth: AuthDep,
    service: AccessServiceDep,
) -> TipStatusResponse:
    """Authorize and record deprecating a tip.

    Requires the tips.deprecate permission. Recorded in the audit log.
    """
    try:
        change = await service.deprecate_tip(auth.user_id, team_id, tip_id, body.title)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e)) from None

    return _tip_response(change)


@router.put("/integrations/{key}", response_model=IntegrationConfigResponse)
async def configure_integration(
    team_id: UUID,
    key: Annotated[str, Path(min_length=1, max_length=64, pattern=r"^[a-z0-9][a-z0-9_.-]*$")],
    body: IntegrationConfigRequest,
    auth: AuthDep,
    service: AccessServiceDep,
) -> IntegrationConfigResponse:
    """Enable or disable an integration for a team.

    Requires the integration.configure permission. Recorded in the audit log.
    """
    try:
        change = await service.configure_integration(auth.user_id, team_id, key, body.enabled)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e)) from None

    config = change.config
    return IntegrationConfigResponse(
        id=config.id,
        key=config.key,
        enabled=config.enabled,
        config_version=config.config_version,
        audit_event_id=change.audit_event_id,
    )
