"""Team invite API routes."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, EmailStr, Field

from betterdoc.core.exceptions import InviteError, InviteNotFoundError, PermissionDeniedError
from betterdoc.core.invites import (
    Accepted,
    AlreadyAccepted,
    InviteKind,
    InviteRecord,
    InviteService,
    InviteStatus,
    RejectionReason,
)
from betterdoc.core.rbac import Role
from betterdoc.entrypoints.api.deps import get_invite_service
from betterdoc.entrypoints.api.middleware.jwt_auth import IdentityContext, verify_jwt

router = APIRouter(tags=["invites"])

# Annotated types for dependency injection
InviteServiceDep = Annotated[InviteService, Depends(get_invite_service)]
AuthDep = Annotated[IdentityContext, Depends(verify_jwt)]


class InviteCreateRequest(BaseModel):
    """Invite issuance request."""

    kind: InviteKind
    role: Role = Role.READER
    target_email: EmailStr | None = None
    max_uses: int | None = Field(default=None, ge=1)
    expires_in_days: int | None = Field(default=None, ge=1, le=90)


class InviteResponse(BaseModel):
    """Invite response. Never includes the token or its hash."""

    id: UUID
    team_id: UUID
    kind: InviteKind
    role: Role
    target_email: str | None
    status: InviteStatus
    expires_at: datetime
    max_uses: int
    use_count: int
    created_at: datetime


class IssuedInviteResponse(BaseModel):
    """Response for a newly issued invite; the only time the token is shown."""

    token: str
    join_path: str
    invite: InviteResponse


class InviteListResponse(BaseModel):
    """Response for listing invites."""

    invites: list[InviteResponse]
    total: int


class AcceptInviteResponse(BaseModel):
    """Outcome of a successful invite acceptance."""

    status: Literal["accepted", "already_accepted"]
    team_id: UUID
    role: Role | None = None


def _to_response(invite: InviteRecord) -> InviteResponse:
    return InviteResponse(
        id=invite.id,
        team_id=invite.team_id,
        kind=invite.kind,
        role=invite.role,
        target_email=invite.target_email,
        status=invite.status_at(),
        expires_at=invite.expires_at,
        max_uses=invite.max_uses,
        use_count=invite.use_count,
        created_at=invite.created_at,
    )


@router.post(
    "/teams/{team_id}/invites",
    response_model=IssuedInviteResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_invite(
    team_id: UUID,
    body: InviteCreateRequest,
    auth: AuthDep,
    service: InviteServiceDep,
) -> IssuedInviteResponse:
    """Issue an email or link invite.

    Requires the roles.assign permission in the team.
    """
    try:
        issued = await service.issue_invite(
            actor_id=auth.user_id,
            team_id=team_id,
            kind=body.kind,
            role=body.role,
            target_email=body.target_email,
            max_uses=body.max_uses,
            expires_in_days=body.expires_in_days,
        )
    except PermissionDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e)) from None
    except InviteError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None

    return IssuedInviteResponse(
        token=issued.token,
        join_path=issued.join_path,
        invite=_to_response(issued.invite),
    )


@router.get("/teams/{team_id}/invites", response_model=InviteListResponse)
async def list_invites(
    team_id: UUID,
    auth: AuthDep,
    service: InviteServiceDep,
) -> InviteListResponse:
    """List a team's invites."""
    try:
        invites = await service.list_team_invites(auth.user_id, team_id)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e)) from None

    result = [_to_response(invite) for invite in invites]
    return InviteListResponse(invites=result, total=len(result))


@router.delete(
    "/teams/{team_id}/invites/{invite_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def revoke_invite(
    team_id: UUID,
    invite_id: UUID,
    auth: AuthDep,
    service: InviteServiceDep,
) -> Response:
    """Revoke an invite."""
    try:
        await service.revoke_invite(auth.user_id, team_id, invite_id)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e)) from None
    except InviteNotFoundError:
        raise HTTPException(status_code=404, detail="Invite not found") from None

    return Response(status_code=204)


@router.post("/join/{token}", response_model=AcceptInviteResponse)
async def accept_invite(
    token: str,
    auth: AuthDep,
    service: InviteServiceDep,
) -> AcceptInviteResponse:
    """Accept an invite as the authenticated user.

    Malformed, unknown, expired and used-up invites all return the same
    404 so that token probing learns nothing.
    """
    result = await service.accept_invite(token, auth.to_verified_identity())

    if isinstance(result, Accepted):
        return AcceptInviteResponse(status="accepted", team_id=result.team_id, role=result.role)

    if isinstance(result, AlreadyAccepted):
        return AcceptInviteResponse(status="already_accepted", team_id=result.team_id)

    if result.reason == RejectionReason.IDENTITY_MISMATCH:
        raise HTTPException(status_code=403, detail=result.message)
    raise HTTPException(status_code=404, detail=result.message)
