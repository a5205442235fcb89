"""Invite service for issuing, revoking and accepting team invites."""

from uuid import UUID

import structlog

from betterdoc.core.exceptions import InviteError, InviteNotFoundError
from betterdoc.core.invites.repository import InviteRepository
from betterdoc.core.invites.tokens import (
    INVITE_EXPIRY_DAYS,
    InviteKind,
    create_invite_token,
    get_invite_expiry,
    hash_invite_token,
    is_invite_expired,
    parse_invite_token,
)
from betterdoc.core.invites.types import (
    AcceptanceResult,
    Accepted,
    AlreadyAccepted,
    ConsumeOutcome,
    InviteCreate,
    InviteRecord,
    IssuedInvite,
    Rejected,
    RejectionReason,
    VerifiedIdentity,
)
from betterdoc.core.rbac import (
    MembershipRepository,
    Permission,
    Role,
    normalize_role,
    require_permission,
)

logger = structlog.get_logger()

DEFAULT_LINK_MAX_USES = 25
JOIN_PATH_PREFIX = "/join/"


def _emails_match(verified: str, target: str) -> bool:
    return verified.strip().casefold() == target.strip().casefold()


class InviteService:
    """Service for the team invite lifecycle."""

    def __init__(
        self,
        invites: InviteRepository,
        memberships: MembershipRepository,
        expiry_days: int = INVITE_EXPIRY_DAYS,
        link_max_uses: int = DEFAULT_LINK_MAX_USES,
    ) -> None:
        """Initialize with storage collaborators.

        Args:
            invites: Invite storage.
            memberships: Team membership storage, used for actor roles.
            expiry_days: Default invite lifetime in days.
            link_max_uses: Default use bound for link invites.
        """
        self._invites = invites
        self._memberships = memberships
        self._expiry_days = expiry_days
        self._link_max_uses = link_max_uses

    async def _require_manager(self, actor_id: UUID, team_id: UUID) -> Role:
        raw_role = await self._memberships.get_member_role(team_id, actor_id)
        return require_permission(normalize_role(raw_role), Permission.ROLES_ASSIGN)

    async def issue_invite(
        self,
        actor_id: UUID,
        team_id: UUID,
        kind: InviteKind,
        role: Role = Role.READER,
        target_email: str | None = None,
        max_uses: int | None = None,
        expires_in_days: int | None = None,
    ) -> IssuedInvite:
        """Issue a new invite for a team.

        Args:
            actor_id: User issuing the invite; must hold roles.assign in the team.
            team_id: Team the invite grants membership to.
            kind: Email invites are bound to one address, link invites are shareable.
            role: Role granted on acceptance.
            target_email: Invitee address, required for email invites.
            max_uses: Use bound for link invites.
            expires_in_days: Lifetime override.

        Returns:
            IssuedInvite carrying the plaintext token. The token is not
            stored and cannot be recovered later.

        Raises:
            PermissionDeniedError: If the actor cannot assign roles.
            InviteError: If the arguments are invalid for the kind.
        """
        await self._require_manager(actor_id, team_id)

        kind = InviteKind(kind)
        if kind == InviteKind.EMAIL:
            target_email = (target_email or "").strip()
            if not target_email:
                raise InviteError("Email invites require a target email address")
            max_uses = 1
        else:
            if target_email:
                raise InviteError("Link invites cannot target an email address")
            target_email = None
            if max_uses is None:
                max_uses = self._link_max_uses
            if max_uses < 1:
                raise InviteError("max_uses must be at least 1")

        days = self._expiry_days if expires_in_days is None else expires_in_days
        if days < 1:
            raise InviteError("Invite lifetime must be at least one day")

        token = create_invite_token(kind)
        invite = await self._invites.create_invite(
            InviteCreate(
                team_id=team_id,
                kind=kind,
                token_hash=hash_invite_token(token),
                role=role,
                target_email=target_email,
                expires_at=get_invite_expiry(days),
                max_uses=max_uses,
                created_by=actor_id,
            )
        )

        logger.info(
            "invite_issued",
            invite_id=str(invite.id),
            team_id=str(team_id),
            kind=kind.value,
            role=role.value,
            max_uses=max_uses,
        )
        return IssuedInvite(token=token, join_path=f"{JOIN_PATH_PREFIX}{token}", invite=invite)

    async def list_team_invites(self, actor_id: UUID, team_id: UUID) -> list[InviteRecord]:
        """List a team's invites. Requires roles.assign."""
        await self._require_manager(actor_id, team_id)
        return await self._invites.list_team_invites(team_id)

    async def revoke_invite(self, actor_id: UUID, team_id: UUID, invite_id: UUID) -> InviteRecord:
        """Revoke an invite so it can no longer be accepted.

        Raises:
            PermissionDeniedError: If the actor cannot assign roles.
            InviteNotFoundError: If the invite is unknown or belongs to another team.
        """
        await self._require_manager(actor_id, team_id)

        invite = await self._invites.get_invite(invite_id)
        if invite is None or invite.team_id != team_id:
            raise InviteNotFoundError("Invite not found")

        if await self._invites.revoke_invite(invite_id):
            logger.info("invite_revoked", invite_id=str(invite_id), actor_id=str(actor_id))

        refreshed = await self._invites.get_invite(invite_id)
        if refreshed is None:
            raise InviteNotFoundError("Invite not found")
        return refreshed

    async def accept_invite(self, token: str, identity: VerifiedIdentity) -> AcceptanceResult:
        """Accept an invite on behalf of a verified identity.

        Malformed, unknown, revoked, expired and exhausted invites all
        produce the same rejection. Email mismatches are reported
        separately because the invitee already knows their own address.

        Args:
            token: Raw token as presented at the join endpoint.
            identity: Identity asserted by the identity provider.

        Returns:
            Accepted, AlreadyAccepted or Rejected.
        """
        parsed = parse_invite_token(token)
        if parsed is None:
            logger.warning("invite_accept_malformed_token", user_id=str(identity.user_id))
            return Rejected(RejectionReason.INVALID_OR_EXPIRED)

        token_hash = hash_invite_token(token)
        invite = await self._invites.get_invite_by_hash(token_hash)
        if invite is None:
            logger.warning("invite_accept_unknown_token", token_hash_prefix=token_hash[:12])
            return Rejected(RejectionReason.INVALID_OR_EXPIRED)

        if invite.kind != parsed.kind:
            logger.warning("invite_accept_kind_mismatch", invite_id=str(invite.id))
            return Rejected(RejectionReason.INVALID_OR_EXPIRED)

        if invite.is_revoked:
            logger.info("invite_accept_revoked", invite_id=str(invite.id))
            return Rejected(RejectionReason.INVALID_OR_EXPIRED)

        if is_invite_expired(invite.expires_at):
            logger.info("invite_accept_expired", invite_id=str(invite.id))
            return Rejected(RejectionReason.INVALID_OR_EXPIRED)

        if invite.kind == InviteKind.EMAIL and not _emails_match(
            identity.email, invite.target_email or ""
        ):
            logger.info(
                "invite_accept_identity_mismatch",
                invite_id=str(invite.id),
                user_id=str(identity.user_id),
            )
            return Rejected(RejectionReason.IDENTITY_MISMATCH)

        outcome = await self._invites.consume_invite(invite, identity.user_id)

        if outcome == ConsumeOutcome.ALREADY_MEMBER:
            logger.info(
                "invite_already_accepted",
                invite_id=str(invite.id),
                user_id=str(identity.user_id),
            )
            return AlreadyAccepted(invite_id=invite.id, team_id=invite.team_id)

        if outcome == ConsumeOutcome.UNAVAILABLE:
            logger.info("invite_accept_unavailable", invite_id=str(invite.id))
            return Rejected(RejectionReason.INVALID_OR_EXPIRED)

        logger.info(
            "invite_accepted",
            invite_id=str(invite.id),
            team_id=str(invite.team_id),
            user_id=str(identity.user_id),
            role=invite.role.value,
        )
        return Accepted(invite_id=invite.id, team_id=invite.team_id, role=invite.role)
