"""Invite repository protocol for storage operations."""

from typing import Protocol, runtime_checkable
from uuid import UUID

from betterdoc.core.invites.types import ConsumeOutcome, InviteCreate, InviteRecord


@runtime_checkable
class InviteRepository(Protocol):
    """Protocol for invite storage.

    Implementations must make consume_invite atomic with respect to other
    consume attempts on the same invite: the use-count check, the
    increment and the membership insert happen as one step.
    """

    async def create_invite(self, invite: InviteCreate) -> InviteRecord:
        """Persist a new invite."""
        ...

    async def get_invite_by_hash(self, token_hash: str) -> InviteRecord | None:
        """Look up an invite by the hash of its token."""
        ...

    async def get_invite(self, invite_id: UUID) -> InviteRecord | None:
        """Get invite by ID."""
        ...

    async def list_team_invites(self, team_id: UUID) -> list[InviteRecord]:
        """List invites of a team, newest first."""
        ...

    async def revoke_invite(self, invite_id: UUID) -> bool:
        """Mark an invite revoked. Returns False if it was already revoked."""
        ...

    async def consume_invite(self, invite: InviteRecord, user_id: UUID) -> ConsumeOutcome:
        """Atomically consume one use of an invite for a user.

        Returns ALREADY_MEMBER without consuming anything when the user
        already belongs to the invite's team, UNAVAILABLE when the invite
        is revoked, expired or out of uses, and CONSUMED after incrementing
        the use count and inserting the membership.
        """
        ...
