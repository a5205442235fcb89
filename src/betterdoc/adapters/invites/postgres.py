"""Invites repository."""

import logging
from datetime import UTC
from typing import TYPE_CHECKING, Any
from uuid import UUID

from betterdoc.core.invites import ConsumeOutcome, InviteCreate, InviteKind, InviteRecord
from betterdoc.core.rbac import normalize_role

if TYPE_CHECKING:
    from asyncpg import Connection

logger = logging.getLogger(__name__)


class _JoinedConcurrentlyError(Exception):
    """Membership appeared after the check; aborts the consume transaction."""


_INVITE_COLUMNS = """
    id, team_id, kind, token_hash, role, target_email, expires_at, max_uses,
    use_count, created_by, created_at, revoked_at, last_accepted_at
"""


class InvitesRepository:
    """Repository for team invite operations."""

    def __init__(self, conn: "Connection") -> None:
        """Initialize the repository."""
        self._conn = conn

    async def create_invite(self, invite: InviteCreate) -> InviteRecord:
        """Persist a new invite."""
        row = await self._conn.fetchrow(
            f"""
            INSERT INTO team_invites
                (team_id, kind, token_hash, role, target_email, expires_at, max_uses, created_by)
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
            RETURNING {_INVITE_COLUMNS}
            """,
            invite.team_id,
            invite.kind.value,
            invite.token_hash,
            invite.role.value,
            invite.target_email,
            invite.expires_at,
            invite.max_uses,
            invite.created_by,
        )
        return self._row_to_invite(row)

    async def get_invite_by_hash(self, token_hash: str) -> InviteRecord | None:
        """Look up an invite by token hash."""
        row = await self._conn.fetchrow(
            f"SELECT {_INVITE_COLUMNS} FROM team_invites WHERE token_hash = $1",
            token_hash,
        )
        if not row:
            return None
        return self._row_to_invite(row)

    async def get_invite(self, invite_id: UUID) -> InviteRecord | None:
        """Get invite by ID."""
        row = await self._conn.fetchrow(
            f"SELECT {_INVITE_COLUMNS} FROM team_invites WHERE id = $1",
            invite_id,
        )
        if not row:
            return None
        return self._row_to_invite(row)

    async def list_team_invites(self, team_id: UUID) -> list[InviteRecord]:
        """List invites of a team, newest first."""
        rows = await self._conn.fetch(
            f"""
            SELECT {_INVITE_COLUMNS} FROM team_invites
            WHERE team_id = $1 ORDER BY created_at DESC
            """,
            team_id,
        )
        return [self._row_to_invite(row) for row in rows]

    async def revoke_invite(self, invite_id: UUID) -> bool:
        """Mark an invite revoked."""
        result: str = await self._conn.execute(
            "UPDATE team_invites SET revoked_at = NOW() WHERE id = $1 AND revoked_at IS NULL",
            invite_id,
        )
        return result == "UPDATE 1"

    async def consume_invite(self, invite: InviteRecord, user_id: UUID) -> ConsumeOutcome:
        """Atomically consume one use of an invite.

        The invite row is locked for the duration of the transaction, so
        concurrent acceptances of the same invite are serialized and the
        guarded increment can never exceed max_uses. If the user joined the
        team through another invite in the meantime, the increment is rolled
        back and ALREADY_MEMBER is returned.
        """
        try:
            async with self._conn.transaction():
                locked = await self._conn.fetchval(
                    "SELECT id FROM team_invites WHERE id = $1 FOR UPDATE",
                    invite.id,
                )
                if locked is None:
                    return ConsumeOutcome.UNAVAILABLE

                is_member = await self._conn.fetchval(
                    "SELECT 1 FROM team_memberships WHERE team_id = $1 AND user_id = $2",
                    invite.team_id,
                    user_id,
                )
                if is_member:
                    return ConsumeOutcome.ALREADY_MEMBER

                use_count = await self._conn.fetchval(
                    """
                    UPDATE team_invites
                    SET use_count = use_count + 1, last_accepted_at = NOW()
                    WHERE id = $1
                      AND revoked_at IS NULL
                      AND expires_at > NOW()
                      AND use_count < max_uses
                    RETURNING use_count
                    """,
                    invite.id,
                )
                if use_count is None:
                    return ConsumeOutcome.UNAVAILABLE

                result: str = await self._conn.execute(
                    """
                    INSERT INTO team_memberships (team_id, user_id, role, assigned_by)
                    VALUES ($1, $2, $3, $4)
                    ON CONFLICT (team_id, user_id) DO NOTHING
                    """,
                    invite.team_id,
                    user_id,
                    invite.role.value,
                    invite.created_by,
                )
                if result == "INSERT 0 0":
                    raise _JoinedConcurrentlyError
                logger.debug(f"Consumed invite {invite.id} ({use_count}/{invite.max_uses})")
                return ConsumeOutcome.CONSUMED
        except _JoinedConcurrentlyError:
            logger.debug(f"User {user_id} joined team {invite.team_id} concurrently")
            return ConsumeOutcome.ALREADY_MEMBER

    def _row_to_invite(self, row: dict[str, Any]) -> InviteRecord:
        """Convert database row to InviteRecord."""
        return InviteRecord(
            id=row["id"],
            team_id=row["team_id"],
            kind=InviteKind(row["kind"]),
            token_hash=row["token_hash"],
            role=normalize_role(row["role"]),
            target_email=row["target_email"],
            expires_at=row["expires_at"].replace(tzinfo=UTC),
            max_uses=row["max_uses"],
            use_count=row["use_count"],
            created_by=row["created_by"],
            created_at=row["created_at"].replace(tzinfo=UTC),
            revoked_at=row["revoked_at"].replace(tzinfo=UTC) if row["revoked_at"] else None,
            last_accepted_at=(
                row["last_accepted_at"].replace(tzinfo=UTC) if row["last_accepted_at"] else None
            ),
        )
