"""Team memberships repository."""

import logging
from datetime import UTC
from typing import TYPE_CHECKING, Any
from uuid import UUID

from betterdoc.core.rbac import Role, TeamMembership, normalize_role

if TYPE_CHECKING:
    from asyncpg import Connection
    from asyncpg.transaction import Transaction

logger = logging.getLogger(__name__)


class MembershipsRepository:
    """Repository for team membership operations."""

    def __init__(self, conn: "Connection") -> None:
        """Initialize the repository."""
        self._conn = conn

    def transaction(self) -> "Transaction":
        """Start a transaction on the request's connection."""
        return self._conn.transaction()

    async def lock_team(self, team_id: UUID) -> None:
        """Take a transaction-scoped advisory lock on the team."""
        await self._conn.execute(
            "SELECT pg_advisory_xact_lock(hashtextextended($1, 0))",
            str(team_id),
        )

    async def get_member_role(self, team_id: UUID, user_id: UUID) -> str | None:
        """Get the stored role of a user in a team."""
        role: str | None = await self._conn.fetchval(
            "SELECT role FROM team_memberships WHERE team_id = $1 AND user_id = $2",
            team_id,
            user_id,
        )
        return role

    async def upsert_member(
        self,
        team_id: UUID,
        user_id: UUID,
        role: Role,
        assigned_by: UUID | None,
    ) -> TeamMembership:
        """Create or update a membership."""
        row = await self._conn.fetchrow(
            """
            INSERT INTO team_memberships (team_id, user_id, role, assigned_by)
            VALUES ($1, $2, $3, $4)
            ON CONFLICT (team_id, user_id)
            DO UPDATE SET role = EXCLUDED.role,
                          assigned_by = EXCLUDED.assigned_by,
                          updated_at = NOW()
            RETURNING team_id, user_id, role, assigned_by, created_at, updated_at
            """,
            team_id,
            user_id,
            role.value,
            assigned_by,
        )
        return self._row_to_membership(row)

    async def remove_member(self, team_id: UUID, user_id: UUID) -> bool:
        """Delete a membership."""
        result: str = await self._conn.execute(
            "DELETE FROM team_memberships WHERE team_id = $1 AND user_id = $2",
            team_id,
            user_id,
        )
        return result == "DELETE 1"

    async def count_members(self, team_id: UUID) -> int:
        """Count members of a team."""
        count: int = await self._conn.fetchval(
            "SELECT COUNT(*) FROM team_memberships WHERE team_id = $1",
            team_id,
        )
        return count

    async def list_members(self, team_id: UUID) -> list[TeamMembership]:
        """List memberships of a team."""
        rows = await self._conn.fetch(
            """
            SELECT team_id, user_id, role, assigned_by, created_at, updated_at
            FROM team_memberships WHERE team_id = $1 ORDER BY created_at
            """,
            team_id,
        )
        return [self._row_to_membership(row) for row in rows]

    def _row_to_membership(self, row: dict[str, Any]) -> TeamMembership:
        """Convert database row to TeamMembership."""
        role = normalize_role(row["role"])
        if role.value != row["role"]:
            logger.warning(f"Unrecognized role {row['role']!r} for user {row['user_id']}")
        return TeamMembership(
            team_id=row["team_id"],
            user_id=row["user_id"],
            role=role,
            assigned_by=row["assigned_by"],
            created_at=row["created_at"].replace(tzinfo=UTC),
            updated_at=row["updated_at"].replace(tzinfo=UTC),
        )
