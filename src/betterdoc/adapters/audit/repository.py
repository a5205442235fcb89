"""Audit log repository."""

import json
from typing import TYPE_CHECKING, Any
from uuid import UUID

import structlog

from betterdoc.adapters.audit.types import AuditLogCreate, AuditLogEntry

if TYPE_CHECKING:
    from asyncpg import Connection

logger = structlog.get_logger()


class AuditRepository:
    """Repository for audit log operations.

    The table is append-only: this class never updates or deletes rows.
    It shares the request's connection with the membership repository, so
    an entry recorded inside a membership transaction commits or rolls
    back together with the change it describes.
    """

    def __init__(self, conn: "Connection") -> None:
        """Initialize the repository.

        Args:
            conn: Database connection of the current request.
        """
        self._conn = conn

    async def record(self, entry: AuditLogCreate) -> UUID:
        """Record an audit log entry.

        Args:
            entry: Audit log entry to record.

        Returns:
            ID of the created entry.
        """
        query = """
            INSERT INTO audit_events (
                team_id, actor_id, actor_role, action,
                target_type, target_id, summary, metadata
            ) VALUES (
                $1, $2, $3, $4, $5, $6, $7, $8
            )
            RETURNING id
        """
        row = await self._conn.fetchrow(
            query,
            entry.team_id,
            entry.actor_id,
            entry.actor_role.value,
            entry.action.value,
            entry.target_type.value,
            entry.target_id,
            entry.summary,
            json.dumps(entry.metadata) if entry.metadata is not None else None,
        )
        result: UUID = row["id"]
        logger.debug("audit_event_inserted", audit_event_id=str(result))
        return result

    async def list_recent(self, team_id: UUID, limit: int = 20) -> list[AuditLogEntry]:
        """List a team's most recent entries.

        Args:
            team_id: Team to filter by.
            limit: Maximum entries to return.

        Returns:
            Entries, newest first.
        """
        query = """
            SELECT id, timestamp, team_id, actor_id, actor_role, action,
                   target_type, target_id, summary, metadata
            FROM audit_events
            WHERE team_id = $1
            ORDER BY timestamp DESC
            LIMIT $2
        """
        rows = await self._conn.fetch(query, team_id, limit)
        return [self._row_to_entry(row) for row in rows]

    def _row_to_entry(self, row: Any) -> AuditLogEntry:
        """Convert a database row to an AuditLogEntry."""
        metadata = row["metadata"]
        if isinstance(metadata, str):
            metadata = json.loads(metadata)
        return AuditLogEntry(
            id=row["id"],
            timestamp=row["timestamp"],
            team_id=row["team_id"],
            actor_id=row["actor_id"],
            actor_role=row["actor_role"],
            action=row["action"],
            target_type=row["target_type"],
            target_id=row["target_id"],
            summary=row["summary"],
            metadata=metadata,
        )
