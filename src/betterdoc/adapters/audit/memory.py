"""Process-local audit log."""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from betterdoc.adapters.audit.types import AuditLogCreate, AuditLogEntry


class InMemoryAuditLog:
    """Append-only audit log kept in a list, for development and tests."""

    def __init__(self) -> None:
        self.entries: list[AuditLogEntry] = []

    async def record(self, entry: AuditLogCreate) -> UUID:
        stored = AuditLogEntry(id=uuid4(), timestamp=datetime.now(UTC), **entry.model_dump())
        self.entries.append(stored)
        return stored.id

    async def list_recent(self, team_id: UUID, limit: int = 20) -> list[AuditLogEntry]:
        matching = [e for e in self.entries if e.team_id == team_id]
        return list(reversed(matching))[:limit]
