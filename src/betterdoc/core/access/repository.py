"""Storage protocols consumed by access control."""

from typing import Protocol, runtime_checkable
from uuid import UUID

from betterdoc.adapters.audit.types import AuditLogCreate, AuditLogEntry
from betterdoc.core.access.types import IntegrationConfig


@runtime_checkable
class AuditLog(Protocol):
    """Append-only store of privileged action records."""

    async def record(self, entry: AuditLogCreate) -> UUID:
        """Record an audit log entry and return its ID."""
        ...

    async def list_recent(self, team_id: UUID, limit: int = 20) -> list[AuditLogEntry]:
        """List a team's most recent entries, newest first."""
        ...


@runtime_checkable
class IntegrationRepository(Protocol):
    """Per-team integration settings."""

    async def upsert_config(
        self, team_id: UUID, key: str, enabled: bool, updated_by: UUID
    ) -> IntegrationConfig:
        """Create a config at version 1, or update it and bump its version."""
        ...
