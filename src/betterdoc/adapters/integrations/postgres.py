"""Integration settings repository."""

from datetime import UTC
from typing import TYPE_CHECKING, Any
from uuid import UUID

from betterdoc.core.access.types import IntegrationConfig

if TYPE_CHECKING:
    from asyncpg import Connection


class IntegrationsRepository:
    """Repository for per-team integration configuration."""

    def __init__(self, conn: "Connection") -> None:
        """Initialize the repository."""
        self._conn = conn

    async def upsert_config(
        self, team_id: UUID, key: str, enabled: bool, updated_by: UUID
    ) -> IntegrationConfig:
        """Create or update a config, bumping its version on update."""
        row = await self._conn.fetchrow(
            """
            INSERT INTO integration_configs (team_id, key, enabled, config_version, updated_by)
            VALUES ($1, $2, $3, 1, $4)
            ON CONFLICT (team_id, key)
            DO UPDATE SET enabled = EXCLUDED.enabled,
                          config_version = integration_configs.config_version + 1,
                          updated_by = EXCLUDED.updated_by,
                          updated_at = NOW()
            RETURNING id, team_id, key, enabled, config_version, updated_by, updated_at
            """,
            team_id,
            key,
            enabled,
            updated_by,
        )
        return self._row_to_config(row)

    def _row_to_config(self, row: dict[str, Any]) -> IntegrationConfig:
        """Convert database row to IntegrationConfig."""
        return IntegrationConfig(
            id=row["id"],
            team_id=row["team_id"],
            key=row["key"],
            enabled=row["enabled"],
            config_version=row["config_version"],
            updated_by=row["updated_by"],
            updated_at=row["updated_at"].replace(tzinfo=UTC),
        )
