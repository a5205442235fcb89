"""Process-local integration settings store."""

from dataclasses import replace
from datetime import UTC, datetime
from uuid import UUID, uuid4

from betterdoc.core.access.types import IntegrationConfig


class InMemoryIntegrationRepository:
    """Integration configs kept in a dict, for development and tests."""

    def __init__(self) -> None:
        self._configs: dict[tuple[UUID, str], IntegrationConfig] = {}

    async def upsert_config(
        self, team_id: UUID, key: str, enabled: bool, updated_by: UUID
    ) -> IntegrationConfig:
        now = datetime.now(UTC)
        existing = self._configs.get((team_id, key))
        if existing is None:
            config = IntegrationConfig(
                id=uuid4(),
                team_id=team_id,
                key=key,
                enabled=enabled,
                config_version=1,
                updated_by=updated_by,
                updated_at=now,
            )
        else:
            config = replace(
                existing,
                enabled=enabled,
                config_version=existing.config_version + 1,
                updated_by=updated_by,
                updated_at=now,
            )
        self._configs[(team_id, key)] = config
        return replace(config)
