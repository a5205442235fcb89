"""Integration settings adapters."""

from betterdoc.adapters.integrations.memory import InMemoryIntegrationRepository
from betterdoc.adapters.integrations.postgres import IntegrationsRepository

__all__ = ["InMemoryIntegrationRepository", "IntegrationsRepository"]
