"""RBAC adapters."""

from betterdoc.adapters.rbac.memberships_repository import MembershipsRepository
from betterdoc.adapters.rbac.memory import InMemoryMembershipsRepository

__all__ = ["InMemoryMembershipsRepository", "MembershipsRepository"]
