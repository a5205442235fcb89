"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from uuid import UUID, uuid4

import pytest

from betterdoc.adapters.audit import InMemoryAuditLog
from betterdoc.adapters.integrations import InMemoryIntegrationRepository
from betterdoc.adapters.invites import InMemoryInviteRepository
from betterdoc.adapters.rbac import InMemoryMembershipsRepository
from betterdoc.core.access import AccessControlService
from betterdoc.core.invites import InviteService
from betterdoc.core.rbac import Role


@pytest.fixture
def anyio_backend() -> str:
    """Configure anyio to use asyncio backend."""
    return "asyncio"


@pytest.fixture
def team_id() -> UUID:
    """Team under test."""
    return uuid4()


@pytest.fixture
def admin_id() -> UUID:
    """User holding the Admin role in the team under test."""
    return uuid4()


@pytest.fixture
def memberships(team_id: UUID, admin_id: UUID) -> InMemoryMembershipsRepository:
    """Membership store seeded with one admin."""
    repo = InMemoryMembershipsRepository()
    repo.upsert_unlocked(team_id, admin_id, Role.ADMIN, assigned_by=None)
    return repo


@pytest.fixture
def invites(memberships: InMemoryMembershipsRepository) -> InMemoryInviteRepository:
    """Invite store sharing the membership store's lock."""
    return InMemoryInviteRepository(memberships)


@pytest.fixture
def audit_log() -> InMemoryAuditLog:
    """Empty audit log."""
    return InMemoryAuditLog()


@pytest.fixture
def integrations() -> InMemoryIntegrationRepository:
    """Empty integration settings store."""
    return InMemoryIntegrationRepository()


@pytest.fixture
def invite_service(
    invites: InMemoryInviteRepository,
    memberships: InMemoryMembershipsRepository,
) -> InviteService:
    """Invite service over in-memory stores."""
    return InviteService(invites, memberships)


@pytest.fixture
def access_service(
    memberships: InMemoryMembershipsRepository,
    audit_log: InMemoryAuditLog,
    integrations: InMemoryIntegrationRepository,
) -> AccessControlService:
    """Access control service over in-memory stores."""
    return AccessControlService(memberships, audit_log, integrations)
