"""Dependency injection and application lifespan management."""

from __future__ import annotations

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from fastapi import Request

from betterdoc.adapters.audit import AuditRepository, InMemoryAuditLog
from betterdoc.adapters.db import AppDatabase
from betterdoc.adapters.integrations import InMemoryIntegrationRepository, IntegrationsRepository
from betterdoc.adapters.invites import InMemoryInviteRepository, InvitesRepository
from betterdoc.adapters.rbac import InMemoryMembershipsRepository, MembershipsRepository
from betterdoc.core.access import AccessControlService
from betterdoc.core.invites import InviteService
from betterdoc.core.invites.service import DEFAULT_LINK_MAX_USES
from betterdoc.core.invites.tokens import INVITE_EXPIRY_DAYS

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = structlog.get_logger()

STORAGE_POSTGRES = "postgres"
STORAGE_MEMORY = "memory"


class Settings:
    """Application settings loaded from environment."""

    def __init__(self) -> None:
        """Load settings from environment variables."""
        self.database_url = os.getenv("DATABASE_URL", "postgresql://localhost:5432/betterdoc")
        self.storage_backend = os.getenv("STORAGE_BACKEND", STORAGE_POSTGRES).lower()
        self.apply_schema = os.getenv("APPLY_SCHEMA", "false").lower() == "true"

        # Invite settings
        self.invite_expiry_days = int(os.getenv("INVITE_EXPIRY_DAYS", str(INVITE_EXPIRY_DAYS)))
        self.invite_link_max_uses = int(
            os.getenv("INVITE_LINK_MAX_USES", str(DEFAULT_LINK_MAX_USES))
        )


settings = Settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan - setup and teardown.

    This context manager handles:
    - Database connection pool setup (postgres backend)
    - Process-local stores (memory backend)
    """
    app.state.settings = settings

    if settings.storage_backend == STORAGE_MEMORY:
        memberships = InMemoryMembershipsRepository()
        app.state.memberships = memberships
        app.state.invites = InMemoryInviteRepository(memberships)
        app.state.audit_log = InMemoryAuditLog()
        app.state.integrations = InMemoryIntegrationRepository()
        logger.warning("using_memory_storage")
        yield
        return

    app_db = AppDatabase(settings.database_url)
    await app_db.connect()
    if settings.apply_schema:
        await app_db.apply_schema()
    app.state.app_db = app_db

    try:
        yield
    finally:
        await app_db.close()


def get_settings(request: Request) -> Settings:
    """Get settings from app state."""
    app_settings: Settings = getattr(request.app.state, "settings", settings)
    return app_settings


async def get_invite_service(request: Request) -> AsyncIterator[InviteService]:
    """Build an invite service bound to one database connection per request."""
    app_settings = get_settings(request)
    state = request.app.state

    if app_settings.storage_backend == STORAGE_MEMORY:
        yield InviteService(
            state.invites,
            state.memberships,
            expiry_days=app_settings.invite_expiry_days,
            link_max_uses=app_settings.invite_link_max_uses,
        )
        return

    async with state.app_db.acquire() as conn:
        yield InviteService(
            InvitesRepository(conn),
            MembershipsRepository(conn),
            expiry_days=app_settings.invite_expiry_days,
            link_max_uses=app_settings.invite_link_max_uses,
        )


async def get_access_service(request: Request) -> AsyncIterator[AccessControlService]:
    """Build an access control service for the request."""
    app_settings = get_settings(request)
    state = request.app.state

    if app_settings.storage_backend == STORAGE_MEMORY:
        yield AccessControlService(state.memberships, state.audit_log, state.integrations)
        return

    # Membership, audit and integration writes share one connection and transaction.
    async with state.app_db.acquire() as conn:
        yield AccessControlService(
            MembershipsRepository(conn),
            AuditRepository(conn),
            IntegrationsRepository(conn),
        )
