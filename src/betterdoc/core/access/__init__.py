"""Access control: role checks and audited privileged actions."""

from betterdoc.core.access.repository import AuditLog, IntegrationRepository
from betterdoc.core.access.service import AccessControlService
from betterdoc.core.access.types import (
    IntegrationChange,
    IntegrationConfig,
    RoleAssignment,
    TipStatus,
    TipStatusChange,
)

__all__ = [
    "AccessControlService",
    "AuditLog",
    "IntegrationChange",
    "IntegrationConfig",
    "IntegrationRepository",
    "RoleAssignment",
    "TipStatus",
    "TipStatusChange",
]
