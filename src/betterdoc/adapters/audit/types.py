"""Audit log types."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from betterdoc.core.rbac.types import AuditTargetType, PrivilegedAction, Role


class AuditLogCreate(BaseModel):
    """Request to create an audit log entry."""

    model_config = ConfigDict(frozen=True)

    team_id: UUID
    actor_id: UUID
    actor_role: Role
    action: PrivilegedAction
    target_type: AuditTargetType
    target_id: str
    summary: str
    metadata: dict[str, Any] | None = None


class AuditLogEntry(BaseModel):
    """Audit log entry from database."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    timestamp: datetime
    team_id: UUID
    actor_id: UUID
    actor_role: Role
    action: PrivilegedAction
    target_type: AuditTargetType
    target_id: str
    summary: str
    metadata: dict[str, Any] | None = None
