"""Access control result types."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from betterdoc.core.rbac.types import TeamMembership


class TipStatus(str, Enum):
    """Status a privileged tip transition moves a tip to."""

    PUBLISHED = "published"
    DEPRECATED = "deprecated"


@dataclass(frozen=True)
class RoleAssignment:
    """Outcome of a role assignment and its audit record."""

    membership: TeamMembership
    audit_event_id: UUID


@dataclass(frozen=True)
class TipStatusChange:
    """An authorized and audited tip status transition."""

    tip_id: str
    status: TipStatus
    audit_event_id: UUID


@dataclass
class IntegrationConfig:
    """Team-level switch for an external integration.

    config_version starts at 1 and grows by one on every change.
    """

    id: UUID
    team_id: UUID
    key: str
    enabled: bool
    config_version: int
    updated_by: UUID
    updated_at: datetime


@dataclass(frozen=True)
class IntegrationChange:
    """Outcome of an integration configuration and its audit record."""

    config: IntegrationConfig
    audit_event_id: UUID
