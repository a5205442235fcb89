"""Invite domain types."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from betterdoc.core.invites.tokens import InviteKind, is_invite_expired
from betterdoc.core.rbac.types import Role


class InviteStatus(str, Enum):
    """Derived lifecycle status of an invite record."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    EXHAUSTED = "exhausted"
    EXPIRED = "expired"
    REVOKED = "revoked"


class ConsumeOutcome(str, Enum):
    """Result of the atomic consume step in invite storage."""

    CONSUMED = "consumed"
    ALREADY_MEMBER = "already_member"
    UNAVAILABLE = "unavailable"


class RejectionReason(str, Enum):
    """Why an invite acceptance was rejected."""

    INVALID_OR_EXPIRED = "invalid_or_expired"
    IDENTITY_MISMATCH = "identity_mismatch"


# Malformed, unknown, expired and exhausted invites share one message so
# that callers cannot tell them apart.
REJECTION_MESSAGES: dict[RejectionReason, str] = {
    RejectionReason.INVALID_OR_EXPIRED: "Invalid or expired invite.",
    RejectionReason.IDENTITY_MISMATCH: "This invite was sent to a different email address.",
}


@dataclass
class InviteRecord:
    """A stored invite, keyed by the hash of its token."""

    id: UUID
    team_id: UUID
    kind: InviteKind
    token_hash: str
    role: Role
    target_email: str | None
    expires_at: datetime
    max_uses: int
    use_count: int
    created_by: UUID
    created_at: datetime
    revoked_at: datetime | None = None
    last_accepted_at: datetime | None = None

    @property
    def is_revoked(self) -> bool:
        """Whether an admin revoked the invite."""
        return self.revoked_at is not None

    @property
    def is_exhausted(self) -> bool:
        """Whether every allowed use has been consumed."""
        return self.use_count >= self.max_uses

    def status_at(self, now: datetime | None = None) -> InviteStatus:
        """Derive the lifecycle status at a point in time."""
        if self.is_revoked:
            return InviteStatus.REVOKED
        if self.is_exhausted:
            return InviteStatus.ACCEPTED if self.kind == InviteKind.EMAIL else InviteStatus.EXHAUSTED
        if is_invite_expired(self.expires_at, now):
            return InviteStatus.EXPIRED
        return InviteStatus.PENDING


@dataclass(frozen=True)
class InviteCreate:
    """Request to persist a new invite."""

    team_id: UUID
    kind: InviteKind
    token_hash: str
    role: Role
    target_email: str | None
    expires_at: datetime
    max_uses: int
    created_by: UUID


@dataclass(frozen=True)
class IssuedInvite:
    """A freshly issued invite with its one-time plaintext token."""

    token: str
    join_path: str
    invite: InviteRecord


@dataclass(frozen=True)
class VerifiedIdentity:
    """Identity asserted by the trusted identity provider."""

    user_id: UUID
    email: str


@dataclass(frozen=True)
class Accepted:
    """Invite consumed and membership created."""

    invite_id: UUID
    team_id: UUID
    role: Role


@dataclass(frozen=True)
class AlreadyAccepted:
    """Invitee is already a member; nothing was consumed."""

    invite_id: UUID
    team_id: UUID


@dataclass(frozen=True)
class Rejected:
    """Invite could not be accepted."""

    reason: RejectionReason

    @property
    def message(self) -> str:
        """User-facing explanation."""
        return REJECTION_MESSAGES[self.reason]


AcceptanceResult = Accepted | AlreadyAccepted | Rejected
