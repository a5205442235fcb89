"""Team invite domain."""

from betterdoc.core.invites.repository import InviteRepository
from betterdoc.core.invites.service import InviteService
from betterdoc.core.invites.tokens import (
    INVITE_TOKEN_SEPARATOR,
    INVITE_TOKEN_VERSION,
    InviteKind,
    ParsedInviteToken,
    create_invite_token,
    hash_invite_token,
    normalize_invite_token,
    parse_invite_token,
)
from betterdoc.core.invites.types import (
    AcceptanceResult,
    Accepted,
    AlreadyAccepted,
    ConsumeOutcome,
    InviteCreate,
    InviteRecord,
    InviteStatus,
    IssuedInvite,
    Rejected,
    RejectionReason,
    VerifiedIdentity,
)

__all__ = [
    "AcceptanceResult",
    "Accepted",
    "AlreadyAccepted",
    "ConsumeOutcome",
    "INVITE_TOKEN_SEPARATOR",
    "INVITE_TOKEN_VERSION",
    "InviteCreate",
    "InviteKind",
    "InviteRecord",
    "InviteRepository",
    "InviteService",
    "InviteStatus",
    "IssuedInvite",
    "ParsedInviteToken",
    "Rejected",
    "RejectionReason",
    "VerifiedIdentity",
    "create_invite_token",
    "hash_invite_token",
    "normalize_invite_token",
    "parse_invite_token",
]
