"""Team invite token format, generation and hashing.

Tokens have the shape ``<version>.<kind>.<secret>``. Changing the version
tag, separator or secret encoding is a breaking format change and needs
a new version tag.
"""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum

from betterdoc.core.exceptions import InviteConfigurationError

# Token format
INVITE_TOKEN_VERSION = "bdi1"
INVITE_TOKEN_SEPARATOR = "."
INVITE_SECRET_BYTES = 24  # 192 bits of entropy
INVITE_EXPIRY_DAYS = 14


class InviteKind(str, Enum):
    """How an invite is delivered and bounded."""

    EMAIL = "email"
    LINK = "link"


_KINDS_BY_NAME = {kind.value: kind for kind in InviteKind}


@dataclass(frozen=True)
class ParsedInviteToken:
    """Structurally valid invite token."""

    version: str
    kind: InviteKind
    secret: str


def _random_secret(byte_length: int) -> str:
    """Generate a URL-safe, unpadded random secret."""
    try:
        # token_urlsafe strips "=" padding; its alphabet never contains the separator
        return secrets.token_urlsafe(byte_length)
    except NotImplementedError as e:
        raise InviteConfigurationError("Secure random source is unavailable") from e


def create_invite_token(kind: InviteKind) -> str:
    """Generate a new invite token.

    Args:
        kind: Invite kind to embed in the token.

    Returns:
        Token string safe to use as a URL path segment.

    Raises:
        InviteConfigurationError: If no secure random source is available.
    """
    return INVITE_TOKEN_SEPARATOR.join(
        (INVITE_TOKEN_VERSION, InviteKind(kind).value, _random_secret(INVITE_SECRET_BYTES))
    )


def normalize_invite_token(token: str) -> str:
    """Strip surrounding whitespace from a presented token."""
    return token.strip()


def parse_invite_token(token: str) -> ParsedInviteToken | None:
    """Validate token structure and vocabulary.

    No lookup happens here; malformed tokens are rejected before any
    storage access.

    Args:
        token: Raw token as presented by the invitee.

    Returns:
        ParsedInviteToken, or None if the token is malformed.
    """
    normalized = normalize_invite_token(token)
    if not normalized:
        return None

    fields = normalized.split(INVITE_TOKEN_SEPARATOR)
    if len(fields) != 3:
        return None

    version, raw_kind, secret = fields
    kind = _KINDS_BY_NAME.get(raw_kind)
    if version != INVITE_TOKEN_VERSION or kind is None or not secret:
        return None

    return ParsedInviteToken(version=version, kind=kind, secret=secret)


def hash_invite_token(token: str) -> str:
    """Hash a token for storage and lookup.

    Only this digest is persisted, so a leaked invite table does not
    disclose usable tokens.

    Args:
        token: The plaintext token.

    Returns:
        Lowercase hex SHA-256 of the normalized token.
    """
    normalized = normalize_invite_token(token)
    # Lone surrogates become U+FFFD so any str hashes; paired ones are joined.
    text = normalized.encode("utf-16", "surrogatepass").decode("utf-16", "replace")
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def get_invite_expiry(days: int = INVITE_EXPIRY_DAYS) -> datetime:
    """Calculate invite expiry timestamp.

    Args:
        days: Number of days until expiry.

    Returns:
        UTC datetime when the invite expires.
    """
    return datetime.now(UTC) + timedelta(days=days)


def is_invite_expired(expires_at: datetime, now: datetime | None = None) -> bool:
    """Check if an invite has expired.

    Args:
        expires_at: The invite's expiry timestamp.
        now: Reference time, defaults to the current UTC time.

    Returns:
        True if the invite has expired.
    """
    if now is None:
        now = datetime.now(UTC)
    # Handle timezone-naive datetimes
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=UTC)
    return now >= expires_at
