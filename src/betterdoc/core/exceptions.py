"""Domain-specific exceptions.

All exceptions in the betterdoc access core inherit from BetterDocError,
making it easy to catch all system errors while still being able
to handle specific error types.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from betterdoc.core.rbac.types import Permission, Role


class BetterDocError(Exception):
    """Base exception for all betterdoc errors."""

    pass


class PermissionDeniedError(BetterDocError):
    """Actor's role does not hold the permission an operation requires.

    Attributes:
        role: The role that was checked.
        permission: The permission that was missing.
    """

    def __init__(
        self,
        role: Role,
        permission: Permission | None = None,
        message: str | None = None,
    ) -> None:
        """Initialize PermissionDeniedError.

        Args:
            role: The actor's effective role.
            permission: The permission that was required, if any.
            message: Optional override for the error message.
        """
        if message is None:
            if permission is None:
                message = f"Permission denied for role {role.value}"
            else:
                message = f'Permission denied: {role.value} cannot perform "{permission.value}"'
        super().__init__(message)
        self.role = role
        self.permission = permission


class InviteError(BetterDocError):
    """Invite could not be issued with the given arguments."""

    pass


class InviteNotFoundError(BetterDocError):
    """Invite does not exist or belongs to another team."""

    pass


class InviteConfigurationError(BetterDocError):
    """A cryptographic primitive needed for invites is unavailable.

    This is a FATAL error - token issuance must never fall back to a
    weaker random source. It is not caught by the invite service and
    surfaces to the caller as a server error.
    """

    pass


class MembershipError(BetterDocError):
    """Membership change would leave a team in an invalid state."""

    pass


class MemberNotFoundError(MembershipError):
    """User is not a member of the team."""

    pass
