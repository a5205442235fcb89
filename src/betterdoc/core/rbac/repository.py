"""Membership repository protocol for team role lookups."""

from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol, runtime_checkable
from uuid import UUID

from betterdoc.core.rbac.types import Role, TeamMembership


@runtime_checkable
class MembershipRepository(Protocol):
    """Protocol for team membership storage.

    Role values are returned raw; callers interpret them with
    normalize_role so that corrupt data never elevates privilege.

    Membership changes that depend on a prior read run inside
    ``transaction()`` after ``lock_team()``, so concurrent changes to the
    same team are serialized.
    """

    def transaction(self) -> AbstractAsyncContextManager[Any]:
        """Open a unit of work spanning membership and audit writes."""
        ...

    async def lock_team(self, team_id: UUID) -> None:
        """Serialize membership changes of a team until the unit of work ends."""
        ...

    async def get_member_role(self, team_id: UUID, user_id: UUID) -> str | None:
        """Get the stored role of a user in a team, or None if not a member."""
        ...

    async def upsert_member(
        self,
        team_id: UUID,
        user_id: UUID,
        role: Role,
        assigned_by: UUID | None,
    ) -> TeamMembership:
        """Create or update a membership with the given role."""
        ...

    async def remove_member(self, team_id: UUID, user_id: UUID) -> bool:
        """Delete a membership. Returns False if there was none."""
        ...

    async def count_members(self, team_id: UUID) -> int:
        """Count members of a team."""
        ...

    async def list_members(self, team_id: UUID) -> list[TeamMembership]:
        """List memberships of a team."""
        ...
