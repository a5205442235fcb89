"""Process-local team membership store."""

import asyncio
from dataclasses import replace
from datetime import UTC, datetime
from uuid import UUID

from betterdoc.core.rbac import Role, TeamMembership


class InMemoryMembershipsRepository:
    """Membership store kept in a dict, for development and tests.

    The lock is the unit of work: access control holds it across a
    check and the write that depends on it, and InMemoryInviteRepository
    holds it while consuming an invite. Methods here never take it
    themselves.
    """

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self._members: dict[tuple[UUID, UUID], TeamMembership] = {}

    def transaction(self) -> asyncio.Lock:
        return self.lock

    async def lock_team(self, team_id: UUID) -> None:
        # The store-wide lock held by transaction() already covers every team.
        return None

    async def get_member_role(self, team_id: UUID, user_id: UUID) -> str | None:
        membership = self._members.get((team_id, user_id))
        return membership.role.value if membership else None

    async def upsert_member(
        self,
        team_id: UUID,
        user_id: UUID,
        role: Role,
        assigned_by: UUID | None,
    ) -> TeamMembership:
        return self.upsert_unlocked(team_id, user_id, role, assigned_by)

    def upsert_unlocked(
        self,
        team_id: UUID,
        user_id: UUID,
        role: Role,
        assigned_by: UUID | None,
    ) -> TeamMembership:
        """Insert or update synchronously; used for seeding and by the invite store."""
        now = datetime.now(UTC)
        existing = self._members.get((team_id, user_id))
        if existing is None:
            membership = TeamMembership(
                team_id=team_id,
                user_id=user_id,
                role=role,
                assigned_by=assigned_by,
                created_at=now,
                updated_at=now,
            )
        else:
            membership = replace(existing, role=role, assigned_by=assigned_by, updated_at=now)
        self._members[(team_id, user_id)] = membership
        return replace(membership)

    def is_member_unlocked(self, team_id: UUID, user_id: UUID) -> bool:
        """Membership check for callers already holding the lock."""
        return (team_id, user_id) in self._members

    async def remove_member(self, team_id: UUID, user_id: UUID) -> bool:
        return self._members.pop((team_id, user_id), None) is not None

    async def count_members(self, team_id: UUID) -> int:
        return sum(1 for key in self._members if key[0] == team_id)

    async def list_members(self, team_id: UUID) -> list[TeamMembership]:
        members = [replace(m) for (tid, _), m in self._members.items() if tid == team_id]
        return sorted(members, key=lambda m: m.created_at)
