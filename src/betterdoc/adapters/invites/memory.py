"""Process-local invite store."""

from dataclasses import replace
from datetime import UTC, datetime
from uuid import UUID, uuid4

from betterdoc.adapters.rbac.memory import InMemoryMembershipsRepository
from betterdoc.core.invites import ConsumeOutcome, InviteCreate, InviteRecord
from betterdoc.core.invites.tokens import is_invite_expired


class InMemoryInviteRepository:
    """Invite store kept in a dict, for development and tests.

    Records are returned as copies, so callers hold snapshots exactly as
    they would from a database. consume_invite runs under the membership
    store's lock, which makes check, increment and insert one step.
    """

    def __init__(self, memberships: InMemoryMembershipsRepository) -> None:
        self._memberships = memberships
        self._invites: dict[UUID, InviteRecord] = {}

    async def create_invite(self, invite: InviteCreate) -> InviteRecord:
        if any(r.token_hash == invite.token_hash for r in self._invites.values()):
            raise ValueError("Duplicate invite token hash")
        record = InviteRecord(
            id=uuid4(),
            team_id=invite.team_id,
            kind=invite.kind,
            token_hash=invite.token_hash,
            role=invite.role,
            target_email=invite.target_email,
            expires_at=invite.expires_at,
            max_uses=invite.max_uses,
            use_count=0,
            created_by=invite.created_by,
            created_at=datetime.now(UTC),
        )
        self._invites[record.id] = record
        return replace(record)

    async def get_invite_by_hash(self, token_hash: str) -> InviteRecord | None:
        for record in self._invites.values():
            if record.token_hash == token_hash:
                return replace(record)
        return None

    async def get_invite(self, invite_id: UUID) -> InviteRecord | None:
        record = self._invites.get(invite_id)
        return replace(record) if record else None

    async def list_team_invites(self, team_id: UUID) -> list[InviteRecord]:
        records = [replace(r) for r in self._invites.values() if r.team_id == team_id]
        return sorted(records, key=lambda r: r.created_at, reverse=True)

    async def revoke_invite(self, invite_id: UUID) -> bool:
        async with self._memberships.lock:
            record = self._invites.get(invite_id)
            if record is None or record.revoked_at is not None:
                return False
            record.revoked_at = datetime.now(UTC)
            return True

    async def consume_invite(self, invite: InviteRecord, user_id: UUID) -> ConsumeOutcome:
        async with self._memberships.lock:
            record = self._invites.get(invite.id)
            if record is None:
                return ConsumeOutcome.UNAVAILABLE

            if self._memberships.is_member_unlocked(record.team_id, user_id):
                return ConsumeOutcome.ALREADY_MEMBER

            if record.is_revoked or record.is_exhausted or is_invite_expired(record.expires_at):
                return ConsumeOutcome.UNAVAILABLE

            record.use_count += 1
            record.last_accepted_at = datetime.now(UTC)
            self._memberships.upsert_unlocked(
                record.team_id, user_id, record.role, assigned_by=record.created_by
            )
            return ConsumeOutcome.CONSUMED
