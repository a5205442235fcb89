"""Tests for the Postgres memberships repository."""

from datetime import UTC, datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from betterdoc.adapters.rbac import MembershipsRepository
from betterdoc.core.rbac import Role


def membership_row(**overrides: Any) -> dict[str, Any]:
    """Build a team_memberships row."""
    now = datetime.now(UTC).replace(tzinfo=None)
    row: dict[str, Any] = {
        "team_id": uuid4(),
        "user_id": uuid4(),
        "role": "Reviewer",
        "assigned_by": uuid4(),
        "created_at": now,
        "updated_at": now,
    }
    row.update(overrides)
    return row


@pytest.fixture
def mock_conn() -> MagicMock:
    """Create mock database connection."""
    return MagicMock()


@pytest.fixture
def repository(mock_conn: MagicMock) -> MembershipsRepository:
    """Create repository with mock connection."""
    return MembershipsRepository(mock_conn)


class TestGetMemberRole:
    """Tests for get_member_role method."""

    async def test_returns_stored_value(
        self, repository: MembershipsRepository, mock_conn: MagicMock
    ) -> None:
        """Returns the raw stored role."""
        mock_conn.fetchval = AsyncMock(return_value="Admin")

        assert await repository.get_member_role(uuid4(), uuid4()) == "Admin"

    async def test_returns_none_for_non_member(
        self, repository: MembershipsRepository, mock_conn: MagicMock
    ) -> None:
        """Returns None when no membership exists."""
        mock_conn.fetchval = AsyncMock(return_value=None)

        assert await repository.get_member_role(uuid4(), uuid4()) is None


class TestUpsertMember:
    """Tests for upsert_member method."""

    async def test_upserts(self, repository: MembershipsRepository, mock_conn: MagicMock) -> None:
        """Writes the role name and returns the membership."""
        team_id, user_id, actor_id = uuid4(), uuid4(), uuid4()
        mock_conn.fetchrow = AsyncMock(
            return_value=membership_row(
                team_id=team_id, user_id=user_id, role="Admin", assigned_by=actor_id
            )
        )

        membership = await repository.upsert_member(team_id, user_id, Role.ADMIN, actor_id)

        args = mock_conn.fetchrow.call_args.args
        assert "ON CONFLICT (team_id, user_id)" in args[0]
        assert args[1:] == (team_id, user_id, "Admin", actor_id)
        assert membership.role == Role.ADMIN
        assert membership.created_at.tzinfo is UTC


class TestCountAndList:
    """Tests for count_members and list_members."""

    async def test_count_members(
        self, repository: MembershipsRepository, mock_conn: MagicMock
    ) -> None:
        """Returns the member count."""
        mock_conn.fetchval = AsyncMock(return_value=3)

        assert await repository.count_members(uuid4()) == 3

    async def test_list_members(
        self, repository: MembershipsRepository, mock_conn: MagicMock
    ) -> None:
        """Returns memberships."""
        team_id = uuid4()
        mock_conn.fetch = AsyncMock(
            return_value=[
                membership_row(team_id=team_id, role="Admin"),
                membership_row(team_id=team_id, role="Contributor"),
            ]
        )

        members = await repository.list_members(team_id)

        assert [m.role for m in members] == [Role.ADMIN, Role.CONTRIBUTOR]

    async def test_unknown_role_fails_closed(
        self, repository: MembershipsRepository, mock_conn: MagicMock
    ) -> None:
        """Unrecognized stored roles read as Reader."""
        mock_conn.fetch = AsyncMock(return_value=[membership_row(role="superuser")])

        members = await repository.list_members(uuid4())

        assert members[0].role == Role.READER


class TestUnitOfWork:
    """Tests for transaction and lock_team."""

    def test_transaction_uses_connection(
        self, repository: MembershipsRepository, mock_conn: MagicMock
    ) -> None:
        """The unit of work is a transaction on the bound connection."""
        assert repository.transaction() is mock_conn.transaction.return_value

    async def test_lock_team_takes_advisory_lock(
        self, repository: MembershipsRepository, mock_conn: MagicMock
    ) -> None:
        """Locks are transaction-scoped and keyed by team."""
        team_id = uuid4()
        mock_conn.execute = AsyncMock(return_value="SELECT 1")

        await repository.lock_team(team_id)

        sql, key = mock_conn.execute.call_args.args
        assert "pg_advisory_xact_lock" in sql
        assert key == str(team_id)


class TestRemoveMember:
    """Tests for remove_member method."""

    async def test_removes(self, repository: MembershipsRepository, mock_conn: MagicMock) -> None:
        """Deleting one row reports success."""
        team_id, user_id = uuid4(), uuid4()
        mock_conn.execute = AsyncMock(return_value="DELETE 1")

        assert await repository.remove_member(team_id, user_id) is True
        assert mock_conn.execute.call_args.args[1:] == (team_id, user_id)

    async def test_missing_member(
        self, repository: MembershipsRepository, mock_conn: MagicMock
    ) -> None:
        """Deleting nothing reports failure."""
        mock_conn.execute = AsyncMock(return_value="DELETE 0")

        assert await repository.remove_member(uuid4(), uuid4()) is False
