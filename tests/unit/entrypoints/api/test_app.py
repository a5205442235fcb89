"""Tests for the assembled application on the memory backend."""

import time
from collections.abc import Iterator
from uuid import UUID, uuid4

import jwt as pyjwt
import pytest
from fastapi.testclient import TestClient

from betterdoc.core.auth.jwt import ALGORITHM, SECRET_KEY
from betterdoc.entrypoints.api import deps
from betterdoc.entrypoints.api.app import app


def bearer_token(subject: str, email: str, verified: bool = True, lifetime: int = 900) -> str:
    """Sign a token the way the identity provider does."""
    now = int(time.time())
    claims = {
        "sub": subject,
        "email": email,
        "email_verified": verified,
        "exp": now + lifetime,
        "iat": now,
    }
    return pyjwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM)


def auth_headers(user_id: UUID, email: str) -> dict:
    """Bearer headers for a user."""
    token = bearer_token(str(user_id), email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch) -> Iterator[TestClient]:
    """Run the app with process-local storage."""
    monkeypatch.setattr(deps.settings, "storage_backend", deps.STORAGE_MEMORY)
    with TestClient(app) as client:
        yield client


class TestApp:
    """End-to-end tests through the application lifespan."""

    def test_health(self, client: TestClient) -> None:
        """Health endpoint responds."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_invite_flow(self, client: TestClient) -> None:
        """Bootstrap an admin, invite by email, accept and inspect the trail."""
        team_id = uuid4()
        admin = auth_headers(uuid4(), "admin@example.com")
        invitee_id = uuid4()
        invitee = auth_headers(invitee_id, "Invitee@Example.com")

        bootstrap = client.post(f"/api/v1/teams/{team_id}/bootstrap-admin", headers=admin)
        issued = client.post(
            f"/api/v1/teams/{team_id}/invites",
            json={"kind": "email", "role": "Reviewer", "target_email": "invitee@example.com"},
            headers=admin,
        )
        token = issued.json()["token"]
        accepted = client.post(f"/api/v1/join/{token}", headers=invitee)
        replayed = client.post(f"/api/v1/join/{token}", headers=invitee)
        profile = client.get(f"/api/v1/teams/{team_id}/access", headers=invitee)
        events = client.get(f"/api/v1/teams/{team_id}/audit-events", headers=invitee)

        assert bootstrap.status_code == 201
        assert issued.status_code == 201
        assert accepted.json()["status"] == "accepted"
        assert replayed.json()["status"] == "already_accepted"
        assert profile.json()["role"] == "Reviewer"
        assert events.status_code == 200
        assert events.json()["total"] == 1

    def test_privileged_actions_are_audited(self, client: TestClient) -> None:
        """Tip, integration and membership actions all reach the audit trail."""
        team_id = uuid4()
        admin_id = uuid4()
        admin = auth_headers(admin_id, "admin@example.com")
        member_id = uuid4()

        client.post(f"/api/v1/teams/{team_id}/bootstrap-admin", headers=admin)
        client.put(
            f"/api/v1/teams/{team_id}/members/{member_id}/role",
            json={"role": "Contributor"},
            headers=admin,
        )
        published = client.post(
            f"/api/v1/teams/{team_id}/tips/tip-1/publish",
            json={"title": "Restart the worker"},
            headers=admin,
        )
        configured = client.put(
            f"/api/v1/teams/{team_id}/integrations/slack",
            json={"enabled": True},
            headers=admin,
        )
        members = client.get(f"/api/v1/teams/{team_id}/members", headers=admin)
        removed = client.delete(f"/api/v1/teams/{team_id}/members/{member_id}", headers=admin)
        events = client.get(f"/api/v1/teams/{team_id}/audit-events", headers=admin)

        assert published.status_code == 200
        assert configured.status_code == 200
        assert members.json()["total"] == 2
        assert removed.status_code == 200
        assert [e["action"] for e in events.json()["items"]] == [
            "role.assign",
            "integration.configure",
            "tip.publish",
            "role.assign",
            "role.assign",
        ]
