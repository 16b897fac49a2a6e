"""
Tests for authentication endpoints.
"""

import pytest
from httpx import AsyncClient

from core.security import create_session_token

WS = "ws-council"


@pytest.mark.unit
class TestLogin:
    """Test the login endpoint."""

    async def test_super_admin_without_workspace(self, login_as) -> None:
        """Test super admin login with no workspace given."""
        response = await login_as("superadmin", "super123")

        assert response.status_code == 200
        data = response.json()
        assert data["role"] == "super_admin"
        assert data["screen"] == "SUPER_ADMIN_VIEW"
        assert data["workspace_id"] is None
        assert data["display_name"] == "Super Admin"
        assert data["token_type"] == "bearer"

    async def test_admin_login(self, login_as, api_workspace) -> None:
        """Test workspace admin login returns an admin token."""
        response = await login_as("admin1", "adminpass", api_workspace)

        assert response.status_code == 200
        data = response.json()
        assert data["role"] == "admin"
        assert data["screen"] == "ADMIN_VIEW"
        assert data["workspace_id"] == WS

    async def test_voter_login_while_running(self, login_as, api_ballot) -> None:
        """Test voter login while the election is running."""
        response = await login_as("ALICE", "pw1", WS)

        assert response.status_code == 200
        assert response.json()["role"] == "voter"
        assert response.json()["screen"] == "VOTER_VIEW"

    async def test_no_workspace_selected(self, login_as) -> None:
        """Test that a voter login without a workspace is refused."""
        response = await login_as("admin1", "adminpass")

        assert response.status_code == 401
        assert response.json()["detail"] == "Please select a workspace before logging in."

    async def test_wrong_password(self, login_as, api_workspace) -> None:
        """Test that a wrong password returns 401."""
        response = await login_as("admin1", "nope", api_workspace)

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid credentials. Please check your ID and password."

    async def test_voter_before_election_starts(self, client, login_as, api_workspace, admin_headers) -> None:
        """Test that voters cannot log in before the election starts."""
        await client.post(
            f"/api/v1/workspaces/{WS}/voters",
            json={"id": "alice", "name": "Alice", "password": "pw1"},
            headers=admin_headers,
        )

        response = await login_as("alice", "pw1", WS)

        assert response.status_code == 401
        assert response.json()["detail"] == "The election is not currently in progress."

    async def test_blocked_voter(self, client, login_as, api_ballot, admin_headers) -> None:
        """Test that a blocked voter gets the blocked message."""
        await client.patch(f"/api/v1/workspaces/{WS}/voters/alice", json={"is_blocked": True}, headers=admin_headers)

        response = await login_as("alice", "pw1", WS)

        assert response.status_code == 401
        assert "blocked" in response.json()["detail"]

    async def test_failed_voter_login_is_audited(self, client, login_as, api_ballot, admin_headers) -> None:
        """Test that a refused voter login shows up in the audit log."""
        await client.patch(f"/api/v1/workspaces/{WS}/voters/alice", json={"is_blocked": True}, headers=admin_headers)
        await login_as("alice", "pw1", WS)

        log = (await client.get(f"/api/v1/workspaces/{WS}/audit-log", headers=admin_headers)).json()

        assert log[0]["action"] == "VOTER_LOGIN_FAIL"
        assert log[0]["actor"]["role"] == "Voter"


@pytest.mark.unit
class TestTokens:
    """Test bearer token validation."""

    async def test_missing_token(self, client: AsyncClient) -> None:
        """Test a protected endpoint without a token."""
        response = await client.get("/api/v1/super-admin/profile")
        assert response.status_code in (401, 403)

    async def test_garbage_token(self, client: AsyncClient) -> None:
        """Test a protected endpoint with a malformed token."""
        response = await client.get("/api/v1/super-admin/profile", headers={"Authorization": "Bearer nonsense"})
        assert response.status_code == 401

    async def test_token_for_deleted_workspace(self, client, api_workspace, admin_headers, super_admin_headers) -> None:
        """Test that tokens stop working once their workspace is deleted."""
        await client.delete(f"/api/v1/workspaces/{WS}", headers=super_admin_headers)

        response = await client.get(f"/api/v1/workspaces/{WS}/voters", headers=admin_headers)

        assert response.status_code == 401

    async def test_token_for_stale_admin_id(self, client, api_workspace) -> None:
        """Test that a token for a replaced admin id is refused."""
        token = create_session_token("admin", "someone-else", workspace_id=WS)

        response = await client.get(f"/api/v1/workspaces/{WS}/voters", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401


@pytest.mark.unit
class TestLogout:
    """Test the logout endpoint."""

    async def test_logout_revokes_token(self, client: AsyncClient, super_admin_headers) -> None:
        """Test that logging out revokes the token."""
        response = await client.post("/api/v1/auth/logout", headers=super_admin_headers)
        assert response.status_code == 200
        assert response.json()["success"] is True

        response = await client.get("/api/v1/super-admin/profile", headers=super_admin_headers)
        assert response.status_code == 401
        assert response.json()["detail"] == "Token has been revoked"
