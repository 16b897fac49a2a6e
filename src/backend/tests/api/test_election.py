"""
Tests for election lifecycle endpoints.
"""

import pytest
from httpx import AsyncClient

WS = "ws-council"
BASE = f"/api/v1/workspaces/{WS}"


@pytest.mark.unit
class TestElectionStatus:
    """Test the election status endpoint."""

    async def test_status_is_public(self, client: AsyncClient, api_workspace) -> None:
        """Test that election status needs no token."""
        response = await client.get(f"{BASE}/election")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "NOT_STARTED"
        assert data["end_time"] is None
        assert data["results_visible"] is False

    async def test_unknown_workspace(self, client: AsyncClient) -> None:
        """Test status for a workspace that does not exist."""
        response = await client.get("/api/v1/workspaces/ws-missing/election")

        assert response.status_code == 404
        assert response.json()["code"] == "WORKSPACE_NOT_FOUND"

    async def test_expired_window_ends_election(self, client: AsyncClient, api_ballot, monkeypatch) -> None:
        """Test that reading status closes an expired election."""
        status = (await client.get(f"{BASE}/election")).json()
        monkeypatch.setattr("core.clock.now_ms", lambda: status["end_time"] + 1)

        response = await client.get(f"{BASE}/election")

        assert response.json()["status"] == "ENDED"
        assert response.json()["end_time"] is None


@pytest.mark.unit
class TestTransitions:
    """Test election lifecycle endpoints."""

    async def test_start_sets_window(self, client: AsyncClient, admin_headers) -> None:
        """Test that starting sets the start and end times."""
        response = await client.post(f"{BASE}/election/start", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "IN_PROGRESS"
        assert data["end_time"] is not None

    async def test_repeat_start_keeps_window(self, client: AsyncClient, admin_headers) -> None:
        """Test that a second start keeps the existing window."""
        first = (await client.post(f"{BASE}/election/start", headers=admin_headers)).json()
        second = (await client.post(f"{BASE}/election/start", headers=admin_headers)).json()

        assert second["end_time"] == first["end_time"]
        assert second["version"] == first["version"]

    async def test_start_then_end(self, client: AsyncClient, admin_headers) -> None:
        """Test starting and ending an election."""
        await client.post(f"{BASE}/election/start", headers=admin_headers)
        response = await client.post(f"{BASE}/election/end", headers=admin_headers)

        assert response.json()["status"] == "ENDED"
        assert response.json()["end_time"] is None

    async def test_end_when_not_running(self, client: AsyncClient, admin_headers) -> None:
        """Test ending an election that is not running."""
        response = await client.post(f"{BASE}/election/end", headers=admin_headers)

        assert response.status_code == 409
        assert response.json()["code"] == "INVALID_TRANSITION"

    async def test_reset_clears_ballot_and_log(self, client: AsyncClient, api_ballot, admin_headers) -> None:
        """Test that a reset clears the ballot and audit log."""
        response = await client.post(f"{BASE}/election/reset", headers=admin_headers)
        assert response.json()["status"] == "NOT_STARTED"

        assert (await client.get(f"{BASE}/positions")).json() == []
        log = (await client.get(f"{BASE}/audit-log", headers=admin_headers)).json()
        assert [e["action"] for e in log] == ["ELECTION_RESET"]

    async def test_publish_results(self, client: AsyncClient, api_ballot, admin_headers) -> None:
        """Test publishing results after the election ends."""
        await client.post(f"{BASE}/election/end", headers=admin_headers)

        response = await client.put(
            f"{BASE}/election/results-published", json={"published": True}, headers=admin_headers
        )

        assert response.json()["results_published"] is True
        assert response.json()["results_visible"] is True

    async def test_voter_cannot_start(self, client: AsyncClient, api_ballot, login_as, auth_header) -> None:
        """Test that a voter token cannot start the election."""
        headers = auth_header(await login_as("alice", "pw1", WS))

        response = await client.post(f"{BASE}/election/start", headers=headers)

        assert response.status_code == 403

    async def test_admin_of_other_workspace(self, client: AsyncClient, admin_headers, super_admin_headers) -> None:
        """Test that an admin cannot act on another workspace."""
        await client.post(
            "/api/v1/workspaces", json={"name": "Other", "workspace_id": "ws-other"}, headers=super_admin_headers
        )

        response = await client.post("/api/v1/workspaces/ws-other/election/start", headers=admin_headers)

        assert response.status_code == 403


@pytest.mark.unit
class TestAuditLog:
    """Test the audit log endpoint."""

    async def test_newest_first(self, client: AsyncClient, admin_headers) -> None:
        """Test that the audit log lists newest entries first."""
        await client.post(f"{BASE}/election/start", headers=admin_headers)
        await client.post(f"{BASE}/election/end", headers=admin_headers)

        log = (await client.get(f"{BASE}/audit-log", headers=admin_headers)).json()

        assert [e["action"] for e in log] == ["ELECTION_END", "ELECTION_START", "ADMIN_LOGIN"]
        assert log[0]["actor"] == {"id": "admin1", "name": "Council Admin", "role": "Admin"}

    async def test_requires_admin(self, client: AsyncClient, api_workspace, super_admin_headers) -> None:
        """Test that the audit log needs a workspace admin token."""
        response = await client.get(f"{BASE}/audit-log", headers=super_admin_headers)
        assert response.status_code == 403
