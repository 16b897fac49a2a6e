"""
Pytest fixtures for MultiVote backend tests.
"""

import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient, Response

# Set test environment variables before importing app
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("STORAGE_BACKEND", "memory")

from models.audit import ActorRole, AuditActor  # noqa: E402
from models.election import AdminProfile  # noqa: E402
from repositories.kv_store import InMemoryKeyValueStore, reset_store  # noqa: E402
from repositories.registry_repository import RegistryRepository  # noqa: E402
from repositories.workspace_repository import WorkspaceRepository  # noqa: E402
from services.audit_service import AuditService  # noqa: E402
from services.auth_service import AuthenticationResolver  # noqa: E402
from services.ballot_service import BallotService  # noqa: E402
from services.token_service import TokenService  # noqa: E402
from services.workspace_registry import WorkspaceRegistry  # noqa: E402

WORKSPACE_ID = "ws-council"


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for async tests."""
    return "asyncio"


# =============================================================================
# Storage and services
# =============================================================================


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def workspaces(store: InMemoryKeyValueStore) -> WorkspaceRepository:
    return WorkspaceRepository(store)


@pytest.fixture
def registry_repo(store: InMemoryKeyValueStore) -> RegistryRepository:
    return RegistryRepository(store)


@pytest.fixture
def audit(workspaces: WorkspaceRepository, registry_repo: RegistryRepository) -> AuditService:
    return AuditService(workspaces, registry_repo)


@pytest.fixture
def registry(
    registry_repo: RegistryRepository,
    workspaces: WorkspaceRepository,
    audit: AuditService,
) -> WorkspaceRegistry:
    return WorkspaceRegistry(registry_repo, workspaces, audit)


@pytest.fixture
def resolver(
    workspaces: WorkspaceRepository,
    registry: WorkspaceRegistry,
    audit: AuditService,
) -> AuthenticationResolver:
    return AuthenticationResolver(workspaces, registry, audit)


@pytest.fixture
def super_admin(registry: WorkspaceRegistry) -> AdminProfile:
    return registry.get_super_admin_profile()


@pytest.fixture
def super_admin_actor(super_admin: AdminProfile) -> AuditActor:
    return AuditActor(id=super_admin.id, name=super_admin.name, role=ActorRole.SUPER_ADMIN)


@pytest.fixture
def admin_profile() -> AdminProfile:
    return AdminProfile(id="admin1", name="Council Admin", password="adminpass")


@pytest.fixture
def admin_actor(admin_profile: AdminProfile) -> AuditActor:
    return AuditActor(id=admin_profile.id, name=admin_profile.name, role=ActorRole.ADMIN)


@pytest.fixture
def seeded_workspace(
    registry: WorkspaceRegistry,
    workspaces: WorkspaceRepository,
    super_admin_actor: AuditActor,
    admin_actor: AuditActor,
    admin_profile: AdminProfile,
) -> str:
    """
    A workspace with one ballot ready to vote on.

    Positions: 1 President (Carol, Dave), 2 Treasurer (Erin).
    Voters: alice/pw1, bob/pw2 (blocked).
    """
    registry.create("Student Council", super_admin_actor, workspace_id=WORKSPACE_ID, admin_profile=admin_profile)
    ballot = BallotService(workspaces, WORKSPACE_ID)
    president = ballot.add_position("President", admin_actor)
    treasurer = ballot.add_position("Treasurer", admin_actor)
    ballot.add_candidate(president.id, "Carol", admin_actor)
    ballot.add_candidate(president.id, "Dave", admin_actor)
    ballot.add_candidate(treasurer.id, "Erin", admin_actor)
    ballot.add_voter("alice", "Alice", "pw1", admin_actor)
    ballot.add_voter("bob", "Bob", "pw2", admin_actor)
    ballot.set_voter_blocked("bob", True, admin_actor)
    return WORKSPACE_ID


# =============================================================================
# HTTP client
# =============================================================================


@pytest.fixture
async def app() -> Any:
    """Create FastAPI application for testing."""
    from main import app as fastapi_app

    return fastapi_app


@pytest.fixture
async def client(app: Any) -> AsyncGenerator[AsyncClient, None]:
    """Async test client over a fresh in-memory store and an empty token blacklist."""
    reset_store()
    TokenService().clear()
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"Origin": "http://localhost:3000"},
    ) as ac:
        yield ac
    reset_store()


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def login_as(client: AsyncClient) -> Callable[..., Awaitable[Response]]:
    """Post credentials to the login endpoint."""

    async def _login(login_id: str, password: str, workspace_id: str | None = None) -> Response:
        return await client.post(
            "/api/v1/auth/login",
            json={"login_id": login_id, "password": password, "workspace_id": workspace_id},
        )

    return _login


@pytest.fixture
def auth_header() -> Callable[[Response], dict[str, str]]:
    """Bearer header from a successful login response."""
    return lambda response: bearer(response.json()["access_token"])


@pytest.fixture
async def super_admin_headers(login_as: Callable[..., Awaitable[Response]]) -> dict[str, str]:
    response = await login_as("superadmin", "super123")
    return bearer(response.json()["access_token"])


@pytest.fixture
async def api_workspace(client: AsyncClient, super_admin_headers: dict[str, str]) -> str:
    """Workspace created through the API with admin1/adminpass as its admin."""
    response = await client.post(
        "/api/v1/workspaces",
        json={
            "name": "Student Council",
            "workspace_id": WORKSPACE_ID,
            "admin_profile": {"id": "admin1", "name": "Council Admin", "password": "adminpass"},
        },
        headers=super_admin_headers,
    )
    assert response.status_code == 201
    return WORKSPACE_ID


@pytest.fixture
async def admin_headers(login_as: Callable[..., Awaitable[Response]], api_workspace: str) -> dict[str, str]:
    response = await login_as("admin1", "adminpass", api_workspace)
    return bearer(response.json()["access_token"])


@pytest.fixture
async def api_ballot(client: AsyncClient, api_workspace: str, admin_headers: dict[str, str]) -> dict[str, int]:
    """
    President (Carol, Dave) on the API workspace, voter alice/pw1, election running.

    Returns the ids the API assigned.
    """
    base = f"/api/v1/workspaces/{api_workspace}"
    position = (await client.post(f"{base}/positions", json={"name": "President"}, headers=admin_headers)).json()
    carol = (
        await client.post(
            f"{base}/candidates", json={"position_id": position["id"], "name": "Carol"}, headers=admin_headers
        )
    ).json()
    dave = (
        await client.post(
            f"{base}/candidates", json={"position_id": position["id"], "name": "Dave"}, headers=admin_headers
        )
    ).json()
    await client.post(f"{base}/voters", json={"id": "alice", "name": "Alice", "password": "pw1"}, headers=admin_headers)
    await client.post(f"{base}/election/start", headers=admin_headers)
    return {"position": position["id"], "carol": carol["id"], "dave": dave["id"]}
