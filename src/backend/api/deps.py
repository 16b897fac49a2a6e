"""
Shared dependencies for API endpoints.

Includes:
- Service wiring over the configured key/value store
- Session JWT authentication with revocation
- Role guards (super admin, workspace admin, voter)
"""

from dataclasses import dataclass
from typing import Annotated, Any, Optional

import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.security import create_session_token, decode_token
from models.session import AdminSession, Session, SuperAdminSession, VoterSession
from repositories.kv_store import get_store
from repositories.registry_repository import RegistryRepository
from repositories.workspace_repository import WorkspaceRepository
from services.audit_service import AuditService
from services.auth_service import AuthenticationResolver
from services.ballot_service import BallotService
from services.election_service import ElectionService
from services.results_service import ResultsService
from services.token_service import TokenService, get_token_service
from services.vote_recorder import VoteRecorder
from services.workspace_registry import WorkspaceRegistry

logger = structlog.get_logger(__name__)

# Security schemes
security = HTTPBearer()
security_optional = HTTPBearer(auto_error=False)


# =============================================================================
# Service Wiring
# =============================================================================


@dataclass
class Services:
    """Repositories and services bound to one store."""

    workspaces: WorkspaceRepository
    registry_repo: RegistryRepository
    audit: AuditService
    registry: WorkspaceRegistry
    auth: AuthenticationResolver

    def election(self, workspace_id: str) -> ElectionService:
        return ElectionService(self.workspaces, workspace_id)

    def ballot(self, workspace_id: str) -> BallotService:
        return BallotService(self.workspaces, workspace_id)

    def recorder(self, workspace_id: str) -> VoteRecorder:
        return VoteRecorder(self.workspaces, workspace_id)

    def results(self, workspace_id: str) -> ResultsService:
        return ResultsService(self.workspaces, workspace_id)


def get_services() -> Services:
    store = get_store()
    workspaces = WorkspaceRepository(store)
    registry_repo = RegistryRepository(store)
    audit = AuditService(workspaces, registry_repo)
    registry = WorkspaceRegistry(registry_repo, workspaces, audit)
    return Services(
        workspaces=workspaces,
        registry_repo=registry_repo,
        audit=audit,
        registry=registry,
        auth=AuthenticationResolver(workspaces, registry, audit),
    )


ServicesDep = Annotated[Services, Depends(get_services)]


# =============================================================================
# Session Tokens
# =============================================================================


def create_token_for(session: Session) -> str:
    """Issue a bearer token describing ``session``."""
    if isinstance(session, SuperAdminSession):
        return create_session_token("super_admin", session.profile.id)
    if isinstance(session, AdminSession):
        return create_session_token(
            "admin",
            session.profile.id if session.profile else "",
            workspace_id=session.workspace_id,
            entered_by=session.entered_by.id if session.entered_by else None,
        )
    if isinstance(session, VoterSession):
        return create_session_token("voter", session.voter.id, workspace_id=session.workspace_id)
    raise ValueError("Anonymous sessions do not get tokens")


@dataclass
class AuthenticatedSession:
    """A session rebuilt from a valid, unrevoked token."""

    session: Session
    payload: dict[str, Any]

    @property
    def jti(self) -> Optional[str]:
        return self.payload.get("jti")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def session_from_claims(payload: dict[str, Any], services: Services) -> Optional[Session]:
    """
    Rebuild a session from token claims against current storage.

    Returns None when the stored records no longer back the claims, e.g.
    the workspace was deleted or the admin's id changed.
    """
    kind = payload.get("kind")
    subject = payload.get("sub")
    workspace_id = payload.get("ws")
    super_admin = services.registry.get_super_admin_profile()

    if kind == "super_admin":
        return SuperAdminSession(profile=super_admin) if subject == super_admin.id else None

    if not workspace_id or services.registry.find(workspace_id) is None:
        return None
    state = services.workspaces.load(workspace_id)

    if kind == "admin":
        entered_by = payload.get("entered_by")
        if entered_by:
            if entered_by != super_admin.id:
                return None
            return AdminSession(workspace_id=workspace_id, profile=state.admin_profile, entered_by=super_admin)
        if state.admin_profile is None or state.admin_profile.id != subject:
            return None
        return AdminSession(workspace_id=workspace_id, profile=state.admin_profile)

    if kind == "voter":
        voter = state.find_voter(subject or "")
        if voter is None or voter.is_blocked:
            return None
        return VoterSession(workspace_id=workspace_id, voter=voter)

    return None


async def get_current_session(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    services: ServicesDep,
    token_service: TokenService = Depends(get_token_service),
) -> AuthenticatedSession:
    """
    Extract and validate the current session from the JWT token.

    Also checks if the token has been revoked (logout or a committed vote).

    Raises:
        HTTPException: If token is invalid, revoked, or no longer backed by storage.
    """
    payload = decode_token(credentials.credentials, expected_type="session")
    if payload is None:
        raise _unauthorized("Invalid or expired token")

    jti = payload.get("jti")
    if not jti or await token_service.is_token_blacklisted(jti):
        logger.warning("revoked_token_used", kind=payload.get("kind"))
        raise _unauthorized("Token has been revoked")

    session = session_from_claims(payload, services)
    if session is None:
        raise _unauthorized("Session is no longer valid")
    return AuthenticatedSession(session=session, payload=payload)


async def get_current_session_optional(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security_optional)],
    services: ServicesDep,
    token_service: TokenService = Depends(get_token_service),
) -> AuthenticatedSession | None:
    """
    Optionally extract the current session.

    Returns None if no token is provided or the token is not usable. Does
    not raise, for endpoints that serve both the public and signed-in users.
    """
    if credentials is None:
        return None
    payload = decode_token(credentials.credentials, expected_type="session")
    if payload is None or await token_service.is_token_blacklisted(payload.get("jti", "")):
        return None
    session = session_from_claims(payload, services)
    return AuthenticatedSession(session=session, payload=payload) if session else None


CurrentSession = Annotated[AuthenticatedSession, Depends(get_current_session)]


# =============================================================================
# Role Guards
# =============================================================================


def _forbidden(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


async def require_super_admin(current: CurrentSession) -> SuperAdminSession:
    if not isinstance(current.session, SuperAdminSession):
        logger.warning("super_admin_access_denied", kind=current.payload.get("kind"))
        raise _forbidden("Super admin access required")
    return current.session


async def require_workspace_admin(workspace_id: str, current: CurrentSession) -> AdminSession:
    """Ensure the caller administers the workspace named in the path."""
    session = current.session
    if not isinstance(session, AdminSession) or session.workspace_id != workspace_id:
        logger.warning("admin_access_denied", workspace_id=workspace_id, kind=current.payload.get("kind"))
        raise _forbidden("Admin access to this workspace required")
    return session


async def require_voter(workspace_id: str, current: CurrentSession) -> VoterSession:
    session = current.session
    if not isinstance(session, VoterSession) or session.workspace_id != workspace_id:
        raise _forbidden("Voter session for this workspace required")
    return session


def require_workspace(workspace_id: str, services: ServicesDep) -> str:
    """Path guard: 404 for unknown workspaces."""
    services.registry.get(workspace_id)
    return workspace_id


SuperAdminDep = Annotated[SuperAdminSession, Depends(require_super_admin)]
WorkspaceAdminDep = Annotated[AdminSession, Depends(require_workspace_admin)]
VoterDep = Annotated[VoterSession, Depends(require_voter)]
WorkspaceIdDep = Annotated[str, Depends(require_workspace)]
