"""
Authentication resolver.

Decides which role a login id + password pair authenticates as, and whether
that login is allowed in the current election phase.

Resolution order (first match wins):
1. Super admin id and password -> SuperAdmin, with or without a workspace
2. No active workspace -> NoWorkspaceSelected
3. Workspace admin id and password -> Admin (any election phase)
4. Voter id (case-insensitive) and password ->
   blocked -> AccountBlocked, not IN_PROGRESS -> ElectionNotActive,
   already voted -> AlreadyVoted, otherwise Voter
5. Anything else -> InvalidCredentials (not audited)

Passwords are compared byte for byte. They are neither normalised nor
hashed; this is a known weakness of the stored data format.
"""

import hmac
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional

import structlog

from core.exceptions import (
    AccountBlocked,
    AlreadyVoted,
    AuthenticationError,
    ElectionNotActive,
    InvalidCredentials,
    NoWorkspaceSelected,
)
from models.audit import ActorRole, AuditActor, AuditLogAction
from models.election import AdminProfile, ElectionStatus, Voter, Workspace
from models.session import AdminSession, Session, SuperAdminSession, VoterSession
from repositories.workspace_repository import WorkspaceRepository
from services.audit_service import AuditService, profile_actor, voter_actor

if TYPE_CHECKING:
    from services.workspace_registry import WorkspaceRegistry

logger = structlog.get_logger(__name__)


class Role(str, Enum):
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    VOTER = "voter"


@dataclass
class AuthContext:
    """Everything the resolver is allowed to look at."""

    super_admin: AdminProfile
    workspace: Optional[Workspace] = None
    admin_profile: Optional[AdminProfile] = None
    voters: list[Voter] = field(default_factory=list)
    election_status: ElectionStatus = ElectionStatus.NOT_STARTED


@dataclass
class PendingAudit:
    action: AuditLogAction
    details: str
    actor: AuditActor


@dataclass
class LoginOutcome:
    session: Optional[Session] = None
    failure: Optional[AuthenticationError] = None
    audit: Optional[PendingAudit] = None

    @property
    def ok(self) -> bool:
        return self.session is not None

    @property
    def role(self) -> Optional[Role]:
        if isinstance(self.session, SuperAdminSession):
            return Role.SUPER_ADMIN
        if isinstance(self.session, AdminSession):
            return Role.ADMIN
        if isinstance(self.session, VoterSession):
            return Role.VOTER
        return None

    @property
    def message(self) -> Optional[str]:
        return self.failure.message if self.failure else None


def passwords_match(supplied: str, stored: str) -> bool:
    """Exact byte comparison (constant time)."""
    return hmac.compare_digest(supplied.encode("utf-8"), stored.encode("utf-8"))


def _voter_failure(voter: Voter, error: AuthenticationError, reason: str) -> LoginOutcome:
    return LoginOutcome(
        failure=error,
        audit=PendingAudit(
            action=AuditLogAction.VOTER_LOGIN_FAIL,
            details=f"Login failed for voter '{voter.name}' ({reason}).",
            actor=voter_actor(voter),
        ),
    )


def resolve_credentials(login_id: str, password: str, context: AuthContext) -> LoginOutcome:
    """
    Resolve a login attempt against a context snapshot.

    Pure function: it never mutates the context. The returned outcome carries
    the audit entry the caller must append, if any.
    """
    login_id = login_id.strip()
    super_admin = context.super_admin

    if login_id == super_admin.id and passwords_match(password, super_admin.password):
        return LoginOutcome(session=SuperAdminSession(profile=super_admin))

    if context.workspace is None:
        return LoginOutcome(failure=NoWorkspaceSelected())
    workspace_id = context.workspace.id

    admin = context.admin_profile
    if admin is not None and login_id == admin.id and passwords_match(password, admin.password):
        return LoginOutcome(
            session=AdminSession(workspace_id=workspace_id, profile=admin),
            audit=PendingAudit(
                action=AuditLogAction.ADMIN_LOGIN,
                details="Admin logged in successfully.",
                actor=profile_actor(admin, ActorRole.ADMIN),
            ),
        )

    voter = next((v for v in context.voters if v.matches_login(login_id)), None)
    if voter is not None and passwords_match(password, voter.password):
        if voter.is_blocked:
            return _voter_failure(voter, AccountBlocked(), "Account blocked")
        if context.election_status != ElectionStatus.IN_PROGRESS:
            return _voter_failure(voter, ElectionNotActive(), "Election not in progress")
        if voter.has_voted:
            return _voter_failure(voter, AlreadyVoted(), "Already voted")
        return LoginOutcome(
            session=VoterSession(workspace_id=workspace_id, voter=voter.model_copy()),
            audit=PendingAudit(
                action=AuditLogAction.VOTER_LOGIN_SUCCESS,
                details=f"Voter '{voter.name}' logged in successfully.",
                actor=voter_actor(voter),
            ),
        )

    return LoginOutcome(failure=InvalidCredentials())


class AuthenticationResolver:
    """Builds the context from storage and records login audit entries."""

    def __init__(
        self,
        workspaces: WorkspaceRepository,
        registry: "WorkspaceRegistry",
        audit: AuditService,
    ):
        self.workspaces = workspaces
        self.registry = registry
        self.audit = audit

    def build_context(self, workspace_id: Optional[str]) -> AuthContext:
        context = AuthContext(super_admin=self.registry.get_super_admin_profile())
        if not workspace_id:
            return context

        workspace = self.registry.find(workspace_id)
        if workspace is None:
            logger.warning("login_unknown_workspace", workspace_id=workspace_id)
            return context

        state = self.workspaces.load(workspace_id)
        context.workspace = workspace
        context.admin_profile = state.admin_profile
        context.voters = state.voters
        context.election_status = state.election_status
        return context

    def login(self, login_id: str, password: str, workspace_id: Optional[str]) -> LoginOutcome:
        outcome = resolve_credentials(login_id, password, self.build_context(workspace_id))

        if outcome.audit is not None and workspace_id:
            self.audit.record(workspace_id, outcome.audit.action, outcome.audit.details, outcome.audit.actor)

        if outcome.ok:
            logger.info("login_succeeded", role=outcome.role.value, workspace_id=workspace_id)
        else:
            logger.info("login_failed", code=outcome.failure.code, workspace_id=workspace_id)
        return outcome
