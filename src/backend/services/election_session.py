"""
Single-context election session.

Holds what one user of the app sees at a time: the active workspace, the
current ``Session`` and the screen. Login failures, vote rejections and
illegal navigation come back as ``ActionResult`` messages rather than
exceptions. Privileged passthroughs raise ``PermissionDenied`` when the
session lacks the role.
"""

from dataclasses import dataclass
from typing import Any, Optional

import structlog

from core.exceptions import ElectionError, PermissionDenied
from models.audit import AuditActor
from models.election import AdminProfile, Workspace
from models.session import ANONYMOUS, AdminSession, Session, SuperAdminSession, VoterSession
from repositories.kv_store import KeyValueStore, get_store
from repositories.registry_repository import RegistryRepository
from repositories.workspace_repository import WorkspaceRepository
from services.audit_service import AuditService, actor_for_session
from services.auth_service import AuthenticationResolver, Role
from services.ballot_service import BallotService
from services.election_service import ElectionService, ElectionSnapshot
from services.navigation import INITIAL_SCREEN, NavigationEvent, Screen, transition
from services.results_service import PositionResult, ResultsService
from services.vote_recorder import Selections, VoteRecorder
from services.workspace_registry import WorkspaceRegistry

logger = structlog.get_logger(__name__)

_LOGIN_EVENTS = {
    Role.SUPER_ADMIN: NavigationEvent.SUPER_ADMIN_LOGIN,
    Role.ADMIN: NavigationEvent.ADMIN_LOGIN,
    Role.VOTER: NavigationEvent.VOTER_LOGIN,
}


@dataclass
class ActionResult:
    ok: bool
    message: Optional[str] = None
    value: Any = None

    @classmethod
    def failed(cls, error: ElectionError) -> "ActionResult":
        return cls(ok=False, message=error.message)


class ElectionSession:
    """Facade over the election services for one interactive user."""

    def __init__(self, store: Optional[KeyValueStore] = None):
        self.store = store or get_store()
        self.workspaces = WorkspaceRepository(self.store)
        self.registry_repo = RegistryRepository(self.store)
        self.audit = AuditService(self.workspaces, self.registry_repo)
        self.registry = WorkspaceRegistry(self.registry_repo, self.workspaces, self.audit)
        self.auth = AuthenticationResolver(self.workspaces, self.registry, self.audit)

        self.session: Session = ANONYMOUS
        self.screen: Screen = INITIAL_SCREEN
        self.workspace: Optional[Workspace] = self.registry.restore_last_selected()
        if self.workspace is not None:
            self.election.expire_if_due()

    # ========================================================================
    # Accessors
    # ========================================================================

    @property
    def workspace_id(self) -> Optional[str]:
        return self.workspace.id if self.workspace else None

    @property
    def actor(self) -> AuditActor:
        return actor_for_session(self.session)

    @property
    def election(self) -> ElectionService:
        return ElectionService(self.workspaces, self._require_workspace())

    @property
    def ballot(self) -> BallotService:
        """Ballot administration, for the admin of the active workspace only."""
        self._require_admin()
        return BallotService(self.workspaces, self._require_workspace())

    def snapshot(self) -> ElectionSnapshot:
        return self.election.snapshot()

    def _require_workspace(self) -> str:
        if self.workspace is None:
            raise PermissionDenied("No workspace is selected.")
        return self.workspace.id

    def _require_admin(self) -> AdminSession:
        if not isinstance(self.session, AdminSession) or self.session.workspace_id != self.workspace_id:
            raise PermissionDenied()
        return self.session

    def _require_super_admin(self) -> AdminProfile:
        if isinstance(self.session, SuperAdminSession):
            return self.session.profile
        if isinstance(self.session, AdminSession) and self.session.is_super_admin_bypass:
            return self.session.entered_by
        raise PermissionDenied()

    def _go(self, event: NavigationEvent, results_visible: bool = False) -> Screen:
        self.screen = transition(
            self.screen,
            event,
            workspace_active=self.workspace is not None,
            results_visible=results_visible,
        )
        return self.screen

    # ========================================================================
    # Workspace selection
    # ========================================================================

    def switch_workspace(self) -> ActionResult:
        try:
            self._go(NavigationEvent.SWITCH_WORKSPACE)
        except ElectionError as e:
            return ActionResult.failed(e)
        self.session = ANONYMOUS
        self.workspace = None
        self.registry.deselect()
        return ActionResult(ok=True)

    def select_workspace(self, workspace_id: str) -> ActionResult:
        try:
            workspace = self.registry.get(workspace_id)
            target = transition(self.screen, NavigationEvent.SELECT_WORKSPACE)
        except ElectionError as e:
            return ActionResult.failed(e)
        self.registry.select(workspace_id)
        self.workspace = workspace
        self.screen = target
        self.election.expire_if_due()
        logger.info("workspace_selected", workspace_id=workspace_id)
        return ActionResult(ok=True, value=self.workspace)

    def back(self) -> ActionResult:
        try:
            self._go(NavigationEvent.BACK)
        except ElectionError as e:
            return ActionResult.failed(e)
        return ActionResult(ok=True)

    # ========================================================================
    # Authentication
    # ========================================================================

    def login(self, login_id: str, password: str) -> ActionResult:
        if self.screen != Screen.LOGIN:
            return ActionResult(ok=False, message="Log out before signing in again.")
        if self.workspace is not None:
            self.election.expire_if_due()

        outcome = self.auth.login(login_id, password, self.workspace_id)
        if not outcome.ok:
            return ActionResult(ok=False, message=outcome.message)

        self.session = outcome.session
        self._go(_LOGIN_EVENTS[outcome.role])
        return ActionResult(ok=True, value=outcome.role)

    def logout(self) -> ActionResult:
        """Leave the current role but keep the workspace selected."""
        try:
            self._go(NavigationEvent.LOGOUT)
        except ElectionError as e:
            return ActionResult.failed(e)
        self.session = ANONYMOUS
        return ActionResult(ok=True)

    def full_logout(self) -> ActionResult:
        """Leave the current role and forget the selected workspace."""
        try:
            self._go(NavigationEvent.FULL_LOGOUT)
        except ElectionError as e:
            return ActionResult.failed(e)
        self.session = ANONYMOUS
        self.workspace = None
        self.registry.deselect()
        return ActionResult(ok=True)

    def enter_workspace(self, workspace_id: str) -> ActionResult:
        """Super admin adopts the admin role of a workspace without a password."""
        if not isinstance(self.session, SuperAdminSession):
            return ActionResult.failed(PermissionDenied())
        try:
            workspace = self.registry.get(workspace_id)
            target = transition(self.screen, NavigationEvent.ENTER_WORKSPACE)
            self.session = self.registry.enter_workspace(workspace_id, self.session.profile)
        except ElectionError as e:
            return ActionResult.failed(e)
        self.workspace = workspace
        self.screen = target
        self.election.expire_if_due()
        return ActionResult(ok=True, value=self.workspace)

    # ========================================================================
    # Voting and results
    # ========================================================================

    def cast_vote(self, selections: Selections) -> ActionResult:
        if not isinstance(self.session, VoterSession):
            return ActionResult.failed(PermissionDenied("Only a logged-in voter can vote."))
        recorder = VoteRecorder(self.workspaces, self.session.workspace_id)
        try:
            result = recorder.cast_vote(self.session.voter.id, selections)
        except ElectionError as e:
            return ActionResult.failed(e)

        self.session = ANONYMOUS
        self._go(NavigationEvent.VOTE_COMMITTED)
        return ActionResult(ok=True, message="Thank you for voting!", value=result)

    def view_results(self) -> ActionResult:
        if self.workspace is None:
            return ActionResult(ok=False, message="Please select a workspace first.")
        self.election.expire_if_due()
        try:
            results: list[PositionResult] = ResultsService(self.workspaces, self.workspace.id).public_results()
            self._go(NavigationEvent.VIEW_RESULTS, results_visible=True)
        except ElectionError as e:
            return ActionResult.failed(e)
        return ActionResult(ok=True, value=results)

    # ========================================================================
    # Admin passthroughs
    # ========================================================================

    def start_election(self) -> ElectionSnapshot:
        self._require_admin()
        return self.election.start(self.actor)

    def end_election(self) -> ElectionSnapshot:
        self._require_admin()
        return self.election.end(self.actor)

    def reset_election(self) -> ElectionSnapshot:
        self._require_admin()
        return self.election.reset(self.actor)

    def set_results_published(self, published: bool) -> ElectionSnapshot:
        self._require_admin()
        return self.election.set_results_published(published, self.actor)

    def live_results(self) -> list[PositionResult]:
        self._require_admin()
        return ResultsService(self.workspaces, self._require_workspace()).live_results()

    def audit_log(self):
        self._require_admin()
        return self.audit.entries(self._require_workspace())

    # ========================================================================
    # Super admin passthroughs
    # ========================================================================

    def create_workspace(self, name: str, workspace_id: Optional[str] = None) -> Workspace:
        profile = self._require_super_admin()
        return self.registry.create(name, actor_for_session(SuperAdminSession(profile=profile)), workspace_id)

    def delete_workspace(self, workspace_id: str) -> Workspace:
        profile = self._require_super_admin()
        deleted = self.registry.delete(workspace_id, actor_for_session(SuperAdminSession(profile=profile)))
        if self.workspace_id == workspace_id:
            self.workspace = None
        return deleted

    def enable_new_election(self, workspace_id: str) -> ElectionSnapshot:
        profile = self._require_super_admin()
        self.registry.get(workspace_id)
        return ElectionService(self.workspaces, workspace_id).enable_new_election(profile)

    def set_admin_profile(self, workspace_id: str, admin: AdminProfile) -> AdminProfile:
        profile = self._require_super_admin()
        return self.registry.set_admin_profile(
            workspace_id, admin, actor_for_session(SuperAdminSession(profile=profile))
        )
