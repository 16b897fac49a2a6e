"""
Election lifecycle service.

State machine per workspace:

    NOT_STARTED --start--> IN_PROGRESS --end--> ENDED --start--> IN_PROGRESS
         ^                                                          |
         +------------------- reset / enable_new_election ----------+

Invariant: ``election_end_time`` is set if and only if the status is
IN_PROGRESS. Every state change appends exactly one audit entry.
"""

from dataclasses import dataclass
from typing import Optional

import structlog

from core import clock
from core.config import settings
from core.exceptions import InvalidTransition
from models.audit import SYSTEM_ACTOR, ActorRole, AuditActor, AuditLogAction
from models.election import AdminProfile, ElectionStatus
from models.workspace_state import WorkspaceAggregate
from repositories.workspace_repository import WorkspaceRepository
from services.audit_service import append_entry, profile_actor

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ElectionSnapshot:
    """Read-only view of the lifecycle fields."""

    status: ElectionStatus
    end_time: Optional[int]
    results_published: bool
    version: int

    @property
    def results_visible(self) -> bool:
        """Results are public only once the election ended and was published."""
        return self.status == ElectionStatus.ENDED and self.results_published


class ElectionService:
    """Lifecycle transitions for one workspace."""

    def __init__(self, workspaces: WorkspaceRepository, workspace_id: str):
        self.workspaces = workspaces
        self.workspace_id = workspace_id

    def snapshot(self) -> ElectionSnapshot:
        state = self.workspaces.load(self.workspace_id)
        return ElectionSnapshot(
            status=state.election_status,
            end_time=state.election_end_time,
            results_published=state.results_published,
            version=state.version,
        )

    # ========================================================================
    # Transitions
    # ========================================================================

    def start(self, actor: AuditActor) -> ElectionSnapshot:
        """
        Open voting for ``ELECTION_DURATION_HOURS``.

        A repeated start on a running election does nothing unless
        ``ELECTION_RESTART_EXTENDS_WINDOW`` is enabled, in which case the end
        time is re-stamped from now.
        """
        with self.workspaces.store.lock():
            current = self.workspaces.load(self.workspace_id)
            if current.election_status == ElectionStatus.IN_PROGRESS and not settings.ELECTION_RESTART_EXTENDS_WINDOW:
                logger.info("election_start_ignored", workspace_id=self.workspace_id)
                return self.snapshot()
            with self.workspaces.transaction(self.workspace_id) as state:
                state.election_status = ElectionStatus.IN_PROGRESS
                state.election_end_time = clock.now_ms() + settings.election_duration_ms
                append_entry(state, AuditLogAction.ELECTION_START, "The election has been started.", actor)
        logger.info("election_started", workspace_id=self.workspace_id)
        return self.snapshot()

    def end(self, actor: AuditActor) -> ElectionSnapshot:
        with self.workspaces.transaction(self.workspace_id) as state:
            if state.election_status != ElectionStatus.IN_PROGRESS:
                raise InvalidTransition("Only an election in progress can be ended.")
            _close(state, actor)
        logger.info("election_ended", workspace_id=self.workspace_id)
        return self.snapshot()

    def expire_if_due(self) -> bool:
        """End the election as System once its end time has passed."""
        with self.workspaces.store.lock():
            if not voting_window_elapsed(self.workspaces.load(self.workspace_id)):
                return False
            with self.workspaces.transaction(self.workspace_id) as state:
                _close(state, SYSTEM_ACTOR, "The election ended automatically when its voting window closed.")
        logger.info("election_expired", workspace_id=self.workspace_id)
        return True

    def reset(self, actor: AuditActor) -> ElectionSnapshot:
        """
        Wipe the whole election: ballot, voters, votes and the audit log.

        The reset entry is written after the log is cleared and becomes the
        first entry of the new log. The admin profile survives.
        """
        with self.workspaces.transaction(self.workspace_id) as state:
            state.positions = []
            state.candidates = []
            state.voters = []
            state.votes = []
            state.audit_log = []
            state.election_status = ElectionStatus.NOT_STARTED
            state.election_end_time = None
            state.results_published = False
            append_entry(state, AuditLogAction.ELECTION_RESET, "The entire election data was reset.", actor)
        logger.info("election_reset", workspace_id=self.workspace_id)
        return self.snapshot()

    def enable_new_election(self, super_admin: AdminProfile) -> ElectionSnapshot:
        """
        Super admin's lighter reset.

        Clears votes and the voting window and re-opens every voter's latch,
        but keeps positions, candidates, voter identities and audit history.
        """
        with self.workspaces.transaction(self.workspace_id) as state:
            state.votes = []
            state.election_status = ElectionStatus.NOT_STARTED
            state.election_end_time = None
            state.results_published = False
            for voter in state.voters:
                voter.has_voted = False
            append_entry(
                state,
                AuditLogAction.ELECTION_RESET,
                "Super Admin enabled a new election for this workspace.",
                profile_actor(super_admin, ActorRole.SUPER_ADMIN),
            )
        logger.info("new_election_enabled", workspace_id=self.workspace_id)
        return self.snapshot()

    def set_results_published(self, published: bool, actor: AuditActor) -> ElectionSnapshot:
        with self.workspaces.transaction(self.workspace_id) as state:
            state.results_published = published
            if published:
                append_entry(state, AuditLogAction.RESULTS_PUBLISHED, "Results were publicly published.", actor)
            else:
                append_entry(state, AuditLogAction.RESULTS_HIDDEN, "Results were hidden from public view.", actor)
        return self.snapshot()


def voting_window_elapsed(state: WorkspaceAggregate) -> bool:
    """True once a running election is past its end time but not yet closed."""
    return (
        state.election_status == ElectionStatus.IN_PROGRESS
        and state.election_end_time is not None
        and clock.now_ms() >= state.election_end_time
    )


def _close(state: WorkspaceAggregate, actor: AuditActor, details: str = "The election has been ended.") -> None:
    state.election_status = ElectionStatus.ENDED
    state.election_end_time = None
    append_entry(state, AuditLogAction.ELECTION_END, details, actor)
