"""
Ballot administration for a workspace.

Positions, candidates, voters and the workspace admin profile. Each mutator
runs in its own aggregate transaction and appends one audit entry.
Removing a position also removes its candidates so every candidate keeps
pointing at an existing position.
"""

from typing import Optional

import structlog

from core.config import settings
from core.exceptions import (
    DuplicateVoter,
    InvalidTransition,
    UnknownCandidate,
    UnknownPosition,
    UnknownVoter,
)
from models.audit import AuditActor, AuditLogAction
from models.election import AdminProfile, Candidate, Position, Voter
from models.workspace_state import WorkspaceAggregate
from repositories.workspace_repository import WorkspaceRepository
from services.audit_service import append_entry

logger = structlog.get_logger(__name__)


def _require_position(state: WorkspaceAggregate, position_id: int) -> Position:
    position = state.get_position(position_id)
    if position is None:
        raise UnknownPosition(position_id)
    return position


def _require_candidate(state: WorkspaceAggregate, candidate_id: int) -> Candidate:
    candidate = state.get_candidate(candidate_id)
    if candidate is None:
        raise UnknownCandidate(candidate_id)
    return candidate


def _require_voter(state: WorkspaceAggregate, voter_id: str) -> Voter:
    voter = state.find_voter(voter_id)
    if voter is None:
        raise UnknownVoter(voter_id)
    return voter


class BallotService:
    """Admin-panel mutators for one workspace."""

    def __init__(self, workspaces: WorkspaceRepository, workspace_id: str):
        self.workspaces = workspaces
        self.workspace_id = workspace_id

    # ========================================================================
    # Positions
    # ========================================================================

    def list_positions(self) -> list[Position]:
        return self.workspaces.load(self.workspace_id).positions

    def add_position(self, name: str, actor: AuditActor, max_selections: Optional[int] = None) -> Position:
        with self.workspaces.transaction(self.workspace_id) as state:
            position = Position(id=state.next_position_id(), name=name.strip(), max_selections=max_selections)
            state.positions.append(position)
            append_entry(state, AuditLogAction.POSITION_ADDED, f"Position '{position.name}' was added.", actor)
        return position

    def update_position(
        self,
        position_id: int,
        actor: AuditActor,
        name: Optional[str] = None,
        max_selections: Optional[int] = None,
    ) -> Position:
        with self.workspaces.transaction(self.workspace_id) as state:
            position = _require_position(state, position_id)
            if name is not None:
                position.name = name.strip()
            if max_selections is not None:
                position.max_selections = max_selections
            append_entry(state, AuditLogAction.POSITION_UPDATED, f"Position '{position.name}' was updated.", actor)
        return position

    def remove_position(self, position_id: int, actor: AuditActor) -> Position:
        with self.workspaces.transaction(self.workspace_id) as state:
            position = _require_position(state, position_id)
            state.positions = [p for p in state.positions if p.id != position_id]
            removed = [c for c in state.candidates if c.position_id == position_id]
            state.candidates = [c for c in state.candidates if c.position_id != position_id]
            append_entry(
                state,
                AuditLogAction.POSITION_REMOVED,
                f"Position '{position.name}' and its {len(removed)} candidate(s) were removed.",
                actor,
            )
        return position

    # ========================================================================
    # Candidates
    # ========================================================================

    def list_candidates(self, position_id: Optional[int] = None) -> list[Candidate]:
        state = self.workspaces.load(self.workspace_id)
        if position_id is None:
            return state.candidates
        return state.candidates_for(position_id)

    def add_candidate(
        self,
        position_id: int,
        name: str,
        actor: AuditActor,
        image_url: Optional[str] = None,
    ) -> Candidate:
        with self.workspaces.transaction(self.workspace_id) as state:
            position = _require_position(state, position_id)
            candidate = Candidate(
                id=state.next_candidate_id(),
                position_id=position.id,
                name=name.strip(),
                image_url=image_url or settings.DEFAULT_USER_IMAGE,
            )
            state.candidates.append(candidate)
            append_entry(
                state,
                AuditLogAction.CANDIDATE_ADDED,
                f"Candidate '{candidate.name}' was added for '{position.name}'.",
                actor,
            )
        return candidate

    def update_candidate(
        self,
        candidate_id: int,
        actor: AuditActor,
        name: Optional[str] = None,
        image_url: Optional[str] = None,
        position_id: Optional[int] = None,
    ) -> Candidate:
        with self.workspaces.transaction(self.workspace_id) as state:
            candidate = _require_candidate(state, candidate_id)
            if position_id is not None:
                candidate.position_id = _require_position(state, position_id).id
            if name is not None:
                candidate.name = name.strip()
            if image_url is not None:
                candidate.image_url = image_url
            append_entry(state, AuditLogAction.CANDIDATE_UPDATED, f"Candidate '{candidate.name}' was updated.", actor)
        return candidate

    def remove_candidate(self, candidate_id: int, actor: AuditActor) -> Candidate:
        with self.workspaces.transaction(self.workspace_id) as state:
            candidate = _require_candidate(state, candidate_id)
            state.candidates = [c for c in state.candidates if c.id != candidate_id]
            append_entry(state, AuditLogAction.CANDIDATE_REMOVED, f"Candidate '{candidate.name}' was removed.", actor)
        return candidate

    # ========================================================================
    # Voters
    # ========================================================================

    def list_voters(self) -> list[Voter]:
        return self.workspaces.load(self.workspace_id).voters

    def add_voter(self, voter_id: str, name: str, password: str, actor: AuditActor) -> Voter:
        voter_id = voter_id.strip()
        with self.workspaces.transaction(self.workspace_id) as state:
            if state.find_voter(voter_id) is not None:
                raise DuplicateVoter(voter_id)
            voter = Voter(id=voter_id, name=name.strip(), password=password)
            state.voters.append(voter)
            append_entry(state, AuditLogAction.VOTER_ADDED, f"Voter '{voter.name}' was registered.", actor)
        return voter

    def update_voter(
        self,
        voter_id: str,
        actor: AuditActor,
        name: Optional[str] = None,
        password: Optional[str] = None,
    ) -> Voter:
        """Change a voter's name or password. The hasVoted latch is not editable here."""
        with self.workspaces.transaction(self.workspace_id) as state:
            voter = _require_voter(state, voter_id)
            if name is not None:
                voter.name = name.strip()
            if password is not None:
                voter.password = password
            append_entry(state, AuditLogAction.VOTER_UPDATED, f"Voter '{voter.name}' was updated.", actor)
        return voter

    def set_voter_blocked(self, voter_id: str, blocked: bool, actor: AuditActor) -> Voter:
        with self.workspaces.transaction(self.workspace_id) as state:
            voter = _require_voter(state, voter_id)
            voter.is_blocked = blocked
            if blocked:
                append_entry(state, AuditLogAction.VOTER_BLOCKED, f"Voter '{voter.name}' was blocked.", actor)
            else:
                append_entry(state, AuditLogAction.VOTER_UNBLOCKED, f"Voter '{voter.name}' was unblocked.", actor)
        return voter

    def remove_voter(self, voter_id: str, actor: AuditActor) -> Voter:
        with self.workspaces.transaction(self.workspace_id) as state:
            voter = _require_voter(state, voter_id)
            state.voters = [v for v in state.voters if v.id != voter.id]
            append_entry(state, AuditLogAction.VOTER_REMOVED, f"Voter '{voter.name}' was removed.", actor)
        return voter

    def find_voter_ids(self, name: str) -> list[tuple[str, str]]:
        """
        "Find my voter ID": (id, name) pairs whose name matches exactly,
        ignoring case and surrounding whitespace. Passwords are never returned.
        """
        wanted = name.strip().lower()
        if not wanted:
            return []
        return [(v.id, v.name) for v in self.list_voters() if v.name.strip().lower() == wanted]

    # ========================================================================
    # Admin profile
    # ========================================================================

    def update_admin_profile(self, actor: AuditActor, **changes) -> AdminProfile:
        with self.workspaces.transaction(self.workspace_id) as state:
            if state.admin_profile is None:
                raise InvalidTransition("This workspace has no admin profile to update.")
            state.admin_profile = state.admin_profile.model_copy(
                update={k: v for k, v in changes.items() if v is not None}
            )
            append_entry(state, AuditLogAction.ADMIN_PROFILE_UPDATED, "Admin profile was updated.", actor)
            profile = state.admin_profile
        logger.info("admin_profile_updated", workspace_id=self.workspace_id)
        return profile
