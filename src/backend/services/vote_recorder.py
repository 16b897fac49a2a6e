"""
Vote recorder.

Commits a voter's ballot exactly once. The votes and the voter's hasVoted
latch are written in the same aggregate save, so no reader can observe one
without the other.

The audit entry names the voter but never the selections.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

import structlog

from core import clock
from core.exceptions import (
    AlreadyVoted,
    ElectionNotActive,
    TooManySelections,
    UnknownCandidate,
    UnknownPosition,
    UnknownVoter,
)
from models.audit import AuditLogAction
from models.election import ElectionStatus, Vote
from models.workspace_state import WorkspaceAggregate
from repositories.workspace_repository import WorkspaceRepository
from services.audit_service import append_entry, voter_actor
from services.election_service import voting_window_elapsed

logger = structlog.get_logger(__name__)

Selections = Mapping[int, Iterable[int]]


@dataclass
class CommitResult:
    voter_id: str
    votes: list[Vote] = field(default_factory=list)
    version: int = 0

    @property
    def abstained(self) -> bool:
        return not self.votes


def validate_selections(state: WorkspaceAggregate, selections: Selections) -> list[tuple[int, int]]:
    """
    Check every (position, candidate) pair against the ballot.

    Returns the distinct pairs in submission order. Raises instead of
    silently dropping anything that does not resolve.
    """
    pairs: list[tuple[int, int]] = []
    for position_id, candidate_ids in selections.items():
        position = state.get_position(position_id)
        if position is None:
            raise UnknownPosition(position_id)

        chosen: list[int] = []
        for candidate_id in candidate_ids:
            if candidate_id in chosen:
                continue
            candidate = state.get_candidate(candidate_id)
            if candidate is None:
                raise UnknownCandidate(candidate_id)
            if candidate.position_id != position_id:
                raise UnknownCandidate(candidate_id, position_id)
            chosen.append(candidate_id)

        if position.max_selections is not None and len(chosen) > position.max_selections:
            raise TooManySelections(position_id, position.max_selections)
        pairs.extend((position_id, candidate_id) for candidate_id in chosen)
    return pairs


class VoteRecorder:
    """Validates and commits ballots for one workspace."""

    def __init__(self, workspaces: WorkspaceRepository, workspace_id: str):
        self.workspaces = workspaces
        self.workspace_id = workspace_id

    def cast_vote(self, voter_id: str, selections: Selections) -> CommitResult:
        """
        Commit a ballot.

        The latch, the election phase and the voting window are re-checked
        inside the transaction because all of them may have changed since the
        voter logged in.
        An empty ``selections`` is an abstention and still sets the latch.
        """
        with self.workspaces.transaction(self.workspace_id) as state:
            voter = state.find_voter(voter_id)
            if voter is None:
                raise UnknownVoter(voter_id)
            if voter.has_voted:
                raise AlreadyVoted()
            if state.election_status != ElectionStatus.IN_PROGRESS or voting_window_elapsed(state):
                raise ElectionNotActive()

            pairs = validate_selections(state, selections)
            now = clock.now_ms()
            votes = [
                Vote(voter_id=voter.id, position_id=position_id, candidate_id=candidate_id, timestamp=now)
                for position_id, candidate_id in pairs
            ]

            state.votes.extend(votes)
            voter.has_voted = True
            append_entry(
                state,
                AuditLogAction.VOTE_CAST,
                f"Voter '{voter.name}' cast their vote.",
                voter_actor(voter),
            )
            result = CommitResult(voter_id=voter.id, votes=votes)

        result.version = state.version
        logger.info(
            "vote_committed",
            workspace_id=self.workspace_id,
            selections=len(result.votes),
        )
        return result
