"""
Results tally.

Counts votes per candidate and orders each position's candidates by votes,
highest first. Ties keep ballot order, and the first candidate is reported
as the winner (None when a position has no candidates).
"""

from dataclasses import dataclass, field
from typing import Optional

import structlog

from core.exceptions import ResultsNotPublished
from models.election import ElectionStatus
from models.workspace_state import WorkspaceAggregate
from repositories.workspace_repository import WorkspaceRepository

logger = structlog.get_logger(__name__)


@dataclass
class CandidateResult:
    candidate_id: int
    name: str
    image_url: str
    votes: int = 0
    vote_percentage: float = 0.0


@dataclass
class PositionResult:
    position_id: int
    position_name: str
    candidates: list[CandidateResult] = field(default_factory=list)
    total_votes: int = 0

    @property
    def winner(self) -> Optional[CandidateResult]:
        """Leading candidate, or None until someone has voted for this position."""
        return self.candidates[0] if self.candidates and self.total_votes else None


def count_votes(state: WorkspaceAggregate) -> dict[int, int]:
    """Votes per candidate id. Votes for removed candidates are ignored."""
    counts = {c.id: 0 for c in state.candidates}
    for vote in state.votes:
        if vote.candidate_id in counts:
            counts[vote.candidate_id] += 1
    return counts


def tally(state: WorkspaceAggregate) -> list[PositionResult]:
    counts = count_votes(state)
    results = []
    for position in state.positions:
        ranked = sorted(
            (
                CandidateResult(
                    candidate_id=c.id,
                    name=c.name,
                    image_url=c.image_url,
                    votes=counts.get(c.id, 0),
                )
                for c in state.candidates_for(position.id)
            ),
            key=lambda r: r.votes,
            reverse=True,
        )
        total = sum(r.votes for r in ranked)
        for r in ranked:
            r.vote_percentage = (r.votes / total * 100) if total > 0 else 0.0
        results.append(
            PositionResult(
                position_id=position.id,
                position_name=position.name,
                candidates=ranked,
                total_votes=total,
            )
        )
    return results


class ResultsService:
    """Read-side access to a workspace's results."""

    def __init__(self, workspaces: WorkspaceRepository, workspace_id: str):
        self.workspaces = workspaces
        self.workspace_id = workspace_id

    def live_results(self) -> list[PositionResult]:
        """Administrator view, available in every phase."""
        return tally(self.workspaces.load(self.workspace_id))

    def public_results(self) -> list[PositionResult]:
        """Public view, only once the election has ended and results were published."""
        state = self.workspaces.load(self.workspace_id)
        if state.election_status != ElectionStatus.ENDED or not state.results_published:
            logger.info("public_results_refused", workspace_id=self.workspace_id)
            raise ResultsNotPublished()
        return tally(state)
