"""
Workspace aggregate.

All per-workspace state lives in one versioned document that is loaded and
saved as a unit, so a vote (votes + hasVoted latch) or a reset is never
observed half-written.
"""

from typing import Optional

from pydantic import Field

from models.audit import AuditLogEntry
from models.election import (
    AdminProfile,
    Candidate,
    ElectionDocument,
    ElectionStatus,
    Position,
    Vote,
    Voter,
)


class WorkspaceAggregate(ElectionDocument):
    """Complete election state of a single workspace."""

    version: int = 0

    positions: list[Position] = Field(default_factory=list)
    candidates: list[Candidate] = Field(default_factory=list)
    voters: list[Voter] = Field(default_factory=list)
    votes: list[Vote] = Field(default_factory=list)

    election_status: ElectionStatus = ElectionStatus.NOT_STARTED
    election_end_time: Optional[int] = None  # epoch ms, set only while IN_PROGRESS
    results_published: bool = False

    admin_profile: Optional[AdminProfile] = None

    # Newest first
    audit_log: list[AuditLogEntry] = Field(default_factory=list)

    # ========================================================================
    # Lookups
    # ========================================================================

    def find_voter(self, login_id: str) -> Optional[Voter]:
        """Find a voter by login id (case-insensitive)."""
        return next((v for v in self.voters if v.matches_login(login_id)), None)

    def get_position(self, position_id: int) -> Optional[Position]:
        return next((p for p in self.positions if p.id == position_id), None)

    def get_candidate(self, candidate_id: int) -> Optional[Candidate]:
        return next((c for c in self.candidates if c.id == candidate_id), None)

    def candidates_for(self, position_id: int) -> list[Candidate]:
        return [c for c in self.candidates if c.position_id == position_id]

    def next_position_id(self) -> int:
        return max((p.id for p in self.positions), default=0) + 1

    def next_candidate_id(self) -> int:
        return max((c.id for c in self.candidates), default=0) + 1
