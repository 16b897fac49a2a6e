"""
Election documents stored per workspace.

These Pydantic models define the persisted JSON structure. Field names on the
wire are camelCase (``positionId``, ``hasVoted``...) and enum values are the
literal strings below; both are part of the storage contract and must not
change without a migration.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# ============================================================================
# Enums
# ============================================================================


class ElectionStatus(str, Enum):
    """Election lifecycle status, one per workspace."""

    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"  # Voters may log in and vote
    ENDED = "ENDED"  # Results may be published


# ============================================================================
# Base Document Model
# ============================================================================


class ElectionDocument(BaseModel):
    """
    Base class for persisted election documents.

    Accepts both camelCase (stored) and snake_case (Python) field names and
    ignores unknown keys so older records keep loading.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_document(self) -> dict:
        """Serialize with the persisted camelCase field names."""
        return self.model_dump(mode="json", by_alias=True)


# ============================================================================
# Ballot Documents
# ============================================================================


class Workspace(ElectionDocument):
    """An isolated tenant holding one election."""

    id: str
    name: str


class Position(ElectionDocument):
    """A contest on the ballot."""

    id: int
    name: str
    # None means any number of candidates may be selected
    max_selections: Optional[int] = Field(default=None, ge=1)


class Candidate(ElectionDocument):
    """A candidate standing for exactly one position."""

    id: int
    position_id: int
    name: str
    image_url: str = ""


class Voter(ElectionDocument):
    """
    A registered voter.

    ``id`` is the login identifier and matches case-insensitively.
    ``has_voted`` is a latch: only the vote recorder sets it and only an
    administrative new-election reset clears it.
    """

    id: str
    name: str
    password: str
    is_blocked: bool = False
    has_voted: bool = False

    def matches_login(self, login_id: str) -> bool:
        return self.id.lower() == login_id.lower()


class Vote(ElectionDocument):
    """One (position, candidate) selection made by a voter."""

    voter_id: str
    position_id: int
    candidate_id: int
    timestamp: int  # epoch milliseconds


class AdminProfile(ElectionDocument):
    """Credentials and contact card of a workspace admin or the super admin."""

    id: str
    name: str
    password: str
    image_url: str = ""
    contact: str = ""
