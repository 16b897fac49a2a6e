"""
Vote-related Pydantic schemas.
"""

from pydantic import BaseModel, Field


class VoteCreate(BaseModel):
    """
    A complete ballot.

    Maps position id to the candidate ids chosen for it. An empty mapping is
    an abstention and still counts as having voted.
    """

    selections: dict[int, list[int]] = Field(default_factory=dict)


class VoteResponse(BaseModel):
    """Response after successfully casting a vote."""

    success: bool
    message: str
    votes_recorded: int = 0
