"""
Ballot administration schemas: positions, candidates and voters.
"""

from typing import Optional

from pydantic import BaseModel, Field

from models.election import Voter


class PositionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    max_selections: Optional[int] = Field(None, ge=1)


class PositionUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    max_selections: Optional[int] = Field(None, ge=1)


class PositionResponse(BaseModel):
    id: int
    name: str
    max_selections: Optional[int] = None

    model_config = {"from_attributes": True}


class CandidateCreate(BaseModel):
    position_id: int
    name: str = Field(..., min_length=1, max_length=120)
    image_url: Optional[str] = None


class CandidateUpdate(BaseModel):
    position_id: Optional[int] = None
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    image_url: Optional[str] = None


class CandidateResponse(BaseModel):
    id: int
    position_id: int
    name: str
    image_url: str = ""

    model_config = {"from_attributes": True}


class VoterCreate(BaseModel):
    id: str = Field(..., min_length=1, max_length=128)
    name: str = Field(..., min_length=1, max_length=120)
    password: str = Field(..., min_length=1, max_length=256)


class VoterUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    password: Optional[str] = Field(None, min_length=1, max_length=256)
    is_blocked: Optional[bool] = None


class VoterResponse(BaseModel):
    """Voter as shown to the admin. The password is never returned."""

    id: str
    name: str
    is_blocked: bool = False
    has_voted: bool = False

    @classmethod
    def from_voter(cls, voter: Voter) -> "VoterResponse":
        return cls(id=voter.id, name=voter.name, is_blocked=voter.is_blocked, has_voted=voter.has_voted)


class VoterLookupResponse(BaseModel):
    """Result of the "find my voter ID" helper."""

    id: str
    name: str
