"""
Results schemas.
"""

from typing import Optional

from pydantic import BaseModel

from services.results_service import CandidateResult, PositionResult


class CandidateResultResponse(BaseModel):
    candidate_id: int
    name: str
    image_url: str = ""
    votes: int = 0
    vote_percentage: float = 0.0


class PositionResultResponse(BaseModel):
    position_id: int
    position_name: str
    total_votes: int = 0
    candidates: list[CandidateResultResponse]
    winner: Optional[CandidateResultResponse] = None

    @classmethod
    def from_result(cls, result: PositionResult) -> "PositionResultResponse":
        def convert(c: CandidateResult) -> CandidateResultResponse:
            return CandidateResultResponse(
                candidate_id=c.candidate_id,
                name=c.name,
                image_url=c.image_url,
                votes=c.votes,
                vote_percentage=round(c.vote_percentage, 1),
            )

        return cls(
            position_id=result.position_id,
            position_name=result.position_name,
            total_votes=result.total_votes,
            candidates=[convert(c) for c in result.candidates],
            winner=convert(result.winner) if result.winner else None,
        )
