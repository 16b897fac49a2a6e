"""
Vote endpoint.

A voter submits the whole ballot in one request. On success the session
token is revoked: a voter session ends with its vote.
"""

import structlog
from fastapi import APIRouter, Depends, status

from api.deps import CurrentSession, ServicesDep, VoterDep
from core.security import seconds_until_expiry
from schemas.vote import VoteCreate, VoteResponse
from services.token_service import TokenService, get_token_service

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/votes", response_model=VoteResponse, status_code=status.HTTP_201_CREATED)
async def cast_vote(
    workspace_id: str,
    vote_data: VoteCreate,
    voter: VoterDep,
    current: CurrentSession,
    services: ServicesDep,
    token_service: TokenService = Depends(get_token_service),
) -> VoteResponse:
    """
    Cast a vote.

    Requirements:
    - Caller holds a voter session for this workspace
    - The election is in progress
    - The voter has not voted yet (checked again at commit time)
    - Every position and candidate exists, and candidates stand for the
      position they are selected under

    Votes and the voter's has-voted flag are saved together.
    """
    result = services.recorder(workspace_id).cast_vote(voter.voter.id, vote_data.selections)
    await token_service.blacklist_token(current.jti, seconds_until_expiry(current.payload))
    return VoteResponse(
        success=True,
        message="Thank you for voting!",
        votes_recorded=len(result.votes),
    )
