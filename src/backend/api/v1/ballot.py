"""
Ballot administration endpoints: positions, candidates, voters and the
workspace admin's own profile.

Positions and candidates are readable by anyone so the voting booth can be
rendered. Voter records are admin-only, except the "find my voter ID"
lookup which returns ids and names.
"""

from typing import Optional

from fastapi import APIRouter, Query, Response, status

from api.deps import ServicesDep, WorkspaceAdminDep, WorkspaceIdDep
from core.exceptions import UnknownVoter
from schemas.ballot import (
    CandidateCreate,
    CandidateResponse,
    CandidateUpdate,
    PositionCreate,
    PositionResponse,
    PositionUpdate,
    VoterCreate,
    VoterLookupResponse,
    VoterResponse,
    VoterUpdate,
)
from schemas.workspace import AdminProfileResponse, AdminProfileUpdate
from services.audit_service import actor_for_session

router = APIRouter()


# =============================================================================
# Positions
# =============================================================================


@router.get("/positions", response_model=list[PositionResponse])
def list_positions(workspace_id: WorkspaceIdDep, services: ServicesDep) -> list[PositionResponse]:
    return [PositionResponse.model_validate(p) for p in services.ballot(workspace_id).list_positions()]


@router.post("/positions", response_model=PositionResponse, status_code=status.HTTP_201_CREATED)
def add_position(
    workspace_id: str,
    data: PositionCreate,
    admin: WorkspaceAdminDep,
    services: ServicesDep,
) -> PositionResponse:
    position = services.ballot(workspace_id).add_position(
        data.name, actor_for_session(admin), max_selections=data.max_selections
    )
    return PositionResponse.model_validate(position)


@router.patch("/positions/{position_id}", response_model=PositionResponse)
def update_position(
    workspace_id: str,
    position_id: int,
    data: PositionUpdate,
    admin: WorkspaceAdminDep,
    services: ServicesDep,
) -> PositionResponse:
    position = services.ballot(workspace_id).update_position(
        position_id, actor_for_session(admin), name=data.name, max_selections=data.max_selections
    )
    return PositionResponse.model_validate(position)


@router.delete("/positions/{position_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_position(workspace_id: str, position_id: int, admin: WorkspaceAdminDep, services: ServicesDep) -> Response:
    """Remove a position together with its candidates."""
    services.ballot(workspace_id).remove_position(position_id, actor_for_session(admin))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Candidates
# =============================================================================


@router.get("/candidates", response_model=list[CandidateResponse])
def list_candidates(
    workspace_id: WorkspaceIdDep,
    services: ServicesDep,
    position_id: Optional[int] = Query(None),
) -> list[CandidateResponse]:
    return [CandidateResponse.model_validate(c) for c in services.ballot(workspace_id).list_candidates(position_id)]


@router.post("/candidates", response_model=CandidateResponse, status_code=status.HTTP_201_CREATED)
def add_candidate(
    workspace_id: str,
    data: CandidateCreate,
    admin: WorkspaceAdminDep,
    services: ServicesDep,
) -> CandidateResponse:
    candidate = services.ballot(workspace_id).add_candidate(
        data.position_id, data.name, actor_for_session(admin), image_url=data.image_url
    )
    return CandidateResponse.model_validate(candidate)


@router.patch("/candidates/{candidate_id}", response_model=CandidateResponse)
def update_candidate(
    workspace_id: str,
    candidate_id: int,
    data: CandidateUpdate,
    admin: WorkspaceAdminDep,
    services: ServicesDep,
) -> CandidateResponse:
    candidate = services.ballot(workspace_id).update_candidate(
        candidate_id,
        actor_for_session(admin),
        name=data.name,
        image_url=data.image_url,
        position_id=data.position_id,
    )
    return CandidateResponse.model_validate(candidate)


@router.delete("/candidates/{candidate_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_candidate(workspace_id: str, candidate_id: int, admin: WorkspaceAdminDep, services: ServicesDep) -> Response:
    services.ballot(workspace_id).remove_candidate(candidate_id, actor_for_session(admin))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Voters
# =============================================================================


@router.get("/voters", response_model=list[VoterResponse])
def list_voters(workspace_id: str, admin: WorkspaceAdminDep, services: ServicesDep) -> list[VoterResponse]:
    return [VoterResponse.from_voter(v) for v in services.ballot(workspace_id).list_voters()]


@router.get("/voter-lookup", response_model=list[VoterLookupResponse])
def find_voter_ids(
    workspace_id: WorkspaceIdDep,
    services: ServicesDep,
    name: str = Query(..., min_length=1, max_length=120),
) -> list[VoterLookupResponse]:
    """Find voter ids registered under an exact name (case-insensitive)."""
    return [
        VoterLookupResponse(id=voter_id, name=voter_name)
        for voter_id, voter_name in services.ballot(workspace_id).find_voter_ids(name)
    ]


@router.post("/voters", response_model=VoterResponse, status_code=status.HTTP_201_CREATED)
def add_voter(workspace_id: str, data: VoterCreate, admin: WorkspaceAdminDep, services: ServicesDep) -> VoterResponse:
    voter = services.ballot(workspace_id).add_voter(data.id, data.name, data.password, actor_for_session(admin))
    return VoterResponse.from_voter(voter)


@router.patch("/voters/{voter_id}", response_model=VoterResponse)
def update_voter(
    workspace_id: str,
    voter_id: str,
    data: VoterUpdate,
    admin: WorkspaceAdminDep,
    services: ServicesDep,
) -> VoterResponse:
    """Update name or password, and block or unblock. Each change is audited separately."""
    ballot = services.ballot(workspace_id)
    actor = actor_for_session(admin)
    voter = None
    if data.name is not None or data.password is not None:
        voter = ballot.update_voter(voter_id, actor, name=data.name, password=data.password)
    if data.is_blocked is not None:
        voter = ballot.set_voter_blocked(voter_id, data.is_blocked, actor)
    if voter is None:
        voter = next((v for v in ballot.list_voters() if v.matches_login(voter_id)), None)
        if voter is None:
            raise UnknownVoter(voter_id)
    return VoterResponse.from_voter(voter)


@router.delete("/voters/{voter_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_voter(workspace_id: str, voter_id: str, admin: WorkspaceAdminDep, services: ServicesDep) -> Response:
    services.ballot(workspace_id).remove_voter(voter_id, actor_for_session(admin))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Admin profile
# =============================================================================


@router.patch("/admin-profile", response_model=AdminProfileResponse)
def update_own_profile(
    workspace_id: str,
    data: AdminProfileUpdate,
    admin: WorkspaceAdminDep,
    services: ServicesDep,
) -> AdminProfileResponse:
    """The workspace admin edits their own name, password, picture or contact."""
    profile = services.ballot(workspace_id).update_admin_profile(
        actor_for_session(admin), **data.model_dump(exclude_unset=True)
    )
    return AdminProfileResponse.from_profile(profile)
