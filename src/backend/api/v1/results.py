"""
Results endpoint.

The workspace admin can always see the running tally. Everyone else sees
results only after the election ended and the admin published them.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from api.deps import AuthenticatedSession, ServicesDep, WorkspaceIdDep, get_current_session_optional
from models.session import AdminSession
from schemas.results import PositionResultResponse

router = APIRouter()


@router.get("/results", response_model=list[PositionResultResponse])
def get_results(
    workspace_id: WorkspaceIdDep,
    services: ServicesDep,
    current: Annotated[AuthenticatedSession | None, Depends(get_current_session_optional)],
) -> list[PositionResultResponse]:
    services.election(workspace_id).expire_if_due()
    results = services.results(workspace_id)

    session = current.session if current else None
    if isinstance(session, AdminSession) and session.workspace_id == workspace_id:
        tally = results.live_results()
    else:
        tally = results.public_results()
    return [PositionResultResponse.from_result(r) for r in tally]
