"""
Election lifecycle endpoints.

The status endpoint is public (the login screen shows it). Transitions and
the audit log are for the workspace admin only.
"""

import structlog
from fastapi import APIRouter

from api.deps import ServicesDep, WorkspaceAdminDep, WorkspaceIdDep
from schemas.election import AuditLogEntryResponse, ElectionStatusResponse, ResultsPublishedUpdate
from services.audit_service import actor_for_session

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/election", response_model=ElectionStatusResponse)
def get_election(workspace_id: WorkspaceIdDep, services: ServicesDep) -> ElectionStatusResponse:
    """Current phase. Ends the election first if its voting window has passed."""
    election = services.election(workspace_id)
    election.expire_if_due()
    return ElectionStatusResponse.from_snapshot(election.snapshot())


@router.post("/election/start", response_model=ElectionStatusResponse)
def start_election(workspace_id: str, admin: WorkspaceAdminDep, services: ServicesDep) -> ElectionStatusResponse:
    return ElectionStatusResponse.from_snapshot(services.election(workspace_id).start(actor_for_session(admin)))


@router.post("/election/end", response_model=ElectionStatusResponse)
def end_election(workspace_id: str, admin: WorkspaceAdminDep, services: ServicesDep) -> ElectionStatusResponse:
    return ElectionStatusResponse.from_snapshot(services.election(workspace_id).end(actor_for_session(admin)))


@router.post("/election/reset", response_model=ElectionStatusResponse)
def reset_election(workspace_id: str, admin: WorkspaceAdminDep, services: ServicesDep) -> ElectionStatusResponse:
    """Wipe positions, candidates, voters, votes and the audit log."""
    return ElectionStatusResponse.from_snapshot(services.election(workspace_id).reset(actor_for_session(admin)))


@router.put("/election/results-published", response_model=ElectionStatusResponse)
def set_results_published(
    workspace_id: str,
    data: ResultsPublishedUpdate,
    admin: WorkspaceAdminDep,
    services: ServicesDep,
) -> ElectionStatusResponse:
    snapshot = services.election(workspace_id).set_results_published(data.published, actor_for_session(admin))
    return ElectionStatusResponse.from_snapshot(snapshot)


@router.get("/audit-log", response_model=list[AuditLogEntryResponse])
def get_audit_log(workspace_id: str, admin: WorkspaceAdminDep, services: ServicesDep) -> list[AuditLogEntryResponse]:
    """Workspace audit log, newest first."""
    return [AuditLogEntryResponse.from_entry(e) for e in services.audit.entries(workspace_id)]
