"""
Workspace endpoints.

Listing is public so the workspace picker works before anyone logs in.
Everything else belongs to the super admin.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Response, status

from api.deps import ServicesDep, SuperAdminDep, WorkspaceIdDep
from api.v1.auth import token_response
from schemas.auth import TokenResponse
from schemas.election import ElectionStatusResponse
from schemas.workspace import AdminProfileIn, AdminProfileResponse, WorkspaceCreate, WorkspaceResponse
from services.audit_service import actor_for_session
from services.auth_service import Role
from services.navigation import NavigationEvent, Screen, transition

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("", response_model=list[WorkspaceResponse])
def list_workspaces(services: ServicesDep) -> list[WorkspaceResponse]:
    """All workspaces with their current election status."""
    return [
        WorkspaceResponse(id=ws.id, name=ws.name, election_status=services.registry.workspace_status(ws.id))
        for ws in services.registry.list()
    ]


@router.post("", response_model=WorkspaceResponse, status_code=status.HTTP_201_CREATED)
def create_workspace(data: WorkspaceCreate, super_admin: SuperAdminDep, services: ServicesDep) -> WorkspaceResponse:
    workspace = services.registry.create(
        data.name,
        actor_for_session(super_admin),
        workspace_id=data.workspace_id,
        admin_profile=data.admin_profile.to_profile() if data.admin_profile else None,
    )
    return WorkspaceResponse(
        id=workspace.id,
        name=workspace.name,
        election_status=services.registry.workspace_status(workspace.id),
    )


@router.delete("/{workspace_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_workspace(workspace_id: str, super_admin: SuperAdminDep, services: ServicesDep) -> Response:
    """Delete a workspace and every piece of data stored for it."""
    services.registry.delete(workspace_id, actor_for_session(super_admin))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{workspace_id}/enter", response_model=TokenResponse)
def enter_workspace(workspace_id: str, super_admin: SuperAdminDep, services: ServicesDep) -> TokenResponse:
    """
    Act as the workspace admin without its password.

    Returns an admin token marked as entered by the super admin, so every
    action taken with it is attributed to the super admin.
    """
    session = services.registry.enter_workspace(workspace_id, super_admin.profile)
    services.election(workspace_id).expire_if_due()
    screen = transition(Screen.SUPER_ADMIN_VIEW, NavigationEvent.ENTER_WORKSPACE)
    logger.info("workspace_entered", workspace_id=workspace_id)
    return token_response(session, Role.ADMIN, screen)


@router.post("/{workspace_id}/new-election", response_model=ElectionStatusResponse)
def enable_new_election(
    workspace_id: WorkspaceIdDep,
    super_admin: SuperAdminDep,
    services: ServicesDep,
) -> ElectionStatusResponse:
    """Clear votes and re-open every voter, keeping the ballot and the audit history."""
    snapshot = services.election(workspace_id).enable_new_election(super_admin.profile)
    return ElectionStatusResponse.from_snapshot(snapshot)


@router.get("/{workspace_id}/admin-profile", response_model=Optional[AdminProfileResponse])
def get_admin_profile(
    workspace_id: WorkspaceIdDep,
    super_admin: SuperAdminDep,
    services: ServicesDep,
) -> Optional[AdminProfileResponse]:
    profile = services.registry.get_admin_profile(workspace_id)
    return AdminProfileResponse.from_profile(profile) if profile else None


@router.put("/{workspace_id}/admin-profile", response_model=AdminProfileResponse)
def set_admin_profile(
    workspace_id: WorkspaceIdDep,
    data: AdminProfileIn,
    super_admin: SuperAdminDep,
    services: ServicesDep,
) -> AdminProfileResponse:
    """Set or replace the workspace admin's credentials."""
    profile = services.registry.set_admin_profile(workspace_id, data.to_profile(), actor_for_session(super_admin))
    return AdminProfileResponse.from_profile(profile)
