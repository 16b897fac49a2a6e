"""
Super admin endpoints: own profile and the registry-level audit log.
"""

from fastapi import APIRouter

from api.deps import ServicesDep, SuperAdminDep
from schemas.election import AuditLogEntryResponse
from schemas.workspace import AdminProfileResponse, AdminProfileUpdate

router = APIRouter()


@router.get("/profile", response_model=AdminProfileResponse)
def get_profile(super_admin: SuperAdminDep) -> AdminProfileResponse:
    return AdminProfileResponse.from_profile(super_admin.profile)


@router.patch("/profile", response_model=AdminProfileResponse)
def update_profile(data: AdminProfileUpdate, super_admin: SuperAdminDep, services: ServicesDep) -> AdminProfileResponse:
    """Change the super admin's name, password, picture or contact."""
    profile = services.registry.update_super_admin_profile(**data.model_dump(exclude_unset=True))
    return AdminProfileResponse.from_profile(profile)


@router.get("/audit-log", response_model=list[AuditLogEntryResponse])
def system_audit_log(super_admin: SuperAdminDep, services: ServicesDep) -> list[AuditLogEntryResponse]:
    """Workspace creations and deletions, newest first."""
    return [AuditLogEntryResponse.from_entry(e) for e in services.audit.system_entries()]
