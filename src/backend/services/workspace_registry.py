"""
Workspace registry.

Owns the list of workspaces, the "last selected" pointer, the global super
admin profile and the per-workspace admin profiles as seen by the super
admin. Deleting a workspace purges every ``workspace_<id>_*`` key.
"""

import re
from typing import Optional
from uuid import uuid4

import structlog

from core.config import settings
from core.exceptions import WorkspaceExists, WorkspaceNotFound
from models.audit import ActorRole, AuditActor, AuditLogAction
from models.election import AdminProfile, ElectionStatus, Workspace
from models.session import AdminSession
from models.workspace_state import WorkspaceAggregate
from repositories.registry_repository import RegistryRepository
from repositories.workspace_repository import WorkspaceRepository
from services.audit_service import AuditService, append_entry, profile_actor

logger = structlog.get_logger(__name__)

# Underscores are reserved as the key separator in workspace_<id>_<field>
WORKSPACE_ID_PATTERN = re.compile(r"^[A-Za-z0-9-]{1,64}$")

THEMES = ("light", "dark")


def generate_workspace_id() -> str:
    return f"ws-{uuid4().hex[:12]}"


class WorkspaceRegistry:
    """Registry of workspaces plus the super admin's cross-workspace powers."""

    def __init__(
        self,
        registry: RegistryRepository,
        workspaces: WorkspaceRepository,
        audit: AuditService,
    ):
        self.registry = registry
        self.workspaces = workspaces
        self.audit = audit

    # ========================================================================
    # Lookup
    # ========================================================================

    def list(self) -> list[Workspace]:
        return self.registry.get_workspaces()

    def find(self, workspace_id: str) -> Optional[Workspace]:
        return next((ws for ws in self.list() if ws.id == workspace_id), None)

    def get(self, workspace_id: str) -> Workspace:
        workspace = self.find(workspace_id)
        if workspace is None:
            raise WorkspaceNotFound(workspace_id)
        return workspace

    def workspace_status(self, workspace_id: str) -> ElectionStatus:
        """Election status of a workspace without selecting it."""
        return self.workspaces.load(workspace_id).election_status

    # ========================================================================
    # Create / Delete
    # ========================================================================

    def create(
        self,
        name: str,
        actor: AuditActor,
        workspace_id: Optional[str] = None,
        admin_profile: Optional[AdminProfile] = None,
    ) -> Workspace:
        workspace_id = workspace_id or generate_workspace_id()
        if not WORKSPACE_ID_PATTERN.match(workspace_id):
            raise ValueError("Workspace id may only contain letters, digits and '-'")

        with self.registry.store.lock():
            existing = self.list()
            if any(ws.id == workspace_id for ws in existing):
                raise WorkspaceExists(workspace_id)
            workspace = Workspace(id=workspace_id, name=name.strip())
            self.registry.save_workspaces([*existing, workspace])

            if admin_profile is not None:
                with self.workspaces.transaction(workspace_id) as state:
                    state.admin_profile = admin_profile

        self.audit.record_system(
            AuditLogAction.WORKSPACE_CREATED,
            f"Workspace '{workspace.name}' (ID: {workspace.id}) was created.",
            actor,
        )
        logger.info("workspace_created", workspace_id=workspace.id)
        return workspace

    def delete(self, workspace_id: str, actor: AuditActor) -> Workspace:
        """
        Delete a workspace and purge all of its data.

        The name is captured before deletion so the audit entry stays
        meaningful once the workspace is gone.
        """
        with self.registry.store.lock():
            workspace = self.get(workspace_id)
            self.registry.save_workspaces([ws for ws in self.list() if ws.id != workspace_id])
            self.workspaces.purge(workspace_id)
            if self.registry.get_last_workspace_id() == workspace_id:
                self.registry.clear_last_workspace_id()

        self.audit.record_system(
            AuditLogAction.WORKSPACE_DELETED,
            f"Workspace '{workspace.name}' (ID: {workspace.id}) was deleted.",
            actor,
        )
        logger.info("workspace_deleted", workspace_id=workspace_id)
        return workspace

    # ========================================================================
    # Selection
    # ========================================================================

    def select(self, workspace_id: str) -> WorkspaceAggregate:
        """Activate a workspace: load its state and remember it."""
        self.get(workspace_id)
        self.registry.set_last_workspace_id(workspace_id)
        return self.workspaces.load(workspace_id)

    def deselect(self) -> None:
        self.registry.clear_last_workspace_id()

    def restore_last_selected(self) -> Optional[Workspace]:
        """Workspace selected in a previous run, if it still exists."""
        last_id = self.registry.get_last_workspace_id()
        return self.find(last_id) if last_id else None

    # ========================================================================
    # Profiles
    # ========================================================================

    def get_super_admin_profile(self) -> AdminProfile:
        """Return the super admin, writing the bootstrap record on first run."""
        profile = self.registry.get_super_admin_profile()
        if profile is None:
            profile = AdminProfile(
                id=settings.SUPER_ADMIN_ID,
                name=settings.SUPER_ADMIN_NAME,
                password=settings.SUPER_ADMIN_PASSWORD,
                image_url=settings.DEFAULT_USER_IMAGE,
            )
            self.registry.save_super_admin_profile(profile)
            logger.warning("super_admin_seeded", super_admin_id=profile.id)
        return profile

    def update_super_admin_profile(self, **changes) -> AdminProfile:
        current = self.get_super_admin_profile()
        updated = current.model_copy(update={k: v for k, v in changes.items() if v is not None})
        self.registry.save_super_admin_profile(updated)
        self.audit.record_system(
            AuditLogAction.SUPER_ADMIN_PROFILE_UPDATED,
            "Super Admin profile was updated.",
            profile_actor(updated, ActorRole.SUPER_ADMIN),
        )
        return updated

    def get_admin_profile(self, workspace_id: str) -> Optional[AdminProfile]:
        return self.workspaces.load(workspace_id).admin_profile

    def set_admin_profile(self, workspace_id: str, profile: AdminProfile, actor: AuditActor) -> AdminProfile:
        self.get(workspace_id)
        with self.workspaces.transaction(workspace_id) as state:
            state.admin_profile = profile
            append_entry(
                state,
                AuditLogAction.ADMIN_PROFILE_UPDATED,
                f"Admin profile set to '{profile.id}'.",
                actor,
            )
        return profile

    def enter_workspace(self, workspace_id: str, super_admin: AdminProfile) -> AdminSession:
        """
        Super admin bypass: adopt the workspace admin role without a password.

        This is not an admin login. It is audited separately, and everything
        done in the resulting session is attributed to the super admin.
        """
        self.get(workspace_id)
        with self.workspaces.transaction(workspace_id) as state:
            append_entry(
                state,
                AuditLogAction.WORKSPACE_ENTERED,
                "Super Admin entered the workspace as administrator.",
                profile_actor(super_admin, ActorRole.SUPER_ADMIN),
            )
            profile = state.admin_profile
        self.registry.set_last_workspace_id(workspace_id)
        return AdminSession(workspace_id=workspace_id, profile=profile, entered_by=super_admin)

    # ========================================================================
    # Preferences
    # ========================================================================

    def get_theme(self) -> str:
        theme = self.registry.get_theme()
        return theme if theme in THEMES else "light"

    def set_theme(self, theme: str) -> str:
        if theme not in THEMES:
            raise ValueError(f"Unknown theme {theme!r}")
        self.registry.set_theme(theme)
        return theme
