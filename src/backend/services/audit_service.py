"""
Audit log service.

Entries are prepended (newest first) and never edited or removed one by one.
A workspace log is cleared only by a full election reset or by deleting the
workspace. Registry-level actions whose target workspace is gone are written
to the system log instead.
"""

from enum import Enum
from typing import Optional, Union

import structlog

from models.audit import SYSTEM_ACTOR, ActorRole, AuditActor, AuditLogAction, AuditLogEntry
from models.election import AdminProfile, Voter
from models.session import AdminSession, Session, SuperAdminSession, VoterSession
from models.workspace_state import WorkspaceAggregate
from repositories.registry_repository import RegistryRepository
from repositories.workspace_repository import WorkspaceRepository

logger = structlog.get_logger(__name__)

ActionLike = Union[AuditLogAction, str]


# =============================================================================
# Actor Resolution
# =============================================================================


def profile_actor(profile: AdminProfile, role: ActorRole) -> AuditActor:
    return AuditActor(id=profile.id, name=profile.name, role=role)


def voter_actor(voter: Voter) -> AuditActor:
    return AuditActor(id=voter.id, name=voter.name, role=ActorRole.VOTER)


def actor_for_session(session: Optional[Session]) -> AuditActor:
    """
    Attribute an action to the current session.

    The super admin wins over everything else, including when it entered a
    workspace through the admin bypass. No session means System.
    """
    if isinstance(session, SuperAdminSession):
        return profile_actor(session.profile, ActorRole.SUPER_ADMIN)
    if isinstance(session, AdminSession):
        if session.is_super_admin_bypass:
            return profile_actor(session.entered_by, ActorRole.SUPER_ADMIN)
        if session.profile is not None:
            return profile_actor(session.profile, ActorRole.ADMIN)
    if isinstance(session, VoterSession):
        return voter_actor(session.voter)
    return SYSTEM_ACTOR


# =============================================================================
# Append
# =============================================================================


def _action_value(action: ActionLike) -> str:
    return action.value if isinstance(action, Enum) else str(action)


def append_entry(
    aggregate: WorkspaceAggregate,
    action: ActionLike,
    details: str,
    actor: AuditActor,
) -> AuditLogEntry:
    """Prepend an entry to a workspace log held in memory."""
    entry = AuditLogEntry(action=_action_value(action), details=details, actor=actor)
    aggregate.audit_log.insert(0, entry)
    logger.info(
        "audit_entry_appended",
        action=entry.action,
        actor_id=actor.id,
        actor_role=actor.role.value,
    )
    return entry


class AuditService:
    """Persistent access to workspace and system audit logs."""

    def __init__(self, workspaces: WorkspaceRepository, registry: RegistryRepository):
        self.workspaces = workspaces
        self.registry = registry

    def record(
        self,
        workspace_id: str,
        action: ActionLike,
        details: str,
        actor: AuditActor,
    ) -> AuditLogEntry:
        """Append an entry to a workspace log in its own transaction."""
        with self.workspaces.transaction(workspace_id) as state:
            return append_entry(state, action, details, actor)

    def entries(self, workspace_id: str) -> list[AuditLogEntry]:
        return list(self.workspaces.load(workspace_id).audit_log)

    def record_system(self, action: ActionLike, details: str, actor: AuditActor) -> AuditLogEntry:
        """Append an entry to the registry-level system log."""
        with self.registry.store.lock():
            entries = self.registry.get_system_log()
            entry = AuditLogEntry(action=_action_value(action), details=details, actor=actor)
            entries.insert(0, entry)
            self.registry.save_system_log(entries)
        logger.info("system_audit_entry_appended", action=entry.action, actor_id=actor.id)
        return entry

    def system_entries(self) -> list[AuditLogEntry]:
        return self.registry.get_system_log()
