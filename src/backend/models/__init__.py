"""Election document models."""

from models.audit import ActorRole, AuditActor, AuditLogAction, AuditLogEntry
from models.election import (
    AdminProfile,
    Candidate,
    ElectionStatus,
    Position,
    Vote,
    Voter,
    Workspace,
)
from models.session import (
    AdminSession,
    AnonymousSession,
    Session,
    SuperAdminSession,
    VoterSession,
)
from models.workspace_state import WorkspaceAggregate

__all__ = [
    "ActorRole",
    "AuditActor",
    "AuditLogAction",
    "AuditLogEntry",
    "AdminProfile",
    "Candidate",
    "ElectionStatus",
    "Position",
    "Vote",
    "Voter",
    "Workspace",
    "AdminSession",
    "AnonymousSession",
    "Session",
    "SuperAdminSession",
    "VoterSession",
    "WorkspaceAggregate",
]
