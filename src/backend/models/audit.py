"""
Audit log documents.

The audit log is an ordered, newest-first record of privileged actions,
scoped to one workspace. It is not a hash chain: entries are plain records
that are only ever prepended, and the whole log is cleared by a full reset.
"""

from enum import Enum
from uuid import uuid4

from pydantic import Field

from core import clock
from models.election import ElectionDocument


class AuditLogAction(str, Enum):
    """
    Known audit actions.

    The stored ``action`` field is an open string: values not listed here
    load unchanged.
    """

    ELECTION_START = "ELECTION_START"
    ELECTION_END = "ELECTION_END"
    ELECTION_RESET = "ELECTION_RESET"
    RESULTS_PUBLISHED = "RESULTS_PUBLISHED"
    RESULTS_HIDDEN = "RESULTS_HIDDEN"
    ADMIN_LOGIN = "ADMIN_LOGIN"
    VOTER_LOGIN_SUCCESS = "VOTER_LOGIN_SUCCESS"
    VOTER_LOGIN_FAIL = "VOTER_LOGIN_FAIL"
    VOTE_CAST = "VOTE_CAST"
    WORKSPACE_CREATED = "WORKSPACE_CREATED"
    WORKSPACE_DELETED = "WORKSPACE_DELETED"
    WORKSPACE_ENTERED = "WORKSPACE_ENTERED"
    POSITION_ADDED = "POSITION_ADDED"
    POSITION_UPDATED = "POSITION_UPDATED"
    POSITION_REMOVED = "POSITION_REMOVED"
    CANDIDATE_ADDED = "CANDIDATE_ADDED"
    CANDIDATE_UPDATED = "CANDIDATE_UPDATED"
    CANDIDATE_REMOVED = "CANDIDATE_REMOVED"
    VOTER_ADDED = "VOTER_ADDED"
    VOTER_UPDATED = "VOTER_UPDATED"
    VOTER_REMOVED = "VOTER_REMOVED"
    VOTER_BLOCKED = "VOTER_BLOCKED"
    VOTER_UNBLOCKED = "VOTER_UNBLOCKED"
    ADMIN_PROFILE_UPDATED = "ADMIN_PROFILE_UPDATED"
    SUPER_ADMIN_PROFILE_UPDATED = "SUPER_ADMIN_PROFILE_UPDATED"


class ActorRole(str, Enum):
    SYSTEM = "System"
    SUPER_ADMIN = "Super Admin"
    ADMIN = "Admin"
    VOTER = "Voter"


class AuditActor(ElectionDocument):
    """Identity a logged action is attributed to."""

    id: str
    name: str
    role: ActorRole


SYSTEM_ACTOR = AuditActor(id="System", name="System", role=ActorRole.SYSTEM)


def _entry_id() -> str:
    return f"{clock.now_ms()}-{uuid4().hex[:12]}"


class AuditLogEntry(ElectionDocument):
    id: str = Field(default_factory=_entry_id)
    timestamp: int = Field(default_factory=lambda: clock.now_ms())
    action: str
    details: str
    actor: AuditActor
