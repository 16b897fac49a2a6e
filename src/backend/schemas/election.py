"""
Election lifecycle and audit log schemas.
"""

from typing import Optional

from pydantic import BaseModel

from models.audit import AuditLogEntry
from models.election import ElectionStatus
from services.election_service import ElectionSnapshot


class ElectionStatusResponse(BaseModel):
    """Lifecycle view shown on the login screen and the admin dashboard."""

    status: ElectionStatus
    end_time: Optional[int] = None
    results_published: bool = False
    results_visible: bool = False
    version: int = 0

    @classmethod
    def from_snapshot(cls, snapshot: ElectionSnapshot) -> "ElectionStatusResponse":
        return cls(
            status=snapshot.status,
            end_time=snapshot.end_time,
            results_published=snapshot.results_published,
            results_visible=snapshot.results_visible,
            version=snapshot.version,
        )


class ResultsPublishedUpdate(BaseModel):
    published: bool


class AuditActorResponse(BaseModel):
    id: str
    name: str
    role: str


class AuditLogEntryResponse(BaseModel):
    id: str
    timestamp: int
    action: str
    details: str
    actor: AuditActorResponse

    @classmethod
    def from_entry(cls, entry: AuditLogEntry) -> "AuditLogEntryResponse":
        return cls(
            id=entry.id,
            timestamp=entry.timestamp,
            action=entry.action,
            details=entry.details,
            actor=AuditActorResponse(id=entry.actor.id, name=entry.actor.name, role=entry.actor.role.value),
        )
