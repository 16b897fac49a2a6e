"""Schemas module initialization."""

from schemas.auth import LoginRequest, LogoutResponse, TokenResponse
from schemas.ballot import (
    CandidateCreate,
    CandidateResponse,
    CandidateUpdate,
    PositionCreate,
    PositionResponse,
    PositionUpdate,
    VoterCreate,
    VoterResponse,
    VoterUpdate,
)
from schemas.election import AuditLogEntryResponse, ElectionStatusResponse, ResultsPublishedUpdate
from schemas.results import PositionResultResponse
from schemas.vote import VoteCreate, VoteResponse
from schemas.workspace import AdminProfileIn, AdminProfileResponse, WorkspaceCreate, WorkspaceResponse

__all__ = [
    "LoginRequest",
    "LogoutResponse",
    "TokenResponse",
    "WorkspaceCreate",
    "WorkspaceResponse",
    "AdminProfileIn",
    "AdminProfileResponse",
    "ElectionStatusResponse",
    "ResultsPublishedUpdate",
    "AuditLogEntryResponse",
    "PositionCreate",
    "PositionUpdate",
    "PositionResponse",
    "CandidateCreate",
    "CandidateUpdate",
    "CandidateResponse",
    "VoterCreate",
    "VoterUpdate",
    "VoterResponse",
    "VoteCreate",
    "VoteResponse",
    "PositionResultResponse",
]
