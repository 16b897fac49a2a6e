"""
Tests for the domain error to HTTP status mapping.
"""

import pytest

from core.exceptions import (
    AccountBlocked,
    AlreadyVoted,
    DuplicateVoter,
    ElectionError,
    InvalidTransition,
    PermissionDenied,
    ResultsNotPublished,
    TooManySelections,
    UnknownCandidate,
    UnknownVoter,
    WorkspaceNotFound,
)
from main import status_code_for


@pytest.mark.unit
class TestStatusCodeFor:
    """Tests for mapping domain errors to HTTP status codes."""

    @pytest.mark.parametrize(
        ("error", "status_code"),
        [
            (WorkspaceNotFound("ws-1"), 404),
            (UnknownVoter("alice"), 404),
            (UnknownCandidate(9), 422),
            (TooManySelections(1, 1), 422),
            (PermissionDenied(), 403),
            (AlreadyVoted(), 409),
            (AccountBlocked(), 401),
            (InvalidTransition(), 409),
            (DuplicateVoter("alice"), 409),
            (ResultsNotPublished(), 409),
            (ElectionError(), 400),
        ],
    )
    def test_mapping(self, error: ElectionError, status_code: int) -> None:
        """Test the status code for each error type."""
        assert status_code_for(error) == status_code

    def test_messages_are_displayable(self) -> None:
        """Test that errors carry a code and a readable message."""
        assert AlreadyVoted().message == "You have already cast your vote."
        assert AlreadyVoted().code == "ALREADY_VOTED"
        assert InvalidTransition("Nope.").message == "Nope."
