"""
Election error taxonomy.

Every error carries a stable ``code`` (used in API payloads and tests) and a
human readable ``message`` that collaborators can display as-is.
"""


class ElectionError(Exception):
    """Base exception for election operations."""

    code = "ELECTION_ERROR"
    default_message = "The operation could not be completed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


# =============================================================================
# Authentication
# =============================================================================


class AuthenticationError(ElectionError):
    """Login was refused."""

    code = "AUTHENTICATION_FAILED"


class NoWorkspaceSelected(AuthenticationError):
    code = "NO_WORKSPACE_SELECTED"
    default_message = "Please select a workspace before logging in."


class AccountBlocked(AuthenticationError):
    code = "ACCOUNT_BLOCKED"
    default_message = "Your account is blocked. Please contact the administrator."


class ElectionNotActive(AuthenticationError):
    code = "ELECTION_NOT_ACTIVE"
    default_message = "The election is not currently in progress."


class AlreadyVoted(AuthenticationError):
    code = "ALREADY_VOTED"
    default_message = "You have already cast your vote."


class InvalidCredentials(AuthenticationError):
    code = "INVALID_CREDENTIALS"
    default_message = "Invalid credentials. Please check your ID and password."


# =============================================================================
# Vote validation
# =============================================================================


class VoteRejected(ElectionError):
    """A ballot could not be committed."""

    code = "VOTE_REJECTED"


class UnknownPosition(VoteRejected):
    code = "UNKNOWN_POSITION"

    def __init__(self, position_id: int) -> None:
        self.position_id = position_id
        super().__init__(f"Position {position_id} does not exist.")


class UnknownCandidate(VoteRejected):
    code = "UNKNOWN_CANDIDATE"

    def __init__(self, candidate_id: int, position_id: int | None = None) -> None:
        self.candidate_id = candidate_id
        self.position_id = position_id
        if position_id is None:
            super().__init__(f"Candidate {candidate_id} does not exist.")
        else:
            super().__init__(f"Candidate {candidate_id} is not standing for position {position_id}.")


class UnknownVoter(VoteRejected):
    code = "UNKNOWN_VOTER"

    def __init__(self, voter_id: str) -> None:
        self.voter_id = voter_id
        super().__init__(f"Voter '{voter_id}' does not exist.")


class TooManySelections(VoteRejected):
    code = "TOO_MANY_SELECTIONS"

    def __init__(self, position_id: int, limit: int) -> None:
        self.position_id = position_id
        self.limit = limit
        super().__init__(f"Position {position_id} accepts at most {limit} selection(s).")


# =============================================================================
# Lifecycle, registry and administration
# =============================================================================


class StaleWorkspaceState(ElectionError):
    """Another writer saved the workspace after it was loaded."""

    code = "STALE_WORKSPACE_STATE"

    def __init__(self, workspace_id: str, loaded: int, stored: int) -> None:
        self.workspace_id = workspace_id
        self.loaded = loaded
        self.stored = stored
        super().__init__("The workspace was changed by someone else. Please reload and try again.")


class InvalidTransition(ElectionError):
    code = "INVALID_TRANSITION"
    default_message = "That action is not allowed in the current state."


class WorkspaceNotFound(ElectionError):
    code = "WORKSPACE_NOT_FOUND"

    def __init__(self, workspace_id: str) -> None:
        self.workspace_id = workspace_id
        super().__init__(f"Workspace '{workspace_id}' does not exist.")


class DuplicateVoter(ElectionError):
    code = "DUPLICATE_VOTER"

    def __init__(self, voter_id: str) -> None:
        self.voter_id = voter_id
        super().__init__(f"A voter with ID '{voter_id}' already exists.")


class PermissionDenied(ElectionError):
    code = "PERMISSION_DENIED"
    default_message = "You are not allowed to perform this action."


class ResultsNotPublished(ElectionError):
    code = "RESULTS_NOT_PUBLISHED"
    default_message = (
        "The election has concluded. Final results will be available once published by the administrator."
    )


class WorkspaceExists(ElectionError):
    code = "WORKSPACE_EXISTS"

    def __init__(self, workspace_id: str) -> None:
        self.workspace_id = workspace_id
        super().__init__(f"Workspace '{workspace_id}' already exists.")
