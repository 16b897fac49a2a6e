"""
Tests for ballot administration.
"""

import pytest

from core.exceptions import DuplicateVoter, InvalidTransition, UnknownCandidate, UnknownPosition, UnknownVoter
from models.audit import AuditLogAction
from services.ballot_service import BallotService


@pytest.fixture
def ballot(seeded_workspace, workspaces) -> BallotService:
    return BallotService(workspaces, seeded_workspace)


def latest_action(workspaces, workspace_id: str) -> str:
    return workspaces.load(workspace_id).audit_log[0].action


@pytest.mark.unit
class TestPositions:
    """Tests for position management."""

    def test_ids_are_sequential(self, ballot, admin_actor) -> None:
        """Test that position ids are handed out in sequence."""
        assert ballot.add_position("Secretary", admin_actor).id == 3

    def test_rename(self, ballot, admin_actor, workspaces, seeded_workspace) -> None:
        """Test renaming a position."""
        ballot.update_position(1, admin_actor, name="Chair")
        assert ballot.list_positions()[0].name == "Chair"
        assert latest_action(workspaces, seeded_workspace) == AuditLogAction.POSITION_UPDATED.value

    def test_remove_cascades_candidates(self, ballot, admin_actor) -> None:
        """Test that removing a position removes its candidates."""
        ballot.remove_position(1, admin_actor)

        assert [p.id for p in ballot.list_positions()] == [2]
        assert [c.name for c in ballot.list_candidates()] == ["Erin"]

    def test_remove_unknown(self, ballot, admin_actor) -> None:
        """Test removing a position that does not exist."""
        with pytest.raises(UnknownPosition):
            ballot.remove_position(42, admin_actor)


@pytest.mark.unit
class TestCandidates:
    """Tests for candidate management."""

    def test_add_requires_existing_position(self, ballot, admin_actor) -> None:
        """Test that a candidate needs an existing position."""
        with pytest.raises(UnknownPosition):
            ballot.add_candidate(42, "Ghost", admin_actor)

    def test_default_image(self, ballot, admin_actor) -> None:
        """Test that a candidate without an image gets the placeholder."""
        from core.config import settings

        candidate = ballot.add_candidate(2, "Frank", admin_actor)
        assert candidate.image_url == settings.DEFAULT_USER_IMAGE

    def test_move_to_another_position(self, ballot, admin_actor) -> None:
        """Test moving a candidate to a different position."""
        ballot.update_candidate(3, admin_actor, position_id=1)
        assert [c.id for c in ballot.list_candidates(1)] == [1, 2, 3]

    def test_move_to_unknown_position(self, ballot, admin_actor) -> None:
        """Test moving a candidate to a position that does not exist."""
        with pytest.raises(UnknownPosition):
            ballot.update_candidate(3, admin_actor, position_id=42)

    def test_remove(self, ballot, admin_actor) -> None:
        """Test removing a candidate."""
        ballot.remove_candidate(2, admin_actor)
        assert [c.id for c in ballot.list_candidates(1)] == [1]

    def test_remove_unknown(self, ballot, admin_actor) -> None:
        """Test removing a candidate that does not exist."""
        with pytest.raises(UnknownCandidate):
            ballot.remove_candidate(42, admin_actor)


@pytest.mark.unit
class TestVoters:
    """Tests for voter roll management."""

    def test_duplicate_id_is_case_insensitive(self, ballot, admin_actor) -> None:
        """Test that voter ids differing only in case are duplicates."""
        with pytest.raises(DuplicateVoter):
            ballot.add_voter("ALICE", "Other Alice", "x", admin_actor)

    def test_block_and_unblock(self, ballot, admin_actor, workspaces, seeded_workspace) -> None:
        """Test blocking and unblocking a voter."""
        ballot.set_voter_blocked("alice", True, admin_actor)
        assert latest_action(workspaces, seeded_workspace) == AuditLogAction.VOTER_BLOCKED.value

        voter = ballot.set_voter_blocked("alice", False, admin_actor)
        assert not voter.is_blocked
        assert latest_action(workspaces, seeded_workspace) == AuditLogAction.VOTER_UNBLOCKED.value

    def test_update_password(self, ballot, admin_actor) -> None:
        """Test changing a voter password."""
        ballot.update_voter("alice", admin_actor, password="new-pw")
        assert ballot.list_voters()[0].password == "new-pw"

    def test_remove(self, ballot, admin_actor) -> None:
        """Test removing a voter."""
        ballot.remove_voter("Bob", admin_actor)
        assert [v.id for v in ballot.list_voters()] == ["alice"]

    def test_unknown_voter(self, ballot, admin_actor) -> None:
        """Test blocking a voter that does not exist."""
        with pytest.raises(UnknownVoter):
            ballot.set_voter_blocked("mallory", True, admin_actor)

    def test_find_voter_ids(self, ballot, admin_actor) -> None:
        """Test that voter lookup by name ignores case and spaces but not partial names."""
        ballot.add_voter("alice2", "Alice", "pw", admin_actor)

        assert ballot.find_voter_ids("  alice ") == [("alice", "Alice"), ("alice2", "Alice")]
        assert ballot.find_voter_ids("Ali") == []
        assert ballot.find_voter_ids("") == []

    def test_each_mutation_appends_one_entry(self, ballot, admin_actor, workspaces, seeded_workspace) -> None:
        """Test that every change adds exactly one audit entry."""
        before = len(workspaces.load(seeded_workspace).audit_log)
        ballot.add_voter("dan", "Dan", "pw", admin_actor)
        ballot.update_voter("dan", admin_actor, name="Daniel")
        ballot.remove_voter("dan", admin_actor)
        assert len(workspaces.load(seeded_workspace).audit_log) == before + 3


@pytest.mark.unit
class TestAdminProfile:
    """Tests for the workspace admin profile."""

    def test_update_keeps_unspecified_fields(self, ballot, admin_actor) -> None:
        """Test that a partial update keeps the other fields."""
        profile = ballot.update_admin_profile(admin_actor, contact="admin@example.org", name=None)

        assert profile.contact == "admin@example.org"
        assert profile.name == "Council Admin"
        assert profile.password == "adminpass"

    def test_update_without_profile(self, registry, workspaces, super_admin_actor, admin_actor) -> None:
        """Test that updating a missing admin profile is refused."""
        registry.create("Empty", super_admin_actor, workspace_id="ws-empty")
        with pytest.raises(InvalidTransition):
            BallotService(workspaces, "ws-empty").update_admin_profile(admin_actor, name="X")
