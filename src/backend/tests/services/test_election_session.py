"""
Tests for the single-user election session facade.
"""

import pytest

from core.exceptions import PermissionDenied
from models.audit import ActorRole, AuditLogAction
from models.election import ElectionStatus
from models.session import AdminSession, AnonymousSession, SuperAdminSession
from services.auth_service import Role
from services.election_session import ElectionSession
from services.navigation import Screen


@pytest.fixture
def app_session(store, seeded_workspace) -> ElectionSession:
    return ElectionSession(store)


def pick_workspace(session: ElectionSession, workspace_id: str) -> None:
    assert session.switch_workspace().ok
    assert session.select_workspace(workspace_id).ok


@pytest.mark.unit
class TestWorkspaceSelection:
    """Tests for workspace selection within a session."""

    def test_starts_on_login_without_workspace(self, app_session) -> None:
        """Test that a fresh session starts on login with no workspace."""
        assert app_session.screen == Screen.LOGIN
        assert app_session.workspace is None
        assert isinstance(app_session.session, AnonymousSession)

    def test_select_and_restore_on_next_start(self, app_session, store, seeded_workspace) -> None:
        """Test that the selected workspace is restored on the next start."""
        pick_workspace(app_session, seeded_workspace)

        assert app_session.screen == Screen.LOGIN
        assert ElectionSession(store).workspace_id == seeded_workspace

    def test_select_from_login_screen_is_refused(self, app_session, registry, seeded_workspace) -> None:
        """Test that a workspace cannot be picked straight from login."""
        result = app_session.select_workspace(seeded_workspace)

        assert not result.ok
        assert registry.restore_last_selected() is None

    def test_select_unknown_workspace(self, app_session) -> None:
        """Test selecting a workspace that does not exist."""
        app_session.switch_workspace()
        result = app_session.select_workspace("ws-nope")
        assert not result.ok
        assert "does not exist" in result.message

    def test_back_from_picker(self, app_session) -> None:
        """Test going back from the workspace picker."""
        app_session.switch_workspace()
        assert app_session.back().ok
        assert app_session.screen == Screen.LOGIN


@pytest.mark.unit
class TestLoginFlows:
    """Tests for session login flows."""

    def test_super_admin_without_workspace(self, app_session) -> None:
        """Test super admin login with no workspace."""
        result = app_session.login("superadmin", "super123")

        assert result.ok and result.value == Role.SUPER_ADMIN
        assert app_session.screen == Screen.SUPER_ADMIN_VIEW

    def test_voter_needs_workspace(self, app_session) -> None:
        """Test that voter login needs a workspace."""
        result = app_session.login("alice", "pw1")
        assert not result.ok
        assert result.message == "Please select a workspace before logging in."

    def test_failed_login_is_a_message(self, app_session, seeded_workspace) -> None:
        """Test that a failed login leaves a message and stays on login."""
        pick_workspace(app_session, seeded_workspace)
        result = app_session.login("bob", "pw2")

        assert not result.ok
        assert result.message == "Your account is blocked. Please contact the administrator."
        assert app_session.screen == Screen.LOGIN

    def test_full_voting_flow(self, app_session, seeded_workspace, workspaces) -> None:
        """Test a voter logging in, voting and logging out."""
        pick_workspace(app_session, seeded_workspace)
        assert app_session.login("admin1", "adminpass").ok
        app_session.start_election()
        assert app_session.logout().ok

        assert app_session.login("alice", "pw1").ok
        assert app_session.screen == Screen.VOTER_VIEW

        result = app_session.cast_vote({1: [1], 2: [3]})

        assert result.ok
        assert app_session.screen == Screen.VOTED_SCREEN
        assert isinstance(app_session.session, AnonymousSession)
        assert workspaces.load(seeded_workspace).find_voter("alice").has_voted

        app_session.logout()
        assert app_session.login("alice", "pw1").message == "You have already cast your vote."

    def test_vote_rejection_keeps_voter_on_booth(self, app_session, seeded_workspace) -> None:
        """Test that a rejected vote leaves the voter on the ballot."""
        pick_workspace(app_session, seeded_workspace)
        app_session.login("admin1", "adminpass")
        app_session.start_election()
        app_session.logout()
        app_session.login("alice", "pw1")

        result = app_session.cast_vote({1: [3]})

        assert not result.ok
        assert app_session.screen == Screen.VOTER_VIEW

    def test_full_logout_forgets_workspace(self, app_session, store, seeded_workspace) -> None:
        """Test that a full logout clears the selected workspace."""
        pick_workspace(app_session, seeded_workspace)
        app_session.login("admin1", "adminpass")

        assert app_session.full_logout().ok
        assert app_session.workspace is None
        assert ElectionSession(store).workspace is None


@pytest.mark.unit
class TestRoleGates:
    """Tests for role checks on session actions."""

    def test_voter_cannot_start_election(self, app_session, seeded_workspace) -> None:
        """Test that a voter cannot start the election."""
        pick_workspace(app_session, seeded_workspace)
        with pytest.raises(PermissionDenied):
            app_session.start_election()
        with pytest.raises(PermissionDenied):
            app_session.ballot

    def test_admin_cannot_delete_workspace(self, app_session, seeded_workspace) -> None:
        """Test that a workspace admin cannot delete workspaces."""
        pick_workspace(app_session, seeded_workspace)
        app_session.login("admin1", "adminpass")
        with pytest.raises(PermissionDenied):
            app_session.delete_workspace(seeded_workspace)

    def test_admin_ballot_actions_are_attributed(self, app_session, seeded_workspace, workspaces) -> None:
        """Test that admin ballot changes are audited under the admin."""
        pick_workspace(app_session, seeded_workspace)
        app_session.login("admin1", "adminpass")

        app_session.ballot.add_voter("zoe", "Zoe", "pw", app_session.actor)

        entry = workspaces.load(seeded_workspace).audit_log[0]
        assert entry.action == AuditLogAction.VOTER_ADDED.value
        assert (entry.actor.id, entry.actor.role) == ("admin1", ActorRole.ADMIN)


@pytest.mark.unit
class TestSuperAdminBypass:
    """Tests for the super admin entering a workspace."""

    def test_enter_workspace_attributes_actions_to_super_admin(self, app_session, seeded_workspace, workspaces) -> None:
        """Test that actions after entering are audited under the super admin."""
        app_session.login("superadmin", "super123")

        assert app_session.enter_workspace(seeded_workspace).ok
        assert app_session.screen == Screen.ADMIN_VIEW
        assert isinstance(app_session.session, AdminSession)

        app_session.start_election()

        log = workspaces.load(seeded_workspace).audit_log
        assert log[0].action == AuditLogAction.ELECTION_START.value
        assert log[0].actor.role == ActorRole.SUPER_ADMIN
        assert log[1].action == AuditLogAction.WORKSPACE_ENTERED.value
        assert not any(e.action == AuditLogAction.ADMIN_LOGIN.value for e in log)

    def test_enter_requires_super_admin(self, app_session, seeded_workspace) -> None:
        """Test that only the super admin can enter a workspace."""
        assert not app_session.enter_workspace(seeded_workspace).ok

    def test_super_admin_registry_actions(self, app_session, seeded_workspace, workspaces) -> None:
        """Test that the super admin can manage workspaces."""
        app_session.login("superadmin", "super123")
        assert isinstance(app_session.session, SuperAdminSession)

        app_session.create_workspace("Chess", workspace_id="ws-chess")
        snapshot = app_session.enable_new_election(seeded_workspace)
        app_session.delete_workspace("ws-chess")

        assert snapshot.status == ElectionStatus.NOT_STARTED
        assert [ws.id for ws in app_session.registry.list()] == [seeded_workspace]


@pytest.mark.unit
class TestPublicResults:
    """Tests for the public results screen."""

    def test_results_hidden_until_published(self, app_session, seeded_workspace) -> None:
        """Test that results stay hidden until published."""
        pick_workspace(app_session, seeded_workspace)
        app_session.login("admin1", "adminpass")
        app_session.start_election()
        app_session.end_election()
        app_session.logout()

        hidden = app_session.view_results()
        assert not hidden.ok
        assert app_session.screen == Screen.LOGIN

        app_session.login("admin1", "adminpass")
        app_session.set_results_published(True)
        app_session.logout()

        shown = app_session.view_results()
        assert shown.ok
        assert app_session.screen == Screen.PUBLIC_RESULTS
        assert [r.position_name for r in shown.value] == ["President", "Treasurer"]
        assert app_session.back().ok
