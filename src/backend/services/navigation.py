"""
Screen navigation state machine.

Pure transition table. The session facade owns the current screen and asks
``transition`` for the next one; guards that depend on election state are
passed in as flags.
"""

from enum import Enum

from core.exceptions import InvalidTransition


class Screen(str, Enum):
    WORKSPACE_SELECT = "WORKSPACE_SELECT"
    LOGIN = "LOGIN"
    ADMIN_VIEW = "ADMIN_VIEW"
    VOTER_VIEW = "VOTER_VIEW"
    SUPER_ADMIN_VIEW = "SUPER_ADMIN_VIEW"
    VOTED_SCREEN = "VOTED_SCREEN"
    PUBLIC_RESULTS = "PUBLIC_RESULTS"


class NavigationEvent(str, Enum):
    SWITCH_WORKSPACE = "SWITCH_WORKSPACE"
    SELECT_WORKSPACE = "SELECT_WORKSPACE"
    BACK = "BACK"
    ADMIN_LOGIN = "ADMIN_LOGIN"
    VOTER_LOGIN = "VOTER_LOGIN"
    SUPER_ADMIN_LOGIN = "SUPER_ADMIN_LOGIN"
    VIEW_RESULTS = "VIEW_RESULTS"
    VOTE_COMMITTED = "VOTE_COMMITTED"
    ENTER_WORKSPACE = "ENTER_WORKSPACE"
    LOGOUT = "LOGOUT"
    FULL_LOGOUT = "FULL_LOGOUT"


INITIAL_SCREEN = Screen.LOGIN

TRANSITIONS: dict[tuple[Screen, NavigationEvent], Screen] = {
    (Screen.LOGIN, NavigationEvent.SWITCH_WORKSPACE): Screen.WORKSPACE_SELECT,
    (Screen.WORKSPACE_SELECT, NavigationEvent.SELECT_WORKSPACE): Screen.LOGIN,
    (Screen.WORKSPACE_SELECT, NavigationEvent.BACK): Screen.LOGIN,
    (Screen.LOGIN, NavigationEvent.ADMIN_LOGIN): Screen.ADMIN_VIEW,
    (Screen.LOGIN, NavigationEvent.VOTER_LOGIN): Screen.VOTER_VIEW,
    (Screen.LOGIN, NavigationEvent.SUPER_ADMIN_LOGIN): Screen.SUPER_ADMIN_VIEW,
    (Screen.LOGIN, NavigationEvent.VIEW_RESULTS): Screen.PUBLIC_RESULTS,
    (Screen.PUBLIC_RESULTS, NavigationEvent.BACK): Screen.LOGIN,
    (Screen.VOTER_VIEW, NavigationEvent.VOTE_COMMITTED): Screen.VOTED_SCREEN,
    (Screen.SUPER_ADMIN_VIEW, NavigationEvent.ENTER_WORKSPACE): Screen.ADMIN_VIEW,
}

for _screen in (Screen.ADMIN_VIEW, Screen.VOTER_VIEW, Screen.VOTED_SCREEN):
    TRANSITIONS[(_screen, NavigationEvent.LOGOUT)] = Screen.LOGIN
for _screen in (Screen.ADMIN_VIEW, Screen.VOTER_VIEW, Screen.SUPER_ADMIN_VIEW, Screen.VOTED_SCREEN):
    TRANSITIONS[(_screen, NavigationEvent.FULL_LOGOUT)] = Screen.LOGIN

_NEEDS_WORKSPACE = {
    NavigationEvent.ADMIN_LOGIN,
    NavigationEvent.VOTER_LOGIN,
    NavigationEvent.VIEW_RESULTS,
}


def allowed_events(screen: Screen) -> list[NavigationEvent]:
    return [event for (source, event) in TRANSITIONS if source == screen]


def transition(
    screen: Screen,
    event: NavigationEvent,
    workspace_active: bool = False,
    results_visible: bool = False,
) -> Screen:
    """Return the screen reached from ``screen`` on ``event`` or raise InvalidTransition."""
    target = TRANSITIONS.get((screen, event))
    if target is None:
        raise InvalidTransition(f"Cannot {event.value} from {screen.value}.")
    if event in _NEEDS_WORKSPACE and not workspace_active:
        raise InvalidTransition("Please select a workspace first.")
    if event == NavigationEvent.VIEW_RESULTS and not results_visible:
        raise InvalidTransition("Results have not been published yet.")
    return target
