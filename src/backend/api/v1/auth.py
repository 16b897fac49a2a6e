"""
Authentication endpoints.

A single login form serves every role. The resolved role comes back with
the screen the client should show next and a session token.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from api.deps import CurrentSession, ServicesDep, create_token_for
from core.security import seconds_until_expiry
from models.session import AdminSession, Session, SuperAdminSession, VoterSession
from schemas.auth import LoginRequest, LogoutResponse, TokenResponse
from services.navigation import NavigationEvent, Screen, transition
from services.auth_service import Role
from services.token_service import TokenService, get_token_service

logger = structlog.get_logger(__name__)

router = APIRouter()

_LOGIN_EVENTS = {
    Role.SUPER_ADMIN: NavigationEvent.SUPER_ADMIN_LOGIN,
    Role.ADMIN: NavigationEvent.ADMIN_LOGIN,
    Role.VOTER: NavigationEvent.VOTER_LOGIN,
}


def _display_name(session: Session) -> Optional[str]:
    if isinstance(session, SuperAdminSession):
        return session.profile.name
    if isinstance(session, AdminSession):
        profile = session.entered_by or session.profile
        return profile.name if profile else None
    if isinstance(session, VoterSession):
        return session.voter.name
    return None


def token_response(session: Session, role: Role, screen: Screen) -> TokenResponse:
    return TokenResponse(
        access_token=create_token_for(session),
        role=role.value,
        screen=screen.value,
        workspace_id=getattr(session, "workspace_id", None),
        display_name=_display_name(session),
    )


@router.post("/login", response_model=TokenResponse)
def login(credentials: LoginRequest, services: ServicesDep) -> TokenResponse:
    """
    Resolve credentials against the super admin, the workspace admin and the
    workspace's voters, in that order.

    Failed attempts return 401 with the message to show on the login form.
    Voter failures that matched a real voter are recorded in the audit log.
    """
    workspace_id = credentials.workspace_id
    if workspace_id and services.registry.find(workspace_id) is not None:
        services.election(workspace_id).expire_if_due()

    outcome = services.auth.login(credentials.login_id, credentials.password, workspace_id)
    if not outcome.ok:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=outcome.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    screen = transition(Screen.LOGIN, _LOGIN_EVENTS[outcome.role], workspace_active=bool(workspace_id))
    return token_response(outcome.session, outcome.role, screen)


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    current: CurrentSession,
    token_service: TokenService = Depends(get_token_service),
) -> LogoutResponse:
    """Revoke the presented token until it would have expired."""
    await token_service.blacklist_token(current.jti, seconds_until_expiry(current.payload))
    logger.info("user_logout", kind=current.session.kind)
    return LogoutResponse()
