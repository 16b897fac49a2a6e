"""
Authentication-related Pydantic schemas.

One login form serves the super admin, workspace admins and voters; the
resolved role decides which screen the client shows next.
"""

from typing import Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Credentials typed on the login screen."""

    login_id: str = Field(..., min_length=1, max_length=128)
    password: str = Field(..., max_length=256)
    workspace_id: Optional[str] = Field(None, description="Active workspace, if one is selected")


class TokenResponse(BaseModel):
    """JWT session token response."""

    access_token: str
    token_type: str = "bearer"
    role: str
    screen: str
    workspace_id: Optional[str] = None
    display_name: Optional[str] = None


class LogoutResponse(BaseModel):
    success: bool = True
    message: str = "Logged out."
