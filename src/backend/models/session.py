"""
Session variants.

A session is exactly one of four shapes, so states such as "admin and voter
at the same time" cannot be represented.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from models.election import AdminProfile, Voter


class AnonymousSession(BaseModel):
    kind: Literal["anonymous"] = "anonymous"


class SuperAdminSession(BaseModel):
    kind: Literal["super_admin"] = "super_admin"
    profile: AdminProfile


class AdminSession(BaseModel):
    """
    Workspace admin session.

    ``entered_by`` is set when the super admin entered the workspace without
    authenticating as its admin. ``profile`` may then be None if the
    workspace has no admin profile yet.
    """

    kind: Literal["admin"] = "admin"
    workspace_id: str
    profile: Optional[AdminProfile] = None
    entered_by: Optional[AdminProfile] = None

    @property
    def is_super_admin_bypass(self) -> bool:
        return self.entered_by is not None


class VoterSession(BaseModel):
    kind: Literal["voter"] = "voter"
    workspace_id: str
    voter: Voter


Session = Annotated[
    Union[AnonymousSession, SuperAdminSession, AdminSession, VoterSession],
    Field(discriminator="kind"),
]

ANONYMOUS = AnonymousSession()
