"""
Workspace and profile schemas used by the super admin panel.
"""

from typing import Optional

from pydantic import BaseModel, Field

from models.election import AdminProfile, ElectionStatus


class WorkspaceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    workspace_id: Optional[str] = Field(
        None,
        pattern=r"^[A-Za-z0-9-]{1,64}$",
        description="Leave empty to generate one",
    )
    admin_profile: Optional["AdminProfileIn"] = None


class WorkspaceResponse(BaseModel):
    id: str
    name: str
    election_status: Optional[ElectionStatus] = None


class AdminProfileIn(BaseModel):
    """Admin credentials as set by the super admin."""

    id: str = Field(..., min_length=1, max_length=128)
    name: str = Field(..., min_length=1, max_length=120)
    password: str = Field(..., min_length=1, max_length=256)
    image_url: str = ""
    contact: str = ""

    def to_profile(self) -> AdminProfile:
        return AdminProfile(**self.model_dump())


class AdminProfileUpdate(BaseModel):
    """Partial profile update. Omitted fields keep their value."""

    name: Optional[str] = Field(None, min_length=1, max_length=120)
    password: Optional[str] = Field(None, min_length=1, max_length=256)
    image_url: Optional[str] = None
    contact: Optional[str] = None


class AdminProfileResponse(BaseModel):
    """Public part of a profile. The password is never returned."""

    id: str
    name: str
    image_url: str = ""
    contact: str = ""

    @classmethod
    def from_profile(cls, profile: AdminProfile) -> "AdminProfileResponse":
        return cls(id=profile.id, name=profile.name, image_url=profile.image_url, contact=profile.contact)


WorkspaceCreate.model_rebuild()
