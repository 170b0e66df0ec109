"""
Pydantic schemas for user requests and responses.
Handles profile updates, saved searches and the credential-free user view.
"""

from pydantic import Field, field_validator
from typing import Any, Dict, List, Optional
from datetime import datetime
from app.models.user import UserRole
from app.schemas.common import CamelModel


class UserContact(CamelModel):
    """User attached to another record (listing owner, inquiry author)."""

    id: Optional[str] = None
    name: str
    email: str
    phone: Optional[str] = None


class UserResponse(CamelModel):
    """User as returned by the API; never carries the credential."""

    id: str
    name: str
    email: str
    phone: Optional[str] = None
    profile_image: Optional[str] = None
    role: UserRole
    created_at: datetime
    updated_at: datetime


class PropertySummary(CamelModel):
    """Listing summary used inside a profile."""

    id: str
    title: str
    price: float
    location: Dict[str, Any]
    images: List[Dict[str, Any]] = Field(default_factory=list)


class UserProfileResponse(UserResponse):
    """Profile with owned listings and favorites as summaries."""

    properties: List[PropertySummary] = Field(default_factory=list)
    favorites: List[PropertySummary] = Field(default_factory=list)


class UserProfileUpdate(CamelModel):
    """
    Profile fields a user may change on their own account.
    Anything else in the body is ignored.
    """

    name: Optional[str] = Field(None, max_length=255, examples=["Asha Rao"])
    phone: Optional[str] = Field(None, max_length=32, examples=["+91 98450 00000"])
    profile_image: Optional[str] = Field(None, max_length=1024)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is None:
            return v
        if not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()


class SavedSearchCreate(CamelModel):
    query: Optional[str] = Field(None, max_length=1000, examples=["sea view villa"])
    filters: Dict[str, Any] = Field(default_factory=dict, examples=[{"city": "Goa", "maxPrice": 20000000}])


class SavedSearchResponse(CamelModel):
    id: str
    query: Optional[str] = None
    filters: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime


class UserRoleUpdate(CamelModel):
    """Admin role change."""

    role: str = Field(..., examples=["agent"])

    def parsed_role(self) -> Optional[UserRole]:
        """Role enum, or None when the value is not a known role."""
        try:
            return UserRole(self.role)
        except ValueError:
            return None
