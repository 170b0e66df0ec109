"""
Pydantic schemas for registration, login and token responses.
"""

from pydantic import EmailStr, Field, field_validator
from typing import Optional
from app.models.user import UserRole
from app.schemas.common import CamelModel
from app.schemas.user import UserResponse


class RegisterRequest(CamelModel):
    """Schema for self-registration."""

    name: str = Field(..., min_length=1, max_length=255, examples=["Asha Rao"])
    email: EmailStr = Field(..., examples=["asha@example.com"])
    password: str = Field(..., min_length=6, max_length=128, examples=["secret123"])
    phone: Optional[str] = Field(None, max_length=32)
    role: UserRole = Field(UserRole.USER, description="user or agent")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        """Administrators are appointed, never self-registered."""
        if v == UserRole.ADMIN:
            raise ValueError("Role must be user or agent")
        return v


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip()


class AuthData(CamelModel):
    """User plus the bearer token to send on later requests."""

    user: UserResponse
    token: str
    token_type: str = "bearer"
