"""
Pydantic schemas for request/response validation.
"""

from app.schemas.common import ApiResponse, PaginationMeta, ErrorResponse, FieldError
from app.schemas.auth import RegisterRequest, LoginRequest, AuthData
from app.schemas.user import (
    UserContact,
    UserResponse,
    UserProfileResponse,
    UserProfileUpdate,
    UserRoleUpdate,
    PropertySummary,
    SavedSearchCreate,
    SavedSearchResponse,
)
from app.schemas.property import (
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
    InquiryCreate,
    InquiryCreated,
    InquiryResponse,
    StatusUpdate,
)
from app.schemas.admin import DashboardStats, ActivityFeed

__all__ = [
    "ApiResponse",
    "PaginationMeta",
    "ErrorResponse",
    "FieldError",
    "RegisterRequest",
    "LoginRequest",
    "AuthData",
    "UserContact",
    "UserResponse",
    "UserProfileResponse",
    "UserProfileUpdate",
    "UserRoleUpdate",
    "PropertySummary",
    "SavedSearchCreate",
    "SavedSearchResponse",
    "PropertyCreate",
    "PropertyUpdate",
    "PropertyResponse",
    "InquiryCreate",
    "InquiryCreated",
    "InquiryResponse",
    "StatusUpdate",
    "DashboardStats",
    "ActivityFeed",
]
