"""
Pydantic schemas for the admin dashboard and activity feed.
"""

from pydantic import Field
from typing import List, Optional
from datetime import datetime
from app.models.user import UserRole
from app.schemas.common import CamelModel
from app.schemas.user import UserContact


class DashboardStats(CamelModel):
    """Six independent counts, each taken at roughly the same moment."""

    total_users: int = Field(..., examples=[120])
    total_properties: int = Field(..., examples=[340])
    pending_properties: int = Field(..., examples=[12])
    active_properties: int = Field(..., examples=[290])
    total_agents: int = Field(..., examples=[18])
    total_inquiries: int = Field(..., examples=[870])


class RecentProperty(CamelModel):
    id: str
    title: str
    status: str
    price: float
    owner: Optional[UserContact] = None
    created_at: datetime


class RecentUser(CamelModel):
    id: str
    name: str
    email: str
    role: UserRole
    created_at: datetime


class InquiryProperty(CamelModel):
    id: str
    title: str


class RecentInquiry(CamelModel):
    property: InquiryProperty
    message: str
    created_at: datetime
    user: UserContact


class ActivityFeed(CamelModel):
    recent_properties: List[RecentProperty] = Field(default_factory=list)
    recent_users: List[RecentUser] = Field(default_factory=list)
    recent_inquiries: List[RecentInquiry] = Field(default_factory=list)
