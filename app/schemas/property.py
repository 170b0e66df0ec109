"""
Pydantic schemas for property requests and responses.
Handles listing creation, partial updates, inquiries and the nested wire shape.
"""

from pydantic import Field, ValidationInfo, field_validator
from typing import Any, Dict, List, Literal, Optional, Union
from datetime import datetime
from decimal import Decimal
from app.models.property import (
    PropertyType,
    ListingType,
    PropertyStatus,
    AreaUnit,
    Furnishing,
    Facing,
    Amenity,
)
from app.schemas.common import CamelModel
from app.schemas.user import UserContact


class AreaSchema(CamelModel):
    value: Decimal = Field(..., ge=0, examples=[1250])
    unit: AreaUnit = AreaUnit.SQ_FT


class GeoPoint(CamelModel):
    """GeoJSON point; coordinates are [longitude, latitude]."""

    type: Literal["Point"] = "Point"
    coordinates: List[float] = Field(..., min_length=2, max_length=2, examples=[[73.8567, 18.5204]])

    @field_validator("coordinates")
    @classmethod
    def validate_coordinates(cls, v):
        longitude, latitude = v
        if not -180 <= longitude <= 180:
            raise ValueError("Longitude must be between -180 and 180")
        if not -90 <= latitude <= 90:
            raise ValueError("Latitude must be between -90 and 90")
        return v


class LocationSchema(CamelModel):
    address: str = Field(..., min_length=1, max_length=512, examples=["12 MG Road"])
    city: str = Field(..., min_length=1, max_length=128, examples=["Pune"])
    state: str = Field(..., min_length=1, max_length=128, examples=["Maharashtra"])
    pincode: str = Field(..., min_length=1, max_length=16, examples=["411001"])
    coordinates: Optional[GeoPoint] = None

    @field_validator("address", "city", "state", "pincode")
    @classmethod
    def strip_required(cls, v):
        if not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()


class ImageSchema(CamelModel):
    url: str = Field(..., min_length=1)
    public_id: Optional[str] = None


class DocumentSchema(CamelModel):
    name: Optional[str] = None
    url: str = Field(..., min_length=1)
    type: Optional[str] = None


class PropertyFields(CamelModel):
    """Listing attributes shared by create and update."""

    currency: Optional[str] = Field(None, max_length=8)
    bedrooms: Optional[int] = Field(None, ge=0, le=100)
    bathrooms: Optional[int] = Field(None, ge=0, le=100)
    parking: Optional[int] = Field(None, ge=0, le=1000)
    furnishing: Optional[Furnishing] = None
    floor: Optional[int] = None
    total_floors: Optional[int] = Field(None, ge=0)
    age: Optional[int] = Field(None, ge=0)
    facing: Optional[Facing] = None


class PropertyCreate(PropertyFields):
    """
    Schema for creating a listing.
    Owner, status, views, featured flag and inquiries are never taken from the body.
    """

    title: str = Field(..., min_length=1, max_length=255, examples=["3 BHK apartment near the river"])
    description: str = Field(..., min_length=1, examples=["Corner flat with two balconies."])
    property_type: PropertyType = Field(..., examples=["Apartment"])
    listing_type: ListingType = Field(..., examples=["Sale"])
    price: Decimal = Field(..., ge=0, examples=[8500000])
    area: AreaSchema
    location: LocationSchema
    amenities: List[Amenity] = Field(default_factory=list)
    images: List[ImageSchema] = Field(default_factory=list)
    documents: List[DocumentSchema] = Field(default_factory=list)

    @field_validator("title", "description")
    @classmethod
    def strip_text(cls, v):
        if not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()


class PropertyUpdate(PropertyFields):
    """
    Partial update. Only fields present in the body are applied.
    `featured` is honoured for administrators only.
    """

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    property_type: Optional[PropertyType] = None
    listing_type: Optional[ListingType] = None
    price: Optional[Decimal] = Field(None, ge=0)
    area: Optional[AreaSchema] = None
    location: Optional[LocationSchema] = None
    amenities: Optional[List[Amenity]] = None
    images: Optional[List[ImageSchema]] = None
    documents: Optional[List[DocumentSchema]] = None
    status: Optional[PropertyStatus] = None
    featured: Optional[bool] = None

    @field_validator(
        "title", "description", "property_type", "listing_type", "price", "area",
        "location", "amenities", "images", "documents", "status", "featured", "currency",
    )
    @classmethod
    def reject_null(cls, v, info: ValidationInfo):
        """Listing attributes may be omitted but not cleared."""
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class InquiryCreate(CamelModel):
    message: str = Field(..., min_length=1, max_length=5000, examples=["Is the price negotiable?"])

    @field_validator("message")
    @classmethod
    def validate_message(cls, v):
        if not v.strip():
            raise ValueError("Message is required")
        return v.strip()


class StatusUpdate(CamelModel):
    """Admin moderation of a listing."""

    status: str = Field(..., examples=["active"])

    def parsed_status(self) -> Optional[PropertyStatus]:
        """Status enum, or None when the value is not a known status."""
        try:
            return PropertyStatus(self.status)
        except ValueError:
            return None


class InquiryResponse(CamelModel):
    id: str
    user: Union[UserContact, str]
    message: str
    created_at: datetime


class PropertyResponse(CamelModel):
    """Listing in its nested wire shape."""

    id: str
    title: str
    description: str
    property_type: PropertyType
    listing_type: ListingType
    price: float
    currency: str
    area: Dict[str, Any]
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    parking: Optional[int] = None
    furnishing: Optional[Furnishing] = None
    floor: Optional[int] = None
    total_floors: Optional[int] = None
    age: Optional[int] = None
    facing: Optional[Facing] = None
    location: Dict[str, Any]
    amenities: List[Amenity] = Field(default_factory=list)
    images: List[Dict[str, Any]] = Field(default_factory=list)
    documents: List[Dict[str, Any]] = Field(default_factory=list)
    owner_id: str
    owner: Optional[UserContact] = None
    status: PropertyStatus
    featured: bool
    views: int
    inquiries: List[InquiryResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class InquiryCreated(CamelModel):
    """Inquiry as stored, returned after submission."""

    id: str
    property_id: str
    user: str
    message: str
    created_at: datetime
