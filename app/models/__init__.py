"""
Database models for the Estate Listing API.
Includes User, Property and their dependent records.
"""

from app.models.user import User, UserRole, SavedSearch, user_favorites
from app.models.property import (
    Property,
    PropertyAmenity,
    Inquiry,
    PropertyType,
    ListingType,
    PropertyStatus,
    AreaUnit,
    Furnishing,
    Facing,
    Amenity,
)

__all__ = [
    "User",
    "UserRole",
    "SavedSearch",
    "user_favorites",
    "Property",
    "PropertyAmenity",
    "Inquiry",
    "PropertyType",
    "ListingType",
    "PropertyStatus",
    "AreaUnit",
    "Furnishing",
    "Facing",
    "Amenity",
]
