"""
Property model for sale and rental listings.
Handles listing data, location, amenities and the append-only inquiry log.
"""

from sqlalchemy import (
    String,
    Text,
    Integer,
    Numeric,
    Boolean,
    JSON,
    ForeignKey,
    Index,
    Uuid,
    UniqueConstraint,
    Enum as SQLEnum,
)
from sqlalchemy.ext.associationproxy import association_proxy, AssociationProxy
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base
from decimal import Decimal
import enum
import uuid
from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.user import User


def _enum_column(enum_cls: type, length: int = 32) -> SQLEnum:
    """Store enum values (not member names) as plain strings."""
    return SQLEnum(
        enum_cls,
        values_callable=lambda e: [member.value for member in e],
        native_enum=False,
        length=length,
    )


class PropertyType(str, enum.Enum):
    APARTMENT = "Apartment"
    HOUSE = "House"
    VILLA = "Villa"
    PLOT = "Plot"
    COMMERCIAL = "Commercial"
    FARMHOUSE = "Farmhouse"


class ListingType(str, enum.Enum):
    SALE = "Sale"
    RENT = "Rent"


class AreaUnit(str, enum.Enum):
    SQ_FT = "sq ft"
    SQ_M = "sq m"
    SQ_YD = "sq yd"
    ACRE = "acre"


class Furnishing(str, enum.Enum):
    FURNISHED = "Furnished"
    SEMI_FURNISHED = "Semi-Furnished"
    UNFURNISHED = "Unfurnished"


class Facing(str, enum.Enum):
    NORTH = "North"
    SOUTH = "South"
    EAST = "East"
    WEST = "West"
    NORTH_EAST = "North-East"
    NORTH_WEST = "North-West"
    SOUTH_EAST = "South-East"
    SOUTH_WEST = "South-West"


class PropertyStatus(str, enum.Enum):
    """Listing status. Any transition is allowed."""
    PENDING = "pending"
    ACTIVE = "active"
    SOLD = "sold"
    RENTED = "rented"


class Amenity(str, enum.Enum):
    PARKING = "Parking"
    GYM = "Gym"
    SWIMMING_POOL = "Swimming Pool"
    SECURITY = "Security"
    POWER_BACKUP = "Power Backup"
    LIFT = "Lift"
    GARDEN = "Garden"
    CLUB_HOUSE = "Club House"
    PARK = "Park"
    SCHOOL = "School"
    HOSPITAL = "Hospital"
    SHOPPING_MALL = "Shopping Mall"
    METRO_STATION = "Metro Station"
    BUS_STOP = "Bus Stop"


class Property(Base):
    """
    A single real-estate unit listed for sale or rent.
    The owner is set once at creation and never changes.
    """

    __tablename__ = "properties"

    # Basic listing information
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    description: Mapped[str] = mapped_column(Text, nullable=False)

    property_type: Mapped[PropertyType] = mapped_column(
        _enum_column(PropertyType),
        nullable=False,
        index=True
    )

    listing_type: Mapped[ListingType] = mapped_column(
        _enum_column(ListingType),
        nullable=False,
        index=True
    )

    # Pricing
    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=14, scale=2),
        nullable=False,
        index=True
    )

    currency: Mapped[str] = mapped_column(String(8), nullable=False, default="INR")

    # Area
    area_value: Mapped[Decimal] = mapped_column(Numeric(precision=14, scale=2), nullable=False)

    area_unit: Mapped[AreaUnit] = mapped_column(
        _enum_column(AreaUnit),
        nullable=False,
        default=AreaUnit.SQ_FT
    )

    # Specifications
    bedrooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)
    bathrooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    parking: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    furnishing: Mapped[Optional[Furnishing]] = mapped_column(_enum_column(Furnishing), nullable=True)
    floor: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    total_floors: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    age: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    facing: Mapped[Optional[Facing]] = mapped_column(_enum_column(Facing), nullable=True)

    # Location
    address: Mapped[str] = mapped_column(String(512), nullable=False)
    city: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    state: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    pincode: Mapped[str] = mapped_column(String(16), nullable=False)
    latitude: Mapped[Optional[Decimal]] = mapped_column(Numeric(precision=10, scale=7), nullable=True)
    longitude: Mapped[Optional[Decimal]] = mapped_column(Numeric(precision=10, scale=7), nullable=True)

    # Media, stored as given
    images: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    documents: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    # Ownership and moderation
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
        comment="User who created the listing"
    )

    status: Mapped[PropertyStatus] = mapped_column(
        _enum_column(PropertyStatus, length=16),
        nullable=False,
        default=PropertyStatus.PENDING,
        index=True
    )

    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Relationships
    owner: Mapped["User"] = relationship(
        "User",
        back_populates="properties",
        lazy="selectin"
    )

    amenity_rows: Mapped[List["PropertyAmenity"]] = relationship(
        "PropertyAmenity",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="PropertyAmenity.created_at"
    )

    inquiries: Mapped[List["Inquiry"]] = relationship(
        "Inquiry",
        back_populates="property_rel",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Inquiry.created_at"
    )

    amenities: AssociationProxy[List[Amenity]] = association_proxy(
        "amenity_rows",
        "name",
        creator=lambda name: PropertyAmenity(name=Amenity(name))
    )

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, title={self.title[:30]}, price={self.price})>"

    def set_amenities(self, names: List[Any]) -> None:
        """
        Replace the amenity set, keeping rows that survive.
        Duplicates in names are collapsed, first occurrence wins.
        """
        wanted = list(dict.fromkeys(Amenity(name) for name in names))
        kept = [row for row in self.amenity_rows if row.name in wanted]
        present = {row.name for row in kept}
        self.amenity_rows = kept + [
            PropertyAmenity(name=name) for name in wanted if name not in present
        ]

    @property
    def location(self) -> Dict[str, Any]:
        """Location in its nested wire shape; coordinates follow GeoJSON [lng, lat] order."""
        coordinates = None
        if self.latitude is not None and self.longitude is not None:
            coordinates = {
                "type": "Point",
                "coordinates": [float(self.longitude), float(self.latitude)],
            }
        return {
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "pincode": self.pincode,
            "coordinates": coordinates,
        }

    def to_summary(self) -> Dict[str, Any]:
        """Title, price, location and images only."""
        return {
            "id": str(self.id),
            "title": self.title,
            "price": float(self.price),
            "location": self.location,
            "images": list(self.images or []),
        }

    def to_dict(
        self,
        include_owner: bool = True,
        include_inquiry_users: bool = False
    ) -> Dict[str, Any]:
        """
        Convert property to dictionary.

        Args:
            include_owner: Attach owner name, email and phone
            include_inquiry_users: Attach submitting user's name and email to each inquiry

        Returns:
            Dictionary representation of property
        """
        result = {
            "id": str(self.id),
            "title": self.title,
            "description": self.description,
            "property_type": self.property_type.value,
            "listing_type": self.listing_type.value,
            "price": float(self.price),
            "currency": self.currency,
            "area": {"value": float(self.area_value), "unit": self.area_unit.value},
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "parking": self.parking,
            "furnishing": self.furnishing.value if self.furnishing else None,
            "floor": self.floor,
            "total_floors": self.total_floors,
            "age": self.age,
            "facing": self.facing.value if self.facing else None,
            "location": self.location,
            "amenities": [amenity.value for amenity in self.amenities],
            "images": list(self.images or []),
            "documents": list(self.documents or []),
            "owner_id": str(self.owner_id),
            "status": self.status.value,
            "featured": self.featured,
            "views": self.views,
            "inquiries": [
                inquiry.to_dict(include_user=include_inquiry_users) for inquiry in self.inquiries
            ],
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

        if include_owner and self.owner is not None:
            result["owner"] = self.owner.to_contact()

        return result


class PropertyAmenity(Base):
    """One amenity of a listing."""

    __tablename__ = "property_amenities"
    __table_args__ = (
        UniqueConstraint("property_id", "name", name="uq_property_amenity"),
    )

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    name: Mapped[Amenity] = mapped_column(_enum_column(Amenity), nullable=False, index=True)


class Inquiry(Base):
    """A message a user attached to a listing. Never edited once written."""

    __tablename__ = "inquiries"

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id"),
        nullable=False,
        index=True
    )

    message: Mapped[str] = mapped_column(Text, nullable=False)

    property_rel: Mapped["Property"] = relationship("Property", back_populates="inquiries", lazy="raise")

    user: Mapped["User"] = relationship("User", lazy="selectin")

    def to_dict(self, include_user: bool = False) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "id": str(self.id),
            "user": str(self.user_id),
            "message": self.message,
            "created_at": self.created_at,
        }
        if include_user and self.user is not None:
            result["user"] = self.user.to_contact(include_phone=False)
        return result


# Listing queries filter on these combinations most often
status_created_index = Index(
    "idx_properties_status_created",
    Property.status,
    Property.created_at.desc()
)

city_state_index = Index(
    "idx_properties_city_state",
    Property.city,
    Property.state
)

type_listing_price_index = Index(
    "idx_properties_type_listing_price",
    Property.property_type,
    Property.listing_type,
    Property.price
)
