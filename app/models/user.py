"""
User model with authentication and role management.
Also holds the user's saved searches and the favorites association table.
"""

from sqlalchemy import (
    String,
    Text,
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Table,
    Uuid,
    Enum as SQLEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base, utcnow
import enum
import uuid
from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.property import Property


class UserRole(str, enum.Enum):
    """User role enumeration for role-based access control."""
    USER = "user"
    AGENT = "agent"
    ADMIN = "admin"


# A user's favorite listings, ordered by when they were added.
# The composite key allows a listing to appear at most once per user.
user_favorites = Table(
    "user_favorites",
    Base.metadata,
    Column("user_id", Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("property_id", Uuid(as_uuid=True), ForeignKey("properties.id", ondelete="CASCADE"), primary_key=True),
    Column("created_at", DateTime(timezone=True), nullable=False, default=utcnow),
)


class User(Base):
    """
    User account.
    Regular users browse and save listings, agents list properties,
    administrators moderate users and listings.
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="User's display name"
    )

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="User email address - unique, stored lowercase"
    )

    phone: Mapped[Optional[str]] = mapped_column(
        String(32),
        nullable=True
    )

    profile_image: Mapped[Optional[str]] = mapped_column(
        String(1024),
        nullable=True
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Bcrypt hashed password"
    )

    role: Mapped[UserRole] = mapped_column(
        SQLEnum(
            UserRole,
            values_callable=lambda e: [member.value for member in e],
            native_enum=False,
            length=16,
        ),
        nullable=False,
        default=UserRole.USER,
        index=True,
        comment="User role for access control"
    )

    # Listings owned by this user; loaded explicitly where needed
    properties: Mapped[List["Property"]] = relationship(
        "Property",
        back_populates="owner",
        lazy="raise",
        order_by="Property.created_at.desc()"
    )

    saved_searches: Mapped[List["SavedSearch"]] = relationship(
        "SavedSearch",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="raise",
        order_by="SavedSearch.created_at"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"

    @property
    def is_admin(self) -> bool:
        """Check if user has admin role."""
        return self.role == UserRole.ADMIN

    def can_mutate(self, owner_id: uuid.UUID) -> bool:
        """
        Check if user may update or delete a listing.

        Args:
            owner_id: UUID of the listing's owner

        Returns:
            True for the owner or an administrator
        """
        return self.id == owner_id or self.is_admin

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert user to dictionary (excluding credentials).

        Returns:
            Dictionary representation of user
        """
        return {
            "id": str(self.id),
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "profile_image": self.profile_image,
            "role": self.role.value,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def to_contact(self, include_phone: bool = True) -> Dict[str, Any]:
        """Minimal representation used when a user is attached to another record."""
        contact = {"id": str(self.id), "name": self.name, "email": self.email}
        if include_phone:
            contact["phone"] = self.phone
        return contact


class SavedSearch(Base):
    """A query text plus filter snapshot a user can re-run later."""

    __tablename__ = "saved_searches"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    query: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    filters: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    user: Mapped["User"] = relationship("User", back_populates="saved_searches", lazy="raise")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "query": self.query,
            "filters": self.filters or {},
            "created_at": self.created_at,
        }
