"""
Property repository for listings, inquiries and text search.
Provides the dynamic filter builder behind the public listing endpoint.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func, and_, or_, case
from app.repositories.base import BaseRepository
from app.models.property import (
    Property,
    PropertyAmenity,
    Inquiry,
    PropertyType,
    ListingType,
    PropertyStatus,
    Amenity,
)
from app.models.user import User, user_favorites
from typing import Optional, List, Dict, Any, Tuple
from decimal import Decimal
from functools import reduce
import operator
import uuid
import logging

logger = logging.getLogger(__name__)


# Wire sort keys and the columns they order by
SORT_FIELDS = {
    "createdAt": Property.created_at,
    "updatedAt": Property.updated_at,
    "price": Property.price,
    "views": Property.views,
    "bedrooms": Property.bedrooms,
    "bathrooms": Property.bathrooms,
    "title": Property.title,
}

# Columns covered by free-text search
TEXT_SEARCH_COLUMNS = (
    Property.title,
    Property.description,
    Property.address,
    Property.city,
    Property.state,
)


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class PropertySearchFilters:
    """Data class for listing filters. Every attribute left as None adds no constraint."""

    def __init__(
        self,
        property_type: Optional[PropertyType] = None,
        listing_type: Optional[ListingType] = None,
        city: Optional[str] = None,
        state: Optional[str] = None,
        bedrooms: Optional[int] = None,
        bathrooms: Optional[int] = None,
        amenities: Optional[List[Amenity]] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        status: Optional[PropertyStatus] = None,
        owner_id: Optional[uuid.UUID] = None
    ):
        self.property_type = property_type
        self.listing_type = listing_type
        self.city = city
        self.state = state
        self.bedrooms = bedrooms
        self.bathrooms = bathrooms
        self.amenities = amenities
        self.min_price = min_price
        self.max_price = max_price
        self.status = status
        self.owner_id = owner_id


class PropertyRepository(BaseRepository[Property]):
    """
    Repository for listing management with filtering and text search.
    Owner, amenities and inquiries are eagerly loaded with each listing.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Property, db)

    async def create_property(self, values: Dict[str, Any], amenities: List[Amenity]) -> Property:
        """
        Create a listing with its amenities.

        Args:
            values: Column values for the listing
            amenities: Amenity names to attach

        Returns:
            Created listing with owner loaded
        """
        try:
            property_obj = Property(**values)
            property_obj.set_amenities(amenities)
            self.db.add(property_obj)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to create property: {e}")
            raise

        logger.info(f"Created property: {property_obj.title} (ID: {property_obj.id})")
        return await self.get_by_id(property_obj.id, refresh=True)

    async def search_properties(
        self,
        filters: PropertySearchFilters,
        page: int = 1,
        limit: int = 10,
        sort_field: str = "createdAt",
        descending: bool = True
    ) -> Tuple[List[Property], int]:
        """
        Filter listings with pagination and ordering.

        Args:
            filters: PropertySearchFilters instance with search criteria
            page: 1-based page number
            limit: Maximum number of records to return
            sort_field: Key of SORT_FIELDS to order by
            descending: Order direction

        Returns:
            Tuple of (properties list, total count)
        """
        conditions = self._build_filter_conditions(filters)

        count_query = select(func.count(Property.id))
        query = select(Property)
        if conditions:
            count_query = count_query.where(and_(*conditions))
            query = query.where(and_(*conditions))

        count_result = await self.db.execute(count_query)
        total_count = count_result.scalar() or 0

        order_column = SORT_FIELDS[sort_field]
        query = query.order_by(
            order_column.desc() if descending else order_column.asc(),
            Property.id
        )
        query = query.offset((page - 1) * limit).limit(limit)

        result = await self.db.execute(query)
        properties = list(result.scalars().all())

        logger.debug(f"Property search returned {len(properties)} of {total_count} total results")
        return properties, total_count

    def _build_filter_conditions(self, filters: PropertySearchFilters) -> List:
        """
        Build SQLAlchemy filter conditions from search filters.
        Constraints combine conjunctively.

        Args:
            filters: PropertySearchFilters instance

        Returns:
            List of SQLAlchemy conditions
        """
        conditions = []

        if filters.property_type is not None:
            conditions.append(Property.property_type == filters.property_type)
        if filters.listing_type is not None:
            conditions.append(Property.listing_type == filters.listing_type)

        # Location filters (case-insensitive partial match)
        if filters.city:
            conditions.append(Property.city.ilike(f"%{escape_like(filters.city)}%", escape="\\"))
        if filters.state:
            conditions.append(Property.state.ilike(f"%{escape_like(filters.state)}%", escape="\\"))

        if filters.bedrooms is not None:
            conditions.append(Property.bedrooms == filters.bedrooms)
        if filters.bathrooms is not None:
            conditions.append(Property.bathrooms == filters.bathrooms)

        # Any of the requested amenities
        if filters.amenities:
            conditions.append(
                Property.id.in_(
                    select(PropertyAmenity.property_id).where(
                        PropertyAmenity.name.in_(filters.amenities)
                    )
                )
            )

        # Price range filters
        if filters.min_price is not None:
            conditions.append(Property.price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Property.price <= filters.max_price)

        if filters.status is not None:
            conditions.append(Property.status == filters.status)
        if filters.owner_id is not None:
            conditions.append(Property.owner_id == filters.owner_id)

        return conditions

    async def text_search(self, terms: List[str], limit: int = 10) -> List[Property]:
        """
        Rank listings by how many of the terms they contain.
        A term matches when any text column contains it, ignoring case.
        Ties are broken newest first.

        Args:
            terms: Lowercase, de-duplicated search terms
            limit: Maximum number of results

        Returns:
            Matching listings, best first
        """
        if not terms:
            return []

        term_scores = []
        for term in terms:
            pattern = f"%{escape_like(term)}%"
            matched = or_(*[column.ilike(pattern, escape="\\") for column in TEXT_SEARCH_COLUMNS])
            term_scores.append(case((matched, 1), else_=0))
        score = reduce(operator.add, term_scores)

        query = (
            select(Property)
            .where(score > 0)
            .order_by(score.desc(), Property.created_at.desc())
            .limit(limit)
        )
        result = await self.db.execute(query)
        properties = list(result.scalars().all())

        logger.debug(f"Text search for {terms} returned {len(properties)} results")
        return properties

    async def increment_views(self, property_id: uuid.UUID) -> bool:
        """
        Add one to the view counter in a single statement.

        Returns:
            False if the listing does not exist
        """
        try:
            result = await self.db.execute(
                update(Property)
                .where(Property.id == property_id)
                .values(views=Property.views + 1)
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
            return result.rowcount > 0
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to increment views for property {property_id}: {e}")
            raise

    async def update_property(
        self,
        property_obj: Property,
        values: Dict[str, Any],
        amenities: Optional[List[Amenity]] = None
    ) -> Property:
        """
        Apply changed attributes to a listing and commit.

        Args:
            property_obj: Listing loaded in this session
            values: Column values to set
            amenities: Replacement amenity set, or None to leave it alone

        Returns:
            The reloaded listing
        """
        for field, value in values.items():
            setattr(property_obj, field, value)
        if amenities is not None:
            property_obj.set_amenities(amenities)

        updated = await self.save(property_obj)
        logger.info(f"Updated property {property_obj.id}: {sorted(values)}")
        return updated

    async def delete_property(self, property_id: uuid.UUID) -> bool:
        """
        Delete a listing with its inquiries, amenities and favorite entries
        in one transaction.

        Returns:
            True if the listing was deleted
        """
        try:
            await self.db.execute(
                delete(user_favorites).where(user_favorites.c.property_id == property_id)
            )
            await self.db.execute(
                delete(Inquiry)
                .where(Inquiry.property_id == property_id)
                .execution_options(synchronize_session=False)
            )
            await self.db.execute(
                delete(PropertyAmenity)
                .where(PropertyAmenity.property_id == property_id)
                .execution_options(synchronize_session=False)
            )
            result = await self.db.execute(
                delete(Property)
                .where(Property.id == property_id)
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to delete property {property_id}: {e}")
            raise

        deleted = result.rowcount > 0
        if deleted:
            logger.info(f"Deleted property {property_id}")
        return deleted

    async def add_inquiry(self, property_id: uuid.UUID, user_id: uuid.UUID, message: str) -> Inquiry:
        """Append an inquiry to a listing."""
        try:
            inquiry = Inquiry(property_id=property_id, user_id=user_id, message=message)
            self.db.add(inquiry)
            await self.db.commit()
            logger.info(f"User {user_id} added inquiry to property {property_id}")
            return inquiry
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to add inquiry to property {property_id}: {e}")
            raise

    async def recent_inquiries(self, limit: int = 5) -> List[Dict[str, Any]]:
        """
        Newest inquiries across all listings with their listing and author.
        Inquiries whose author no longer exists are skipped.
        """
        query = (
            select(
                Inquiry.message,
                Inquiry.created_at,
                Property.id.label("property_id"),
                Property.title.label("property_title"),
                User.id.label("user_id"),
                User.name.label("user_name"),
                User.email.label("user_email"),
            )
            .join(Property, Inquiry.property_id == Property.id)
            .join(User, Inquiry.user_id == User.id)
            .order_by(Inquiry.created_at.desc())
            .limit(limit)
        )
        result = await self.db.execute(query)
        return [
            {
                "property": {"id": str(row.property_id), "title": row.property_title},
                "message": row.message,
                "created_at": row.created_at,
                "user": {"id": str(row.user_id), "name": row.user_name, "email": row.user_email},
            }
            for row in result.all()
        ]
