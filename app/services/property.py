"""
Property service for listing creation, browsing, search and moderation by owners.
Handles the ownership guard, field allow-lists and view counting.
"""

from typing import Optional, List, Dict, Any, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from app.repositories.property import (
    PropertyRepository,
    PropertySearchFilters,
    SORT_FIELDS,
)
from app.models.property import Property, Amenity
from app.models.user import User
from app.schemas.property import PropertyCreate, PropertyUpdate, PropertyFields
from app.utils.exceptions import (
    AuthorizationError,
    PropertyNotFoundError,
    PropertyOwnershipError,
    ValidationError,
)
import uuid
import logging

logger = logging.getLogger(__name__)

DEFAULT_SORT = "-createdAt"
SEARCH_RESULT_LIMIT = 10

# Plain listing attributes copied straight onto columns
SCALAR_FIELDS = (
    "title",
    "description",
    "property_type",
    "listing_type",
    "price",
    "currency",
    "bedrooms",
    "bathrooms",
    "parking",
    "furnishing",
    "floor",
    "total_floors",
    "age",
    "facing",
)


def parse_sort(sort: Optional[str]) -> Tuple[str, bool]:
    """
    Split a sort expression into field and direction.
    A leading '-' means descending.

    Raises:
        ValidationError: If the field is not sortable
    """
    sort = (sort or DEFAULT_SORT).strip()
    descending = sort.startswith("-")
    field = sort[1:] if descending else sort
    if field not in SORT_FIELDS:
        raise ValidationError.for_field(
            "sort",
            f"Cannot sort by '{field}'. Allowed: {', '.join(SORT_FIELDS)}"
        )
    return field, descending


def parse_amenities(raw: Optional[str]) -> Optional[List[Amenity]]:
    """
    Parse a comma-separated amenity list; surrounding whitespace is ignored.

    Raises:
        ValidationError: If a name is not a known amenity
    """
    if raw is None:
        return None
    names = [name.strip() for name in raw.split(",") if name.strip()]
    if not names:
        return None
    try:
        return [Amenity(name) for name in names]
    except ValueError as e:
        raise ValidationError.for_field("amenities", str(e))


def parse_search_terms(q: Optional[str]) -> List[str]:
    """Lowercase, de-duplicated whitespace-separated terms."""
    return list(dict.fromkeys(term.lower() for term in (q or "").split()))


class PropertyService:
    """
    Property service for managing listings.
    Only the owner or an administrator may change or remove a listing.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.property_repo = PropertyRepository(db_session)

    @staticmethod
    def _listing_columns(data: PropertyFields, fields: set) -> Dict[str, Any]:
        """
        Map the given schema fields onto column values.
        Nested area and location objects are flattened.
        """
        values: Dict[str, Any] = {}

        for name in SCALAR_FIELDS:
            if name in fields:
                values[name] = getattr(data, name)

        if "area" in fields:
            values["area_value"] = data.area.value
            values["area_unit"] = data.area.unit

        if "location" in fields:
            location = data.location
            values.update(
                address=location.address,
                city=location.city,
                state=location.state,
                pincode=location.pincode,
                latitude=None,
                longitude=None,
            )
            if location.coordinates is not None:
                longitude, latitude = location.coordinates.coordinates
                values["longitude"] = longitude
                values["latitude"] = latitude

        if "images" in fields:
            values["images"] = [img.model_dump(by_alias=True, exclude_none=True) for img in data.images]
        if "documents" in fields:
            values["documents"] = [doc.model_dump(by_alias=True, exclude_none=True) for doc in data.documents]

        return values

    async def create_property(self, data: PropertyCreate, current_user: User) -> Dict[str, Any]:
        """
        Create a listing owned by the caller.

        Args:
            data: Validated listing payload
            current_user: Authenticated user, recorded as owner

        Returns:
            Created listing in pending status
        """
        fields = set(data.model_fields_set) | {"title", "description", "property_type",
                                                "listing_type", "price", "area", "location",
                                                "images", "documents"}
        values = self._listing_columns(data, fields)
        if values.get("currency") is None:
            values.pop("currency", None)
        values["owner_id"] = current_user.id

        property_obj = await self.property_repo.create_property(values, data.amenities)
        logger.info(f"Property created by user {current_user.email}: {property_obj.title} (ID: {property_obj.id})")
        return property_obj.to_dict()

    async def list_properties(
        self,
        filters: PropertySearchFilters,
        page: int,
        limit: int,
        sort: Optional[str] = None
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        Filter, sort and paginate listings.

        Returns:
            Tuple of (listing dicts with owner, total count)
        """
        sort_field, descending = parse_sort(sort)
        properties, total = await self.property_repo.search_properties(
            filters,
            page=page,
            limit=limit,
            sort_field=sort_field,
            descending=descending,
        )
        return [p.to_dict() for p in properties], total

    async def search_properties(self, q: Optional[str]) -> List[Dict[str, Any]]:
        """
        Free-text search over title, description, address, city and state.

        Raises:
            ValidationError: If the query is missing or blank
        """
        terms = parse_search_terms(q)
        if not terms:
            raise ValidationError.for_field("q", "Search query is required")

        properties = await self.property_repo.text_search(terms, limit=SEARCH_RESULT_LIMIT)
        return [p.to_dict() for p in properties]

    async def get_property(self, property_id: uuid.UUID) -> Dict[str, Any]:
        """
        Fetch one listing and count the view.

        Returns:
            Listing with owner contact and inquiries with their authors

        Raises:
            PropertyNotFoundError: If the listing does not exist
        """
        if not await self.property_repo.increment_views(property_id):
            raise PropertyNotFoundError(str(property_id))

        property_obj = await self.property_repo.get_by_id(property_id, refresh=True)
        if property_obj is None:
            raise PropertyNotFoundError(str(property_id))
        return property_obj.to_dict(include_inquiry_users=True)

    async def _get_for_mutation(self, property_id: uuid.UUID, current_user: User, action: str) -> Property:
        property_obj = await self.property_repo.get_by_id(property_id)
        if property_obj is None:
            raise PropertyNotFoundError(str(property_id))
        if not current_user.can_mutate(property_obj.owner_id):
            logger.warning(f"User {current_user.id} denied {action} on property {property_id}")
            raise PropertyOwnershipError(action)
        return property_obj

    async def update_property(
        self,
        property_id: uuid.UUID,
        data: PropertyUpdate,
        current_user: User
    ) -> Dict[str, Any]:
        """
        Apply a partial update.

        Args:
            property_id: Listing to change
            data: Fields present in the request body
            current_user: Authenticated user

        Returns:
            Updated listing

        Raises:
            PropertyNotFoundError: If the listing does not exist
            PropertyOwnershipError: If the caller is neither owner nor admin
            AuthorizationError: If a non-admin tries to change the featured flag
            ValidationError: If the body carries no updatable field
        """
        property_obj = await self._get_for_mutation(property_id, current_user, "update")

        fields = set(data.model_fields_set)
        if "featured" in fields and not current_user.is_admin:
            raise AuthorizationError("Only administrators can change the featured flag")
        if not fields:
            raise ValidationError("No valid fields provided for update")

        values = self._listing_columns(data, fields)
        if "status" in fields:
            values["status"] = data.status
        if "featured" in fields:
            values["featured"] = data.featured
        amenities = data.amenities if "amenities" in fields else None

        updated = await self.property_repo.update_property(property_obj, values, amenities)
        logger.info(f"Property updated by user {current_user.email}: {property_id}")
        return updated.to_dict()

    async def delete_property(self, property_id: uuid.UUID, current_user: User) -> None:
        """
        Remove a listing with its inquiries, amenities and favorite entries.

        Raises:
            PropertyNotFoundError: If the listing does not exist
            PropertyOwnershipError: If the caller is neither owner nor admin
        """
        await self._get_for_mutation(property_id, current_user, "delete")
        await self.property_repo.delete_property(property_id)
        logger.info(f"Property deleted by user {current_user.email}: {property_id}")

    async def add_inquiry(self, property_id: uuid.UUID, message: str, current_user: User) -> Dict[str, Any]:
        """
        Append an inquiry from the caller.

        Raises:
            PropertyNotFoundError: If the listing does not exist
        """
        if not await self.property_repo.exists(property_id):
            raise PropertyNotFoundError(str(property_id))

        inquiry = await self.property_repo.add_inquiry(property_id, current_user.id, message)
        result = inquiry.to_dict()
        result["property_id"] = str(property_id)
        return result
