"""
User service for the caller's own profile, favorites and saved searches.
Every operation acts on the authenticated user only.
"""

from typing import Any, Dict, List
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.repositories.user import UserRepository
from app.repositories.property import PropertyRepository
from app.models.user import User
from app.schemas.user import UserProfileUpdate, SavedSearchCreate
from app.utils.exceptions import (
    BadRequestError,
    PropertyNotFoundError,
    SavedSearchNotFoundError,
    ValidationError,
)
import uuid
import logging

logger = logging.getLogger(__name__)

# Profile fields a user may change; anything else in the body is ignored
PROFILE_FIELDS = ("name", "phone", "profile_image")


class UserService:
    """Service for self-service account operations."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)
        self.property_repo = PropertyRepository(db_session)

    async def get_profile(self, user: User) -> Dict[str, Any]:
        """
        Get the user with owned listings and favorites as summaries.

        Args:
            user: Authenticated user

        Returns:
            Profile dictionary without the credential
        """
        owned = await self.user_repo.get_owned_properties(user.id)
        favorites = await self.user_repo.get_favorites(user.id)

        profile = user.to_dict()
        profile["properties"] = [p.to_summary() for p in owned]
        profile["favorites"] = [p.to_summary() for p in favorites]
        return profile

    async def update_profile(self, user: User, data: UserProfileUpdate) -> User:
        """
        Update the allow-listed profile fields present in the payload.
        A payload with none of them leaves the profile unchanged.

        Raises:
            ValidationError: If name is explicitly cleared
        """
        values = data.model_dump(include=set(PROFILE_FIELDS), exclude_unset=True)
        if "name" in values and values["name"] is None:
            raise ValidationError.for_field("name", "Name cannot be empty")
        if not values:
            return user

        updated = await self.user_repo.update_fields(user, values)
        logger.info(f"Profile updated for user {user.id}")
        return updated

    async def get_properties(self, user: User):
        return await self.user_repo.get_owned_properties(user.id)

    async def get_favorites(self, user: User):
        return await self.user_repo.get_favorites(user.id)

    async def add_favorite(self, user: User, property_id: uuid.UUID) -> None:
        """
        Add a listing to the user's favorites.

        Raises:
            PropertyNotFoundError: If the listing does not exist
            BadRequestError: If the listing is already a favorite
        """
        # A failed insert rolls back and expires the user, so read the id first
        user_id = user.id
        if not await self.property_repo.exists(property_id):
            raise PropertyNotFoundError(str(property_id))

        if await self.user_repo.is_favorite(user_id, property_id):
            raise BadRequestError("Property already in favorites")

        try:
            await self.user_repo.add_favorite(user_id, property_id)
        except IntegrityError:
            # A concurrent request inserted the same pair after the check above
            raise BadRequestError("Property already in favorites")

    async def remove_favorite(self, user: User, property_id: uuid.UUID) -> None:
        """
        Remove a listing from the user's favorites.

        Raises:
            BadRequestError: If the listing is not a favorite
        """
        removed = await self.user_repo.remove_favorite(user.id, property_id)
        if not removed:
            raise BadRequestError("Property not in favorites")

    async def get_saved_searches(self, user: User) -> List[Dict[str, Any]]:
        searches = await self.user_repo.get_saved_searches(user.id)
        return [search.to_dict() for search in searches]

    async def add_saved_search(self, user: User, data: SavedSearchCreate) -> Dict[str, Any]:
        saved = await self.user_repo.add_saved_search(user.id, data.query, data.filters)
        return saved.to_dict()

    async def delete_saved_search(self, user: User, search_id: uuid.UUID) -> None:
        """
        Delete one of the user's saved searches.

        Raises:
            SavedSearchNotFoundError: If the user has no search with this id
        """
        if not await self.user_repo.delete_saved_search(user.id, search_id):
            raise SavedSearchNotFoundError(str(search_id))
