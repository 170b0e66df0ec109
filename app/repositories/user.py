"""
User repository for accounts, favorites and saved searches.
Provides credential checks, role changes and the per-user collections.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, insert, delete, func
from app.repositories.base import BaseRepository
from app.models.user import User, UserRole, SavedSearch, user_favorites
from app.models.property import Property
from app.utils.auth import hash_password, verify_password
from typing import Optional, List, Dict, Any, Tuple
import uuid
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for user management.
    Favorites live in the `user_favorites` association table, whose composite
    key admits each (user, property) pair at most once.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a new user, hashing the password.

        Args:
            user_data: Dictionary containing user information
                      Must include: name, email, password
                      Optional: phone, role (defaults to USER)

        Returns:
            Created user instance
        """
        data = dict(user_data)
        password = data.pop("password")
        create_data = {
            **data,
            "email": data["email"].lower().strip(),
            "hashed_password": hash_password(password),
            "role": data.get("role") or UserRole.USER,
        }

        created_user = await self.create(create_data)
        logger.info(f"Created user: {created_user.email} (ID: {created_user.id})")
        return created_user

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address.

        Args:
            email: Email address to search for

        Returns:
            User instance if found, None otherwise
        """
        normalized_email = email.lower().strip()
        result = await self.db.execute(select(User).where(User.email == normalized_email))
        return result.scalar_one_or_none()

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """
        Authenticate user with email and password.

        Returns:
            User instance if authentication successful, None otherwise
        """
        user = await self.get_by_email(email)

        if not user:
            logger.debug(f"Authentication failed: user {email} not found")
            return None

        if not verify_password(password, user.hashed_password):
            logger.debug(f"Authentication failed: invalid password for {email}")
            return None

        return user

    async def update_fields(self, user: User, values: Dict[str, Any]) -> User:
        """Apply attribute changes to a user and commit."""
        for field, value in values.items():
            setattr(user, field, value)
        updated = await self.save(user)
        logger.info(f"Updated user {user.id}: {sorted(values)}")
        return updated

    async def list_users(
        self,
        page: int,
        limit: int,
        role: Optional[UserRole] = None
    ) -> Tuple[List[User], int]:
        """Users newest first, optionally restricted to one role."""
        filters = {"role": role} if role else None
        return await self.get_page(page=page, limit=limit, filters=filters)

    async def get_owned_properties(self, user_id: uuid.UUID) -> List[Property]:
        """Listings owned by a user, newest first."""
        query = (
            select(Property)
            .where(Property.owner_id == user_id)
            .order_by(Property.created_at.desc())
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    # Favorites

    async def get_favorites(self, user_id: uuid.UUID) -> List[Property]:
        """Favorite listings in the order they were added."""
        query = (
            select(Property)
            .join(user_favorites, user_favorites.c.property_id == Property.id)
            .where(user_favorites.c.user_id == user_id)
            .order_by(user_favorites.c.created_at)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def is_favorite(self, user_id: uuid.UUID, property_id: uuid.UUID) -> bool:
        query = select(func.count()).select_from(user_favorites).where(
            user_favorites.c.user_id == user_id,
            user_favorites.c.property_id == property_id,
        )
        result = await self.db.execute(query)
        return (result.scalar() or 0) > 0

    async def add_favorite(self, user_id: uuid.UUID, property_id: uuid.UUID) -> None:
        """
        Append a listing to the user's favorites.

        Raises:
            IntegrityError: If the pair is already present
        """
        try:
            await self.db.execute(
                insert(user_favorites).values(user_id=user_id, property_id=property_id)
            )
            await self.db.commit()
            logger.info(f"User {user_id} added favorite {property_id}")
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to add favorite {property_id} for user {user_id}: {e}")
            raise

    async def remove_favorite(self, user_id: uuid.UUID, property_id: uuid.UUID) -> bool:
        """Remove a listing from the user's favorites; False if it was not there."""
        try:
            result = await self.db.execute(
                delete(user_favorites).where(
                    user_favorites.c.user_id == user_id,
                    user_favorites.c.property_id == property_id,
                )
            )
            await self.db.commit()
            return result.rowcount > 0
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to remove favorite {property_id} for user {user_id}: {e}")
            raise

    # Saved searches

    async def get_saved_searches(self, user_id: uuid.UUID) -> List[SavedSearch]:
        query = (
            select(SavedSearch)
            .where(SavedSearch.user_id == user_id)
            .order_by(SavedSearch.created_at)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def add_saved_search(
        self,
        user_id: uuid.UUID,
        query_text: Optional[str],
        filters: Dict[str, Any]
    ) -> SavedSearch:
        try:
            saved = SavedSearch(user_id=user_id, query=query_text, filters=filters)
            self.db.add(saved)
            await self.db.commit()
            await self.db.refresh(saved)
            logger.info(f"User {user_id} saved search {saved.id}")
            return saved
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to save search for user {user_id}: {e}")
            raise

    async def delete_saved_search(self, user_id: uuid.UUID, search_id: uuid.UUID) -> bool:
        """Delete one of the user's saved searches; False if the user has no such search."""
        try:
            result = await self.db.execute(
                delete(SavedSearch).where(
                    SavedSearch.id == search_id,
                    SavedSearch.user_id == user_id,
                )
            )
            await self.db.commit()
            return result.rowcount > 0
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to delete saved search {search_id}: {e}")
            raise
