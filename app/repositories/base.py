"""
Generic async repository shared by users, listings and inquiries.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from app.database import Base
from typing import TypeVar, Generic, Optional, List, Dict, Any, Type, Tuple
import uuid
import logging

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Typed CRUD over one mapped model.
    Write methods commit and roll back on failure; read methods leave the
    session untouched.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    def _apply_filters(self, query, filters: Optional[Dict[str, Any]]):
        if filters:
            for field, value in filters.items():
                column = getattr(self.model, field)
                if isinstance(value, (list, tuple, set)):
                    query = query.where(column.in_(value))
                else:
                    query = query.where(column == value)
        return query

    async def create(self, obj_in: Dict[str, Any]) -> ModelType:
        """
        Insert one row and return it refreshed.

        Args:
            obj_in: Column values keyed by attribute name

        Returns:
            Created model instance
        """
        try:
            db_obj = self.model(**obj_in)
            self.db.add(db_obj)
            await self.db.commit()
            await self.db.refresh(db_obj)
            logger.debug(f"Created {self.model.__name__} with id: {db_obj.id}")
            return db_obj
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to create {self.model.__name__}: {e}")
            raise

    async def get_by_id(self, id: uuid.UUID, refresh: bool = False) -> Optional[ModelType]:
        """
        Get a record by its ID.

        Args:
            id: Primary key
            refresh: Overwrite attributes of an instance already in the session

        Returns:
            The instance, or None
        """
        query = select(self.model).where(self.model.id == id)
        if refresh:
            query = query.execution_options(populate_existing=True)

        result = await self.db.execute(query)
        obj = result.scalar_one_or_none()

        if obj is None:
            logger.debug(f"{self.model.__name__} with id {id} not found")
        return obj

    async def get_page(
        self,
        page: int = 1,
        limit: int = 10,
        filters: Optional[Dict[str, Any]] = None,
    ) -> Tuple[List[ModelType], int]:
        """
        Get one page of records, newest first, with the total match count.

        Args:
            page: 1-based page number
            limit: Page size
            filters: Dictionary of field equality filters

        Returns:
            Tuple of (records, total count)
        """
        total = await self.count(filters)

        query = self._apply_filters(select(self.model), filters)
        query = (
            query.order_by(self.model.created_at.desc(), self.model.id)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await self.db.execute(query)
        objects = list(result.scalars().all())

        logger.debug(f"Retrieved {len(objects)} of {total} {self.model.__name__} records")
        return objects, total

    async def get_recent(self, limit: int = 5) -> List[ModelType]:
        """Newest records by creation time."""
        query = select(self.model).order_by(self.model.created_at.desc()).limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """
        Count records with optional equality filtering.

        Args:
            filters: Attribute equality filters; a list value means any of

        Returns:
            Matching row count
        """
        query = self._apply_filters(select(func.count(self.model.id)), filters)
        result = await self.db.execute(query)
        return result.scalar() or 0

    async def exists(self, id: uuid.UUID) -> bool:
        """Check if a record exists by its ID."""
        query = select(func.count(self.model.id)).where(self.model.id == id)
        result = await self.db.execute(query)
        return (result.scalar() or 0) > 0

    async def save(self, db_obj: ModelType) -> ModelType:
        """Commit pending changes on an instance and reload it."""
        try:
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to update {self.model.__name__} {db_obj.id}: {e}")
            raise
        return await self.get_by_id(db_obj.id, refresh=True)
