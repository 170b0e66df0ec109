"""
Admin service for user and listing moderation, dashboard counts and the activity feed.
"""

from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from app.repositories.base import BaseRepository
from app.repositories.user import UserRepository
from app.repositories.property import PropertyRepository
from app.models.user import UserRole
from app.models.property import Inquiry, PropertyStatus
from app.schemas.user import UserRoleUpdate
from app.schemas.property import StatusUpdate
from app.utils.exceptions import (
    PropertyNotFoundError,
    UserNotFoundError,
    ValidationError,
)
import asyncio
import uuid
import logging

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 5


class AdminService:
    """
    Service behind the admin routes.
    The caller's role has already been checked by the router guard.
    """

    def __init__(self, db_session: AsyncSession, session_factory: async_sessionmaker):
        """
        Args:
            db_session: Request-scoped session for single-query operations
            session_factory: Source of independent sessions for concurrent counts
        """
        self.db = db_session
        self.session_factory = session_factory
        self.user_repo = UserRepository(db_session)
        self.property_repo = PropertyRepository(db_session)

    async def list_users(
        self,
        page: int,
        limit: int,
        role: Optional[str] = None
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        Users without credentials, newest first.

        Raises:
            ValidationError: If role is not a known role
        """
        role_filter = None
        if role:
            try:
                role_filter = UserRole(role)
            except ValueError:
                raise ValidationError.for_field("role", "Invalid role")

        users, total = await self.user_repo.list_users(page=page, limit=limit, role=role_filter)
        return [user.to_dict() for user in users], total

    async def update_user_role(self, user_id: uuid.UUID, data: UserRoleUpdate) -> Dict[str, Any]:
        """
        Change a user's role.

        Raises:
            ValidationError: If the role is not user, agent or admin
            UserNotFoundError: If the user does not exist
        """
        new_role = data.parsed_role()
        if new_role is None:
            raise ValidationError.for_field("role", "Invalid role")

        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(str(user_id))

        updated = await self.user_repo.update_fields(user, {"role": new_role})
        logger.info(f"User role updated: {user_id} -> {new_role.value}")
        return updated.to_dict()

    async def pending_properties(self, page: int, limit: int) -> Tuple[List[Dict[str, Any]], int]:
        """Listings awaiting moderation, newest first, owner populated."""
        properties, total = await self.property_repo.get_page(
            page=page,
            limit=limit,
            filters={"status": PropertyStatus.PENDING},
        )
        return [p.to_dict() for p in properties], total

    async def update_property_status(self, property_id: uuid.UUID, data: StatusUpdate) -> Dict[str, Any]:
        """
        Set a listing's status. Any transition between known statuses is allowed.

        Raises:
            ValidationError: If the status is unknown
            PropertyNotFoundError: If the listing does not exist
        """
        new_status = data.parsed_status()
        if new_status is None:
            raise ValidationError.for_field("status", "Invalid status")

        property_obj = await self.property_repo.get_by_id(property_id)
        if property_obj is None:
            raise PropertyNotFoundError(str(property_id))

        updated = await self.property_repo.update_property(property_obj, {"status": new_status})
        logger.info(f"Property status updated: {property_id} -> {new_status.value}")
        return updated.to_dict()

    async def _count(self, repo_factory, filters: Optional[Dict[str, Any]] = None) -> int:
        """Count on a session of its own so counts can run concurrently."""
        async with self.session_factory() as session:
            return await repo_factory(session).count(filters)

    async def get_dashboard_stats(self) -> Dict[str, int]:
        """
        Six counts gathered concurrently. Any failing count fails the whole call.

        Returns:
            Dictionary of totals keyed by statistic
        """
        (
            total_users,
            total_properties,
            pending_properties,
            active_properties,
            total_agents,
            total_inquiries,
        ) = await asyncio.gather(
            self._count(UserRepository),
            self._count(PropertyRepository),
            self._count(PropertyRepository, {"status": PropertyStatus.PENDING}),
            self._count(PropertyRepository, {"status": PropertyStatus.ACTIVE}),
            self._count(UserRepository, {"role": UserRole.AGENT}),
            self._count(lambda session: BaseRepository(Inquiry, session)),
        )

        return {
            "total_users": total_users,
            "total_properties": total_properties,
            "pending_properties": pending_properties,
            "active_properties": active_properties,
            "total_agents": total_agents,
            "total_inquiries": total_inquiries,
        }

    async def get_recent_activities(self) -> Dict[str, List[Dict[str, Any]]]:
        """
        Newest listings, users and inquiries, five of each.

        Returns:
            Dictionary with recent_properties, recent_users and recent_inquiries
        """
        properties = await self.property_repo.get_recent(RECENT_ACTIVITY_LIMIT)
        users = await self.user_repo.get_recent(RECENT_ACTIVITY_LIMIT)
        inquiries = await self.property_repo.recent_inquiries(RECENT_ACTIVITY_LIMIT)

        return {
            "recent_properties": [
                {
                    "id": str(p.id),
                    "title": p.title,
                    "status": p.status.value,
                    "price": float(p.price),
                    "owner": p.owner.to_contact(include_phone=False) if p.owner else None,
                    "created_at": p.created_at,
                }
                for p in properties
            ],
            "recent_users": [
                {
                    "id": str(u.id),
                    "name": u.name,
                    "email": u.email,
                    "role": u.role,
                    "created_at": u.created_at,
                }
                for u in users
            ],
            "recent_inquiries": inquiries,
        }
