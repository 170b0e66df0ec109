"""
FastAPI dependency injection utilities for authentication and services.
Provides the bearer-token guard, the role guard factory and service providers.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from app.database import get_db, get_session_factory
from app.models.user import User, UserRole
from app.services.auth import AuthService
from app.services.property import PropertyService
from app.services.user import UserService
from app.services.admin import AdminService
from app.utils.exceptions import AuthenticationError, RoleNotAllowedError


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


async def get_property_service(db: AsyncSession = Depends(get_db)) -> PropertyService:
    return PropertyService(db)


async def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


async def get_admin_service(
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory)
) -> AdminService:
    """
    Get admin service instance.

    Args:
        db: Request-scoped database session
        session_factory: Factory for the independent sessions used by the dashboard

    Returns:
        AdminService instance
    """
    return AdminService(db, session_factory)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """
    Get current authenticated user from the bearer token.

    Args:
        credentials: HTTP Bearer credentials
        auth_service: Authentication service

    Returns:
        Current User object

    Raises:
        AuthenticationError: If no token is provided, the token is invalid
            or expired, or its user no longer exists
    """
    if not credentials or not credentials.credentials:
        raise AuthenticationError("Not authorized, no token")

    return await auth_service.get_current_user(credentials.credentials)


def authorize(*roles: UserRole):
    """
    Create a dependency that admits only the listed roles.

    Args:
        roles: Roles allowed through

    Returns:
        Dependency function resolving to the current user
    """
    allowed = set(roles)

    async def role_dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise RoleNotAllowedError(current_user.role.value)
        return current_user

    return role_dependency
