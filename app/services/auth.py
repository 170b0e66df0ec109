"""
Authentication service for registration, login and token resolution.
"""

from typing import Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from app.repositories.user import UserRepository
from app.models.user import User
from app.schemas.auth import RegisterRequest
from app.utils.auth import create_access_token, verify_token
from app.utils.exceptions import (
    AuthenticationError,
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
    DuplicateResourceError,
)
from jose import JWTError, ExpiredSignatureError
import uuid
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """
    Authentication service.
    Issues bearer tokens and resolves them back to stored users.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)

    def create_token(self, user: User) -> str:
        return create_access_token(user_id=user.id, email=user.email, role=user.role)

    async def register(self, data: RegisterRequest) -> Tuple[User, str]:
        """
        Create an account and sign it in.

        Args:
            data: Registration payload (role already restricted to user or agent)

        Returns:
            Tuple of (user, access_token)

        Raises:
            DuplicateResourceError: If the email is already registered
        """
        if await self.user_repo.get_by_email(data.email):
            raise DuplicateResourceError("User already exists")

        user = await self.user_repo.create_user(data.model_dump())
        logger.info(f"User registered: {user.email} as {user.role.value}")
        return user, self.create_token(user)

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        """
        Authenticate user and create a token.

        Raises:
            InvalidCredentialsError: If credentials are invalid
        """
        user = await self.user_repo.authenticate_user(email, password)
        if not user:
            logger.warning(f"Failed authentication attempt for email: {email}")
            raise InvalidCredentialsError()

        logger.info(f"User authenticated successfully: {user.email}")
        return user, self.create_token(user)

    async def get_current_user(self, token: str) -> User:
        """
        Get current user from access token.

        Args:
            token: JWT access token

        Returns:
            Current User object

        Raises:
            TokenExpiredError: If token is expired
            InvalidTokenError: If token is invalid
            AuthenticationError: If the token's user no longer exists
        """
        try:
            token_payload = verify_token(token, token_type="access")
            user_id = uuid.UUID(token_payload.user_id)
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except (JWTError, ValueError) as e:
            logger.debug(f"Rejected token: {e}")
            raise InvalidTokenError()

        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise AuthenticationError("Not authorized, user not found")
        return user
