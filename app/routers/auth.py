"""
Authentication API endpoints for registration, login and the current user.
"""

from fastapi import APIRouter, Depends, status
from typing import Any, Dict
import logging

from app.models.user import User
from app.services.auth import AuthService
from app.schemas.common import ApiResponse, error_responses
from app.schemas.auth import RegisterRequest, LoginRequest, AuthData
from app.schemas.user import UserResponse
from app.utils.dependencies import get_auth_service, get_current_user
from app.utils.exceptions import APIException, StoreError

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses=error_responses(400, 401, 500),
)


@router.post(
    "/register",
    response_model=ApiResponse[AuthData],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
)
async def register(
    user_data: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    """
    Register as a user or agent and receive a bearer token.

    Raises:
        BadRequestError: If the email is already registered
    """
    try:
        user, token = await auth_service.register(user_data)
        return {"success": True, "data": {"user": user.to_dict(), "token": token}}
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Registration failed for {user_data.email}: {e}")
        raise StoreError("Error registering user", str(e))


@router.post(
    "/login",
    response_model=ApiResponse[AuthData],
    response_model_exclude_none=True,
    summary="Log in",
)
async def login(
    credentials: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    """
    Exchange email and password for a bearer token.

    Raises:
        InvalidCredentialsError: If credentials are invalid
    """
    try:
        user, token = await auth_service.login(credentials.email, credentials.password)
        return {"success": True, "data": {"user": user.to_dict(), "token": token}}
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Login failed for {credentials.email}: {e}")
        raise StoreError("Error logging in", str(e))


@router.get(
    "/me",
    response_model=ApiResponse[UserResponse],
    response_model_exclude_none=True,
    summary="Current user",
)
async def get_me(current_user: User = Depends(get_current_user)) -> Dict[str, Any]:
    return {"success": True, "data": current_user.to_dict()}
