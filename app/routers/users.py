"""
User API endpoints: own profile, listings, favorites and saved searches.
All routes act on the authenticated user.
"""

from fastapi import APIRouter, Depends, status, Path
from typing import Any, Dict, List
from uuid import UUID
import logging

from app.models.user import User
from app.services.user import UserService
from app.schemas.common import ApiResponse, error_responses
from app.schemas.property import PropertyResponse
from app.schemas.user import (
    UserResponse,
    UserProfileResponse,
    UserProfileUpdate,
    SavedSearchCreate,
    SavedSearchResponse,
)
from app.utils.dependencies import get_current_user, get_user_service
from app.utils.exceptions import APIException, StoreError

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    dependencies=[Depends(get_current_user)],
    responses=error_responses(400, 401, 404, 500),
)


def _store_error(operation: str, error: Exception) -> StoreError:
    logger.error(f"{operation}: {error}", exc_info=error)
    return StoreError(operation, str(error))


@router.get("/profile", response_model=ApiResponse[UserProfileResponse], response_model_exclude_none=True)
async def get_profile(
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
) -> Dict[str, Any]:
    """Own profile with listing and favorite summaries."""
    try:
        return {"success": True, "data": await user_service.get_profile(current_user)}
    except APIException:
        raise
    except Exception as e:
        raise _store_error("Error fetching profile", e)


@router.put("/profile", response_model=ApiResponse[UserResponse], response_model_exclude_none=True)
async def update_profile(
    profile_data: UserProfileUpdate,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
) -> Dict[str, Any]:
    """Update name, phone or profile image."""
    try:
        updated = await user_service.update_profile(current_user, profile_data)
        return {"success": True, "data": updated.to_dict()}
    except APIException:
        raise
    except Exception as e:
        raise _store_error("Error updating profile", e)


@router.get("/properties", response_model=ApiResponse[List[PropertyResponse]], response_model_exclude_none=True)
async def get_user_properties(
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
) -> Dict[str, Any]:
    """Listings owned by the caller, newest first."""
    try:
        properties = await user_service.get_properties(current_user)
        return {"success": True, "data": [p.to_dict() for p in properties]}
    except APIException:
        raise
    except Exception as e:
        raise _store_error("Error fetching user properties", e)


@router.get("/favorites", response_model=ApiResponse[List[PropertyResponse]], response_model_exclude_none=True)
async def get_favorites(
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
) -> Dict[str, Any]:
    """Favorite listings in the order they were added."""
    try:
        favorites = await user_service.get_favorites(current_user)
        return {"success": True, "data": [p.to_dict() for p in favorites]}
    except APIException:
        raise
    except Exception as e:
        raise _store_error("Error fetching favorites", e)


@router.post("/favorites/{property_id}", response_model=ApiResponse[Dict[str, Any]], response_model_exclude_none=True)
async def add_favorite(
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
) -> Dict[str, Any]:
    try:
        await user_service.add_favorite(current_user, property_id)
        return {"success": True, "message": "Property added to favorites"}
    except APIException:
        raise
    except Exception as e:
        raise _store_error("Error adding to favorites", e)


@router.delete("/favorites/{property_id}", response_model=ApiResponse[Dict[str, Any]], response_model_exclude_none=True)
async def remove_favorite(
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
) -> Dict[str, Any]:
    try:
        await user_service.remove_favorite(current_user, property_id)
        return {"success": True, "message": "Property removed from favorites"}
    except APIException:
        raise
    except Exception as e:
        raise _store_error("Error removing from favorites", e)


@router.get("/saved-searches", response_model=ApiResponse[List[SavedSearchResponse]], response_model_exclude_none=True)
async def get_saved_searches(
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
) -> Dict[str, Any]:
    try:
        return {"success": True, "data": await user_service.get_saved_searches(current_user)}
    except APIException:
        raise
    except Exception as e:
        raise _store_error("Error fetching saved searches", e)


@router.post(
    "/saved-searches",
    response_model=ApiResponse[SavedSearchResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def add_saved_search(
    search_data: SavedSearchCreate,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
) -> Dict[str, Any]:
    try:
        saved = await user_service.add_saved_search(current_user, search_data)
        return {"success": True, "data": saved, "message": "Search saved"}
    except APIException:
        raise
    except Exception as e:
        raise _store_error("Error saving search", e)


@router.delete(
    "/saved-searches/{search_id}",
    response_model=ApiResponse[Dict[str, Any]],
    response_model_exclude_none=True,
)
async def delete_saved_search(
    search_id: UUID = Path(..., description="Saved search ID"),
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
) -> Dict[str, Any]:
    try:
        await user_service.delete_saved_search(current_user, search_id)
        return {"success": True, "message": "Saved search removed"}
    except APIException:
        raise
    except Exception as e:
        raise _store_error("Error removing saved search", e)
