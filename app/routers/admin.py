"""
Admin API endpoints for moderation and platform statistics.
The whole router requires an authenticated administrator.
"""

from fastapi import APIRouter, Depends, Query, Path
from typing import Any, Dict, List, Optional
from uuid import UUID
import logging

from app.config import settings
from app.models.user import UserRole
from app.services.admin import AdminService
from app.schemas.common import ApiResponse, PaginationMeta, error_responses
from app.schemas.admin import DashboardStats, ActivityFeed
from app.schemas.property import PropertyResponse, StatusUpdate
from app.schemas.user import UserResponse, UserRoleUpdate
from app.utils.dependencies import authorize, get_admin_service
from app.utils.exceptions import APIException, StoreError

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(authorize(UserRole.ADMIN))],
    responses=error_responses(400, 401, 403, 404, 500),
)


def _store_error(operation: str, error: Exception) -> StoreError:
    logger.error(f"{operation}: {error}", exc_info=error)
    return StoreError(operation, str(error))


@router.get("/users", response_model=ApiResponse[List[UserResponse]], response_model_exclude_none=True)
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    role: Optional[str] = Query(None, description="user, agent or admin"),
    admin_service: AdminService = Depends(get_admin_service)
) -> Dict[str, Any]:
    """All users without credentials, newest first."""
    try:
        users, total = await admin_service.list_users(page, limit, role)
        return {
            "success": True,
            "data": users,
            "pagination": PaginationMeta.build(total, page, limit),
        }
    except APIException:
        raise
    except Exception as e:
        raise _store_error("Error fetching users", e)


@router.put("/users/{user_id}/role", response_model=ApiResponse[UserResponse], response_model_exclude_none=True)
async def update_user_role(
    role_data: UserRoleUpdate,
    user_id: UUID = Path(..., description="User ID"),
    admin_service: AdminService = Depends(get_admin_service)
) -> Dict[str, Any]:
    try:
        return {"success": True, "data": await admin_service.update_user_role(user_id, role_data)}
    except APIException:
        raise
    except Exception as e:
        raise _store_error("Error updating user role", e)


@router.get(
    "/properties/pending",
    response_model=ApiResponse[List[PropertyResponse]],
    response_model_exclude_none=True,
)
async def pending_properties(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    admin_service: AdminService = Depends(get_admin_service)
) -> Dict[str, Any]:
    """Listings awaiting moderation, newest first."""
    try:
        properties, total = await admin_service.pending_properties(page, limit)
        return {
            "success": True,
            "data": properties,
            "pagination": PaginationMeta.build(total, page, limit),
        }
    except APIException:
        raise
    except Exception as e:
        raise _store_error("Error fetching pending properties", e)


@router.put(
    "/properties/{property_id}/status",
    response_model=ApiResponse[PropertyResponse],
    response_model_exclude_none=True,
)
async def update_property_status(
    status_data: StatusUpdate,
    property_id: UUID = Path(..., description="Property ID"),
    admin_service: AdminService = Depends(get_admin_service)
) -> Dict[str, Any]:
    try:
        return {"success": True, "data": await admin_service.update_property_status(property_id, status_data)}
    except APIException:
        raise
    except Exception as e:
        raise _store_error("Error updating property status", e)


@router.get("/dashboard", response_model=ApiResponse[DashboardStats], response_model_exclude_none=True)
async def get_dashboard(admin_service: AdminService = Depends(get_admin_service)) -> Dict[str, Any]:
    """Platform totals computed concurrently."""
    try:
        return {"success": True, "data": await admin_service.get_dashboard_stats()}
    except APIException:
        raise
    except Exception as e:
        raise _store_error("Error fetching dashboard stats", e)


@router.get("/activities", response_model=ApiResponse[ActivityFeed], response_model_exclude_none=True)
async def get_activities(admin_service: AdminService = Depends(get_admin_service)) -> Dict[str, Any]:
    """Five newest listings, users and inquiries."""
    try:
        return {"success": True, "data": await admin_service.get_recent_activities()}
    except APIException:
        raise
    except Exception as e:
        raise _store_error("Error fetching recent activities", e)
