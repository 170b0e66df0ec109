"""
Property API endpoints: browse, search, create, update, delete and inquire.
"""

from fastapi import APIRouter, Depends, status, Query, Path
from typing import Any, Dict, List, Optional
from decimal import Decimal
from uuid import UUID
import logging

from app.config import settings
from app.models.user import User
from app.models.property import PropertyType, ListingType
from app.repositories.property import PropertySearchFilters
from app.services.property import PropertyService, parse_amenities, DEFAULT_SORT
from app.schemas.common import ApiResponse, PaginationMeta, error_responses
from app.schemas.property import (
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
    InquiryCreate,
    InquiryCreated,
)
from app.utils.dependencies import get_current_user, get_property_service
from app.utils.exceptions import APIException, StoreError

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/properties",
    tags=["Properties"],
    responses=error_responses(400, 404, 500),
)


def _store_error(operation: str, error: Exception) -> StoreError:
    logger.error(f"{operation}: {error}", exc_info=error)
    return StoreError(operation, str(error))


@router.get(
    "",
    response_model=ApiResponse[List[PropertyResponse]],
    response_model_exclude_none=True,
    summary="List properties with filtering",
)
async def list_properties(
    property_type: Optional[PropertyType] = Query(None, alias="propertyType"),
    listing_type: Optional[ListingType] = Query(None, alias="listingType"),
    city: Optional[str] = Query(None, description="Case-insensitive substring of the city"),
    state: Optional[str] = Query(None, description="Case-insensitive substring of the state"),
    bedrooms: Optional[int] = Query(None, ge=0),
    bathrooms: Optional[int] = Query(None, ge=0),
    amenities: Optional[str] = Query(None, description="Comma-separated; matches any"),
    min_price: Optional[Decimal] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[Decimal] = Query(None, alias="maxPrice", ge=0),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    sort: str = Query(DEFAULT_SORT, description="Field name, '-' prefix for descending"),
    property_service: PropertyService = Depends(get_property_service)
) -> Dict[str, Any]:
    """
    Get a page of listings. Every supplied parameter narrows the result;
    absent parameters add no constraint.
    """
    try:
        filters = PropertySearchFilters(
            property_type=property_type,
            listing_type=listing_type,
            city=city.strip() if city else None,
            state=state.strip() if state else None,
            bedrooms=bedrooms,
            bathrooms=bathrooms,
            amenities=parse_amenities(amenities),
            min_price=min_price,
            max_price=max_price,
        )
        properties, total = await property_service.list_properties(filters, page, limit, sort)
        return {
            "success": True,
            "data": properties,
            "pagination": PaginationMeta.build(total, page, limit),
        }
    except APIException:
        raise
    except Exception as e:
        raise _store_error("Error fetching properties", e)


@router.get(
    "/search",
    response_model=ApiResponse[List[PropertyResponse]],
    response_model_exclude_none=True,
    summary="Free-text search",
)
async def search_properties(
    q: Optional[str] = Query(None, description="Search terms"),
    property_service: PropertyService = Depends(get_property_service)
) -> Dict[str, Any]:
    """Up to ten listings ranked by how many terms they contain, newest first on ties."""
    try:
        return {"success": True, "data": await property_service.search_properties(q)}
    except APIException:
        raise
    except Exception as e:
        raise _store_error("Error searching properties", e)


@router.get(
    "/{property_id}",
    response_model=ApiResponse[PropertyResponse],
    response_model_exclude_none=True,
    summary="Get a property",
)
async def get_property(
    property_id: UUID = Path(..., description="Property ID"),
    property_service: PropertyService = Depends(get_property_service)
) -> Dict[str, Any]:
    """Get one listing with owner contact and inquiries; counts as a view."""
    try:
        return {"success": True, "data": await property_service.get_property(property_id)}
    except APIException:
        raise
    except Exception as e:
        raise _store_error("Error fetching property", e)


@router.post(
    "",
    response_model=ApiResponse[PropertyResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Create a property",
    responses=error_responses(401),
)
async def create_property(
    property_data: PropertyCreate,
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> Dict[str, Any]:
    """Create a listing owned by the caller. New listings start as pending."""
    try:
        created = await property_service.create_property(property_data, current_user)
        return {"success": True, "data": created}
    except APIException:
        raise
    except Exception as e:
        raise _store_error("Error creating property", e)


@router.put(
    "/{property_id}",
    response_model=ApiResponse[PropertyResponse],
    response_model_exclude_none=True,
    summary="Update a property",
    responses=error_responses(401, 403),
)
async def update_property(
    property_data: PropertyUpdate,
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> Dict[str, Any]:
    """Partially update a listing. Owner or admin only."""
    try:
        updated = await property_service.update_property(property_id, property_data, current_user)
        return {"success": True, "data": updated}
    except APIException:
        raise
    except Exception as e:
        raise _store_error("Error updating property", e)


@router.delete(
    "/{property_id}",
    response_model=ApiResponse[Dict[str, Any]],
    response_model_exclude_none=True,
    summary="Delete a property",
    responses=error_responses(401, 403),
)
async def delete_property(
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> Dict[str, Any]:
    """Delete a listing with its inquiries. Owner or admin only."""
    try:
        await property_service.delete_property(property_id, current_user)
        return {"success": True, "data": {}, "message": "Property removed"}
    except APIException:
        raise
    except Exception as e:
        raise _store_error("Error deleting property", e)


@router.post(
    "/{property_id}/inquiries",
    response_model=ApiResponse[InquiryCreated],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Send an inquiry",
    responses=error_responses(401),
)
async def add_inquiry(
    inquiry_data: InquiryCreate,
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> Dict[str, Any]:
    """Append an inquiry from the caller to a listing."""
    try:
        inquiry = await property_service.add_inquiry(property_id, inquiry_data.message, current_user)
        return {"success": True, "data": inquiry, "message": "Inquiry added successfully"}
    except APIException:
        raise
    except Exception as e:
        raise _store_error("Error adding inquiry", e)
