"""
Shared response envelope and base schema.
Every endpoint answers with the same envelope; payloads use camelCase on the wire.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, Generic, List, Optional, TypeVar
import math

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base schema: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PaginationMeta(CamelModel):
    """Pagination block attached to list responses."""

    total: int = Field(..., description="Total number of matching records", examples=[42])
    page: int = Field(..., description="Current page number (1-based)", examples=[1])
    pages: int = Field(..., description="Total number of pages", examples=[5])

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "PaginationMeta":
        """Page count is ceil(total / limit), zero when nothing matched."""
        pages = math.ceil(total / limit) if total else 0
        return cls(total=total, page=page, pages=pages)


class ApiResponse(CamelModel, Generic[T]):
    """Uniform response envelope."""

    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None
    pagination: Optional[PaginationMeta] = None


class FieldError(CamelModel):
    field: str
    message: str
    type: Optional[str] = None


class ErrorResponse(CamelModel):
    """Envelope returned for every failure."""

    success: bool = False
    message: str = Field(..., examples=["Property not found"])
    error: Optional[str] = Field(None, description="Raw error text, only when error details are exposed")
    errors: Optional[List[FieldError]] = None


def envelope_dict(**fields: Any) -> Dict[str, Any]:
    """Envelope as a plain dict, omitting absent members."""
    return {key: value for key, value in fields.items() if value is not None}


ERROR_DESCRIPTIONS = {
    400: "Invalid input or business rule violation",
    401: "Missing, invalid or expired bearer token",
    403: "Role or ownership does not permit the action",
    404: "Resource not found",
    500: "Store or server failure",
}


def error_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    """OpenAPI `responses` entries documenting the error envelope."""
    return {
        code: {"model": ErrorResponse, "description": ERROR_DESCRIPTIONS[code]}
        for code in status_codes
    }
