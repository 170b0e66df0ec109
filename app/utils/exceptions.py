"""
Custom exception classes for the Estate Listing API.
Provides structured error handling with appropriate HTTP status codes.
"""

from typing import Any, Dict, Optional, List
from fastapi import HTTPException, status


class APIException(HTTPException):
    """Base API exception class."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code


class ValidationError(APIException):
    """Missing or malformed input."""

    def __init__(
        self,
        detail: str = "Validation failed",
        field_errors: Optional[List[Dict[str, Any]]] = None
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="VALIDATION_ERROR"
        )
        self.field_errors = field_errors or []

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        """Validation error naming a single field."""
        return cls(message, field_errors=[{"field": field, "message": message, "type": "value_error"}])


class BadRequestError(APIException):
    """Request is well-formed but violates a business rule."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="BAD_REQUEST"
        )


class NotFoundError(APIException):
    """Resource not found exception."""

    def __init__(self, resource: str, resource_id: Optional[str] = None):
        detail = f"{resource} not found"
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code="NOT_FOUND"
        )
        self.resource_id = resource_id


class AuthenticationError(APIException):
    """Missing or invalid credential."""

    def __init__(self, detail: str = "Not authorized to access this route"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="UNAUTHORIZED",
            headers={"WWW-Authenticate": "Bearer"}
        )


class AuthorizationError(APIException):
    """Authenticated, but the role or ownership does not permit the action."""

    def __init__(self, detail: str = "Access forbidden"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code="FORBIDDEN"
        )


class StoreError(APIException):
    """
    Any other failure while serving a request, including connectivity.
    The message names the operation; the raw error text is kept separately.
    """

    def __init__(self, detail: str, error: Optional[str] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code="STORE_ERROR"
        )
        self.error = error


# Authentication specific exceptions
class InvalidCredentialsError(AuthenticationError):
    def __init__(self, detail: str = "Invalid credentials"):
        super().__init__(detail)


class InvalidTokenError(AuthenticationError):
    def __init__(self, detail: str = "Not authorized, token failed"):
        super().__init__(detail)


class TokenExpiredError(AuthenticationError):
    def __init__(self, detail: str = "Token has expired"):
        super().__init__(detail)


class RoleNotAllowedError(AuthorizationError):
    def __init__(self, role: str):
        super().__init__(f"User role {role} is not authorized to access this route")


# Resource specific exceptions
class PropertyNotFoundError(NotFoundError):
    def __init__(self, property_id: Optional[str] = None):
        super().__init__("Property", property_id)


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: Optional[str] = None):
        super().__init__("User", user_id)


class SavedSearchNotFoundError(NotFoundError):
    def __init__(self, search_id: Optional[str] = None):
        super().__init__("Saved search", search_id)


class PropertyOwnershipError(AuthorizationError):
    """Actor is neither the listing's owner nor an administrator."""

    def __init__(self, action: str):
        super().__init__(f"Not authorized to {action} this property")


class DuplicateResourceError(BadRequestError):
    def __init__(self, detail: str):
        super().__init__(detail)
