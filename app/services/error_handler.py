"""
Error handling service for consistent error envelopes and logging.
Every failure is answered as {success: false, message, error?, errors?}.
"""

from typing import Dict, Any, Optional, List, Sequence
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.config import settings
from app.schemas.common import envelope_dict
from app.utils.exceptions import APIException, ValidationError, StoreError
import logging
import uuid

logger = logging.getLogger(__name__)

# Request locations FastAPI prefixes onto validation error paths
REQUEST_LOCATIONS = {"body", "query", "path", "header", "cookie"}


class ErrorHandlerService:
    """
    Service for handling and formatting errors consistently across the application.
    4xx responses are logged as warnings, 5xx as errors with traceback.
    """

    @staticmethod
    def format_error_response(
        message: str,
        error: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None
    ) -> Dict[str, Any]:
        """
        Format error response in the shared envelope.

        Args:
            message: Human-readable error message
            error: Raw error text, when exposed
            errors: Optional list of field errors

        Returns:
            Formatted error response dictionary
        """
        return envelope_dict(success=False, message=message, error=error, errors=errors or None)

    @staticmethod
    def field_name(location: Sequence[Any]) -> str:
        """
        Dotted field name from a validation error location.
        The leading request location is dropped: ("body", "area", "value") -> "area.value".
        """
        parts = [str(part) for part in location]
        if parts and parts[0] in REQUEST_LOCATIONS:
            parts = parts[1:]
        return ".".join(parts) or "body"

    @staticmethod
    def handle_api_exception(
        exception: APIException,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle custom API exceptions with the shared envelope.

        Args:
            exception: API exception instance
            request: Optional FastAPI request object

        Returns:
            JSON response with formatted error
        """
        request_id = ErrorHandlerService._request_id(request)
        path = request.url.path if request else None

        error_text = None
        if isinstance(exception, StoreError):
            logger.error(f"Store Error [{request_id}] {path}: {exception.detail} - {exception.error}")
            if settings.show_error_details:
                error_text = exception.error
        else:
            logger.warning(f"API Exception [{request_id}] {path}: {exception.error_code} - {exception.detail}")

        field_errors = exception.field_errors if isinstance(exception, ValidationError) else None

        return JSONResponse(
            status_code=exception.status_code,
            content=ErrorHandlerService.format_error_response(
                message=exception.detail,
                error=error_text,
                errors=field_errors,
            ),
            headers=exception.headers
        )

    @staticmethod
    def handle_validation_error(
        exception: Any,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle request validation errors as 400 with one entry per field.

        Args:
            exception: FastAPI RequestValidationError or pydantic ValidationError
            request: Optional FastAPI request object

        Returns:
            JSON response with validation error details
        """
        request_id = ErrorHandlerService._request_id(request)

        validation_details = []
        for error in exception.errors():
            validation_details.append({
                "field": ErrorHandlerService.field_name(error.get("loc", ())),
                "message": error.get("msg", "Invalid value"),
                "type": error.get("type"),
            })

        logger.warning(
            f"Validation Error [{request_id}] {request.url.path if request else None}: "
            f"{[detail['field'] for detail in validation_details]}"
        )

        message = validation_details[0]["message"] if len(validation_details) == 1 else "Validation failed"
        return JSONResponse(
            status_code=400,
            content=ErrorHandlerService.format_error_response(
                message=message,
                errors=validation_details,
            )
        )

    @staticmethod
    def handle_http_exception(
        exception: StarletteHTTPException,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """Handle framework HTTP exceptions such as unknown routes."""
        request_id = ErrorHandlerService._request_id(request)
        logger.warning(f"HTTP Exception [{request_id}]: {exception.status_code} - {exception.detail}")

        return JSONResponse(
            status_code=exception.status_code,
            content=ErrorHandlerService.format_error_response(message=str(exception.detail)),
            headers=getattr(exception, "headers", None)
        )

    @staticmethod
    def handle_unexpected_error(
        exception: Exception,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle unexpected errors with a generic 500 envelope.

        Args:
            exception: Unexpected exception
            request: Optional FastAPI request object

        Returns:
            JSON response with generic error message
        """
        request_id = ErrorHandlerService._request_id(request)

        logger.error(
            f"Unexpected Error [{request_id}]: {type(exception).__name__} - {exception}",
            exc_info=exception
        )

        return JSONResponse(
            status_code=500,
            content=ErrorHandlerService.format_error_response(
                message="Server error",
                error=str(exception) if settings.show_error_details else None,
            )
        )

    @staticmethod
    def _request_id(request: Optional[Request] = None) -> str:
        """Request id set by the logging middleware, or a fresh short id."""
        if request is not None:
            request_id = getattr(request.state, "request_id", None)
            if request_id:
                return request_id
        return str(uuid.uuid4())[:8]
