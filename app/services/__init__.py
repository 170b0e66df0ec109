"""
Service layer for business logic.
"""

from app.services.auth import AuthService
from app.services.user import UserService
from app.services.property import PropertyService
from app.services.admin import AdminService
from app.services.error_handler import ErrorHandlerService

__all__ = [
    "AuthService",
    "UserService",
    "PropertyService",
    "AdminService",
    "ErrorHandlerService",
]
