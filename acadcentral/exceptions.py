"""
AcadCentral Department Portal
Custom exception classes for structured error handling
"""

from typing import Optional, Dict, Any
from fastapi import status


class AppException(Exception):
    """Base application exception with structured error information"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses"""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
            "status_code": self.status_code
        }


# Validation Exceptions
class ValidationException(AppException):
    """Raised when input validation fails"""

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        value: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = status.HTTP_422_UNPROCESSABLE_ENTITY,
        error_code: str = "VALIDATION_ERROR"
    ):
        if details is None:
            details = {}

        if field:
            details["field"] = field
        if value is not None:
            details["provided_value"] = str(value)[:200]

        super().__init__(
            message=message,
            status_code=status_code,
            error_code=error_code,
            details=details
        )


class UnknownCollectionException(ValidationException):
    """Raised when a sync request names a collection that is not mirrored"""

    def __init__(self, key: Optional[str]):
        super().__init__(
            message="Unknown collection key",
            field="key",
            value=key,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="UNKNOWN_COLLECTION"
        )


class InvalidPayloadException(ValidationException):
    """Raised when a sync payload cannot be decoded"""

    def __init__(self, message: str = "Invalid JSON value", field: str = "value"):
        super().__init__(
            message=message,
            field=field,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="INVALID_PAYLOAD"
        )


# Resource Exceptions
class NotFoundException(AppException):
    """Raised when requested resource is not found"""

    def __init__(
        self,
        message: str = "Resource not found",
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None
    ):
        details = {}
        if resource_type:
            details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id

        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="NOT_FOUND",
            details=details
        )


class UserNotFoundException(NotFoundException):
    """Raised when user is not found"""

    def __init__(self, identifier: str, message: str = "User not found"):
        super().__init__(
            message=message,
            resource_type="user",
            resource_id=identifier
        )


# Conflict Exceptions
class ConflictException(AppException):
    """Raised when operation conflicts with current state"""

    def __init__(
        self,
        message: str = "Conflict with current state",
        conflict_type: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if details is None:
            details = {}

        if conflict_type:
            details["conflict_type"] = conflict_type

        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            error_code="CONFLICT",
            details=details
        )


class DuplicateResourceException(ConflictException):
    """Raised when trying to create duplicate resource"""

    def __init__(
        self,
        resource_type: str,
        field: str,
        value: str,
        message: Optional[str] = None
    ):
        super().__init__(
            message=message or f"{resource_type.title()} with {field} '{value}' already exists",
            conflict_type="duplicate",
            details={
                "resource_type": resource_type,
                "duplicate_field": field,
                "duplicate_value": value
            }
        )


# Business Logic Exceptions
class BusinessLogicException(AppException):
    """Raised when business rules are violated"""

    def __init__(
        self,
        message: str,
        rule_name: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if details is None:
            details = {}

        if rule_name:
            details["violated_rule"] = rule_name

        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="BUSINESS_RULE_VIOLATION",
            details=details
        )


class InvalidCredentialsException(BusinessLogicException):
    """Raised when email, password and role do not match an account"""

    def __init__(
        self,
        message: str = "Invalid credentials. Please check your email, password, and role."
    ):
        super().__init__(message=message, rule_name="credentials")


# External Service Exceptions
class ExternalServiceException(AppException):
    """Raised when an external service is unreachable or misbehaves"""

    def __init__(
        self,
        service_name: str,
        message: str = "External service unavailable",
        status_code: int = status.HTTP_503_SERVICE_UNAVAILABLE,
        details: Optional[Dict[str, Any]] = None
    ):
        if details is None:
            details = {}
        details["service"] = service_name

        super().__init__(
            message=message,
            status_code=status_code,
            error_code="EXTERNAL_SERVICE_ERROR",
            details=details
        )


class DatabaseConnectionException(ExternalServiceException):
    """Raised when the mirror database cannot be reached"""

    def __init__(self, message: str = "Database connection failed"):
        super().__init__(
            service_name="Database",
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )


class MirrorUnavailableException(ExternalServiceException):
    """Raised by the mirror client on transport failures and error responses"""

    def __init__(
        self,
        message: str = "Remote mirror unavailable",
        upstream_status: Optional[int] = None
    ):
        details = {}
        if upstream_status is not None:
            details["upstream_status"] = upstream_status

        super().__init__(
            service_name="Remote Mirror",
            message=message,
            details=details
        )


# Sync Exceptions
class SyncException(AppException):
    """Raised when synchronization fails"""

    def __init__(
        self,
        message: str = "Synchronization failed",
        sync_type: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if details is None:
            details = {}

        if sync_type:
            details["sync_type"] = sync_type

        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            error_code="SYNC_ERROR",
            details=details
        )


__all__ = [
    # Base
    "AppException",

    # Validation
    "ValidationException",
    "UnknownCollectionException",
    "InvalidPayloadException",

    # Resources
    "NotFoundException",
    "UserNotFoundException",

    # Conflicts
    "ConflictException",
    "DuplicateResourceException",

    # Business Logic
    "BusinessLogicException",
    "InvalidCredentialsException",

    # External Services
    "ExternalServiceException",
    "DatabaseConnectionException",
    "MirrorUnavailableException",

    # Sync
    "SyncException",
]
