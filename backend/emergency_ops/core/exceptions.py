"""
Error taxonomy for the incident engine.

Each error kind is its own class with a fixed HTTP status and machine code,
so callers can tell a missing incident from a rejected transition without
parsing messages. The API turns any ``AppException`` into ``to_dict()``.
"""

from http import HTTPStatus
from typing import Any, Dict, List, Optional


def _with_context(details: Optional[Dict[str, Any]], **context: Any) -> Dict[str, Any]:
    merged = dict(details or {})
    merged.update({key: value for key, value in context.items() if value is not None})
    return merged


class AppException(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message: Human-readable error message
        status_code: HTTP status the API answers with
        code: Stable machine-readable error code
        details: Structured context (field errors, ids, states)
    """

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class ValidationError(AppException):
    """Required input is missing, empty or malformed."""

    status_code = HTTPStatus.UNPROCESSABLE_ENTITY
    code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        field_errors: Optional[Dict[str, List[str]]] = None,
    ):
        super().__init__(message, details=_with_context(details, field_errors=field_errors or None))


class NotFoundError(AppException):
    """An id does not resolve to an existing record."""

    status_code = HTTPStatus.NOT_FOUND
    code = "NOT_FOUND"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        resource_type: Optional[str] = None,
        resource_id: Optional[Any] = None,
    ):
        super().__init__(
            message,
            details=_with_context(details, resource_type=resource_type, resource_id=resource_id),
        )


class InvalidTransitionError(AppException):
    """A command does not fit the incident's current state."""

    status_code = HTTPStatus.CONFLICT
    code = "INVALID_TRANSITION"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        current_status: Optional[str] = None,
        requested: Optional[str] = None,
    ):
        super().__init__(
            message,
            details=_with_context(details, current_status=current_status, requested=requested),
        )


class SecurityError(AppException):
    """Base for authentication and authorization failures."""

    status_code = HTTPStatus.UNAUTHORIZED
    code = "SECURITY_ERROR"
    security_context = "security"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=_with_context(details, security_context=self.security_context))


class AuthenticationError(SecurityError):
    """Bad credentials or an invalid bearer token."""

    code = "AUTHENTICATION_ERROR"
    security_context = "authentication"


class PermissionDeniedError(SecurityError):
    """The caller's role lacks a capability."""

    status_code = HTTPStatus.FORBIDDEN
    code = "PERMISSION_DENIED"
    security_context = "authorization"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        required_permissions: Optional[List[str]] = None,
    ):
        super().__init__(message, details=_with_context(details, required_permissions=required_permissions))


class PersistenceError(AppException):
    """The report store could not be read or written in time."""

    status_code = HTTPStatus.SERVICE_UNAVAILABLE
    code = "PERSISTENCE_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        operation: Optional[str] = None,
    ):
        super().__init__(message, details=_with_context(details, operation=operation))
