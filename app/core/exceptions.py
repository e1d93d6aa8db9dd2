"""Exception taxonomy for RBAC admin operations.

Orchestrators raise these; app.main registers one handler per class that
turns them into JSON responses.
"""
from fastapi import status


class RBACAdminError(Exception):
    """Base exception for the admin backend."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class NotAuthenticated(RBACAdminError):
    """Raised when a bearer token is present but cannot be trusted."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Unauthenticated."):
        super().__init__(message)


class Forbidden(RBACAdminError):
    """Raised when the actor lacks the permission an operation requires."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "This action is unauthorized."):
        super().__init__(message)


class NotFound(RBACAdminError):
    """Raised when an entity id does not resolve to a stored record."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Resource not found."):
        super().__init__(message)


class ValidationFailed(RBACAdminError):
    """Raised with every field-level failure of one request."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, errors: dict[str, str], message: str = "The given data was invalid."):
        self.errors = errors
        super().__init__(message)


class ConflictViolation(ValidationFailed):
    """Raised when the store rejects a write on a unique constraint.

    Validation passed but a concurrent request claimed the same value first.
    """

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__({field: message})
