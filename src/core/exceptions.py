"""Custom exception classes for the Science Carnival API.

This module defines application-specific exceptions following Google Python
Style Guide. Each exception maps onto one HTTP status in ``app.py``.
"""

from typing import Dict, List, Optional


class CarnivalError(Exception):
    """Base exception for all Science Carnival errors."""

    pass


class ValidationError(CarnivalError):
    """Raised when input data fails validation."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, str]]] = None):
        """Initialize the exception.

        Args:
            message: Human readable summary.
            errors: Optional list of ``{"field": ..., "message": ...}`` entries.
        """
        self.errors = errors or []
        super().__init__(message)


class AuthenticationError(CarnivalError):
    """Raised when credentials cannot be verified.

    The message is deliberately the same whether the username or the password
    was wrong.
    """

    def __init__(self, message: str = "Invalid username or password"):
        super().__init__(message)


class AuthorizationError(CarnivalError):
    """Raised when a principal may not perform an operation."""

    def __init__(self, message: str = "Forbidden", status_code: int = 403):
        """Initialize the exception.

        Args:
            message: Human readable reason.
            status_code: 401 for a missing session, 403 for an insufficient role.
        """
        self.status_code = status_code
        super().__init__(message)


class NotFoundError(CarnivalError):
    """Raised when a referenced record does not exist."""

    def __init__(self, entity: str, identifier):
        """Initialize the exception.

        Args:
            entity: Entity name, e.g. ``"Registration"``.
            identifier: The id that was looked up.
        """
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} '{identifier}' not found")


class ConflictError(CarnivalError):
    """Raised when a write would violate a uniqueness rule."""

    pass


class DuplicateUsernameError(ConflictError):
    """Raised when trying to create or rename an account onto a taken username."""

    def __init__(self, username: str):
        self.username = username
        super().__init__("Username already exists")


class DuplicateSettingError(ConflictError):
    """Raised when creating a setting whose name already exists."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Setting '{name}' already exists")


class SelfDeletionError(ValidationError):
    """Raised when an admin tries to delete their own account."""

    def __init__(self):
        super().__init__("Cannot delete your own account")


class InfrastructureError(CarnivalError):
    """Raised when the database or session store is unavailable."""

    pass
