"""
Shared exceptions.

Handlers map these onto HTTP responses; see ``contactbook.shared.errors``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class AppError(Exception):
    message: str = "Application error"
    details: Optional[dict[str, Any]] = None

    def __str__(self) -> str:
        return self.message


class ValidationError(AppError):
    """User input failed validation."""


class NotFoundError(AppError):
    """No record matches the requested identifier."""

    def __init__(self, message: str = "No matching record found", details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message=message, details=details)


class EditConflictError(AppError):
    """A conditional update matched no rows because the version moved on."""

    def __init__(self, message: str = "Edit conflict", details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message=message, details=details)


class PersistenceError(AppError):
    """Any other database fault. The driver error is chained as ``__cause__``."""

    def __init__(self, message: str = "Database error", details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message=message, details=details)


class FormDecodeError(AppError):
    """Posted form data could not be mapped onto the form structure."""

    def __init__(self, message: str = "Malformed form data", details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message=message, details=details)


class CSRFError(AppError):
    """An unsafe request arrived without a valid CSRF token."""

    def __init__(self, message: str = "CSRF token missing or invalid", details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message=message, details=details)
