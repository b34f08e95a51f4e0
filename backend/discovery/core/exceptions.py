# backend/discovery/core/exceptions.py
"""
Domain-specific exceptions for the discovery engine.

The engine itself recovers locally from malformed records and missing data;
these exceptions are raised by the caller-facing helpers (query validation,
address lookups) and converted to HTTP errors by the API layer.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        """Default conversion to HTTPException (override in subclasses)."""
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class InvalidSearchQueryException(ValidationException):
    """Raised when a search carries neither keywords nor a category filter."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message=message or "Search requires at least keywords or category/subcategory",
            code="INVALID_SEARCH_QUERY",
            details={"accepted_filters": ["q", "category_id", "subcategory_id"]},
        )
