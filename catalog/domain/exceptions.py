"""
Custom exceptions for the catalog domain.

These exceptions represent domain-level errors and are independent
of infrastructure concerns (HTTP, database driver, etc.).
"""

from typing import Iterable, Optional


class CatalogError(Exception):
    """Base exception for all catalog errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        self.trace_id: Optional[str] = None
        super().__init__(self.message)


class ValidationError(CatalogError):
    """Raised when an entity or query is malformed before reaching storage."""

    def __init__(self, field: str, reason: str):
        message = f"Validation failed for {field}: {reason}"
        super().__init__(message=message, details={"field": field, "reason": reason})


class DuplicateError(CatalogError):
    """Raised when a uniqueness constraint is violated."""

    def __init__(self, detail: str = ""):
        message = "Object already exists"
        if detail:
            message += f": {detail}"
        super().__init__(message=message, details={"detail": detail})
        self.detail = detail


class CategoryReferenceError(CatalogError):
    """Raised when a company references category paths that do not exist."""

    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        message = f"Unknown categories: {', '.join(self.missing)}"
        super().__init__(message=message, details={"missing": self.missing})


class StorageError(CatalogError):
    """Raised for any other persistence failure. Carries no engine detail."""

    def __init__(self):
        super().__init__(message="Storage operation failed")


class SchemaError(CatalogError):
    """Raised when a table or index cannot be created at startup."""

    def __init__(self, table: str, reason: str):
        message = f"Schema setup for '{table}' failed: {reason}"
        super().__init__(message=message, details={"table": table, "reason": reason})
