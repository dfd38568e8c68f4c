"""
Domain layer - Business entities and errors.

This layer contains the core business logic and is independent
of frameworks and external dependencies.
"""

from .entities import Building, Category, Company
from .exceptions import (
    CatalogError,
    CategoryReferenceError,
    DuplicateError,
    SchemaError,
    StorageError,
    ValidationError,
)

__all__ = [
    "Building",
    "Category",
    "Company",
    "CatalogError",
    "CategoryReferenceError",
    "DuplicateError",
    "SchemaError",
    "StorageError",
    "ValidationError",
]
