"""
Repository layer - Data access abstractions.

This layer provides interfaces for data persistence and retrieval,
hiding implementation details from the managers.
"""

from .base import MAX_GETTING_OBJECTS, QueryResult, TimeRange, normalize_limit
from .building_repository import PostgresBuildingRepository
from .category_repository import PostgresCategoryRepository
from .company_repository import PostgresCompanyRepository
from .interfaces import (
    BuildingFilter,
    CategoryFilter,
    CategoryResolver,
    CompanyFilter,
    IBuildingRepository,
    ICategoryRepository,
    ICompanyRepository,
)

__all__ = [
    "MAX_GETTING_OBJECTS",
    "QueryResult",
    "TimeRange",
    "normalize_limit",
    "PostgresBuildingRepository",
    "PostgresCategoryRepository",
    "PostgresCompanyRepository",
    "BuildingFilter",
    "CategoryFilter",
    "CategoryResolver",
    "CompanyFilter",
    "IBuildingRepository",
    "ICategoryRepository",
    "ICompanyRepository",
]
