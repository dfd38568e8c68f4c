"""
Repository interfaces (Abstract Base Classes) and query filters.

Defines the contract for entity persistence and retrieval independent of
the underlying storage mechanism. Managers depend on these interfaces,
never on the PostgreSQL implementations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, Optional, Set

from ..domain.entities import Building, Category, Company
from .base import MAX_GETTING_OBJECTS, QueryResult, TimeRange, Visitor


@dataclass(frozen=True)
class BuildingFilter:
    """Building lookup; ``id`` short-circuits every other field."""

    id: Optional[str] = None
    address: Optional[str] = None
    time_range: TimeRange = field(default_factory=TimeRange)
    limit: int = MAX_GETTING_OBJECTS


@dataclass(frozen=True)
class CompanyFilter:
    """Company lookup; ``category`` matches the path and everything below it."""

    id: Optional[str] = None
    category: Optional[str] = None
    time_range: TimeRange = field(default_factory=TimeRange)
    limit: int = MAX_GETTING_OBJECTS


@dataclass(frozen=True)
class CategoryFilter:
    """Category lookup; ``name`` matches the path and its descendants."""

    id: Optional[str] = None
    name: Optional[str] = None
    time_range: TimeRange = field(default_factory=TimeRange)
    limit: int = MAX_GETTING_OBJECTS


class CategoryResolver(ABC):
    """
    Read-only capability used by the company repository.

    Resolves category paths against stored categories.
    """

    @abstractmethod
    async def find_existing(self, paths: Iterable[str], timeout: Optional[float] = None) -> Set[str]:
        """
        Return the subset of ``paths`` that exist as categories.

        Args:
            paths: Exact category paths to look up
            timeout: Optional per-call timeout in seconds

        Returns:
            Set of paths that matched a stored category
        """
        pass


class ICategoryRepository(CategoryResolver):
    """Abstract repository interface for category operations."""

    @abstractmethod
    async def insert(self, category: Category, timeout: Optional[float] = None) -> None:
        """
        Persist a new category.

        Raises:
            ValidationError: If the category is invalid
            DuplicateError: If the id or path already exists
            StorageError: For any other persistence failure
        """
        pass

    @abstractmethod
    async def query(
        self,
        category_filter: CategoryFilter,
        visit: Visitor,
        timeout: Optional[float] = None,
    ) -> QueryResult:
        """Stream matching categories to ``visit``."""
        pass

    @abstractmethod
    async def is_empty(self, timeout: Optional[float] = None) -> bool:
        """Report whether no categories are stored."""
        pass

    @abstractmethod
    async def stop(self, timeout: Optional[float] = None) -> None:
        """Release storage resources."""
        pass


class IBuildingRepository(ABC):
    """Abstract repository interface for building operations."""

    @abstractmethod
    async def insert(self, building: Building, timeout: Optional[float] = None) -> None:
        """
        Persist a new building.

        Raises:
            ValidationError: If the building is invalid
            DuplicateError: If the id already exists
            StorageError: For any other persistence failure
        """
        pass

    @abstractmethod
    async def query(
        self,
        building_filter: BuildingFilter,
        visit: Visitor,
        timeout: Optional[float] = None,
    ) -> QueryResult:
        """Stream matching buildings to ``visit``."""
        pass

    @abstractmethod
    async def is_empty(self, timeout: Optional[float] = None) -> bool:
        pass

    @abstractmethod
    async def stop(self, timeout: Optional[float] = None) -> None:
        pass


class ICompanyRepository(ABC):
    """Abstract repository interface for company operations."""

    @abstractmethod
    async def insert(self, company: Company, timeout: Optional[float] = None) -> None:
        """
        Persist a new company after resolving its categories.

        Raises:
            ValidationError: If the company is invalid
            CategoryReferenceError: If a category path does not exist
            DuplicateError: If the id already exists
            StorageError: For any other persistence failure
        """
        pass

    @abstractmethod
    async def query(
        self,
        company_filter: CompanyFilter,
        visit: Visitor,
        timeout: Optional[float] = None,
    ) -> QueryResult:
        """Stream matching companies to ``visit``."""
        pass

    @abstractmethod
    async def is_empty(self, timeout: Optional[float] = None) -> bool:
        pass

    @abstractmethod
    async def stop(self, timeout: Optional[float] = None) -> None:
        pass
