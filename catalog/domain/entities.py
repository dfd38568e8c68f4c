"""
Domain entities for the catalog.

Core business objects representing buildings, categories and companies.
These entities are framework-agnostic; they know how to create and
validate themselves but nothing about storage.
"""

import re
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .exceptions import ValidationError

# Keys shared by entities, query filters and the HTTP layer
ID_KEY = "id"
NAME_KEY = "name"
ADDRESS_KEY = "address"
CATEGORIES_KEY = "categories"
CREATED_AT_KEY = "created_at"

# Timestamps are stored as bigint
MAX_TIMESTAMP = 2**63 - 1

# ltree labels: letters, digits, underscore and hyphen
CATEGORY_PATH_PATTERN = re.compile(r"^[A-Za-z0-9_-]+(\.[A-Za-z0-9_-]+)*$")


def new_id() -> str:
    """Generate a fresh entity identifier."""
    return str(uuid.uuid4())


def new_timestamp() -> int:
    """Current unix time in seconds."""
    return int(time.time())


def validate_category_path(path: str, field_name: str = NAME_KEY) -> None:
    """
    Check that a string is a usable hierarchical category path.

    Args:
        path: Dot-separated path such as ``root.child``
        field_name: Field reported in the validation error

    Raises:
        ValidationError: If the path is empty or malformed
    """
    if not path:
        raise ValidationError(field_name, "is empty")
    if not CATEGORY_PATH_PATTERN.match(path):
        raise ValidationError(field_name, f"'{path}' is not a valid category path")


def validate_identifier(value: str, field_name: str = ID_KEY) -> None:
    """
    Check that a string is an entity identifier (UUID).

    Raises:
        ValidationError: If the value is empty or not a UUID
    """
    if not value:
        raise ValidationError(field_name, "is empty")
    try:
        uuid.UUID(value)
    except ValueError:
        raise ValidationError(field_name, f"'{value}' is not a valid identifier") from None


def _validate_common(entity_id: str, created_at: int) -> None:
    validate_identifier(entity_id)
    if created_at <= 0:
        raise ValidationError(CREATED_AT_KEY, "must be positive")
    if created_at > MAX_TIMESTAMP:
        raise ValidationError(CREATED_AT_KEY, "is out of range")


@dataclass(frozen=True)
class Category:
    """
    Category addressed by a materialized path.

    The path (``name``) encodes the hierarchy: ``root.a`` is a child of
    ``root``. Ancestor and descendant lookups are answered by the path
    itself, there is no parent column.
    """

    id: str
    name: str
    created_at: int

    @classmethod
    def new(cls, name: str) -> "Category":
        return cls(id=new_id(), name=name, created_at=new_timestamp())

    def validate(self) -> None:
        _validate_common(self.id, self.created_at)
        validate_category_path(self.name)

    @property
    def depth(self) -> int:
        """Number of labels in the path."""
        return len(self.name.split("."))

    @property
    def parent(self) -> Optional[str]:
        """Path of the parent category, None for a root category."""
        if "." not in self.name:
            return None
        return self.name.rsplit(".", 1)[0]

    def to_dict(self) -> Dict[str, Any]:
        return {ID_KEY: self.id, NAME_KEY: self.name, CREATED_AT_KEY: self.created_at}


@dataclass(frozen=True)
class Building:
    """Building identified by its address."""

    id: str
    address: str
    created_at: int

    @classmethod
    def new(cls, address: str) -> "Building":
        return cls(id=new_id(), address=address, created_at=new_timestamp())

    def validate(self) -> None:
        _validate_common(self.id, self.created_at)
        if not self.address or not self.address.strip():
            raise ValidationError(ADDRESS_KEY, "is empty")

    def to_dict(self) -> Dict[str, Any]:
        return {ID_KEY: self.id, ADDRESS_KEY: self.address, CREATED_AT_KEY: self.created_at}


@dataclass(frozen=True)
class Company:
    """
    Company belonging to one or more categories.

    Categories are referenced by path, not by category id, so a company
    listed under ``food.bakery`` is found by a query for ``food``.
    """

    id: str
    name: str
    categories: List[str] = field(default_factory=list)
    created_at: int = 0

    @classmethod
    def new(cls, name: str, categories: List[str]) -> "Company":
        # Duplicated paths collapse, first occurrence wins
        unique = list(dict.fromkeys(categories))
        return cls(id=new_id(), name=name, categories=unique, created_at=new_timestamp())

    def validate(self) -> None:
        _validate_common(self.id, self.created_at)
        if not self.name or not self.name.strip():
            raise ValidationError(NAME_KEY, "is empty")
        if not self.categories:
            raise ValidationError(CATEGORIES_KEY, "at least one category is required")
        for path in self.categories:
            validate_category_path(path, CATEGORIES_KEY)

    def to_dict(self) -> Dict[str, Any]:
        return {
            ID_KEY: self.id,
            NAME_KEY: self.name,
            CATEGORIES_KEY: list(self.categories),
            CREATED_AT_KEY: self.created_at,
        }
