"""
PostgreSQL implementation of the category repository.

Categories are stored with an ``ltree`` name, so hierarchy questions
(ancestors, descendants, prefixes) are answered by a GiST index on the
path instead of parent pointers.
"""

import uuid
from typing import Iterable, Optional, Set

import asyncpg
import structlog

from ..domain.entities import Category, validate_category_path
from ..pg.errors import storage_errors
from .base import PostgresRepository, QueryResult, Visitor, WhereClause, normalize_limit
from .interfaces import CategoryFilter, ICategoryRepository

logger = structlog.get_logger(__name__)

TABLE_NAME = "categories"


class PostgresCategoryRepository(PostgresRepository, ICategoryRepository):
    """PostgreSQL implementation for category persistence."""

    table = TABLE_NAME
    extensions = ("ltree",)
    table_ddl = f"""
        CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
            id uuid PRIMARY KEY NOT NULL,
            name ltree NOT NULL UNIQUE CHECK (name != ''),
            created_at bigint NOT NULL CHECK (created_at > 0)
        )
    """
    indexes = (
        (f"{TABLE_NAME}_created_at_idx", "btree", "created_at"),
        (f"{TABLE_NAME}_name_idx", "gist", "name"),
    )

    async def insert(self, category: Category, timeout: Optional[float] = None) -> None:
        category.validate()
        await self._insert(
            f"INSERT INTO {TABLE_NAME} (id, name, created_at) VALUES ($1, $2::text::ltree, $3)",
            uuid.UUID(category.id),
            category.name,
            category.created_at,
            timeout=timeout,
        )
        logger.info("Category inserted", category_id=category.id, name=category.name)

    async def query(
        self,
        category_filter: CategoryFilter,
        visit: Visitor,
        timeout: Optional[float] = None,
    ) -> QueryResult:
        """
        Stream categories matching the filter.

        An id returns at most that category. Otherwise a name selects the
        path and all of its descendants, and the creation-time range narrows
        the result further. Rows arrive in hierarchical (path) order.
        """
        where = WhereClause()
        if category_filter.id:
            self._check_identifier(category_filter.id)
            where.add("id = {}", uuid.UUID(category_filter.id))
        else:
            if category_filter.name:
                validate_category_path(category_filter.name)
                where.add("name <@ {}::text::ltree", category_filter.name)
            where.add_time_range("created_at", category_filter.time_range)

        limit = normalize_limit(category_filter.limit)
        conditions = where.sql()
        query = (
            f"SELECT id, name::text AS name, created_at FROM {TABLE_NAME}{conditions} "
            f"ORDER BY name, id LIMIT {where.placeholder(limit + 1)}"
        )
        return await self._stream(query, where.args, limit, visit, _to_category, timeout=timeout)

    async def find_existing(self, paths: Iterable[str], timeout: Optional[float] = None) -> Set[str]:
        """Exact path lookup used to resolve company references."""
        unique = list(dict.fromkeys(paths))
        if not unique:
            return set()
        for path in unique:
            validate_category_path(path)
        with storage_errors():
            records = await self.client.fetch(
                f"SELECT name::text AS name FROM {TABLE_NAME} WHERE name = ANY($1::text[]::ltree[])",
                unique,
                timeout=timeout,
            )
        return {record["name"] for record in records}


def _to_category(record: asyncpg.Record) -> Category:
    return Category(id=str(record["id"]), name=record["name"], created_at=record["created_at"])
