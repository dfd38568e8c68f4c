"""
PostgreSQL implementation of the company repository.

Companies reference categories by path. Before a company is written every
path is resolved through the injected ``CategoryResolver``; the resolver
is only read from, its lifecycle belongs to whoever created it.
"""

import uuid
from typing import Optional

import asyncpg
import structlog

from ..domain.entities import Company, validate_category_path
from ..domain.exceptions import CategoryReferenceError
from ..pg.client import PgClient
from .base import PostgresRepository, QueryResult, Visitor, WhereClause, normalize_limit
from .interfaces import CategoryResolver, CompanyFilter, ICompanyRepository

logger = structlog.get_logger(__name__)

TABLE_NAME = "companies"


class PostgresCompanyRepository(PostgresRepository, ICompanyRepository):
    """PostgreSQL implementation for company persistence."""

    table = TABLE_NAME
    extensions = ("ltree",)
    table_ddl = f"""
        CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
            id uuid PRIMARY KEY NOT NULL,
            name text NOT NULL CHECK (name != ''),
            categories ltree[] NOT NULL CHECK (cardinality(categories) > 0),
            created_at bigint NOT NULL CHECK (created_at > 0)
        )
    """
    indexes = (
        (f"{TABLE_NAME}_created_at_idx", "btree", "created_at"),
        (f"{TABLE_NAME}_categories_idx", "gist", "categories"),
    )

    def __init__(self, client: PgClient, categories: CategoryResolver):
        """
        Initialize repository.

        Args:
            client: Shared PostgreSQL client
            categories: Resolver used to check category references on insert
        """
        super().__init__(client)
        self.categories = categories

    async def insert(self, company: Company, timeout: Optional[float] = None) -> None:
        """
        Resolve the company's categories, then persist it.

        Nothing is written when a category path is unknown.
        """
        company.validate()
        existing = await self.categories.find_existing(company.categories, timeout=timeout)
        missing = [path for path in company.categories if path not in existing]
        if missing:
            logger.info("Company references unknown categories", company_id=company.id, missing=missing)
            raise CategoryReferenceError(missing)

        await self._insert(
            f"INSERT INTO {TABLE_NAME} (id, name, categories, created_at) "
            f"VALUES ($1, $2, $3::text[]::ltree[], $4)",
            uuid.UUID(company.id),
            company.name,
            list(company.categories),
            company.created_at,
            timeout=timeout,
        )
        logger.info("Company inserted", company_id=company.id, categories=company.categories)

    async def query(
        self,
        company_filter: CompanyFilter,
        visit: Visitor,
        timeout: Optional[float] = None,
    ) -> QueryResult:
        """
        Stream companies matching the filter.

        A category selects companies filed under that path or anything
        below it (``food`` matches ``food.bakery``, not ``foodtruck``).
        """
        where = WhereClause()
        if company_filter.id:
            self._check_identifier(company_filter.id)
            where.add("id = {}", uuid.UUID(company_filter.id))
        else:
            if company_filter.category:
                validate_category_path(company_filter.category, "category")
                where.add("categories <@ {}::text::ltree", company_filter.category)
            where.add_time_range("created_at", company_filter.time_range)

        limit = normalize_limit(company_filter.limit)
        conditions = where.sql()
        query = (
            f"SELECT id, name, categories::text[] AS categories, created_at FROM {TABLE_NAME}{conditions} "
            f"ORDER BY created_at, id LIMIT {where.placeholder(limit + 1)}"
        )
        return await self._stream(query, where.args, limit, visit, _to_company, timeout=timeout)


def _to_company(record: asyncpg.Record) -> Company:
    return Company(
        id=str(record["id"]),
        name=record["name"],
        categories=list(record["categories"]),
        created_at=record["created_at"],
    )
