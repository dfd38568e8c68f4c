"""
PostgreSQL implementation of the building repository.
"""

import uuid
from typing import Optional

import asyncpg
import structlog

from ..domain.entities import Building
from .base import PostgresRepository, QueryResult, Visitor, WhereClause, normalize_limit
from .interfaces import BuildingFilter, IBuildingRepository

logger = structlog.get_logger(__name__)

TABLE_NAME = "buildings"


class PostgresBuildingRepository(PostgresRepository, IBuildingRepository):
    """PostgreSQL implementation for building persistence."""

    table = TABLE_NAME
    table_ddl = f"""
        CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
            id uuid PRIMARY KEY NOT NULL,
            address text NOT NULL CHECK (address != ''),
            created_at bigint NOT NULL CHECK (created_at > 0)
        )
    """
    indexes = (
        (f"{TABLE_NAME}_created_at_idx", "btree", "created_at"),
        (f"{TABLE_NAME}_address_idx", "btree", "address"),
    )

    async def insert(self, building: Building, timeout: Optional[float] = None) -> None:
        building.validate()
        await self._insert(
            f"INSERT INTO {TABLE_NAME} (id, address, created_at) VALUES ($1, $2, $3)",
            uuid.UUID(building.id),
            building.address,
            building.created_at,
            timeout=timeout,
        )
        logger.info("Building inserted", building_id=building.id)

    async def query(
        self,
        building_filter: BuildingFilter,
        visit: Visitor,
        timeout: Optional[float] = None,
    ) -> QueryResult:
        """
        Stream buildings matching the filter.

        An id returns at most that building and ignores the other fields.
        Otherwise address equality and the creation-time range are
        combined with AND. Rows arrive oldest first.
        """
        where = WhereClause()
        if building_filter.id:
            self._check_identifier(building_filter.id)
            where.add("id = {}", uuid.UUID(building_filter.id))
        else:
            if building_filter.address:
                where.add("address = {}", building_filter.address)
            where.add_time_range("created_at", building_filter.time_range)

        limit = normalize_limit(building_filter.limit)
        conditions = where.sql()
        query = (
            f"SELECT id, address, created_at FROM {TABLE_NAME}{conditions} "
            f"ORDER BY created_at, id LIMIT {where.placeholder(limit + 1)}"
        )
        return await self._stream(query, where.args, limit, visit, _to_building, timeout=timeout)


def _to_building(record: asyncpg.Record) -> Building:
    return Building(id=str(record["id"]), address=record["address"], created_at=record["created_at"])
