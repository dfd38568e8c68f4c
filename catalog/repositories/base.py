"""
Shared repository building blocks.

Defines the query result and filter types, the result cap, and
``PostgresRepository``, which owns schema setup, streaming and shutdown
for every concrete repository.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, List, Optional, Sequence, Tuple, TypeVar

import asyncpg
import structlog

from ..domain.entities import validate_identifier
from ..domain.exceptions import SchemaError
from ..metrics import track_db_operation, track_limit_reached
from ..pg.client import CONSTRUCT_TIMEOUT, PgClient
from ..pg.errors import storage_errors

logger = structlog.get_logger(__name__)

# Upper bound on rows delivered by a single query
MAX_GETTING_OBJECTS = 100

T = TypeVar("T")
Visitor = Callable[[T], None]


def normalize_limit(limit: Optional[int]) -> int:
    """
    Turn a requested page size into the effective one.

    Absent or non-positive limits mean "as many as allowed"; anything above
    the cap is clamped to it.
    """
    if limit is None or limit <= 0:
        return MAX_GETTING_OBJECTS
    return min(limit, MAX_GETTING_OBJECTS)


@dataclass(frozen=True)
class QueryResult:
    """Outcome of a streaming query."""

    count: int
    has_more: bool = False


@dataclass(frozen=True)
class TimeRange:
    """Inclusive creation-time bounds; 0 means unbounded."""

    from_date: int = 0
    to_date: int = 0


class WhereClause:
    """Accumulates AND-ed conditions with positional ($n) parameters."""

    def __init__(self) -> None:
        self.conditions: List[str] = []
        self.args: List[Any] = []

    def add(self, template: str, value: Any) -> None:
        """Add a condition; ``{}`` in the template becomes the placeholder."""
        self.args.append(value)
        self.conditions.append(template.format(f"${len(self.args)}"))

    def add_time_range(self, column: str, time_range: TimeRange) -> None:
        if time_range.from_date > 0:
            self.add(f"{column} >= {{}}", time_range.from_date)
        if time_range.to_date > 0:
            self.add(f"{column} <= {{}}", time_range.to_date)

    def placeholder(self, value: Any) -> str:
        """Bind a value that is not part of a condition (e.g. LIMIT)."""
        self.args.append(value)
        return f"${len(self.args)}"

    def sql(self) -> str:
        if not self.conditions:
            return ""
        return " WHERE " + " AND ".join(self.conditions)


class PostgresRepository:
    """
    Base class for repositories that own one PostgreSQL table.

    Subclasses declare the table name and its DDL; ``setup()`` runs it once
    at construction. Table and index statements use IF NOT EXISTS so a
    second initialisation against an existing schema is a no-op.
    """

    table: ClassVar[str] = ""
    extensions: ClassVar[Sequence[str]] = ()
    table_ddl: ClassVar[str] = ""
    # (index name, method, column)
    indexes: ClassVar[Sequence[Tuple[str, str, str]]] = ()

    def __init__(self, client: PgClient):
        """
        Initialize repository.

        Args:
            client: Shared PostgreSQL client
        """
        self.client = client
        self._stopped = False
        client.attach()

    @classmethod
    async def create(cls, client: PgClient, *args: Any, **kwargs: Any):
        """
        Build the repository and make sure its schema exists.

        Raises:
            SchemaError: If the schema cannot be created. The repository
                releases its hold on the client before the error is raised.
        """
        repository = cls(client, *args, **kwargs)
        try:
            await repository.setup()
        except SchemaError:
            await repository.stop()
            raise
        return repository

    async def setup(self, timeout: float = CONSTRUCT_TIMEOUT) -> None:
        """
        Create extensions, table and indexes.

        Args:
            timeout: Seconds allowed for the whole setup, not per statement

        Raises:
            SchemaError: If any statement fails or setup runs out of time
        """
        try:
            await asyncio.wait_for(self._create_schema(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.error("Schema setup timed out", table=self.table, timeout=timeout)
            raise SchemaError(self.table, f"timed out after {timeout}s") from None
        except Exception as exc:
            logger.error("Schema setup failed", table=self.table, error=str(exc))
            raise SchemaError(self.table, str(exc)) from exc
        logger.info("Schema ready", table=self.table, indexes=[i[0] for i in self.indexes])

    async def _create_schema(self) -> None:
        for extension in self.extensions:
            await self.client.execute(f"CREATE EXTENSION IF NOT EXISTS {extension}")
        await self.client.execute(self.table_ddl)
        for name, method, column in self.indexes:
            await self.client.execute(
                f"CREATE INDEX IF NOT EXISTS {name} ON {self.table} USING {method} ({column})"
            )

    async def _insert(self, query: str, *args: Any, timeout: Optional[float] = None) -> int:
        start = time.perf_counter()
        success = False
        try:
            with storage_errors():
                affected = await self.client.execute(query, *args, timeout=timeout)
            success = True
            return affected
        finally:
            track_db_operation(f"{self.table}.insert", success, time.perf_counter() - start)

    async def _stream(
        self,
        query: str,
        args: Sequence[Any],
        limit: int,
        visit: Visitor,
        convert: Callable[[asyncpg.Record], Any],
        timeout: Optional[float] = None,
    ) -> QueryResult:
        """
        Deliver up to ``limit`` converted rows to ``visit``.

        The query must select at most ``limit + 1`` rows; the extra row only
        signals that more results exist. Storage failures are translated,
        exceptions raised by ``visit`` propagate unchanged.
        """
        start = time.perf_counter()
        success = False
        count = 0
        has_more = False
        rows = self.client.iterate(query, *args, timeout=timeout)
        try:
            while True:
                with storage_errors():
                    record = await anext(rows, None)
                if record is None:
                    break
                if count >= limit:
                    has_more = True
                    break
                visit(convert(record))
                count += 1
        except BaseException:
            await self._close_quietly(rows)
            raise
        else:
            with storage_errors():
                await rows.aclose()
            success = True
        finally:
            track_db_operation(f"{self.table}.query", success, time.perf_counter() - start)

        if has_more:
            track_limit_reached(self.table)
        logger.debug("Query streamed", table=self.table, count=count, has_more=has_more)
        return QueryResult(count=count, has_more=has_more)

    async def _close_quietly(self, rows) -> None:
        try:
            await rows.aclose()
        except Exception as exc:
            logger.warning("Failed to close cursor after aborted query", table=self.table, error=str(exc))

    async def is_empty(self, timeout: Optional[float] = None) -> bool:
        """Report whether the table currently holds no rows."""
        with storage_errors():
            return await self.client.is_empty(self.table, timeout=timeout)

    async def stop(self, timeout: Optional[float] = None) -> None:
        """Release the shared client; the pool closes with its last holder."""
        if self._stopped:
            return
        self._stopped = True
        logger.info("Stopping repository", table=self.table)
        await self.client.release(timeout)

    @staticmethod
    def _check_identifier(value: Optional[str]) -> None:
        if value:
            validate_identifier(value)
