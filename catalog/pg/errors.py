"""
PostgreSQL error translation.

This is the only module that reads SQLSTATE codes. Repositories run every
storage call inside ``storage_errors`` so that callers only ever see the
domain error taxonomy.
"""

from contextlib import contextmanager
from typing import Iterator

import asyncpg
import structlog

from ..domain.exceptions import CatalogError, DuplicateError, StorageError, ValidationError

logger = structlog.get_logger(__name__)

UNIQUE_VIOLATION = "23505"
SYNTAX_ERROR = "42601"
INVALID_TEXT_REPRESENTATION = "22P02"
CHECK_VIOLATION = "23514"
NOT_NULL_VIOLATION = "23502"
DATA_EXCEPTION = "22000"
NUMERIC_VALUE_OUT_OF_RANGE = "22003"

# ltree parse failures are reported as syntax errors
PARAMETER_VIOLATIONS = frozenset(
    {
        SYNTAX_ERROR,
        INVALID_TEXT_REPRESENTATION,
        CHECK_VIOLATION,
        NOT_NULL_VIOLATION,
        DATA_EXCEPTION,
        NUMERIC_VALUE_OUT_OF_RANGE,
    }
)


def translate_error(exc: BaseException) -> CatalogError:
    """
    Map a storage failure to a domain error.

    Args:
        exc: Exception raised by the driver or the connection client

    Returns:
        DuplicateError for unique violations (with the engine detail),
        ValidationError for syntax and parameter violations, StorageError
        for everything else. Domain errors are returned unchanged.
    """
    if isinstance(exc, CatalogError):
        return exc

    if not isinstance(exc, asyncpg.PostgresError):
        logger.error(
            "Storage failure",
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return StorageError()

    sqlstate = exc.sqlstate
    logger.warning(
        "PostgreSQL error",
        sqlstate=sqlstate,
        error=str(exc),
        detail=exc.detail,
    )

    if sqlstate == UNIQUE_VIOLATION:
        return DuplicateError(exc.detail or "")
    if sqlstate in PARAMETER_VIOLATIONS:
        return ValidationError("params", "input parameters are invalid")
    return StorageError()


@contextmanager
def storage_errors() -> Iterator[None]:
    """
    Translate anything raised inside the block with ``translate_error``.

    The engine error is logged by ``translate_error`` and not chained, so
    its internals never reach the caller.
    """
    try:
        yield
    except Exception as exc:
        translated = translate_error(exc)
        if translated is exc:
            raise
        raise translated from None
