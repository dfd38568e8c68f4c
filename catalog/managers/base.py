"""
Helpers shared by the entity managers.
"""

from contextlib import contextmanager
from typing import Iterator

import structlog

from ..domain.entities import MAX_TIMESTAMP
from ..domain.exceptions import CatalogError, ValidationError
from ..repositories.base import TimeRange
from .queries import FROM_DATE_KEY, TO_DATE_KEY, GetQuery


@contextmanager
def traced(req_id: str) -> Iterator[None]:
    """
    Run a manager call under a request id.

    The id is bound into the structlog context for every event logged
    inside the block, and stamped on domain errors leaving it. The error
    itself is re-raised unchanged.
    """
    with structlog.contextvars.bound_contextvars(req_id=req_id):
        try:
            yield
        except CatalogError as exc:
            exc.trace_id = req_id
            raise


def time_range_of(query: GetQuery) -> TimeRange:
    """
    Extract the creation-time range of a lookup.

    Raises:
        ValidationError: If a bound is negative, exceeds MAX_TIMESTAMP or
            the range is inverted
    """
    if query.from_date < 0:
        raise ValidationError(FROM_DATE_KEY, "must not be negative")
    if query.to_date < 0:
        raise ValidationError(TO_DATE_KEY, "must not be negative")
    for key, value in ((FROM_DATE_KEY, query.from_date), (TO_DATE_KEY, query.to_date)):
        if value > MAX_TIMESTAMP:
            raise ValidationError(key, "is out of range")
    if query.from_date and query.to_date and query.from_date > query.to_date:
        raise ValidationError(FROM_DATE_KEY, f"is after {TO_DATE_KEY}")
    return TimeRange(from_date=query.from_date, to_date=query.to_date)
