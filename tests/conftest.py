"""
Test configuration and fixtures
"""

import uuid
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from catalog.domain.entities import Building, Category, Company
from catalog.pg.client import PgClient


async def _rows(records: List[Dict[str, Any]], fail_with: Optional[BaseException], state: dict):
    try:
        for record in records:
            yield record
        if fail_with is not None:
            raise fail_with
    finally:
        state["closed"] = True


@pytest.fixture
def mock_client():
    """PgClient double with async methods returning neutral values."""
    client = MagicMock(spec=PgClient)
    client.execute = AsyncMock(return_value=1)
    client.fetch = AsyncMock(return_value=[])
    client.fetchval = AsyncMock(return_value=None)
    client.is_empty = AsyncMock(return_value=True)
    client.release = AsyncMock()
    client.stop = AsyncMock()
    client.iterate = MagicMock()
    return client


@pytest.fixture
def stream_rows(mock_client):
    """
    Make ``mock_client.iterate`` yield the given records.

    Returns a dict whose ``closed`` key turns True once the iterator has
    been closed, so tests can check the cursor was released.
    """

    def _stream(records, fail_with=None):
        state = {"closed": False}
        mock_client.iterate.side_effect = lambda *args, **kwargs: _rows(records, fail_with, state)
        return state

    return _stream


@pytest.fixture
def sample_category():
    return Category(id=str(uuid.uuid4()), name="food.bakery", created_at=100)


@pytest.fixture
def sample_building():
    return Building(id=str(uuid.uuid4()), address="A", created_at=100)


@pytest.fixture
def sample_company():
    return Company(
        id=str(uuid.uuid4()),
        name="Bread & Co",
        categories=["food.bakery", "food.cafe"],
        created_at=100,
    )


def building_record(address: str = "A", created_at: int = 100) -> Dict[str, Any]:
    return {"id": uuid.uuid4(), "address": address, "created_at": created_at}


@pytest.fixture
def building_records():
    """Factory for building rows as the driver returns them."""

    def _records(count: int):
        return [building_record(f"Street {i}", 100 + i) for i in range(count)]

    return _records
