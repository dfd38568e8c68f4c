"""
Integration test fixtures.

Tests in this package talk to a real PostgreSQL server with the ``ltree``
extension available. They are skipped unless CATALOG_TEST_DATABASE_URL
points at a database the tests may freely create and drop tables in.
"""

import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from catalog.pg.client import PgClient

# ==================== Configuration ====================

TEST_DATABASE_URL = os.getenv("CATALOG_TEST_DATABASE_URL", "")

TABLES = ("companies", "categories", "buildings")


def pytest_collection_modifyitems(config, items):
    """Mark every test here as integration and skip without a database."""
    skip = pytest.mark.skip(reason="CATALOG_TEST_DATABASE_URL not set")
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
            if not TEST_DATABASE_URL:
                item.add_marker(skip)


# ==================== Database Fixtures ====================


@pytest_asyncio.fixture
async def pg_client() -> AsyncGenerator[PgClient, None]:
    """Connected client over an empty schema; tables are dropped afterwards."""
    client = await PgClient.connect(TEST_DATABASE_URL, min_size=1, max_size=4)
    for table in TABLES:
        await client.execute(f"DROP TABLE IF EXISTS {table}")
    # Held by the fixture so repositories stopping in a test leave it open
    client.attach()

    yield client

    for table in TABLES:
        await client.execute(f"DROP TABLE IF EXISTS {table}")
    await client.stop()
