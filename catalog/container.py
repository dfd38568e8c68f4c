"""
Service container.

Builds the shared PostgreSQL client, the repositories and the managers once
at startup and tears them down on shutdown. The HTTP layer receives the
container explicitly instead of reaching for module globals.
"""

import time
from typing import Optional

import structlog

from .config import Settings
from .managers import BuildingManager, CategoryManager, CompanyManager
from .pg.client import PgClient
from .repositories import (
    PostgresBuildingRepository,
    PostgresCategoryRepository,
    PostgresCompanyRepository,
)

logger = structlog.get_logger(__name__)


class ServiceContainer:
    """Owns the lifecycle of every storage-backed component."""

    def __init__(
        self,
        client: PgClient,
        buildings: PostgresBuildingRepository,
        categories: PostgresCategoryRepository,
        companies: PostgresCompanyRepository,
    ):
        self.client = client
        self.buildings = buildings
        self.categories = categories
        self.companies = companies

        self.building_manager = BuildingManager(buildings)
        self.category_manager = CategoryManager(categories)
        self.company_manager = CompanyManager(companies)

    @classmethod
    async def start(cls, settings: Settings) -> "ServiceContainer":
        """
        Connect to PostgreSQL and initialise every repository.

        Raises:
            SchemaError: If a table or index cannot be created
        """
        logger.info("Initialising repositories", database=settings.safe_database_url)
        client = await PgClient.connect(
            settings.DATABASE_URL,
            min_size=settings.DATABASE_POOL_MIN_SIZE,
            max_size=settings.DATABASE_POOL_SIZE,
        )
        try:
            buildings = await PostgresBuildingRepository.create(client)
            categories = await PostgresCategoryRepository.create(client)
            companies = await PostgresCompanyRepository.create(client, categories)
        except Exception:
            logger.error("Repository initialisation failed")
            await client.stop()
            raise
        logger.info("Repositories initialised")
        return cls(client, buildings, categories, companies)

    async def stop(self, timeout: Optional[float] = None) -> None:
        """
        Stop every repository within ``timeout`` seconds overall.

        A failing repository is logged and does not prevent the others from
        being stopped.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        for name, repository in (
            ("building", self.buildings),
            ("category", self.categories),
            ("company", self.companies),
        ):
            remaining = None if deadline is None else max(deadline - time.monotonic(), 0.0)
            try:
                await repository.stop(remaining)
            except Exception as exc:
                logger.error("Failed to stop repository", repository=name, error=str(exc))
        logger.info("Repositories stopped")
