"""
Building manager.

Turns application-level building queries into repository calls.
"""

from typing import Callable

import structlog

from ..domain.entities import Building
from ..repositories.base import QueryResult, normalize_limit
from ..repositories.interfaces import BuildingFilter, IBuildingRepository
from .base import time_range_of, traced
from .queries import AddBuildingQuery, GetBuildingsQuery

logger = structlog.get_logger(__name__)


class BuildingManager:
    """Orchestrates building creation and lookup."""

    def __init__(self, buildings: IBuildingRepository):
        """
        Initialize manager.

        Args:
            buildings: Building repository
        """
        self.buildings = buildings

    async def add(self, query: AddBuildingQuery) -> Building:
        """
        Create and persist a building from an Add query.

        Returns:
            The stored building, with its generated id and timestamp
        """
        with traced(query.req_id):
            building = Building.new(query.address)
            building.validate()
            await self.buildings.insert(building)
            logger.info("Building added", building_id=building.id)
        return building

    async def get(
        self, query: GetBuildingsQuery, visit: Callable[[Building], None]
    ) -> QueryResult:
        """
        Stream buildings matching the query to ``visit``.

        Returns:
            How many buildings were delivered and whether more matched
        """
        with traced(query.req_id):
            building_filter = BuildingFilter(
                id=query.id or None,
                address=query.address or None,
                time_range=time_range_of(query),
                limit=normalize_limit(query.limit),
            )
            result = await self.buildings.query(building_filter, visit)
            logger.debug("Buildings fetched", count=result.count, has_more=result.has_more)
        return result
