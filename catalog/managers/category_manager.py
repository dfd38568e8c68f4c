"""
Category manager.
"""

from typing import Callable

import structlog

from ..domain.entities import Category
from ..repositories.base import QueryResult, normalize_limit
from ..repositories.interfaces import CategoryFilter, ICategoryRepository
from .base import time_range_of, traced
from .queries import AddCategoryQuery, GetCategoriesQuery

logger = structlog.get_logger(__name__)


class CategoryManager:
    """Orchestrates category creation and lookup."""

    def __init__(self, categories: ICategoryRepository):
        self.categories = categories

    async def add(self, query: AddCategoryQuery) -> Category:
        with traced(query.req_id):
            category = Category.new(query.name)
            category.validate()
            await self.categories.insert(category)
            logger.info("Category added", category_id=category.id, name=category.name)
        return category

    async def get(
        self, query: GetCategoriesQuery, visit: Callable[[Category], None]
    ) -> QueryResult:
        """Stream categories at or below ``query.name`` to ``visit``."""
        with traced(query.req_id):
            category_filter = CategoryFilter(
                id=query.id or None,
                name=query.name or None,
                time_range=time_range_of(query),
                limit=normalize_limit(query.limit),
            )
            result = await self.categories.query(category_filter, visit)
            logger.debug("Categories fetched", count=result.count, has_more=result.has_more)
        return result

    async def is_empty(self) -> bool:
        """Whether any categories have been stored yet."""
        return await self.categories.is_empty()
