"""
Company manager.

Companies are only accepted when every category they reference exists;
the check itself lives in the company repository.
"""

from typing import Callable

import structlog

from ..domain.entities import Company
from ..repositories.base import QueryResult, normalize_limit
from ..repositories.interfaces import CompanyFilter, ICompanyRepository
from .base import time_range_of, traced
from .queries import AddCompanyQuery, GetCompaniesQuery

logger = structlog.get_logger(__name__)


class CompanyManager:
    """Orchestrates company creation and lookup."""

    def __init__(self, companies: ICompanyRepository):
        """
        Initialize manager.

        Args:
            companies: Company repository
        """
        self.companies = companies

    async def add(self, query: AddCompanyQuery) -> Company:
        """
        Create and persist a company from an Add query.

        Raises:
            ValidationError: If the payload does not form a valid company
            CategoryReferenceError: If a referenced category does not exist
            DuplicateError: If the generated id collides
        """
        with traced(query.req_id):
            company = Company.new(query.name, query.categories)
            company.validate()
            await self.companies.insert(company)
            logger.info("Company added", company_id=company.id)
        return company

    async def get(
        self, query: GetCompaniesQuery, visit: Callable[[Company], None]
    ) -> QueryResult:
        """Stream companies filed under ``query.category`` to ``visit``."""
        with traced(query.req_id):
            company_filter = CompanyFilter(
                id=query.id or None,
                category=query.category or None,
                time_range=time_range_of(query),
                limit=normalize_limit(query.limit),
            )
            result = await self.companies.query(company_filter, visit)
            logger.debug("Companies fetched", count=result.count, has_more=result.has_more)
        return result
