"""
Company endpoints.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Request, status

from ..dependencies import get_company_manager, get_request_id
from ..managers import AddCompanyQuery, CompanyManager, GetCompaniesQuery
from .envelope import data_envelope

router = APIRouter(prefix="/companies", tags=["companies"])


@router.get("", summary="List companies")
async def get_companies(
    id: Optional[str] = None,
    category: Optional[str] = None,
    from_date: int = 0,
    to_date: int = 0,
    limit: Optional[int] = None,
    request_id: str = Depends(get_request_id),
    manager: CompanyManager = Depends(get_company_manager),
):
    """Get companies, optionally only those filed under a category path."""
    query = GetCompaniesQuery(
        req_id=request_id,
        id=id,
        category=category,
        from_date=from_date,
        to_date=to_date,
        limit=limit,
    )
    companies: List[Dict[str, Any]] = []
    result = await manager.get(query, lambda company: companies.append(company.to_dict()))
    return data_envelope(companies, result)


@router.post("", status_code=status.HTTP_201_CREATED, summary="Add company")
async def add_company(
    request: Request,
    request_id: str = Depends(get_request_id),
    manager: CompanyManager = Depends(get_company_manager),
):
    """Create a company: ``{"name": "...", "categories": ["food.bakery"]}``."""
    query = AddCompanyQuery.from_json(await request.body(), req_id=request_id)
    company = await manager.add(query)
    return data_envelope(company.to_dict())
