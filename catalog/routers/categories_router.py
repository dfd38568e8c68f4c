"""
Category endpoints.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Request, status

from ..dependencies import get_category_manager, get_request_id
from ..managers import AddCategoryQuery, CategoryManager, GetCategoriesQuery
from .envelope import data_envelope

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", summary="List categories")
async def get_categories(
    id: Optional[str] = None,
    name: Optional[str] = None,
    from_date: int = 0,
    to_date: int = 0,
    limit: Optional[int] = None,
    request_id: str = Depends(get_request_id),
    manager: CategoryManager = Depends(get_category_manager),
):
    """Get categories; ``name`` returns that path and everything below it."""
    query = GetCategoriesQuery(
        req_id=request_id,
        id=id,
        name=name,
        from_date=from_date,
        to_date=to_date,
        limit=limit,
    )
    categories: List[Dict[str, Any]] = []
    result = await manager.get(query, lambda category: categories.append(category.to_dict()))
    return data_envelope(categories, result)


@router.post("", status_code=status.HTTP_201_CREATED, summary="Add category")
async def add_category(
    request: Request,
    request_id: str = Depends(get_request_id),
    manager: CategoryManager = Depends(get_category_manager),
):
    """Create a category: ``{"name": "food.bakery"}``."""
    query = AddCategoryQuery.from_json(await request.body(), req_id=request_id)
    category = await manager.add(query)
    return data_envelope(category.to_dict())
