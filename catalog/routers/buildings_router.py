"""
Building endpoints.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Request, status

from ..dependencies import get_building_manager, get_request_id
from ..managers import AddBuildingQuery, BuildingManager, GetBuildingsQuery
from .envelope import data_envelope

router = APIRouter(prefix="/buildings", tags=["buildings"])


@router.get("", summary="List buildings")
async def get_buildings(
    id: Optional[str] = None,
    address: Optional[str] = None,
    from_date: int = 0,
    to_date: int = 0,
    limit: Optional[int] = None,
    request_id: str = Depends(get_request_id),
    manager: BuildingManager = Depends(get_building_manager),
):
    """
    Get buildings by id, address and creation-time range.

    A warning is attached when more buildings matched than were returned.
    """
    query = GetBuildingsQuery(
        req_id=request_id,
        id=id,
        address=address,
        from_date=from_date,
        to_date=to_date,
        limit=limit,
    )
    buildings: List[Dict[str, Any]] = []
    result = await manager.get(query, lambda building: buildings.append(building.to_dict()))
    return data_envelope(buildings, result)


@router.post("", status_code=status.HTTP_201_CREATED, summary="Add building")
async def add_building(
    request: Request,
    request_id: str = Depends(get_request_id),
    manager: BuildingManager = Depends(get_building_manager),
):
    """Create a building from a JSON body: ``{"address": "..."}``."""
    query = AddBuildingQuery.from_json(await request.body(), req_id=request_id)
    building = await manager.add(query)
    return data_envelope(building.to_dict())
