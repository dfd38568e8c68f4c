"""
Shared dependencies for the application.

Provides dependency injection functions used across routers. The container
lives on ``app.state`` and is set by the application lifespan.
"""

from fastapi import Request

from .container import ServiceContainer
from .managers import BuildingManager, CategoryManager, CompanyManager


def get_container(request: Request) -> ServiceContainer:
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise RuntimeError("Service container not initialized")
    return container


def get_request_id(request: Request) -> str:
    """Request id assigned by the request-id middleware."""
    return getattr(request.state, "request_id", "")


def get_building_manager(request: Request) -> BuildingManager:
    return get_container(request).building_manager


def get_category_manager(request: Request) -> CategoryManager:
    return get_container(request).category_manager


def get_company_manager(request: Request) -> CompanyManager:
    return get_container(request).company_manager
