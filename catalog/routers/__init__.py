"""
HTTP routers for the catalog service.
"""

from . import buildings_router, categories_router, companies_router, health_router

__all__ = ["buildings_router", "categories_router", "companies_router", "health_router"]
