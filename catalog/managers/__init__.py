"""
Manager layer - orchestration between the transport and the repositories.
"""

from .building_manager import BuildingManager
from .category_manager import CategoryManager
from .company_manager import CompanyManager
from .queries import (
    AddBuildingQuery,
    AddCategoryQuery,
    AddCompanyQuery,
    GetBuildingsQuery,
    GetCategoriesQuery,
    GetCompaniesQuery,
)

__all__ = [
    "BuildingManager",
    "CategoryManager",
    "CompanyManager",
    "AddBuildingQuery",
    "AddCategoryQuery",
    "AddCompanyQuery",
    "GetBuildingsQuery",
    "GetCategoriesQuery",
    "GetCompaniesQuery",
]
