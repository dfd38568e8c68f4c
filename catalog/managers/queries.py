"""
Query models consumed by the managers.

Get queries carry the optional filters and the page size; Add queries carry
the creation payload. Every query carries the caller's request id.
"""

from typing import List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ..domain.exceptions import ValidationError

FROM_DATE_KEY = "from_date"
TO_DATE_KEY = "to_date"

Q = TypeVar("Q", bound="AddQuery")


class GetQuery(BaseModel):
    """Common fields of every lookup."""

    model_config = ConfigDict(frozen=True)

    req_id: str = ""
    id: Optional[str] = None
    from_date: int = 0
    to_date: int = 0
    limit: Optional[int] = None


class GetBuildingsQuery(GetQuery):
    address: Optional[str] = None


class GetCompaniesQuery(GetQuery):
    category: Optional[str] = None


class GetCategoriesQuery(GetQuery):
    name: Optional[str] = None


class AddQuery(BaseModel):
    """Creation payload plus the request id it arrived with."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    req_id: str = Field(default="", exclude=True)

    @classmethod
    def from_json(cls: Type[Q], body: bytes, req_id: str = "") -> Q:
        """
        Build a query from a raw JSON request body.

        Raises:
            ValidationError: If the body is empty or does not match the model
        """
        if not body:
            raise ValidationError("body", "is empty")
        try:
            query = cls.model_validate_json(body)
        except PydanticValidationError as exc:
            error = exc.errors()[0]
            location = ".".join(str(part) for part in error["loc"]) or "body"
            raise ValidationError(location, error["msg"]) from None
        return query.model_copy(update={"req_id": req_id})


class AddBuildingQuery(AddQuery):
    address: str = Field(..., min_length=1)


class AddCompanyQuery(AddQuery):
    name: str = Field(..., min_length=1)
    categories: List[str] = Field(..., min_length=1)


class AddCategoryQuery(AddQuery):
    name: str = Field(..., min_length=1)
