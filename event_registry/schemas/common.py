import math
from datetime import datetime
from typing import Annotated, Generic, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from event_registry.core.timeutils import as_utc

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 10

UTCDateTime = Annotated[datetime, AfterValidator(as_utc)]

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base model that reads snake_case attributes and speaks camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PaginationMeta(CamelModel):
    total: int
    total_pages: int
    current_page: int
    items_per_page: int
    has_next_page: bool
    has_previous_page: bool

    @classmethod
    def build(cls, *, total: int, page: int, limit: int, **extra) -> "PaginationMeta":
        total_pages = math.ceil(total / limit) if limit else 0
        return cls(
            total=total,
            total_pages=total_pages,
            current_page=page,
            items_per_page=limit,
            has_next_page=page < total_pages,
            has_previous_page=page > 1,
            **extra,
        )


class Page(CamelModel, Generic[T]):
    data: list[T]
    pagination: PaginationMeta
