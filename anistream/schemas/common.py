from __future__ import annotations

"""Shared schema bases: camelCase JSON on the wire, snake_case in Python."""

from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys; also accepts field names; reads ORM objects."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class DataEnvelope(CamelModel, Generic[T]):
    data: List[T]


class MessageOut(BaseModel):
    message: str


class PaginationOut(CamelModel):
    total: int
    page: int
    limit: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class PageOut(CamelModel, Generic[T]):
    data: List[T]
    pagination: PaginationOut
