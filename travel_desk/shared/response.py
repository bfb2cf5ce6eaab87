from __future__ import annotations

from datetime import date
from math import ceil
from typing import Generic, Optional, Sequence, TypeVar

from travel_desk.shared.base import BaseSchema


T = TypeVar("T")


class Pagination(BaseSchema):
    page: int
    page_size: int
    total_items: int
    total_pages: int


class Meta(BaseSchema):
    as_of_date: str
    source: str
    time_window: str
    calculation_version: str
    currency: Optional[str] = None
    generated_at: Optional[str] = None


class ResponseEnvelope(BaseSchema, Generic[T]):
    data: T
    pagination: Optional[Pagination] = None
    meta: Optional[Meta] = None


def build_pagination(page: int, page_size: int, total_items: int) -> Pagination:
    total_pages = ceil(total_items / page_size) if page_size else 0
    return Pagination(
        page=page,
        page_size=page_size,
        total_items=total_items,
        total_pages=total_pages,
    )


def paginate_list(items: Sequence[T], page: int, page_size: int) -> tuple[list[T], Pagination]:
    total_items = len(items)
    pagination = build_pagination(page, page_size, total_items)
    start_index = (page - 1) * page_size
    end_index = start_index + page_size
    return list(items[start_index:end_index]), pagination


def build_meta(source: str, time_window: str = "now", as_of_date: Optional[str] = None) -> Meta:
    return Meta(
        as_of_date=as_of_date or date.today().isoformat(),
        source=source,
        time_window=time_window,
        calculation_version="v1",
        currency="USD",
    )
