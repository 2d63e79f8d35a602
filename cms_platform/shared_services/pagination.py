"""
Paging and Sorting

Zero-based page requests and the paged response envelope shared by all
list endpoints.
"""

import math
from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, Field
from pymongo import ASCENDING, DESCENDING

from ..config import get_config

config = get_config()

T = TypeVar("T")


class SortOrder(str, Enum):
    """Sort direction."""

    ASC = "ASC"
    DESC = "DESC"

    @property
    def direction(self) -> int:
        return ASCENDING if self is SortOrder.ASC else DESCENDING


class PageRequest(BaseModel):
    """Page, size and sort for a list query."""

    page: int = Field(default=0, ge=0, description="Zero-based page number")
    size: int = Field(default=config.default_page_size, ge=1, le=config.max_page_size)
    sort_by: str = Field(default="_id")
    sort_order: SortOrder = Field(default=SortOrder.ASC)

    @property
    def skip(self) -> int:
        return self.page * self.size

    def sort_spec(self) -> list[tuple[str, int]]:
        """Sort specification for pymongo find()."""
        return [(self.sort_by, self.sort_order.direction)]


class PagedResponse(BaseModel, Generic[T]):
    """One page of results with paging metadata."""

    content: list[T] = Field(default_factory=list)
    total_elements: int = 0
    total_pages: int = 0
    page_size: int = 0
    number: int = 0
    number_of_elements: int = 0
    first: bool = True
    last: bool = True
    empty: bool = True

    @classmethod
    def from_page(
        cls, items: list[T], total: int, page_request: PageRequest
    ) -> "PagedResponse[T]":
        """
        Build a response from a fetched page.

        Args:
            items: Documents on the requested page
            total: Total number of matching documents
            page_request: The request that produced the page

        Returns:
            Paged response
        """
        total_pages = math.ceil(total / page_request.size) if total else 0
        return cls(
            content=items,
            total_elements=total,
            total_pages=total_pages,
            page_size=page_request.size,
            number=page_request.page,
            number_of_elements=len(items),
            first=page_request.page == 0,
            last=page_request.page >= total_pages - 1,
            empty=not items,
        )

    @classmethod
    def empty_page(cls, page_request: PageRequest) -> "PagedResponse[T]":
        return cls.from_page([], 0, page_request)
