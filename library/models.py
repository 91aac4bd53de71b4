"""
Pydantic models for books and paginated results.

Attributes are snake_case in Python; JSON uses camelCase keys
(``pageSize``, ``totalCount``, ``totalPages``). Both forms are accepted on input.
"""

import math
import uuid
from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class Book(BaseModel):
    """Immutable book record."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, description="Unique book identifier")
    title: str = Field(..., description="Book title")
    owner: str = Field(..., description="Book owner")
    availability: bool = Field(False, description="Whether the book can be borrowed")

    def sort_key(self):
        """Ordering key: title, then owner."""
        return (self.title, self.owner)

    def matches(self, normalized_query: str) -> bool:
        """Case-insensitive substring match on title or owner.

        ``normalized_query`` must already be stripped and case-folded.
        """
        return (
            normalized_query in self.title.casefold()
            or normalized_query in self.owner.casefold()
        )


class PagedResult(BaseModel, Generic[T]):
    """One page of results plus pagination metadata."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    items: List[T] = Field(default_factory=list, description="Items on this page")
    page: int = Field(..., ge=1, description="Normalized page number (1-based)")
    page_size: int = Field(..., ge=1, description="Normalized page size")
    total_count: int = Field(..., ge=0, description="Total number of items")
    total_pages: int = Field(..., ge=0, description="Total number of pages")

    @staticmethod
    def count_pages(total_count: int, page_size: int) -> int:
        """Number of pages needed for ``total_count`` items."""
        return math.ceil(total_count / page_size)

