"""
Pagination contract for list endpoints.

Raw ``(page, limit)`` input is clamped into a bounded request before it is
used for a query or a cache key, so that equivalent requests (``limit=0``
and ``limit=DEFAULT_LIMIT``) always land on the same page.
"""

import math
from dataclasses import dataclass
from typing import Generic, List, TypeVar

from pydantic import BaseModel, Field

DEFAULT_LIMIT = 10
MAX_LIMIT = 100

T = TypeVar("T")


@dataclass
class PageRequest:
    """Pagination query parameters. Mutated in place by ``sanitize``."""
    page: int = 0
    limit: int = 0

    def sanitize(self) -> "PageRequest":
        """Clamp page to >= 1 and limit to [1, MAX_LIMIT]."""
        if self.page < 1:
            self.page = 1
        if self.limit < 1:
            self.limit = DEFAULT_LIMIT
        if self.limit > MAX_LIMIT:
            self.limit = MAX_LIMIT
        return self

    def offset(self) -> int:
        """Row offset for the requested page."""
        self.sanitize()
        return (self.page - 1) * self.limit

    def get_limit(self) -> int:
        self.sanitize()
        return self.limit


class PageMetadata(BaseModel):
    """Pagination details returned alongside a page of data."""
    current_page: int = Field(..., description="Requested page, 1-based")
    page_size: int = Field(..., description="Items per page")
    first_page: int = Field(default=1)
    last_page: int = Field(..., description="Last page, never below 1")
    total_records: int = Field(..., description="Total rows for the owner")


class PagedResult(BaseModel, Generic[T]):
    """A page of records plus its metadata."""
    data: List[T] = Field(default_factory=list)
    metadata: PageMetadata


def sanitize(req: PageRequest) -> PageRequest:
    return req.sanitize()


def calculate_offset(req: PageRequest) -> int:
    return req.offset()


def calculate_metadata(total: int, page: int, limit: int) -> PageMetadata:
    """Build metadata for ``total`` records without assuming sanitized input."""
    if page < 1:
        page = 1
    if limit < 1:
        limit = DEFAULT_LIMIT

    # Round up to cover a partial last page; never report "page 0 of 0".
    last_page = max(math.ceil(total / limit), 1)

    return PageMetadata(
        current_page=page,
        page_size=limit,
        first_page=1,
        last_page=last_page,
        total_records=total,
    )
