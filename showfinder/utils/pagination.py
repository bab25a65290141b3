from typing import Sequence
from pydantic import BaseModel, Field

from showfinder.schemas.show import SearchResultPage, ShowRecord

class PaginationParams(BaseModel):
    """Parameters for pagination."""

    page: int = Field(default=1, ge=1, description="Page number (1-based)")
    page_size: int = Field(default=20, ge=1, description="Number of items per page")

    @property
    def offset(self) -> int:
        """Calculate offset based on page and page_size."""
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        """Get limit (page_size)."""
        return self.page_size

    def has_more(self, total_count: int) -> bool:
        return self.offset + self.page_size < total_count

def paginate(
    records: Sequence[ShowRecord],
    page: int,
    page_size: int,
    degraded: bool = False,
    strategy: str = ""
) -> SearchResultPage:
    """
    Slice an already filtered, ordered result list into one page.

    Args:
        records: Full result list
        page: Page number (1-based)
        page_size: Items per page
        degraded: Whether the results skipped distance filtering
        strategy: Name of the strategy that produced the results

    Returns:
        SearchResultPage
    """
    params = PaginationParams(page=page, page_size=page_size)
    total_count = len(records)
    items = list(records[params.offset:params.offset + params.limit])

    return SearchResultPage(
        items=items,
        total_count=total_count,
        page=params.page,
        page_size=params.page_size,
        has_more=params.has_more(total_count),
        degraded=degraded,
        strategy=strategy
    )
