"""
Core pagination utilities for API endpoints.
"""
from typing import Generic, List, TypeVar
from pydantic import BaseModel, Field
from fastapi import Query
import math

T = TypeVar("T")

class PageParams:
    """
    Page parameters for pagination.

    Attributes:
        page: Page number (1-indexed)
        limit: Number of items per page
        offset: Number of rows skipped before this page
    """
    def __init__(
        self,
        page: int = Query(1, ge=1, description="Page number"),
        limit: int = Query(10, ge=1, le=100, description="Items per page")
    ):
        self.page = page
        self.limit = limit
        self.offset = (page - 1) * limit


class PaginationMeta(BaseModel):
    """
    Pagination block of list responses.

    Attributes:
        page: Current page number
        limit: Number of items per page
        total: Total number of matching items
        total_pages: Total number of pages
    """
    page: int
    limit: int
    total: int
    total_pages: int = Field(..., alias="totalPages")

    class Config:
        populate_by_name = True


class Page(Generic[T]):
    """
    One page of results together with its pagination metadata.
    """
    def __init__(self, items: List[T], meta: PaginationMeta):
        self.items = items
        self.meta = meta

    def __repr__(self):
        return f"<Page(page={self.meta.page}, items={len(self.items)}, total={self.meta.total})>"


def total_pages(total: int, limit: int) -> int:
    """
    Number of pages needed for ``total`` items.

    Args:
        total: Total number of items
        limit: Items per page

    Returns:
        int: ceil(total / limit)
    """
    return math.ceil(total / limit) if total > 0 else 0


def build_meta(page_params: PageParams, total: int) -> PaginationMeta:
    return PaginationMeta(
        page=page_params.page,
        limit=page_params.limit,
        total=total,
        total_pages=total_pages(total, page_params.limit),
    )
