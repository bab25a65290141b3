"""Utility package initialization."""

from .pagination import PaginationParams, paginate

__all__ = ['PaginationParams', 'paginate']
