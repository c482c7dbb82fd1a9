"""Common schemas shared by the list endpoints."""

from typing import Generic, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """Generic paginated response wrapper.

    Usage:
        response_model=PaginatedResponse[TemplateSummary]

    Returns:
        {
            "items": [...],
            "total": 12,
            "limit": 20,
            "offset": 0
        }
    """
    items: list[T]
    total: int
    limit: int
    offset: int
