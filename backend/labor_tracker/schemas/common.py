"""
Shared response schemas.
"""
from typing import Generic, List, TypeVar
from pydantic import BaseModel, Field

T = TypeVar("T")


class PagedResult(BaseModel, Generic[T]):
    """One page of a list endpoint."""
    items: List[T] = Field(..., description="Items on this page")
    total: int = Field(..., description="Total number of matching items")
    page: int = Field(..., description="Page number, starting at 1")
    page_size: int = Field(..., description="Items per page")


class ErrorResponse(BaseModel):
    """Error response schema."""
    detail: str = Field(..., description="Error detail message")
    error: str = Field(..., description="Error kind")
