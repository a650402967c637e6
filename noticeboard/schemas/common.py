"""Response envelope shared by every endpoint."""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """{success, message?, data?}"""
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class Pagination(BaseModel):
    total: int
    page: int
    pages: int

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "Pagination":
        pages = (total + limit - 1) // limit if limit else 0
        return cls(total=total, page=page, pages=pages)
