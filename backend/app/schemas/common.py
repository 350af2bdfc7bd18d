from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class DocumentList(BaseModel, Generic[T]):
    """Paginated find result."""

    docs: list[T]
    total_docs: int
    limit: int
    page: int
