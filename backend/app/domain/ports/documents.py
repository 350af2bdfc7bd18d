from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from ...access.where import Where


@dataclass
class FindResult:
    docs: list[Any] = field(default_factory=list)
    total_docs: int = 0
    limit: int = 10
    page: int = 1


class DocumentStore(Protocol):
    """Query layer consumed by the access core.

    ``where`` arguments use the structured predicate form from
    ``app.access.where``; implementations must support equality and membership
    on every tenant reference field.
    """

    async def find(
        self,
        collection: str,
        where: Where | None = None,
        *,
        limit: int = 10,
        page: int = 1,
        depth: int = 0,
    ) -> FindResult:
        ...

    async def find_by_id(
        self,
        collection: str,
        doc_id: Any,
        *,
        where: Where | None = None,
        depth: int = 0,
    ) -> Any | None:
        ...

    async def create(self, collection: str, data: dict[str, Any]) -> Any:
        ...

    async def update(self, collection: str, doc: Any, data: dict[str, Any]) -> Any:
        ...

    async def delete(self, collection: str, doc: Any) -> None:
        ...

    async def commit(self) -> None:
        ...

    async def rollback(self) -> None:
        ...
