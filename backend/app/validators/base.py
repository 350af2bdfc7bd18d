from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, Literal

from ..access.context import AccessContext
from ..config import Settings
from ..domain.ports.documents import DocumentStore
from ..utils.references import Id, extract_id


@dataclass
class WriteArgs:
    """State shared by the pre-commit hooks of one write.

    Hooks may rewrite ``data`` in place; ``original`` is the stored document
    on update and delete and ``None`` on create. Delete hooks get empty ``data``.
    """

    collection: str
    operation: Literal["create", "update", "delete"]
    data: dict[str, Any]
    ctx: AccessContext
    store: DocumentStore
    settings: Settings
    original: Any | None = None

    @property
    def is_create(self) -> bool:
        return self.operation == "create"

    def original_value(self, name: str) -> Any:
        if self.original is None:
            return None
        if isinstance(self.original, Mapping):
            return self.original.get(name)
        return getattr(self.original, name, None)

    def tenant_id(self) -> Id | None:
        """Tenant the write ends up in: payload first, then the stored document."""
        tenant_id = extract_id(self.data.get("tenant_id"))
        if tenant_id is None:
            tenant_id = extract_id(self.original_value("tenant_id"))
        return tenant_id


Hook = Callable[[WriteArgs], Awaitable[None]]
