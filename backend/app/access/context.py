from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ..auth.identity import snapshot_actor
from ..auth.roles_contract import ActorType
from ..utils.references import Id


@dataclass(frozen=True)
class AccessContext:
    """Everything an access decision may look at for one request.

    ``user`` is held as an ``ActorSnapshot`` taken when the context is built.
    ``headers`` are only consulted on the anonymous path and ``cookies`` only
    narrow an authenticated admin's scope; neither is a source of privilege.
    """

    user: Any | None = None
    headers: Mapping[str, str] = field(default_factory=dict)
    cookies: Mapping[str, str] = field(default_factory=dict)
    # Tenant selected in the admin UI, already checked against memberships
    context_tenant_id: Id | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "user", snapshot_actor(self.user))

    @property
    def is_anonymous(self) -> bool:
        return self.user is None

    @property
    def actor_type(self) -> ActorType:
        return ActorType.ANONYMOUS if self.user is None else ActorType.USER

    @property
    def actor_id(self) -> str:
        if self.user is None:
            return "anonymous"
        return str(getattr(self.user, "id", None) or "unknown")
