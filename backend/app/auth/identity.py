"""
Identity queries over a user's global roles and tenant memberships.

Both helpers are pure and accept either ORM ``User`` objects, plain mappings
(e.g. decoded session payloads) or an ``ActorSnapshot``. Membership records
that are partial or malformed are skipped rather than raising, since a broken
row must never widen or crash an access decision.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from ..utils.references import Id, extract_id, field_value
from .roles_contract import SUPER_ADMIN


@dataclass(frozen=True)
class MembershipSnapshot:
    tenant_id: Id
    roles: tuple[str, ...] = ()


@dataclass(frozen=True)
class ActorSnapshot:
    """Detached copy of the acting user.

    Access decisions read this instead of the ORM row, so a rolled-back
    session (which expires loaded instances) cannot break them mid-request.
    """

    id: Id | None
    email: str | None = None
    roles: tuple[str, ...] = ()
    tenants: tuple[MembershipSnapshot, ...] = ()


def _role_set(value: Any) -> frozenset[str]:
    if isinstance(value, str) or not isinstance(value, Iterable):
        return frozenset()
    return frozenset(role for role in value if isinstance(role, str))


def _membership_tenant_id(membership: Any) -> Id | None:
    tenant_id = extract_id(field_value(membership, "tenant_id"))
    if tenant_id is None:
        tenant_id = extract_id(field_value(membership, "tenant"))
    return tenant_id


def _memberships(user: Any) -> list[Any]:
    memberships = field_value(user, "tenants")
    if isinstance(memberships, (str, bytes, Mapping)) or not isinstance(memberships, Iterable):
        return []
    return list(memberships)


def is_super_admin(user: Any) -> bool:
    if user is None:
        return False
    return SUPER_ADMIN in _role_set(field_value(user, "roles"))


def get_user_tenant_ids(user: Any, required_role: str | None = None) -> list[Id]:
    """
    Return the ids of every tenant the user holds a membership in.

    Args:
        user: User object or mapping with a ``tenants`` membership list
        required_role: When set, only memberships whose roles contain it count

    Returns:
        Tenant ids in membership order, without duplicates
    """
    if user is None:
        return []

    tenant_ids: list[Id] = []
    seen: set[str] = set()
    for membership in _memberships(user):
        tenant_id = _membership_tenant_id(membership)
        if tenant_id is None:
            continue

        if required_role is not None:
            if required_role not in _role_set(field_value(membership, "roles")):
                continue

        key = str(tenant_id)
        if key in seen:
            continue
        seen.add(key)
        tenant_ids.append(tenant_id)

    return tenant_ids


def snapshot_actor(user: Any) -> ActorSnapshot | None:
    """Copy the fields access decisions need; malformed memberships are dropped."""
    if user is None or isinstance(user, ActorSnapshot):
        return user

    tenants = []
    for membership in _memberships(user):
        tenant_id = _membership_tenant_id(membership)
        if tenant_id is None:
            continue
        roles = field_value(membership, "roles")
        tenants.append(
            MembershipSnapshot(tenant_id=tenant_id, roles=tuple(sorted(_role_set(roles))))
        )

    email = field_value(user, "email")
    return ActorSnapshot(
        id=extract_id(field_value(user, "id")),
        email=str(email) if email is not None else None,
        roles=tuple(sorted(_role_set(field_value(user, "roles")))),
        tenants=tuple(tenants),
    )
