"""
Tenancy role contract - the closed set of roles the access layer understands.

Two independent role axes exist:
- Global roles live on the user record. ``super-admin`` bypasses every tenant
  filter.
- Tenant roles live on each (user, tenant) membership. ``tenant-admin`` grants
  mutation rights inside that tenant only; ``tenant-member`` grants read access.

There are no wildcard roles and no implicit promotion between the axes: a
tenant role never grants a global capability and vice versa.
"""
from __future__ import annotations

from enum import Enum
from typing import Final


class ActorType(str, Enum):
    """Who is performing a request. Anonymous actors carry no user record."""

    USER = "user"
    ANONYMOUS = "anonymous"


class GlobalRole(str, Enum):
    SUPER_ADMIN = "super-admin"
    USER = "user"


class TenantRole(str, Enum):
    TENANT_ADMIN = "tenant-admin"
    TENANT_MEMBER = "tenant-member"


GLOBAL_ROLES: Final[frozenset[str]] = frozenset(role.value for role in GlobalRole)
TENANT_ROLES: Final[frozenset[str]] = frozenset(role.value for role in TenantRole)

SUPER_ADMIN: Final[str] = GlobalRole.SUPER_ADMIN.value
TENANT_ADMIN: Final[str] = TenantRole.TENANT_ADMIN.value

# Roles a tenant-admin may hand out on memberships of tenants they administer
TENANT_ADMIN_GRANTABLE_ROLES: Final[frozenset[str]] = TENANT_ROLES


def _is_wildcard(role: str) -> bool:
    return role.endswith("*")


def validate_global_role(role: str) -> None:
    """
    Validate a global role name.

    Raises:
        ValueError: If the role is a wildcard or not part of the contract
    """
    if _is_wildcard(role):
        raise ValueError(f"Wildcard role '{role}' is not allowed")
    if role not in GLOBAL_ROLES:
        raise ValueError(
            f"Invalid global role '{role}'. "
            f"Must be one of: {', '.join(sorted(GLOBAL_ROLES))}"
        )


def validate_tenant_role(role: str) -> None:
    """
    Validate a per-tenant role name.

    Global roles are rejected here: ``super-admin`` can never be granted
    through a tenant membership.

    Raises:
        ValueError: If the role is a wildcard or not a tenant role
    """
    if _is_wildcard(role):
        raise ValueError(f"Wildcard role '{role}' is not allowed")
    if role in GLOBAL_ROLES:
        raise ValueError(f"Global role '{role}' cannot be assigned on a tenant membership")
    if role not in TENANT_ROLES:
        raise ValueError(
            f"Invalid tenant role '{role}'. "
            f"Must be one of: {', '.join(sorted(TENANT_ROLES))}"
        )


def _validate_contract() -> None:
    """Validate the role contract at module import time."""
    errors = []

    overlap = GLOBAL_ROLES & TENANT_ROLES
    if overlap:
        errors.append(f"Roles defined on both axes: {sorted(overlap)}")

    if not TENANT_ADMIN_GRANTABLE_ROLES <= TENANT_ROLES:
        errors.append("Grantable roles must be tenant roles")

    for role in GLOBAL_ROLES | TENANT_ROLES:
        if _is_wildcard(role):
            errors.append(f"Wildcard role in contract: {role}")

    if errors:
        raise RuntimeError(
            "Role contract validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        )


_validate_contract()
