"""
User write hooks: credentials and membership grants.

A tenant-admin may create and edit users only within tenants they administer:
they can grant tenant roles on those tenants, never global roles, and their
edits leave memberships on other tenants untouched. Super-admin accounts are
out of their reach, and credentials (password, email) or the account itself
are theirs to change only when every membership of the target lies in a tenant
they administer.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..auth.identity import get_user_tenant_ids, is_super_admin
from ..auth.roles_contract import (
    TENANT_ADMIN,
    TENANT_ADMIN_GRANTABLE_ROLES,
    GlobalRole,
    validate_global_role,
    validate_tenant_role,
)
from ..errors import AuthorizationDenied, ValidationError
from ..models.user import UserTenant
from ..security.passwords import hash_password
from ..utils.references import contains_id, extract_id, field_value, same_id
from .base import WriteArgs

logger = logging.getLogger("tenantcms.validators.users")

MIN_PASSWORD_LENGTH = 8


async def prepare_credentials(args: WriteArgs) -> None:
    data = args.data

    if "email" in data and data["email"] is not None:
        email = str(data["email"]).strip().lower()
        if not email:
            raise ValidationError("Email is required", path="email")
        data["email"] = email

    password = data.pop("password", None)
    if password:
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters", path="password"
            )
        data["password_hash"] = hash_password(password)
    elif args.is_create:
        raise ValidationError("Password is required", path="password")


async def ensure_user_manageable(args: WriteArgs) -> None:
    """Keep tenant-admins away from accounts that reach beyond their tenants."""
    actor = args.ctx.user
    if args.is_create or is_super_admin(actor):
        return
    target = args.original
    if args.operation == "update" and same_id(actor, target):
        return

    if is_super_admin(target):
        logger.warning(
            "user_change_denied actor=%s target=%s reason=super_admin",
            args.ctx.actor_id,
            extract_id(target),
        )
        raise AuthorizationDenied("You cannot modify a super-admin")

    data = args.data
    changes_credentials = "password_hash" in data or (
        "email" in data and data["email"] != args.original_value("email")
    )
    if args.operation != "delete" and not changes_credentials:
        return

    admin_tenant_ids = get_user_tenant_ids(actor, TENANT_ADMIN)
    outside = [
        tenant_id
        for tenant_id in get_user_tenant_ids(target)
        if not contains_id(admin_tenant_ids, tenant_id)
    ]
    if outside:
        logger.warning(
            "user_change_denied actor=%s target=%s reason=foreign_membership tenants=%s",
            args.ctx.actor_id,
            extract_id(target),
            [str(tenant_id) for tenant_id in outside],
        )
        if args.operation == "delete":
            raise AuthorizationDenied("This user belongs to tenants you do not administer")
        raise AuthorizationDenied(
            "You cannot change credentials of a user who belongs to tenants you do not administer"
        )


def _role_list(value: Any, path: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ValidationError("Roles must be a list", path=path)
    return [str(role) for role in value]


async def validate_global_roles(args: WriteArgs) -> None:
    data = args.data
    if data.get("roles") is None:
        data.pop("roles", None)
        if not args.is_create:
            return
        data["roles"] = [GlobalRole.USER.value]

    roles = _role_list(data["roles"], "roles")
    for role in roles:
        try:
            validate_global_role(role)
        except ValueError as exc:
            raise ValidationError(str(exc), path="roles") from None
    data["roles"] = list(dict.fromkeys(roles))

    if is_super_admin(args.ctx.user):
        return

    current = set(_role_list(args.original_value("roles"), "roles")) if not args.is_create else set()
    requested = set(data["roles"])
    allowed = current | {GlobalRole.USER.value}
    if not requested <= allowed or (not args.is_create and requested != current):
        logger.warning(
            "role_grant_denied actor=%s requested=%s", args.ctx.actor_id, sorted(requested)
        )
        raise AuthorizationDenied("Only super-admins can change global roles")


def _membership_tenant(entry: Any) -> Any:
    tenant_id = extract_id(field_value(entry, "tenant_id"))
    if tenant_id is None:
        tenant_id = extract_id(field_value(entry, "tenant"))
    return tenant_id


async def validate_memberships(args: WriteArgs) -> None:
    """Check requested memberships and turn them into ``UserTenant`` rows."""
    data = args.data
    if data.get("tenants") is None:
        data.pop("tenants", None)
        return

    entries = data["tenants"]
    if not isinstance(entries, list):
        raise ValidationError("Tenants must be a list", path="tenants")

    actor = args.ctx.user
    super_admin = is_super_admin(actor)
    admin_tenant_ids = [] if super_admin else get_user_tenant_ids(actor, TENANT_ADMIN)

    requested: dict[str, tuple[Any, list[str]]] = {}
    for index, entry in enumerate(entries):
        path = f"tenants.{index}"
        if not isinstance(entry, Mapping) and not hasattr(entry, "tenant_id"):
            raise ValidationError("Membership must name a tenant", path=path)
        tenant_id = _membership_tenant(entry)
        if tenant_id is None:
            raise ValidationError("Membership must name a tenant", path=f"{path}.tenant_id")

        roles = _role_list(field_value(entry, "roles"), f"{path}.roles")
        for role in roles:
            try:
                validate_tenant_role(role)
            except ValueError as exc:
                raise ValidationError(str(exc), path=f"{path}.roles") from None

        if not super_admin:
            if not contains_id(admin_tenant_ids, tenant_id):
                logger.warning(
                    "membership_grant_denied actor=%s tenant=%s", args.ctx.actor_id, tenant_id
                )
                raise AuthorizationDenied("You cannot grant access to this tenant")
            if not set(roles) <= TENANT_ADMIN_GRANTABLE_ROLES:
                raise AuthorizationDenied("You cannot grant these tenant roles")

        requested[str(tenant_id)] = (tenant_id, list(dict.fromkeys(roles)))

    if args.is_create and not super_admin and not requested:
        raise ValidationError("At least one tenant membership is required", path="tenants")

    existing = {
        str(_membership_tenant(membership)): membership
        for membership in (args.original_value("tenants") or [])
        if _membership_tenant(membership) is not None
    }

    memberships: list[Any] = []
    if not super_admin:
        # Memberships outside the actor's tenants are not theirs to remove
        memberships.extend(
            membership
            for key, membership in existing.items()
            if key not in requested and not contains_id(admin_tenant_ids, key)
        )

    for key, (tenant_id, roles) in requested.items():
        membership = existing.get(key)
        if membership is None:
            membership = UserTenant(tenant_id=tenant_id, roles=roles)
        else:
            membership.roles = roles
        memberships.append(membership)

    data["tenants"] = memberships
