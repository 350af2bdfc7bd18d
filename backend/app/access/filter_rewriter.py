"""
Public filter rewriting.

Anonymous callers may filter freely on their own documents, but never on
derived tenant paths such as ``tenant.slug``, at any depth of relation
traversal: the resolved-tenant policy filter is the only source of tenant
scoping on the public path. Offending clauses are removed wherever they appear
inside ``and``/``or`` and the removal is logged. Authenticated filters are
returned untouched.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable

from .context import AccessContext
from .where import COMBINATORS, Where

logger = logging.getLogger("tenantcms.access.filters")


def _is_forbidden(path: str, forbidden_paths: Iterable[str]) -> bool:
    # Matches whole segments anywhere in the path, e.g. page_type.tenant.slug
    segments = path.split(".")
    for forbidden in forbidden_paths:
        needle = forbidden.split(".")
        width = len(needle)
        if any(
            segments[start : start + width] == needle
            for start in range(len(segments) - width + 1)
        ):
            return True
    return False


def strip_forbidden_paths(
    where: Where | None, forbidden_paths: Iterable[str]
) -> tuple[Where | None, list[str]]:
    """Return ``where`` without clauses on forbidden paths, plus the paths removed."""
    if not where:
        return where, []

    forbidden = list(forbidden_paths)
    stripped: list[str] = []
    rewritten: Where = {}

    for key, value in where.items():
        if key in COMBINATORS:
            clauses = []
            for clause in value or []:
                kept, removed = strip_forbidden_paths(clause, forbidden)
                stripped.extend(removed)
                if kept:
                    clauses.append(kept)
            if clauses:
                rewritten[key] = clauses
            continue

        if _is_forbidden(key, forbidden):
            stripped.append(key)
            continue
        rewritten[key] = value

    return (rewritten or None), stripped


def rewrite_public_filter(
    ctx: AccessContext, where: Where | None, forbidden_paths: Iterable[str]
) -> Where | None:
    if where is None or not ctx.is_anonymous:
        return where

    rewritten, stripped = strip_forbidden_paths(where, forbidden_paths)
    if stripped:
        logger.warning("public_filter_stripped paths=%s", ",".join(stripped))
    return rewritten
