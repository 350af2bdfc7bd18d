"""
Structured query predicates shared by the policy engine and the query layer.

A ``Where`` is a plain dict in one of these shapes::

    {"slug": {"equals": "about"}}
    {"tenant_id": {"in": [t1, t2]}}
    {"and": [where, ...]}
    {"or": [where, ...]}

Several field clauses in one dict are implicitly conjoined. Field names may be
dotted to traverse a relationship (``tenant.slug``).
"""
from __future__ import annotations

from collections.abc import Iterable
from typing import Any, TypeAlias

from ..errors import ValidationError

Where: TypeAlias = dict[str, Any]
AccessResult: TypeAlias = bool | Where

OPERATORS = frozenset({"equals", "not_equals", "in", "not_in"})
COMBINATORS = frozenset({"and", "or"})


def equals(field: str, value: Any) -> Where:
    return {field: {"equals": value}}


def in_(field: str, values: Iterable[Any]) -> Where:
    return {field: {"in": list(values)}}


def and_(*clauses: Where) -> Where:
    return {"and": list(clauses)}


def or_(*clauses: Where) -> Where:
    return {"or": list(clauses)}


def is_where(value: Any) -> bool:
    return isinstance(value, dict)


def is_empty(where: Where | None) -> bool:
    if not where:
        return True
    for key, value in where.items():
        if key in COMBINATORS:
            if any(not is_empty(clause) for clause in value or []):
                return False
        else:
            return False
    return True


def combine_where(*parts: Where | None) -> Where | None:
    """Conjoin predicates, dropping empty ones. Never loosens any part."""
    clauses = [part for part in parts if not is_empty(part)]
    if not clauses:
        return None
    if len(clauses) == 1:
        return clauses[0]
    return {"and": clauses}


def validate_where(where: Any, *, path: str = "where") -> Where:
    """
    Check a caller-supplied predicate for structural validity.

    Raises:
        ValidationError: On unknown operators or malformed clauses
    """
    if not isinstance(where, dict):
        raise ValidationError("Filter must be an object", path=path)

    for key, value in where.items():
        if key in COMBINATORS:
            if not isinstance(value, list):
                raise ValidationError(f"'{key}' must be a list of filters", path=path)
            for clause in value:
                validate_where(clause, path=path)
            continue

        if not isinstance(value, dict) or not value:
            raise ValidationError(f"Filter on '{key}' must map operators to values", path=path)
        for operator, operand in value.items():
            if operator not in OPERATORS:
                raise ValidationError(
                    f"Unsupported operator '{operator}' on '{key}'", path=path
                )
            if operator in {"in", "not_in"} and not isinstance(operand, list):
                raise ValidationError(f"'{operator}' on '{key}' expects a list", path=path)

    return where
