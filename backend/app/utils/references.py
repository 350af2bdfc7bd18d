"""
Normalising accessor for relation fields.

A related entity may arrive as a bare id (UUID, str, int), as an expanded
mapping carrying ``id``, or as a loaded model instance. ``extract_id`` turns
all of these into the bare id so comparisons never depend on query depth.
"""
from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any, TypeAlias, Union

Id: TypeAlias = Union[uuid.UUID, str, int]
Reference: TypeAlias = Union[Id, Mapping[str, Any], Any, None]


def extract_id(value: Reference) -> Id | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (uuid.UUID, int)):
        return value
    if isinstance(value, str):
        return value or None
    if isinstance(value, Mapping):
        return extract_id(value.get("id"))
    return extract_id(getattr(value, "id", None))


def same_id(left: Reference, right: Reference) -> bool:
    """Compare two references by their string form; missing ids never match."""
    left_id = extract_id(left)
    right_id = extract_id(right)
    if left_id is None or right_id is None:
        return False
    return str(left_id) == str(right_id)


def contains_id(ids: list[Id], value: Reference) -> bool:
    return any(same_id(candidate, value) for candidate in ids)


def field_value(obj: Any, name: str) -> Any:
    """Read ``name`` from a mapping or an object; ``None`` when absent."""
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)
