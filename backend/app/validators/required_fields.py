"""Turn an explicit ``null`` on a required column into a field error."""
from __future__ import annotations

from sqlalchemy import inspect

from ..errors import ValidationError
from ..models import COLLECTION_MODELS
from .base import WriteArgs


async def reject_required_nulls(args: WriteArgs) -> None:
    model = COLLECTION_MODELS.get(args.collection)
    if model is None:
        return
    columns = inspect(model).columns
    for name, value in args.data.items():
        if value is not None or name not in columns:
            continue
        column = columns[name]
        if column.nullable or column.primary_key:
            continue
        label = name.replace("_", " ").capitalize()
        raise ValidationError(f"{label} is required", path=name)
