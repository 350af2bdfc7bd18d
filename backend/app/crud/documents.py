"""
SQLAlchemy implementation of the document store port.

Structured predicates are compiled to SQL here. A dotted field path traverses
a relationship (``has`` for many-to-one, ``any`` for collections), and a
many-to-one relationship name used as a field compares its foreign key, so
``{"tenant": {"equals": t}}`` and ``{"tenant_id": {"equals": t}}`` are
equivalent.
"""
import uuid
from collections.abc import Mapping
from typing import Any

from sqlalchemy import Uuid, and_, func, inspect, or_, select, true
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.sql.elements import ColumnElement

from ..access.where import COMBINATORS, Where
from ..domain.ports.documents import FindResult
from ..errors import NotFoundError, ValidationError
from ..models import COLLECTION_MODELS
from ..utils.references import extract_id


def resolve_model(collection: str) -> type:
    model = COLLECTION_MODELS.get(collection)
    if model is None:
        raise NotFoundError(f"Unknown collection '{collection}'")
    return model


def _coerce(column: Any, value: Any) -> Any:
    if isinstance(value, Mapping):
        value = extract_id(value)
    if value is None or not isinstance(column.type, Uuid):
        return value
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise ValidationError(f"'{value}' is not a valid id", path="where") from None


def _compile_operator(column: Any, operator: str, operand: Any) -> ColumnElement[bool]:
    if operator == "equals":
        value = _coerce(column, operand)
        return column.is_(None) if value is None else column == value
    if operator == "not_equals":
        value = _coerce(column, operand)
        return column.is_not(None) if value is None else column != value
    if operator == "in":
        return column.in_([_coerce(column, item) for item in operand])
    if operator == "not_in":
        return column.not_in([_coerce(column, item) for item in operand])
    raise ValidationError(f"Unsupported operator '{operator}'", path="where")


def _compile_field(model: type, path: str, operators: Mapping[str, Any]) -> ColumnElement[bool]:
    mapper = inspect(model)
    head, _, rest = path.partition(".")

    relationship = mapper.relationships.get(head)
    if rest:
        if relationship is None:
            raise ValidationError(f"Unknown filter field '{path}'", path="where")
        inner = _compile_field(relationship.mapper.class_, rest, operators)
        attribute = getattr(model, head)
        return attribute.any(inner) if relationship.uselist else attribute.has(inner)

    column = mapper.columns.get(head)
    if column is None and relationship is not None and not relationship.uselist:
        column = next(iter(relationship.local_columns))
    if column is None:
        raise ValidationError(f"Unknown filter field '{path}'", path="where")

    return and_(
        *[_compile_operator(column, operator, operand) for operator, operand in operators.items()]
    )


def compile_where(model: type, where: Where) -> ColumnElement[bool]:
    conditions: list[ColumnElement[bool]] = []
    for key, value in where.items():
        if key in COMBINATORS:
            clauses = [compile_where(model, clause) for clause in value]
            if not clauses:
                continue
            conditions.append(and_(*clauses) if key == "and" else or_(*clauses))
        else:
            conditions.append(_compile_field(model, key, value))

    if not conditions:
        return true()
    return and_(*conditions)


def apply_changes(doc: Any, data: Mapping[str, Any]) -> Any:
    """Copy known mapped attributes from ``data`` onto ``doc``; ``id`` is never rewritten."""
    mapper = inspect(type(doc))
    for field, value in data.items():
        if field == "id":
            continue
        if field in mapper.columns or field in mapper.relationships:
            setattr(doc, field, value)
    return doc


def _loader_options(model: type, depth: int) -> list:
    # Collections are always loaded; async sessions cannot lazy-load later
    return [
        selectinload(getattr(model, relationship.key))
        for relationship in inspect(model).relationships
        if depth > 0 or relationship.uselist
    ]


class SqlAlchemyDocumentStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find(
        self,
        collection: str,
        where: Where | None = None,
        *,
        limit: int = 10,
        page: int = 1,
        depth: int = 0,
    ) -> FindResult:
        model = resolve_model(collection)

        query = select(model)
        if where:
            query = query.where(compile_where(model, where))

        count_query = select(func.count()).select_from(query.subquery())
        total_result = await self.session.execute(count_query)
        total = total_result.scalar() or 0

        query = (
            query.options(*_loader_options(model, depth))
            .order_by(model.created_at.desc(), model.id)
            .limit(limit)
            .offset((max(page, 1) - 1) * limit)
        )
        result = await self.session.execute(query)
        docs = list(result.scalars().all())

        return FindResult(docs=docs, total_docs=total, limit=limit, page=page)

    async def find_by_id(
        self,
        collection: str,
        doc_id: Any,
        *,
        where: Where | None = None,
        depth: int = 0,
    ) -> Any | None:
        model = resolve_model(collection)
        try:
            key = _coerce(model.__table__.c.id, doc_id)
        except ValidationError:
            # A malformed id can never match a row
            return None
        if key is None:
            return None

        condition = model.id == key
        if where:
            condition = and_(condition, compile_where(model, where))
        query = (
            select(model)
            .where(condition)
            .options(*_loader_options(model, depth))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def create(self, collection: str, data: dict[str, Any]) -> Any:
        model = resolve_model(collection)
        doc = apply_changes(model(), data)
        self.session.add(doc)
        await self.session.flush()
        return await self.find_by_id(collection, doc.id)

    async def update(self, collection: str, doc: Any, data: dict[str, Any]) -> Any:
        apply_changes(doc, data)
        self.session.add(doc)
        await self.session.flush()
        return await self.find_by_id(collection, doc.id)

    async def delete(self, collection: str, doc: Any) -> None:
        await self.session.delete(doc)
        await self.session.flush()

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
