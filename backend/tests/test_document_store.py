"""
Tests for the SQLAlchemy document store against a mocked AsyncSession.
"""
import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.crud.documents import SqlAlchemyDocumentStore
from app.errors import NotFoundError
from app.models import Page


@pytest.fixture
def mock_session():
    session = MagicMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.delete = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def store(mock_session):
    return SqlAlchemyDocumentStore(mock_session)


def _rows(*docs):
    result = MagicMock()
    result.scalars.return_value.all.return_value = list(docs)
    return result


def _count(total):
    result = MagicMock()
    result.scalar.return_value = total
    return result


def _one(doc):
    result = MagicMock()
    result.scalar_one_or_none.return_value = doc
    return result


class TestFind:
    @pytest.mark.anyio
    async def test_counts_then_loads_page(self, store, mock_session):
        first, second = MagicMock(), MagicMock()
        mock_session.execute.side_effect = [_count(12), _rows(first, second)]

        result = await store.find("pages", {"slug": {"equals": "about"}}, limit=2, page=3)

        assert result.docs == [first, second]
        assert result.total_docs == 12
        assert (result.limit, result.page) == (2, 3)
        assert mock_session.execute.await_count == 2

    @pytest.mark.anyio
    async def test_unknown_collection(self, store, mock_session):
        with pytest.raises(NotFoundError):
            await store.find("comments")

        mock_session.execute.assert_not_awaited()


class TestFindById:
    @pytest.mark.anyio
    async def test_malformed_id_never_queries(self, store, mock_session):
        assert await store.find_by_id("pages", "not-a-uuid") is None
        mock_session.execute.assert_not_awaited()

    @pytest.mark.anyio
    async def test_returns_matching_row(self, store, mock_session):
        page = MagicMock()
        mock_session.execute.return_value = _one(page)

        result = await store.find_by_id(
            "pages", str(uuid.uuid4()), where={"tenant_id": {"in": [uuid.uuid4()]}}
        )

        assert result is page


class TestWrites:
    @pytest.mark.anyio
    async def test_create_flushes_and_reloads(self, store, mock_session):
        page_id = uuid.uuid4()
        reloaded = MagicMock()
        mock_session.add.side_effect = lambda doc: setattr(doc, "id", page_id)
        mock_session.execute.return_value = _one(reloaded)

        result = await store.create("pages", {"title": "About", "slug": "about", "id": uuid.uuid4()})

        added = mock_session.add.call_args.args[0]
        assert isinstance(added, Page)
        assert added.slug == "about"
        assert added.id == page_id
        mock_session.flush.assert_awaited_once()
        assert result is reloaded

    @pytest.mark.anyio
    async def test_update_ignores_unknown_fields(self, store, mock_session):
        page = Page(id=uuid.uuid4(), title="Old", slug="old")
        mock_session.execute.return_value = _one(page)

        result = await store.update("pages", page, {"title": "New", "not_a_column": 1})

        assert result.title == "New"
        assert not hasattr(page, "not_a_column")
        mock_session.flush.assert_awaited_once()

    @pytest.mark.anyio
    async def test_delete_and_transaction_control(self, store, mock_session):
        page = Page(id=uuid.uuid4())

        await store.delete("pages", page)
        await store.commit()
        await store.rollback()

        mock_session.delete.assert_awaited_once_with(page)
        mock_session.commit.assert_awaited_once()
        mock_session.rollback.assert_awaited_once()
