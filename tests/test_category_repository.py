"""
Tests for PostgresCategoryRepository.

The asyncpg client is mocked; SQL text and bound arguments are asserted
directly.
"""

import asyncio
import uuid

import asyncpg
import pytest

from catalog.domain.entities import Category
from catalog.domain.exceptions import DuplicateError, SchemaError, StorageError, ValidationError
from catalog.repositories.base import MAX_GETTING_OBJECTS, TimeRange
from catalog.repositories.category_repository import PostgresCategoryRepository
from catalog.repositories.interfaces import CategoryFilter


@pytest.fixture
def repository(mock_client):
    return PostgresCategoryRepository(mock_client)


def _category_record(name, created_at=100):
    return {"id": uuid.uuid4(), "name": name, "created_at": created_at}


class TestSetup:
    """Test schema creation."""

    @pytest.mark.asyncio
    async def test_create_runs_idempotent_ddl(self, mock_client):
        await PostgresCategoryRepository.create(mock_client)

        statements = [call.args[0] for call in mock_client.execute.await_args_list]
        assert statements[0] == "CREATE EXTENSION IF NOT EXISTS ltree"
        assert "CREATE TABLE IF NOT EXISTS categories" in statements[1]
        assert any("USING gist (name)" in s for s in statements)
        assert any("USING btree (created_at)" in s for s in statements)
        assert all("IF NOT EXISTS" in s for s in statements)

    @pytest.mark.asyncio
    async def test_second_setup_does_not_fail(self, mock_client):
        repository = await PostgresCategoryRepository.create(mock_client)
        await repository.setup()

        assert mock_client.execute.await_count == 8

    @pytest.mark.asyncio
    async def test_setup_failure_raises_schema_error_and_releases(self, mock_client):
        mock_client.execute.side_effect = asyncpg.exceptions.InsufficientPrivilegeError("denied")

        with pytest.raises(SchemaError):
            await PostgresCategoryRepository.create(mock_client)

        mock_client.release.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_setup_deadline_covers_all_statements(self, mock_client):
        async def slow_execute(*args, **kwargs):
            await asyncio.sleep(0.02)
            return 0

        mock_client.execute.side_effect = slow_execute
        repository = PostgresCategoryRepository(mock_client)

        with pytest.raises(SchemaError) as exc_info:
            await repository.setup(timeout=0.05)

        assert "timed out" in str(exc_info.value)
        assert mock_client.execute.await_count < 4

    def test_constructor_attaches_to_client(self, mock_client):
        PostgresCategoryRepository(mock_client)
        mock_client.attach.assert_called_once()


class TestInsert:
    """Test category insertion."""

    @pytest.mark.asyncio
    async def test_insert_binds_ltree_path(self, repository, mock_client, sample_category):
        await repository.insert(sample_category)

        query, *args = mock_client.execute.await_args.args
        assert "$2::text::ltree" in query
        assert args == [uuid.UUID(sample_category.id), "food.bakery", 100]

    @pytest.mark.asyncio
    async def test_invalid_category_not_written(self, repository, mock_client):
        with pytest.raises(ValidationError):
            await repository.insert(Category.new("bad..path"))

        mock_client.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_duplicate_path(self, repository, mock_client, sample_category):
        error = asyncpg.exceptions.UniqueViolationError("duplicate key")
        error.detail = "Key (name)=(food.bakery) already exists."
        mock_client.execute.side_effect = error

        with pytest.raises(DuplicateError) as exc_info:
            await repository.insert(sample_category)

        assert "food.bakery" in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_connection_failure_is_storage_error(self, repository, mock_client, sample_category):
        mock_client.execute.side_effect = ConnectionResetError("gone")

        with pytest.raises(StorageError):
            await repository.insert(sample_category)


class TestQuery:
    """Test category queries."""

    @pytest.mark.asyncio
    async def test_name_selects_subtree(self, repository, mock_client, stream_rows):
        stream_rows([_category_record("root"), _category_record("root.a"), _category_record("root.b")])
        seen = []

        result = await repository.query(CategoryFilter(name="root"), seen.append)

        query, *args = mock_client.iterate.call_args.args
        assert "name <@ $1::text::ltree" in query
        assert "ORDER BY name, id" in query
        assert args == ["root", MAX_GETTING_OBJECTS + 1]
        assert [c.name for c in seen] == ["root", "root.a", "root.b"]
        assert result.count == 3
        assert result.has_more is False

    @pytest.mark.asyncio
    async def test_id_ignores_other_fields(self, repository, mock_client, stream_rows):
        stream_rows([])
        category_id = str(uuid.uuid4())

        await repository.query(
            CategoryFilter(id=category_id, name="root", time_range=TimeRange(1, 2)), lambda c: None
        )

        query, *args = mock_client.iterate.call_args.args
        assert "name <@" not in query
        assert "created_at >=" not in query
        assert args == [uuid.UUID(category_id), MAX_GETTING_OBJECTS + 1]

    @pytest.mark.asyncio
    async def test_malformed_id_rejected(self, repository, mock_client):
        with pytest.raises(ValidationError):
            await repository.query(CategoryFilter(id="42"), lambda c: None)

        mock_client.iterate.assert_not_called()

    @pytest.mark.asyncio
    async def test_malformed_name_rejected(self, repository, mock_client):
        with pytest.raises(ValidationError):
            await repository.query(CategoryFilter(name="root..a"), lambda c: None)

        mock_client.iterate.assert_not_called()


class TestFindExisting:
    """Test category resolution."""

    @pytest.mark.asyncio
    async def test_returns_matching_subset(self, repository, mock_client):
        mock_client.fetch.return_value = [{"name": "food"}]

        found = await repository.find_existing(["food", "other", "food"])

        assert found == {"food"}
        query, paths = mock_client.fetch.await_args.args
        assert "ANY($1::text[]::ltree[])" in query
        assert paths == ["food", "other"]

    @pytest.mark.asyncio
    async def test_empty_input_skips_query(self, repository, mock_client):
        assert await repository.find_existing([]) == set()
        mock_client.fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_storage_failure(self, repository, mock_client):
        mock_client.fetch.side_effect = OSError("network down")

        with pytest.raises(StorageError):
            await repository.find_existing(["food"])


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_is_empty_delegates(self, repository, mock_client):
        mock_client.is_empty.return_value = False

        assert await repository.is_empty() is False
        assert mock_client.is_empty.await_args.args == ("categories",)

    @pytest.mark.asyncio
    async def test_stop_is_idempotent(self, repository, mock_client):
        await repository.stop()
        await repository.stop()

        mock_client.release.assert_awaited_once()
