"""
Tests for PostgresBuildingRepository and the shared streaming logic.
"""

import uuid

import asyncpg
import pytest

from catalog.domain.entities import Building
from catalog.domain.exceptions import StorageError, ValidationError
from catalog.repositories.base import MAX_GETTING_OBJECTS, TimeRange, normalize_limit
from catalog.repositories.building_repository import PostgresBuildingRepository
from catalog.repositories.interfaces import BuildingFilter


@pytest.fixture
def repository(mock_client):
    return PostgresBuildingRepository(mock_client)


class TestNormalizeLimit:
    @pytest.mark.parametrize(
        "requested, expected",
        [(None, MAX_GETTING_OBJECTS), (0, MAX_GETTING_OBJECTS), (-5, MAX_GETTING_OBJECTS), (500, 100), (20, 20)],
    )
    def test_normalize(self, requested, expected):
        assert normalize_limit(requested) == expected


class TestInsert:
    @pytest.mark.asyncio
    async def test_insert(self, repository, mock_client, sample_building):
        await repository.insert(sample_building)

        query, *args = mock_client.execute.await_args.args
        assert query.startswith("INSERT INTO buildings")
        assert args == [uuid.UUID(sample_building.id), "A", 100]

    @pytest.mark.asyncio
    async def test_empty_address_rejected(self, repository, mock_client):
        with pytest.raises(ValidationError):
            await repository.insert(Building.new(""))

        mock_client.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_check_violation_is_validation_error(self, repository, mock_client, sample_building):
        mock_client.execute.side_effect = asyncpg.exceptions.CheckViolationError("violates check")

        with pytest.raises(ValidationError):
            await repository.insert(sample_building)


class TestQuery:
    """Test building queries and result capping."""

    @pytest.mark.asyncio
    async def test_address_and_range_combined(self, repository, mock_client, stream_rows):
        stream_rows([])

        await repository.query(
            BuildingFilter(address="A", time_range=TimeRange(from_date=50, to_date=150)),
            lambda b: None,
        )

        query, *args = mock_client.iterate.call_args.args
        assert "WHERE address = $1 AND created_at >= $2 AND created_at <= $3" in query
        assert "ORDER BY created_at, id LIMIT $4" in query
        assert args == ["A", 50, 150, MAX_GETTING_OBJECTS + 1]

    @pytest.mark.asyncio
    async def test_open_ended_range(self, repository, mock_client, stream_rows):
        stream_rows([])

        await repository.query(BuildingFilter(time_range=TimeRange(from_date=200)), lambda b: None)

        query, *args = mock_client.iterate.call_args.args
        assert "created_at >= $1" in query
        assert "created_at <=" not in query
        assert args == [200, MAX_GETTING_OBJECTS + 1]

    @pytest.mark.asyncio
    async def test_no_filter_has_no_where(self, repository, mock_client, stream_rows):
        stream_rows([])

        await repository.query(BuildingFilter(), lambda b: None)

        assert "WHERE" not in mock_client.iterate.call_args.args[0]

    @pytest.mark.asyncio
    async def test_id_short_circuits(self, repository, mock_client, stream_rows, building_records):
        record = building_records(1)[0]
        stream_rows([record])
        seen = []

        result = await repository.query(
            BuildingFilter(id=str(record["id"]), address="elsewhere"), seen.append
        )

        query, *args = mock_client.iterate.call_args.args
        assert "address" not in query.split("WHERE", 1)[1]
        assert args[0] == record["id"]
        assert seen[0].id == str(record["id"])
        assert result.count == 1

    @pytest.mark.asyncio
    async def test_results_capped_with_more_flag(self, repository, mock_client, stream_rows, building_records):
        state = stream_rows(building_records(4))
        seen = []

        result = await repository.query(BuildingFilter(limit=3), seen.append)

        assert mock_client.iterate.call_args.args[-1] == 4
        assert len(seen) == 3
        assert result.count == 3
        assert result.has_more is True
        assert state["closed"] is True

    @pytest.mark.asyncio
    async def test_exact_limit_has_no_more(self, repository, stream_rows, building_records):
        stream_rows(building_records(3))

        result = await repository.query(BuildingFilter(limit=3), lambda b: None)

        assert result.count == 3
        assert result.has_more is False

    @pytest.mark.asyncio
    async def test_non_positive_limit_uses_maximum(self, repository, mock_client, stream_rows):
        stream_rows([])

        await repository.query(BuildingFilter(limit=0), lambda b: None)

        assert mock_client.iterate.call_args.args[-1] == MAX_GETTING_OBJECTS + 1

    @pytest.mark.asyncio
    async def test_rows_delivered_in_order(self, repository, stream_rows, building_records):
        records = building_records(5)
        stream_rows(records)
        seen = []

        await repository.query(BuildingFilter(), seen.append)

        assert [b.address for b in seen] == [r["address"] for r in records]

    @pytest.mark.asyncio
    async def test_visitor_error_propagates_unchanged(self, repository, stream_rows, building_records):
        state = stream_rows(building_records(5))
        failure = RuntimeError("consumer gave up")
        seen = []

        def visit(building):
            seen.append(building)
            if len(seen) == 2:
                raise failure

        with pytest.raises(RuntimeError) as exc_info:
            await repository.query(BuildingFilter(), visit)

        assert exc_info.value is failure
        assert len(seen) == 2
        assert state["closed"] is True

    @pytest.mark.asyncio
    async def test_storage_failure_mid_stream(self, repository, stream_rows, building_records):
        stream_rows(building_records(2), fail_with=asyncpg.exceptions.QueryCanceledError("canceled"))
        seen = []

        with pytest.raises(StorageError):
            await repository.query(BuildingFilter(), seen.append)

        assert len(seen) == 2
