"""Tests for EntityStore."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from pooladmin.db.errors import ConnectionError, ValidationError
from pooladmin.entities.models import QueryOptions, Relation, filters_to_conditions
from pooladmin.entities.store import EntityStore
from pooladmin.exceptions import BackendError, RecordNotFoundError, UnknownEntityError
from pooladmin.remote.models import FilterOp
from pooladmin.remote.stores.inmemory import InMemoryRemoteStore


@pytest.fixture
def remote() -> InMemoryRemoteStore:
    return InMemoryRemoteStore(
        {
            "clients": [
                {"name": "Alberca Sol", "city": "Monterrey"},
                {"name": "Club Delfín", "city": "Saltillo"},
                {"name": "Hotel Brisa", "city": "Monterrey"},
            ],
            "orders": [
                {"client_id": 1, "status": "pending"},
                {"client_id": 1, "status": "shipped"},
                {"client_id": 2, "status": "pending"},
            ],
        }
    )


@pytest.fixture
def store(remote) -> EntityStore:
    return EntityStore(remote, ["clients", "orders", "products"])


class TestValidateEntity:
    def test_unknown_entity_message(self, store) -> None:
        with pytest.raises(UnknownEntityError) as exc_info:
            store.validate_entity("pools")

        assert str(exc_info.value) == (
            "Unknown entity: pools. Valid entities: clients, orders, products"
        )

    @pytest.mark.asyncio
    async def test_operations_reject_unknown_entity(self, store) -> None:
        with pytest.raises(BackendError):
            await store.list("pools")
        with pytest.raises(BackendError):
            await store.create("pools", {"name": "x"})

    def test_known_entities(self, store) -> None:
        assert store.known_entities == ("clients", "orders", "products")


class TestRead:
    """Tests for list, get_by_id and get_related."""

    @pytest.mark.asyncio
    async def test_list_all(self, store) -> None:
        assert len(await store.list("clients")) == 3

    @pytest.mark.asyncio
    async def test_list_with_filter(self, store) -> None:
        rows = await store.list("clients", {"city": "Monterrey"})
        assert {r["name"] for r in rows} == {"Alberca Sol", "Hotel Brisa"}

    @pytest.mark.asyncio
    async def test_list_filter_matches_substring_ignoring_case(self, store) -> None:
        rows = await store.list("clients", {"name": "BRISA"})
        assert [r["name"] for r in rows] == ["Hotel Brisa"]

    @pytest.mark.asyncio
    async def test_list_blank_filters_ignored(self, store) -> None:
        rows = await store.list("clients", {"name": "", "city": None})
        assert len(rows) == 3

    @pytest.mark.asyncio
    async def test_list_non_string_filter_is_exact(self, store) -> None:
        rows = await store.list("orders", {"client_id": 1})
        assert [r["status"] for r in rows] == ["pending", "shipped"]

    @pytest.mark.asyncio
    async def test_list_with_list_filter(self, store) -> None:
        rows = await store.list("clients", {"id": [1, 3]})
        assert [r["id"] for r in rows] == [1, 3]

    @pytest.mark.asyncio
    async def test_list_sorted_and_paginated(self, store) -> None:
        options = QueryOptions(sort_by="name", sort_order="desc", limit=2, offset=1)

        rows = await store.list("clients", options=options)

        assert [r["name"] for r in rows] == ["Club Delfín", "Alberca Sol"]

    @pytest.mark.asyncio
    async def test_get_by_id(self, store) -> None:
        record = await store.get_by_id("clients", 2)
        assert record["name"] == "Club Delfín"

    @pytest.mark.asyncio
    async def test_get_by_id_missing(self, store) -> None:
        assert await store.get_by_id("clients", 99) is None

    @pytest.mark.asyncio
    async def test_get_related(self, store) -> None:
        orders = await store.get_related("clients", 1, "orders", "client_id")
        assert [o["status"] for o in orders] == ["pending", "shipped"]


class TestWrite:
    """Tests for create, update and delete."""

    @pytest.mark.asyncio
    async def test_create_assigns_id(self, store) -> None:
        record = await store.create("clients", {"name": "Spa Luna"})

        assert record["id"] == 4
        assert record["name"] == "Spa Luna"
        assert "created_at" in record

    @pytest.mark.asyncio
    async def test_update_returns_post_update_record(self, store) -> None:
        record = await store.update("orders", 1, {"status": "shipped"})

        assert record["status"] == "shipped"
        assert record["client_id"] == 1

    @pytest.mark.asyncio
    async def test_update_never_changes_id(self, store) -> None:
        record = await store.update("orders", 1, {"id": 50, "status": "shipped"})
        assert record["id"] == 1

    @pytest.mark.asyncio
    async def test_update_missing_record(self, store) -> None:
        with pytest.raises(RecordNotFoundError):
            await store.update("orders", 99, {"status": "x"})

    @pytest.mark.asyncio
    async def test_delete(self, store) -> None:
        assert await store.delete("clients", 1) is True
        assert await store.get_by_id("clients", 1) is None

    @pytest.mark.asyncio
    async def test_delete_missing_record(self, store) -> None:
        with pytest.raises(RecordNotFoundError) as exc_info:
            await store.delete("clients", 99)
        assert str(exc_info.value) == "clients with id 99 not found"


class TestBulk:
    """Tests for bulk operations."""

    @pytest.mark.asyncio
    async def test_bulk_create(self, store) -> None:
        rows = await store.bulk_create("products", [{"name": "Cloro"}, {"name": "pH+"}])
        assert [r["id"] for r in rows] == [1, 2]

    @pytest.mark.asyncio
    async def test_bulk_create_empty(self, store, remote) -> None:
        remote.insert = AsyncMock()
        assert await store.bulk_create("products", []) == []
        remote.insert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_bulk_update(self, store) -> None:
        rows = await store.bulk_update("orders", [(1, {"status": "a"}), (3, {"status": "b"})])
        assert [r["status"] for r in rows] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_bulk_update_stops_at_first_failure(self, store) -> None:
        with pytest.raises(RecordNotFoundError):
            await store.bulk_update("orders", [(1, {"status": "a"}), (99, {"status": "b"})])
        assert (await store.get_by_id("orders", 1))["status"] == "a"

    @pytest.mark.asyncio
    async def test_bulk_delete_counts(self, store) -> None:
        assert await store.bulk_delete("clients", [1, 2, 99]) == 2
        assert len(await store.list("clients")) == 1

    @pytest.mark.asyncio
    async def test_bulk_delete_records_returns_removed_rows(self, store) -> None:
        rows = await store.bulk_delete_records("clients", [1, 99])
        assert [r["name"] for r in rows] == ["Alberca Sol"]

    @pytest.mark.asyncio
    async def test_bulk_delete_records_empty(self, store, remote) -> None:
        remote.delete = AsyncMock()
        assert await store.bulk_delete_records("clients", []) == []
        remote.delete.assert_not_awaited()


class TestRelations:
    """Tests for get_with_relations."""

    @pytest.mark.asyncio
    async def test_one_to_many(self, store) -> None:
        relations = {"orders": Relation(entity="orders", foreign_key="client_id")}

        rows = await store.get_with_relations("clients", relations)

        by_name = {r["name"]: [o["status"] for o in r["orders"]] for r in rows}
        assert by_name == {
            "Alberca Sol": ["pending", "shipped"],
            "Club Delfín": ["pending"],
            "Hotel Brisa": [],
        }

    @pytest.mark.asyncio
    async def test_one_to_one(self, store) -> None:
        relations = {
            "client": Relation(entity="clients", foreign_key="client_id", kind="one")
        }

        rows = await store.get_with_relations("orders", relations)

        assert [r["client"]["name"] for r in rows] == [
            "Alberca Sol",
            "Alberca Sol",
            "Club Delfín",
        ]

    @pytest.mark.asyncio
    async def test_one_to_one_missing_reference(self, store, remote) -> None:
        await remote.insert("orders", [{"client_id": None, "status": "draft"}])
        relations = {
            "client": Relation(entity="clients", foreign_key="client_id", kind="one")
        }

        rows = await store.get_with_relations("orders", relations, {"status": "draft"})

        assert [r["client"] for r in rows] == [None]

    @pytest.mark.asyncio
    async def test_one_query_per_relation(self, store, remote) -> None:
        remote.select = AsyncMock(
            side_effect=[
                [{"id": 1}, {"id": 2}],
                [{"id": 10, "client_id": 2}],
            ]
        )
        relations = {"orders": Relation(entity="orders", foreign_key="client_id")}

        rows = await store.get_with_relations("clients", relations)

        assert remote.select.await_count == 2
        assert [r["orders"] for r in rows] == [[], [{"id": 10, "client_id": 2}]]

    @pytest.mark.asyncio
    async def test_unknown_related_entity(self, store) -> None:
        relations = {"pools": Relation(entity="pools", foreign_key="client_id")}

        with pytest.raises(UnknownEntityError):
            await store.get_with_relations("clients", relations)


class TestStats:
    """Tests for get_stats."""

    @pytest.mark.asyncio
    async def test_counts_recent_and_last_updated(self, store, remote) -> None:
        await remote.insert(
            "products",
            [
                {
                    "name": "Cloro",
                    "created_at": "2020-01-01T00:00:00+00:00",
                    "updated_at": "2020-02-01T00:00:00+00:00",
                },
                {"name": "Alguicida"},
            ],
        )

        stats = await store.get_stats("products")

        assert stats.total == 2
        assert stats.recent == 1
        assert stats.last_updated > datetime(2020, 2, 1, tzinfo=UTC)

    @pytest.mark.asyncio
    async def test_recent_window(self, store, remote) -> None:
        old = (datetime.now(UTC) - timedelta(days=10)).isoformat()
        await remote.insert("products", [{"name": "Cloro", "created_at": old}])

        assert (await store.get_stats("products", recent_days=30)).recent == 1
        assert (await store.get_stats("products", recent_days=7)).recent == 0

    @pytest.mark.asyncio
    async def test_empty_collection(self, store) -> None:
        stats = await store.get_stats("products")

        assert stats.total == 0
        assert stats.recent == 0
        assert stats.last_updated is None


class TestErrors:
    """Store failures surface as BackendError with the remote message."""

    @pytest.mark.asyncio
    async def test_store_error_message_verbatim(self, store, remote) -> None:
        remote.update = AsyncMock(side_effect=ConnectionError("conn refused"))

        with pytest.raises(BackendError) as exc_info:
            await store.update("orders", 1, {"status": "x"})

        assert str(exc_info.value) == "conn refused"
        assert exc_info.value.entity == "orders"
        assert exc_info.value.operation == "update"
        assert isinstance(exc_info.value.cause, ConnectionError)

    @pytest.mark.asyncio
    async def test_validation_error(self, store, remote) -> None:
        remote.insert = AsyncMock(side_effect=ValidationError('column "nme" does not exist'))

        with pytest.raises(BackendError, match="nme"):
            await store.create("clients", {"nme": "x"})

    @pytest.mark.asyncio
    async def test_unexpected_error_wrapped(self, store, remote) -> None:
        remote.select = AsyncMock(side_effect=RuntimeError("socket closed"))

        with pytest.raises(BackendError, match="socket closed"):
            await store.list("clients")


class TestFiltersToConditions:
    def test_string_is_case_insensitive_contains(self) -> None:
        [condition] = filters_to_conditions({"status": "Pend"})
        assert condition.op == FilterOp.ILIKE
        assert condition.value == "Pend"

    def test_non_string_scalar_is_equality(self) -> None:
        [condition] = filters_to_conditions({"client_id": 1})
        assert condition.op == FilterOp.EQ

    def test_collection_is_membership(self) -> None:
        [condition] = filters_to_conditions({"id": (1, 2)})
        assert condition.op == FilterOp.IN
        assert condition.value == [1, 2]

    def test_empty_values_skipped(self) -> None:
        assert filters_to_conditions({"name": "", "city": None}) == []

    def test_none_filters(self) -> None:
        assert filters_to_conditions(None) == []
