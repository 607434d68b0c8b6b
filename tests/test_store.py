import pytest
from unittest.mock import MagicMock, PropertyMock, patch

import duckdb

from sukhan.db import DuckDBStore
from sukhan.db.schema import KV_TABLE_NAME
from sukhan.exceptions import (
    MarshallingError,
    SchemaInitializationError,
    StoreConnectionError,
    StoreOperationError,
)


def test_get_missing_key_returns_none(store: DuckDBStore):
    assert store.get("nothing-here") is None


def test_set_then_get_returns_decoded_value(store: DuckDBStore):
    record = {"completedLessons": ["lesson-1-1"], "nested": {"n": 1}}
    store.set("progress", record)
    assert store.get("progress") == record


def test_set_overwrites_existing_record(store: DuckDBStore):
    store.set("progress", {"a": 1})
    store.set("progress", {"a": 2})
    assert store.get("progress") == {"a": 2}
    assert store.keys() == ["progress"]


def test_delete_removes_record_and_is_idempotent(store: DuckDBStore):
    store.set("progress", [1, 2, 3])
    store.delete("progress")
    store.delete("progress")
    assert store.get("progress") is None


def test_non_ascii_values_survive(store: DuckDBStore):
    store.set("word", {"tajik": "Салом"})
    assert store.get("word") == {"tajik": "Салом"}


def test_records_persist_across_connections(db_path_file):
    with DuckDBStore(db_path_file) as first:
        first.set("progress", {"completedLessons": ["lesson-1-1"]})

    with DuckDBStore(db_path_file) as second:
        assert second.get("progress") == {"completedLessons": ["lesson-1-1"]}


def test_malformed_json_raises_marshalling_error(memory_store: DuckDBStore):
    conn = memory_store.get_connection()
    conn.execute(
        f"INSERT INTO {KV_TABLE_NAME} VALUES (?, ?, now())",
        ("progress", "{not json"),
    )
    with pytest.raises(MarshallingError, match="not valid JSON"):
        memory_store.get("progress")


def test_unserializable_value_raises_marshalling_error(memory_store: DuckDBStore):
    with pytest.raises(MarshallingError, match="not JSON-serializable"):
        memory_store.set("bad", {"value": object()})


def test_force_recreate_drops_records(memory_store: DuckDBStore):
    memory_store.set("progress", {"a": 1})
    memory_store.initialize_schema(force_recreate_tables=True)
    assert memory_store.get("progress") is None


@patch("sukhan.db.connection.duckdb.connect")
def test_connection_failure_raises_custom_error(mock_connect):
    mock_connect.side_effect = duckdb.Error("Connection failed")
    store_inst = DuckDBStore(":memory:")

    with pytest.raises(StoreConnectionError, match="Failed to connect to store"):
        store_inst.get("progress")


@patch("sukhan.db.connection.duckdb.connect")
def test_schema_failure_raises_custom_error(mock_connect):
    mock_cursor = MagicMock()
    mock_cursor.execute.side_effect = duckdb.Error("Schema creation failed")
    mock_connection = MagicMock()
    mock_connection.cursor.return_value.__enter__.return_value = mock_cursor
    type(mock_connection).closed = PropertyMock(return_value=False)
    mock_connect.return_value = mock_connection

    store_inst = DuckDBStore(":memory:")
    with pytest.raises(SchemaInitializationError, match="Failed to initialize schema"):
        store_inst.get_connection()
    mock_connection.rollback.assert_called_once()


@patch("sukhan.db.connection.duckdb.connect")
def test_statement_failure_raises_operation_error(mock_connect):
    mock_connection = MagicMock()
    mock_connection.execute.side_effect = duckdb.Error("disk I/O error")
    mock_connect.return_value = mock_connection

    store_inst = DuckDBStore(":memory:")
    with pytest.raises(StoreOperationError, match="Failed to read record 'progress'"):
        store_inst.get("progress")
    with pytest.raises(StoreOperationError, match="Failed to write record 'progress'"):
        store_inst.set("progress", {})
    with pytest.raises(StoreOperationError, match="Failed to delete record 'progress'"):
        store_inst.delete("progress")


def test_read_only_store_cannot_force_recreate(db_path_file):
    with DuckDBStore(db_path_file) as writable:
        writable.set("progress", {})

    read_only = DuckDBStore(db_path_file, read_only=True)
    try:
        assert read_only.get("progress") == {}
        with pytest.raises(StoreConnectionError, match="read-only"):
            read_only.initialize_schema(force_recreate_tables=True)
    finally:
        read_only.close_connection()
