"""
Key-value persistence for sukhan.
Every service owns exactly one JSON record stored under a stable key.
"""

import duckdb
import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional, Union

from ..exceptions import MarshallingError, StoreOperationError
from .connection import ConnectionHandler
from .schema import KV_TABLE_NAME
from .schema_manager import SchemaManager

logger = logging.getLogger(__name__)


class PersistentStore(ABC):
    """
    Abstract durable key-value storage for JSON-serializable records.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """
        Return the decoded record stored under `key`, or None if absent.

        Raises:
            StorageError: If the record cannot be read or decoded.
        """
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """
        Replace the record stored under `key`.

        Raises:
            StorageError: If the value cannot be encoded or written.
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the record stored under `key`; a missing key is a no-op."""
        pass


class DuckDBStore(PersistentStore):
    """
    PersistentStore backed by a single DuckDB table of JSON text values.

    It coordinates the ConnectionHandler and SchemaManager and creates the
    schema lazily on first use. Intended for use as a context manager.
    """

    _GET_SQL = f"SELECT value FROM {KV_TABLE_NAME} WHERE key = $1;"
    _UPSERT_SQL = f"""
        INSERT INTO {KV_TABLE_NAME} (key, value, updated_at)
        VALUES ($1, $2, $3)
        ON CONFLICT (key) DO UPDATE SET
            value = EXCLUDED.value,
            updated_at = EXCLUDED.updated_at;
        """
    _DELETE_SQL = f"DELETE FROM {KV_TABLE_NAME} WHERE key = $1;"
    _KEYS_SQL = f"SELECT key FROM {KV_TABLE_NAME} ORDER BY key;"

    def __init__(self, db_path: Union[str, Path], read_only: bool = False):
        """
        Create a DuckDBStore backed by the given DuckDB path.

        Args:
            db_path (str | Path): Path to the database file. Use ':memory:' for a transient store.
            read_only (bool): Open the store without write access.
        """
        self._handler = ConnectionHandler(db_path=db_path, read_only=read_only)
        self._schema_manager = SchemaManager(self._handler)
        self._schema_ready = False
        logger.info(
            f"DuckDBStore initialized for store at: {self._handler.db_path_resolved}"  # noqa: E501
        )

    @property
    def db_path_resolved(self) -> Path:
        return self._handler.db_path_resolved

    @property
    def read_only(self) -> bool:
        return self._handler.read_only

    def get_connection(self) -> duckdb.DuckDBPyConnection:
        """
        Get the active DuckDB connection, creating the schema on first use.
        """
        conn = self._handler.get_connection()
        if not self._schema_ready:
            self.initialize_schema()
        return conn

    def close_connection(self) -> None:
        self._handler.close_connection()
        self._schema_ready = False

    def __enter__(self) -> "DuckDBStore":
        self.get_connection()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close_connection()

    def initialize_schema(self, force_recreate_tables: bool = False) -> None:
        """
        Ensure the key-value table exists; optionally drop and recreate it.
        """
        self._schema_manager.initialize_schema(
            force_recreate_tables=force_recreate_tables
        )
        self._schema_ready = True

    # --- Record Operations ---

    def get(self, key: str) -> Optional[Any]:
        conn = self.get_connection()
        try:
            row = conn.execute(self._GET_SQL, (key,)).fetchone()
        except duckdb.Error as e:
            logger.error(f"Error reading record '{key}': {e}")
            raise StoreOperationError(
                f"Failed to read record '{key}': {e}", original_exception=e
            ) from e

        if row is None:
            return None
        try:
            return json.loads(row[0])
        except json.JSONDecodeError as e:
            raise MarshallingError(
                f"Record '{key}' is not valid JSON.", original_exception=e
            ) from e

    def set(self, key: str, value: Any) -> None:
        try:
            payload = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise MarshallingError(
                f"Record '{key}' is not JSON-serializable.",
                original_exception=e,
            ) from e

        conn = self.get_connection()
        try:
            conn.execute(
                self._UPSERT_SQL, (key, payload, datetime.now(timezone.utc))
            )
            logger.debug(f"Stored record '{key}' ({len(payload)} bytes).")
        except duckdb.Error as e:
            logger.error(f"Error writing record '{key}': {e}")
            raise StoreOperationError(
                f"Failed to write record '{key}': {e}", original_exception=e
            ) from e

    def delete(self, key: str) -> None:
        conn = self.get_connection()
        try:
            conn.execute(self._DELETE_SQL, (key,))
            logger.debug(f"Deleted record '{key}'.")
        except duckdb.Error as e:
            logger.error(f"Error deleting record '{key}': {e}")
            raise StoreOperationError(
                f"Failed to delete record '{key}': {e}", original_exception=e
            ) from e

    def keys(self) -> List[str]:
        """Return all stored record keys in ascending order."""
        conn = self.get_connection()
        try:
            return [row[0] for row in conn.execute(self._KEYS_SQL).fetchall()]
        except duckdb.Error as e:
            logger.error(f"Error listing record keys: {e}")
            raise StoreOperationError(
                f"Failed to list record keys: {e}", original_exception=e
            ) from e
