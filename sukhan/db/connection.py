import duckdb
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from ..exceptions import StoreConnectionError

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"


def resolve_store_path(db_path: Union[str, Path]) -> Path:
    """Absolute path of a store file, or the DuckDB in-memory marker."""
    if str(db_path).lower() == MEMORY_PATH:
        return Path(MEMORY_PATH)
    return Path(db_path).expanduser().resolve()


class ConnectionHandler:
    """
    Owns the single DuckDB connection of a store. The connection is opened
    on first use and can be reopened after `close_connection`.
    """

    def __init__(self, db_path: Union[str, Path], read_only: bool = False):
        self.db_path_resolved = resolve_store_path(db_path)
        self.read_only = read_only
        self._connection: Optional[duckdb.DuckDBPyConnection] = None
        logger.debug(f"Store path resolved to {self.db_path_resolved}")

    @property
    def is_memory(self) -> bool:
        return str(self.db_path_resolved) == MEMORY_PATH

    def get_connection(self) -> duckdb.DuckDBPyConnection:
        """
        Return the open connection, connecting first if needed. File stores
        get their parent directory created.

        Raises:
            StoreConnectionError: If DuckDB cannot open the store.
        """
        if self._connection is not None:
            return self._connection

        if not self.is_memory and not self.read_only:
            self.db_path_resolved.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._connection = duckdb.connect(
                database=str(self.db_path_resolved), read_only=self.read_only
            )
        except duckdb.Error as e:
            raise StoreConnectionError(
                f"Failed to connect to store: {e}", original_exception=e
            ) from e
        mode = "read-only" if self.read_only else "read-write"
        logger.info(f"Opened store {self.db_path_resolved} ({mode}).")
        return self._connection

    @contextmanager
    def transaction(self) -> Iterator[duckdb.DuckDBPyConnection]:
        """
        Run the body on a cursor inside BEGIN/COMMIT. A DuckDB error rolls
        the transaction back and is re-raised.
        """
        conn = self.get_connection()
        try:
            with conn.cursor() as cursor:
                cursor.begin()
                yield cursor
                cursor.commit()
        except duckdb.Error:
            try:
                conn.rollback()
                logger.info("Transaction rolled back.")
            except duckdb.Error as rb_err:
                logger.error(f"Failed to roll back transaction: {rb_err}")
            raise

    def close_connection(self) -> None:
        if self._connection is None:
            return
        try:
            self._connection.close()
            logger.info(f"Closed store {self.db_path_resolved}.")
        except duckdb.Error as e:
            logger.error(f"Error closing store {self.db_path_resolved}: {e}")
        finally:
            self._connection = None
