import duckdb
import logging

from . import schema
from .connection import ConnectionHandler
from ..exceptions import SchemaInitializationError, StoreConnectionError

logger = logging.getLogger(__name__)


class SchemaManager:
    """Creates (and on request recreates) the key-value table."""

    def __init__(self, handler: ConnectionHandler):
        self._handler = handler

    def initialize_schema(self, force_recreate_tables: bool = False) -> None:
        """
        Create the `kv_store` table if it is missing. With
        `force_recreate_tables` the table is dropped first and every stored
        record is lost.

        A read-only file store is assumed to already hold the schema and is
        left untouched.

        Raises:
            StoreConnectionError: If recreation is requested on a read-only store.
            SchemaInitializationError: If the DDL fails.
        """
        if self._handler.read_only:
            if force_recreate_tables:
                raise StoreConnectionError(
                    "Cannot force_recreate_tables on a read-only store."
                )
            if not self._handler.is_memory:
                logger.debug("Read-only store; skipping schema creation.")
                return

        try:
            with self._handler.transaction() as cursor:
                if force_recreate_tables:
                    logger.warning(
                        f"Dropping {schema.KV_TABLE_NAME} in {self._handler.db_path_resolved}; "
                        "all stored records will be lost."
                    )
                    cursor.execute(f"DROP TABLE IF EXISTS {schema.KV_TABLE_NAME};")
                cursor.execute(schema.DB_SCHEMA_SQL)
        except duckdb.Error as e:
            logger.error(f"Schema setup failed for {self._handler.db_path_resolved}: {e}")
            raise SchemaInitializationError(
                f"Failed to initialize schema: {e}", original_exception=e
            ) from e
        logger.debug(f"Schema ready in {self._handler.db_path_resolved}.")
