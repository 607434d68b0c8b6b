"""
Defines the store schema using a SQL string constant.
This keeps the schema definition separate from the connection and
record operation logic.
"""

KV_TABLE_NAME = "kv_store"

DB_SCHEMA_SQL = f"""
    CREATE TABLE IF NOT EXISTS {KV_TABLE_NAME} (
        key VARCHAR PRIMARY KEY,
        value VARCHAR NOT NULL,
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL
    );
"""
