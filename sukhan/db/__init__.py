"""Persistent store package for sukhan.

This package provides the key-value storage layer with dependency injection
support. PersistentStore is the interface services depend on; DuckDBStore is
the durable implementation.
"""

from .store import DuckDBStore, PersistentStore

__all__ = ["DuckDBStore", "PersistentStore"]
