from pathlib import Path
from typing import Optional


class StorageError(Exception):
    """Base exception for persistent store errors."""

    def __init__(
        self, message: str, original_exception: Optional[Exception] = None
    ):
        super().__init__(message)
        self.original_exception = original_exception


class StoreConnectionError(StorageError):
    """Raised for errors connecting to the store."""

    pass


class SchemaInitializationError(StorageError):
    """Raised for errors during schema setup."""

    pass


class StoreOperationError(StorageError):
    """Raised when reading, writing or deleting a record fails."""

    pass


class MarshallingError(StorageError):
    """Indicates an error converting a record to or from its JSON form."""

    pass


class CurriculumError(Exception):
    """Raised when curriculum or dictionary reference data cannot be loaded."""

    def __init__(self, file_path: Path, message: str):
        self.file_path = file_path
        self.message = message
        super().__init__(f"{file_path}: {message}")


class CheckpointNotFoundError(Exception):
    """Raised when a unit or checkpoint id does not exist in the curriculum."""

    pass


class CheckpointLockedError(Exception):
    """Raised when a study session is requested for a locked checkpoint."""

    pass
