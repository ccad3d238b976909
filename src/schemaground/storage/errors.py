"""
Exception classes for storage operations.
"""


class StorageError(Exception):
    """Base exception for storage operations, including IO failures."""

    pass


class DatabaseArtifactExistsError(StorageError):
    """Exception raised when creating a database whose directory already exists."""

    pass


class DatabaseArtifactNotFoundError(StorageError):
    """Exception raised when a database directory doesn't exist."""

    pass


class TableArtifactExistsError(StorageError):
    """Exception raised when creating a table whose data file already exists."""

    pass


class TableArtifactNotFoundError(StorageError):
    """Exception raised when the data file of a table doesn't exist."""

    pass


class CorruptDocumentError(StorageError):
    """Exception raised when a stored document can't be decoded."""

    pass
