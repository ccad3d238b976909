"""Persistence of databases on the local filesystem.

The storage is constituted by three layers:

1. :mod:`schemaground.storage.files` knows where each file lives
   and how to read and write it.
2. :mod:`schemaground.storage.documents` knows how tables, rows and
   databases are represented as JSON documents.
3. :class:`StorageEngine` builds on the two to provide the operations
   on tables: creating and dropping them, reading and writing their
   rows and migrating the rows when the schema of a table changes.

A storage engine serves a single database::

    storage = StorageEngine("shop", EngineSettings(data_dir="data"))
    storage.create_database()
    storage.create_table(parse_create_table("CREATE TABLE products (id INT)"))
    storage.insert("products", {"id": 1})
    print(tabulate(storage.scan("products")))

The storage engine doesn't validate rows against the schema of the
table, rows are stored as they are provided. Every failure is reported
as a :class:`StorageError`.
"""

from .documents import DatabaseDocument, DocumentSerializer, Row
from .engine import StorageEngine, arrow_schema, arrow_type, list_databases
from .errors import (
    CorruptDocumentError,
    DatabaseArtifactExistsError,
    DatabaseArtifactNotFoundError,
    StorageError,
    TableArtifactExistsError,
    TableArtifactNotFoundError,
)
from .files import FileSystemManager

__all__ = (
    "StorageEngine",
    "FileSystemManager",
    "DocumentSerializer",
    "DatabaseDocument",
    "Row",
    "arrow_schema",
    "arrow_type",
    "list_databases",
    "StorageError",
    "CorruptDocumentError",
    "DatabaseArtifactExistsError",
    "DatabaseArtifactNotFoundError",
    "TableArtifactExistsError",
    "TableArtifactNotFoundError",
)
