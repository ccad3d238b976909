"""Layout of databases on disk and file access.

Each database is a directory under the data directory::

    data/
      shop/
        tables/
          products.data.json       # row documents of the table
        metadata/
          database.json            # database document
          products.meta.json       # table document
          transactions.log         # audit trail of the changes

The :class:`FileSystemManager` resolves those paths and performs the
reads and writes. Every write replaces the whole content of the file,
there is no locking or atomic replacement at this level.
"""

import shutil
from pathlib import Path

from .errors import (
    DatabaseArtifactNotFoundError,
    StorageError,
    TableArtifactExistsError,
)

DATA_SUFFIX = ".data.json"
METADATA_SUFFIX = ".meta.json"


class FileSystemManager:
    """Manage the files of a single database."""

    def __init__(self, database_name: str, data_dir: str | Path) -> None:
        """
        :param database_name: The name of the database.
        :param data_dir: The directory containing all the databases.
        """
        self.database_name = database_name
        self.root = Path(data_dir) / database_name

    @property
    def tables_dir(self) -> Path:
        return self.root / "tables"

    @property
    def metadata_dir(self) -> Path:
        return self.root / "metadata"

    @property
    def database_metadata_file(self) -> Path:
        return self.metadata_dir / "database.json"

    @property
    def transaction_log_file(self) -> Path:
        return self.metadata_dir / "transactions.log"

    def table_metadata_file(self, table_name: str) -> Path:
        return self.metadata_dir / f"{table_name}{METADATA_SUFFIX}"

    def table_data_file(self, table_name: str) -> Path:
        return self.tables_dir / f"{table_name}{DATA_SUFFIX}"

    def exists(self) -> bool:
        return self.root.is_dir()

    def initialize(self) -> None:
        """Create the directory structure of the database."""
        try:
            self.tables_dir.mkdir(parents=True, exist_ok=True)
            self.metadata_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create database directory {self.root}: {e}") from e

    def remove(self) -> None:
        """Delete the database directory with all its content."""
        if not self.exists():
            raise DatabaseArtifactNotFoundError(
                f"Database does not exist: {self.database_name}"
            )
        try:
            shutil.rmtree(self.root)
        except OSError as e:
            raise StorageError(f"Failed to delete database {self.database_name}: {e}") from e

    def table_exists(self, table_name: str) -> bool:
        return self.table_data_file(table_name).exists()

    def create_table_files(self, table_name: str) -> None:
        """Create an empty data file and metadata file for a table."""
        if self.table_exists(table_name):
            raise TableArtifactExistsError(f"Table already exists: {table_name}")
        self.write_text(self.table_data_file(table_name), "[]")
        self.write_text(self.table_metadata_file(table_name), "{}")

    def delete_table_files(self, table_name: str) -> None:
        try:
            self.table_data_file(table_name).unlink(missing_ok=True)
            self.table_metadata_file(table_name).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to delete table {table_name}: {e}") from e

    def list_tables(self) -> list[str]:
        """Names of the tables, derived from the data files."""
        if not self.tables_dir.is_dir():
            return []
        return sorted(
            path.name[: -len(DATA_SUFFIX)]
            for path in self.tables_dir.iterdir()
            if path.name.endswith(DATA_SUFFIX)
        )

    def read_text(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def write_text(self, path: Path, content: str) -> None:
        """Replace the content of the file, creating it if needed."""
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e

    def append_text(self, path: Path, content: str) -> None:
        try:
            with path.open("a", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            raise StorageError(f"Failed to append to {path}: {e}") from e

    def backup_database(self, backup_name: str) -> Path:
        """Copy the database directory to a sibling ``<database>_<backup_name>`` directory."""
        target = self.root.with_name(f"{self.root.name}_{backup_name}")
        try:
            shutil.copytree(self.root, target, dirs_exist_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to backup {self.database_name}: {e}") from e
        return target


def list_database_names(data_dir: str | Path) -> list[str]:
    """Names of the databases stored in the data directory."""
    data_dir = Path(data_dir)
    if not data_dir.is_dir():
        return []
    return sorted(
        path.name
        for path in data_dir.iterdir()
        if (path / "metadata" / "database.json").is_file()
    )
