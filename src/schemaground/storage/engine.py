"""JSON document storage of tables.

Every table is stored as two documents, its metadata and its rows,
see :mod:`schemaground.storage.documents` for their shape and
:mod:`schemaground.storage.files` for where they live on disk.

Every operation reads the whole list of rows, changes it in memory
and writes it back replacing the previous content. This trades
throughput on big tables for simplicity. Only one writer is
expected for each database: within a process every mutating
operation holds an exclusive lock on the table it changes, but
nothing protects the files from other processes.

When the schema of a table is altered, the stored rows are migrated
to the new set of columns:

- Adding a column sets it to its default value on every row,
  or to ``null`` when it has no default value.
- Dropping a column removes its key from every row.
- Modifying a column converts the value of every row to the new
  column type, moving it under the new name if the column was renamed.
  When a value can't be converted, the default value of the
  new column is stored instead. A single row never fails the migration.

After the rows are rewritten, the new metadata is saved
and an entry is appended to the transaction log::

    [2024-01-01 10:00:00] ALTER_ADD_COLUMN products rows=3

If any of those writes fails, the documents of the table are
put back to what they were before the operation started.
A table whose documents can't be completed on creation is removed.
"""

import contextlib
import datetime
import threading
from collections.abc import Callable, Iterable, Iterator
from decimal import Context, Decimal, InvalidOperation

import pyarrow as pa
import structlog

from ..catalog import Column, ConversionFailed, Database, DataType, Table
from ..config import EngineSettings
from ..sql.commands import AddColumn, AlterCommand, DropColumn, ModifyColumn
from .documents import DatabaseDocument, DocumentSerializer, Row
from .errors import (
    DatabaseArtifactExistsError,
    DatabaseArtifactNotFoundError,
    StorageError,
    TableArtifactExistsError,
    TableArtifactNotFoundError,
)
from .files import FileSystemManager, list_database_names

log = structlog.get_logger(__name__)

RowPredicate = Callable[[Row], bool]
RowMutator = Callable[[Row], Row | None]


class StorageEngine:
    """Store the tables of a database as JSON documents."""

    def __init__(self, database_name: str, settings: EngineSettings | None = None) -> None:
        """
        :param database_name: The name of the database to store.
        :param settings: The engine settings, defaults are used when not provided.
        """
        self.database_name = database_name
        self.settings = settings or EngineSettings()
        self.files = FileSystemManager(database_name, self.settings.data_dir)
        self.serializer = DocumentSerializer(
            indent=self.settings.indent_documents,
            timestamp_format=self.settings.timestamp_format,
        )
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def __str__(self) -> str:
        return f"StorageEngine({self.database_name}, root={self.files.root})"

    # Database

    def exists(self) -> bool:
        return self.files.exists()

    def create_database(self) -> None:
        """Create the directories and the document of the database."""
        if self.files.exists():
            raise DatabaseArtifactExistsError(
                f"Database already exists: {self.database_name}"
            )
        self.files.initialize()
        document = DatabaseDocument(
            name=self.database_name, created=datetime.datetime.now()
        )
        self.files.write_text(
            self.files.database_metadata_file, self.serializer.dumps_database(document)
        )
        log.info("storage.database_created", database=self.database_name)

    def drop_database(self) -> None:
        """Delete the database with all its tables."""
        self.files.remove()
        log.info("storage.database_dropped", database=self.database_name)

    def load_database(self) -> Database:
        """Rebuild the in memory metadata of the database from its documents."""
        if not self.files.exists():
            raise DatabaseArtifactNotFoundError(
                f"Database does not exist: {self.database_name}"
            )
        # Only checked for validity, the name of the directory wins
        # so that backups can be loaded under their own name.
        self.serializer.loads_database(self.files.read_text(self.files.database_metadata_file))
        tables = {}
        for table_name in self.files.list_tables():
            tables[table_name] = self.load_table_metadata(table_name)
        return Database(self.database_name, tables)

    def list_tables(self) -> list[str]:
        return self.files.list_tables()

    def backup(self, backup_name: str) -> None:
        target = self.files.backup_database(backup_name)
        log.info("storage.database_backup", database=self.database_name, target=str(target))

    # Tables

    def create_table(self, table: Table) -> None:
        """Create the documents of a new table, with no rows."""
        with self._table_lock(table.name):
            if self.files.table_exists(table.name):
                raise TableArtifactExistsError(f"Table already exists: {table.name}")
            self.files.create_table_files(table.name)
            try:
                self.save_table_metadata(table)
                self.log_transaction("CREATE", table.name, 0)
            except StorageError:
                self.files.delete_table_files(table.name)
                raise
        log.info("storage.table_created", database=self.database_name, table=table.name)

    def drop_table(self, table_name: str) -> None:
        """Delete the documents of a table."""
        with self._table_lock(table_name):
            self._require_table(table_name)
            with self._restoring(table_name):
                self.files.delete_table_files(table_name)
                self.log_transaction("DROP", table_name, 0)
        log.info("storage.table_dropped", database=self.database_name, table=table_name)

    def table_exists(self, table_name: str) -> bool:
        return self.files.table_exists(table_name)

    def save_table_metadata(self, table: Table) -> None:
        self.files.write_text(
            self.files.table_metadata_file(table.name), self.serializer.dumps_table(table)
        )

    def load_table_metadata(self, table_name: str) -> Table:
        self._require_table(table_name)
        return self.serializer.loads_table(
            self.files.read_text(self.files.table_metadata_file(table_name))
        )

    # Rows

    def select_all(self, table_name: str) -> list[Row]:
        """All the rows of a table."""
        self._require_table(table_name)
        return self.serializer.loads_rows(
            self.files.read_text(self.files.table_data_file(table_name))
        )

    def insert(self, table_name: str, row: Row) -> None:
        self.batch_insert(table_name, [row])

    def batch_insert(self, table_name: str, rows: Iterable[Row]) -> int:
        """Append rows to a table, returns how many rows were inserted."""
        with self._table_lock(table_name):
            records = self.select_all(table_name)
            new_rows = [dict(row) for row in rows]
            records.extend(new_rows)
            self._save_rows(table_name, records)
        log.debug(
            "storage.rows_inserted", table=table_name, rows=len(new_rows)
        )
        return len(new_rows)

    def update(self, table_name: str, predicate: RowPredicate, mutator: RowMutator) -> int:
        """Change the rows that satisfy the predicate.

        The mutator can either change the row in place and return ``None``
        or return a new row that replaces it.
        Returns how many rows were updated.
        """
        with self._table_lock(table_name):
            records = self.select_all(table_name)
            updated = 0
            for index, row in enumerate(records):
                if predicate(row):
                    replacement = mutator(row)
                    if replacement is not None:
                        records[index] = dict(replacement)
                    updated += 1
            self._save_rows(table_name, records)
        log.debug("storage.rows_updated", table=table_name, rows=updated)
        return updated

    def delete(self, table_name: str, predicate: RowPredicate) -> int:
        """Remove the rows that satisfy the predicate, returns how many were removed."""
        with self._table_lock(table_name):
            records = self.select_all(table_name)
            kept = [row for row in records if not predicate(row)]
            self._save_rows(table_name, kept)
        deleted = len(records) - len(kept)
        log.debug("storage.rows_deleted", table=table_name, rows=deleted)
        return deleted

    def scan(self, table_name: str) -> pa.RecordBatch:
        """Read the rows of a table as a :class:`pyarrow.RecordBatch`.

        The batch has a column for each column of the table,
        typed after the column declaration. Values that can't be
        represented with the column type are read as nulls.
        """
        table = self.load_table_metadata(table_name)
        rows = self.select_all(table_name)
        schema = arrow_schema(table)
        data = {
            col.name: [
                self._arrow_value(_get_field(row, col.name), col, field.type)
                for row in rows
            ]
            for col, field in zip(table.columns, schema)
        }
        return pa.RecordBatch.from_pydict(data, schema=schema)

    # Schema migration

    def migrate(self, command: AlterCommand, table: Table) -> int:
        """Rewrite the stored rows after ``command`` altered ``table``.

        ``table`` is the already altered metadata, it's saved
        once the rows have been migrated. Returns the number of
        rewritten rows.
        """
        if isinstance(command, AddColumn):
            return self.add_column(table, command.column)
        elif isinstance(command, DropColumn):
            return self.drop_column(table, command.column_name)
        elif isinstance(command, ModifyColumn):
            return self.modify_column(table, command.old_column_name, command.column)
        raise TypeError(f"Unsupported alter command: {command!r}")

    def add_column(self, table: Table, column: Column) -> int:
        """Set the new column to its default value on every row."""

        def add(row: Row) -> Row:
            row[column.name] = column.default
            return row

        return self._rewrite_rows(table, AddColumn.operation, add)

    def drop_column(self, table: Table, column_name: str) -> int:
        """Remove the dropped column from every row."""

        def drop(row: Row) -> Row:
            key = _find_key(row, column_name)
            if key is not None:
                del row[key]
            return row

        return self._rewrite_rows(table, DropColumn.operation, drop)

    def modify_column(self, table: Table, old_column_name: str, column: Column) -> int:
        """Convert the values of the modified column on every row.

        The value keeps its position in the row even when the column is renamed,
        rows missing the column get it at the position where it's declared.
        """
        positions = {name.lower(): index for index, name in enumerate(table.column_names)}

        def modify(row: Row) -> Row:
            key = _find_key(row, old_column_name)
            value = self._migrated_value(row.get(key) if key else None, column)
            if key is None:
                items = [*row.items(), (column.name, value)]
                items.sort(key=lambda item: positions.get(item[0].lower(), len(positions)))
                return dict(items)
            return {
                (column.name if k == key else k): (value if k == key else v)
                for k, v in row.items()
            }

        return self._rewrite_rows(table, ModifyColumn.operation, modify)

    # Transaction log

    def log_transaction(self, operation: str, table_name: str, affected_rows: int) -> None:
        """Append an entry to the transaction log of the database."""
        timestamp = datetime.datetime.now().strftime(self.settings.timestamp_format)
        self.files.append_text(
            self.files.transaction_log_file,
            f"[{timestamp}] {operation} {table_name} rows={affected_rows}\n",
        )

    # Internals

    def _rewrite_rows(
        self, table: Table, operation: str, transform: Callable[[Row], Row]
    ) -> int:
        with self._table_lock(table.name):
            records = [transform(row) for row in self.select_all(table.name)]
            with self._restoring(table.name):
                self._save_rows(table.name, records)
                self.save_table_metadata(table)
                self.log_transaction(operation, table.name, len(records))
        log.info(
            "storage.rows_migrated",
            database=self.database_name,
            table=table.name,
            operation=operation,
            rows=len(records),
        )
        return len(records)

    def _migrated_value(self, value, column: Column):
        if value is None:
            return column.default
        result = column.convert(value, self.settings.timestamp_format)
        if isinstance(result, ConversionFailed):
            log.debug(
                "storage.conversion_fallback",
                column=column.name,
                value=value,
                reason=result.reason,
            )
            return column.default
        return result.value

    def _arrow_value(self, value, column: Column, arrow_type: pa.DataType):
        if value is None:
            return None
        if column.data_type in (DataType.VARCHAR, DataType.CHAR):
            return str(value)
        if column.data_type is DataType.DATE:
            if isinstance(value, datetime.date):
                return value
            try:
                return datetime.date.fromisoformat(str(value))
            except ValueError:
                return None

        result = column.convert(value, self.settings.timestamp_format)
        if isinstance(result, ConversionFailed):
            return None
        if column.data_type is DataType.DECIMAL:
            return _fit_decimal(result.value, arrow_type)
        return result.value

    def _save_rows(self, table_name: str, rows: list[Row]) -> None:
        self.files.write_text(
            self.files.table_data_file(table_name), self.serializer.dumps_rows(rows)
        )

    def _require_table(self, table_name: str) -> None:
        if not self.files.table_exists(table_name):
            raise TableArtifactNotFoundError(f"Table does not exist: {table_name}")

    @contextlib.contextmanager
    def _restoring(self, table_name: str) -> Iterator[None]:
        """Write back the current documents of a table if the block fails."""
        data_file = self.files.table_data_file(table_name)
        metadata_file = self.files.table_metadata_file(table_name)
        rows = self.files.read_text(data_file)
        metadata = self.files.read_text(metadata_file)
        try:
            yield
        except StorageError:
            self.files.write_text(data_file, rows)
            self.files.write_text(metadata_file, metadata)
            raise

    @contextlib.contextmanager
    def _table_lock(self, table_name: str) -> Iterator[None]:
        with self._locks_guard:
            lock = self._locks.setdefault(table_name, threading.Lock())
        with lock:
            yield


def arrow_schema(table: Table) -> pa.Schema:
    """The :class:`pyarrow.Schema` corresponding to the columns of a table."""
    return pa.schema([pa.field(col.name, arrow_type(col)) for col in table.columns])


def arrow_type(column: Column) -> pa.DataType:
    """The arrow type used to represent values of a column."""
    if column.data_type is DataType.INTEGER:
        return pa.int32()
    elif column.data_type is DataType.BIGINT:
        return pa.int64()
    elif column.data_type is DataType.DECIMAL:
        precision = column.precision if column.precision is not None else 38
        if column.scale is not None:
            scale = column.scale
        else:
            scale = 0 if column.precision is not None else 10
        if precision > 38:
            return pa.decimal256(precision, scale)
        return pa.decimal128(precision, scale)
    elif column.data_type is DataType.BOOLEAN:
        return pa.bool_()
    elif column.data_type is DataType.DATE:
        return pa.date32()
    elif column.data_type is DataType.TIMESTAMP:
        return pa.timestamp("us")
    else:
        return pa.string()


def list_databases(settings: EngineSettings | None = None) -> list[str]:
    """Names of all the databases stored in the data directory."""
    settings = settings or EngineSettings()
    return list_database_names(settings.data_dir)


def _find_key(row: Row, name: str) -> str | None:
    lowered = name.lower()
    for key in row:
        if key.lower() == lowered:
            return key
    return None


def _get_field(row: Row, name: str):
    key = _find_key(row, name)
    return row[key] if key is not None else None


def _fit_decimal(
    value: Decimal, arrow_type: pa.Decimal128Type | pa.Decimal256Type
) -> Decimal | None:
    # Values with more digits than the precision fail to quantize.
    context = Context(prec=arrow_type.precision)
    try:
        return value.quantize(Decimal(1).scaleb(-arrow_type.scale), context=context)
    except InvalidOperation:
        return None


__all__ = ("StorageEngine", "arrow_schema", "arrow_type", "list_databases")
