"""Execution of DDL statements against stored databases.

The :class:`DatabaseEngine` ties together the three components of
SchemaPyground: it parses statements with :mod:`schemaground.sql`,
applies them to the in memory :mod:`schemaground.catalog` and
asks the :mod:`schemaground.storage` to persist the change::

    engine = DatabaseEngine(EngineSettings(data_dir="data"))
    engine.create_database("shop")
    engine.execute_ddl("shop", "CREATE TABLE products (id INT PRIMARY KEY, name VARCHAR(64))")
    engine.execute_ddl("shop", "ALTER TABLE products ADD COLUMN price DECIMAL(10,2) DEFAULT 0")
    print(engine.show_database_schema("shop"))

Invalid statements and alterations are rejected before anything is
written. When writing fails, the in memory metadata is restored to
what it was before the statement, so that it keeps matching what is
on disk.

All databases found in the data directory are loaded when the
engine is created.
"""

from collections.abc import Iterable

import structlog

from .catalog import Database, Table
from .config import EngineSettings
from .sql import AddColumn, AlterCommand, DropColumn, DropTable, ModifyColumn, Parser
from .sql.parser import Statement
from .storage import StorageEngine, StorageError, list_databases
from .storage.documents import Row

log = structlog.get_logger(__name__)


class DatabaseEngine:
    """Manage a set of databases and execute DDL on them."""

    def __init__(self, settings: EngineSettings | None = None) -> None:
        """
        :param settings: The engine settings, defaults are used when not provided.
        """
        self.settings = settings or EngineSettings()
        self._databases: dict[str, Database] = {}
        self._storages: dict[str, StorageEngine] = {}
        self._load_databases()

    def storage(self, db_name: str) -> StorageEngine:
        """The storage engine of a database."""
        storage = self._storages.get(db_name)
        if storage is None:
            storage = self._storages[db_name] = StorageEngine(db_name, self.settings)
        return storage

    def create_database(self, db_name: str) -> Database:
        if db_name in self._databases:
            raise EngineError(f"Database already exists: {db_name}")

        database = self._databases[db_name] = Database(db_name)
        try:
            self.storage(db_name).create_database()
        except StorageError:
            del self._databases[db_name]
            raise
        log.info("engine.database_created", database=db_name)
        return database

    def drop_database(self, db_name: str) -> None:
        self.storage(db_name).drop_database()
        self._databases.pop(db_name, None)
        self._storages.pop(db_name, None)
        log.info("engine.database_dropped", database=db_name)

    def database_exists(self, db_name: str) -> bool:
        return db_name in self._databases

    def list_databases(self) -> list[str]:
        return sorted(self._databases)

    def get_database(self, db_name: str) -> Database:
        try:
            return self._databases[db_name]
        except KeyError:
            raise EngineError(f"Database does not exist: {db_name}") from None

    def execute_ddl(self, db_name: str, sql: str) -> Statement:
        """Parse and execute a DDL statement.

        Returns the parsed statement, a :class:`schemaground.catalog.Table`
        for CREATE TABLE or a command for ALTER and DROP TABLE.
        """
        database = self.get_database(db_name)
        statement = Parser(sql).parse()
        storage = self.storage(db_name)

        if isinstance(statement, Table):
            self._create_table(database, storage, statement)
        elif isinstance(statement, DropTable):
            self._drop_table(database, storage, statement)
        elif isinstance(statement, (AddColumn, DropColumn, ModifyColumn)):
            self._alter_table(database, storage, statement)
        else:
            raise EngineError(f"Unsupported statement: {statement!r}")

        log.info(
            "engine.ddl_executed",
            database=db_name,
            statement=type(statement).__name__,
        )
        return statement

    def insert_rows(self, db_name: str, table_name: str, rows: Iterable[Row]) -> int:
        """Check rows against the columns of a table and store them.

        No row is stored unless all of them are valid.
        Returns how many rows were inserted.

        :raises schemaground.catalog.RowValidationError: if a row is not valid.
        """
        table = self.get_database(db_name).require_table(table_name)
        rows = list(rows)
        for row in rows:
            table.validate_row(row, self.settings.timestamp_format)
        return self.storage(db_name).batch_insert(table.name, rows)

    def show_database_schema(self, db_name: str) -> str:
        """Describe the tables of a database and their columns.

        Will produce a text like::

            Database: shop
              Table: products
                Column: id INTEGER NOT NULL
                Column: name VARCHAR(64) NULL
        """
        database = self.get_database(db_name)
        lines = [f"Database: {database.name}"]
        for table in database.tables.values():
            lines.append(f"  Table: {table.name}")
            for column in table.columns:
                nullability = "NULL" if column.is_nullable else "NOT NULL"
                lines.append(f"    Column: {column.name} {column.type_ddl()} {nullability}")
        return "\n".join(lines)

    def _create_table(self, database: Database, storage: StorageEngine, table: Table) -> None:
        database.add_table(table)
        try:
            storage.create_table(table)
        except StorageError:
            database.drop_table(table.name)
            raise

    def _drop_table(
        self, database: Database, storage: StorageEngine, command: DropTable
    ) -> None:
        table = command.execute(database)
        try:
            storage.drop_table(command.table_name)
        except StorageError:
            database.put_table(table)
            raise

    def _alter_table(
        self, database: Database, storage: StorageEngine, command: AlterCommand
    ) -> None:
        snapshot = database.require_table(command.table_name).copy()
        table = database.alter_table(command)
        try:
            storage.migrate(command, table)
        except StorageError:
            database.put_table(snapshot)
            raise

    def _load_databases(self) -> None:
        for db_name in list_databases(self.settings):
            try:
                self._databases[db_name] = self.storage(db_name).load_database()
            except StorageError as e:
                log.warning("engine.database_load_failed", database=db_name, error=str(e))
                continue
            log.debug("engine.database_loaded", database=db_name)


class EngineError(Exception):
    """Exception raised when an operation refers to a database in an invalid state."""

    pass
