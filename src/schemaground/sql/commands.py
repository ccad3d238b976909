"""Commands produced by parsing ALTER TABLE and DROP TABLE statements.

An :data:`AlterCommand` is one of :class:`AddColumn`, :class:`DropColumn`
or :class:`ModifyColumn`. Each kind is a separate class that only
holds the fields relevant to it, so a command built to add a column
can't be confused with one dropping a column.

Executing a command only changes the in memory metadata of a
:class:`schemaground.catalog.Database`, the stored rows are migrated
by the storage engine once the command succeeded::

    command = AddColumn("users", Column("age", DataType.INTEGER))
    table = command.execute(database)
    storage.migrate(command, table)
"""

from dataclasses import dataclass
from typing import ClassVar

from ..catalog import (
    Column,
    ColumnNotFoundError,
    Database,
    DuplicateColumnError,
    InvalidCommandConstruction,
    Table,
)


def _check_name(value: object, what: str) -> None:
    if not isinstance(value, str) or not value:
        raise InvalidCommandConstruction(f"{what} must be a non empty string, got: {value!r}")


def _check_column(value: object) -> None:
    if not isinstance(value, Column):
        raise InvalidCommandConstruction(f"Expected a Column, got: {value!r}")


@dataclass(frozen=True)
class AddColumn:
    """ALTER TABLE ... ADD COLUMN"""

    operation: ClassVar[str] = "ALTER_ADD_COLUMN"

    table_name: str
    column: Column

    def __post_init__(self) -> None:
        _check_name(self.table_name, "Table name")
        _check_column(self.column)

    def execute(self, database: Database) -> Table:
        """Add the column to the table and return the altered table."""
        table = database.require_table(self.table_name)
        if table.has_column(self.column.name):
            raise DuplicateColumnError(
                f"Column '{self.column.name}' already exists in table '{self.table_name}'"
            )
        table.add_column(self.column)
        return table


@dataclass(frozen=True)
class DropColumn:
    """ALTER TABLE ... DROP COLUMN"""

    operation: ClassVar[str] = "ALTER_DROP_COLUMN"

    table_name: str
    column_name: str

    def __post_init__(self) -> None:
        _check_name(self.table_name, "Table name")
        _check_name(self.column_name, "Column name")

    def execute(self, database: Database) -> Table:
        """Remove the column from the table and return the altered table."""
        table = database.require_table(self.table_name)
        if not table.has_column(self.column_name):
            raise ColumnNotFoundError(
                f"Column '{self.column_name}' does not exist in table '{self.table_name}'"
            )
        table.drop_column(self.column_name)
        return table


@dataclass(frozen=True)
class ModifyColumn:
    """ALTER TABLE ... MODIFY COLUMN

    The new definition replaces the old one, if its name differs
    from ``old_column_name`` the column is renamed too.
    """

    operation: ClassVar[str] = "ALTER_MODIFY_COLUMN"

    table_name: str
    old_column_name: str
    column: Column

    def __post_init__(self) -> None:
        _check_name(self.table_name, "Table name")
        _check_name(self.old_column_name, "Column name")
        _check_column(self.column)

    @property
    def is_rename(self) -> bool:
        return self.old_column_name.lower() != self.column.name.lower()

    def execute(self, database: Database) -> Table:
        """Replace the column definition and return the altered table."""
        table = database.require_table(self.table_name)
        if not table.has_column(self.old_column_name):
            raise ColumnNotFoundError(
                f"Column '{self.old_column_name}' does not exist in table '{self.table_name}'"
            )
        if self.is_rename and table.has_column(self.column.name):
            raise DuplicateColumnError(
                f"Cannot rename column '{self.old_column_name}' to '{self.column.name}' "
                "as the target name already exists"
            )
        table.modify_column(self.old_column_name, self.column)
        return table


AlterCommand = AddColumn | DropColumn | ModifyColumn


@dataclass(frozen=True)
class DropTable:
    """DROP TABLE"""

    operation: ClassVar[str] = "DROP"

    table_name: str

    def __post_init__(self) -> None:
        _check_name(self.table_name, "Table name")

    def execute(self, database: Database) -> Table:
        """Remove the table from the database and return it."""
        return database.drop_table(self.table_name)
