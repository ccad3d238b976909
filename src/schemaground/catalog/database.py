"""In memory container of the tables of a database."""

from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

from .errors import TableAlreadyExistsError, TableNotFoundError
from .table import Table

if TYPE_CHECKING:
    from ..sql.commands import AlterCommand


class Database:
    """A named set of tables, owns the tables it contains.

    Table names are unique within the database.
    """

    def __init__(self, name: str, tables: Mapping[str, Table] | None = None) -> None:
        """
        :param name: The name of the database.
        :param tables: Tables the database starts with, by name.
        """
        self.name = name
        self._tables: dict[str, Table] = dict(tables or {})

    @property
    def tables(self) -> Mapping[str, Table]:
        """Read only view of the tables, by name."""
        return MappingProxyType(self._tables)

    def get_table(self, name: str) -> Table | None:
        return self._tables.get(name)

    def require_table(self, name: str) -> Table:
        """Like :meth:`get_table` but raises :class:`TableNotFoundError` for missing tables."""
        table = self._tables.get(name)
        if table is None:
            raise TableNotFoundError(
                f"Table '{name}' does not exist in database '{self.name}'"
            )
        return table

    def table_exists(self, name: str) -> bool:
        return name in self._tables

    def add_table(self, table: Table) -> None:
        if table.name in self._tables:
            raise TableAlreadyExistsError(
                f"Table '{table.name}' already exists in database '{self.name}'"
            )
        self._tables[table.name] = table

    def drop_table(self, name: str) -> Table:
        table = self.require_table(name)
        del self._tables[name]
        return table

    def put_table(self, table: Table) -> None:
        """Store a table replacing any table with the same name.

        Used to restore a previous version of a table
        when persisting an alteration failed.
        """
        self._tables[table.name] = table

    def alter_table(self, command: "AlterCommand") -> Table:
        """Apply an alter command to one of the tables."""
        return command.execute(self)

    def __repr__(self) -> str:
        return f"Database({self.name!r}, tables={sorted(self._tables)})"
