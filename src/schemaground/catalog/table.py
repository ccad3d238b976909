"""Table definitions.

A :class:`Table` is an ordered sequence of :class:`Column` objects.
The order is the one in which columns were declared and is retained
by every alteration, it's the order used to generate DDL and
the order of the fields of stored rows.

Column names are compared case insensitively, so ``id`` and ``ID``
would be the same column and can't coexist in the same table.
"""

from collections.abc import Iterable, Mapping

from .column import Column
from .errors import (
    ColumnNotFoundError,
    DuplicateColumnError,
    InvalidTableDefinitionError,
    RowValidationError,
)
from .types import DEFAULT_TIMESTAMP_FORMAT, ConversionFailed, RowValue


class Table:
    """A table with its columns and primary key.

    The primary key is derived from the columns, it's the set of
    names of all the columns with a ``PRIMARY_KEY`` constraint and it's
    recomputed every time the columns change.
    """

    def __init__(
        self, name: str, columns: Iterable[Column], schema: str | None = None
    ) -> None:
        """
        :param name: The name of the table.
        :param columns: The columns of the table, in declaration order.
        :param schema: Optional schema the table belongs to.
        """
        if not name:
            raise InvalidTableDefinitionError("Table name cannot be empty")
        self.name = name
        self.schema = schema
        self._columns = list(columns)
        self._validate_structure()
        self._refresh_primary_keys()

    @property
    def columns(self) -> tuple[Column, ...]:
        return tuple(self._columns)

    @property
    def column_names(self) -> list[str]:
        return [col.name for col in self._columns]

    @property
    def primary_keys(self) -> frozenset[str]:
        return self._primary_keys

    def get_column(self, name: str) -> Column | None:
        """Look up a column by name, ignoring case."""
        index = self._index_of(name)
        return self._columns[index] if index is not None else None

    def has_column(self, name: str) -> bool:
        return self._index_of(name) is not None

    def add_column(self, column: Column) -> None:
        """Append a new column at the end of the table.

        :raises DuplicateColumnError: if a column with the same name exists.
        """
        if self.has_column(column.name):
            raise DuplicateColumnError(
                f"Column '{column.name}' already exists in table '{self.name}'"
            )
        self._columns.append(column)
        self._refresh_primary_keys()

    def drop_column(self, name: str) -> Column:
        """Remove a column from the table and return it.

        :raises ColumnNotFoundError: if the column doesn't exist.
        :raises InvalidTableDefinitionError: if it's the only column of the table.
        """
        index = self._require_index(name)
        if len(self._columns) == 1:
            raise InvalidTableDefinitionError(
                f"Cannot drop '{name}', table '{self.name}' must have at least one column"
            )
        column = self._columns.pop(index)
        self._refresh_primary_keys()
        return column

    def modify_column(self, old_name: str, column: Column) -> Column:
        """Replace a column with a new definition, retaining its position.

        The new definition can have a different name, in which
        case the column is renamed. Returns the replaced column.

        :raises ColumnNotFoundError: if ``old_name`` doesn't exist.
        :raises DuplicateColumnError: if the new name is used by another column.
        """
        index = self._require_index(old_name)
        other = self._index_of(column.name)
        if other is not None and other != index:
            raise DuplicateColumnError(
                f"Cannot rename column '{old_name}' to '{column.name}', "
                f"the name is already used in table '{self.name}'"
            )
        previous = self._columns[index]
        self._columns[index] = column
        self._refresh_primary_keys()
        return previous

    def validate_row(
        self, row: Mapping[str, RowValue], timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT
    ) -> None:
        """Check that a row satisfies the table columns.

        Primary key columns must have a value and every
        value provided must be convertible to the column type.

        :raises RowValidationError: if the row is not valid.
        """
        for col in self._columns:
            value = row.get(col.name)
            if col.is_primary_key and value is None:
                raise RowValidationError(
                    f"Primary key '{col.name}' of table '{self.name}' cannot be null"
                )
            result = col.convert(value, timestamp_format)
            if isinstance(result, ConversionFailed):
                raise RowValidationError(
                    f"Invalid value for column '{col.name}' of table '{self.name}': {result.reason}"
                )

    def generate_create_ddl(self) -> str:
        """Generate the CREATE TABLE statement for the table.

        The statement can be parsed back with
        :func:`schemaground.sql.parser.parse_create_table`.
        """
        qualified_name = f"{self.schema}.{self.name}" if self.schema else self.name
        columns = ",\n  ".join(col.to_ddl() for col in self._columns)
        return f"CREATE TABLE {qualified_name} (\n  {columns}\n)"

    def copy(self) -> "Table":
        """Independent copy of the table, columns are immutable so they are shared."""
        return Table(self.name, self._columns, schema=self.schema)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Table):
            return NotImplemented
        return (
            self.name == other.name
            and self.schema == other.schema
            and self._columns == other._columns
        )

    def __repr__(self) -> str:
        return f"Table({self.name!r}, columns={self.column_names}, schema={self.schema!r})"

    def _index_of(self, name: str) -> int | None:
        lowered = name.lower()
        for index, col in enumerate(self._columns):
            if col.name.lower() == lowered:
                return index
        return None

    def _require_index(self, name: str) -> int:
        index = self._index_of(name)
        if index is None:
            raise ColumnNotFoundError(
                f"Column '{name}' does not exist in table '{self.name}'"
            )
        return index

    def _refresh_primary_keys(self) -> None:
        self._primary_keys = frozenset(
            col.name for col in self._columns if col.is_primary_key
        )

    def _validate_structure(self) -> None:
        if not self._columns:
            raise InvalidTableDefinitionError(
                f"Table '{self.name}' must have at least one column"
            )
        seen = set()
        for col in self._columns:
            lowered = col.name.lower()
            if lowered in seen:
                raise DuplicateColumnError(
                    f"Duplicate column name '{col.name}' in table '{self.name}'"
                )
            seen.add(lowered)
