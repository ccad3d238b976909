"""The catalog: metadata of databases, tables and columns.

The catalog is a pure in memory model, it knows nothing about
how tables are stored. It is constituted by:

* :class:`Column`, an immutable definition of a column with its
  type and constraints.
* :class:`Table`, an ordered list of columns with the derived
  set of primary key column names.
* :class:`Database`, the owner of a set of tables.

All the mutations are validated before being applied, so that
an invalid alteration always leaves the model unchanged and raises
a :class:`StructuralError`. Persisting the changes is the job of
:mod:`schemaground.storage`.

Building a table by hand looks like::

    users = Table("users", [
        Column("id", DataType.INTEGER, constraints={Constraint.PRIMARY_KEY}),
        Column("name", DataType.VARCHAR, length=64),
    ])
    users.add_column(Column("age", DataType.INTEGER, default="0"))
"""

from .column import Column, Constraint
from .database import Database
from .errors import (
    ColumnNotFoundError,
    DuplicateColumnError,
    InvalidColumnDefinitionError,
    InvalidCommandConstruction,
    InvalidTableDefinitionError,
    RowValidationError,
    StructuralError,
    TableAlreadyExistsError,
    TableNotFoundError,
)
from .table import Table
from .types import (
    ConversionFailed,
    ConversionResult,
    Converted,
    DataType,
    RowValue,
    convert_value,
)

__all__ = (
    "Column",
    "Constraint",
    "Database",
    "Table",
    "DataType",
    "RowValue",
    "Converted",
    "ConversionFailed",
    "ConversionResult",
    "convert_value",
    "StructuralError",
    "ColumnNotFoundError",
    "DuplicateColumnError",
    "InvalidColumnDefinitionError",
    "InvalidCommandConstruction",
    "InvalidTableDefinitionError",
    "RowValidationError",
    "TableAlreadyExistsError",
    "TableNotFoundError",
)
