"""Shape of the stored documents and their serialization.

Three kinds of documents are stored, all of them as JSON:

* The database document, with the name of the database,
  when it was created and the version of the storage format.
* One table document for each table, mirroring
  :class:`schemaground.catalog.Table` and its columns::

    {
      "name": "products",
      "schema": null,
      "columns": [
        {"name": "id", "type": "INTEGER", "length": null, "precision": null,
         "scale": null, "constraints": ["PRIMARY_KEY"], "default": null}
      ],
      "primary_keys": ["id"]
    }

* One list of row documents for each table, each row
  being an object mapping column names to values.

Table and database documents are validated by pydantic models
when loaded, rows are schema-less and only need to be JSON objects.
Values that JSON can't represent are stored as text: decimals keep
all their digits and timestamps use the configured timestamp format.
"""

import datetime
import json
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..catalog import Column, Constraint, DataType, RowValue, StructuralError, Table
from ..catalog.types import DEFAULT_TIMESTAMP_FORMAT
from .errors import CorruptDocumentError, StorageError

STORAGE_FORMAT_VERSION = "1.0"

Row = dict[str, RowValue]


class ColumnDocument(BaseModel):
    """Stored definition of a column."""

    name: str
    type: DataType
    length: int | None = None
    precision: int | None = None
    scale: int | None = None
    constraints: list[Constraint] = Field(default_factory=list)
    default: str | None = None

    @classmethod
    def from_column(cls, column: Column) -> "ColumnDocument":
        return cls(
            name=column.name,
            type=column.data_type,
            length=column.length,
            precision=column.precision,
            scale=column.scale,
            constraints=[c for c in Constraint if c in column.constraints],
            default=column.default,
        )

    def to_column(self) -> Column:
        return Column(
            self.name,
            self.type,
            length=self.length,
            precision=self.precision,
            scale=self.scale,
            constraints=frozenset(self.constraints),
            default=self.default,
        )


class TableDocument(BaseModel):
    """Stored definition of a table."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    schema_name: str | None = Field(default=None, alias="schema")
    columns: list[ColumnDocument]
    primary_keys: list[str] = Field(default_factory=list)

    @classmethod
    def from_table(cls, table: Table) -> "TableDocument":
        return cls(
            name=table.name,
            schema_name=table.schema,
            columns=[ColumnDocument.from_column(c) for c in table.columns],
            primary_keys=[c.name for c in table.columns if c.is_primary_key],
        )

    def to_table(self) -> Table:
        return Table(
            self.name,
            [c.to_column() for c in self.columns],
            schema=self.schema_name,
        )


class DatabaseDocument(BaseModel):
    """Stored information about a database."""

    name: str
    created: datetime.datetime
    version: str = STORAGE_FORMAT_VERSION


class DocumentSerializer:
    """Convert documents to and from their JSON text.

    Each storage engine owns its own serializer, built
    with the settings of that engine.
    """

    def __init__(
        self, indent: int | None = 2, timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT
    ) -> None:
        """
        :param indent: JSON indentation, ``None`` for compact documents.
        :param timestamp_format: ``strftime`` format used to store datetimes.
        """
        self.indent = indent
        self.timestamp_format = timestamp_format

    def dumps_rows(self, rows: list[Row]) -> str:
        try:
            return json.dumps(rows, indent=self.indent, default=self._encode_value)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Rows can't be stored: {e}") from e

    def loads_rows(self, text: str) -> list[Row]:
        try:
            rows = json.loads(text)
        except json.JSONDecodeError as e:
            raise CorruptDocumentError(f"Invalid rows document: {e}") from e
        if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
            raise CorruptDocumentError("Rows document must be a list of objects")
        return rows

    def dumps_table(self, table: Table) -> str:
        return TableDocument.from_table(table).model_dump_json(
            indent=self.indent, by_alias=True
        )

    def loads_table(self, text: str) -> Table:
        try:
            document = TableDocument.model_validate_json(text)
        except ValidationError as e:
            raise CorruptDocumentError(f"Invalid table document: {e}") from e
        try:
            return document.to_table()
        except StructuralError as e:
            raise CorruptDocumentError(f"Invalid table document: {e}") from e

    def dumps_database(self, document: DatabaseDocument) -> str:
        return document.model_dump_json(indent=self.indent)

    def loads_database(self, text: str) -> DatabaseDocument:
        try:
            return DatabaseDocument.model_validate_json(text)
        except ValidationError as e:
            raise CorruptDocumentError(f"Invalid database document: {e}") from e

    def _encode_value(self, value: Any) -> str:
        if isinstance(value, Decimal):
            return str(value)
        elif isinstance(value, datetime.datetime):
            fmt = self.timestamp_format
            if value.microsecond:
                fmt += ".%f"
            return value.strftime(fmt)
        elif isinstance(value, datetime.date):
            return value.isoformat()
        raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
