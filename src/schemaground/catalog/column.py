"""Column definitions.

A :class:`Column` is an immutable value, once built it never changes.
Altering a column means building a new one, which the ``with_*``
methods make convenient::

    >>> col = Column("id", DataType.INTEGER)
    >>> col.with_constraint(Constraint.PRIMARY_KEY).is_primary_key
    True
    >>> col.is_primary_key
    False
"""

import dataclasses
import enum
import re
from dataclasses import dataclass

from .errors import InvalidColumnDefinitionError
from .types import DEFAULT_TIMESTAMP_FORMAT, ConversionResult, DataType, RowValue, convert_value

_NUMERIC_LITERAL_RE = re.compile(r"-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?")

# Widest decimal that can be stored, the limit of 256 bit decimals.
MAX_DECIMAL_PRECISION = 76


class Constraint(enum.Enum):
    """Constraints that can be applied to a column."""

    PRIMARY_KEY = "PRIMARY_KEY"
    NOT_NULL = "NOT_NULL"
    UNIQUE = "UNIQUE"
    AUTO_INCREMENT = "AUTO_INCREMENT"
    DEFAULT = "DEFAULT"


# Order in which constraints are written in DDL.
_CONSTRAINTS_DDL = {
    Constraint.PRIMARY_KEY: "PRIMARY KEY",
    Constraint.NOT_NULL: "NOT NULL",
    Constraint.UNIQUE: "UNIQUE",
    Constraint.AUTO_INCREMENT: "AUTO_INCREMENT",
}


@dataclass(frozen=True)
class Column:
    """A column of a table.

    The ``DEFAULT`` constraint is never provided explicitly,
    it's present whenever the column has a default value.
    The default value is kept as text and interpreted according
    to the column type when it's used.
    """

    name: str
    data_type: DataType
    length: int | None = None
    precision: int | None = None
    scale: int | None = None
    constraints: frozenset[Constraint] = frozenset()
    default: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidColumnDefinitionError("Column name cannot be empty")
        if not isinstance(self.data_type, DataType):
            raise InvalidColumnDefinitionError(
                f"Column '{self.name}' has invalid type: {self.data_type!r}"
            )
        if self.length is not None and not self.data_type.accepts_length:
            raise InvalidColumnDefinitionError(
                f"Column '{self.name}' of type {self.data_type.value} can't have a length"
            )
        if (
            self.precision is not None or self.scale is not None
        ) and not self.data_type.accepts_precision:
            raise InvalidColumnDefinitionError(
                f"Column '{self.name}' of type {self.data_type.value} can't have precision or scale"
            )
        if self.scale is not None and self.precision is None:
            raise InvalidColumnDefinitionError(
                f"Column '{self.name}' has a scale but no precision"
            )
        for attr in ("length", "precision", "scale"):
            value = getattr(self, attr)
            if value is not None and value < 0:
                raise InvalidColumnDefinitionError(
                    f"Column '{self.name}' has a negative {attr}: {value}"
                )
        if self.precision is not None and not 1 <= self.precision <= MAX_DECIMAL_PRECISION:
            raise InvalidColumnDefinitionError(
                f"Column '{self.name}' precision must be between 1 and {MAX_DECIMAL_PRECISION}, "
                f"got {self.precision}"
            )
        if self.precision is not None and (self.scale or 0) > self.precision:
            raise InvalidColumnDefinitionError(
                f"Column '{self.name}' has a scale greater than its precision"
            )

        constraints = frozenset(self.constraints) - {Constraint.DEFAULT}
        if self.default is not None:
            constraints |= {Constraint.DEFAULT}
        object.__setattr__(self, "constraints", constraints)

    @property
    def is_primary_key(self) -> bool:
        return Constraint.PRIMARY_KEY in self.constraints

    @property
    def is_nullable(self) -> bool:
        """Primary key columns are never nullable, even without NOT NULL."""
        return Constraint.NOT_NULL not in self.constraints and not self.is_primary_key

    def with_constraint(self, constraint: Constraint) -> "Column":
        """Return a copy of the column with the constraint added."""
        return dataclasses.replace(self, constraints=self.constraints | {constraint})

    def without_constraint(self, constraint: Constraint) -> "Column":
        """Return a copy of the column with the constraint removed."""
        return dataclasses.replace(self, constraints=self.constraints - {constraint})

    def with_default(self, default: str | None) -> "Column":
        """Return a copy of the column with a different default value."""
        return dataclasses.replace(self, default=default)

    def renamed(self, name: str) -> "Column":
        """Return a copy of the column with a different name."""
        return dataclasses.replace(self, name=name)

    def convert(
        self, value: RowValue, timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT
    ) -> ConversionResult:
        """Convert a value to the type of this column.

        See :func:`schemaground.catalog.types.convert_value`.
        """
        return convert_value(value, self.data_type, timestamp_format)

    def type_ddl(self) -> str:
        """The type of the column as written in DDL, like ``DECIMAL(10,2)``."""
        ddl = self.data_type.value
        if self.length is not None:
            ddl += f"({self.length})"
        elif self.precision is not None:
            ddl += f"({self.precision}"
            if self.scale is not None:
                ddl += f",{self.scale}"
            ddl += ")"
        return ddl

    def to_ddl(self) -> str:
        """Generate the column definition as it would appear in a CREATE TABLE."""
        parts = [self.name, self.type_ddl()]
        for constraint, ddl in _CONSTRAINTS_DDL.items():
            if constraint in self.constraints:
                parts.append(ddl)
        if self.default is not None:
            parts.append(f"DEFAULT {self._format_default()}")
        return " ".join(parts)

    def _format_default(self) -> str:
        if not self.data_type.is_textual and _NUMERIC_LITERAL_RE.fullmatch(self.default):
            return self.default
        return "'" + self.default.replace("'", "''") + "'"
