"""
Exception classes for structural errors of the metadata model.

All of them are raised before any change is persisted,
so metadata and storage never diverge when one of them happens.
"""


class StructuralError(Exception):
    """Base exception for invalid schema definitions and alterations."""

    pass


class InvalidColumnDefinitionError(StructuralError):
    """Exception raised when a column is declared with inconsistent attributes."""

    pass


class InvalidTableDefinitionError(StructuralError):
    """Exception raised when a table has no columns or repeats a column name."""

    pass


class DuplicateColumnError(StructuralError):
    """Exception raised when a column name is already in use in the table."""

    pass


class ColumnNotFoundError(StructuralError):
    """Exception raised when a requested column is not found."""

    pass


class TableAlreadyExistsError(StructuralError):
    """Exception raised when a table name is already in use in the database."""

    pass


class TableNotFoundError(StructuralError):
    """Exception raised when a requested table is not found."""

    pass


class RowValidationError(StructuralError):
    """Exception raised when a row doesn't satisfy the table columns."""

    pass


class InvalidCommandConstruction(StructuralError):
    """Exception raised when an alter command is built with wrong arguments."""

    pass
