"""Support for parsing DDL statements.

This module provides support for parsing the statements that
declare and alter the schema of tables: ``CREATE TABLE``,
``ALTER TABLE`` and ``DROP TABLE``. Querying data is not supported,
rows are accessed through the :mod:`schemaground.storage` API.

The parser has limitations in terms of what it can support given that it
is based on a simple grammar and tokenization approach. On production projects,
you would typically use a dedicated library like SQLGlot.
But implementing a from scratch DDL parser is useful for educational
purposes on the concept of parsing.

The DDL support is constituted by three components:

1. Tokenizer
2. Parser
3. Commands

To parse a statement, you would typically do::

    statement = Parser("ALTER TABLE users ADD COLUMN age INTEGER DEFAULT 0").parse()

The **Tokenizer** is responsible for converting the input statement into a sequence of tokens.
Given a statement like ``"ALTER TABLE users DROP COLUMN age"``, the tokenizer will produce
a sequence of tokens like::

    [ALTER, TABLE, users, DROP, COLUMN, age]

The :class:`schemaground.sql.tokenize.Tokenizer` is a regex based tokenizer,
it tries a list of rules in priority order at each position of the text.
Comments and whitespace are recognized but dropped.

The :class:`schemaground.sql.parser.Parser` is **the main class of the parser**,
it looks at the first token to identify the statement and delegates
to the parser dedicated to that statement.
Differently from query parsers, the result is not a generic syntax tree:
``CREATE TABLE`` directly produces a :class:`schemaground.catalog.Table`,
while ``ALTER TABLE`` and ``DROP TABLE`` produce a command from
:mod:`schemaground.sql.commands`.

The **Commands** know how to apply themselves to a
:class:`schemaground.catalog.Database`. Executing a command
validates and changes the in memory metadata only, it's up to
the :class:`schemaground.engine.DatabaseEngine` to then ask the
storage to migrate the stored rows.
"""

from .commands import AddColumn, AlterCommand, DropColumn, DropTable, ModifyColumn
from .parser import (
    Parser,
    SQLParseError,
    UnexpectedEndOfInput,
    UnsupportedTypeError,
    parse_alter_table,
    parse_create_table,
)
from .tokenize import SQLTokenizeException, Tokenizer

__all__ = (
    "Parser",
    "Tokenizer",
    "parse_create_table",
    "parse_alter_table",
    "AddColumn",
    "AlterCommand",
    "DropColumn",
    "DropTable",
    "ModifyColumn",
    "SQLParseError",
    "SQLTokenizeException",
    "UnexpectedEndOfInput",
    "UnsupportedTypeError",
)
