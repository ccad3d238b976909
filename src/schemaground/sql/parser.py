"""A DDL Parser that converts statements into tables and commands.

Given a statement like ``"CREATE TABLE shop.products (id INTEGER PRIMARY KEY, name VARCHAR(64))"``,
the parser produces a :class:`schemaground.catalog.Table` equal to::

    Table(
        "products",
        [
            Column("id", DataType.INTEGER, constraints={Constraint.PRIMARY_KEY}),
            Column("name", DataType.VARCHAR, length=64),
        ],
        schema="shop",
    )

While ALTER TABLE and DROP TABLE statements produce one of the commands
from :mod:`schemaground.sql.commands`.

The supported grammar is::

    CreateTable      := CREATE TABLE [ident '.'] ident '(' ColumnDef (',' ColumnDef)* ')'
    ColumnDef        := ident DataType ColumnConstraint*
    DataType         := TYPE [ '(' NUMBER [',' NUMBER] ')' ]
    ColumnConstraint := PRIMARY KEY | NOT NULL | UNIQUE | AUTO_INCREMENT | DEFAULT DefaultValue
    DefaultValue     := STRING | NUMBER | NULL | TRUE | FALSE
    AlterTable       := ALTER TABLE ident ( ADD COLUMN ColumnDef
                                          | DROP COLUMN ident
                                          | MODIFY COLUMN ident [TO ident] DataType ColumnConstraint* )
    DropTable        := DROP TABLE ident

Every statement can optionally be terminated by a ``;``.

Like the rest of the parsers in the package, it's a recursive descent
parser where each part of the grammar is parsed by a dedicated method.
It does a single left to right pass over the tokens, looking
at most one token ahead and never backtracking.
"""

from ..catalog import Column, Constraint, DataType, Table
from .commands import AddColumn, AlterCommand, DropColumn, DropTable, ModifyColumn
from .tokenize import (
    EOFToken,
    IdentifierToken,
    KeywordToken,
    NumberToken,
    StringLiteralToken,
    SymbolToken,
    Token,
    Tokenizer,
)

TYPE_NAMES = frozenset(t.value for t in DataType) | {"INT"}

Statement = Table | AlterCommand | DropTable


class Parser:
    """Parse any supported DDL statement.

    The Parser class identifies which statement is being parsed and
    delegates the parsing to the parser dedicated to that statement.

    The text is tokenized by :class:`schemaground.sql.tokenize.Tokenizer`
    as soon as the parser is created.
    """

    def __init__(self, text: str) -> None:
        """
        :param text: The DDL statement to parse.
        """
        self.text = text
        self.tokens = Tokenizer(text).tokenize()

    def parse(self) -> Statement:
        """Parse the statement.

        Returns a :class:`schemaground.catalog.Table` for CREATE TABLE,
        an alter command for ALTER TABLE and a
        :class:`schemaground.sql.commands.DropTable` for DROP TABLE.
        """
        if not self.tokens:
            raise SQLParseError("Empty statement.")

        statement = self.tokens[0]
        if not isinstance(statement, KeywordToken):
            raise SQLParseError(
                f"Unsupported statement: {statement.value}",
                statement.position,
                context_around(self.text, statement.position),
            )

        if statement.value == "CREATE":
            return CreateTableParser(self.tokens, self.text).parse()
        elif statement.value == "ALTER":
            return AlterTableParser(self.tokens, self.text).parse()
        elif statement.value == "DROP":
            return DropTableParser(self.tokens, self.text).parse()
        else:
            raise SQLParseError(
                f"Unsupported statement: {statement.value}",
                statement.position,
                context_around(self.text, statement.position),
            )


def parse_create_table(text: str) -> Table:
    """Parse a CREATE TABLE statement into a table."""
    return CreateTableParser(Tokenizer(text).tokenize(), text).parse()


def parse_alter_table(text: str) -> AlterCommand:
    """Parse an ALTER TABLE statement into an alter command."""
    return AlterTableParser(Tokenizer(text).tokenize(), text).parse()


class StatementParser:
    """Base class for the parsers of a single statement.

    Provides the utilities to move through the tokens
    and check what the current token is.
    """

    def __init__(self, tokens: list[Token], text: str) -> None:
        """
        :param tokens: The tokens of the statement to parse.
        :param text: The statement text, used to report errors.
        """
        self.tokens = tokens
        self.text = text
        self.pos = 0
        self.current_token = tokens[0] if tokens else EOFToken(len(text))

    def parse(self) -> Statement:
        raise NotImplementedError

    def advance(self) -> None:
        """Move to the next token.

        Moving past the last token makes the current
        token an :class:`schemaground.sql.tokenize.EOFToken`.
        """
        self.pos += 1
        if self.pos < len(self.tokens):
            self.current_token = self.tokens[self.pos]
        else:
            self.current_token = EOFToken(len(self.text))

    def peek(self) -> Token:
        """Look at the token after the current one, without advancing."""
        next_pos = self.pos + 1
        if next_pos < len(self.tokens):
            return self.tokens[next_pos]
        return EOFToken(len(self.text))

    def is_keyword(self, *keywords: str) -> bool:
        return (
            isinstance(self.current_token, KeywordToken)
            and self.current_token.value in keywords
        )

    def is_symbol(self, *symbols: str) -> bool:
        return (
            isinstance(self.current_token, SymbolToken)
            and self.current_token.value in symbols
        )

    def consume_keyword(self, keyword: str) -> None:
        """Consume the expected keyword or fail."""
        if not self.is_keyword(keyword):
            raise self.error(f"Expected keyword {keyword}")
        self.advance()

    def consume_symbol(self, symbol: str) -> None:
        """Consume the expected symbol or fail."""
        if not self.is_symbol(symbol):
            raise self.error(f"Expected '{symbol}'")
        self.advance()

    def consume_identifier(self) -> str:
        """Consume an identifier and return its name."""
        if not isinstance(self.current_token, IdentifierToken):
            raise self.error("Expected identifier")
        name = self.current_token.value
        self.advance()
        return name

    def consume_integer(self) -> int:
        """Consume a number that must be a non negative integer."""
        token = self.current_token
        if not isinstance(token, NumberToken):
            raise self.error("Expected number")
        if not token.value.isdigit():
            raise self.error(f"Expected a positive integer, got: {token.value}")
        self.advance()
        return int(token.value)

    def finish(self) -> None:
        """Ensure the whole statement was consumed, apart from a final ``;``."""
        if self.is_symbol(";"):
            self.advance()
        if not isinstance(self.current_token, EOFToken):
            raise self.error(f"Unexpected token: {self.current_token.value}")

    def error(self, message: str) -> "SQLParseError":
        """Build the error for the current token.

        If the statement ended unexpectedly the error is
        an :class:`UnexpectedEndOfInput`, otherwise it's
        a :class:`SQLParseError` pointing at the current token.
        """
        token = self.current_token
        context = context_around(self.text, token.position)
        if isinstance(token, EOFToken):
            return UnexpectedEndOfInput(
                f"{message}, but the statement ended", token.position, context
            )
        return SQLParseError(f"{message}, got: {token.value}", token.position, context)

    def parse_table_name(self) -> tuple[str | None, str]:
        """Parse a table name with its optional schema qualifier.

        Returns a ``(schema, name)`` tuple where schema
        is ``None`` when not provided.
        """
        name = self.consume_identifier()
        if self.is_symbol("."):
            self.advance()
            return name, self.consume_identifier()
        return None, name

    def parse_column_definition(self) -> Column:
        """Parse a column name followed by its type and constraints."""
        name = self.consume_identifier()
        return self.parse_column_body(name)

    def parse_column_body(self, name: str) -> Column:
        """Parse the type and constraints of a column named ``name``."""
        data_type, length, precision, scale = self.parse_data_type()
        constraints, default = self.parse_constraints()
        return Column(
            name,
            data_type,
            length=length,
            precision=precision,
            scale=scale,
            constraints=constraints,
            default=default,
        )

    def parse_data_type(
        self,
    ) -> tuple[DataType, int | None, int | None, int | None]:
        """Parse a type like ``INTEGER``, ``VARCHAR(64)`` or ``DECIMAL(10,2)``.

        Returns the type and its length, precision and scale.
        Only ``VARCHAR`` and ``CHAR`` accept a length and only
        ``DECIMAL`` accepts a precision and scale.
        """
        token = self.current_token
        if not (isinstance(token, KeywordToken) and token.value in TYPE_NAMES):
            raise self.error("Expected data type")
        data_type = DataType.from_name(token.value)
        self.advance()

        length = precision = scale = None
        if self.is_symbol("("):
            self.advance()
            first = self.consume_integer()
            if self.is_symbol(","):
                self.advance()
                second = self.consume_integer()
                if not data_type.accepts_precision:
                    raise UnsupportedTypeError(
                        f"Unsupported complex type: {data_type.value}",
                        token.position,
                        context_around(self.text, token.position),
                    )
                precision, scale = first, second
            elif data_type.accepts_length:
                length = first
            elif data_type.accepts_precision:
                precision = first
            else:
                raise UnsupportedTypeError(
                    f"Unsupported type with length: {data_type.value}",
                    token.position,
                    context_around(self.text, token.position),
                )
            self.consume_symbol(")")
        return data_type, length, precision, scale

    def parse_constraints(self) -> tuple[set[Constraint], str | None]:
        """Parse all the constraints following a column type.

        Returns the set of constraints and the default value, if any.
        """
        constraints = set()
        default = None
        while True:
            if self.is_keyword("PRIMARY"):
                self.advance()
                self.consume_keyword("KEY")
                constraints.add(Constraint.PRIMARY_KEY)
            elif self.is_keyword("NOT"):
                self.advance()
                self.consume_keyword("NULL")
                constraints.add(Constraint.NOT_NULL)
            elif self.is_keyword("UNIQUE"):
                self.advance()
                constraints.add(Constraint.UNIQUE)
            elif self.is_keyword("AUTO_INCREMENT"):
                self.advance()
                constraints.add(Constraint.AUTO_INCREMENT)
            elif self.is_keyword("DEFAULT"):
                self.advance()
                default = self.parse_default_value()
            else:
                break
        return constraints, default

    def parse_default_value(self) -> str | None:
        """Parse the value following DEFAULT.

        String literals are unquoted, numbers are kept as they were
        written and ``NULL`` means there is no default value.
        """
        token = self.current_token
        if isinstance(token, StringLiteralToken):
            self.advance()
            return token.value[1:-1].replace("''", "'")
        elif isinstance(token, NumberToken):
            self.advance()
            return token.value
        elif self.is_keyword("NULL"):
            self.advance()
            return None
        elif isinstance(token, IdentifierToken) and token.value.upper() in (
            "TRUE",
            "FALSE",
        ):
            self.advance()
            return token.value.lower()
        raise self.error("Expected default value")


class CreateTableParser(StatementParser):
    """Parser for CREATE TABLE statements."""

    def parse(self) -> Table:
        """Parse the statement and build the table it declares."""
        self.consume_keyword("CREATE")
        self.consume_keyword("TABLE")
        schema, name = self.parse_table_name()
        columns = self.parse_column_definitions()
        self.finish()
        return Table(name, columns, schema=schema)

    def parse_column_definitions(self) -> list[Column]:
        """Parse the parenthesized, comma separated, list of columns."""
        self.consume_symbol("(")
        columns = []
        while not self.is_symbol(")"):
            columns.append(self.parse_column_definition())
            if not self.is_symbol(")"):
                self.consume_symbol(",")
        self.consume_symbol(")")
        return columns


class AlterTableParser(StatementParser):
    """Parser for ALTER TABLE statements."""

    def parse(self) -> AlterCommand:
        """Parse the statement and build the corresponding command."""
        self.consume_keyword("ALTER")
        self.consume_keyword("TABLE")
        table_name = self.consume_identifier()

        if self.is_keyword("ADD"):
            self.advance()
            self.consume_keyword("COLUMN")
            command = AddColumn(table_name, self.parse_column_definition())
        elif self.is_keyword("DROP"):
            self.advance()
            self.consume_keyword("COLUMN")
            command = DropColumn(table_name, self.consume_identifier())
        elif self.is_keyword("MODIFY"):
            self.advance()
            self.consume_keyword("COLUMN")
            old_name = self.consume_identifier()
            new_name = old_name
            if self.is_keyword("TO"):
                self.advance()
                new_name = self.consume_identifier()
            command = ModifyColumn(table_name, old_name, self.parse_column_body(new_name))
        else:
            raise self.error("Expected ADD, DROP or MODIFY")

        self.finish()
        return command


class DropTableParser(StatementParser):
    """Parser for DROP TABLE statements."""

    def parse(self) -> DropTable:
        self.consume_keyword("DROP")
        self.consume_keyword("TABLE")
        table_name = self.consume_identifier()
        self.finish()
        return DropTable(table_name)


def context_around(text: str, position: int, width: int = 15) -> str:
    """The text surrounding a position, to show where an error happened."""
    if position < 0:
        return text[:width]
    return text[max(0, position - width) : position + width]


class SQLParseError(Exception):
    """An exception raised when an error occurs during DDL parsing.

    Provides the ``position`` of the offending token
    and the ``context`` text around it.
    """

    def __init__(self, message: str, position: int = -1, context: str | None = None) -> None:
        text = message
        if position >= 0:
            text += f" at position {position}"
        if context:
            text += f" near {context!r}"
        super().__init__(text)
        self.message = message
        self.position = position
        self.context = context


class UnexpectedEndOfInput(SQLParseError):
    """The statement ended before it was complete."""

    pass


class UnsupportedTypeError(SQLParseError):
    """A type was given a length, precision or scale it doesn't support."""

    pass
