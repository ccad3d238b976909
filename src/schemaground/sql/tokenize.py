"""Regex based tokenizer for DDL statements.

Given a statement like ``"CREATE TABLE users (id INTEGER PRIMARY KEY)"``,
the tokenizer will produce a sequence of tokens like::

    [CREATE, TABLE, users, (, id, INTEGER, PRIMARY, KEY, )]

The tokenizer scans the text from left to right, at each position
it tries a list of rules in priority order and the first rule that matches
consumes the matched text. The rules are, in order:

1. Comments, both ``-- line`` and ``/* block */`` comments.
2. Whitespace.
3. String literals, in single quotes, with ``''`` used to escape a quote.
4. Numbers, optionally signed, with optional fractional and exponent parts.
5. Keywords, matched case insensitively against a fixed vocabulary.
6. Symbols like ``( ) , ; .``
7. Identifiers.

Comments and whitespace are recognized but never emitted,
so that the parser doesn't have to care about them.

The order of the rules matters: as keywords are tried before
identifiers, a word spelled like a keyword is always a
:class:`KeywordToken` even in places where an identifier would make sense.
Keywords must end on a word boundary, so ``created_at`` is an identifier
and not the ``CREATE`` keyword followed by ``d_at``.
"""

import re

KEYWORDS = (
    "CREATE",
    "TABLE",
    "ALTER",
    "ADD",
    "COLUMN",
    "PRIMARY",
    "KEY",
    "UNIQUE",
    "NOT",
    "NULL",
    "DEFAULT",
    "AUTO_INCREMENT",
    "REFERENCES",
    "FOREIGN",
    "INDEX",
    "CHECK",
    "DROP",
    "MODIFY",
    "RENAME",
    "TO",
    # Type names
    "INTEGER",
    "INT",
    "BIGINT",
    "VARCHAR",
    "CHAR",
    "DATE",
    "TIMESTAMP",
    "BOOLEAN",
    "DECIMAL",
)


class Token:
    """A classified unit of text of the tokenized statement.

    Tokens compare equal when they are of the same kind and
    carry the same value, the position is only used to report errors.
    """

    def __init__(self, value: str, position: int = -1) -> None:
        """
        :param value: The text of the token.
        :param position: Offset of the token in the source text.
        """
        self.value = value
        self.position = position

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.value == other.value

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.value!r})"


class KeywordToken(Token):
    """A reserved word, its value is always upper case."""


class IdentifierToken(Token):
    """Name of a table, schema or column."""


class StringLiteralToken(Token):
    """A single quoted string, the value retains the quotes."""


class NumberToken(Token):
    """A numeric literal, kept as text."""


class SymbolToken(Token):
    """Punctuation like parenthesis, commas and dots."""


class EOFToken(Token):
    """Marks the end of the token stream.

    Never emitted by the tokenizer, the parser uses it
    when it moves past the last token.
    """

    def __init__(self, position: int = -1) -> None:
        super().__init__("", position)

    def __repr__(self) -> str:
        return "EOFToken()"


class Tokenizer:
    """Split a DDL statement in a list of :class:`Token`."""

    RULES: list[tuple[type[Token] | None, re.Pattern]] = [
        (None, re.compile(r"--[^\n]*|/\*.*?\*/", re.DOTALL)),
        (None, re.compile(r"\s+")),
        (StringLiteralToken, re.compile(r"'(?:''|[^'])*'")),
        (NumberToken, re.compile(r"-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?")),
        (KeywordToken, re.compile(rf"(?:{'|'.join(KEYWORDS)})\b", re.IGNORECASE)),
        (SymbolToken, re.compile(r"[(),;.=<>+\-*/%]")),
        (IdentifierToken, re.compile(r"[A-Za-z_][A-Za-z0-9_]*")),
    ]

    def __init__(self, text: str) -> None:
        """
        :param text: The DDL statement to tokenize.
        """
        self.text = text

    def tokenize(self) -> list[Token]:
        """Scan the whole text and return the tokens found.

        Raises :class:`SQLTokenizeException` at the first
        character that no rule is able to match.
        """
        tokens = []
        pos = 0
        while pos < len(self.text):
            for token_class, pattern in self.RULES:
                match = pattern.match(self.text, pos)
                if match is None:
                    continue
                value = match.group(0)
                if token_class is KeywordToken:
                    value = value.upper()
                if token_class is not None:
                    tokens.append(token_class(value, pos))
                pos = match.end()
                break
            else:
                raise SQLTokenizeException(self.text[pos], pos)
        return tokens


class SQLTokenizeException(Exception):
    """Raised when the tokenizer finds text it is unable to classify."""

    def __init__(self, char: str, position: int) -> None:
        super().__init__(f"Unexpected character {char!r} at position {position}")
        self.char = char
        self.position = position
