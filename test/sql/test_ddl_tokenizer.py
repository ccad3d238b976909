import pytest

from schemaground.sql.tokenize import (
    IdentifierToken,
    KeywordToken,
    NumberToken,
    SQLTokenizeException,
    StringLiteralToken,
    SymbolToken,
    Tokenizer,
)


def test_tokenizer_create_table():
    query = "CREATE TABLE users (id INTEGER PRIMARY KEY, name VARCHAR(64))"
    tokens = Tokenizer(query).tokenize()

    expected_tokens = [
        KeywordToken("CREATE"),
        KeywordToken("TABLE"),
        IdentifierToken("users"),
        SymbolToken("("),
        IdentifierToken("id"),
        KeywordToken("INTEGER"),
        KeywordToken("PRIMARY"),
        KeywordToken("KEY"),
        SymbolToken(","),
        IdentifierToken("name"),
        KeywordToken("VARCHAR"),
        SymbolToken("("),
        NumberToken("64"),
        SymbolToken(")"),
        SymbolToken(")"),
    ]

    assert tokens == expected_tokens


def test_tokenizer_keywords_case_insensitive():
    tokens = Tokenizer("alter Table users drop column age").tokenize()

    assert tokens == [
        KeywordToken("ALTER"),
        KeywordToken("TABLE"),
        IdentifierToken("users"),
        KeywordToken("DROP"),
        KeywordToken("COLUMN"),
        IdentifierToken("age"),
    ]


def test_tokenizer_keyword_prefix_is_identifier():
    tokens = Tokenizer("created_at total INTEGER").tokenize()

    assert tokens == [
        IdentifierToken("created_at"),
        IdentifierToken("total"),
        KeywordToken("INTEGER"),
    ]


def test_tokenizer_skips_comments_and_whitespace():
    query = """
    -- the users table
    CREATE /* multi
    line */ TABLE users
    """
    tokens = Tokenizer(query).tokenize()

    assert tokens == [
        KeywordToken("CREATE"),
        KeywordToken("TABLE"),
        IdentifierToken("users"),
    ]


def test_tokenizer_string_literal_with_escaped_quote():
    tokens = Tokenizer("DEFAULT 'it''s'").tokenize()

    assert tokens == [KeywordToken("DEFAULT"), StringLiteralToken("'it''s'")]


@pytest.mark.parametrize("number", ["0", "42", "-7", "3.14", "1e10", "-2.5E-3"])
def test_tokenizer_numbers(number):
    assert Tokenizer(number).tokenize() == [NumberToken(number)]


def test_tokenizer_positions():
    tokens = Tokenizer("DROP TABLE  users;").tokenize()

    assert [t.position for t in tokens] == [0, 5, 12, 17]


def test_tokenizer_schema_qualified_name():
    tokens = Tokenizer("shop.products").tokenize()

    assert tokens == [
        IdentifierToken("shop"),
        SymbolToken("."),
        IdentifierToken("products"),
    ]


def test_tokenizer_unterminated_string():
    with pytest.raises(SQLTokenizeException) as err:
        Tokenizer("SELECT'").tokenize()

    assert err.value.position == 6
    assert err.value.char == "'"
    assert str(err.value) == "Unexpected character \"'\" at position 6"


def test_tokenizer_invalid_character():
    with pytest.raises(SQLTokenizeException, match="Unexpected character '@' at position 7"):
        Tokenizer("CREATE @").tokenize()


def test_tokens_equality_ignores_position():
    assert KeywordToken("TABLE", 0) == KeywordToken("TABLE", 10)
    assert KeywordToken("TABLE") != IdentifierToken("TABLE")
