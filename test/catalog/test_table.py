import pytest

from schemaground.catalog import (
    Column,
    ColumnNotFoundError,
    Constraint,
    DataType,
    DuplicateColumnError,
    InvalidTableDefinitionError,
    RowValidationError,
    Table,
)

PK = frozenset({Constraint.PRIMARY_KEY})


def make_table():
    return Table(
        "products",
        [
            Column("id", DataType.INTEGER, constraints=PK),
            Column("name", DataType.VARCHAR, length=64),
            Column("price", DataType.DECIMAL, precision=10, scale=2),
        ],
    )


def test_table_requires_columns():
    with pytest.raises(InvalidTableDefinitionError, match="at least one column"):
        Table("empty", [])


def test_table_requires_name():
    with pytest.raises(InvalidTableDefinitionError, match="name cannot be empty"):
        Table("", [Column("id", DataType.INTEGER)])


def test_primary_keys_derived_from_columns():
    table = make_table()
    assert table.primary_keys == {"id"}


def test_get_column_ignores_case():
    table = make_table()

    assert table.get_column("NAME").name == "name"
    assert table.get_column("missing") is None
    assert table.has_column("Price")


def test_add_column_appends():
    table = make_table()
    table.add_column(Column("sku", DataType.CHAR, length=8, constraints=PK))

    assert table.column_names == ["id", "name", "price", "sku"]
    assert table.primary_keys == {"id", "sku"}


def test_add_duplicate_column():
    table = make_table()
    with pytest.raises(DuplicateColumnError, match="Column 'Name' already exists"):
        table.add_column(Column("Name", DataType.VARCHAR))
    assert table == make_table()


def test_add_then_drop_restores_table():
    table = make_table()
    table.add_column(Column("code", DataType.INTEGER, constraints=PK))
    dropped = table.drop_column("code")

    assert dropped.name == "code"
    assert table == make_table()
    assert table.primary_keys == {"id"}


def test_drop_primary_key_column():
    table = make_table()
    table.drop_column("ID")

    assert table.column_names == ["name", "price"]
    assert table.primary_keys == frozenset()


def test_drop_missing_column():
    with pytest.raises(ColumnNotFoundError, match="Column 'nope' does not exist"):
        make_table().drop_column("nope")


def test_drop_last_column():
    table = Table("t", [Column("id", DataType.INTEGER)])
    with pytest.raises(InvalidTableDefinitionError, match="at least one column"):
        table.drop_column("id")
    assert table.column_names == ["id"]


def test_modify_column_keeps_position():
    table = make_table()
    previous = table.modify_column("name", Column("title", DataType.VARCHAR, length=128))

    assert previous.name == "name"
    assert table.column_names == ["id", "title", "price"]
    assert table.get_column("title").length == 128


def test_rename_and_rename_back():
    table = make_table()
    table.modify_column("price", table.get_column("price").renamed("cost"))
    table.modify_column("cost", table.get_column("cost").renamed("price"))

    assert table == make_table()


@pytest.mark.parametrize(
    "old_name, new_column, expected_keys",
    [
        ("name", Column("name", DataType.VARCHAR, length=10), {"id"}),
        ("id", Column("key", DataType.INTEGER, constraints=PK), {"key"}),
        ("name", Column("name", DataType.VARCHAR, constraints=PK), {"id", "name"}),
        ("id", Column("id", DataType.INTEGER), set()),
    ],
)
def test_modify_column_updates_primary_keys(old_name, new_column, expected_keys):
    table = make_table()
    table.modify_column(old_name, new_column)
    assert table.primary_keys == expected_keys


def test_modify_column_to_existing_name():
    table = make_table()
    with pytest.raises(DuplicateColumnError, match="already used"):
        table.modify_column("name", Column("price", DataType.VARCHAR))
    assert table == make_table()


def test_modify_column_changing_only_case():
    table = make_table()
    table.modify_column("name", Column("NAME", DataType.VARCHAR))
    assert table.column_names == ["id", "NAME", "price"]


def test_modify_missing_column():
    with pytest.raises(ColumnNotFoundError):
        make_table().modify_column("nope", Column("nope", DataType.INTEGER))


def test_validate_row():
    table = make_table()
    table.validate_row({"id": 1, "name": "pen", "price": "1.50"})
    table.validate_row({"id": "2"})

    with pytest.raises(RowValidationError, match="Primary key 'id'"):
        table.validate_row({"name": "pen"})
    with pytest.raises(RowValidationError, match="Invalid value for column 'price'"):
        table.validate_row({"id": 1, "price": "cheap"})


def test_generate_create_ddl():
    table = make_table()
    table.schema = "shop"

    assert table.generate_create_ddl() == (
        "CREATE TABLE shop.products (\n"
        "  id INTEGER PRIMARY KEY,\n"
        "  name VARCHAR(64),\n"
        "  price DECIMAL(10,2)\n"
        ")"
    )


def test_copy_is_independent():
    table = make_table()
    snapshot = table.copy()
    table.add_column(Column("stock", DataType.INTEGER))

    assert snapshot == make_table()
    assert snapshot != table
