import pytest

from schemaground.catalog import (
    ColumnNotFoundError,
    DuplicateColumnError,
    RowValidationError,
    Table,
    TableAlreadyExistsError,
)
from schemaground.config import EngineSettings
from schemaground.engine import DatabaseEngine, EngineError
from schemaground.sql import AddColumn, DropTable, SQLParseError, SQLTokenizeException
from schemaground.storage import DatabaseArtifactExistsError, StorageError

PRODUCTS_DDL = (
    "CREATE TABLE products (id INTEGER PRIMARY KEY NOT NULL, name VARCHAR NOT NULL, price DECIMAL)"
)


@pytest.fixture
def settings(tmp_path):
    return EngineSettings(data_dir=tmp_path)


@pytest.fixture
def engine(settings):
    engine = DatabaseEngine(settings)
    engine.create_database("shop")
    return engine


def test_products_scenario(engine):
    table = engine.execute_ddl("shop", PRODUCTS_DDL)
    assert isinstance(table, Table)
    assert len(table.columns) == 3
    assert table.primary_keys == {"id"}

    storage = engine.storage("shop")
    storage.insert("products", {"id": 1, "name": "pen", "price": "1.5"})

    command = engine.execute_ddl(
        "shop", "ALTER TABLE products ADD COLUMN stock INTEGER NOT NULL DEFAULT 0"
    )
    assert isinstance(command, AddColumn)
    assert storage.select_all("products") == [
        {"id": 1, "name": "pen", "price": "1.5", "stock": "0"}
    ]

    engine.execute_ddl("shop", "ALTER TABLE products DROP COLUMN price")
    assert storage.select_all("products") == [{"id": 1, "name": "pen", "stock": "0"}]
    assert engine.get_database("shop").require_table("products").column_names == [
        "id",
        "name",
        "stock",
    ]

    log_lines = storage.files.read_text(storage.files.transaction_log_file).splitlines()
    assert [line.split("] ")[1] for line in log_lines] == [
        "CREATE products rows=0",
        "ALTER_ADD_COLUMN products rows=1",
        "ALTER_DROP_COLUMN products rows=1",
    ]


def test_databases_are_loaded_at_startup(engine, settings):
    engine.execute_ddl("shop", PRODUCTS_DDL)
    engine.execute_ddl("shop", "ALTER TABLE products MODIFY COLUMN name TO title VARCHAR(32)")

    reloaded = DatabaseEngine(settings)

    assert reloaded.list_databases() == ["shop"]
    assert reloaded.database_exists("shop")
    table = reloaded.get_database("shop").require_table("products")
    assert table == engine.get_database("shop").require_table("products")
    assert table.column_names == ["id", "title", "price"]


def test_corrupt_database_is_skipped(engine, settings):
    engine.execute_ddl("shop", PRODUCTS_DDL)
    files = engine.storage("shop").files
    files.write_text(files.table_metadata_file("products"), "not json")

    assert DatabaseEngine(settings).list_databases() == []


def test_create_existing_database(engine, settings):
    with pytest.raises(EngineError, match="Database already exists: shop"):
        engine.create_database("shop")

    (settings.data_dir / "orphan").mkdir()
    with pytest.raises(DatabaseArtifactExistsError):
        engine.create_database("orphan")
    assert not engine.database_exists("orphan")


def test_drop_database(engine, settings):
    engine.execute_ddl("shop", PRODUCTS_DDL)
    engine.drop_database("shop")

    assert engine.list_databases() == []
    assert not (settings.data_dir / "shop").exists()
    with pytest.raises(EngineError, match="Database does not exist: shop"):
        engine.execute_ddl("shop", PRODUCTS_DDL)


def test_drop_table(engine):
    engine.execute_ddl("shop", PRODUCTS_DDL)
    command = engine.execute_ddl("shop", "DROP TABLE products")

    assert command == DropTable("products")
    assert not engine.get_database("shop").table_exists("products")
    assert not engine.storage("shop").table_exists("products")


def test_invalid_statements_change_nothing(engine):
    engine.execute_ddl("shop", PRODUCTS_DDL)
    before = engine.get_database("shop").require_table("products").copy()

    with pytest.raises(SQLTokenizeException):
        engine.execute_ddl("shop", "ALTER TABLE products ADD COLUMN a INTEGER DEFAULT 'x")
    with pytest.raises(SQLParseError):
        engine.execute_ddl("shop", "ALTER TABLE products ADD a INTEGER")
    with pytest.raises(DuplicateColumnError):
        engine.execute_ddl("shop", "ALTER TABLE products ADD COLUMN NAME VARCHAR")
    with pytest.raises(ColumnNotFoundError):
        engine.execute_ddl("shop", "ALTER TABLE products DROP COLUMN stock")
    with pytest.raises(TableAlreadyExistsError):
        engine.execute_ddl("shop", PRODUCTS_DDL)

    assert engine.get_database("shop").require_table("products") == before
    assert engine.storage("shop").load_table_metadata("products") == before


def test_failed_migration_restores_metadata(engine):
    engine.execute_ddl("shop", PRODUCTS_DDL)
    storage = engine.storage("shop")
    storage.files.table_data_file("products").write_text("corrupted", encoding="utf-8")

    with pytest.raises(StorageError):
        engine.execute_ddl("shop", "ALTER TABLE products DROP COLUMN price")

    table = engine.get_database("shop").require_table("products")
    assert table.column_names == ["id", "name", "price"]


def test_failed_create_table_is_rolled_back(engine):
    storage = engine.storage("shop")
    storage.files.create_table_files("products")

    with pytest.raises(StorageError):
        engine.execute_ddl("shop", PRODUCTS_DDL)

    assert not engine.get_database("shop").table_exists("products")


def test_failed_table_documents_keep_database_loadable(engine, settings, monkeypatch):
    storage = engine.storage("shop")

    def fail(*args, **kwargs):
        raise StorageError("disk full")

    for method in ("save_table_metadata", "log_transaction"):
        with monkeypatch.context() as m:
            m.setattr(storage, method, fail)
            with pytest.raises(StorageError, match="disk full"):
                engine.execute_ddl("shop", PRODUCTS_DDL)
        assert not storage.table_exists("products")
        assert DatabaseEngine(settings).database_exists("shop")

    engine.execute_ddl("shop", PRODUCTS_DDL)
    with monkeypatch.context() as m:
        m.setattr(storage, "log_transaction", fail)
        with pytest.raises(StorageError, match="disk full"):
            engine.execute_ddl("shop", "ALTER TABLE products DROP COLUMN price")

    reloaded = DatabaseEngine(settings).get_database("shop").require_table("products")
    assert reloaded == engine.get_database("shop").require_table("products")
    assert reloaded.column_names == ["id", "name", "price"]


def test_failed_drop_table_is_rolled_back(engine):
    engine.execute_ddl("shop", PRODUCTS_DDL)
    engine.storage("shop").files.delete_table_files("products")

    with pytest.raises(StorageError):
        engine.execute_ddl("shop", "DROP TABLE products")

    assert engine.get_database("shop").table_exists("products")


def test_show_database_schema(engine):
    engine.execute_ddl("shop", PRODUCTS_DDL)
    engine.execute_ddl("shop", "CREATE TABLE tags (label VARCHAR(16) UNIQUE)")

    assert engine.show_database_schema("shop") == "\n".join(
        [
            "Database: shop",
            "  Table: products",
            "    Column: id INTEGER NOT NULL",
            "    Column: name VARCHAR NOT NULL",
            "    Column: price DECIMAL NULL",
            "  Table: tags",
            "    Column: label VARCHAR(16) NULL",
        ]
    )


def test_insert_rows(engine):
    engine.execute_ddl("shop", PRODUCTS_DDL)

    assert engine.insert_rows("shop", "products", [{"id": 1, "name": "pen", "price": "1.5"}]) == 1
    with pytest.raises(RowValidationError, match="Primary key 'id'"):
        engine.insert_rows("shop", "products", [{"id": 2, "name": "ink"}, {"name": "cap"}])
    with pytest.raises(RowValidationError, match="Invalid value for column 'price'"):
        engine.insert_rows("shop", "products", [{"id": 3, "name": "cap", "price": "cheap"}])

    assert engine.storage("shop").select_all("products") == [
        {"id": 1, "name": "pen", "price": "1.5"}
    ]
