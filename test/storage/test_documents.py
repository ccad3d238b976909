import datetime
import json
from decimal import Decimal

import pytest

from schemaground.catalog import Column, Constraint, DataType, Table
from schemaground.storage.documents import DatabaseDocument, DocumentSerializer
from schemaground.storage.errors import CorruptDocumentError, StorageError


def make_table():
    return Table(
        "products",
        [
            Column(
                "id",
                DataType.INTEGER,
                constraints={Constraint.PRIMARY_KEY, Constraint.NOT_NULL},
            ),
            Column("price", DataType.DECIMAL, precision=10, scale=2, default="0"),
        ],
        schema="shop",
    )


def test_table_document_shape():
    document = json.loads(DocumentSerializer().dumps_table(make_table()))

    assert document["name"] == "products"
    assert document["schema"] == "shop"
    assert document["primary_keys"] == ["id"]
    assert document["columns"][0] == {
        "name": "id",
        "type": "INTEGER",
        "length": None,
        "precision": None,
        "scale": None,
        "constraints": ["PRIMARY_KEY", "NOT_NULL"],
        "default": None,
    }
    assert document["columns"][1]["constraints"] == ["DEFAULT"]
    assert document["columns"][1]["default"] == "0"


def test_table_document_loads_back():
    serializer = DocumentSerializer(indent=None)
    text = serializer.dumps_table(make_table())

    assert "\n" not in text
    assert serializer.loads_table(text) == make_table()


@pytest.mark.parametrize(
    "text",
    [
        "{}",
        "not json",
        '{"name": "t", "columns": [{"name": "a", "type": "BLOB"}]}',
        '{"name": "t", "columns": []}',
        '{"name": "t", "columns": [{"name": "a", "type": "INTEGER", "length": 3}]}',
    ],
)
def test_invalid_table_document(text):
    with pytest.raises(CorruptDocumentError, match="Invalid table document"):
        DocumentSerializer().loads_table(text)


def test_rows_encoding():
    serializer = DocumentSerializer(timestamp_format="%Y-%m-%d %H:%M:%S")
    rows = [
        {
            "price": Decimal("1.50"),
            "created": datetime.datetime(2024, 1, 2, 3, 4, 5),
            "updated": datetime.datetime(2024, 1, 2, 3, 4, 5, 120000),
            "day": datetime.date(2024, 1, 2),
            "active": True,
            "note": None,
        }
    ]

    assert serializer.loads_rows(serializer.dumps_rows(rows)) == [
        {
            "price": "1.50",
            "created": "2024-01-02 03:04:05",
            "updated": "2024-01-02 03:04:05.120000",
            "day": "2024-01-02",
            "active": True,
            "note": None,
        }
    ]


def test_rows_keep_key_order():
    serializer = DocumentSerializer()
    rows = serializer.loads_rows(serializer.dumps_rows([{"b": 1, "a": 2, "c": 3}]))
    assert list(rows[0]) == ["b", "a", "c"]


def test_unsupported_row_value():
    with pytest.raises(StorageError, match="Rows can't be stored"):
        DocumentSerializer().dumps_rows([{"a": object()}])


@pytest.mark.parametrize("text", ["nope", "{}", "[1, 2]"])
def test_invalid_rows_document(text):
    with pytest.raises(CorruptDocumentError):
        DocumentSerializer().loads_rows(text)


def test_database_document():
    serializer = DocumentSerializer()
    created = datetime.datetime(2024, 1, 1, 10, 0, 0)
    document = serializer.loads_database(
        serializer.dumps_database(DatabaseDocument(name="shop", created=created))
    )

    assert document.name == "shop"
    assert document.created == created
    assert document.version == "1.0"

    with pytest.raises(CorruptDocumentError):
        serializer.loads_database('{"created": "yesterday"}')
