import datetime
from decimal import Decimal

import pyarrow as pa

from schemaground.utils.tabulate import format_value, tabulate


def test_tabulate():
    data = {
        "id": [1, 2, 3],
        "name": ["Videogame", "Laptop", None],
        "active": [True, False, True],
    }

    assert tabulate(pa.RecordBatch.from_pydict(data)) == "\n".join(
        [
            "id | name      | active",
            "-- | --------- | ------",
            "1  | Videogame | true",
            "2  | Laptop    | false",
            "3  | NULL      | true",
        ]
    )


def test_tabulate_max_rows():
    batch = pa.RecordBatch.from_pydict({"n": list(range(5))})
    text = tabulate(batch, max_rows=2)

    assert text.splitlines() == ["n", "-", "0", "1", "... and 3 more rows"]


def test_format_value():
    assert format_value(None) == "NULL"
    assert format_value(1.5) == "1.50"
    assert format_value(Decimal("1.500")) == "1.500"
    assert format_value(datetime.datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02 03:04:05"
    assert format_value(datetime.date(2024, 1, 2)) == "2024-01-02"
    assert format_value("x" * 40) == "x" * 27 + "..."
