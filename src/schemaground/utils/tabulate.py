"""Format the rows of a table into text for print.

The `tabulate` function takes a `pyarrow.RecordBatch`, like the one
returned by :meth:`schemaground.storage.StorageEngine.scan`, and
formats it into a text table. Long strings are truncated, nulls are
shown as ``NULL`` and only the first rows are displayed.

Example:

    >>> import pyarrow as pa
    >>> data = {
    ...     "id": [1, 2, 3],
    ...     "name": ["Videogame", "Laptop", None],
    ...     "active": [True, False, True],
    ... }
    >>> rows = pa.RecordBatch.from_pydict(data)
    >>> print(tabulate(rows))
    id | name      | active
    -- | --------- | ------
    1  | Videogame | true
    2  | Laptop    | false
    3  | NULL      | true
"""

import datetime
from decimal import Decimal
from typing import Any

from pyarrow import RecordBatch

MAX_VALUE_WIDTH = 30


def tabulate(recordbatch: RecordBatch, max_rows: int = 20) -> str:
    """Format a RecordBatch into a text table.

    When the batch has more than ``max_rows`` rows, a trailing
    line reports how many rows were not displayed.
    """
    cols = recordbatch.column_names
    rows = [
        [format_value(row[c]) for c in cols]
        for row in recordbatch.slice(length=max_rows).to_pylist()
    ]

    colsizes = compute_max_colsize(cols, rows)
    header = [maketablerow(cols, colsizes=colsizes)]
    separator = [maketablerow(["-"] * len(cols), colsizes=colsizes, fillvalue="-")]
    textrows = [maketablerow(row, colsizes=colsizes) for row in rows]

    table = "\n".join(header + separator + textrows)
    if recordbatch.num_rows > max_rows:
        table += f"\n... and {recordbatch.num_rows - max_rows} more rows"
    return table


def compute_max_colsize(cols: list[str], rows: list[list[str]]) -> list[int]:
    return [
        max([len(row[colidx]) for row in rows] + [len(cols[colidx])])
        for colidx, _ in enumerate(cols)
    ]


def maketablerow(cols: list[str], colsizes: list[int], fillvalue: str = " ") -> str:
    return " | ".join(
        [col.ljust(colsizes[idx], fillvalue) for idx, col in enumerate(cols)]
    ).rstrip()


def format_value(v: Any) -> str:
    """Format a value to be printed in the table.

    Decimals keep all their digits, as their scale
    is part of the column type.
    """
    if v is None:
        return "NULL"
    elif isinstance(v, bool):
        return "true" if v else "false"
    elif isinstance(v, float):
        return f"{v:.2f}"
    elif isinstance(v, Decimal):
        return str(v)
    elif isinstance(v, datetime.datetime):
        return v.isoformat(sep=" ")

    v = str(v)
    if len(v) > MAX_VALUE_WIDTH:
        v = v[: MAX_VALUE_WIDTH - 3] + "..."
    return v
