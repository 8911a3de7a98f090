"""Machine-readable and Rich table output for CLI commands."""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Sequence
from enum import Enum
from typing import Any

from rich.console import Console
from rich.table import Table as RichTable
from rich.text import Text


class OutputFormat(str, Enum):
    TABLE = "table"
    JSON = "json"
    CSV = "csv"


def emit(
    console: Console,
    data: Sequence[dict[str, Any]],
    columns: list[str],
    fmt: OutputFormat,
    *,
    title: str = "",
) -> None:
    """Emit row dicts in the requested format.

    JSON and CSV bypass Rich entirely so the output can be piped; only the
    listed columns are written, in order.
    """
    if fmt == OutputFormat.JSON:
        rows = [{col: row.get(col) for col in columns} for row in data]
        print(json.dumps(rows, indent=2, default=str, ensure_ascii=False))
    elif fmt == OutputFormat.CSV:
        buf = io.StringIO()
        writer = csv.DictWriter(buf, fieldnames=columns, extrasaction="ignore")
        writer.writeheader()
        for row in data:
            writer.writerow({col: row.get(col, "") for col in columns})
        print(buf.getvalue(), end="")
    else:
        table = RichTable(title=title or None, show_lines=True)
        for col in columns:
            table.add_column(col)
        for row in data:
            table.add_row(*(Text(str(row.get(col, ""))) for col in columns))
        console.print(table)
