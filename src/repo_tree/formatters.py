"""Rich formatters for registry trees and manifest history."""

from __future__ import annotations

import io
import re
from collections.abc import Sequence
from typing import Any

from rich import box
from rich.cells import cell_len
from rich.console import Console
from rich.table import Table as RichTable
from rich.text import Text

from repo_tree.history import ID_WIDTH, CompatibilityRow
from repo_tree.output import OutputFormat, emit
from repo_tree.tree import NAMESPACE, REPOSITORY, DisplayRow

DEPTH_STYLES = {
    NAMESPACE: "bold blue",
    REPOSITORY: "green",
}
TAG_STYLE = "bright_black"

HISTORY_COLUMNS = ["id", "parent", "os", "created", "Cmd", "config"]

SECTION_SEPARATOR = "------------------------"

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")


def style_for_depth(depth: int) -> str:
    return DEPTH_STYLES.get(depth, TAG_STYLE)


def _history_record(row: CompatibilityRow) -> dict[str, Any]:
    data = row.as_dict()
    data["Cmd"] = data.pop("cmd")
    return data


def _cell_text(value: str) -> str:
    """Tabs expanded and control characters shown as escapes, so cells measure true."""
    return _CONTROL_CHARS.sub(lambda m: f"\\x{ord(m.group()):02x}", value.expandtabs())


def _display_record(row: CompatibilityRow) -> dict[str, str]:
    return {col: _cell_text(value) for col, value in _history_record(row).items()}


# ─── compatibility table ─────────────────────────────────────


def _table_width(records: Sequence[dict[str, Any]]) -> int:
    """Width at which no column of the table has to wrap."""
    widths = []
    for col in HISTORY_COLUMNS:
        cells = [col] + [str(r.get(col, "")) for r in records]
        widest = max(cell_len(line) for cell in cells for line in cell.split("\n"))
        widths.append(max(widest, ID_WIDTH))
    # padding and a border per column, the closing border, some slack
    return sum(widths) + 3 * len(widths) + 1 + 4


def build_history_table(rows: Sequence[CompatibilityRow], *, wrap: bool = False) -> RichTable:
    """Box-drawn history table; cells only wrap when *wrap* is set."""
    table = RichTable(box=box.SQUARE, show_lines=True)
    for col in HISTORY_COLUMNS:
        min_width = ID_WIDTH if col in ("id", "parent") else None
        table.add_column(col, justify="left", no_wrap=not wrap, min_width=min_width)
    for row in rows:
        record = _display_record(row)
        # Text() keeps brackets in commands from being read as markup
        table.add_row(*(Text(record[col]) for col in HISTORY_COLUMNS))
    return table


def render_compatibility_table(rows: Sequence[CompatibilityRow]) -> str:
    """Render history rows as a fixed-column, box-drawn plain-text table."""
    records = [_display_record(r) for r in rows]
    buf = io.StringIO()
    console = Console(
        file=buf,
        width=_table_width(records),
        color_system=None,
        force_terminal=False,
        highlight=False,
    )
    console.print(build_history_table(rows))
    return buf.getvalue().rstrip("\n")


def build_details_text(rows: Sequence[CompatibilityRow], full_manifest: str) -> str:
    """Overlay content: history table, separator line, then the raw manifest."""
    return f"{render_compatibility_table(rows)}\n{SECTION_SEPARATOR}\n{full_manifest}"


# ─── list ────────────────────────────────────────────────────


def render_tree(
    console: Console,
    rows: Sequence[DisplayRow],
    fmt: OutputFormat = OutputFormat.TABLE,
    *,
    title: str = "",
) -> None:
    """Render the flattened registry tree."""
    if fmt != OutputFormat.TABLE:
        flat = [{"Depth": r.depth, "Path": r.full_path} for r in rows]
        emit(console, flat, ["Depth", "Path"], fmt, title=title)
        return

    if title:
        console.print(f"[bold]{title}[/bold]")
    for row in rows:
        console.print(Text(row.label, style=style_for_depth(row.depth)))


# ─── history ─────────────────────────────────────────────────


def render_history(
    console: Console,
    rows: Sequence[CompatibilityRow],
    fmt: OutputFormat = OutputFormat.TABLE,
    *,
    title: str = "",
    full_manifest: str | None = None,
) -> None:
    """Render compatibility rows, optionally followed by the raw manifest."""
    if fmt != OutputFormat.TABLE:
        emit(console, [_history_record(r) for r in rows], HISTORY_COLUMNS, fmt, title=title)
        return

    if not rows:
        console.print("[dim](no v1Compatibility history in manifest)[/dim]")
    else:
        table = build_history_table(rows, wrap=True)
        table.title = title or None
        console.print(table)

    if full_manifest is not None:
        console.print(SECTION_SEPARATOR)
        console.print(Text(full_manifest))
