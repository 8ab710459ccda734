"""Panel rendering helpers."""

from __future__ import annotations

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

SELECTED_STYLE = "black on yellow"

PANE_BORDER = {
    True: "yellow",
    False: "cyan",
}


def border_for(active: bool) -> str:
    return PANE_BORDER[bool(active)]


def empty_panel(title: str, message: str = "No data", active: bool = False) -> Panel:
    return Panel(Text(message, style="dim"), title=f"[bold]{title}[/bold]", border_style=border_for(active))


def kv_table(rows: list[tuple[str, str]]) -> Table:
    table = Table(box=None, show_header=False, expand=True, pad_edge=False)
    table.add_column("key", style="bold", no_wrap=True)
    table.add_column("value", style="default", overflow="fold")
    for key, value in rows:
        table.add_row(key, value)
    return table


def panel_from_table(title: str, active: bool, table: Table) -> Panel:
    return Panel(table, title=f"[bold]{title}[/bold]", border_style=border_for(active))


def visible_window(count: int, selected: int | None, rows: int) -> range:
    """Slice of ``count`` rows to show so that ``selected`` stays on screen."""
    rows = max(1, rows)
    if count <= rows:
        return range(count)
    anchor = selected or 0
    start = min(max(0, anchor - rows // 2), count - rows)
    return range(start, start + rows)


def row_style(index: int, selected: int | None) -> str | None:
    return SELECTED_STYLE if index == selected else None
