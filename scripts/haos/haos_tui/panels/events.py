"""Events panel renderer."""

from __future__ import annotations

from rich.table import Table

from haos_tui.models import Collection, EventInfo
from haos_tui.panels import panel_from_table, row_style, visible_window


def render(events: Collection[EventInfo], active: bool, rows: int = 20):
    table = Table(box=None, expand=True)
    table.add_column("Event", overflow="fold")
    table.add_column("Listeners", justify="right", no_wrap=True)

    if not events.items:
        table.add_row("none", "-")
    else:
        for index in visible_window(len(events.items), events.selected, rows):
            event = events.items[index]
            table.add_row(
                event.name,
                str(event.listener_count),
                style=row_style(index, events.selected),
            )

    return panel_from_table(f"Events ({len(events.items)})", active, table)
