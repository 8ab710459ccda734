"""Entity states panel renderer."""

from __future__ import annotations

from datetime import datetime

from rich.table import Table

from haos_tui.formatting import age_since
from haos_tui.models import Collection, EntityState
from haos_tui.panels import panel_from_table, row_style, visible_window


def render(states: Collection[EntityState], active: bool, rows: int = 20, now: datetime | None = None):
    table = Table(box=None, expand=True)
    table.add_column("Entity", overflow="fold")
    table.add_column("State", overflow="fold")
    table.add_column("Changed", justify="right", no_wrap=True)

    if not states.items:
        table.add_row("none", "unknown", "-")
    else:
        for index in visible_window(len(states.items), states.selected, rows):
            entity = states.items[index]
            table.add_row(
                entity.entity_id,
                entity.state,
                age_since(entity.last_changed, now),
                style=row_style(index, states.selected),
            )

    return panel_from_table(f"States ({len(states.items)})", active, table)
