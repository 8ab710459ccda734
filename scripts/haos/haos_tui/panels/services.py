"""Services panel renderer."""

from __future__ import annotations

from rich.table import Table

from haos_tui.formatting import domain_label
from haos_tui.models import Collection, ServiceInfo
from haos_tui.panels import panel_from_table, row_style, visible_window


def render(services: Collection[ServiceInfo], active: bool, rows: int = 20):
    table = Table(box=None, expand=True)
    table.add_column("Domain", no_wrap=True)
    table.add_column("Name", overflow="fold")
    table.add_column("Services", justify="right", no_wrap=True)

    if not services.items:
        table.add_row("none", "-", "0")
    else:
        for index in visible_window(len(services.items), services.selected, rows):
            service = services.items[index]
            table.add_row(
                service.domain,
                domain_label(service.domain),
                str(len(service.operations)),
                style=row_style(index, services.selected),
            )

    return panel_from_table(f"Services ({len(services.items)})", active, table)
