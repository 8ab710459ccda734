"""Popup renderer for the item the user pressed Enter on."""

from __future__ import annotations

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from haos_tui.formatting import compact_json, display_time, domain_label
from haos_tui.models import EntityState, EventInfo, ServiceInfo
from haos_tui.panels import empty_panel, kv_table, row_style, visible_window
from haos_tui.state import Snapshot

INPUT_HINTS = {
    "services": "target entity id, Enter to call",
    "states": "new state (JSON or text), Enter to set",
    "events": "sending events is not supported",
}


def _operations_table(service: ServiceInfo, cursor: int | None, rows: int) -> Table:
    table = Table(box=None, expand=True)
    table.add_column("Service", no_wrap=True)
    table.add_column("Description", overflow="fold")
    names = list(service.operations)
    if not names:
        table.add_row("none", "-")
    for index in visible_window(len(names), cursor, rows):
        name = names[index]
        description = service.operations[name]
        if isinstance(description, dict):
            description = description.get("description") or description.get("name") or compact_json(description)
        table.add_row(name, str(description), style=row_style(index, cursor))
    return table


def _state_table(entity: EntityState) -> Table:
    rows = [
        ("State", entity.state),
        ("Changed Last At", display_time(entity.last_changed)),
    ]
    for key, value in sorted(entity.attributes.items()):
        rows.append((str(key), compact_json(value, limit=80)))
    return kv_table(rows)


def _input_bar(snapshot: Snapshot, hint: str) -> Panel:
    if snapshot.pending_ready or snapshot.write_in_flight:
        status = Text(" sending…", style="yellow")
    else:
        status = Text("")
    line = Text.assemble(("> ", "bold"), snapshot.pending_buffer, status)
    return Panel(line, title=f"[dim]{hint}[/dim]", border_style="magenta")


def render(snapshot: Snapshot, rows: int = 15) -> Panel:
    subject = snapshot.popup.subject
    target = snapshot.mode.target.value if snapshot.mode.target else "none"
    hint = INPUT_HINTS.get(target, "")

    if isinstance(subject, ServiceInfo):
        body = _operations_table(subject, snapshot.popup.cursor, rows)
        title = f"{domain_label(subject.domain)} ({subject.domain})"
    elif isinstance(subject, EntityState):
        body = _state_table(subject)
        title = subject.entity_id
    elif isinstance(subject, EventInfo):
        body = kv_table([("Event", subject.name), ("Listeners", str(subject.listener_count))])
        title = subject.name
    else:
        return empty_panel("Popup", "Nothing selected", active=True)

    return Panel(
        Group(body, _input_bar(snapshot, hint)),
        title=f"[bold]{title}[/bold]",
        subtitle="[dim]Esc closes[/dim]",
        border_style="yellow",
    )
