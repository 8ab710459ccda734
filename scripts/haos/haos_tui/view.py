"""Build one full frame from a state snapshot."""

from __future__ import annotations

from rich.console import Group
from rich.layout import Layout
from rich.panel import Panel
from rich.text import Text

from haos_tui.layout import HEADER_ROWS, select_layout_mode, table_rows
from haos_tui.panels.events import render as render_events
from haos_tui.panels.header import render as render_header
from haos_tui.panels.popup import render as render_popup
from haos_tui.panels.services import render as render_services
from haos_tui.panels.states import render as render_states
from haos_tui.state import EVENTS, SEARCH, SERVICES, STATES, NavigationMode, Snapshot

SEARCH_MESSAGE = "Search is not implemented. Press Esc to go back."


def _pane_panels(snapshot: Snapshot, rows: int) -> dict[NavigationMode, Panel]:
    active = snapshot.mode.base()
    return {
        EVENTS: render_events(snapshot.events, active == EVENTS, rows),
        SERVICES: render_services(snapshot.services, active == SERVICES, rows),
        STATES: render_states(snapshot.states, active == STATES, rows),
    }


def _search_panel() -> Panel:
    return Panel(Text(SEARCH_MESSAGE, style="yellow"), title="[bold]Search[/bold]", border_style="yellow")


def render_dashboard(snapshot: Snapshot, hub_url: str, width: int, height: int):
    mode = select_layout_mode(width)
    rows = table_rows(height)
    header = render_header(snapshot, hub_url, mode)
    panes = _pane_panels(snapshot, rows)
    focus = snapshot.mode.base()

    if snapshot.mode == SEARCH:
        focus_panel = _search_panel()
    elif snapshot.mode.is_popup:
        focus_panel = render_popup(snapshot, rows)
    else:
        focus_panel = None

    if mode == "narrow":
        if focus_panel is not None:
            return Group(header, focus_panel)
        return Group(header, panes.get(focus, panes[EVENTS]))

    layout = Layout()
    layout.split_column(
        Layout(header, name="header", size=HEADER_ROWS),
        Layout(name="body"),
    )

    if focus_panel is not None:
        base = panes.get(focus, panes[EVENTS])
        layout["body"].split_row(
            Layout(base, name="base", ratio=2),
            Layout(focus_panel, name="popup", ratio=3),
        )
        return layout

    if mode == "medium":
        others = [panes[key] for key in (EVENTS, SERVICES, STATES) if key != focus]
        layout["body"].split_row(
            Layout(panes.get(focus, panes[EVENTS]), name="focus", ratio=3),
            Layout(Group(*others), name="others", ratio=2),
        )
        return layout

    # wide
    layout["body"].split_row(
        Layout(panes[EVENTS], name="events", ratio=2),
        Layout(panes[SERVICES], name="services", ratio=2),
        Layout(panes[STATES], name="states", ratio=3),
    )
    return layout
