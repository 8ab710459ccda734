"""Header renderer."""

from __future__ import annotations

from rich.markup import escape
from rich.panel import Panel

from haos_tui.formatting import display_time
from haos_tui.state import Snapshot

KEY_HINTS = "^E events  ^S services  ^X states  ↑/↓ move  Enter open  Esc back  q quit"


def render(snapshot: Snapshot, hub_url: str, layout_mode: str) -> Panel:
    text = (
        f"Hub: [bold]{escape(hub_url)}[/bold]   "
        f"Mode: [bold]{snapshot.mode}[/bold]   "
        f"Last sync: [bold]{display_time(snapshot.last_success)}[/bold]   "
        f"Layout: [bold]{layout_mode}[/bold]"
    )
    errors = [message for message in (snapshot.last_error, snapshot.last_write_error) if message]
    if errors:
        text += f"\n[red]{escape('; '.join(errors))}[/red]"
    else:
        text += f"\n[dim]{KEY_HINTS}[/dim]"
    border = "red" if errors else "cyan"
    return Panel(text, title="[bold]Hub Dashboard[/bold]", border_style=border)
