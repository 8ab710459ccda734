"""Navigation state machine.

``TRANSITIONS`` is the full mode table (mode x command -> mode); anything not
listed leaves the mode unchanged. ``apply_command`` layers the data side on
top of it: cursor movement, popup snapshots and the pending input buffer.
Nothing here locks; callers hold the store lock.
"""

from __future__ import annotations

import logging
from enum import Enum

from haos_tui.errors import UnsupportedOperationError
from haos_tui.state import (
    BASE_FOR_TARGET,
    CLOSED,
    EVENTS,
    SEARCH,
    SERVICES,
    STATES,
    TARGET_FOR_BASE,
    NavigationMode,
    PopUpSelection,
    PopUpTarget,
    SharedState,
)

logger = logging.getLogger(__name__)


class Command(Enum):
    UP = "up"
    DOWN = "down"
    ENTER = "enter"
    ESCAPE = "escape"
    BACKSPACE = "backspace"
    CHAR = "char"
    SEARCH = "search"
    QUIT = "quit"
    SHOW_EVENTS = "show_events"
    SHOW_SERVICES = "show_services"
    SHOW_STATES = "show_states"
    REPAINT = "repaint"


QUIT_KEY = "q"
SEARCH_KEY = "/"

SWITCH_COMMANDS = {
    Command.SHOW_EVENTS: EVENTS,
    Command.SHOW_SERVICES: SERVICES,
    Command.SHOW_STATES: STATES,
}


def _build_transitions() -> dict[tuple[NavigationMode, Command], NavigationMode]:
    table: dict[tuple[NavigationMode, Command], NavigationMode] = {}
    for base, target in TARGET_FOR_BASE.items():
        table[(base, Command.ENTER)] = NavigationMode.popup(target)
        table[(base, Command.QUIT)] = CLOSED
        for command, destination in SWITCH_COMMANDS.items():
            table[(base, command)] = destination
    for target in PopUpTarget:
        popup = NavigationMode.popup(target)
        table[(popup, Command.ESCAPE)] = BASE_FOR_TARGET.get(target, EVENTS)
        table[(popup, Command.SEARCH)] = SEARCH
        table[(popup, Command.QUIT)] = CLOSED
    table[(SEARCH, Command.ESCAPE)] = EVENTS
    table[(SEARCH, Command.QUIT)] = CLOSED
    return table


TRANSITIONS = _build_transitions()


def transition(mode: NavigationMode, command: Command) -> NavigationMode:
    return TRANSITIONS.get((mode, command), mode)


def _resolve_char(mode: NavigationMode, char: str | None) -> Command:
    """Map a printable key to a command for the current mode."""
    if mode.is_popup:
        return Command.SEARCH if char == SEARCH_KEY else Command.CHAR
    if char == QUIT_KEY:
        return Command.QUIT
    if mode == SEARCH:
        raise UnsupportedOperationError("search is not implemented; press Escape to leave")
    return Command.REPAINT


def _move(state: SharedState, delta: int) -> None:
    if state.mode.is_popup:
        if state.mode.target is PopUpTarget.SERVICES:
            state.popup.move(delta)
        return
    collection = state.collection_for(state.mode)
    if collection is not None and state.mode.is_base:
        collection.move(delta)


def _submit(state: SharedState, write_in_flight: bool) -> None:
    if state.pending_input.ready or write_in_flight:
        raise UnsupportedOperationError("a write is already pending; wait for it to be sent")
    state.pending_input.ready = True


def _edit(state: SharedState, command: Command, char: str | None) -> None:
    pending = state.pending_input
    if pending.ready:
        raise UnsupportedOperationError("input is locked until the pending write is sent")
    if command is Command.BACKSPACE:
        pending.buffer = pending.buffer[:-1]
    elif char:
        pending.buffer += char


def _open_popup(state: SharedState) -> bool:
    item = state.collection_for(state.mode).selected_item()
    if item is None:
        logger.debug("nothing selected in %s, popup not opened", state.mode)
        return False
    state.popup = PopUpSelection.open_on(item)
    return True


def apply_command(
    state: SharedState,
    command: Command,
    char: str | None = None,
    write_in_flight: bool = False,
) -> NavigationMode:
    """Apply one input command to ``state`` and return the resulting mode.

    Raises ``UnsupportedOperationError`` without touching ``state`` when the
    command is rejected.
    """
    mode = state.mode
    if mode.is_closed:
        return mode

    if command is Command.CHAR:
        command = _resolve_char(mode, char)

    if command in (Command.UP, Command.DOWN):
        _move(state, -1 if command is Command.UP else 1)
        return mode

    if command is Command.ENTER:
        if mode.is_popup:
            _submit(state, write_in_flight)
            return mode
        if mode == SEARCH:
            raise UnsupportedOperationError("search is not implemented; press Escape to leave")
        if not _open_popup(state):
            return mode

    if command in (Command.CHAR, Command.BACKSPACE):
        if mode.is_popup:
            _edit(state, command, char)
        return mode

    next_mode = transition(mode, command)
    if mode.is_popup and next_mode != mode:
        state.pending_input.clear()
        state.popup = PopUpSelection()
    if next_mode == SEARCH:
        logger.warning("search is not implemented; press Escape to leave")
    state.mode = next_mode
    return next_mode
