"""Foreground actor: terminal events in, store commands out."""

from __future__ import annotations

import logging
from typing import Protocol

from haos_tui.errors import UnsupportedOperationError
from haos_tui.keys import FocusChange, InputDecodeError, InputEvent, KeyPress, Resize
from haos_tui.navigation import Command
from haos_tui.store import StateStore

logger = logging.getLogger(__name__)

POLL_TIMEOUT_SECONDS = 0.25

NAMED_KEYS = {
    "up": Command.UP,
    "down": Command.DOWN,
    "enter": Command.ENTER,
    "escape": Command.ESCAPE,
    "backspace": Command.BACKSPACE,
}

CTRL_KEYS = {
    "e": Command.SHOW_EVENTS,
    "s": Command.SHOW_SERVICES,
    "x": Command.SHOW_STATES,
    "c": Command.QUIT,
}


class EventSource(Protocol):
    def poll(self, timeout: float) -> InputEvent | None: ...


def decode_event(event: InputEvent) -> tuple[Command, str | None] | None:
    if isinstance(event, Resize):
        return Command.REPAINT, None
    if isinstance(event, FocusChange):
        logger.debug("focus %s", "gained" if event.focused else "lost")
        return None
    if not isinstance(event, KeyPress):
        return None
    if event.ctrl:
        command = CTRL_KEYS.get(event.code)
        return (command, None) if command else None
    if event.code in NAMED_KEYS:
        return NAMED_KEYS[event.code], None
    if len(event.code) == 1 and event.code.isprintable():
        return Command.CHAR, event.code
    return None


class InputListener:
    def __init__(
        self,
        store: StateStore,
        source: EventSource,
        poll_timeout: float = POLL_TIMEOUT_SECONDS,
    ) -> None:
        self.store = store
        self.source = source
        self.poll_timeout = poll_timeout

    def run(self) -> None:
        logger.info("input listener started")
        while not self.store.is_closed():
            try:
                event = self.source.poll(self.poll_timeout)
            except InputDecodeError as exc:
                logger.warning("skipping undecodable input: %s", exc)
                continue
            except EOFError:
                logger.warning("terminal input closed, shutting down")
                self.store.close()
                break
            if event is None or self.store.is_closed():
                continue
            self.handle(event)
        logger.info("input listener stopped")

    def handle(self, event: InputEvent) -> None:
        decoded = decode_event(event)
        if decoded is None:
            return
        command, char = decoded
        if command is Command.REPAINT:
            self.store.request_repaint()
            return
        try:
            mode = self.store.dispatch(command, char)
        except UnsupportedOperationError as exc:
            logger.warning("rejected %s: %s", command.value, exc)
            return
        logger.debug("%s -> %s", command.value, mode)
        if mode.is_closed:
            logger.info("quit requested")
