"""Render actor: wait for a change, snapshot, draw, repeat."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from rich.console import Console
from rich.live import Live

from haos_tui.state import Snapshot
from haos_tui.store import StateStore
from haos_tui.view import render_dashboard

logger = logging.getLogger(__name__)

WAIT_TIMEOUT_SECONDS = 0.5


class Surface(Protocol):
    @property
    def size(self) -> tuple[int, int]: ...

    def draw(self, renderable: Any) -> None: ...


class LiveSurface:
    """Full-frame redraws through a running ``rich.live.Live``."""

    def __init__(self, live: Live, console: Console) -> None:
        self.live = live
        self.console = console

    @property
    def size(self) -> tuple[int, int]:
        width, height = self.console.size
        return width, height

    def draw(self, renderable: Any) -> None:
        self.live.update(renderable, refresh=True)


class Renderer:
    def __init__(
        self,
        store: StateStore,
        surface: Surface,
        hub_url: str,
        wait_timeout: float = WAIT_TIMEOUT_SECONDS,
    ) -> None:
        self.store = store
        self.surface = surface
        self.hub_url = hub_url
        self.wait_timeout = wait_timeout
        self.frames = 0

    def run(self) -> None:
        logger.info("renderer started")
        drawn = -1
        while True:
            changed = self.store.wait_for_change(drawn, self.wait_timeout)
            if self.store.is_closed():
                break
            if not changed:
                continue
            snapshot = self.store.snapshot()
            drawn = snapshot.version
            self.draw(snapshot)
        logger.info("renderer stopped after %d frames", self.frames)

    def draw(self, snapshot: Snapshot) -> None:
        width, height = self.surface.size
        self.surface.draw(render_dashboard(snapshot, self.hub_url, width, height))
        self.frames += 1
