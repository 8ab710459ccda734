"""Single owner of the shared UI state.

Every read and write goes through ``StateStore``, which holds one condition
(one lock) for the whole state. Mutations bump ``version`` and notify while
the lock is still held, so a renderer that checks the version and waits under
the same lock can never miss a change. Shutdown is a separate ``Event`` so
sleepers that do not care about data changes can wait on it alone.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Sequence

from haos_tui.actions import WriteAction, build_write_action
from haos_tui.errors import StateCorruptedError, UnsupportedOperationError
from haos_tui.models import EntityState, EventInfo, ServiceInfo
from haos_tui.navigation import Command, apply_command
from haos_tui.state import CLOSED, NavigationMode, SharedState, Snapshot

logger = logging.getLogger(__name__)


class StateStore:
    def __init__(self, state: SharedState | None = None) -> None:
        self._state = state or SharedState()
        self._cond = threading.Condition()
        self._shutdown = threading.Event()
        self._version = 0
        self._write_in_flight = False
        self._taken_generation: int | None = None
        self._corrupted = False
        if self._state.mode.is_closed:
            self._shutdown.set()

    @contextmanager
    def _mutating(self) -> Iterator[SharedState]:
        with self._cond:
            self._check()
            try:
                yield self._state
            except UnsupportedOperationError:
                raise
            except Exception as exc:
                self._corrupted = True
                self._shutdown.set()
                self._cond.notify_all()
                raise StateCorruptedError(f"state mutation failed: {exc}") from exc
            self._changed()

    def _changed(self) -> None:
        # caller holds the lock
        self._version += 1
        if self._state.mode.is_closed:
            self._shutdown.set()
        self._cond.notify_all()

    def _check(self) -> None:
        if self._corrupted:
            raise StateCorruptedError("shared state is corrupted")

    @property
    def version(self) -> int:
        with self._cond:
            return self._version

    def is_closed(self) -> bool:
        return self._shutdown.is_set()

    def dispatch(self, command: Command, char: str | None = None) -> NavigationMode:
        with self._mutating() as state:
            return apply_command(state, command, char, write_in_flight=self._write_in_flight)

    def close(self) -> None:
        with self._mutating() as state:
            state.mode = CLOSED

    def request_repaint(self) -> None:
        with self._mutating():
            pass

    def apply_fetch(
        self,
        events: Sequence[EventInfo],
        services: Sequence[ServiceInfo],
        states: Sequence[EntityState],
    ) -> None:
        with self._mutating() as state:
            state.events.replace(events)
            state.services.replace(services)
            state.states.replace(states)
            state.sync.last_success = datetime.now(timezone.utc)
            state.sync.last_error = None

    def record_sync_error(self, message: str) -> None:
        with self._mutating() as state:
            state.sync.last_error = message

    def take_pending_write(self) -> WriteAction | None:
        """Return the submitted write, marking it in flight.

        A submission that cannot be turned into a write is cleared and the
        ``UnsupportedOperationError`` is raised after the lock is released.
        """
        with self._cond:
            self._check()
            state = self._state
            if not state.pending_input.ready or self._write_in_flight:
                return None
            try:
                action = build_write_action(state)
            except UnsupportedOperationError as exc:
                state.pending_input.clear()
                self._changed()
                rejected = exc
            else:
                self._write_in_flight = True
                self._taken_generation = state.pending_input.generation
                self._changed()
                return action
        raise rejected

    def complete_write(self, error: str | None = None) -> None:
        """Finish the in-flight write and record its outcome.

        Only the submission that was taken is cleared. A draft started after
        the user left that popup belongs to a later write and is kept.
        """
        with self._mutating() as state:
            if state.pending_input.generation == self._taken_generation:
                state.pending_input.clear()
            state.sync.last_write_error = error
            self._write_in_flight = False
            self._taken_generation = None

    def snapshot(self) -> Snapshot:
        with self._cond:
            self._check()
            return self._state.snapshot(self._version, self._write_in_flight)

    def wait_for_change(self, since_version: int, timeout: float | None = None) -> bool:
        """Block until the version moves past ``since_version`` or shutdown.

        Returns ``True`` when there is something new to draw.
        """
        with self._cond:
            self._check()
            self._cond.wait_for(
                lambda: self._version != since_version or self._shutdown.is_set(),
                timeout,
            )
            self._check()
            return self._version != since_version

    def wait_closed(self, timeout: float | None = None) -> bool:
        return self._shutdown.wait(timeout)
