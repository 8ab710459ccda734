"""Shared UI state: navigation mode, collections, popup and pending input."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Union

from haos_tui.models import Collection, EntityState, EventInfo, ServiceInfo

Subject = Union[EventInfo, ServiceInfo, EntityState]


class Pane(Enum):
    EVENTS = "events"
    SERVICES = "services"
    STATES = "states"
    POPUP = "popup"
    SEARCH = "search"
    CLOSED = "closed"


class PopUpTarget(Enum):
    EVENTS = "events"
    SERVICES = "services"
    STATES = "states"
    NONE = "none"


@dataclass(frozen=True)
class NavigationMode:
    pane: Pane
    target: PopUpTarget | None = None

    @classmethod
    def popup(cls, target: PopUpTarget) -> "NavigationMode":
        return cls(Pane.POPUP, target)

    @property
    def is_base(self) -> bool:
        return self.pane in BASE_PANES

    @property
    def is_popup(self) -> bool:
        return self.pane is Pane.POPUP

    @property
    def is_closed(self) -> bool:
        return self.pane is Pane.CLOSED

    def base(self) -> "NavigationMode":
        """Base pane a popup belongs to. ``PopUp(None)`` falls back to Events."""
        if self.is_popup:
            return BASE_FOR_TARGET.get(self.target, EVENTS)
        return self

    def __str__(self) -> str:
        if self.is_popup and self.target is not None:
            return f"PopUp({self.target.value})"
        return self.pane.value


BASE_PANES = (Pane.EVENTS, Pane.SERVICES, Pane.STATES)

EVENTS = NavigationMode(Pane.EVENTS)
SERVICES = NavigationMode(Pane.SERVICES)
STATES = NavigationMode(Pane.STATES)
SEARCH = NavigationMode(Pane.SEARCH)
CLOSED = NavigationMode(Pane.CLOSED)

BASE_FOR_TARGET = {
    PopUpTarget.EVENTS: EVENTS,
    PopUpTarget.SERVICES: SERVICES,
    PopUpTarget.STATES: STATES,
}
TARGET_FOR_BASE = {mode: target for target, mode in BASE_FOR_TARGET.items()}


@dataclass
class PopUpSelection:
    """Popup bound to one item, with a cursor over a service's operations."""

    subject: Subject | None = None
    operations: list[str] = field(default_factory=list)
    cursor: int | None = None
    highlighted: str = ""

    @classmethod
    def open_on(cls, subject: Subject) -> "PopUpSelection":
        operations = subject.operation_names() if isinstance(subject, ServiceInfo) else []
        selection = cls(subject=subject, operations=operations)
        if operations:
            selection.cursor = 0
            selection.highlighted = operations[0]
        return selection

    def move(self, delta: int) -> None:
        if not self.operations:
            self.cursor = None
            self.highlighted = ""
            return
        current = 0 if self.cursor is None else self.cursor
        self.cursor = (current + delta) % len(self.operations)
        self.highlighted = self.operations[self.cursor]

    def copy(self) -> "PopUpSelection":
        return PopUpSelection(
            subject=self.subject,
            operations=list(self.operations),
            cursor=self.cursor,
            highlighted=self.highlighted,
        )


@dataclass
class PendingInput:
    """The single input draft. ``generation`` moves on every clear."""

    buffer: str = ""
    ready: bool = False
    generation: int = 0

    def clear(self) -> None:
        self.buffer = ""
        self.ready = False
        self.generation += 1


@dataclass
class SyncStatus:
    last_success: datetime | None = None
    last_error: str | None = None
    # outlives refreshes; only the next write attempt replaces it
    last_write_error: str | None = None


@dataclass
class SharedState:
    mode: NavigationMode = EVENTS
    events: Collection[EventInfo] = field(default_factory=Collection)
    services: Collection[ServiceInfo] = field(default_factory=Collection)
    states: Collection[EntityState] = field(default_factory=Collection)
    popup: PopUpSelection = field(default_factory=PopUpSelection)
    pending_input: PendingInput = field(default_factory=PendingInput)
    sync: SyncStatus = field(default_factory=SyncStatus)

    def collection_for(self, mode: NavigationMode) -> Collection | None:
        base = mode.base()
        if base == EVENTS:
            return self.events
        if base == SERVICES:
            return self.services
        if base == STATES:
            return self.states
        return None

    def snapshot(self, version: int, write_in_flight: bool = False) -> "Snapshot":
        return Snapshot(
            version=version,
            mode=self.mode,
            events=self.events.copy(),
            services=self.services.copy(),
            states=self.states.copy(),
            popup=self.popup.copy(),
            pending_buffer=self.pending_input.buffer,
            pending_ready=self.pending_input.ready,
            write_in_flight=write_in_flight,
            last_success=self.sync.last_success,
            last_error=self.sync.last_error,
            last_write_error=self.sync.last_write_error,
        )


@dataclass(frozen=True)
class Snapshot:
    """Read-only copy of the state used for one render pass."""

    version: int
    mode: NavigationMode
    events: Collection[EventInfo]
    services: Collection[ServiceInfo]
    states: Collection[EntityState]
    popup: PopUpSelection
    pending_buffer: str = ""
    pending_ready: bool = False
    write_in_flight: bool = False
    last_success: datetime | None = None
    last_error: str | None = None
    last_write_error: str | None = None
