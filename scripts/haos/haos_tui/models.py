"""Shared model contracts for hub data flowing into the TUI."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, Sequence, TypeVar

from haos_tui.errors import HubPayloadError
from haos_tui.formatting import parse_iso_timestamp

T = TypeVar("T")


def _require(payload: Any, key: str, kind: type | tuple[type, ...]) -> Any:
    if not isinstance(payload, dict):
        raise HubPayloadError(f"expected object, got {type(payload).__name__}")
    if key not in payload:
        raise HubPayloadError(f"missing key {key!r}")
    value = payload[key]
    if not isinstance(value, kind) or (isinstance(value, bool) and kind is int):
        raise HubPayloadError(f"key {key!r} has unexpected type {type(value).__name__}")
    return value


@dataclass(frozen=True)
class EventInfo:
    name: str
    listener_count: int

    @classmethod
    def from_dict(cls, payload: Any) -> "EventInfo":
        return cls(
            name=_require(payload, "event", str),
            listener_count=_require(payload, "listener_count", int),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"event": self.name, "listener_count": self.listener_count}


@dataclass(frozen=True)
class ServiceInfo:
    domain: str
    operations: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: Any) -> "ServiceInfo":
        return cls(
            domain=_require(payload, "domain", str),
            operations=dict(_require(payload, "services", dict)),
        )

    def operation_names(self) -> list[str]:
        return list(self.operations)

    def to_dict(self) -> dict[str, Any]:
        return {"domain": self.domain, "services": self.operations}


@dataclass(frozen=True)
class EntityState:
    entity_id: str
    state: str
    last_changed: datetime | None = None
    attributes: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: Any) -> "EntityState":
        attributes = payload.get("attributes") if isinstance(payload, dict) else None
        if attributes is not None and not isinstance(attributes, dict):
            raise HubPayloadError("key 'attributes' has unexpected type")
        entity_id = _require(payload, "entity_id", str)
        state = _require(payload, "state", (str, int, float))
        changed = payload.get("last_changed")
        return cls(
            entity_id=entity_id,
            state=str(state),
            last_changed=parse_iso_timestamp(changed) if isinstance(changed, str) else None,
            attributes=dict(attributes or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity_id": self.entity_id,
            "state": self.state,
            "last_changed": self.last_changed.isoformat() if self.last_changed else None,
            "attributes": self.attributes,
        }


@dataclass
class Collection(Generic[T]):
    """An ordered list plus a selection cursor.

    ``selected`` is ``None`` exactly when ``items`` is empty, otherwise it is a
    valid index.
    """

    items: list[T] = field(default_factory=list)
    selected: int | None = None

    def __len__(self) -> int:
        return len(self.items)

    def move(self, delta: int) -> None:
        if not self.items:
            self.selected = None
            return
        current = 0 if self.selected is None else self.selected
        self.selected = (current + delta) % len(self.items)

    def replace(self, items: Sequence[T]) -> None:
        self.items = list(items)
        size = len(self.items)
        if size == 0:
            self.selected = None
        elif self.selected is None:
            self.selected = 0
        elif self.selected >= size:
            self.selected = size - 1

    def selected_item(self) -> T | None:
        if self.selected is None:
            return None
        return self.items[self.selected]

    def copy(self) -> "Collection[T]":
        return Collection(items=list(self.items), selected=self.selected)
