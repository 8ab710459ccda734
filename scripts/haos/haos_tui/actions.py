"""Write actions composed in a popup and sent to the hub by the poller."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union

from haos_tui.errors import UnsupportedOperationError
from haos_tui.models import EntityState, ServiceInfo
from haos_tui.state import PopUpTarget, SharedState

if TYPE_CHECKING:
    from haos_tui.client import HubClient


@dataclass(frozen=True)
class SetStateAction:
    entity_id: str
    new_state: Any

    def send(self, client: "HubClient") -> Any:
        return client.set_state(self.entity_id, self.new_state)

    def describe(self) -> str:
        return f"set_state {self.entity_id} -> {self.new_state!r}"


@dataclass(frozen=True)
class CallServiceAction:
    domain: str
    operation: str
    target_entity_id: str | None = None

    def send(self, client: "HubClient") -> Any:
        return client.call_service(self.domain, self.operation, self.target_entity_id)

    def describe(self) -> str:
        target = self.target_entity_id or "-"
        return f"call_service {self.domain}.{self.operation} target={target}"


WriteAction = Union[SetStateAction, CallServiceAction]


def decode_state_value(text: str) -> Any:
    """Typed input is JSON when it parses, otherwise the raw text."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def build_write_action(state: SharedState) -> WriteAction:
    mode = state.mode
    subject = state.popup.subject
    buffer = state.pending_input.buffer

    if not mode.is_popup:
        raise UnsupportedOperationError(f"no popup open to submit from (mode={mode})")

    if mode.target is PopUpTarget.STATES and isinstance(subject, EntityState):
        if not buffer.strip():
            raise UnsupportedOperationError(f"empty state for {subject.entity_id}")
        return SetStateAction(subject.entity_id, decode_state_value(buffer.strip()))

    if mode.target is PopUpTarget.SERVICES and isinstance(subject, ServiceInfo):
        if not state.popup.highlighted:
            raise UnsupportedOperationError(f"service domain {subject.domain} has no operation selected")
        target = buffer.strip() or None
        return CallServiceAction(subject.domain, state.popup.highlighted, target)

    if mode.target is PopUpTarget.EVENTS:
        raise UnsupportedOperationError("sending events is not supported")

    raise UnsupportedOperationError(f"nothing to submit for {mode}")
