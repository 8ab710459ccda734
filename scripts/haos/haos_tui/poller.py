"""Background actor: send the pending write, fetch the hub, publish."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Protocol, Sequence

from haos_tui.actions import WriteAction
from haos_tui.errors import HubAuthError, HubError, UnsupportedOperationError
from haos_tui.logs import TRACE
from haos_tui.models import EntityState, EventInfo, ServiceInfo
from haos_tui.store import StateStore

logger = logging.getLogger(__name__)


class Hub(Protocol):
    def fetch_events(self) -> Sequence[EventInfo]: ...

    def fetch_services(self) -> Sequence[ServiceInfo]: ...

    def fetch_states(self) -> Sequence[EntityState]: ...

    def set_state(self, entity_id: str, new_state): ...

    def call_service(self, domain: str, operation: str, target_entity_id: str | None = None): ...


def _describe_failure(exc: HubError) -> str:
    if isinstance(exc, HubAuthError):
        return f"authorization failed: {exc}"
    return str(exc)


class Poller:
    def __init__(self, store: StateStore, hub: Hub, interval: float) -> None:
        self.store = store
        self.hub = hub
        self.interval = max(0.0, interval)
        self._executor = ThreadPoolExecutor(max_workers=3, thread_name_prefix="fetch")

    def run(self) -> None:
        logger.info("poller started (interval %.2fs)", self.interval)
        try:
            while not self.store.is_closed():
                self.run_cycle()
                if self.store.wait_closed(self.interval):
                    break
        finally:
            self._executor.shutdown(wait=False)
            logger.info("poller stopped")

    def run_cycle(self) -> None:
        if self.store.is_closed():
            return
        self.submit_pending_write()
        if self.store.is_closed():
            return
        self.refresh()

    def submit_pending_write(self) -> None:
        try:
            action = self.store.take_pending_write()
        except UnsupportedOperationError as exc:
            logger.warning("rejected write: %s", exc)
            return
        if action is None:
            return
        error = None
        try:
            error = self._send(action)
        finally:
            self.store.complete_write(error)

    def _send(self, action: WriteAction) -> str | None:
        """Perform the write. Returns the failure message, if any."""
        logger.info("sending %s", action.describe())
        try:
            result = action.send(self.hub)
        except HubError as exc:
            message = _describe_failure(exc)
            logger.error("write failed (%s): %s", action.describe(), message)
            return f"write failed: {message}"
        logger.log(TRACE, "write result: %r", result)
        return None

    def refresh(self) -> bool:
        futures = [
            self._executor.submit(self.hub.fetch_events),
            self._executor.submit(self.hub.fetch_services),
            self._executor.submit(self.hub.fetch_states),
        ]
        try:
            events, services, states = [future.result() for future in futures]
        except HubError as exc:
            message = _describe_failure(exc)
            logger.error("refresh failed, keeping previous data: %s", message)
            self.store.record_sync_error(message)
            return False

        logger.info(
            "received %d events, %d services, %d states",
            len(events),
            len(services),
            len(states),
        )
        for event in events:
            logger.log(TRACE, "event received: %r", event)
        if self.store.is_closed():
            return False
        self.store.apply_fetch(events, services, states)
        return True
