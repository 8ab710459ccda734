"""REST client for the automation hub (Home Assistant compatible API)."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, TypeVar

import requests

from haos_tui.errors import (
    HubAuthError,
    HubConnectionError,
    HubPayloadError,
    HubStatusError,
)
from haos_tui.models import EntityState, EventInfo, ServiceInfo

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HubClient:
    """
    Thin synchronous client for the hub"s REST API.

    Usage:
        client = HubClient("http://homeassistant.local:8123", token="...")
        states = client.fetch_states()
    """

    def __init__(
        self,
        url: str,
        token: str,
        timeout: float = 10,
        session: Optional[requests.Session] = None,
    ):
        self.url = url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers["Authorization"] = f"Bearer {token}"
        self.session.headers["Content-Type"] = "application/json"

    def _request(self, method: str, path: str, json: Optional[dict] = None) -> Any:
        """Make an HTTP request and return the decoded JSON body."""
        url = f"{self.url}{path}"
        try:
            response = self.session.request(method, url, json=json, timeout=self.timeout)
        except requests.Timeout as exc:
            raise HubConnectionError(f"{method} {url} timed out after {self.timeout}s") from exc
        except requests.RequestException as exc:
            raise HubConnectionError(f"{method} {url} failed: {exc}") from exc

        status = response.status_code
        logger.debug("%s %s -> %s", method, path, status)
        if status in (401, 403):
            raise HubAuthError(
                f"{method} {path} was refused ({status}); check the token in the config file",
                status_code=status,
            )
        if not 200 <= status < 300:
            raise HubStatusError(f"{method} {path} returned {status}", status_code=status)

        try:
            return response.json()
        except ValueError as exc:
            raise HubPayloadError(f"{method} {path} returned a non-JSON body") from exc

    def _fetch_list(self, path: str, parse: Callable[[Any], T]) -> list[T]:
        payload = self._request("GET", path)
        if not isinstance(payload, list):
            raise HubPayloadError(f"GET {path} returned {type(payload).__name__}, expected a list")
        return [parse(item) for item in payload]

    def check(self) -> str:
        """Confirm the hub is reachable and the token is accepted."""
        payload = self._request("GET", "/api/")
        if isinstance(payload, dict):
            return str(payload.get("message", "API running."))
        return str(payload)

    def fetch_events(self) -> list[EventInfo]:
        return self._fetch_list("/api/events", EventInfo.from_dict)

    def fetch_services(self) -> list[ServiceInfo]:
        return self._fetch_list("/api/services", ServiceInfo.from_dict)

    def fetch_states(self) -> list[EntityState]:
        return self._fetch_list("/api/states", EntityState.from_dict)

    def set_state(self, entity_id: str, new_state: Any) -> EntityState:
        payload = self._request("POST", f"/api/states/{entity_id}", json={"state": new_state})
        return EntityState.from_dict(payload)

    def call_service(
        self,
        domain: str,
        operation: str,
        target_entity_id: Optional[str] = None,
    ) -> Any:
        body = {"entity_id": target_entity_id} if target_entity_id else None
        return self._request("POST", f"/api/services/{domain}/{operation}", json=body)
