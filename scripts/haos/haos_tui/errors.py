"""Exception hierarchy shared by the hub client, state store and actors."""

from __future__ import annotations


class HaosTuiError(Exception):
    """Base exception for all dashboard errors."""


class ConfigError(HaosTuiError, ValueError):
    """Raised when the config file is missing or invalid."""


class HubError(HaosTuiError):
    """Raised when a hub request fails."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class HubConnectionError(HubError):
    """Raised when the hub cannot be reached or the request times out."""


class HubStatusError(HubError):
    """Raised for non-2xx responses."""


class HubAuthError(HubStatusError):
    """Raised for 401/403 responses. Usually a bad or expired token."""


class HubPayloadError(HubError):
    """Raised when a response body is not the JSON shape we expect."""


class UnsupportedOperationError(HaosTuiError):
    """Raised when the user asks for something the dashboard does not do."""


class StateCorruptedError(HaosTuiError):
    """Raised once a mutation of the shared state failed part-way through.

    The state can no longer be trusted, so every actor seeing this stops and
    the process exits non-zero.
    """
