"""Config file loading and validation for the dashboard."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from haos_tui.errors import ConfigError
from haos_tui.logs import LOG_LEVELS

DEFAULT_CONFIG_PATH = Path("~/.config/haos-tui/config.json")

DEFAULTS: dict[str, Any] = {
    "poll_rate_ms": 5000,
    "log_level": "info",
    "log_file": "haos-tui.log",
    "request_timeout": 10,
}

MIN_POLL_RATE_MS = 250


@dataclass(frozen=True)
class Config:
    url: str
    token: str
    poll_rate_ms: int = DEFAULTS["poll_rate_ms"]
    log_level: str = DEFAULTS["log_level"]
    log_file: str = DEFAULTS["log_file"]
    request_timeout: float = DEFAULTS["request_timeout"]

    @property
    def poll_interval(self) -> float:
        return self.poll_rate_ms / 1000.0


def default_config_path() -> Path:
    return Path(os.environ.get("HAOS_TUI_CONFIG", str(DEFAULT_CONFIG_PATH))).expanduser()


def load_user_config(path: str | Path) -> dict:
    config_path = Path(path).expanduser()
    if not config_path.exists():
        raise ConfigError(f"config path not found: {config_path}")

    try:
        payload = json.loads(config_path.read_text())
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON config: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"cannot read config {config_path}: {exc}") from exc

    if not isinstance(payload, dict):
        raise ConfigError("config must be a JSON object")
    return payload


def _normalize_level(value: Any) -> str:
    level = str(value).strip().lower()
    if level == "warning":
        level = "warn"
    if level not in LOG_LEVELS:
        raise ConfigError(f"unknown log_level: {value}")
    return level


def build_config(user_config: dict) -> Config:
    missing = [key for key in ("url", "token") if not user_config.get(key)]
    if missing:
        raise ConfigError(f"missing required config keys: {', '.join(missing)}")

    url = str(user_config["url"]).strip()
    if not url.startswith(("http://", "https://")):
        raise ConfigError(f"url must start with http:// or https://: {url}")

    merged = {**DEFAULTS, **user_config}
    try:
        poll_rate_ms = int(merged["poll_rate_ms"])
        request_timeout = float(merged["request_timeout"])
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"invalid numeric config value: {exc}") from exc

    return Config(
        url=url,
        token=str(user_config["token"]),
        poll_rate_ms=max(MIN_POLL_RATE_MS, poll_rate_ms),
        log_level=_normalize_level(merged["log_level"]),
        log_file=str(merged["log_file"]),
        request_timeout=max(1.0, request_timeout),
    )


def resolve_config(
    path: str | Path | None = None,
    refresh_seconds: float | None = None,
    log_level: str | None = None,
) -> Config:
    config = build_config(load_user_config(path or default_config_path()))
    if refresh_seconds is not None:
        config = replace(config, poll_rate_ms=max(MIN_POLL_RATE_MS, int(refresh_seconds * 1000)))
    if log_level is not None:
        config = replace(config, log_level=_normalize_level(log_level))
    return config
