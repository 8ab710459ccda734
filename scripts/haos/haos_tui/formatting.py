"""Shared text and time formatting helpers for human-facing panels."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

DOMAIN_LABELS = {
    "hassio": "Supervisor",
    "homeassistant": "Home Assistant",
    "mqtt": "MQTT",
    "tts": "TTS",
    "zha": "ZHA",
}


def domain_label(domain: str | None) -> str:
    if not domain:
        return "Unknown Domain"

    raw = str(domain).strip()
    if not raw:
        return "Unknown Domain"

    mapped = DOMAIN_LABELS.get(raw)
    if mapped:
        return mapped
    return " ".join(token.capitalize() for token in raw.split("_") if token)


def compact_relative_age(age_seconds: float | int | None) -> str:
    if age_seconds is None:
        return "n/a"

    seconds = max(0, int(age_seconds))
    if seconds < 60:
        return f"{seconds}s ago"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    return f"{seconds // 86400}d ago"


def age_since(value: datetime | None, now: datetime | None = None) -> str:
    if value is None:
        return "n/a"
    current = now or datetime.now(timezone.utc)
    return compact_relative_age((current - value).total_seconds())


def display_time(value: datetime | None) -> str:
    if value is None:
        return "n/a"
    return value.astimezone().strftime("%H:%M:%S")


def compact_json(value: Any, limit: int = 120) -> str:
    try:
        text = json.dumps(value, sort_keys=True, default=str)
    except (TypeError, ValueError):
        text = str(value)
    if len(text) > limit:
        return text[: limit - 1] + "…"
    return text


def parse_iso_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    text = value.strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
