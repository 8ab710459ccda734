"""Dashboard entrypoint: config, logging, hub check and actor wiring."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import threading
from datetime import datetime, timezone
from typing import Callable

from rich.console import Console
from rich.live import Live

from haos_tui.client import HubClient
from haos_tui.config import Config, default_config_path, resolve_config
from haos_tui.errors import ConfigError, HubError, StateCorruptedError
from haos_tui.input_listener import EventSource, InputListener
from haos_tui.keys import TerminalInput, terminal_mode
from haos_tui.logs import LOG_LEVELS, configure_logging
from haos_tui.poller import Hub, Poller
from haos_tui.renderer import LiveSurface, Renderer, Surface
from haos_tui.store import StateStore

logger = logging.getLogger(__name__)

JOIN_TIMEOUT_SECONDS = 2.0


class Dashboard:
    """Owns the store and runs the poller, input listener and renderer."""

    def __init__(
        self,
        store: StateStore,
        hub: Hub,
        source: EventSource | None,
        hub_url: str,
        poll_interval: float,
        join_timeout: float = JOIN_TIMEOUT_SECONDS,
    ) -> None:
        self.store = store
        self.poller = Poller(store, hub, poll_interval)
        self.listener = InputListener(store, source) if source is not None else None
        self.hub_url = hub_url
        self.join_timeout = join_timeout
        self.failures: list[str] = []
        self.threads: list[threading.Thread] = []

    def _guard(self, name: str, target: Callable[[], None]) -> None:
        try:
            target()
        except StateCorruptedError as exc:
            logger.critical("%s stopped: %s", name, exc)
            self.failures.append(name)
        except Exception:
            logger.exception("%s crashed", name)
            self.failures.append(name)
            self._close()

    def _close(self) -> None:
        if self.store.is_closed():
            return
        try:
            self.store.close()
        except StateCorruptedError as exc:
            logger.critical("could not close cleanly: %s", exc)

    def _spawn(self, name: str, target: Callable[[], None]) -> threading.Thread:
        thread = threading.Thread(target=self._guard, args=(name, target), name=name, daemon=True)
        thread.start()
        self.threads.append(thread)
        return thread

    def run(self, surface: Surface) -> int:
        self._spawn("poller", self.poller.run)
        if self.listener is not None:
            self._spawn("input", self.listener.run)

        renderer = Renderer(self.store, surface, self.hub_url)
        try:
            self._guard("renderer", renderer.run)
        except KeyboardInterrupt:
            logger.info("interrupted")
        finally:
            self._close()
            for thread in self.threads:
                thread.join(self.join_timeout)
                if thread.is_alive():
                    logger.warning("%s did not stop within %.1fs", thread.name, self.join_timeout)
        return 1 if self.failures else 0


def _json_output(config: Config, client: HubClient) -> str:
    payload = {
        "hub": config.url,
        "collected_at": datetime.now(timezone.utc).isoformat(),
        "events": [event.to_dict() for event in client.fetch_events()],
        "services": [service.to_dict() for service in client.fetch_services()],
        "states": [entity.to_dict() for entity in client.fetch_states()],
    }
    return json.dumps(payload, indent=2)


def run_live(config: Config, client: HubClient) -> int:
    console = Console()
    store = StateStore()
    fd = sys.stdin.fileno()

    with terminal_mode(fd, sys.stdout.fileno()) as has_tty:
        source = None
        if has_tty:
            source = TerminalInput(fd)
            source.install_resize_handler()
        else:
            logger.warning("stdin is not a tty; keyboard input disabled (Ctrl+C exits)")
        dashboard = Dashboard(store, client, source, config.url, config.poll_interval)
        with Live(console=console, screen=True, auto_refresh=False) as live:
            return dashboard.run(LiveSurface(live, console))


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Terminal dashboard for a Home Assistant hub")
    parser.add_argument(
        "-c",
        "--config",
        help=f"JSON config file (default: $HAOS_TUI_CONFIG or {default_config_path()})",
    )
    parser.add_argument("--refresh", type=float, help="Poll interval seconds override")
    parser.add_argument("--log-level", choices=sorted(LOG_LEVELS), help="Log level override")
    parser.add_argument("--json", action="store_true", help="Fetch once and emit JSON payload")
    args = parser.parse_args(argv)

    try:
        config = resolve_config(args.config, args.refresh, args.log_level)
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    try:
        configure_logging(config.log_level, config.log_file)
    except OSError as exc:
        print(f"error: cannot open log file {config.log_file}: {exc}", file=sys.stderr)
        return 2

    client = HubClient(config.url, config.token, timeout=config.request_timeout)
    try:
        message = client.check()
    except HubError as exc:
        logger.error("initial connection failed: %s", exc)
        print(f"error: cannot reach hub at {config.url}: {exc}", file=sys.stderr)
        return 1
    logger.info("connected to %s: %s", config.url, message)

    if args.json:
        try:
            print(_json_output(config, client))
        except HubError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 1
        return 0

    return run_live(config, client)


if __name__ == "__main__":
    raise SystemExit(main())
