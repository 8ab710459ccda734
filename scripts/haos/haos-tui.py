#!/usr/bin/env python3
"""Thin entrypoint for the hub dashboard TUI."""

from __future__ import annotations

from haos_tui.app import main


if __name__ == "__main__":
    raise SystemExit(main())
