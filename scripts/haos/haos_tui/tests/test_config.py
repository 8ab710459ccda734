from __future__ import annotations

import json
import logging
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from haos_tui.app import main  # noqa: E402
from haos_tui.config import MIN_POLL_RATE_MS, build_config, default_config_path, resolve_config  # noqa: E402
from haos_tui.errors import ConfigError  # noqa: E402
from haos_tui.logs import PACKAGE_LOGGER, TRACE, configure_logging  # noqa: E402


class ConfigTests(unittest.TestCase):
    def test_defaults_fill_optional_keys(self):
        config = build_config({"url": "http://hub.local:8123", "token": "abc"})
        self.assertEqual(config.poll_rate_ms, 5000)
        self.assertEqual(config.poll_interval, 5.0)
        self.assertEqual(config.log_level, "info")

    def test_missing_token(self):
        with self.assertRaises(ConfigError) as ctx:
            build_config({"url": "http://hub.local:8123"})
        self.assertIn("token", str(ctx.exception))

    def test_bad_url_scheme(self):
        with self.assertRaises(ConfigError):
            build_config({"url": "hub.local:8123", "token": "abc"})

    def test_poll_rate_floor(self):
        config = build_config({"url": "http://hub", "token": "abc", "poll_rate_ms": 10})
        self.assertEqual(config.poll_rate_ms, MIN_POLL_RATE_MS)

    def test_log_level_aliases(self):
        config = build_config({"url": "http://hub", "token": "abc", "log_level": "WARNING"})
        self.assertEqual(config.log_level, "warn")
        with self.assertRaises(ConfigError):
            build_config({"url": "http://hub", "token": "abc", "log_level": "loud"})

    def test_resolve_from_file_with_overrides(self):
        with tempfile.TemporaryDirectory() as tmp:
            cfg_path = Path(tmp) / "cfg.json"
            cfg_path.write_text(json.dumps({"url": "https://hub.example", "token": "t", "poll_rate_ms": 2000}))
            config = resolve_config(str(cfg_path), refresh_seconds=1.5, log_level="debug")
            self.assertEqual(config.url, "https://hub.example")
            self.assertEqual(config.poll_rate_ms, 1500)
            self.assertEqual(config.log_level, "debug")

    def test_invalid_json_and_missing_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            cfg_path = Path(tmp) / "cfg.json"
            cfg_path.write_text("{not json")
            with self.assertRaises(ConfigError):
                resolve_config(str(cfg_path))
            with self.assertRaises(ConfigError):
                resolve_config(str(Path(tmp) / "missing.json"))

    def test_environment_path(self):
        with mock.patch.dict(os.environ, {"HAOS_TUI_CONFIG": "/tmp/other.json"}):
            self.assertEqual(default_config_path(), Path("/tmp/other.json"))

    def test_main_exits_2_on_bad_config(self):
        with tempfile.TemporaryDirectory() as tmp:
            cfg_path = Path(tmp) / "cfg.json"
            cfg_path.write_text(json.dumps({"url": "http://hub"}))
            with mock.patch("sys.stderr"):
                self.assertEqual(main(["--config", str(cfg_path)]), 2)


class LoggingTests(unittest.TestCase):
    def setUp(self):
        logger = logging.getLogger(PACKAGE_LOGGER)
        saved = (list(logger.handlers), logger.level, logger.propagate)

        def restore():
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()
            for handler in saved[0]:
                logger.addHandler(handler)
            logger.setLevel(saved[1])
            logger.propagate = saved[2]

        self.addCleanup(restore)

    def test_file_sink_writes_records(self):
        with tempfile.TemporaryDirectory() as tmp:
            log_path = Path(tmp) / "dash.log"
            logger = configure_logging("trace", log_path)
            logging.getLogger("haos_tui.poller").log(TRACE, "event received: %s", "state_changed")
            for handler in logger.handlers:
                handler.flush()
            text = log_path.read_text()
            self.assertIn("TRACE", text)
            self.assertIn("haos_tui.poller", text)
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()

    def test_off_discards_everything(self):
        logger = configure_logging("off", "unused.log")
        self.assertFalse(logger.isEnabledFor(logging.CRITICAL))
        self.assertFalse(any(isinstance(h, logging.FileHandler) for h in logger.handlers))


if __name__ == "__main__":
    unittest.main()
