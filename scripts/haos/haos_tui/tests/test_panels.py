from __future__ import annotations

import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path
import sys

from rich.console import Console, Group
from rich.layout import Layout

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from haos_tui.formatting import age_since, compact_json, domain_label, parse_iso_timestamp  # noqa: E402
from haos_tui.models import Collection, EntityState, EventInfo, ServiceInfo  # noqa: E402
from haos_tui.navigation import Command  # noqa: E402
from haos_tui.panels import SELECTED_STYLE, visible_window  # noqa: E402
from haos_tui.panels.events import render as render_events  # noqa: E402
from haos_tui.panels.popup import render as render_popup  # noqa: E402
from haos_tui.panels.services import render as render_services  # noqa: E402
from haos_tui.panels.states import render as render_states  # noqa: E402
from haos_tui.store import StateStore  # noqa: E402
from haos_tui.view import SEARCH_MESSAGE, render_dashboard  # noqa: E402


def _headers(panel):
    return [str(column.header) for column in panel.renderable.columns]


def _text(renderable, width=160):
    console = Console(width=width, record=True, color_system=None)
    console.print(renderable)
    return console.export_text()


class FormattingTests(unittest.TestCase):
    def test_domain_label(self):
        self.assertEqual(domain_label("mqtt"), "MQTT")
        self.assertEqual(domain_label("input_boolean"), "Input Boolean")
        self.assertEqual(domain_label(""), "Unknown Domain")

    def test_age_since(self):
        now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        self.assertEqual(age_since(now - timedelta(minutes=3), now), "3m ago")
        self.assertEqual(age_since(None, now), "n/a")

    def test_parse_iso_timestamp(self):
        parsed = parse_iso_timestamp("2024-05-01T10:00:00Z")
        self.assertEqual(parsed, datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc))
        self.assertIsNone(parse_iso_timestamp("yesterday"))

    def test_compact_json_truncates(self):
        self.assertEqual(compact_json({"b": 1, "a": 2}), '{"a": 2, "b": 1}')
        self.assertTrue(compact_json(list(range(100)), limit=20).endswith("…"))


class PanelTests(unittest.TestCase):
    def test_events_columns_and_selection(self):
        events = Collection([EventInfo("state_changed", 3), EventInfo("call_service", 1)], 1)
        panel = render_events(events, active=True)
        self.assertEqual(_headers(panel), ["Event", "Listeners"])
        self.assertEqual(panel.border_style, "yellow")
        self.assertEqual(panel.renderable.rows[1].style, SELECTED_STYLE)
        self.assertIsNone(panel.renderable.rows[0].style)

    def test_services_columns(self):
        services = Collection([ServiceInfo("light", {"turn_on": {}, "turn_off": {}})], 0)
        panel = render_services(services, active=False)
        self.assertEqual(_headers(panel), ["Domain", "Name", "Services"])
        self.assertEqual(panel.border_style, "cyan")
        self.assertIn("Services (1)", str(panel.title))

    def test_states_columns_and_age(self):
        now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        states = Collection([EntityState("sun.sun", "above_horizon", now - timedelta(hours=2))], 0)
        panel = render_states(states, active=False, now=now)
        self.assertEqual(_headers(panel), ["Entity", "State", "Changed"])
        self.assertIn("2h ago", _text(panel))

    def test_empty_collections_render_placeholder(self):
        self.assertIn("none", _text(render_events(Collection(), active=False)))
        self.assertIn("unknown", _text(render_states(Collection(), active=False)))

    def test_visible_window_keeps_selection_on_screen(self):
        self.assertEqual(visible_window(5, 0, 10), range(5))
        window = visible_window(100, 90, 10)
        self.assertIn(90, window)
        self.assertEqual(len(window), 10)
        self.assertEqual(visible_window(100, 99, 10), range(90, 100))


class PopupTests(unittest.TestCase):
    def _store_with_popup(self, pane_command):
        store = StateStore()
        store.apply_fetch(
            [EventInfo("state_changed", 3)],
            [ServiceInfo("light", {"turn_on": {"description": "Turn on"}, "turn_off": {"description": "Turn off"}})],
            [EntityState("light.kitchen", "on", attributes={"brightness": 200})],
        )
        store.dispatch(pane_command)
        store.dispatch(Command.ENTER)
        return store

    def test_service_popup_lists_operations(self):
        store = self._store_with_popup(Command.SHOW_SERVICES)
        store.dispatch(Command.DOWN)
        text = _text(render_popup(store.snapshot()))
        self.assertIn("turn_off", text)
        self.assertIn("Turn off", text)
        self.assertIn("target entity id", text)

    def test_state_popup_shows_attributes_and_buffer(self):
        store = self._store_with_popup(Command.SHOW_STATES)
        for ch in "off":
            store.dispatch(Command.CHAR, ch)
        text = _text(render_popup(store.snapshot()))
        self.assertIn("brightness", text)
        self.assertIn("> off", text)

    def test_event_popup_warns_no_sending(self):
        store = self._store_with_popup(Command.SHOW_EVENTS)
        self.assertIn("not supported", _text(render_popup(store.snapshot())))


class ViewTests(unittest.TestCase):
    def setUp(self):
        self.store = StateStore()
        self.store.apply_fetch(
            [EventInfo("state_changed", 3)],
            [ServiceInfo("light", {"turn_on": {}})],
            [EntityState("light.kitchen", "on")],
        )

    def test_narrow_shows_focused_pane_only(self):
        frame = render_dashboard(self.store.snapshot(), "http://hub", 80, 30)
        self.assertIsInstance(frame, Group)
        self.assertEqual(len(frame.renderables), 2)

    def test_wide_shows_all_panes(self):
        frame = render_dashboard(self.store.snapshot(), "http://hub", 200, 40)
        self.assertIsInstance(frame, Layout)
        names = [child.name for child in frame["body"].children]
        self.assertEqual(names, ["events", "services", "states"])

    def test_popup_replaces_secondary_panes(self):
        self.store.dispatch(Command.SHOW_STATES)
        self.store.dispatch(Command.ENTER)
        frame = render_dashboard(self.store.snapshot(), "http://hub", 200, 40)
        names = [child.name for child in frame["body"].children]
        self.assertEqual(names, ["base", "popup"])

    def test_search_shows_placeholder(self):
        self.store.dispatch(Command.ENTER)
        self.store.dispatch(Command.CHAR, "/")
        frame = render_dashboard(self.store.snapshot(), "http://hub", 80, 30)
        self.assertIn(SEARCH_MESSAGE, _text(frame))

    def test_header_reports_sync_error(self):
        self.store.record_sync_error("authorization failed: refused (401)")
        text = _text(render_dashboard(self.store.snapshot(), "http://hub", 80, 30))
        self.assertIn("authorization failed", text)

    def test_header_reports_write_error_after_refresh(self):
        self.store.dispatch(Command.SHOW_STATES)
        self.store.dispatch(Command.ENTER)
        self.store.dispatch(Command.CHAR, "1")
        self.store.dispatch(Command.ENTER)
        self.store.take_pending_write()
        self.store.complete_write("write failed: offline")
        self.store.apply_fetch([], [], [EntityState("light.kitchen", "on")])
        text = _text(render_dashboard(self.store.snapshot(), "http://hub", 80, 30))
        self.assertIn("write failed: offline", text)


if __name__ == "__main__":
    unittest.main()
