from __future__ import annotations

import threading
import time
import unittest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from haos_tui.models import EventInfo  # noqa: E402
from haos_tui.navigation import Command  # noqa: E402
from haos_tui.renderer import Renderer  # noqa: E402
from haos_tui.store import StateStore  # noqa: E402


class FakeSurface:
    def __init__(self, width=120, height=40):
        self.size = (width, height)
        self.frames = []

    def draw(self, renderable):
        self.frames.append(renderable)


def _wait_until(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


class RendererTests(unittest.TestCase):
    def test_draws_initial_frame_then_each_change(self):
        store = StateStore()
        surface = FakeSurface()
        renderer = Renderer(store, surface, "http://hub.local:8123", wait_timeout=0.05)
        thread = threading.Thread(target=renderer.run)
        thread.start()
        try:
            self.assertTrue(_wait_until(lambda: len(surface.frames) >= 1))
            store.apply_fetch([EventInfo("state_changed", 1)], [], [])
            self.assertTrue(_wait_until(lambda: len(surface.frames) >= 2))
        finally:
            store.close()
            thread.join(timeout=5)
        self.assertFalse(thread.is_alive())

    def test_stops_without_drawing_once_closed(self):
        store = StateStore()
        store.close()
        surface = FakeSurface()
        Renderer(store, surface, "http://hub.local:8123", wait_timeout=0.05).run()
        self.assertEqual(surface.frames, [])

    def test_never_mutates_state(self):
        store = StateStore()
        store.apply_fetch([EventInfo("a", 1), EventInfo("b", 2)], [], [])
        store.dispatch(Command.DOWN)
        before = store.snapshot()
        renderer = Renderer(store, FakeSurface(80, 24), "http://hub.local:8123")
        renderer.draw(before)
        after = store.snapshot()
        self.assertEqual(before.version, after.version)
        self.assertEqual(after.events.selected, 1)
        self.assertEqual(renderer.frames, 1)


if __name__ == "__main__":
    unittest.main()
