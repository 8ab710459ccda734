"""Low-level terminal input.

Reads raw bytes from stdin and turns them into ``KeyPress``, ``Resize`` and
``FocusChange`` events. The terminal runs in non-canonical mode with echo off
(not ``tty.setraw``) so Rich Live's alternate screen keeps working.
"""

from __future__ import annotations

import contextlib
import os
import select
import signal
import threading
from dataclasses import dataclass, field
from typing import Iterator, Union

from haos_tui.errors import HaosTuiError

ESC_SEQUENCE_TIMEOUT_MS = 25
FOCUS_REPORTING_ON = b"\x1b[?1004h"
FOCUS_REPORTING_OFF = b"\x1b[?1004l"

ARROWS = {b"A": "up", b"B": "down", b"C": "right", b"D": "left"}
CTRL = frozenset({"ctrl"})


class InputDecodeError(HaosTuiError):
    """Raised for byte sequences we do not understand."""


@dataclass(frozen=True)
class KeyPress:
    code: str
    modifiers: frozenset[str] = field(default_factory=frozenset)

    @property
    def ctrl(self) -> bool:
        return "ctrl" in self.modifiers


@dataclass(frozen=True)
class Resize:
    pass


@dataclass(frozen=True)
class FocusChange:
    focused: bool


InputEvent = Union[KeyPress, Resize, FocusChange]


def _utf8_length(lead: int) -> int:
    if lead >> 5 == 0b110:
        return 2
    if lead >> 4 == 0b1110:
        return 3
    if lead >> 3 == 0b11110:
        return 4
    return 0


class TerminalInput:
    """Pollable event source over a tty file descriptor."""

    def __init__(self, fd: int) -> None:
        self.fd = fd
        self._pending: list[bytes] = []
        self._resized = threading.Event()

    def _read_byte(self, timeout_ms: int | None) -> bytes | None:
        if self._pending:
            return self._pending.pop(0)
        if timeout_ms is not None:
            ready, _, _ = select.select([self.fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return None
        ch = os.read(self.fd, 1)
        if not ch:
            raise EOFError("terminal input closed")
        return ch

    def notify_resize(self, *_args) -> None:
        self._resized.set()

    def install_resize_handler(self) -> None:
        """Route SIGWINCH into the event stream. Main thread only."""
        if hasattr(signal, "SIGWINCH"):
            signal.signal(signal.SIGWINCH, self.notify_resize)

    def poll(self, timeout: float) -> InputEvent | None:
        """Return the next event, or ``None`` after ``timeout`` seconds.

        Raises ``EOFError`` once the terminal hangs up.
        """
        if self._resized.is_set():
            self._resized.clear()
            return Resize()
        ch = self._read_byte(int(timeout * 1000))
        if ch is None:
            if self._resized.is_set():
                self._resized.clear()
                return Resize()
            return None
        return self._decode(ch)

    def _decode(self, ch: bytes) -> InputEvent:
        if ch in {b"\r", b"\n"}:
            return KeyPress("enter")
        if ch in {b"\x7f", b"\x08"}:
            return KeyPress("backspace")
        if ch == b"\t":
            return KeyPress("tab")
        if ch == b"\x1b":
            return self._decode_escape()

        value = ch[0]
        if value < 0x20:
            # Ctrl+letter arrives as the letter's position in the alphabet.
            return KeyPress(chr(value + 0x60), CTRL)
        if value < 0x80:
            return KeyPress(ch.decode("ascii"))
        return KeyPress(self._decode_utf8(ch))

    def _decode_utf8(self, lead: bytes) -> str:
        size = _utf8_length(lead[0])
        if size == 0:
            raise InputDecodeError(f"invalid UTF-8 lead byte {lead!r}")
        raw = lead
        for _ in range(size - 1):
            nxt = self._read_byte(ESC_SEQUENCE_TIMEOUT_MS)
            if nxt is None:
                raise InputDecodeError(f"truncated UTF-8 sequence {raw!r}")
            raw += nxt
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InputDecodeError(f"invalid UTF-8 sequence {raw!r}") from exc

    def _decode_escape(self) -> InputEvent:
        seq = self._read_byte(ESC_SEQUENCE_TIMEOUT_MS)
        if seq is None:
            return KeyPress("escape")
        if seq not in {b"[", b"O"}:
            self._pending.append(seq)
            return KeyPress("escape")

        final = self._read_byte(ESC_SEQUENCE_TIMEOUT_MS)
        if final is None:
            return KeyPress("escape")
        if final in ARROWS:
            return KeyPress(ARROWS[final])
        if seq == b"[" and final == b"I":
            return FocusChange(True)
        if seq == b"[" and final == b"O":
            return FocusChange(False)

        # Swallow the rest of the CSI sequence so it does not leak as text.
        raw = seq + final
        while not 0x40 <= final[0] <= 0x7E:
            final = self._read_byte(ESC_SEQUENCE_TIMEOUT_MS)
            if final is None or len(raw) > 32:
                break
            raw += final
        raise InputDecodeError(f"unsupported escape sequence ESC {raw!r}")


@contextlib.contextmanager
def terminal_mode(fd: int, out_fd: int | None = None) -> Iterator[bool]:
    """Disable canonical mode, echo and flow control for the block.

    Yields ``False`` (and changes nothing) when ``fd`` is not a tty.
    """
    try:
        import termios
    except ImportError:
        yield False
        return
    try:
        old_settings = termios.tcgetattr(fd)
    except termios.error:
        yield False
        return

    new = termios.tcgetattr(fd)
    new[0] &= ~termios.IXON  # let Ctrl+s through
    new[3] &= ~(termios.ICANON | termios.ECHO)
    new[6][termios.VMIN] = 0
    new[6][termios.VTIME] = 0
    termios.tcsetattr(fd, termios.TCSADRAIN, new)
    if out_fd is not None:
        os.write(out_fd, FOCUS_REPORTING_ON)
    try:
        yield True
    finally:
        if out_fd is not None:
            os.write(out_fd, FOCUS_REPORTING_OFF)
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)
