"""Cross-platform single-keypress reader for CLI frontends.

Handles arrow keys, WASD, and special keys without requiring Enter, and
reports held modifiers where the terminal encodes them (control
characters, ESC-prefixed Alt, and xterm ``ESC [ 1 ; <mod> X`` sequences).
Works on macOS / Linux (tty+termios) and Windows (msvcrt).
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass

from backend.models.board import Direction


@dataclass(frozen=True)
class KeyPress:
    """A decoded keypress.

    ``key`` uses browser-style names for special keys (``"ArrowUp"``,
    ``"Home"``, ``"Enter"``, ``"Escape"``, ``" "``) and the character
    itself otherwise.
    """

    key: str
    ctrl: bool = False
    alt: bool = False
    meta: bool = False

    @property
    def has_modifier(self) -> bool:
        return self.ctrl or self.alt or self.meta

    @property
    def action(self) -> str:
        """Normalised action string (see ``_ACTION_MAP``)."""
        if self.ctrl:
            return "quit" if self.key == "c" else ""
        key = self.key.lower() if len(self.key) == 1 else self.key
        return _ACTION_MAP.get(key, key if len(key) == 1 and key.isprintable() else "")


# -- shared key mapping --------------------------------------------------------

_MOVE_KEYS: dict[str, Direction] = {
    "ArrowUp": Direction.UP,
    "ArrowDown": Direction.DOWN,
    "ArrowLeft": Direction.LEFT,
    "ArrowRight": Direction.RIGHT,
    "w": Direction.UP,
    "s": Direction.DOWN,
    "a": Direction.LEFT,
    "d": Direction.RIGHT,
}

_ACTION_MAP: dict[str, str] = {
    "ArrowUp": "up",
    "ArrowDown": "down",
    "ArrowLeft": "left",
    "ArrowRight": "right",
    "w": "up",
    "s": "down",
    "a": "left",
    "d": "right",
    "q": "quit",
    "Escape": "quit",
    "r": "restart",
    "h": "help",
    "?": "help",
    "v": "solve",
    "n": "hint",
    "c": "coach",
    "g": "algorithm",
    " ": "play",
    "Home": "reset",
    "End": "end",
    "Enter": "enter",
}

_ARROWS: dict[str, str] = {
    "A": "ArrowUp",
    "B": "ArrowDown",
    "C": "ArrowRight",
    "D": "ArrowLeft",
    "H": "Home",
    "F": "End",
}

# xterm modifier parameter: 1 + (shift=1 | alt=2 | ctrl=4 | meta=8)
_MOD_ALT = 2
_MOD_CTRL = 4
_MOD_META = 8


def resolve_move_key(
    press: KeyPress,
    *,
    autoplaying: bool = False,
    in_text_field: bool = False,
) -> Direction | None:
    """Return the move a keypress asks for, or ``None`` if it must be ignored.

    Moves are ignored during autoplay, while typing into a text field, and
    while Ctrl/Alt/Meta is held.
    """
    if autoplaying or in_text_field or press.has_modifier:
        return None
    key = press.key.lower() if len(press.key) == 1 else press.key
    return _MOVE_KEYS.get(key)


def decode(chars: str) -> KeyPress | None:
    """Decode the raw characters of one keypress."""
    if not chars:
        return None
    ch = chars[0]

    if ch == "\x1b":
        rest = chars[1:]
        if not rest:
            return KeyPress("Escape")
        if rest[0] in "[O":
            return _decode_csi(rest[1:])
        inner = decode(rest)
        if inner is None:
            return None
        return KeyPress(inner.key, ctrl=inner.ctrl, alt=True, meta=inner.meta)

    if ch in ("\r", "\n"):
        return KeyPress("Enter")
    if ch == "\t":
        return KeyPress("Tab")
    if ch in ("\x7f", "\x08"):
        return KeyPress("Backspace")
    if "\x01" <= ch <= "\x1a":
        return KeyPress(chr(ord(ch) + 96), ctrl=True)
    return KeyPress(ch)


def _decode_csi(body: str) -> KeyPress | None:
    """Decode the part of an escape sequence after ``ESC [``."""
    if not body:
        return None
    final = body[-1]
    params = body[:-1].split(";")
    modifier = 1
    if len(params) == 2 and params[1].isdigit():
        modifier = int(params[1])

    if final == "~":
        key = {"1": "Home", "7": "Home", "4": "End", "8": "End", "3": "Delete"}.get(params[0])
    else:
        key = _ARROWS.get(final)
    if key is None:
        return None

    bits = modifier - 1
    return KeyPress(
        key,
        ctrl=bool(bits & _MOD_CTRL),
        alt=bool(bits & _MOD_ALT),
        meta=bool(bits & _MOD_META),
    )


# -- low-level readers -----------------------------------------------------------


def _read_sequence_unix(fd: int, first: str) -> str:
    """Collect the remaining bytes of an escape sequence already pending."""
    import select

    chars = first
    if first != "\x1b":
        return chars
    while True:
        ready, _, _ = select.select([fd], [], [], 0.02)
        if not ready:
            return chars
        ch = os.read(fd, 1).decode("utf-8", errors="ignore")
        chars += ch
        # CSI sequences end with a letter or "~"; a lone ESC+char is Alt.
        if len(chars) == 2 and ch not in "[O":
            return chars
        if len(chars) > 2 and (ch.isalpha() or ch == "~"):
            return chars


def get_key_timeout(timeout: float) -> KeyPress | None:
    """Read a single keypress with a timeout.

    Returns the decoded :class:`KeyPress`, or ``None`` if no key was pressed
    within *timeout* seconds (or the key was not recognised).

    Uses ``os.read`` (unbuffered) so that ``select`` accurately reflects
    pending bytes while an escape sequence is still arriving.
    """
    if os.name == "nt":
        import msvcrt  # type: ignore[import-not-found]
        import time as _time

        end = _time.monotonic() + timeout
        while _time.monotonic() < end:
            if msvcrt.kbhit():
                ch = msvcrt.getwch()
                if ch in ("\x00", "\xe0"):
                    code = msvcrt.getwch()
                    key = {"H": "ArrowUp", "P": "ArrowDown", "K": "ArrowLeft",
                           "M": "ArrowRight", "G": "Home", "O": "End"}.get(code)
                    return KeyPress(key) if key else None
                return decode(ch)
            _time.sleep(0.02)
        return None

    import select
    import termios
    import tty

    fd = sys.stdin.fileno()
    old = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        ready, _, _ = select.select([fd], [], [], timeout)
        if not ready:
            return None
        ch = os.read(fd, 1).decode("utf-8", errors="ignore")
        return decode(_read_sequence_unix(fd, ch))
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old)
