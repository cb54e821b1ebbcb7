from __future__ import annotations

import os
import queue
import select
import shutil
import sys
import termios
import threading
import tty
from contextlib import contextmanager
from typing import Any, Iterator

from moltbook_tui.events import Event, post_event

INPUT_POLL_SECONDS = 0.016
ESCAPE_READ_SECONDS = 0.001

MOUSE_ON = "\x1b[?1000h\x1b[?1006h"
MOUSE_OFF = "\x1b[?1000l\x1b[?1006l"
LEAVE_ALT_SCREEN = "\x1b[?1049l"
SHOW_CURSOR = "\x1b[?25h"

ESCAPE_KEYS = {
    "[A": "UP",
    "[B": "DOWN",
    "[C": "RIGHT",
    "[D": "LEFT",
    "OA": "UP",
    "OB": "DOWN",
    "OC": "RIGHT",
    "OD": "LEFT",
    "[Z": "SHTAB",
    "[5~": "PGUP",
    "[6~": "PGDN",
    "[H": "HOME",
    "[F": "END",
}

SINGLE_KEYS = {
    "\r": "ENTER",
    "\n": "ENTER",
    "\t": "TAB",
    "\x7f": "BACKSPACE",
    "\b": "BACKSPACE",
    "\x03": "QUIT",
}

WHEEL_UP = 64
WHEEL_DOWN = 65


def decode_mouse(sequence: str) -> Event | None:
    # SGR form: [<button;col;row followed by M on press, m on release.
    if not sequence.startswith("[<") or sequence[-1] not in "Mm":
        return None
    try:
        button, col, row = (int(part) for part in sequence[2:-1].split(";"))
    except ValueError:
        return None
    if sequence[-1] == "m":
        return None
    if button == WHEEL_UP:
        return ("key", "UP")
    if button == WHEEL_DOWN:
        return ("key", "DOWN")
    if button != 0:
        return None
    return ("mouse", (col - 1, row - 1))


def decode_escape(sequence: str) -> Event | None:
    if not sequence:
        return ("key", "ESC")
    if sequence.startswith("[<"):
        return decode_mouse(sequence)
    return ("key", ESCAPE_KEYS.get(sequence, "ESC"))


def decode_key(key: str) -> Event | None:
    if not key:
        return None
    if key in SINGLE_KEYS:
        return ("key", SINGLE_KEYS[key])
    if not key.isprintable():
        return None
    return ("key", key)


def _escape_complete(sequence: str) -> bool:
    if sequence.startswith("[<"):
        return sequence[-1] in "Mm" or len(sequence) >= 16
    return sequence[-1].isalpha() or sequence.endswith("~") or len(sequence) >= 6


def read_escape_sequence(fd: int) -> str:
    sequence = ""
    while select.select([fd], [], [], ESCAPE_READ_SECONDS)[0]:
        sequence += os.read(fd, 1).decode("utf-8", errors="ignore")
        if sequence and _escape_complete(sequence):
            break
    return sequence


def _line_input_worker(events: queue.Queue[Event], stop_event: threading.Event) -> None:
    while not stop_event.is_set():
        line = sys.stdin.readline()
        if line == "":
            if stop_event.wait(0.2):
                break
            continue
        for key in line.rstrip("\n"):
            event = decode_key(key)
            if event is not None:
                post_event(events, stop_event, event)
        post_event(events, stop_event, ("key", "ENTER"))


def input_worker(events: queue.Queue[Event], stop_event: threading.Event) -> None:
    if not sys.stdin.isatty():
        _line_input_worker(events, stop_event)
        return

    fd = sys.stdin.fileno()
    last_size = shutil.get_terminal_size()
    while not stop_event.is_set():
        size = shutil.get_terminal_size()
        if size != last_size:
            last_size = size
            post_event(events, stop_event, ("resize", (size.columns, size.lines)))

        ready, _, _ = select.select([fd], [], [], INPUT_POLL_SECONDS)
        if not ready:
            continue
        data = os.read(fd, 1)
        if not data:
            continue
        key = data.decode("utf-8", errors="ignore")
        if key == "\x1b":
            event = decode_escape(read_escape_sequence(fd))
        else:
            event = decode_key(key)
        if event is not None:
            post_event(events, stop_event, event)


def restore_terminal(fd: int | None, settings: Any) -> None:
    sys.stdout.write(MOUSE_OFF + SHOW_CURSOR)
    sys.stdout.flush()
    if fd is None or settings is None:
        return
    try:
        termios.tcsetattr(fd, termios.TCSADRAIN, settings)
    except termios.error as exc:
        sys.stderr.write(f"moltbook: could not restore terminal settings: {exc}\n")


@contextmanager
def terminal_session() -> Iterator[None]:
    """Hold cbreak mode and mouse reporting for the lifetime of the UI.

    The previous terminal settings come back on normal exit, on quit and when
    an uncaught exception reaches the interpreter.
    """
    fd: int | None = None
    settings: Any = None
    if sys.stdin.isatty():
        fd = sys.stdin.fileno()
        settings = termios.tcgetattr(fd)
        tty.setcbreak(fd)
        sys.stdout.write(MOUSE_ON)
        sys.stdout.flush()

    previous_hook = sys.excepthook

    def restoring_hook(exc_type, exc, traceback):
        restore_terminal(fd, settings)
        sys.stdout.write(LEAVE_ALT_SCREEN)
        sys.stdout.flush()
        previous_hook(exc_type, exc, traceback)

    sys.excepthook = restoring_hook
    try:
        yield
    finally:
        sys.excepthook = previous_hook
        restore_terminal(fd, settings)
