#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Raw keyboard input and in-place redraw for the interactive file selector.

The selector only talks to the small Terminal interface below (read_key,
render, read_line, close) so it can be driven by a scripted fake in tests.
AnsiTerminal is the real implementation on top of termios and ANSI escapes.
"""

from __future__ import annotations
import os
import select
import shutil
import sys
from enum import Enum
from typing import Callable, List, Optional, TextIO

from debsweep.constants import ESCAPE_SEQUENCE_TIMEOUT
from debsweep.logging_setup import logger

try:
    import termios
    import tty
    _HAS_TERMIOS = True
except ImportError:
    _HAS_TERMIOS = False


class Key(Enum):
    UP = "up"
    DOWN = "down"
    TOGGLE = "toggle"
    TOGGLE_ALL = "toggle_all"
    SUBMIT = "submit"
    QUIT = "quit"
    OTHER = "other"


_ARROWS = {"A": Key.UP, "B": Key.DOWN}
_PLAIN_KEYS = {
    " ": Key.TOGGLE,
    "\r": Key.SUBMIT,
    "\n": Key.SUBMIT,
    "q": Key.QUIT,
    "Q": Key.QUIT,
    "k": Key.UP,
    "j": Key.DOWN,
    "a": Key.TOGGLE_ALL,
}


def decode_key(read_char: Callable[[], str], pending: Callable[[float], bool]) -> Key:
    """
    Turn the next keypress into a Key.

    read_char returns one character and blocks until it is available.
    pending(timeout) reports whether more input arrives within timeout
    seconds; it is only consulted after an ESC to tell a lone Escape
    (quit) apart from an arrow-key sequence such as ESC [ A.
    """
    ch = read_char()
    if ch == "\x1b":
        if not pending(ESCAPE_SEQUENCE_TIMEOUT):
            return Key.QUIT
        intro = read_char()
        if intro not in ("[", "O"):
            return Key.OTHER
        final = read_char()
        return _ARROWS.get(final, Key.OTHER)
    if ch == "\x03":
        raise KeyboardInterrupt
    return _PLAIN_KEYS.get(ch, Key.OTHER)


class Terminal:
    """Capability interface used by the selector."""

    def read_key(self) -> Key:
        raise NotImplementedError

    def render(self, lines: List[str]) -> None:
        raise NotImplementedError

    def read_line(self, prompt: str) -> str:
        raise NotImplementedError

    def close(self) -> None:
        pass


class AnsiTerminal(Terminal):
    """
    Terminal on a real TTY.

    Keys are read one at a time in cbreak mode straight from the file
    descriptor (bypassing Python's buffered stdin so select() sees the
    true state). Each render moves the cursor back over the previous
    frame and clears exactly as many lines as that frame had.
    """

    def __init__(self, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None):
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self._frame_height = 0
        self._cursor_hidden = False

    @property
    def _fd(self) -> int:
        return self.stdin.fileno()

    @staticmethod
    def available() -> bool:
        return _HAS_TERMIOS and sys.stdin.isatty() and sys.stdout.isatty()

    def _read_char(self) -> str:
        data = os.read(self._fd, 1)
        if not data:
            raise EOFError("stdin closed")
        return data.decode("utf-8", errors="replace")

    def _pending(self, timeout: float) -> bool:
        ready, _, _ = select.select([self._fd], [], [], timeout)
        return bool(ready)

    def read_key(self) -> Key:
        old_settings = termios.tcgetattr(self._fd)
        try:
            tty.setcbreak(self._fd)
            key = decode_key(self._read_char, self._pending)
        finally:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, old_settings)
        logger.debug(f"key: {key.value}")
        return key

    def _clear_previous_frame(self) -> None:
        for _ in range(self._frame_height):
            # cursor up one line, erase the whole line
            self.stdout.write("\x1b[1A\x1b[2K")
        self.stdout.write("\r")

    def render(self, lines: List[str]) -> None:
        if not self._cursor_hidden:
            self.stdout.write("\x1b[?25l")
            self._cursor_hidden = True
        self._clear_previous_frame()
        # a wrapped line would break the line count used by the next clear
        width = max(1, shutil.get_terminal_size().columns - 1)
        for line in lines:
            self.stdout.write(line[:width] + "\n")
        self.stdout.flush()
        self._frame_height = len(lines)

    def read_line(self, prompt: str) -> str:
        self._show_cursor()
        self.stdout.flush()
        try:
            return input(prompt)
        except EOFError:
            return ""

    def _show_cursor(self) -> None:
        if self._cursor_hidden:
            self.stdout.write("\x1b[?25h")
            self._cursor_hidden = False

    def close(self) -> None:
        self._show_cursor()
        self.stdout.flush()
        self._frame_height = 0
