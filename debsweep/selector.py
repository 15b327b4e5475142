#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Checkbox menu for picking large files to delete.

The operator browses the candidate list, toggles entries, submits, and then
has to type the confirmation token before anything is removed. Removal is
delegated to an executor callable so the menu itself never touches the
filesystem.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from debsweep.constants import CONFIRM_TOKEN
from debsweep.errors import DeletionError, ValidationError
from debsweep.helpers import human_bytes
from debsweep.logging_setup import logger
from debsweep.terminal import Key, Terminal

# Removes one path and returns the number of bytes reclaimed.
# Raises DeletionError when the path could not be removed.
Executor = Callable[[str], int]

HEADER = "Select files to delete: ↑/↓ move, Space toggle, a all, Enter delete, q quit"
NO_SELECTION_NOTICE = "Nothing selected - press Space to mark a file first."


@dataclass(frozen=True)
class Candidate:
    size_bytes: int
    path: str


class MenuState(Enum):
    BROWSING = "browsing"
    CONFIRMING = "confirming"
    CANCELLED = "cancelled"
    EXECUTING = "executing"


class SelectionState:
    """Cursor position plus one selected flag per candidate."""

    def __init__(self, count: int):
        if count <= 0:
            raise ValidationError("Selection needs at least one candidate")
        self.count = count
        self.cursor = 0
        self.selected = [False] * count

    def move_up(self) -> None:
        if self.cursor > 0:
            self.cursor -= 1

    def move_down(self) -> None:
        if self.cursor < self.count - 1:
            self.cursor += 1

    def toggle(self, index: Optional[int] = None) -> None:
        i = self.cursor if index is None else index
        self.selected[i] = not self.selected[i]

    def toggle_all(self) -> None:
        target = not all(self.selected)
        self.selected = [target] * self.count

    def selected_indices(self) -> List[int]:
        return [i for i, flag in enumerate(self.selected) if flag]


@dataclass
class DeletionOutcome:
    path: str
    succeeded: bool
    reason: str = ""
    bytes_reclaimed: int = 0


@dataclass
class SelectionResult:
    cancelled: bool
    outcomes: List[DeletionOutcome] = field(default_factory=list)
    total_bytes_reclaimed: int = 0

    @property
    def deleted_count(self) -> int:
        return sum(1 for o in self.outcomes if o.succeeded)

    @property
    def error_count(self) -> int:
        return sum(1 for o in self.outcomes if not o.succeeded)


def render_frame(candidates: List[Candidate], state: SelectionState,
                 notice: str = "", max_rows: Optional[int] = None) -> List[str]:
    """
    Build the lines of one menu frame.

    With max_rows set, only a window of that many candidates around the
    cursor is shown so the frame fits on screen.
    """
    lines = [HEADER, "─" * min(len(HEADER), 78)]
    start, end = 0, len(candidates)
    if max_rows is not None and max_rows > 0 and len(candidates) > max_rows:
        start = min(max(0, state.cursor - max_rows // 2), len(candidates) - max_rows)
        end = start + max_rows
    for i in range(start, end):
        c = candidates[i]
        marker = ">" if i == state.cursor else " "
        box = "[x]" if state.selected[i] else "[ ]"
        lines.append(f"{marker} {box} {human_bytes(c.size_bytes):>9}  {c.path}")
    if start > 0 or end < len(candidates):
        lines.append(f"  ({start + 1}-{end} of {len(candidates)})")
    chosen = state.selected_indices()
    total = sum(candidates[i].size_bytes for i in chosen)
    lines.append(f"Selected: {len(chosen)} ({human_bytes(total)})")
    if notice:
        lines.append(notice)
    return lines


def browse(candidates: List[Candidate], terminal: Terminal,
           max_rows: Optional[int] = None) -> Optional[List[int]]:
    """
    Run the browsing loop.

    Returns the selected indices in list order once the operator submits a
    non-empty selection, or None when they quit.
    """
    state = SelectionState(len(candidates))
    notice = ""
    while True:
        terminal.render(render_frame(candidates, state, notice, max_rows))
        notice = ""
        key = terminal.read_key()
        if key is Key.UP:
            state.move_up()
        elif key is Key.DOWN:
            state.move_down()
        elif key is Key.TOGGLE:
            state.toggle()
        elif key is Key.TOGGLE_ALL:
            state.toggle_all()
        elif key is Key.SUBMIT:
            chosen = state.selected_indices()
            if chosen:
                return chosen
            notice = NO_SELECTION_NOTICE
        elif key is Key.QUIT:
            return None


def execute(candidates: List[Candidate], indices: List[int], executor: Executor) -> SelectionResult:
    """Delete the chosen candidates in order; one failure never stops the rest."""
    result = SelectionResult(cancelled=False)
    for i in indices:
        path = candidates[i].path
        try:
            freed = executor(path)
        except DeletionError as e:
            logger.warning(f"Could not delete {path}: {e.reason}")
            result.outcomes.append(DeletionOutcome(path, False, e.reason))
            continue
        result.outcomes.append(DeletionOutcome(path, True, bytes_reclaimed=freed))
        result.total_bytes_reclaimed += freed
    return result


def select_and_delete(candidates: List[Candidate], terminal: Terminal, executor: Executor,
                      max_rows: Optional[int] = None) -> SelectionResult:
    """
    Full menu flow: browse, confirm, delete.

    Raises ValidationError for an empty candidate list. Any confirmation
    answer other than exactly CONFIRM_TOKEN cancels without calling the
    executor.
    """
    if not candidates:
        raise ValidationError("No candidates to select from")

    menu_state = MenuState.BROWSING
    try:
        chosen = browse(candidates, terminal, max_rows)
        if chosen is None:
            menu_state = MenuState.CANCELLED
        else:
            menu_state = MenuState.CONFIRMING
            total = sum(candidates[i].size_bytes for i in chosen)
            answer = terminal.read_line(
                f"Delete {len(chosen)} file(s), {human_bytes(total)}? "
                f"Type '{CONFIRM_TOKEN}' to confirm: "
            )
            menu_state = MenuState.EXECUTING if answer == CONFIRM_TOKEN else MenuState.CANCELLED
    finally:
        terminal.close()

    logger.debug(f"Selector finished in state {menu_state.value}")
    if menu_state is MenuState.CANCELLED:
        return SelectionResult(cancelled=True)
    return execute(candidates, chosen, executor)
