#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Console output helpers for debsweep.

Every line printed here is mirrored into the run log so the log file holds
the same report the operator saw.
"""

from __future__ import annotations
import sys
import threading
import time
from contextlib import contextmanager
from typing import List, Optional, Tuple

from debsweep import constants
from debsweep.logging_setup import logger


def _console():
    if constants.RICH and constants.console is not None:
        return constants.console
    return None


def _escape(text: str) -> str:
    from rich.markup import escape
    return escape(text)


def _log_line(text: str) -> None:
    logger.debug(text, extra={"report_line": True})


def p(text: str = "") -> None:
    con = _console()
    if con is not None:
        con.print(text, highlight=False, markup=False)
    else:
        print(text)
    _log_line(text)


def print_banner() -> None:
    con = _console()
    if con is not None:
        con.print(constants.BANNER, style="bold cyan", highlight=False)
        con.print(constants.TAGLINE, style="dim", highlight=False)
    else:
        print(constants.BANNER)
        print(constants.TAGLINE)
    _log_line(f"{constants.BANNER} {constants.VERSION}")


def section(s: str) -> None:
    con = _console()
    if con is not None:
        con.print(f"\n[bold cyan]➤ {_escape(s)}[/bold cyan]")
        con.rule("", style="bold cyan")
    else:
        print(f"\n➤ {s}")
        print("━" * 60)
    _log_line(f"== {s} ==")


def line_ok(s: str) -> None:
    con = _console()
    if con is not None:
        con.print(f"[bold green]✓[/bold green] {_escape(s)}", highlight=False)
    else:
        print(f"✓ {s}")
    _log_line(f"✓ {s}")


def line_do(s: str) -> None:
    con = _console()
    if con is not None:
        con.print(f"[cyan]→[/cyan] {_escape(s)}", highlight=False)
    else:
        print(f"→ {s}")
    _log_line(f"→ {s}")


def line_skip(s: str) -> None:
    con = _console()
    if con is not None:
        con.print(f"[dim]○ {_escape(s)}[/dim]", highlight=False)
    else:
        print(f"○ {s}")
    _log_line(f"○ {s}")


def line_warn(s: str) -> None:
    con = _console()
    if con is not None:
        con.print(f"[bold yellow]! {_escape(s)}[/bold yellow]", highlight=False)
    else:
        print(f"! {s}")
    _log_line(f"! {s}")


def line_err(s: str) -> None:
    con = _console()
    if con is not None:
        con.print(f"[bold red]✗ {_escape(s)}[/bold red]", highlight=False)
    else:
        print(f"✗ {s}", file=sys.stderr)
    _log_line(f"✗ {s}")


def kv_table(title_str: str, rows: List[Tuple[str, str]]) -> None:
    con = _console()
    if con is not None:
        from rich import box
        from rich.table import Table
        t = Table(title=title_str, box=box.SIMPLE_HEAVY, show_header=False, title_style="bold")
        t.add_column("Key", style="bold")
        t.add_column("Value")
        for k, v in rows:
            t.add_row(_escape(k), _escape(v))
        con.print(t)
    else:
        print(f"\n-- {title_str} --")
        for k, v in rows:
            print(f"{k}: {v}")
    for k, v in rows:
        _log_line(f"{k}: {v}")


def table(title_str: str, headers: List[str], rows: List[List[str]]) -> None:
    con = _console()
    if con is not None:
        from rich import box
        from rich.table import Table
        t = Table(title=title_str, box=box.SIMPLE_HEAVY, header_style="bold", title_style="bold")
        for h in headers:
            t.add_column(h, overflow="fold")
        for r in rows:
            t.add_row(*(_escape(c) for c in r))
        con.print(t)
    else:
        print(f"\n-- {title_str} --")
        print(" | ".join(headers))
        print("-" * 80)
        for r in rows:
            print(" | ".join(r))
    _log_line(f"-- {title_str} --")
    for r in rows:
        _log_line("\t".join(r))


@contextmanager
def scan_status(msg: str):
    con = _console()
    if con is not None:
        with con.status(msg, spinner="dots"):
            yield
        return
    if not sys.stdout.isatty():
        yield
        return
    stop = threading.Event()
    spinner = ["|", "/", "-", "\\"]

    def _spin() -> None:
        i = 0
        while not stop.is_set():
            sys.stdout.write(f"\r{spinner[i % len(spinner)]} {msg}")
            sys.stdout.flush()
            i += 1
            time.sleep(0.1)

    t = threading.Thread(target=_spin, daemon=True)
    t.start()
    try:
        yield
    finally:
        stop.set()
        t.join()
        sys.stdout.write("\r")
        sys.stdout.flush()
        line_ok(msg)


def print_totals(dry_run: bool, estimated: int, freed: int, disk_before: Optional[int],
                 disk_after: Optional[int], log_path: Optional[str]) -> None:
    """Final report block shared by the clean and files commands."""
    from debsweep.helpers import format_size

    p("\n" + "=" * 70)
    if disk_before is not None:
        p(f"Disk (/) used before : {format_size(disk_before)}")
    if disk_after is not None:
        p(f"Disk (/) used after  : {format_size(disk_after)}")
    if dry_run:
        line_warn(f"Report mode - nothing was deleted. Reclaimable: {format_size(estimated)}")
        p("Run with --apply to perform the cleanup.")
    else:
        actual = 0
        if disk_before is not None and disk_after is not None:
            actual = max(0, disk_before - disk_after)
        line_ok(f"Freed on disk: {format_size(actual)} (by operations: {format_size(freed)})")
    if log_path:
        p(f"Full log: {log_path}")
    p("=" * 70)
