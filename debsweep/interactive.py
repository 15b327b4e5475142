#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Numbered interactive main menu over the debsweep commands.
"""

from __future__ import annotations
import argparse
from typing import Any, Callable, Dict, List, Tuple

from debsweep import constants
from debsweep.commands import cmd_clean, cmd_files, cmd_registry
from debsweep.errors import ValidationError
from debsweep.helpers import clear_screen, pause
from debsweep.output import line_err, p, print_banner

Command = Callable[[argparse.Namespace, Dict[str, Any]], int]

MENU: List[Tuple[str, str, Command, bool]] = [
    ("1", "Report disk usage (no changes)", cmd_clean, False),
    ("2", "Clean up (apply)", cmd_clean, True),
    ("3", "Review large files", cmd_files, True),
    ("4", "Prune a Docker registry", cmd_registry, True),
]


def prompt_bool(msg: str, default: bool = False) -> bool:
    """Prompt user for a boolean choice."""
    suffix = "Y/n" if default else "y/N"
    ans = input(f"{msg} [{suffix}]: ").strip().lower()
    if not ans:
        return default
    return ans in ("y", "yes")


def print_menu() -> None:
    from debsweep.constants import RICH, console

    if RICH and console:
        console.print("\n[bold white]━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━[/bold white]")
        for key, label, _, _ in MENU:
            tag = " [red](destructive)[/red]" if key == "2" else ""
            console.print(f"    [bold cyan]{key}[/bold cyan]   {label}{tag}")
        console.print("[dim]─────────────────────────────────────────────────────────────[/dim]")
        console.print("    [bold white]0[/bold white]   Exit")
        console.print("[bold white]━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━[/bold white]\n")
    else:
        p("\n═══════════════════════════════════════════════════════════")
        for key, label, _, _ in MENU:
            p(f"    {key}   {label}")
        p("─────────────────────────────────────────────────────────────")
        p("    0   Exit")
        p("═══════════════════════════════════════════════════════════\n")


def run_choice(choice: str, base: argparse.Namespace, config: Dict[str, Any]) -> int:
    """Run one menu entry; returns its exit code."""
    for key, _, command, apply in MENU:
        if key != choice:
            continue
        args = argparse.Namespace(**vars(base))
        if command is cmd_files:
            args.apply = prompt_bool("Delete the files you select (otherwise report only)", False)
        elif command is cmd_registry:
            args.apply = prompt_bool("Delete tags (otherwise report only)", False)
        else:
            args.apply = apply
        try:
            return command(args, config)
        except ValidationError as e:
            line_err(str(e))
            return constants.EXIT_FAILURE
    raise ValidationError(f"Invalid option: {choice!r}")


def interactive_menu(base: argparse.Namespace, config: Dict[str, Any]) -> int:
    """Loop until the operator picks 0; returns the last command's exit code."""
    from debsweep.constants import RICH, console

    code = constants.EXIT_OK
    while True:
        clear_screen()
        print_banner()
        print_menu()
        try:
            choice = input("  → ").strip()
        except EOFError:
            return code
        if choice == "0":
            if RICH and console:
                console.print("\n  [dim]Exiting debsweep...[/dim]\n")
            return code
        try:
            code = run_choice(choice, base, config)
        except ValidationError as e:
            line_err(str(e))
        pause()
