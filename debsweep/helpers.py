#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Helper utility functions for debsweep.
"""

from __future__ import annotations
import os
import re
import shlex
import subprocess
import sys
from typing import List, Optional, Tuple

from debsweep.errors import ValidationError
from debsweep.logging_setup import logger
from debsweep.output import p


def which(cmd: str) -> Optional[str]:
    """Find the full path of a command."""
    from shutil import which as _which
    return _which(cmd)


def run(cmd: List[str], dry_run: bool, check: bool = False) -> subprocess.CompletedProcess:
    """
    Execute a command with logging and dry-run support.

    Args:
        cmd: Command and arguments as list
        dry_run: If True, only print what would be executed
        check: If True, raise CalledProcessError on non-zero exit

    Returns:
        CompletedProcess instance
    """
    printable = " ".join(shlex.quote(x) for x in cmd)
    if dry_run:
        p(f"[dry-run] {printable}")
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")
    p(f"[run] {printable}")
    result = subprocess.run(cmd, check=check, capture_output=True, text=True)
    logger.debug(f"Command completed with return code: {result.returncode}")
    if result.returncode != 0 and result.stderr:
        logger.warning(f"{cmd[0]}: {result.stderr.strip()}")
    return result


def capture(cmd: List[str]) -> str:
    """
    Execute a command and capture its output.

    Args:
        cmd: Command and arguments as list

    Returns:
        Command output as string (stripped)
    """
    logger.debug(f"Capturing output: {' '.join(shlex.quote(x) for x in cmd)}")
    result = subprocess.check_output(cmd, text=True, stderr=subprocess.DEVNULL).strip()
    logger.debug(f"Captured {len(result)} bytes")
    return result


def is_root() -> bool:
    """Check if running as root."""
    return os.geteuid() == 0


def confirm(msg: str, assume_yes: bool = False) -> bool:
    """Soft y/N question for non-destructive choices."""
    if assume_yes:
        return True
    try:
        ans = input(f"{msg} [y/N]: ").strip().lower()
    except EOFError:
        return False
    return ans in ("y", "yes")


def maybe_reexec_with_sudo(reason: str) -> None:
    """Offer to re-run the current command line under sudo."""
    if is_root():
        return
    if which("sudo") and sys.stdin.isatty():
        ans = input(f"{reason} Re-run with sudo? [y/N]: ").strip().lower()
        if ans in ("y", "yes"):
            os.execvp("sudo", ["sudo", sys.executable, "-m", "debsweep", *sys.argv[1:]])
    else:
        p(f"[info] {reason} Run with sudo for full access.")


def clear_screen() -> None:
    if sys.stdout.isatty():
        sys.stdout.write("\x1b[2J\x1b[H")
        sys.stdout.flush()


def pause(msg: str = "Press Enter to return to the menu...") -> None:
    if sys.stdin.isatty():
        try:
            input(msg)
        except EOFError:
            pass


def human_bytes(n: int) -> str:
    """
    Convert bytes to human-readable format.

    Args:
        n: Number of bytes

    Returns:
        Human-readable string (e.g., "1.5GiB")
    """
    units = ["B", "KiB", "MiB", "GiB", "TiB", "PiB"]
    f = float(n)
    for u in units:
        if f < 1024.0 or u == units[-1]:
            return f"{int(f)}B" if u == "B" else f"{f:.1f}{u}"
        f /= 1024.0
    return f"{n}B"


def format_size(n: Optional[int], unknown: bool = False) -> str:
    """
    Format size with optional unknown flag.

    Args:
        n: Number of bytes (or None)
        unknown: If True, append '+' to indicate approximate size

    Returns:
        Formatted size string
    """
    if n is None:
        return "size unavailable"
    s = human_bytes(n)
    return f"{s}+" if unknown else s


_SIZE_RE = re.compile(r"^\s*([0-9]+(?:\.[0-9]+)?)\s*([KMGTP]?)(i?B?)\s*$", re.IGNORECASE)


def parse_size_to_bytes(s: str) -> Optional[int]:
    """
    Parse sizes as printed by docker/journalctl ("1.2GB", "512MiB") or
    given on the command line in find(1) style ("100M", "1G").

    Bare unit letters and "iB" suffixes are binary; "KB"/"MB"/... are decimal,
    matching what docker prints.
    """
    if not s:
        return None
    m = _SIZE_RE.match(s)
    if not m:
        return None
    val = float(m.group(1))
    prefix = m.group(2).upper()
    suffix = m.group(3).upper()
    if not prefix:
        return int(val)
    power = "KMGTP".index(prefix) + 1
    base = 1000 if suffix == "B" else 1024
    return int(val * base ** power)


def parse_threshold(s: str) -> int:
    """Threshold flag value to bytes; raises ValidationError when malformed."""
    n = parse_size_to_bytes(s)
    if n is None or n < 0:
        raise ValidationError(f"Invalid size threshold: {s!r} (expected e.g. 50M, 1G)")
    return n


_JOURNAL_AGE_RE = re.compile(r"^\d+(s|min|h|d|w|month|m|y)?$")


def validate_journal_age(s: str) -> str:
    if not _JOURNAL_AGE_RE.match(s or ""):
        raise ValidationError(f"Invalid journal age: {s!r} (expected e.g. 3d, 2w)")
    return s


def parse_journal_usage_bytes(s: str) -> Optional[int]:
    m = re.search(r"([0-9]+(?:\.[0-9]+)?\s*[KMGTP]i?B?)\b", s, re.IGNORECASE)
    if not m:
        return None
    return parse_size_to_bytes(m.group(1).replace(" ", ""))


def disk_usage_bytes(path: str = "/") -> Optional[Tuple[int, int, int]]:
    """(total, used, available) for the filesystem holding path."""
    try:
        st = os.statvfs(path)
    except OSError:
        return None
    total = st.f_blocks * st.f_frsize
    avail = st.f_bavail * st.f_frsize
    used = (st.f_blocks - st.f_bfree) * st.f_frsize
    return total, used, avail


def disk_used_bytes(path: str = "/") -> Optional[int]:
    usage = disk_usage_bytes(path)
    return usage[1] if usage else None


def du_bytes(path: str) -> Optional[int]:
    if not which("du"):
        return None
    try:
        out = capture(["du", "-sb", path])
        if not out:
            return None
        return int(out.split()[0])
    except (subprocess.CalledProcessError, ValueError, OSError):
        return None
