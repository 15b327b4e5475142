#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Disk usage discovery: large files, aged files, per-user caches, journal and
package-manager usage. Nothing in this module deletes anything.
"""

from __future__ import annotations
import os
import subprocess
import time
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from debsweep import constants
from debsweep.config import is_whitelisted
from debsweep.helpers import capture, parse_journal_usage_bytes, which
from debsweep.logging_setup import logger
from debsweep.selector import Candidate


def _is_pruned(path: str, pruned: Iterable[str]) -> bool:
    for prefix in pruned:
        if path == prefix or path.startswith(prefix.rstrip("/") + "/"):
            return True
    return False


def find_large_files(root: str, threshold: int, limit: int = constants.DEFAULT_TOP_FILES,
                     whitelist: Optional[List[str]] = None,
                     pruned: Iterable[str] = constants.PSEUDO_FILESYSTEMS) -> List[Candidate]:
    """
    Files of at least threshold bytes under root, largest first.

    Stays on root's filesystem, skips pseudo-filesystems, symlinks and
    whitelisted paths. Unreadable directories are skipped silently.
    """
    whitelist = whitelist or []
    pruned = tuple(pruned)
    try:
        root_dev = os.stat(root).st_dev
    except OSError as e:
        logger.warning(f"Cannot scan {root}: {e}")
        return []

    found: List[Candidate] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=lambda e: logger.debug(f"skip: {e}")):
        keep = []
        for d in dirnames:
            full = os.path.join(dirpath, d)
            if _is_pruned(full, pruned):
                continue
            try:
                if os.lstat(full).st_dev != root_dev:
                    continue
            except OSError:
                continue
            keep.append(d)
        dirnames[:] = keep

        for name in filenames:
            full = os.path.join(dirpath, name)
            try:
                st = os.lstat(full)
            except OSError:
                continue
            if not os.path.isfile(full) or os.path.islink(full):
                continue
            if st.st_size < threshold:
                continue
            if is_whitelisted(full, whitelist):
                continue
            found.append(Candidate(st.st_size, full))

    found.sort(key=lambda c: c.size_bytes, reverse=True)
    return found[:limit]


def old_files(directory: str, days: int) -> List[Tuple[str, int]]:
    """Regular files under directory not modified for more than days."""
    base = Path(directory)
    if not base.is_dir():
        return []
    cutoff = time.time() - days * 86400
    res: List[Tuple[str, int]] = []
    for dirpath, _, filenames in os.walk(directory):
        for name in filenames:
            full = os.path.join(dirpath, name)
            try:
                st = os.lstat(full)
            except OSError:
                continue
            if os.path.islink(full) or not os.path.isfile(full):
                continue
            if st.st_mtime < cutoff:
                res.append((full, st.st_size))
    return res


def tree_size(directory: str) -> int:
    """Apparent size of all regular files under directory."""
    total = 0
    for dirpath, _, filenames in os.walk(directory):
        for name in filenames:
            full = os.path.join(dirpath, name)
            try:
                if not os.path.islink(full):
                    total += os.lstat(full).st_size
            except OSError:
                continue
    return total


def user_homes() -> List[Path]:
    homes = sorted(p for p in Path("/home").glob("*") if p.is_dir())
    root_home = Path("/root")
    if root_home.is_dir():
        homes.append(root_home)
    return homes


def user_cache_dirs(min_bytes: int, homes: Optional[List[Path]] = None) -> List[Tuple[str, Path, int]]:
    """(user, ~/.cache, size) for caches of at least min_bytes."""
    res = []
    for home in homes if homes is not None else user_homes():
        cache = home / ".cache"
        if not cache.is_dir():
            continue
        size = tree_size(str(cache))
        if size < min_bytes:
            continue
        res.append((home.name, cache, size))
    return res


def thumbnail_dirs(homes: Optional[List[Path]] = None) -> List[Tuple[str, Path, int]]:
    res = []
    for home in homes if homes is not None else user_homes():
        thumbs = home / ".cache" / "thumbnails"
        if thumbs.is_dir():
            res.append((home.name, thumbs, tree_size(str(thumbs))))
    return res


def trash_dirs(homes: Optional[List[Path]] = None) -> List[Tuple[str, Path, int]]:
    res = []
    for home in homes if homes is not None else user_homes():
        trash = home / ".local" / "share" / "Trash"
        if not trash.is_dir():
            continue
        size = tree_size(str(trash))
        if size > 0:
            res.append((home.name, trash, size))
    return res


def rotated_logs(log_dir: str = constants.LOG_DIR) -> List[Tuple[str, int]]:
    """Compressed and rotated log files, largest first."""
    base = Path(log_dir)
    if not base.is_dir():
        return []
    res: List[Tuple[str, int]] = []
    for dirpath, _, filenames in os.walk(log_dir):
        for name in filenames:
            if not name.endswith(constants.ROTATED_LOG_SUFFIXES):
                continue
            full = os.path.join(dirpath, name)
            try:
                res.append((full, os.lstat(full).st_size))
            except OSError:
                continue
    res.sort(key=lambda x: x[1], reverse=True)
    return res


def apt_autoremove_count() -> Optional[int]:
    if not which("apt-get"):
        return None
    try:
        out = capture(["apt-get", "-s", "autoremove"])
    except (subprocess.CalledProcessError, OSError):
        return None
    return sum(1 for line in out.splitlines() if line.startswith("Remv "))


def journal_usage_bytes() -> Optional[int]:
    if not which("journalctl"):
        return None
    try:
        out = capture(["journalctl", "--disk-usage"])
    except (subprocess.CalledProcessError, OSError):
        return None
    return parse_journal_usage_bytes(out)
