#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Deletion executor: removes paths and reports how many bytes went away.

Every function takes dry_run; in that case it only reports what it would
remove and returns the would-be byte count.
"""

from __future__ import annotations
import os
import shutil
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from debsweep.config import is_whitelisted
from debsweep.errors import DeletionError
from debsweep.logging_setup import logger
from debsweep.output import p
from debsweep.system.reporter import old_files, tree_size


def _path_size(path: str) -> int:
    if os.path.isdir(path) and not os.path.islink(path):
        return tree_size(path)
    return os.lstat(path).st_size


def remove_path(path: str, dry_run: bool = False, whitelist: Optional[List[str]] = None) -> int:
    """
    Remove a file or directory tree.

    A path that is already gone counts as removed with zero bytes.
    Raises DeletionError on permission problems, whitelisted paths and
    other OS failures.
    """
    if whitelist and is_whitelisted(path, whitelist):
        raise DeletionError(path, "protected by whitelist")
    try:
        size = _path_size(path)
    except FileNotFoundError:
        logger.debug(f"Already gone: {path}")
        return 0
    except OSError as e:
        raise DeletionError(path, e.strerror or str(e)) from e

    if dry_run:
        p(f"[dry-run] rm -rf {path}")
        return size
    try:
        if os.path.isdir(path) and not os.path.islink(path):
            shutil.rmtree(path)
        else:
            os.remove(path)
    except FileNotFoundError:
        return 0
    except OSError as e:
        raise DeletionError(path, e.strerror or str(e)) from e
    logger.debug(f"Removed {path} ({size} bytes)")
    return size


def make_executor(dry_run: bool, whitelist: Optional[List[str]] = None) -> Callable[[str], int]:
    """Bind remove_path to a mode for use by the interactive selector."""
    def _execute(path: str) -> int:
        return remove_path(path, dry_run=dry_run, whitelist=whitelist)
    return _execute


def _remove_empty_dirs(directory: str) -> None:
    for dirpath, dirnames, filenames in os.walk(directory, topdown=False):
        if dirpath == directory:
            continue
        try:
            if not os.listdir(dirpath):
                os.rmdir(dirpath)
        except OSError:
            continue


def purge_old_files(directory: str, days: int, dry_run: bool = False,
                    whitelist: Optional[List[str]] = None) -> Tuple[int, int]:
    """
    Delete files older than days under directory, then empty subdirectories.

    Returns (files removed, bytes freed). Individual failures are logged
    and skipped.
    """
    removed = 0
    freed = 0
    for path, size in old_files(directory, days):
        if whitelist and is_whitelisted(path, whitelist):
            continue
        if dry_run:
            removed += 1
            freed += size
            continue
        try:
            os.remove(path)
        except FileNotFoundError:
            continue
        except OSError as e:
            logger.warning(f"Could not delete {path}: {e}")
            continue
        removed += 1
        freed += size
    if not dry_run:
        _remove_empty_dirs(directory)
    return removed, freed


def empty_directory(directory: Path, dry_run: bool = False, subdirs: Optional[List[str]] = None,
                    whitelist: Optional[List[str]] = None) -> int:
    """
    Remove everything inside directory (or inside the named subdirs of it),
    keeping the directory itself. Returns bytes freed.
    """
    roots = [directory / s for s in subdirs] if subdirs else [directory]
    freed = 0
    for root in roots:
        if not root.is_dir():
            continue
        for child in sorted(root.iterdir()):
            try:
                freed += remove_path(str(child), dry_run=dry_run, whitelist=whitelist)
            except DeletionError as e:
                logger.warning(f"Could not delete {e.path}: {e.reason}")
    return freed
