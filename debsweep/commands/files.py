#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Files command: find large files and let the operator pick which to delete.
"""

from __future__ import annotations
import argparse
import shutil
from typing import Any, Dict, List, Optional, Tuple

from debsweep import constants
from debsweep.commands.clean import CleanOptions, build_options
from debsweep.helpers import disk_used_bytes, format_size, human_bytes
from debsweep.output import line_err, line_ok, line_warn, p, print_totals, scan_status, section, table
from debsweep.selector import Candidate, select_and_delete
from debsweep.system import reporter
from debsweep.system.executor import make_executor
from debsweep.terminal import AnsiTerminal, Terminal


def review_candidates(candidates: List[Candidate], opts: CleanOptions,
                      terminal: Optional[Terminal] = None) -> Tuple[int, int]:
    """
    Run the selector over candidates and print the outcome.

    Returns (exit code, bytes reclaimed). In report mode the byte count is
    what the selected files would have released.
    """
    if terminal is None:
        if not AnsiTerminal.available():
            line_warn("The file selector needs an interactive terminal.")
            return constants.EXIT_FAILURE, 0
        terminal = AnsiTerminal()

    if opts.dry_run:
        line_warn("Report mode: selected files will be listed, not deleted.")
    # header, separator, counters and notice lines
    max_rows = max(5, shutil.get_terminal_size().lines - 6)
    result = select_and_delete(candidates, terminal, make_executor(opts.dry_run, opts.whitelist), max_rows)

    if result.cancelled:
        line_warn("Cancelled - nothing deleted.")
        return constants.EXIT_CANCELLED, 0

    rows = []
    for o in result.outcomes:
        status = "ok" if o.succeeded else f"failed: {o.reason}"
        rows.append([o.path, human_bytes(o.bytes_reclaimed), status])
    table("Deleted files" if not opts.dry_run else "Would delete", ["Path", "Size", "Status"], rows)
    if result.error_count:
        line_err(f"{result.error_count} file(s) could not be deleted")
    line_ok(f"{result.deleted_count} file(s), {format_size(result.total_bytes_reclaimed)}"
            + (" would be reclaimed" if opts.dry_run else " reclaimed"))
    code = constants.EXIT_FAILURE if result.error_count else constants.EXIT_OK
    return code, result.total_bytes_reclaimed


def cmd_files(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    opts = build_options(args, config)
    section(f"Large files (>= {opts.threshold_label}) under {opts.search_dir}")
    with scan_status("Scanning for large files..."):
        candidates = reporter.find_large_files(opts.search_dir, opts.threshold, opts.top_files, opts.whitelist)
    if not candidates:
        line_ok("No large files found.")
        return constants.EXIT_OK
    p(f"Found {len(candidates)} file(s), {format_size(sum(c.size_bytes for c in candidates))} in total.")
    disk_before = disk_used_bytes("/")
    code, reclaimed = review_candidates(candidates, opts)
    if code == constants.EXIT_CANCELLED:
        return code
    disk_after = disk_used_bytes("/")
    if opts.dry_run:
        print_totals(True, reclaimed, 0, disk_before, disk_after, opts.log_file)
    else:
        print_totals(False, 0, reclaimed, disk_before, disk_after, opts.log_file)
    return code
