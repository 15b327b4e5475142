#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Clean command: walk every reclaimable category, report its size and, in
apply mode, clean it up.

Each category returns a CategoryResult; the command sums freed bytes from
those values instead of keeping a running counter.
"""

from __future__ import annotations
import argparse
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from debsweep import constants
from debsweep.config import whitelist_patterns
from debsweep.docker import engine
from debsweep.errors import DeletionError
from debsweep.helpers import (
    confirm, disk_used_bytes, du_bytes, format_size, human_bytes, is_root,
    maybe_reexec_with_sudo, parse_threshold, run, validate_journal_age, which,
)
from debsweep.logging_setup import logger
from debsweep.output import (
    kv_table, line_do, line_ok, line_skip, line_warn, print_totals,
    scan_status, section, table,
)
from debsweep.selector import Candidate
from debsweep.system import executor, reporter
from debsweep.terminal import AnsiTerminal


@dataclass
class CleanOptions:
    dry_run: bool = True
    threshold: int = 100 * 1024 * 1024
    threshold_label: str = constants.DEFAULT_THRESHOLD
    search_dir: str = constants.DEFAULT_SEARCH_DIR
    journal_age: str = constants.DEFAULT_JOURNAL_AGE
    tmp_age_days: int = constants.TMP_MAX_AGE_DAYS
    cache_age_days: int = constants.CACHE_MAX_AGE_DAYS
    cache_min_bytes: int = constants.CACHE_MIN_MB * 1024 * 1024
    top_files: int = constants.DEFAULT_TOP_FILES
    docker: bool = True
    whitelist: List[str] = field(default_factory=list)
    log_file: Optional[str] = None


@dataclass
class CategoryResult:
    label: str
    count: int = 0
    size_bytes: Optional[int] = 0
    freed_bytes: int = 0
    risk: str = "low"
    items: List[Candidate] = field(default_factory=list)


# (items, opts) -> (exit code, bytes reclaimed)
Review = Callable[[List[Candidate], "CleanOptions"], Tuple[int, int]]


def build_options(args: argparse.Namespace, config: Dict[str, Any]) -> CleanOptions:
    """Command-line flags over config.toml over defaults; raises ValidationError."""
    clean = config.get("clean", {})
    threshold_label = getattr(args, "threshold", None) or clean.get("threshold", constants.DEFAULT_THRESHOLD)
    journal_age = getattr(args, "journal_age", None) or clean.get("journal_age", constants.DEFAULT_JOURNAL_AGE)
    return CleanOptions(
        dry_run=not getattr(args, "apply", False),
        threshold=parse_threshold(str(threshold_label)),
        threshold_label=str(threshold_label),
        search_dir=getattr(args, "search_dir", None) or clean.get("search_dir", constants.DEFAULT_SEARCH_DIR),
        journal_age=validate_journal_age(str(journal_age)),
        tmp_age_days=int(clean.get("tmp_age_days", constants.TMP_MAX_AGE_DAYS)),
        cache_age_days=int(clean.get("cache_age_days", constants.CACHE_MAX_AGE_DAYS)),
        cache_min_bytes=int(clean.get("cache_min_mb", constants.CACHE_MIN_MB)) * 1024 * 1024,
        top_files=int(clean.get("top_files", constants.DEFAULT_TOP_FILES)),
        docker=bool(clean.get("docker", True)),
        whitelist=whitelist_patterns(config),
        log_file=getattr(args, "log_file", None),
    )


# -----------------------------
# Categories
# -----------------------------
def clean_large_files(opts: CleanOptions) -> CategoryResult:
    section(f"Large files (>= {opts.threshold_label})")
    line_do(f"Searching {opts.search_dir} (excluding {', '.join(constants.PSEUDO_FILESYSTEMS)})...")
    with scan_status("Scanning for large files..."):
        candidates = reporter.find_large_files(opts.search_dir, opts.threshold, opts.top_files, opts.whitelist)
    if not candidates:
        line_ok("No large files found.")
        return CategoryResult("Large files")
    rows = [[human_bytes(c.size_bytes), c.path] for c in candidates]
    table("Largest files", ["Size", "Path"], rows)
    line_warn("Large files are never deleted automatically - use 'debsweep files' to pick them.")
    return CategoryResult("Large files", len(candidates), sum(c.size_bytes for c in candidates),
                          risk="high", items=candidates)


def clean_apt_cache(opts: CleanOptions) -> CategoryResult:
    section("APT cache")
    if not Path(constants.APT_CACHE_DIR).is_dir():
        line_ok("APT cache directory not found.")
        return CategoryResult("APT cache")
    before = du_bytes(constants.APT_CACHE_DIR) or 0
    line_do(f"Current size: {format_size(before)}")
    result = CategoryResult("APT cache", 1, before)
    if not which("apt-get"):
        line_skip("apt-get not available")
        return result
    run(["apt-get", "clean", "-y"], dry_run=opts.dry_run)
    run(["apt-get", "autoclean", "-y"], dry_run=opts.dry_run)
    if not opts.dry_run:
        after = du_bytes(constants.APT_CACHE_DIR) or 0
        result.freed_bytes = max(0, before - after)
        line_ok(f"Freed: {format_size(result.freed_bytes)}")
    return result


def clean_orphan_packages(opts: CleanOptions) -> CategoryResult:
    section("Unused packages (autoremove)")
    count = reporter.apt_autoremove_count()
    if count is None:
        line_skip("apt-get not available")
        return CategoryResult("Unused packages", size_bytes=None)
    line_do(f"Packages to remove: {count}")
    result = CategoryResult("Unused packages", count, None, risk="med")
    if count == 0:
        return result
    before = disk_used_bytes("/")
    run(["apt-get", "autoremove", "-y", "--purge"], dry_run=opts.dry_run)
    if not opts.dry_run and before is not None:
        after = disk_used_bytes("/") or before
        result.freed_bytes = max(0, before - after)
        line_ok(f"Freed: {format_size(result.freed_bytes)}")
    return result


def clean_temp_files(opts: CleanOptions) -> CategoryResult:
    section("Temporary files")
    result = CategoryResult("Temporary files")
    for directory in constants.TMP_DIRS:
        if not Path(directory).is_dir():
            continue
        files = reporter.old_files(directory, opts.tmp_age_days)
        size = sum(sz for _, sz in files)
        line_do(f"{directory}: {len(files)} files older than {opts.tmp_age_days} days ({format_size(size)})")
        result.count += len(files)
        result.size_bytes += size
        if files and not opts.dry_run:
            _, freed = executor.purge_old_files(directory, opts.tmp_age_days, whitelist=opts.whitelist)
            result.freed_bytes += freed
            line_ok(f"Removed ({format_size(freed)})")
    return result


def clean_user_caches(opts: CleanOptions) -> CategoryResult:
    section("User caches (~/.cache)")
    result = CategoryResult("User caches")
    caches = reporter.user_cache_dirs(opts.cache_min_bytes)
    if not caches:
        line_ok("No user cache above the size floor.")
        return result
    for user, cache, size in caches:
        line_do(f"{user}: {format_size(size)}")
        result.count += 1
        result.size_bytes += size
        if not opts.dry_run:
            _, freed = executor.purge_old_files(str(cache), opts.cache_age_days, whitelist=opts.whitelist)
            result.freed_bytes += freed
            line_ok(f"Removed cache files older than {opts.cache_age_days} days ({format_size(freed)})")
    return result


def clean_journal(opts: CleanOptions) -> CategoryResult:
    section(f"systemd journal (older than {opts.journal_age})")
    if not which("journalctl"):
        line_skip("journalctl not found.")
        return CategoryResult("Journal", size_bytes=None)
    before = reporter.journal_usage_bytes()
    line_do(f"Journal size: {format_size(before)}")
    result = CategoryResult("Journal", 1, before, risk="med")
    run(["journalctl", f"--vacuum-time={opts.journal_age}"], dry_run=opts.dry_run)
    if not opts.dry_run and before is not None:
        after = reporter.journal_usage_bytes()
        if after is not None:
            result.freed_bytes = max(0, before - after)
        line_ok(f"Freed: {format_size(result.freed_bytes)}")
    return result


def clean_rotated_logs(opts: CleanOptions) -> CategoryResult:
    section(f"Rotated logs ({constants.LOG_DIR}: {', '.join('*' + s for s in constants.ROTATED_LOG_SUFFIXES)})")
    logs = reporter.rotated_logs()
    size = sum(sz for _, sz in logs)
    line_do(f"Found: {len(logs)} ({format_size(size)})")
    result = CategoryResult("Rotated logs", len(logs), size, risk="med")
    if not logs or opts.dry_run:
        return result
    for path, _ in logs:
        try:
            result.freed_bytes += executor.remove_path(path, whitelist=opts.whitelist)
        except DeletionError as e:
            logger.warning(f"Could not delete {e.path}: {e.reason}")
    line_ok(f"Removed ({format_size(result.freed_bytes)})")
    return result


def _clean_per_user(title: str, label: str, found: List, opts: CleanOptions,
                    subdirs: Optional[List[str]] = None) -> CategoryResult:
    section(title)
    result = CategoryResult(label)
    if not found:
        line_ok("Nothing found.")
        return result
    for user, directory, size in found:
        line_do(f"{user}: {format_size(size)}")
        result.count += 1
        result.size_bytes += size
        if not opts.dry_run and size > 0:
            freed = executor.empty_directory(directory, subdirs=subdirs, whitelist=opts.whitelist)
            result.freed_bytes += freed
            line_ok(f"Emptied {directory} ({format_size(freed)})")
    return result


def clean_thumbnails(opts: CleanOptions) -> CategoryResult:
    return _clean_per_user("Thumbnails", "Thumbnails", reporter.thumbnail_dirs(), opts)


def clean_trash(opts: CleanOptions) -> CategoryResult:
    return _clean_per_user("Trash", "Trash", reporter.trash_dirs(), opts, subdirs=["files", "info"])


def clean_docker(opts: CleanOptions) -> CategoryResult:
    section("Container engine (Docker)")
    if not opts.docker:
        line_skip("Disabled in config.")
        return CategoryResult("Docker", size_bytes=None)
    if not engine.docker_available():
        line_skip("Docker is not installed or not accessible.")
        return CategoryResult("Docker", size_bytes=None)
    with scan_status("Reading docker system df..."):
        usage = engine.engine_usage()
    if not usage:
        line_warn("Could not read Docker disk usage.")
        return CategoryResult("Docker", size_bytes=None)
    rows = [[u.kind, str(u.total_count), str(u.active), u.size, format_size(u.reclaimable_bytes)] for u in usage]
    table("Docker disk usage", ["Type", "Total", "Active", "Size", "Reclaimable"], rows)
    reclaimable = sum(u.reclaimable_bytes for u in usage)
    result = CategoryResult("Docker", len(usage), reclaimable, risk="med")
    failures = engine.prune(opts.dry_run)
    if not opts.dry_run:
        if failures:
            line_warn(f"{failures} prune command(s) failed")
        # docker reports what prune can release; measure it again afterwards
        after = sum(u.reclaimable_bytes for u in engine.engine_usage())
        result.freed_bytes = max(0, reclaimable - after)
        line_ok(f"Freed: {format_size(result.freed_bytes)}")
    return result


CATEGORIES: List[Callable[[CleanOptions], CategoryResult]] = [
    clean_large_files,
    clean_apt_cache,
    clean_orphan_packages,
    clean_temp_files,
    clean_user_caches,
    clean_journal,
    clean_rotated_logs,
    clean_thumbnails,
    clean_trash,
    clean_docker,
]


def render_summary(results: List[CategoryResult], dry_run: bool) -> None:
    rows = []
    for r in results:
        size = format_size(r.size_bytes) if r.size_bytes is not None else "n/a"
        freed = "-" if dry_run else format_size(r.freed_bytes)
        rows.append([r.label, str(r.count), size, freed, r.risk.upper()])
    table("Summary", ["Category", "Items", "Size", "Freed", "Risk"], rows)


def run_clean(opts: CleanOptions,
              categories: Optional[List[Callable[[CleanOptions], CategoryResult]]] = None,
              review: Optional[Review] = None) -> Tuple[List[CategoryResult], int]:
    """
    Run every category in order and print the final report.

    In apply mode, review (when given) is handed each category's item list
    before the totals are taken; the bytes it reclaims count towards that
    category. Returns the results and the exit code of the last review.
    """
    section("debsweep")
    kv_table("Run", [
        ("Mode", "REPORT (dry-run)" if opts.dry_run else "APPLY"),
        ("Threshold", opts.threshold_label),
        ("Search dir", opts.search_dir),
        ("Journal age", opts.journal_age),
        ("Log", opts.log_file or "-"),
    ])
    disk_before = disk_used_bytes("/")
    results = [category(opts) for category in (categories or CATEGORIES)]
    code = constants.EXIT_OK
    if review is not None and not opts.dry_run:
        for r in results:
            if r.items:
                code, reclaimed = review(r.items, opts)
                r.freed_bytes += reclaimed
    disk_after = disk_used_bytes("/")

    section("Summary")
    render_summary(results, opts.dry_run)
    # categories with an item list (large files) are only reported here
    estimated = sum(r.size_bytes or 0 for r in results if not r.items)
    freed = sum(r.freed_bytes for r in results)
    print_totals(opts.dry_run, estimated, freed, disk_before, disk_after, opts.log_file)
    return results, code


def offer_review(items: List[Candidate], opts: CleanOptions) -> Tuple[int, int]:
    """Ask before opening the selector on the large files found by the run."""
    if not confirm(f"Review the {len(items)} large files for deletion now?"):
        return constants.EXIT_OK, 0
    from debsweep.commands.files import review_candidates
    return review_candidates(items, opts)


def cmd_clean(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    opts = build_options(args, config)
    if not opts.dry_run and not is_root():
        maybe_reexec_with_sudo("Root permissions are required for --apply.")
        line_warn("Not running as root: system categories will fail to clean.")
    elif not is_root():
        line_warn("Not running as root: some sizes may be incomplete.")
    review = offer_review if not opts.dry_run and AnsiTerminal.available() else None
    _, code = run_clean(opts, review=review)
    return code
