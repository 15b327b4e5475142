#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Command-line entry point for debsweep.
"""

from __future__ import annotations
import argparse
import sys
from typing import List, Optional

from debsweep import constants
from debsweep.commands import cmd_clean, cmd_files, cmd_registry
from debsweep.config import config_file_path, load_config
from debsweep.errors import ValidationError
from debsweep.interactive import interactive_menu
from debsweep.logging_setup import default_log_file, logger, setup_logging
from debsweep.output import line_err, line_warn, print_banner

COMMANDS = {
    "clean": cmd_clean,
    "files": cmd_files,
    "registry": cmd_registry,
}


def _add_common(ap: argparse.ArgumentParser, default=None) -> None:
    """Flags accepted both before and after the subcommand."""
    kw = {} if default is None else {"default": default}
    ap.add_argument("--apply", action="store_true", help="Actually delete. Without it nothing is changed.", **kw)
    ap.add_argument("--threshold", metavar="SIZE", help=f"Large-file threshold (default {constants.DEFAULT_THRESHOLD}).", **kw)
    ap.add_argument("--search-dir", metavar="PATH", help=f"Where to look for large files (default {constants.DEFAULT_SEARCH_DIR}).", **kw)
    ap.add_argument("--journal-age", metavar="AGE", help=f"Keep journal entries newer than AGE (default {constants.DEFAULT_JOURNAL_AGE}).", **kw)
    ap.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging (DEBUG level).", **kw)
    ap.add_argument("--log-file", type=str, metavar="PATH", help="Write logs to specified file.", **kw)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="debsweep",
        description="debsweep: reclaim disk space on Debian hosts. Report mode unless --apply is given.",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    ap.add_argument("-V", "--version", action="version", version=f"debsweep {constants.VERSION}")
    _add_common(ap)

    sp = ap.add_subparsers(dest="cmd")
    # SUPPRESS keeps a top-level flag from being reset by the subparser default
    sp_clean = sp.add_parser("clean", help="Survey every category and clean it up (default).")
    _add_common(sp_clean, argparse.SUPPRESS)
    sp_files = sp.add_parser("files", help="Find large files and pick which to delete.")
    _add_common(sp_files, argparse.SUPPRESS)
    sp_registry = sp.add_parser("registry", help="Delete image tags from a Docker registry.")
    _add_common(sp_registry, argparse.SUPPRESS)
    sp_registry.add_argument("--url", help="Registry base URL, e.g. https://registry.example.com")
    sp_registry.add_argument("--user", help="Registry username.")
    sp_registry.add_argument("--page-size", type=int, default=None,
                             help=f"Catalog page size (default {constants.CATALOG_PAGE_SIZE}).")
    sp_menu = sp.add_parser("menu", help="Numbered interactive menu.")
    _add_common(sp_menu, argparse.SUPPRESS)
    return ap


def run(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    log_path = setup_logging(args.verbose, args.log_file or default_log_file())
    args.log_file = log_path
    logger.debug(f"Arguments: {vars(args)}")

    config = load_config()
    logger.debug(f"Config file: {config_file_path()}")

    cmd = args.cmd or "clean"
    if cmd == "menu":
        return interactive_menu(args, config)

    print_banner()
    try:
        return COMMANDS[cmd](args, config)
    except ValidationError as e:
        line_err(str(e))
        return constants.EXIT_FAILURE
    except KeyboardInterrupt:
        line_warn("Interrupted.")
        return constants.EXIT_CANCELLED


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
