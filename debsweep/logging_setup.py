#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Logging configuration for debsweep.
"""

from __future__ import annotations
import logging
from datetime import datetime
from typing import Optional

logger = logging.getLogger("debsweep")


def default_log_file() -> str:
    """Per-run log file path under /tmp."""
    return f"/tmp/debsweep_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> Optional[str]:
    """
    Configure logging system.

    Console output shows INFO and above (DEBUG with --verbose). The log file,
    when given, receives everything including the mirrored report lines.

    Args:
        verbose: If True, set DEBUG level on the console. Otherwise INFO.
        log_file: Optional path to log file. If None, only console logging.

    Returns:
        The log file path actually in use, or None.
    """
    console_level = logging.DEBUG if verbose else logging.INFO
    handlers = []

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter('[%(levelname)s] %(message)s'))
    # Report lines are already printed by debsweep.output
    console_handler.addFilter(lambda record: not getattr(record, "report_line", False))
    handlers.append(console_handler)

    active_log_file = None
    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s - [%(levelname)s] - %(name)s - %(message)s'
            ))
            handlers.append(file_handler)
            active_log_file = log_file
        except OSError as e:
            logger.warning(f"Failed to create log file {log_file}: {e}")

    logging.basicConfig(
        level=logging.DEBUG,
        handlers=handlers,
        force=True
    )

    logger.setLevel(logging.DEBUG)

    if active_log_file:
        logger.debug(f"Logging to file: {active_log_file}")
    if verbose:
        logger.debug("Verbose logging enabled")
    return active_log_file
