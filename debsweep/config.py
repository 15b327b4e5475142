#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration loading for debsweep.

Settings live in ~/.config/debsweep/config.toml. Every key is optional;
missing keys fall back to the defaults below and command-line flags win
over both.
"""

from __future__ import annotations
import copy
import fnmatch
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from debsweep import constants
from debsweep.logging_setup import logger

# TOML support (tomllib for Python 3.11+, tomli for <3.11)
try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore


def config_dir() -> Path:
    return Path("~/.config/debsweep").expanduser()


def config_file_path() -> Path:
    return config_dir() / "config.toml"


def default_config() -> Dict[str, Any]:
    """Return default configuration."""
    return {
        "clean": {
            "threshold": constants.DEFAULT_THRESHOLD,
            "search_dir": constants.DEFAULT_SEARCH_DIR,
            "journal_age": constants.DEFAULT_JOURNAL_AGE,
            "tmp_age_days": constants.TMP_MAX_AGE_DAYS,
            "cache_age_days": constants.CACHE_MAX_AGE_DAYS,
            "cache_min_mb": constants.CACHE_MIN_MB,
            "top_files": constants.DEFAULT_TOP_FILES,
            "docker": True,
        },
        "registry": {
            "url": "",
            "username": "",
            "page_size": constants.CATALOG_PAGE_SIZE,
            "timeout": constants.REGISTRY_TIMEOUT,
        },
        "whitelist": {
            "patterns": [
                "/home/*/.ssh/*",
                "/home/*/.gnupg/*",
                "/root/.ssh/*",
                "/etc/*",
                "/boot/*",
            ]
        },
    }


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load config.toml merged over the defaults."""
    config_path = path or config_file_path()
    config = default_config()

    if not config_path.exists():
        logger.debug("Config file not found, using defaults")
        return config

    try:
        with open(config_path, "rb") as f:
            loaded = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.error(f"Error loading config {config_path}: {e}")
        return config

    logger.debug(f"Loaded config from {config_path}")
    return _merge(copy.deepcopy(config), loaded)


def whitelist_patterns(config: Dict[str, Any]) -> List[str]:
    patterns = config.get("whitelist", {}).get("patterns", [])
    return [os.path.expanduser(pat) for pat in patterns]


def is_whitelisted(path: str, patterns: List[str]) -> bool:
    for pat in patterns:
        if fnmatch.fnmatch(path, pat):
            return True
    return False
