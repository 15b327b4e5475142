#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Constants and optional-dependency detection for debsweep.
"""

from __future__ import annotations

# -----------------------------
# Rich (optional) output
# -----------------------------
RICH = False
try:
    from rich.console import Console
    RICH = True
    console = Console(highlight=False)
except Exception:
    console = None

BANNER = "debsweep"
TAGLINE = "Disk space reclamation for Debian hosts."
VERSION = "1.0.0"

# Typed confirmation gate for every destructive step
CONFIRM_TOKEN = "yes"

# Exit codes
EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CANCELLED = 3

# Defaults (overridable in config.toml and on the command line)
DEFAULT_THRESHOLD = "100M"
DEFAULT_SEARCH_DIR = "/"
DEFAULT_JOURNAL_AGE = "7d"
DEFAULT_TOP_FILES = 30
TMP_DIRS = ("/tmp", "/var/tmp")
TMP_MAX_AGE_DAYS = 7
CACHE_MAX_AGE_DAYS = 30
CACHE_MIN_MB = 10
APT_CACHE_DIR = "/var/cache/apt/archives"
LOG_DIR = "/var/log"
ROTATED_LOG_SUFFIXES = (".gz", ".old", ".1")
PSEUDO_FILESYSTEMS = ("/proc", "/sys", "/dev", "/run")

# Registry HTTP API v2
CATALOG_PAGE_SIZE = 100
REGISTRY_TIMEOUT = 30.0
DIGEST_HEADER = "Docker-Content-Digest"
DELETE_ACCEPTED_STATUSES = (200, 202)
MANIFEST_MEDIA_TYPES = (
    "application/vnd.docker.distribution.manifest.v2+json",
    "application/vnd.docker.distribution.manifest.list.v2+json",
    "application/vnd.oci.image.manifest.v1+json",
    "application/vnd.oci.image.index.v1+json",
)
REGISTRY_PASSWORD_ENV = "DEBSWEEP_REGISTRY_PASSWORD"

# Seconds to wait for the rest of an escape sequence after a lone ESC byte
ESCAPE_SEQUENCE_TIMEOUT = 0.1
