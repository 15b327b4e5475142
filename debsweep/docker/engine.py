#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Container engine resources: reclaimable space reported by Docker and the
prune commands that release it.
"""

from __future__ import annotations
import json
import subprocess
from dataclasses import dataclass
from typing import Dict, List

from debsweep.helpers import capture, parse_size_to_bytes, run, which
from debsweep.logging_setup import logger


@dataclass
class EngineUsage:
    kind: str
    total_count: int
    active: int
    size: str
    reclaimable_bytes: int


def docker_available() -> bool:
    return which("docker") is not None


def docker_cmd(args: List[str]) -> List[str]:
    return ["docker", *args]


def docker_json_lines(args: List[str]) -> List[Dict]:
    """
    Executes docker command with a JSON-per-line format (via --format '{{json .}}')
    """
    out = capture(docker_cmd(args))
    if not out:
        return []
    res = []
    for ln in out.splitlines():
        try:
            res.append(json.loads(ln))
        except json.JSONDecodeError:
            logger.debug(f"Ignoring non-JSON docker output: {ln}")
    return res


def parse_reclaimable(value: str) -> int:
    """'1.2GB (45%)' -> bytes; unparseable values count as zero."""
    first = (value or "").split(" ", 1)[0]
    return parse_size_to_bytes(first) or 0


def engine_usage() -> List[EngineUsage]:
    """One row per resource type from docker system df."""
    try:
        rows = docker_json_lines(["system", "df", "--format", "{{json .}}"])
    except (subprocess.CalledProcessError, OSError) as e:
        logger.warning(f"docker system df failed: {e}")
        return []
    res = []
    for row in rows:
        try:
            total = int(row.get("TotalCount") or 0)
            active = int(row.get("Active") or 0)
        except ValueError:
            total, active = 0, 0
        res.append(EngineUsage(
            kind=row.get("Type", "?"),
            total_count=total,
            active=active,
            size=row.get("Size", ""),
            reclaimable_bytes=parse_reclaimable(row.get("Reclaimable", "")),
        ))
    return res


PRUNE_COMMANDS = [
    ("Remove stopped containers", ["container", "prune", "-f"]),
    ("Remove dangling images", ["image", "prune", "-f"]),
    ("Clean builder cache", ["builder", "prune", "-f"]),
]


def prune(dry_run: bool) -> int:
    """Run the prune commands; returns how many of them failed."""
    failures = 0
    for label, args in PRUNE_COMMANDS:
        logger.debug(label)
        result = run(docker_cmd(args), dry_run=dry_run)
        if result.returncode != 0:
            failures += 1
    return failures
