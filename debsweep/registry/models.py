#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Value types for the registry pruner.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import urlparse

from debsweep.errors import ValidationError


@dataclass(frozen=True)
class RegistryEndpoint:
    base_url: str
    username: str = ""
    password: str = field(default="", repr=False)

    def __post_init__(self):
        parsed = urlparse(self.base_url or "")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValidationError(
                f"Invalid registry URL {self.base_url!r}: expected http(s)://host[:port]"
            )
        # frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @property
    def auth(self):
        if not self.username:
            return None
        return (self.username, self.password)


@dataclass
class TagOutcome:
    repository: str
    tag: str
    digest: Optional[str]
    succeeded: bool
    reason: str = ""
    dry_run: bool = False


@dataclass
class PruneReport:
    cancelled: bool = False
    dry_run: bool = True
    repositories: List[str] = field(default_factory=list)
    outcomes: List[TagOutcome] = field(default_factory=list)
    repository_errors: List[str] = field(default_factory=list)

    @property
    def deleted_count(self) -> int:
        return sum(1 for o in self.outcomes if o.succeeded and not o.dry_run)

    @property
    def would_delete_count(self) -> int:
        return sum(1 for o in self.outcomes if o.succeeded and o.dry_run)

    @property
    def error_count(self) -> int:
        return sum(1 for o in self.outcomes if not o.succeeded) + len(self.repository_errors)
