#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Exception types for debsweep.

Per-item failures (one file, one tag) are caught and turned into outcome
records by the component that hit them. Everything defined here that is not
caught that way reaches the command layer, which prints a message specific
to the failure kind.
"""

from __future__ import annotations
from typing import List, Optional


class DebsweepError(Exception):
    """Base class for all debsweep errors."""


class ValidationError(DebsweepError):
    """Bad input detected before any destructive action."""


class DeletionError(DebsweepError):
    """A single path could not be removed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class RegistryError(DebsweepError):
    """Base class for registry API failures."""


class RegistryAuthError(RegistryError):
    """Credentials rejected (401) or not permitted (403)."""


class RegistryUnreachableError(RegistryError):
    """Connection, DNS or timeout failure talking to the registry."""


class RegistryUnexpectedStatusError(RegistryError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class RegistryResponseError(RegistryUnexpectedStatusError):
    """Response body did not match the documented shape."""


class DigestNotFoundError(RegistryError):
    """Manifest response carried no content digest header."""


class RegistryPaginationError(RegistryError):
    """
    Catalog enumeration stopped on a failed page.

    The repositories fetched before the failure are kept on the exception,
    but the listing must not be treated as complete.
    """

    def __init__(self, message: str, repositories: List[str], pages_fetched: int):
        self.repositories = repositories
        self.pages_fetched = pages_fetched
        super().__init__(message)
