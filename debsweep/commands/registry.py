#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Registry command: prune tags from a remote Docker registry.
"""

from __future__ import annotations
import argparse
import getpass
import os
from typing import Any, Dict, Optional

from debsweep import constants
from debsweep.errors import (
    RegistryAuthError,
    RegistryPaginationError,
    RegistryUnexpectedStatusError,
    RegistryUnreachableError,
    ValidationError,
)
from debsweep.logging_setup import logger
from debsweep.output import line_err, line_warn
from debsweep.registry.client import RegistryClient
from debsweep.registry.models import RegistryEndpoint
from debsweep.registry.pruner import Prompt, prune_registry


def resolve_endpoint(args: argparse.Namespace, config: Dict[str, Any],
                     prompt: Prompt = input) -> RegistryEndpoint:
    """URL and user from flags or config; password from the environment or a prompt."""
    reg = config.get("registry", {})
    url = getattr(args, "url", None) or reg.get("url") or ""
    if not url:
        url = prompt("Registry URL (e.g. https://registry.example.com): ").strip()
    username = getattr(args, "user", None) or reg.get("username") or ""
    if not username:
        username = prompt("Registry username (empty for anonymous): ").strip()
    password = os.environ.get(constants.REGISTRY_PASSWORD_ENV, "")
    if username and not password:
        password = getpass.getpass(f"Password for {username}: ")
    return RegistryEndpoint(url, username, password)


def validate_page_size(value: Any) -> int:
    try:
        size = int(value)
    except (TypeError, ValueError):
        size = 0
    if size < 1:
        raise ValidationError(f"Invalid page size: {value!r} (expected a positive integer)")
    return size


def cmd_registry(args: argparse.Namespace, config: Dict[str, Any],
                 prompt: Prompt = input, client: Optional[RegistryClient] = None) -> int:
    dry_run = not getattr(args, "apply", False)
    reg = config.get("registry", {})
    page_size = getattr(args, "page_size", None)
    if page_size is None:
        page_size = reg.get("page_size", constants.CATALOG_PAGE_SIZE)

    try:
        page_size = validate_page_size(page_size)
        if client is None:
            endpoint = resolve_endpoint(args, config, prompt)
            client = RegistryClient(endpoint, timeout=float(reg.get("timeout", constants.REGISTRY_TIMEOUT)))
        report = prune_registry(client, prompt=prompt, dry_run=dry_run, page_size=page_size)
    except ValidationError as e:
        line_err(str(e))
        return constants.EXIT_FAILURE
    except RegistryAuthError as e:
        line_err(f"Authentication failed: {e}. Check the username and password.")
        return constants.EXIT_FAILURE
    except RegistryUnreachableError as e:
        line_err(f"Registry unreachable: {e}")
        return constants.EXIT_FAILURE
    except RegistryPaginationError as e:
        line_err(f"Repository listing incomplete: {e}")
        if e.repositories:
            line_warn(f"{len(e.repositories)} repositories were listed before the failure; "
                      "nothing was deleted.")
        return constants.EXIT_FAILURE
    except RegistryUnexpectedStatusError as e:
        line_err(f"Unexpected registry response: {e}")
        return constants.EXIT_FAILURE

    logger.info(f"Registry run finished: deleted={report.deleted_count} errors={report.error_count}")
    if report.cancelled:
        return constants.EXIT_CANCELLED
    return constants.EXIT_FAILURE if report.error_count else constants.EXIT_OK
