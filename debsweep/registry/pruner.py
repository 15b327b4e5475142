#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Registry pruner: pick repositories, resolve every tag to its manifest
digest and delete by digest.

A failure on one tag (no digest, rejected delete) is recorded and the walk
moves on to the next tag and the next repository. Access and catalog
failures are raised to the caller before anything is deleted.
"""

from __future__ import annotations
from typing import Callable, List

from debsweep import constants
from debsweep.errors import RegistryError
from debsweep.logging_setup import logger
from debsweep.output import line_do, line_err, line_ok, line_skip, line_warn, section, table
from debsweep.registry.client import RegistryClient
from debsweep.registry.models import PruneReport, TagOutcome
from debsweep.registry.selection import pick

Prompt = Callable[[str], str]

GC_REMINDER = (
    "Deleting manifests does not shrink registry storage by itself. "
    "Run the registry's garbage collection (e.g. 'registry garbage-collect "
    "/etc/docker/registry/config.yml') to reclaim disk space."
)


def prune_repository(client: RegistryClient, repository: str, report: PruneReport) -> None:
    """Resolve and (in apply mode) delete every tag of one repository."""
    try:
        tags = client.list_tags(repository)
    except RegistryError as e:
        line_err(f"{repository}: cannot list tags: {e}")
        report.repository_errors.append(f"{repository}: {e}")
        return
    if not tags:
        line_skip(f"{repository}: no tags")
        logger.info(f"{repository} has no tags, skipping")
        return

    line_do(f"{repository}: {len(tags)} tag(s)")
    for tag in tags:
        try:
            digest = client.resolve_digest(repository, tag)
        except RegistryError as e:
            line_warn(f"  {repository}:{tag}: {e}")
            report.outcomes.append(TagOutcome(repository, tag, None, False, str(e), report.dry_run))
            continue

        if report.dry_run:
            line_skip(f"  [dry-run] would delete {repository}:{tag} ({digest})")
            report.outcomes.append(TagOutcome(repository, tag, digest, True, "", True))
            continue

        try:
            accepted = client.delete_manifest(repository, digest)
        except RegistryError as e:
            line_err(f"  {repository}:{tag}: {e}")
            report.outcomes.append(TagOutcome(repository, tag, digest, False, str(e)))
            continue
        reason = "" if accepted else "already deleted"
        line_ok(f"  deleted {repository}:{tag} ({digest[:19]}...)" + (f" [{reason}]" if reason else ""))
        report.outcomes.append(TagOutcome(repository, tag, digest, True, reason))


def prune_registry(client: RegistryClient, prompt: Prompt = input, dry_run: bool = True,
                   page_size: int = constants.CATALOG_PAGE_SIZE) -> PruneReport:
    """
    Interactive prune run.

    Raises RegistryAuthError, RegistryUnreachableError,
    RegistryUnexpectedStatusError or RegistryPaginationError when the
    registry cannot be reached or fully enumerated.
    """
    report = PruneReport(dry_run=dry_run)

    section("Registry")
    client.check_access()
    line_ok(f"Connected to {client.endpoint.base_url}")

    repositories = client.list_repositories(page_size)
    if not repositories:
        line_ok("Registry has no repositories")
        return report

    rows = [[str(i), name] for i, name in enumerate(repositories, 1)]
    table(f"Repositories ({len(repositories)})", ["#", "Repository"], rows)

    raw = prompt("Repositories to prune (e.g. 1,3-5 or 'all'): ")
    report.repositories = pick(repositories, raw)
    if not report.repositories:
        line_warn("No repositories selected.")
        report.cancelled = True
        return report

    if not dry_run:
        answer = prompt(
            f"Delete ALL tags of {len(report.repositories)} repositories? "
            f"Type '{constants.CONFIRM_TOKEN}' to confirm: "
        )
        if answer != constants.CONFIRM_TOKEN:
            line_warn("Cancelled.")
            report.cancelled = True
            return report

    for repository in report.repositories:
        prune_repository(client, repository, report)

    section("Registry summary")
    if dry_run:
        line_do(f"Would delete: {report.would_delete_count} | Errors: {report.error_count}")
    else:
        line_do(f"Deleted: {report.deleted_count} | Errors: {report.error_count}")
        line_warn(GC_REMINDER)
    return report
