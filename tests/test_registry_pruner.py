# -*- coding: utf-8 -*-
"""Tests for the interactive registry prune flow."""

import logging

import pytest

from debsweep.errors import RegistryAuthError, RegistryPaginationError
from debsweep.registry import pruner
from debsweep.registry.pruner import GC_REMINDER, prune_registry

DIGEST_1 = "sha256:" + "11" * 32
DIGEST_2 = "sha256:" + "22" * 32
DIGEST_3 = "sha256:" + "33" * 32


def answers(*values):
    queue = list(values)
    prompts = []

    def _prompt(msg):
        prompts.append(msg)
        return queue.pop(0)

    _prompt.prompts = prompts
    return _prompt


@pytest.fixture
def two_tag_registry(fake_session, fake_response):
    fake_session.routes.update({
        ("GET", "/v2/"): fake_response(200, {}),
        ("GET", "/v2/_catalog"): fake_response(200, {"repositories": ["app", "web"]}),
        ("GET", "/v2/app/tags/list"): fake_response(200, {"name": "app", "tags": ["v1", "v2"]}),
        ("HEAD", "/v2/app/manifests/v1"): fake_response(200, headers={"Docker-Content-Digest": DIGEST_1}),
        ("HEAD", "/v2/app/manifests/v2"): fake_response(200, headers={"Docker-Content-Digest": DIGEST_2}),
        ("DELETE", f"/v2/app/manifests/{DIGEST_1}"): fake_response(202),
        ("DELETE", f"/v2/app/manifests/{DIGEST_2}"): fake_response(500),
    })
    return fake_session


def test_apply_tallies_success_and_failure(registry_client, two_tag_registry, fake_response, mock_console):
    two_tag_registry.routes.update({
        ("GET", "/v2/web/tags/list"): fake_response(200, {"name": "web", "tags": ["latest"]}),
        ("HEAD", "/v2/web/manifests/latest"): fake_response(200, headers={"Docker-Content-Digest": DIGEST_3}),
        ("DELETE", f"/v2/web/manifests/{DIGEST_3}"): fake_response(202),
    })
    prompt = answers("all", "yes")
    report = prune_registry(registry_client, prompt=prompt, dry_run=False)
    assert report.cancelled is False
    assert report.repositories == ["app", "web"]
    assert report.deleted_count == 2
    assert report.error_count == 1
    deletes = [path for _, path, _ in two_tag_registry.calls_for("DELETE")]
    # the rejected delete on app does not stop the walk into web
    assert deletes == [
        f"/v2/app/manifests/{DIGEST_1}",
        f"/v2/app/manifests/{DIGEST_2}",
        f"/v2/web/manifests/{DIGEST_3}",
    ]


def test_report_mode_resolves_but_never_deletes(registry_client, two_tag_registry, mock_console):
    prompt = answers("1")
    report = prune_registry(registry_client, prompt=prompt, dry_run=True)
    assert two_tag_registry.calls_for("DELETE") == []
    assert len(two_tag_registry.calls_for("HEAD")) == 2
    assert report.would_delete_count == 2
    assert report.deleted_count == 0
    # no yes/no question in report mode
    assert len(prompt.prompts) == 1


def test_empty_pick_cancels(registry_client, two_tag_registry, mock_console):
    report = prune_registry(registry_client, prompt=answers("9"), dry_run=False)
    assert report.cancelled is True
    assert two_tag_registry.calls_for("HEAD") == []


@pytest.mark.parametrize("answer", ["Yes", "y", ""])
def test_confirmation_must_be_exact(registry_client, two_tag_registry, mock_console, answer):
    report = prune_registry(registry_client, prompt=answers("all", answer), dry_run=False)
    assert report.cancelled is True
    assert two_tag_registry.calls_for("DELETE") == []
    assert two_tag_registry.calls_for("HEAD") == []


def test_missing_digest_counts_error_and_continues(registry_client, two_tag_registry, fake_response,
                                                   mock_console):
    two_tag_registry.routes[("HEAD", "/v2/app/manifests/v1")] = fake_response(200)
    two_tag_registry.routes[("DELETE", f"/v2/app/manifests/{DIGEST_2}")] = fake_response(202)
    report = prune_registry(registry_client, prompt=answers("1", "yes"), dry_run=False)
    assert report.error_count == 1
    assert report.deleted_count == 1
    assert [o.tag for o in report.outcomes if o.succeeded] == ["v2"]


def test_already_deleted_counts_as_success(registry_client, two_tag_registry, fake_response, mock_console):
    two_tag_registry.routes[("DELETE", f"/v2/app/manifests/{DIGEST_2}")] = fake_response(404)
    report = prune_registry(registry_client, prompt=answers("1", "yes"), dry_run=False)
    assert report.deleted_count == 2
    assert report.error_count == 0


def test_repository_without_tags_skipped(registry_client, two_tag_registry, fake_response, mock_console):
    two_tag_registry.routes[("GET", "/v2/web/tags/list")] = fake_response(200, {"name": "web", "tags": None})
    report = prune_registry(registry_client, prompt=answers("2"), dry_run=True)
    assert report.outcomes == []
    assert report.error_count == 0


def test_tag_listing_failure_moves_to_next_repository(registry_client, two_tag_registry, mock_console):
    # web has no route, so its tag listing answers 404
    report = prune_registry(registry_client, prompt=answers("2,1"), dry_run=True)
    assert report.repositories == ["app", "web"]
    assert report.would_delete_count == 2
    assert len(report.repository_errors) == 1


def test_gc_reminder_after_apply(registry_client, two_tag_registry, caplog, mock_console):
    caplog.set_level(logging.DEBUG, logger="debsweep")
    prune_registry(registry_client, prompt=answers("1", "yes"), dry_run=False)
    assert GC_REMINDER in caplog.text


def test_no_gc_reminder_in_report_mode(registry_client, two_tag_registry, caplog, mock_console):
    caplog.set_level(logging.DEBUG, logger="debsweep")
    prune_registry(registry_client, prompt=answers("1"), dry_run=True)
    assert GC_REMINDER not in caplog.text


def test_access_failure_propagates(registry_client, fake_session, fake_response, mock_console):
    fake_session.routes[("GET", "/v2/")] = fake_response(401)
    prompt = answers()
    with pytest.raises(RegistryAuthError):
        prune_registry(registry_client, prompt=prompt)
    assert prompt.prompts == []


def test_pagination_failure_aborts_before_prompt(registry_client, fake_session, fake_response, mock_console):
    fake_session.routes[("GET", "/v2/")] = fake_response(200, {})
    fake_session.routes[("GET", "/v2/_catalog")] = [
        fake_response(200, {"repositories": ["a", "b"]}),
        fake_response(502),
    ]
    prompt = answers()
    with pytest.raises(RegistryPaginationError):
        prune_registry(registry_client, prompt=prompt, page_size=2)
    assert prompt.prompts == []


def test_empty_registry(registry_client, fake_session, fake_response, mock_console):
    fake_session.routes[("GET", "/v2/")] = fake_response(200, {})
    fake_session.routes[("GET", "/v2/_catalog")] = fake_response(200, {"repositories": []})
    report = prune_registry(registry_client, prompt=answers())
    assert report.repositories == []
    assert report.cancelled is False


def test_prune_repository_records_per_tag(registry_client, two_tag_registry, mock_console):
    report = pruner.PruneReport(dry_run=False)
    pruner.prune_repository(registry_client, "app", report)
    assert [(o.tag, o.succeeded) for o in report.outcomes] == [("v1", True), ("v2", False)]
    assert report.outcomes[1].digest == DIGEST_2
