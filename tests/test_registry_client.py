# -*- coding: utf-8 -*-
"""Tests for the registry API v2 client."""

import pytest
import requests

from debsweep.errors import (
    DigestNotFoundError,
    RegistryAuthError,
    RegistryPaginationError,
    RegistryResponseError,
    RegistryUnexpectedStatusError,
    RegistryUnreachableError,
    ValidationError,
)
from debsweep.registry.models import RegistryEndpoint

DIGEST = "sha256:" + "ab" * 32


class TestEndpoint:
    def test_trailing_slash_stripped(self):
        assert RegistryEndpoint("https://r.example.com/").base_url == "https://r.example.com"

    @pytest.mark.parametrize("url", ["", "r.example.com", "ftp://r.example.com", "https://"])
    def test_invalid_url_rejected(self, url):
        with pytest.raises(ValidationError):
            RegistryEndpoint(url)

    def test_password_hidden_from_repr(self):
        assert "secret" not in repr(RegistryEndpoint("https://r", "u", "secret"))

    def test_anonymous_has_no_auth(self):
        assert RegistryEndpoint("https://r").auth is None
        assert RegistryEndpoint("https://r", "u", "p").auth == ("u", "p")


class TestCheckAccess:
    def test_ok(self, registry_client, fake_session, fake_response):
        fake_session.routes[("GET", "/v2/")] = fake_response(200, {})
        registry_client.check_access()
        method, path, kwargs = fake_session.calls[0]
        assert (method, path) == ("GET", "/v2/")
        assert kwargs["timeout"] == 5

    def test_credentials_set_on_session(self, registry_client, fake_session):
        assert fake_session.auth == ("admin", "secret")

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_error(self, registry_client, fake_session, fake_response, status):
        fake_session.routes[("GET", "/v2/")] = fake_response(status)
        with pytest.raises(RegistryAuthError):
            registry_client.check_access()

    def test_unexpected_status(self, registry_client, fake_session, fake_response):
        fake_session.routes[("GET", "/v2/")] = fake_response(500)
        with pytest.raises(RegistryUnexpectedStatusError) as exc:
            registry_client.check_access()
        assert exc.value.status_code == 500

    @pytest.mark.parametrize("error", [requests.ConnectionError("refused"), requests.Timeout("slow")])
    def test_unreachable(self, registry_client, fake_session, error):
        fake_session.routes[("GET", "/v2/")] = error
        with pytest.raises(RegistryUnreachableError):
            registry_client.check_access()


class TestListRepositories:
    def test_single_short_page(self, registry_client, fake_session, fake_response):
        fake_session.routes[("GET", "/v2/_catalog")] = fake_response(200, {"repositories": ["a", "b"]})
        assert registry_client.list_repositories(100) == ["a", "b"]
        assert len(fake_session.calls) == 1
        assert fake_session.calls[0][2]["params"] == {"n": 100}

    def test_follows_cursor_across_pages(self, registry_client, fake_session, fake_response):
        names = [f"repo{i:03d}" for i in range(101)]
        fake_session.routes[("GET", "/v2/_catalog")] = [
            fake_response(200, {"repositories": names[:100]}),
            fake_response(200, {"repositories": names[100:]}),
        ]
        assert registry_client.list_repositories(100) == names
        assert len(fake_session.calls) == 2
        assert fake_session.calls[1][2]["params"] == {"n": 100, "last": "repo099"}

    def test_exact_multiple_needs_empty_last_page(self, registry_client, fake_session, fake_response):
        fake_session.routes[("GET", "/v2/_catalog")] = [
            fake_response(200, {"repositories": ["a", "b"]}),
            fake_response(200, {"repositories": []}),
        ]
        assert registry_client.list_repositories(2) == ["a", "b"]
        assert len(fake_session.calls) == 2

    def test_failed_page_keeps_partial_list(self, registry_client, fake_session, fake_response):
        fake_session.routes[("GET", "/v2/_catalog")] = [
            fake_response(200, {"repositories": ["a", "b"]}),
            fake_response(500),
        ]
        with pytest.raises(RegistryPaginationError) as exc:
            registry_client.list_repositories(2)
        assert exc.value.repositories == ["a", "b"]
        assert exc.value.pages_fetched == 1

    def test_connection_drop_mid_walk(self, registry_client, fake_session, fake_response):
        fake_session.routes[("GET", "/v2/_catalog")] = [
            fake_response(200, {"repositories": ["a"]}),
            requests.ConnectionError("reset"),
        ]
        with pytest.raises(RegistryPaginationError) as exc:
            registry_client.list_repositories(1)
        assert exc.value.repositories == ["a"]

    def test_malformed_body(self, registry_client, fake_session, fake_response):
        fake_session.routes[("GET", "/v2/_catalog")] = fake_response(200, {"repos": []})
        with pytest.raises(RegistryPaginationError) as exc:
            registry_client.list_repositories()
        assert isinstance(exc.value.__cause__, RegistryResponseError)

    @pytest.mark.parametrize("page_size", [0, -1])
    def test_page_size_must_be_positive(self, registry_client, fake_session, page_size):
        with pytest.raises(ValidationError):
            registry_client.list_repositories(page_size)
        assert fake_session.calls == []


class TestListTags:
    def test_tags(self, registry_client, fake_session, fake_response):
        fake_session.routes[("GET", "/v2/app/tags/list")] = fake_response(200, {"name": "app", "tags": ["1", "2"]})
        assert registry_client.list_tags("app") == ["1", "2"]

    def test_null_tags_is_empty(self, registry_client, fake_session, fake_response):
        fake_session.routes[("GET", "/v2/app/tags/list")] = fake_response(200, {"name": "app", "tags": None})
        assert registry_client.list_tags("app") == []

    def test_missing_key_is_malformed(self, registry_client, fake_session, fake_response):
        fake_session.routes[("GET", "/v2/app/tags/list")] = fake_response(200, {"name": "app"})
        with pytest.raises(RegistryResponseError):
            registry_client.list_tags("app")

    def test_non_json_is_malformed(self, registry_client, fake_session, fake_response):
        fake_session.routes[("GET", "/v2/app/tags/list")] = fake_response(200, text="<html>")
        with pytest.raises(RegistryResponseError):
            registry_client.list_tags("app")

    def test_nested_repository_name(self, registry_client, fake_session, fake_response):
        fake_session.routes[("GET", "/v2/team/app/tags/list")] = fake_response(200, {"tags": ["x"]})
        assert registry_client.list_tags("team/app") == ["x"]


class TestResolveDigest:
    def test_digest_from_header(self, registry_client, fake_session, fake_response):
        fake_session.routes[("HEAD", "/v2/app/manifests/1.0")] = fake_response(
            200, headers={"Docker-Content-Digest": DIGEST})
        assert registry_client.resolve_digest("app", "1.0") == DIGEST
        accept = fake_session.calls[0][2]["headers"]["Accept"]
        assert "application/vnd.docker.distribution.manifest.v2+json" in accept
        assert "application/vnd.oci.image.index.v1+json" in accept

    def test_missing_header(self, registry_client, fake_session, fake_response):
        fake_session.routes[("HEAD", "/v2/app/manifests/1.0")] = fake_response(200)
        with pytest.raises(DigestNotFoundError):
            registry_client.resolve_digest("app", "1.0")

    def test_unknown_tag(self, registry_client, fake_session, fake_response):
        fake_session.routes[("HEAD", "/v2/app/manifests/1.0")] = fake_response(404)
        with pytest.raises(RegistryUnexpectedStatusError):
            registry_client.resolve_digest("app", "1.0")


class TestDeleteManifest:
    @pytest.mark.parametrize("status", [200, 202])
    def test_accepted(self, registry_client, fake_session, fake_response, status):
        fake_session.routes[("DELETE", f"/v2/app/manifests/{DIGEST}")] = fake_response(status)
        assert registry_client.delete_manifest("app", DIGEST) is True

    def test_already_deleted(self, registry_client, fake_session, fake_response):
        fake_session.routes[("DELETE", f"/v2/app/manifests/{DIGEST}")] = fake_response(404)
        assert registry_client.delete_manifest("app", DIGEST) is False

    def test_delete_disabled(self, registry_client, fake_session, fake_response):
        fake_session.routes[("DELETE", f"/v2/app/manifests/{DIGEST}")] = fake_response(405)
        with pytest.raises(RegistryUnexpectedStatusError) as exc:
            registry_client.delete_manifest("app", DIGEST)
        assert exc.value.status_code == 405

    def test_server_error(self, registry_client, fake_session, fake_response):
        fake_session.routes[("DELETE", f"/v2/app/manifests/{DIGEST}")] = fake_response(500)
        with pytest.raises(RegistryUnexpectedStatusError):
            registry_client.delete_manifest("app", DIGEST)

    def test_forbidden(self, registry_client, fake_session, fake_response):
        fake_session.routes[("DELETE", f"/v2/app/manifests/{DIGEST}")] = fake_response(403)
        with pytest.raises(RegistryAuthError):
            registry_client.delete_manifest("app", DIGEST)
