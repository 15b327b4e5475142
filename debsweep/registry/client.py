#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Docker Registry HTTP API v2 client.

Registry API v2 endpoints used:
  GET    /v2/                               - liveness and credential check
  GET    /v2/_catalog?n=N&last=CURSOR       - list repositories (paginated)
  GET    /v2/{repo}/tags/list               - list tags
  HEAD   /v2/{repo}/manifests/{tag}         - resolve tag to digest header
  DELETE /v2/{repo}/manifests/{digest}      - delete manifest by digest

One requests.Session is used for every call, strictly one request at a time.
"""

from __future__ import annotations
from typing import List, Optional

import requests

from debsweep import constants
from debsweep.errors import (
    DigestNotFoundError,
    RegistryAuthError,
    RegistryPaginationError,
    RegistryResponseError,
    RegistryUnexpectedStatusError,
    RegistryUnreachableError,
    ValidationError,
)
from debsweep.logging_setup import logger
from debsweep.registry.models import RegistryEndpoint

ALREADY_DELETED_STATUS = 404
DELETE_DISABLED_STATUS = 405


def decode_name_list(response: requests.Response, key: str) -> List[str]:
    """
    Decode a {key: [str, ...]} body.

    A null list is a valid empty answer (the registry sends "tags": null
    for a repository whose tags were all deleted). A missing key, a
    non-list value or non-string entries are malformed responses.
    """
    try:
        body = response.json()
    except ValueError as e:
        raise RegistryResponseError(f"Response is not JSON: {e}", response.status_code) from e
    if not isinstance(body, dict) or key not in body:
        raise RegistryResponseError(f"Response has no '{key}' field", response.status_code)
    names = body[key]
    if names is None:
        return []
    if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
        raise RegistryResponseError(f"'{key}' is not a list of strings", response.status_code)
    return names


class RegistryClient:
    def __init__(self, endpoint: RegistryEndpoint, session: Optional[requests.Session] = None,
                 timeout: float = constants.REGISTRY_TIMEOUT):
        self.endpoint = endpoint
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        self.session.auth = endpoint.auth

    def _url(self, path: str) -> str:
        return f"{self.endpoint.base_url}{path}"

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = self._url(path)
        logger.debug(f"{method} {url} {kwargs.get('params') or ''}")
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except (requests.ConnectionError, requests.Timeout) as e:
            raise RegistryUnreachableError(f"Cannot reach {self.endpoint.base_url}: {e}") from e
        except requests.RequestException as e:
            raise RegistryUnreachableError(f"Request to {url} failed: {e}") from e
        logger.debug(f"{method} {url} -> {response.status_code}")
        return response

    @staticmethod
    def _raise_for_status(response: requests.Response, what: str) -> None:
        if response.status_code in (401, 403):
            raise RegistryAuthError(f"{what}: access denied ({response.status_code})")
        raise RegistryUnexpectedStatusError(
            f"{what}: unexpected status {response.status_code}", response.status_code
        )

    def check_access(self) -> None:
        """Check that the registry answers and accepts the credentials."""
        response = self._request("GET", "/v2/")
        if response.status_code == 200:
            return
        self._raise_for_status(response, "Registry access check")

    def list_repositories(self, page_size: int = constants.CATALOG_PAGE_SIZE) -> List[str]:
        """
        Walk the whole catalog.

        A page shorter than page_size ends the walk; otherwise its last name
        is the cursor for the next page. Any failed page raises
        RegistryPaginationError with what was collected so far.
        """
        if page_size < 1:
            raise ValidationError(f"Catalog page size must be at least 1, got {page_size}")
        repositories: List[str] = []
        cursor: Optional[str] = None
        pages = 0
        while True:
            params = {"n": page_size}
            if cursor is not None:
                params["last"] = cursor
            try:
                response = self._request("GET", "/v2/_catalog", params=params)
                if response.status_code != 200:
                    self._raise_for_status(response, "Catalog listing")
                names = decode_name_list(response, "repositories")
            except (RegistryUnreachableError, RegistryUnexpectedStatusError, RegistryAuthError) as e:
                raise RegistryPaginationError(
                    f"Catalog listing failed after {pages} page(s): {e}", repositories, pages
                ) from e
            pages += 1
            repositories.extend(names)
            logger.debug(f"Catalog page {pages}: {len(names)} repositories")
            if len(names) < page_size:
                return repositories
            cursor = names[-1]

    def list_tags(self, repository: str) -> List[str]:
        response = self._request("GET", f"/v2/{repository}/tags/list")
        if response.status_code != 200:
            self._raise_for_status(response, f"Tag listing for {repository}")
        return decode_name_list(response, "tags")

    def resolve_digest(self, repository: str, tag: str) -> str:
        """Current manifest digest of repository:tag."""
        headers = {"Accept": ", ".join(constants.MANIFEST_MEDIA_TYPES)}
        response = self._request("HEAD", f"/v2/{repository}/manifests/{tag}", headers=headers)
        if response.status_code != 200:
            self._raise_for_status(response, f"Manifest lookup for {repository}:{tag}")
        digest = response.headers.get(constants.DIGEST_HEADER)
        if not digest:
            raise DigestNotFoundError(f"No {constants.DIGEST_HEADER} header for {repository}:{tag}")
        return digest

    def delete_manifest(self, repository: str, digest: str) -> bool:
        """
        Delete a manifest by digest.

        Returns True when the registry accepted the delete and False when
        the manifest was already gone. Any other status raises.
        """
        response = self._request("DELETE", f"/v2/{repository}/manifests/{digest}")
        if response.status_code in constants.DELETE_ACCEPTED_STATUSES:
            return True
        if response.status_code == ALREADY_DELETED_STATUS:
            logger.debug(f"{repository}@{digest} already deleted")
            return False
        if response.status_code == DELETE_DISABLED_STATUS:
            raise RegistryUnexpectedStatusError(
                "Registry delete not enabled (405)", response.status_code
            )
        self._raise_for_status(response, f"Delete {repository}@{digest}")
        return False
