# -*- coding: utf-8 -*-
"""Shared fixtures for debsweep tests."""

import json
from typing import Dict, List, Optional, Tuple
from unittest.mock import MagicMock, Mock

import pytest
import requests

from debsweep import constants
from debsweep.registry.client import RegistryClient
from debsweep.registry.models import RegistryEndpoint
from debsweep.terminal import Key, Terminal


class ScriptedTerminal(Terminal):
    """Terminal fed from a fixed list of keys and confirmation answers."""

    def __init__(self, keys: List[Key], answers: Optional[List[str]] = None):
        self.keys = list(keys)
        self.answers = list(answers or [])
        self.frames: List[List[str]] = []
        self.prompts: List[str] = []
        self.closed = False

    def read_key(self) -> Key:
        if not self.keys:
            raise AssertionError("selector asked for more keys than scripted")
        return self.keys.pop(0)

    def render(self, lines: List[str]) -> None:
        self.frames.append(list(lines))

    def read_line(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.answers.pop(0) if self.answers else ""

    def close(self) -> None:
        self.closed = True


class FakeResponse(requests.Response):
    """requests.Response built from a status, a JSON body and headers."""

    def __init__(self, status_code: int = 200, body=None, headers: Optional[Dict[str, str]] = None,
                 text: Optional[str] = None):
        super().__init__()
        self.status_code = status_code
        if text is not None:
            self._content = text.encode("utf-8")
        elif body is not None:
            self._content = json.dumps(body).encode("utf-8")
        else:
            self._content = b""
        self.headers.update(headers or {})


class FakeSession:
    """
    Stand-in for requests.Session.

    Routes map (method, path) to a response, a list of responses consumed in
    order, or an exception instance to raise. Every call is recorded.
    """

    def __init__(self, routes: Optional[Dict[Tuple[str, str], object]] = None):
        self.routes = dict(routes or {})
        self.calls: List[Tuple[str, str, dict]] = []
        self.auth = None

    def request(self, method: str, url: str, **kwargs):
        path = url.split("://", 1)[-1]
        path = path[path.index("/"):] if "/" in path else "/"
        self.calls.append((method, path, kwargs))
        route = self.routes.get((method, path))
        if route is None:
            return FakeResponse(404)
        if isinstance(route, list):
            route = route.pop(0)
        if isinstance(route, Exception):
            raise route
        return route

    def calls_for(self, method: str) -> List[Tuple[str, str, dict]]:
        return [c for c in self.calls if c[0] == method]


@pytest.fixture
def scripted_terminal():
    """Factory for ScriptedTerminal."""
    return ScriptedTerminal


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def registry_client(fake_session):
    """Client on http://registry.test with basic credentials and a fake session."""
    endpoint = RegistryEndpoint("http://registry.test/", "admin", "secret")
    return RegistryClient(endpoint, session=fake_session, timeout=5)


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def mock_console():
    """Mock rich console."""
    if constants.RICH:
        original_console = constants.console
        constants.console = MagicMock()
        yield constants.console
        constants.console = original_console
    else:
        yield None


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create temporary config directory."""
    config_dir = tmp_path / ".config" / "debsweep"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


@pytest.fixture
def mock_subprocess(mocker):
    """Mock subprocess calls."""
    mock_run = mocker.patch("subprocess.run")
    mock_run.return_value = Mock(returncode=0, stdout="", stderr="")

    mock_check_output = mocker.patch("subprocess.check_output")
    mock_check_output.return_value = "mock output"

    return {"run": mock_run, "check_output": mock_check_output}


@pytest.fixture
def mock_root_user(mocker):
    """Mock root user check."""
    mocker.patch("os.geteuid", return_value=0)


@pytest.fixture
def mock_non_root_user(mocker):
    """Mock non-root user check."""
    mocker.patch("os.geteuid", return_value=1000)
