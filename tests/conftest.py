"""Shared fixtures for wave tests."""

import json

import pytest
import yaml
from click.testing import CliRunner

from wavecli.executor import HttpResponse, MockBackend


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def isolate_config(monkeypatch):
    """Keep WAVE_* settings and terminal overrides from the developer's shell out of the tests."""
    for name in ("WAVE_DIR", "WAVE_ENV_FILE", "WAVE_TIMEOUT", "FORCE_COLOR", "TTY_COMPATIBLE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def tmp_project(tmp_path, monkeypatch):
    """Temporary project directory as CWD."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def write_collection(tmp_project):
    """Write a collection file into ./.wave and return its path."""

    def _write(name, data, ext=".yaml", directory=None):
        target = (directory or tmp_project / ".wave") / f"{name}{ext}"
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(data, str):
            target.write_text(data)
        else:
            target.write_text(yaml.dump(data, sort_keys=False))
        return target

    return _write


@pytest.fixture
def serve(monkeypatch):
    """Route CLI requests to the given MockBackend."""

    def _serve(mock):
        monkeypatch.setattr("wavecli.executor.get_backend", lambda: mock)
        return mock

    return _serve


@pytest.fixture
def backend(serve):
    return serve(MockBackend(response=make_response(body={"ok": True})))


def make_response(status_code=200, body=None, headers=None, elapsed_ms=42.0):
    """Factory for canned HttpResponse objects."""
    if isinstance(body, dict | list):
        raw = json.dumps(body).encode()
        headers = headers if headers is not None else [("Content-Type", "application/json")]
    elif isinstance(body, str):
        raw = body.encode()
    else:
        raw = body or b""
    return HttpResponse(
        status_code=status_code,
        headers=headers or [],
        body=raw,
        elapsed_ms=elapsed_ms,
    )
