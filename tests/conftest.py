"""Shared test fixtures for apiwire.

Provides the sample API schema used across the suite, a recording mock
transport, isolated environment variables, and output state management.
These fixtures are automatically discovered by pytest and available to
all test modules without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from apiwire.output import OutputFormat, OutputManager, reset_output, set_output
from apiwire.schema import ApiSchema, api_schema, bigint, record, string, timestamp


SIMPLE_RECORD = record("SimpleRecord", id=bigint, name=string)

SCHEMA_DOCUMENT: dict[str, Any] = {
    "helloWorld": {"args": ["string"], "retVal": "string"},
    "dateFunc": {"args": ["datetime"], "retVal": "datetime"},
    "voidFunc": {"args": []},
    "group": {
        "called": {
            "args": [{"record": {"id": "bigint", "name": "string"}, "name": "SimpleRecord"}],
            "retVal": {"record": {"id": "bigint", "name": "string"}, "name": "SimpleRecord"},
        },
        "secondLevel": {"foo": {"args": []}},
    },
    "internal": {"$hidden": True, "reindex": {"args": []}},
}


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    Resetting forces a fresh manager to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Schema fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_schema() -> ApiSchema:
    """The reference API: top-level functions, a nested group, a hidden API."""
    return api_schema(
        {
            "helloWorld": {"args": [string], "retVal": string},
            "dateFunc": {"args": [timestamp], "retVal": timestamp},
            "voidFunc": {"args": []},
            "group": {
                "called": {"args": [SIMPLE_RECORD], "retVal": SIMPLE_RECORD},
                "secondLevel": {"foo": {"args": []}},
            },
            "internal": api_schema({"reindex": {"args": []}}, hidden=True),
        }
    )


@pytest.fixture
def schema_file(tmp_path: Path) -> Path:
    """The reference API written as a JSON schema document."""
    path = tmp_path / "api.json"
    path.write_text(json.dumps(SCHEMA_DOCUMENT), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# HTTP fixtures
# ---------------------------------------------------------------------------


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served.

    The handler may be swapped per test through :attr:`reply`.
    """

    def __init__(self, reply: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []
        self.reply = reply
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.reply(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def envelope(payload: Any, status_code: int = 200) -> Callable[[httpx.Request], httpx.Response]:
    """Handler answering every request with *payload* as JSON."""

    def _reply(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=payload)

    return _reply


@pytest.fixture
def transport() -> RecordingTransport:
    """Recording transport answering ``{"data": "Return"}`` by default."""
    return RecordingTransport(envelope({"data": "Return"}))


# ---------------------------------------------------------------------------
# Environment isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Clear all APIWIRE_* environment variables and chdir to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    for var in [
        "APIWIRE_API_URL",
        "APIWIRE_EXPORTS_FILE",
        "APIWIRE_USER_AGENT",
        "APIWIRE_ORIGIN",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
