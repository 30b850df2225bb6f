"""Configuration resolution for deployments and the command line.

Generated clients take their settings as arguments; this module finds
those settings in the places deployments usually leave them:

* **Base URL** -- :func:`resolve_api_url` with precedence explicit argument
  > ``APIWIRE_API_URL`` > deployment exports file (``--exports-file`` or
  ``APIWIRE_EXPORTS_FILE``).
* **Deployment exports** -- :func:`load_deployment_exports` reads the JSON
  stack-outputs file written by infrastructure tooling, where the server
  publishes its base URL under :data:`API_URL_PARAM`.
* **Host environment** -- :func:`resolve_host_environment` reads the user
  agent and origin a non-browser host wants to present.
* **Security tokens** -- :func:`token_supplier_from_source` turns a source
  descriptor (``env:VAR``, ``file:/path``, ``prompt``, ``literal:value``)
  into the supplier passed to :func:`apiwire.connect`.
"""

from __future__ import annotations

import getpass
import json
import os
import sys
from pathlib import Path
from typing import Any, Callable, Optional

from apiwire.exceptions import ConfigError
from apiwire.models import HostEnvironment
from apiwire.output import info, warning

API_URL_PARAM = "ApiUrl"
"""Export name under which the paired deployment publishes its base URL."""

ENV_API_URL = "APIWIRE_API_URL"
ENV_EXPORTS_FILE = "APIWIRE_EXPORTS_FILE"
ENV_USER_AGENT = "APIWIRE_USER_AGENT"
ENV_ORIGIN = "APIWIRE_ORIGIN"


# --- Deployment exports ---


def load_deployment_exports(path: str | Path, stack: Optional[str] = None) -> dict[str, str]:
    """Load a stack-outputs file and flatten it to ``{export_name: value}``.

    Two layouts are accepted::

        {"ApiUrl": "https://..."}                      # flat
        {"MyStack": {"ApiUrl": "https://..."}, ...}    # one object per stack

    Args:
        path: Location of the JSON file.
        stack: Only read the outputs of this stack (nested layout).

    Returns:
        Export names mapped to their string values.  With several stacks
        and no *stack* filter, later stacks win on name clashes (with a
        warning when the values differ).

    Raises:
        ConfigError: If the file is missing, not JSON, not an object, or
            does not contain *stack*.
    """
    file_path = Path(path).expanduser()
    if not file_path.is_file():
        raise ConfigError(f"Deployment exports file not found: {file_path}")
    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Invalid deployment exports file {file_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Deployment exports file {file_path} must contain a JSON object")

    if stack is not None:
        outputs = data.get(stack)
        if not isinstance(outputs, dict):
            raise ConfigError(f"Stack '{stack}' not found in {file_path}")
        return _stringify(outputs)

    exports: dict[str, str] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            stack_outputs = _stringify(value)
            for name in sorted(stack_outputs.keys() & exports.keys()):
                if stack_outputs[name] != exports[name]:
                    warning(f"Export '{name}' is set by several stacks; using stack '{key}'")
            exports.update(stack_outputs)
        else:
            exports[key] = str(value)
    return exports


def _stringify(outputs: dict[str, Any]) -> dict[str, str]:
    return {key: str(value) for key, value in outputs.items() if not isinstance(value, dict)}


# --- Precedence resolution ---


def resolve_api_url(
    cli_url: Optional[str] = None,
    exports_file: Optional[str] = None,
    stack: Optional[str] = None,
    export_name: str = API_URL_PARAM,
) -> str:
    """Resolve the API base URL.

    Precedence (high to low):
        1. *cli_url*
        2. ``APIWIRE_API_URL``
        3. *export_name* in the exports file (*exports_file* or
           ``APIWIRE_EXPORTS_FILE``)

    Raises:
        ConfigError: If no source provides a URL.
    """
    if cli_url:
        return cli_url

    env_url = os.environ.get(ENV_API_URL)
    if env_url:
        return env_url

    exports_path = exports_file or os.environ.get(ENV_EXPORTS_FILE)
    if exports_path:
        exports = load_deployment_exports(exports_path, stack)
        url = exports.get(export_name)
        if url:
            info(f"Using {export_name} from {exports_path}")
            return url
        raise ConfigError(f"Export '{export_name}' not found in {exports_path}")

    raise ConfigError(
        f"No API URL configured. Pass --url, set {ENV_API_URL}, "
        f"or point --exports-file at the deployment outputs"
    )


def resolve_host_environment(
    user_agent: Optional[str] = None,
    origin: Optional[str] = None,
) -> HostEnvironment:
    """Build the host environment from arguments, falling back to env vars."""
    return HostEnvironment(
        user_agent=user_agent or os.environ.get(ENV_USER_AGENT) or None,
        origin=origin or os.environ.get(ENV_ORIGIN) or None,
    )


# --- Security token sources ---


def token_supplier_from_source(source: str) -> Callable[[], Optional[str]]:
    """Build a security-token supplier from a source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- ``os.environ["VAR_NAME"]``, read on every call
          (``None`` while unset)
        - ``"file:/path/to/file"`` -- file content stripped of whitespace,
          read on every call
        - ``"prompt"`` -- asked once, interactively (requires a TTY)
        - ``"literal:VALUE"`` -- a fixed value

    Raises:
        ConfigError: If the format is unknown, the file does not exist, or
            a prompt is requested without a TTY.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        return lambda: os.environ.get(var_name)

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Token file not found: {path} (source: {source})")

        def _read_file() -> str:
            try:
                return path.read_text(encoding="utf-8").strip()
            except OSError as exc:
                raise ConfigError(f"Cannot read token file {path}: {exc}") from exc

        return _read_file

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError("Cannot prompt for a token: stdin is not a TTY (source: prompt)")
        token = getpass.getpass("Security token: ")
        return lambda: token

    if source.startswith("literal:"):
        value = source[8:]
        return lambda: value

    raise ConfigError(f"Unknown token source format: {source}")
