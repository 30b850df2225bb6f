"""``apiwire call`` -- invoke one schema function from the shell.

Each positional argument is parsed as JSON, falling back to the raw string,
so ``apiwire call api.yaml helloWorld Test`` and
``apiwire call api.yaml group.called '{"id": 1, "name": "a"}'`` both work.
The decoded result goes to stdout in the selected output format.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Optional

import typer

from apiwire.exceptions import InvalidUsageError
from apiwire.generator.client_tree import ApiClient
from apiwire.output import debug, error, format_response


def parse_cli_argument(raw: str) -> Any:
    """Parse *raw* as JSON, returning the raw string when it is not JSON."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def find_function(client: ApiClient, dotted: str) -> Any:
    """Resolve ``group.secondLevel.foo`` against *client*.

    Raises:
        InvalidUsageError: If any component is missing or not a function at
            the end of the path.
    """
    node: Any = client
    for part in dotted.split("."):
        if not isinstance(node, ApiClient) or part not in node:
            raise InvalidUsageError(f"No visible function '{dotted}' in the schema")
        node = node[part]
    if isinstance(node, ApiClient):
        raise InvalidUsageError(f"'{dotted}' is an API group, not a function")
    return node


def call_command(
    schema: str = typer.Argument(..., help="Schema document: file path, URL, or '-' for stdin."),
    function: str = typer.Argument(..., help="Dotted function name, e.g. group.secondLevel.foo."),
    args: Optional[list[str]] = typer.Argument(None, help="Arguments, each parsed as JSON."),
    url: Optional[str] = typer.Option(None, "--url", "-u", help="API base URL."),
    exports_file: Optional[str] = typer.Option(
        None, "--exports-file", help="Deployment outputs JSON holding the base URL."
    ),
    stack: Optional[str] = typer.Option(None, "--stack", help="Stack name inside the exports file."),
    token_source: Optional[str] = typer.Option(
        None, "--token-source", help="Security token: env:VAR, file:/path, prompt, literal:VALUE."
    ),
    wildcard_cors: bool = typer.Option(
        False, "--wildcard-cors", help="Send no credentials directive."
    ),
    user_agent: Optional[str] = typer.Option(None, "--user-agent", help="User agent to present."),
    origin: Optional[str] = typer.Option(None, "--origin", help="Origin to present."),
) -> None:
    """Call one function and print its decoded result.

    Example::

        $ apiwire call api.yaml helloWorld Test --url https://example.api
    """
    from apiwire.config import (
        resolve_api_url,
        resolve_host_environment,
        token_supplier_from_source,
    )
    from apiwire.exceptions import ApiWireError
    from apiwire.generator import connect
    from apiwire.schema import load_schema

    try:
        api_schema = load_schema(schema)
        base_url = resolve_api_url(cli_url=url, exports_file=exports_file, stack=stack)
        supplier = token_supplier_from_source(token_source) if token_source else None
        client = connect(
            api_schema,
            {"url": base_url, "wildcard_cors": wildcard_cors},
            supplier,
            host=resolve_host_environment(user_agent=user_agent, origin=origin),
        )
        fn = find_function(client, function)
        call_args = [parse_cli_argument(raw) for raw in args or []]
        debug(f"Calling {function} with {len(call_args)} argument(s)")
        result = asyncio.run(fn(*call_args))
    except ApiWireError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    format_response(result)
