"""``apiwire routes`` -- show where each schema function is served.

Builds the client exactly as an application would and prints one row per
visible function: its dotted name, the POST URL, and its signature.  Handy
for checking ``children`` URL overrides and kebab-case routing against a
server's route table.
"""

from __future__ import annotations

from typing import Optional

import typer

from apiwire.generator.client_tree import ApiClient
from apiwire.output import error, print_table
from apiwire.schema import ApiSchema, FunctionSchema, iter_functions


def _signature(fn: FunctionSchema) -> str:
    args = ", ".join(d.name for d in fn.args)
    ret = fn.ret_val.name if fn.ret_val is not None else "void"
    return f"({args}) -> {ret}"


def collect_routes(schema: ApiSchema, client: ApiClient) -> list[list[str]]:
    """Return ``[dotted_name, url, signature]`` rows for every visible function.

    *client* must have been built from *schema*; it supplies the resolved URLs.
    """
    rows: list[list[str]] = []
    for path, fn in iter_functions(schema):
        member = client
        for name in path:
            member = member[name]
        rows.append([".".join(path), member.url, _signature(fn)])
    return rows


def routes_command(
    schema: str = typer.Argument(..., help="Schema document: file path, URL, or '-' for stdin."),
    url: Optional[str] = typer.Option(None, "--url", "-u", help="API base URL."),
    exports_file: Optional[str] = typer.Option(
        None, "--exports-file", help="Deployment outputs JSON holding the base URL."
    ),
    stack: Optional[str] = typer.Option(None, "--stack", help="Stack name inside the exports file."),
) -> None:
    """List every visible function and the URL it is POSTed to.

    Example::

        $ apiwire routes api.yaml --url https://example.api
    """
    from apiwire.config import resolve_api_url
    from apiwire.exceptions import ApiWireError
    from apiwire.generator import connect
    from apiwire.schema import load_schema

    try:
        api_schema = load_schema(schema)
        base_url = resolve_api_url(cli_url=url, exports_file=exports_file, stack=stack)
        client = connect(api_schema, {"url": base_url})
    except ApiWireError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    rows = collect_routes(api_schema, client)
    print_table(["Function", "POST URL", "Signature"], rows, title="Routes")
