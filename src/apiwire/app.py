"""Typer application factory and CLI entry point for apiwire.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``.  It registers the built-in sub-commands (``routes``,
``call``) and invokes the Typer app.  :class:`~apiwire.exceptions.ApiWireError`
failures exit with their own exit code; anything else exits with
:data:`~apiwire.exit_codes.EXIT_GENERIC_FAILURE`.
"""

from __future__ import annotations

import signal
import sys
from typing import Any, Optional

import typer

from apiwire import __version__
from apiwire.exit_codes import EXIT_GENERIC_FAILURE

app = typer.Typer(
    name="apiwire",
    help="Call schema-described RPC APIs over HTTP.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"apiwire {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Trace requests on stderr."),
    output_file: Optional[str] = typer.Option(None, "-o", "--output", help="Output file path."),
) -> None:
    """Root callback: install the global output manager from the flags."""
    from apiwire.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(
        OutputManager(
            format=fmt,
            no_color=no_color,
            quiet=quiet,
            verbose=verbose,
            output_file=output_file,
        )
    )


def register_commands() -> None:
    """Attach the built-in sub-commands to :data:`app` (idempotent)."""
    from apiwire.commands.call import call_command
    from apiwire.commands.routes import routes_command

    registered = {cmd.name for cmd in app.registered_commands}
    if "routes" not in registered:
        app.command("routes")(routes_command)
    if "call" not in registered:
        app.command("call")(call_command)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``apiwire`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    register_commands()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from apiwire.exceptions import ApiWireError
        from apiwire.output import error

        if isinstance(exc, ApiWireError):
            error(str(exc))
            sys.exit(exc.exit_code)
        error(f"Unexpected error: {type(exc).__name__}: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
