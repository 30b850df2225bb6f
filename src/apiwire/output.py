"""Output and diagnostics with strict stdout/stderr discipline.

* **stdout** -- call results and route tables only, so ``apiwire call``
  output can be piped into ``jq``.
* **stderr** -- diagnostics: request traces (``debug``), warnings, errors.
* **TTY detection** -- Rich formatting when stdout is a terminal, plain
  text when piped.
* **Colour control** -- respects ``NO_COLOR``, ``TERM=dumb`` and
  ``--no-color``.

Library code (the call protocol, the loaders) reports through the
module-level helpers :func:`debug`, :func:`info`, :func:`warning` and
:func:`error`, which delegate to the global :class:`OutputManager`.  The
default manager is quiet about debug lines; ``apiwire --verbose`` or
:func:`set_output` with ``verbose=True`` turns request tracing on.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Iterator, Optional

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """Supported stdout formats; ``AUTO`` picks ``RICH`` on a colour TTY."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Routes data to stdout and diagnostics to stderr.

    Args:
        format: Desired output format. ``AUTO`` resolves based on TTY
            detection.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress informational messages on stderr.
        verbose: Show debug messages (request traces) on stderr.
        output_file: Write data output to this path instead of stdout.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
        output_file: Optional[str] = None,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._output_file = output_file

        if format == OutputFormat.AUTO:
            self._format = (
                OutputFormat.RICH if _is_tty() and not self._no_color else OutputFormat.PLAIN
            )
        else:
            self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(
            file=sys.stderr,
            no_color=self._no_color,
            stderr=True,
        )

    @property
    def format(self) -> OutputFormat:
        """The resolved output format."""
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def format_response(self, data: Any) -> None:
        """Render a decoded call result on stdout in the active format.

        Values that JSON cannot represent natively (``datetime``,
        ``date``) are rendered through ``str``.
        """
        if self._output_file:
            content = data if isinstance(data, str) else _to_json(data, indent=2)
            self._append(content, mode="w")
        elif self._format == OutputFormat.JSON:
            self.print_data(_to_json(data, indent=2))
        elif self._format == OutputFormat.PLAIN:
            for line in _plain_lines(data):
                self.print_data(line)
        elif isinstance(data, (dict, list)):
            self._stdout.print(
                Syntax(_to_json(data, indent=2), "json", theme="monokai", word_wrap=True)
            )
        elif data is not None:
            self._stdout.print(str(data))

    def print_data(self, text: str) -> None:
        """Print raw text to stdout (or append it to the output file)."""
        if self._output_file:
            self._append(text, mode="a")
        else:
            print(text, file=sys.stdout, flush=True)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print rows as a Rich table, a JSON array of objects, or TSV."""
        if self._format == OutputFormat.JSON:
            self.print_data(_to_json([dict(zip(headers, row)) for row in rows], indent=2))
            return
        if self._format == OutputFormat.PLAIN:
            for cells in [headers, *rows]:
                self.print_data("\t".join(cells))
            return

        table = Table(title=title, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        """Informational message. Suppressed by ``--quiet``."""
        if not self._quiet:
            self._emit(message)

    def warning(self, message: str) -> None:
        """Yellow warning. Never suppressed."""
        self._emit(message, label="Warning:", style="yellow")

    def error(self, message: str) -> None:
        """Bold red error. Never suppressed."""
        self._emit(message, label="Error:", style="bold red")

    def debug(self, message: str) -> None:
        """Request trace, only shown in verbose mode."""
        if self._verbose:
            self._emit(message, label="[debug]", style="dim", whole_line=True)

    def _emit(
        self,
        message: str,
        label: str = "",
        style: str = "",
        whole_line: bool = False,
    ) -> None:
        """Write one diagnostic line to stderr.

        The label is styled (or, with *whole_line*, the whole line);
        *message* is never interpreted as Rich markup.
        """
        if self._no_color or not style:
            line = f"{label} {message}" if label else message
            if self._no_color:
                print(line, file=sys.stderr, flush=True)
            else:
                self._stderr.print(escape(line), highlight=False)
            return
        if whole_line:
            self._stderr.print(
                f"[{style}]{escape(label)} {escape(message)}[/{style}]", highlight=False
            )
        else:
            self._stderr.print(f"[{style}]{escape(label)}[/{style}] {escape(message)}")

    def _append(self, text: str, mode: str) -> None:
        assert self._output_file is not None
        with open(self._output_file, mode, encoding="utf-8") as fh:
            fh.write(text if text.endswith("\n") else text + "\n")


# ------------------------------------------------------------------ #
# Module-level helpers
# ------------------------------------------------------------------ #


def _plain_lines(data: Any) -> Iterator[str]:
    """Yield the tab-separated plain rendering of a call result."""
    if data is None:
        return
    if isinstance(data, dict):
        for key, value in data.items():
            yield f"{key}\t{value}"
    elif isinstance(data, list):
        for item in data:
            yield "\t".join(map(str, item.values())) if isinstance(item, dict) else str(item)
    else:
        yield str(data)


def _to_json(data: Any, indent: Optional[int] = None) -> str:
    return json.dumps(data, indent=indent, ensure_ascii=False, default=str)


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (any value) or ``TERM=dumb``."""
    if os.environ.get("NO_COLOR") is not None:
        return True
    return os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Global output instance
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    """Install *output* as the global :class:`OutputManager`."""
    global _output
    _output = output


def reset_output() -> None:
    """Drop the global manager; the next :func:`get_output` creates a fresh one."""
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_table(
    headers: list[str],
    rows: list[list[str]],
    title: Optional[str] = None,
) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
