"""Exception hierarchy for apiwire.

All exceptions inherit from :class:`ApiWireError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`apiwire.exit_codes`.
Generated clients raise the call-level subclasses from awaited calls; the
command line catches ``ApiWireError`` and exits with the matching code.

Subclass hierarchy::

    ApiWireError (exit 1)
    +-- InvalidUsageError    (exit 2)
    +-- ServerReportedError  (exit 5)
    +-- TransportError       (exit 6)
    +-- SchemaError          (exit 7)
    +-- ProtocolError        (exit 8)
    +-- ConfigError          (exit 1)

Failures raised by a return-type descriptor while decoding (for example a
:class:`pydantic.ValidationError`) are not part of this hierarchy: they
reach the caller exactly as the descriptor raised them.
"""

from apiwire.exit_codes import (
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_PROTOCOL_ERROR,
    EXIT_SCHEMA_ERROR,
    EXIT_SERVER_ERROR,
)


class ApiWireError(Exception):
    """Base exception for all apiwire errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(ApiWireError):
    """Raised for invalid CLI arguments (unknown function path, bad flags)."""

    exit_code = EXIT_INVALID_USAGE


class ServerReportedError(ApiWireError):
    """Raised when the envelope carries ``errorMessage`` or ``message``, or on HTTP 401."""

    exit_code = EXIT_SERVER_ERROR


class TransportError(ApiWireError):
    """Raised when the HTTP exchange fails or the body is not valid JSON.

    The message embeds the description of the underlying fault, which is
    also kept as ``__cause__``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class SchemaError(ApiWireError):
    """Raised when a schema document cannot be loaded or names unknown types."""

    exit_code = EXIT_SCHEMA_ERROR


class ProtocolError(ApiWireError):
    """Raised when a function declares a return value but the envelope has no ``data``."""

    exit_code = EXIT_PROTOCOL_ERROR


class ConfigError(ApiWireError):
    """Raised for configuration problems (missing base URL, invalid exports file)."""

    exit_code = EXIT_GENERIC_FAILURE
