"""Numeric process exit codes for the ``apiwire`` command line.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~apiwire.exceptions.ApiWireError` subclass.
Shell scripts wrapping ``apiwire call`` can inspect the exit code to tell a
server-reported failure from a network fault without parsing stderr.

Example::

    $ apiwire call api.yaml group.called '{"id": 1}' --url https://example.api
    $ echo $?
    5   # EXIT_SERVER_ERROR -- the envelope carried an error message
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_SERVER_ERROR = 5
"""The server reported an error (``errorMessage``/``message`` or HTTP 401)."""

EXIT_CONNECTION_ERROR = 6
"""The HTTP exchange could not complete or the body was not JSON."""

EXIT_SCHEMA_ERROR = 7
"""The API schema document could not be loaded or understood."""

EXIT_PROTOCOL_ERROR = 8
"""The response envelope violated the wire protocol (missing ``data``)."""
