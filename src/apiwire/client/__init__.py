"""Call protocol for generated clients.

Provides the invocable placed on generated clients and the pieces of the
single-call protocol it is built from:

* :class:`RemoteFunction` -- awaitable that performs one POST round trip.
* :class:`CallSession` -- token supplier, host environment and HTTP client
  shared by every invocable of a client.
* :mod:`~apiwire.client.envelope` -- response envelope interpretation.
* :mod:`~apiwire.client.credentials` -- the credentials directive policy.

Example::

    from apiwire.client import CallSession, RemoteFunction

    fn = RemoteFunction("helloWorld", schema, url, connectivity, CallSession())
    greeting = await fn("Test")
"""

from apiwire.client.call import (
    TOKEN_HEADER,
    CallSession,
    RemoteFunction,
    build_request,
    encode_arguments,
)
from apiwire.client.credentials import (
    credentials_for,
    default_credentials_policy,
    is_safari,
)
from apiwire.client.envelope import interpret_envelope, unwrap_quoted

__all__ = [
    "CallSession",
    "RemoteFunction",
    "TOKEN_HEADER",
    "build_request",
    "credentials_for",
    "default_credentials_policy",
    "encode_arguments",
    "interpret_envelope",
    "is_safari",
    "unwrap_quoted",
]
