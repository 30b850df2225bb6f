"""apiwire -- Generate async HTTP clients from declarative RPC API schemas.

An API schema is a tree of named functions and sub-APIs.  :func:`connect`
walks it once and returns an object of the same shape whose functions
POST their arguments as a JSON array to ``base/<kebab-path>/<kebab-name>``
and decode the ``data`` field of the answer.

Typical usage::

    from apiwire import api_schema, connect, string

    hello_api = api_schema({"helloWorld": {"args": [string], "retVal": string}})
    api = connect(hello_api, {"url": "https://example.api"}, lambda: token)
    greeting = await api.helloWorld("Test")

The package also ships the ``apiwire`` command line (``routes`` and
``call``) for schemas written as JSON/YAML documents.

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models for connectivity and the host environment.
    config: Base URL, host environment and security token resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes for the command line.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"

from apiwire.client.call import CallSession, RemoteFunction
from apiwire.exceptions import (
    ApiWireError,
    ConfigError,
    InvalidUsageError,
    ProtocolError,
    SchemaError,
    ServerReportedError,
    TransportError,
)
from apiwire.generator.client_tree import ApiClient, connect
from apiwire.models import (
    ConnectivityOptions,
    CredentialsMode,
    HostEnvironment,
    ResolvedConnectivity,
)
from apiwire.schema import (
    ApiSchema,
    FunctionSchema,
    TypeDescriptor,
    api_schema,
    array_of,
    bigint,
    boolean,
    date,
    integer,
    json_value,
    number,
    record,
    string,
    timestamp,
)

__all__ = [
    "ApiClient",
    "ApiSchema",
    "ApiWireError",
    "CallSession",
    "ConfigError",
    "ConnectivityOptions",
    "CredentialsMode",
    "FunctionSchema",
    "HostEnvironment",
    "InvalidUsageError",
    "ProtocolError",
    "RemoteFunction",
    "ResolvedConnectivity",
    "SchemaError",
    "ServerReportedError",
    "TransportError",
    "TypeDescriptor",
    "__version__",
    "api_schema",
    "array_of",
    "bigint",
    "boolean",
    "connect",
    "date",
    "integer",
    "json_value",
    "number",
    "record",
    "string",
    "timestamp",
]
