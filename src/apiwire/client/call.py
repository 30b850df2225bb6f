"""One remote call -- encode, POST, read the envelope, decode.

:class:`RemoteFunction` is the invocable the builder places on a generated
client for every visible function of the schema.  Awaiting it performs
exactly one HTTP round trip:

1. ``freeze()`` (if configured).
2. Encode the positional arguments as a compact JSON array.
3. ``POST`` it to the function URL with the JSON and token headers.
4. Read the envelope; HTTP 401 always reads as ``Unauthorized``.
5. ``unfreeze()`` (if configured), whatever happened in steps 2-4.
6. Interpret the envelope (see :mod:`apiwire.client.envelope`).

There is no retry and no timeout: a call runs until the transport settles.
Concurrent calls share nothing but the caller's hooks and token supplier.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

import httpx

from apiwire.client.credentials import (
    CredentialsPolicy,
    credential_headers,
    credentials_for,
    default_credentials_policy,
)
from apiwire.client.envelope import UNAUTHORIZED_ENVELOPE, interpret_envelope
from apiwire.exceptions import TransportError
from apiwire.models import CredentialsMode, HostEnvironment, ResolvedConnectivity
from apiwire.output import debug
from apiwire.schema.descriptors import TypeDescriptor, json_value
from apiwire.schema.nodes import FunctionSchema

TOKEN_HEADER = "x-security-token"

TokenSupplier = Callable[[], Optional[str]]


@dataclass(frozen=True)
class CallSession:
    """Settings shared by every invocable of one generated client.

    Attributes:
        security_token: Called before each request; its result (or ``""``)
            travels in the ``x-security-token`` header.
        host: The calling environment (origin, user agent, cookies).
        credentials_policy: Maps the user agent to a credentials directive.
        http_client: Shared :class:`httpx.AsyncClient`.  When ``None``, each
            call opens and closes its own client.
        transport: Transport for per-call clients (tests pass an
            :class:`httpx.MockTransport`).
    """

    security_token: Optional[TokenSupplier] = None
    host: HostEnvironment = field(default_factory=HostEnvironment)
    credentials_policy: CredentialsPolicy = default_credentials_policy
    http_client: Optional[httpx.AsyncClient] = None
    transport: Optional[httpx.AsyncBaseTransport] = None

    def current_token(self) -> str:
        if self.security_token is None:
            return ""
        return self.security_token() or ""


def encode_arguments(args: Sequence[Any], arg_types: Sequence[TypeDescriptor]) -> str:
    """Encode *args* as the compact JSON array sent as the request body.

    Each argument is boxed by the descriptor declared at its position;
    arguments beyond the declared ones are converted generically.  Python
    integers are written as bare numeric literals of any magnitude.
    """
    boxed = [
        arg_types[i].box(value) if i < len(arg_types) else json_value.box(value)
        for i, value in enumerate(args)
    ]
    return json.dumps(boxed, separators=(",", ":"), ensure_ascii=False)


def build_request(
    url: str,
    body: str,
    token: str,
    credentials: Optional[CredentialsMode],
    host: HostEnvironment,
) -> httpx.Request:
    """Build the ``POST`` request for one call.

    Args:
        url: Fully composed function URL.
        body: The encoded argument array.
        token: Security token value (``""`` when none).
        credentials: Credentials directive, ``None`` for wildcard-CORS servers.
        host: The calling environment.
    """
    headers: dict[str, str] = {
        "Accept": "application/json",
        "Content-Type": "application/json",
        TOKEN_HEADER: token,
        "X-Requested-With": "XMLHttpRequest",
    }
    if host.origin:
        headers["Origin"] = host.origin
    headers.update(credential_headers(url, credentials, host))
    return httpx.Request("POST", url, headers=headers, content=body.encode("utf-8"))


class RemoteFunction:
    """Async invocable bound to one schema function.

    Args:
        name: Member name in the schema (camelCase).
        schema: The function's schema node.
        url: Fully composed POST URL.
        connectivity: Resolved settings of the enclosing API node.
        session: Settings shared across the generated client.

    Example::

        result = await client.group.called({"id": 1, "name": "a"})
    """

    __slots__ = ("name", "schema", "url", "_connectivity", "_session")

    def __init__(
        self,
        name: str,
        schema: FunctionSchema,
        url: str,
        connectivity: ResolvedConnectivity,
        session: CallSession,
    ) -> None:
        self.name = name
        self.schema = schema
        self.url = url
        self._connectivity = connectivity
        self._session = session

    async def __call__(self, *args: Any) -> Any:
        """Perform the call and return the decoded result.

        Raises:
            TransportError: If the exchange fails or the body is not JSON.
            ServerReportedError: If the server reports an error or HTTP 401.
            ProtocolError: If the declared return value has no ``data``.
        """
        conn = self._connectivity
        if conn.freeze is not None:
            conn.freeze()
        try:
            envelope = await self._exchange(args)
        finally:
            if conn.unfreeze is not None:
                conn.unfreeze()
        return interpret_envelope(envelope, self.schema.ret_val)

    async def _exchange(self, args: Sequence[Any]) -> Any:
        session = self._session
        body = encode_arguments(args, self.schema.args)
        credentials = credentials_for(
            self._connectivity.wildcard_cors,
            session.host.user_agent,
            session.credentials_policy,
        )
        request = build_request(
            self.url, body, session.current_token(), credentials, session.host
        )
        debug(f"POST {self.url} {body}")

        try:
            if session.http_client is not None:
                response = await session.http_client.send(request)
            else:
                async with httpx.AsyncClient(
                    transport=session.transport, timeout=None
                ) as client:
                    response = await client.send(request)
            debug(f"HTTP {response.status_code} from {self.url}")
            if response.status_code == 401:
                return dict(UNAUTHORIZED_ENVELOPE)
            return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            debug(f"Transport failure on {self.url}: {exc}")
            raise TransportError(f"Error in fetch: {exc}") from exc

    def __repr__(self) -> str:
        return f"RemoteFunction({self.name} -> POST {self.url})"
