"""Build a client object tree from an API schema.

This is the core algorithm of apiwire.  It walks an
:class:`~apiwire.schema.ApiSchema` depth-first and produces an
:class:`ApiClient` whose shape mirrors the schema's visible members.

**Algorithm summary**

1. Resolve the root connectivity (the base URL is mandatory).
2. For every member of an API node, skip it if it is hidden.
3. Sub-APIs recurse with the child connectivity returned by
   :func:`~apiwire.generator.connectivity.resolve_child`, which applies the
   matching ``children`` override and extends the kebab path.
4. Functions become :class:`~apiwire.client.RemoteFunction` invocables
   bound to ``base/<path>/<kebab-name>``.

Building performs no I/O; the tree can be shared by concurrent callers.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any, Optional, Union

import httpx

from apiwire.client.call import CallSession, RemoteFunction, TokenSupplier
from apiwire.client.credentials import CredentialsPolicy, default_credentials_policy
from apiwire.generator.connectivity import resolve_child, resolve_root
from apiwire.generator.naming import camel_to_kebab, function_url
from apiwire.models import ConnectivityOptions, HostEnvironment, ResolvedConnectivity
from apiwire.output import debug
from apiwire.schema.nodes import ApiSchema

ClientMember = Union["ApiClient", RemoteFunction]


class ApiClient:
    """Generated client for one API node.

    Members are reachable as attributes or items::

        await client.group.secondLevel.foo()
        await client["helloWorld"]("Test")

    The object is read-only; hidden schema members are simply absent.
    """

    __slots__ = ("_members", "_path")

    def __init__(self, members: Mapping[str, ClientMember], path: str = "") -> None:
        object.__setattr__(self, "_members", dict(members))
        object.__setattr__(self, "_path", path)

    def __getattr__(self, name: str) -> ClientMember:
        if name.startswith("_"):
            raise AttributeError(f"'{type(self).__name__}' has no attribute '{name}'")
        try:
            return self._members[name]
        except KeyError:
            raise AttributeError(
                f"API '{self._path or '<root>'}' has no member '{name}'"
            ) from None

    def __getitem__(self, name: str) -> ClientMember:
        return self._members[name]

    def __contains__(self, name: object) -> bool:
        return name in self._members

    def __iter__(self) -> Iterator[str]:
        return iter(self._members)

    def __len__(self) -> int:
        return len(self._members)

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self._members))

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"Cannot set attribute '{name}' on a generated API client")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"Cannot delete attribute '{name}' from a generated API client")

    def __repr__(self) -> str:
        return f"ApiClient({self._path or '<root>'}: {', '.join(self._members)})"


def build_client(
    schema: ApiSchema,
    connectivity: ResolvedConnectivity,
    session: CallSession,
) -> ApiClient:
    """Translate *schema* into an :class:`ApiClient`, recursively.

    Args:
        schema: The API node to translate.
        connectivity: Resolved settings for *schema*.
        session: Token supplier, host and HTTP client shared by all calls.

    Returns:
        A client with exactly the visible members of *schema*; empty when
        *schema* itself is hidden.
    """
    members: dict[str, ClientMember] = {}
    if schema.hidden:
        return ApiClient(members, connectivity.path)

    for key, member in schema.members.items():
        if member.hidden:
            continue
        if isinstance(member, ApiSchema):
            child = resolve_child(connectivity, key, connectivity.children.get(key))
            members[key] = build_client(member, child, session)
        else:
            url = function_url(connectivity.url, connectivity.path, camel_to_kebab(key))
            members[key] = RemoteFunction(key, member, url, connectivity, session)

    return ApiClient(members, connectivity.path)


def connect(
    schema: ApiSchema,
    options: Union[ConnectivityOptions, Mapping[str, Any]],
    security_token: Optional[TokenSupplier] = None,
    *,
    host: Optional[HostEnvironment] = None,
    credentials_policy: CredentialsPolicy = default_credentials_policy,
    http_client: Optional[httpx.AsyncClient] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ApiClient:
    """Generate a client for *schema*.

    Args:
        schema: Root of the API schema tree.
        options: Connectivity settings; a mapping is validated into
            :class:`~apiwire.models.ConnectivityOptions` (``wildcardCors``
            is accepted as an alias).
        security_token: Supplier of the value sent in the
            ``x-security-token`` header, called on every request.
        host: Calling environment used for the credentials directive.
        credentials_policy: ``user_agent -> CredentialsMode`` decision.
        http_client: Shared async client; by default each call opens its own.
        transport: Transport for the per-call clients.

    Returns:
        The root :class:`ApiClient`.

    Raises:
        ConfigError: If no base URL is configured at the root.

    Example::

        api = connect(hello_api, {"url": "https://example.api"})
        assert await api.helloWorld("Test") == "Return"
    """
    if not isinstance(options, ConnectivityOptions):
        options = ConnectivityOptions.model_validate(options)
    session = CallSession(
        security_token=security_token,
        host=host or HostEnvironment(),
        credentials_policy=credentials_policy,
        http_client=http_client,
        transport=transport,
    )
    root = resolve_root(options)
    debug(f"Building API client for {root.url}")
    return build_client(schema, root, session)
