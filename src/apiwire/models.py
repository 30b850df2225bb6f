"""Pydantic models shared across apiwire.

**Connectivity models** -- what a caller passes to :func:`apiwire.connect`
and what the builder threads down the schema tree:
    :class:`ConnectivityOptions` and :class:`ResolvedConnectivity`.

**Host models** -- the calling environment the credentials policy looks at:
    :class:`CredentialsMode` and :class:`HostEnvironment`.

All models are frozen: a generated client never changes after it is built.
"""

from __future__ import annotations

import enum
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

Hook = Callable[[], Any]


class ConnectivityOptions(BaseModel):
    """Connection settings for an API node, as supplied by the caller.

    At the root ``url`` is required.  Every entry of ``children`` is a
    partial override for the sub-API of the same member name: fields left
    as ``None`` are inherited from the parent.

    Example::

        ConnectivityOptions(
            url="https://example.api",
            freeze=spinner.show,
            unfreeze=spinner.hide,
            children={"reports": ConnectivityOptions(url="https://reports.example.api")},
        )
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    url: Optional[str] = Field(default=None, description="Base URL of the API server")
    children: dict[str, ConnectivityOptions] = Field(
        default_factory=dict, description="Per-member overrides for sub-APIs"
    )
    freeze: Optional[Hook] = Field(
        default=None, description="Called before every request is sent"
    )
    unfreeze: Optional[Hook] = Field(
        default=None, description="Called after every request settles"
    )
    wildcard_cors: Optional[bool] = Field(
        default=None,
        alias="wildcardCors",
        description="Server answers with a wildcard CORS origin; send no credentials",
    )


class ResolvedConnectivity(BaseModel):
    """Effective connection settings of one node after inheritance.

    ``path`` is the ``/``-joined kebab-case chain of API member names from
    the root to this node (empty at the root).
    """

    model_config = ConfigDict(frozen=True)

    url: str
    path: str = ""
    children: dict[str, ConnectivityOptions] = Field(default_factory=dict)
    freeze: Optional[Hook] = None
    unfreeze: Optional[Hook] = None
    wildcard_cors: bool = False


class CredentialsMode(str, enum.Enum):
    """Cross-origin credential transmission directive for a request."""

    INCLUDE = "include"
    SAME_ORIGIN = "same-origin"


class HostEnvironment(BaseModel):
    """What the calling host knows about itself.

    A browser-like host supplies its page ``origin`` and ``user_agent``;
    ``cookies`` are the credentials governed by the
    :class:`CredentialsMode` directive.  Non-browser hosts leave everything
    empty and fall into the "include credentials" branch.
    """

    model_config = ConfigDict(frozen=True)

    origin: Optional[str] = None
    user_agent: Optional[str] = None
    cookies: dict[str, str] = Field(default_factory=dict)
