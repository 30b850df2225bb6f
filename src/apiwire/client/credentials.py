"""Credential directive selection and its effect on outgoing requests.

Browsers attach cookies to cross-origin requests according to a
credentials directive.  Safari-family agents only accept the simplified
``same-origin`` directive, every other agent gets ``include``, and servers
answering with a wildcard CORS origin must receive no directive at all.

The decision is an injected policy (``user_agent -> CredentialsMode``) so
that hosts without a browser can supply their own; the default treats an
unknown agent as a non-Safari one.
"""

from __future__ import annotations

import re
from typing import Callable, Optional
from urllib.parse import urlsplit

from apiwire.models import CredentialsMode, HostEnvironment

CredentialsPolicy = Callable[[Optional[str]], CredentialsMode]

_SAFARI = re.compile("safari", re.IGNORECASE)
_NOT_SAFARI = re.compile("chrome|android", re.IGNORECASE)


def is_safari(user_agent: Optional[str]) -> bool:
    """Return True for Safari-family agent strings (not Chrome, not Android)."""
    if not user_agent:
        return False
    return bool(_SAFARI.search(user_agent)) and not _NOT_SAFARI.search(user_agent)


def default_credentials_policy(user_agent: Optional[str]) -> CredentialsMode:
    """``SAME_ORIGIN`` for Safari-family agents, ``INCLUDE`` for everything else."""
    if is_safari(user_agent):
        return CredentialsMode.SAME_ORIGIN
    return CredentialsMode.INCLUDE


def credentials_for(
    wildcard_cors: bool,
    user_agent: Optional[str],
    policy: CredentialsPolicy = default_credentials_policy,
) -> Optional[CredentialsMode]:
    """Return the directive for one request, or ``None`` when none may be sent."""
    if wildcard_cors:
        return None
    return policy(user_agent)


def _origin_of(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}".lower()


def credential_headers(
    url: str,
    credentials: Optional[CredentialsMode],
    host: HostEnvironment,
) -> dict[str, str]:
    """Return the ``Cookie`` header the directive allows for *url*.

    * ``INCLUDE`` -- host cookies go to any origin.
    * ``SAME_ORIGIN`` -- host cookies go only to the host's own origin.
    * ``None`` -- no cookies.
    """
    if credentials is None or not host.cookies:
        return {}
    if credentials == CredentialsMode.SAME_ORIGIN:
        if host.origin is None or _origin_of(url) != host.origin.rstrip("/").lower():
            return {}
    return {"Cookie": "; ".join(f"{k}={v}" for k, v in host.cookies.items())}
