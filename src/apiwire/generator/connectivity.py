"""Connectivity inheritance down the schema tree.

The builder carries one :class:`~apiwire.models.ResolvedConnectivity` per
API node.  A sub-API inherits its parent's settings; an entry of the
parent's ``children`` mapping overrides them field by field.  Overrides are
shallow: a child's ``children`` come from its own override only, since the
parent's map addresses the parent's members.
"""

from __future__ import annotations

from typing import Any, Optional

from apiwire.exceptions import ConfigError
from apiwire.generator.naming import camel_to_kebab, join_path
from apiwire.models import ConnectivityOptions, ResolvedConnectivity

_INHERITED_FIELDS = ("url", "freeze", "unfreeze", "wildcard_cors")


def resolve_root(options: ConnectivityOptions) -> ResolvedConnectivity:
    """Resolve the root node's settings.

    Raises:
        ConfigError: If ``options.url`` is missing or empty.
    """
    if not options.url:
        raise ConfigError("A base URL is required at the root of the API")
    return ResolvedConnectivity(
        url=options.url,
        path="",
        children=dict(options.children),
        freeze=options.freeze,
        unfreeze=options.unfreeze,
        wildcard_cors=bool(options.wildcard_cors),
    )


def resolve_child(
    parent: ResolvedConnectivity,
    key: str,
    override: Optional[ConnectivityOptions] = None,
) -> ResolvedConnectivity:
    """Derive the settings of the sub-API named *key*.

    Args:
        parent: The enclosing node's resolved settings.
        key: Member name of the sub-API (camelCase).
        override: The parent's ``children[key]`` entry, if any.

    Returns:
        New settings with *key*'s kebab segment appended to ``path``.
    """
    fields: dict[str, Any] = {name: getattr(parent, name) for name in _INHERITED_FIELDS}
    children: dict[str, ConnectivityOptions] = {}
    if override is not None:
        for name in _INHERITED_FIELDS:
            value = getattr(override, name)
            if value is not None:
                fields[name] = value
        children = dict(override.children)
    return ResolvedConnectivity(
        path=join_path(parent.path, camel_to_kebab(key)),
        children=children,
        **fields,
    )
