"""Client generator -- build a callable object tree from an API schema.

Typical usage::

    from apiwire.generator import connect

    api = connect(schema, {"url": "https://example.api"}, lambda: session.token)
    await api.group.called(record)

Sub-modules:

* :mod:`~apiwire.generator.naming` -- kebab-case segments and URL
  composition.
* :mod:`~apiwire.generator.connectivity` -- inheritance of URL, hooks and
  CORS settings down the tree, with per-branch overrides.
* :mod:`~apiwire.generator.client_tree` -- the recursive builder and the
  :class:`ApiClient` it produces.
"""

from apiwire.generator.client_tree import ApiClient, build_client, connect
from apiwire.generator.connectivity import resolve_child, resolve_root
from apiwire.generator.naming import camel_to_kebab, function_url, join_path

__all__ = [
    "ApiClient",
    "build_client",
    "camel_to_kebab",
    "connect",
    "function_url",
    "join_path",
    "resolve_child",
    "resolve_root",
]
