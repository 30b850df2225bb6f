"""Turn schema member names into URL path segments.

Member names are camelCase Python/JS identifiers; URL segments are
kebab-case.  The conversion is per character, not word-boundary aware:
every uppercase letter becomes ``-`` plus its lowercase form, so acronyms
expand letter by letter (``getURL`` -> ``get-u-r-l``).  Paired servers apply
the same rule when routing, which is why no smarter splitting is done.
"""

from __future__ import annotations


def camel_to_kebab(name: str) -> str:
    """Convert *name* to its kebab-case URL segment.

    Example::

        camel_to_kebab("helloWorld")   # "hello-world"
        camel_to_kebab("secondLevel")  # "second-level"
    """
    return "".join(f"-{ch.lower()}" if ch.isupper() else ch for ch in name)


def join_path(path: str, segment: str) -> str:
    """Append *segment* to a ``/``-joined *path* without doubling slashes."""
    if not path:
        return segment
    return f"{path.rstrip('/')}/{segment}"


def function_url(base_url: str, path: str, kebab_key: str) -> str:
    """Compose the POST URL of a function.

    Exactly one ``/`` separates *base_url* from the first path segment,
    whether or not the configured base URL ends with a slash.

    Args:
        base_url: Resolved base URL of the enclosing API node.
        path: Kebab path of the enclosing API node (may be empty).
        kebab_key: Kebab-case function name.

    Returns:
        ``base + "/" + (path + "/" if path else "") + kebab_key``
    """
    base = base_url[:-1] if base_url.endswith("/") else base_url
    prefix = f"{path}/" if path else ""
    return f"{base}/{prefix}{kebab_key}"
