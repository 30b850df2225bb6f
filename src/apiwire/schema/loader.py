"""Load API schema documents from a URL, local file, or stdin.

A schema document is the JSON/YAML rendition of an :class:`ApiSchema` tree,
used by the ``apiwire`` command line where no Python module declares the
schema.  Types are named with the strings of
:data:`~apiwire.schema.descriptors.BUILTIN_TYPES`, decorated with ``[]``
(array) and ``?`` (optional) suffixes, or spelled as records::

    helloWorld:
      args: [string]
      retVal: string
    dateFunc:
      args: [datetime, string?]
      retVal: datetime
    group:
      called:
        args: [{record: {id: bigint, name: string}, name: SimpleRecord}]
        retVal: {record: {id: bigint, name: string}, name: SimpleRecord}
      secondLevel:
        foo: {args: []}
    internal:
      $hidden: true
      reindex: {args: []}

The public functions are :func:`load_schema` (I/O plus conversion) and
:func:`schema_from_document` (conversion only).
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from apiwire.exceptions import SchemaError
from apiwire.schema.descriptors import BUILTIN_TYPES, TypeDescriptor, array_of, record
from apiwire.schema.nodes import ApiSchema, FunctionSchema

HIDDEN_KEY = "$hidden"


def load_schema(source: str) -> ApiSchema:
    """Load a schema document from URL, file path, or stdin ('-').

    Args:
        source: A URL (http/https), file path, or '-' for stdin.

    Returns:
        The schema tree.

    Raises:
        SchemaError: If the source cannot be loaded, parsed, or converted.
    """
    if source == "-":
        document = _load_from_stdin()
    elif source.startswith(("http://", "https://")):
        document = _load_from_url(source)
    else:
        document = _load_from_file(source)
    return schema_from_document(document)


def _load_from_stdin() -> dict[str, Any]:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise SchemaError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SchemaError("No input received from stdin")

    return _parse_content(content, hint="stdin")


def _load_from_url(url: str) -> dict[str, Any]:
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SchemaError(
            f"HTTP {exc.response.status_code} fetching schema from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SchemaError(f"Failed to fetch schema from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return _parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    file_path = Path(path)
    if not file_path.is_file():
        raise SchemaError(f"Schema file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SchemaError(f"Failed to read schema file {path}: {exc}") from exc

    if not content.strip():
        raise SchemaError(f"Schema file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    JSON is tried first unless the hint says YAML; valid JSON is also valid
    YAML, but the JSON parser reports better errors.
    """
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise SchemaError(f"Invalid JSON: {exc}") from exc
        else:
            return _require_mapping(result)

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        msg = "Failed to parse schema as JSON or YAML"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise SchemaError(msg) from exc

    return _require_mapping(result)


def _require_mapping(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise SchemaError(f"Schema must be a JSON/YAML object (got {kind})")
    return result


# --- Document conversion ---


def schema_from_document(document: dict[str, Any], where: str = "") -> ApiSchema:
    """Convert a parsed schema document into an :class:`ApiSchema`.

    Args:
        document: Mapping of member names to function or sub-API documents.
        where: Dotted location of *document*, used in error messages.

    Raises:
        SchemaError: On malformed members or unknown type names.
    """
    members: dict[str, ApiSchema | FunctionSchema] = {}
    for name, value in document.items():
        if name == HIDDEN_KEY:
            continue
        location = f"{where}.{name}" if where else name
        if not isinstance(value, dict):
            raise SchemaError(f"Member '{location}' must be an object")
        if isinstance(value.get("args"), (list, tuple)):
            members[name] = _function_from_document(value, location)
        else:
            members[name] = schema_from_document(value, location)
    return ApiSchema(members=members, hidden=bool(document.get(HIDDEN_KEY, False)))


def _function_from_document(document: dict[str, Any], where: str) -> FunctionSchema:
    ret_val = document.get("retVal", document.get("ret_val"))
    return FunctionSchema(
        args=tuple(parse_type(arg, where) for arg in document["args"]),
        ret_val=parse_type(ret_val, where) if ret_val is not None else None,
        hidden=bool(document.get("hidden", False)),
    )


def parse_type(type_ref: Any, where: str = "") -> TypeDescriptor:
    """Resolve a type reference from a schema document.

    Accepts a type name with optional ``[]``/``?`` suffixes (``"bigint[]?"``)
    or a record object ``{"record": {...}, "name": "..."}``.

    Raises:
        SchemaError: If the reference cannot be resolved.
    """
    if isinstance(type_ref, dict):
        fields = type_ref.get("record")
        if not isinstance(fields, dict):
            raise SchemaError(f"Invalid type object in '{where}': expected a 'record' mapping")
        return record(
            str(type_ref.get("name", "Record")),
            **{key: parse_type(value, f"{where}.{key}") for key, value in fields.items()},
        )

    if not isinstance(type_ref, str) or not type_ref:
        raise SchemaError(f"Invalid type reference in '{where}': {type_ref!r}")

    if type_ref.endswith("?"):
        return parse_type(type_ref[:-1], where).optional
    if type_ref.endswith("[]"):
        return array_of(parse_type(type_ref[:-2], where))

    descriptor = BUILTIN_TYPES.get(type_ref)
    if descriptor is None:
        known = ", ".join(sorted(BUILTIN_TYPES))
        raise SchemaError(f"Unknown type '{type_ref}' in '{where}' (known: {known})")
    return descriptor
