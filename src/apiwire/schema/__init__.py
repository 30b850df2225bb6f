"""API schema trees and type descriptors consumed by the client builder.

Sub-modules:

* :mod:`~apiwire.schema.descriptors` -- :class:`TypeDescriptor` and the
  built-in types (``string``, ``bigint``, ``timestamp``...).
* :mod:`~apiwire.schema.nodes` -- :class:`ApiSchema`, :class:`FunctionSchema`
  and the :func:`api_schema` declaration helper.
* :mod:`~apiwire.schema.loader` -- JSON/YAML schema documents for the
  command line.
"""

from apiwire.schema.descriptors import (
    BUILTIN_TYPES,
    TypeDescriptor,
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
from apiwire.schema.loader import load_schema, parse_type, schema_from_document
from apiwire.schema.nodes import (
    ApiSchema,
    FunctionSchema,
    SchemaNode,
    api_schema,
    function_schema,
    iter_functions,
)

__all__ = [
    "ApiSchema",
    "BUILTIN_TYPES",
    "FunctionSchema",
    "SchemaNode",
    "TypeDescriptor",
    "api_schema",
    "array_of",
    "bigint",
    "boolean",
    "date",
    "function_schema",
    "integer",
    "iter_functions",
    "json_value",
    "load_schema",
    "number",
    "parse_type",
    "record",
    "schema_from_document",
    "string",
    "timestamp",
]
