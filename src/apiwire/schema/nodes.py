"""Schema nodes -- the declarative API tree consumed by the client builder.

An API schema is a finite tree of two node kinds:

* :class:`ApiSchema` -- an ordered mapping from member name to child node.
* :class:`FunctionSchema` -- argument descriptors plus an optional
  return-value descriptor.

Both carry a ``hidden`` flag; hidden members never appear on generated
clients.  The ``data_type`` field is the discriminant the builder switches
on.

Trees are usually declared with :func:`api_schema`::

    from apiwire.schema import api_schema, string

    hello_api = api_schema({
        "helloWorld": {"args": [string], "retVal": string},
        "group": {
            "secondLevel": {"foo": {"args": []}},
        },
    })
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from apiwire.schema.descriptors import TypeDescriptor


class FunctionSchema(BaseModel):
    """One remotely callable function."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    data_type: Literal["function"] = "function"
    args: tuple[TypeDescriptor, ...] = ()
    ret_val: Optional[TypeDescriptor] = None
    hidden: bool = False


class ApiSchema(BaseModel):
    """A named group of functions and sub-APIs.

    ``members`` preserves declaration order; member names are unique by
    construction (they are dict keys).
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    data_type: Literal["api"] = "api"
    members: dict[str, Union[ApiSchema, FunctionSchema]] = Field(default_factory=dict)
    hidden: bool = False


ApiSchema.model_rebuild()

SchemaNode = Union[ApiSchema, FunctionSchema]


def _is_function_definition(value: Mapping[str, Any]) -> bool:
    return isinstance(value.get("args"), (list, tuple))


def function_schema(definition: Mapping[str, Any]) -> FunctionSchema:
    """Build a :class:`FunctionSchema` from ``{"args": [...], "retVal": ...}``.

    ``ret_val`` is accepted as a synonym of ``retVal``.
    """
    ret_val = definition.get("retVal", definition.get("ret_val"))
    return FunctionSchema(
        args=tuple(definition["args"]),
        ret_val=ret_val,
        hidden=bool(definition.get("hidden", False)),
    )


def api_schema(definition: Mapping[str, Any], hidden: bool = False) -> ApiSchema:
    """Build an :class:`ApiSchema` tree from nested mappings.

    A mapping whose ``args`` entry is a list or tuple declares a function;
    any other mapping declares a sub-API.  Ready-made :class:`ApiSchema` and
    :class:`FunctionSchema` instances are accepted as members, which is how
    a hidden sub-API is declared.

    Args:
        definition: Member name to member definition.
        hidden: Hide this whole API from generated clients.

    Returns:
        The schema tree rooted at the new :class:`ApiSchema`.

    Raises:
        TypeError: If a member is neither a mapping nor a schema node.
    """
    members: dict[str, SchemaNode] = {}
    for name, value in definition.items():
        if isinstance(value, (ApiSchema, FunctionSchema)):
            members[name] = value
        elif isinstance(value, Mapping):
            if _is_function_definition(value):
                members[name] = function_schema(value)
            else:
                members[name] = api_schema(value)
        else:
            raise TypeError(
                f"Member '{name}' must be a mapping or a schema node, "
                f"got {type(value).__name__}"
            )
    return ApiSchema(members=members, hidden=hidden)


def iter_functions(
    schema: ApiSchema, prefix: tuple[str, ...] = ()
) -> Iterator[tuple[tuple[str, ...], FunctionSchema]]:
    """Yield ``(name_path, function)`` for every visible function, depth-first.

    Hidden APIs are pruned together with everything below them.
    """
    if schema.hidden:
        return
    for name, member in schema.members.items():
        if member.hidden:
            continue
        if isinstance(member, ApiSchema):
            yield from iter_functions(member, prefix + (name,))
        else:
            yield prefix + (name,), member
