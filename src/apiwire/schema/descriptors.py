"""Type descriptors -- box Python values for the wire and unbox decoded JSON.

A :class:`TypeDescriptor` wraps a pydantic :class:`~pydantic.TypeAdapter`
for one Python type and exposes the two operations the call protocol
needs:

* :meth:`TypeDescriptor.box` turns a caller-supplied argument into a
  JSON-compatible value (``datetime`` becomes an ISO string, records become
  dicts, integers stay integers of any magnitude).
* :meth:`TypeDescriptor.unbox` turns the ``data`` field of a response
  envelope back into the typed value.

Structured types (records, arrays, mappings, pydantic models) also accept
their JSON *text* in :meth:`~TypeDescriptor.unbox`: paired servers commonly
return ``{"data": "{\\"id\\": 1}"}`` for object results.  The text is parsed
with :mod:`json`, which keeps integers beyond ``2**53`` exact.
"""

from __future__ import annotations

import datetime as _dt
import json
import types
from typing import Any, Optional, Union, get_args, get_origin

from pydantic import BaseModel, TypeAdapter
from typing_extensions import TypedDict, is_typeddict

_STRUCTURED_ORIGINS = (list, tuple, dict, set, frozenset)


def _is_structured(python_type: Any) -> bool:
    """Return True when *python_type* is sent as a JSON object or array."""
    origin = get_origin(python_type)
    if origin is Union or origin is types.UnionType:
        return any(
            _is_structured(arg) for arg in get_args(python_type) if arg is not type(None)
        )
    if origin in _STRUCTURED_ORIGINS or python_type in _STRUCTURED_ORIGINS:
        return True
    if is_typeddict(python_type):
        return True
    return isinstance(python_type, type) and issubclass(python_type, BaseModel)


class TypeDescriptor:
    """Runtime description of one argument or return-value type.

    Args:
        python_type: Any type pydantic can validate (``str``, ``int``,
            ``datetime``, a ``TypedDict``, ``list[...]``, a model class...).
        name: Short display name used in listings and error messages.
            Defaults to the type's ``__name__``.

    Example::

        ids = TypeDescriptor(list[int], "bigint[]")
        ids.unbox("[12345678901234567890]")   # [12345678901234567890]
    """

    __slots__ = ("python_type", "name", "_adapter", "_structured")

    def __init__(self, python_type: Any, name: Optional[str] = None) -> None:
        self.python_type = python_type
        self.name = name or getattr(python_type, "__name__", repr(python_type))
        self._adapter: TypeAdapter[Any] = TypeAdapter(python_type)
        self._structured = _is_structured(python_type)

    @property
    def optional(self) -> TypeDescriptor:
        """Descriptor for ``Optional[T]``; ``None`` boxes and unboxes as ``null``."""
        return TypeDescriptor(Optional[self.python_type], f"{self.name}?")

    @property
    def structured(self) -> bool:
        """Whether values of this type travel as JSON objects or arrays."""
        return self._structured

    def box(self, value: Any) -> Any:
        """Convert *value* into a JSON-compatible Python value."""
        return self._adapter.dump_python(value, mode="json", warnings=False)

    def unbox(self, raw: Any) -> Any:
        """Validate *raw* into the described type.

        Raises:
            pydantic.ValidationError: If *raw* does not match the type.
            json.JSONDecodeError: If a structured type receives text that is
                not JSON.
        """
        if self._structured and isinstance(raw, str):
            raw = json.loads(raw)
        return self._adapter.validate_python(raw)

    def __repr__(self) -> str:
        return f"TypeDescriptor({self.name})"


string = TypeDescriptor(str, "string")
bigint = TypeDescriptor(int, "bigint")
integer = TypeDescriptor(int, "int")
number = TypeDescriptor(float, "float")
boolean = TypeDescriptor(bool, "bool")
date = TypeDescriptor(_dt.date, "date")
timestamp = TypeDescriptor(_dt.datetime, "datetime")
json_value = TypeDescriptor(Any, "json")

BUILTIN_TYPES: dict[str, TypeDescriptor] = {
    d.name: d for d in (string, bigint, integer, number, boolean, date, timestamp, json_value)
}


def array_of(item: TypeDescriptor) -> TypeDescriptor:
    """Return a descriptor for a JSON array of *item* values."""
    return TypeDescriptor(list[item.python_type], f"{item.name}[]")  # type: ignore[name-defined]


def record(name: str, /, **fields: TypeDescriptor) -> TypeDescriptor:
    """Return a descriptor for a JSON object with the given fields.

    Decoded values are plain dicts, so they compare equal to literals::

        user = record("User", id=bigint, name=string)
        user.unbox('{"id": 1, "name": "a"}') == {"id": 1, "name": "a"}
    """
    typed = TypedDict(name, {key: d.python_type for key, d in fields.items()})  # type: ignore[misc]
    return TypeDescriptor(typed, name)
