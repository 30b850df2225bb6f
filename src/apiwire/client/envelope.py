"""Response envelope interpretation -- errors, data presence, decoding.

Every successful exchange yields a JSON *envelope*.  The checks run in a
fixed order:

1. ``errorMessage`` -> :class:`~apiwire.exceptions.ServerReportedError`
2. ``message`` -> the same classification
3. no return-value descriptor -> ``None`` whatever the envelope holds
4. no ``data`` field -> :class:`~apiwire.exceptions.ProtocolError`
5. unwrap a once-quoted string, then ``ret_val.unbox(data)``

Both error fields are deliberately reported the same way; servers use
either depending on which layer produced the failure.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from apiwire.exceptions import ProtocolError, ServerReportedError
from apiwire.output import debug
from apiwire.schema.descriptors import TypeDescriptor

UNAUTHORIZED_ENVELOPE: dict[str, Any] = {"errorMessage": "Unauthorized"}

_ERROR_FIELDS = ("errorMessage", "message")


def compact_json(value: Any) -> str:
    """Serialise *value* without whitespace (``{"wrong":"Report"}``)."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


def unwrap_quoted(data: Any) -> Any:
    """Strip one leading and one trailing character from a ``"``-prefixed string.

    Some server-side encoders serialise scalar results twice, so
    ``"Return"`` arrives as the JSON string ``"\\"Return\\""``.  Only strings
    that *begin* with a double quote are touched; everything else is
    returned unchanged.
    """
    if isinstance(data, str) and data.startswith('"'):
        return data[1:-1]
    return data


def raise_for_error(envelope: Any) -> None:
    """Raise :class:`ServerReportedError` if *envelope* reports a failure."""
    if not isinstance(envelope, dict):
        return
    for field in _ERROR_FIELDS:
        message = envelope.get(field)
        if message is not None:
            debug(f"Server reported error in '{field}': {message}")
            raise ServerReportedError(f"Server error: {message}")


def interpret_envelope(envelope: Any, ret_val: Optional[TypeDescriptor]) -> Any:
    """Turn a response envelope into the call's result.

    Args:
        envelope: The parsed JSON body (or the synthetic 401 envelope).
        ret_val: The function's return-value descriptor, if it declares one.

    Returns:
        The decoded value, or ``None`` for functions without a return value.

    Raises:
        ServerReportedError: If the envelope carries an error field.
        ProtocolError: If a return value is declared but ``data`` is absent.
    """
    raise_for_error(envelope)
    if ret_val is None:
        return None
    if not isinstance(envelope, dict) or "data" not in envelope:
        raise ProtocolError(
            f"There must be a data field in the received JSON: {compact_json(envelope)}"
        )
    return ret_val.unbox(unwrap_quoted(envelope["data"]))
