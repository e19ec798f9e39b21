"""Tolerant decoders for fields whose JSON shape varies between endpoints.

BoldDesk returns some fields as a plain string on one endpoint and as a
nested object, number or boolean on another. Each decoder below accepts an
explicit set of wire shapes and maps every one of them to a single target
type; anything outside that set raises :class:`MalformedFieldError`.
"""

from __future__ import annotations

import json
import re
from typing import Annotated, Any

from pydantic import BeforeValidator

from bolddesk.sdk.exceptions import MalformedFieldError

# Keys consulted, in order, when a string field arrives as an object.
FLEXIBLE_STRING_OBJECT_KEYS: tuple[str, ...] = ("brandName", "name", "displayName")

_INTEGER_RE = re.compile(r"^[+-]?\d+$")


def _raw_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _string_from_object(value: dict[str, Any]) -> str:
    for key in FLEXIBLE_STRING_OBJECT_KEYS:
        candidate = value.get(key)
        if isinstance(candidate, str):
            return candidate
    return _raw_json(value)


def decode_flexible_string(value: Any) -> str | None:
    """Normalize a string/number/bool/object/array JSON value to a string.

    * string -> unchanged
    * null -> ``None``
    * boolean -> ``"true"`` / ``"false"``
    * integer -> decimal digits
    * float -> shortest round-trip representation
    * object -> ``brandName``, ``name`` or ``displayName`` (first string
      present), otherwise the object's compact JSON text
    * array -> the array's compact JSON text
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, dict):
        return _string_from_object(value)
    if isinstance(value, list):
        return _raw_json(value)
    raise MalformedFieldError(
        f"Unexpected {type(value).__name__} when decoding a string value", value
    )


def decode_nullable_int(value: Any) -> int | None:
    """Normalize an integer field that may arrive as a string or an object.

    Unparseable strings and object-shaped values decode to ``None``; the
    object shape means the feature does not apply to the record.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise MalformedFieldError("Unexpected bool when decoding a nullable int", value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if _INTEGER_RE.match(text):
            return int(text)
        return None
    if isinstance(value, dict):
        return None
    raise MalformedFieldError(
        f"Unexpected {type(value).__name__} when decoding a nullable int", value
    )


FlexibleStr = Annotated[str | None, BeforeValidator(decode_flexible_string)]
NullableInt = Annotated[int | None, BeforeValidator(decode_nullable_int)]
