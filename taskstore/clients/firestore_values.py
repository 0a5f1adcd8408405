"""
Typed Firestore values.

Firestore represents every field as a single-key JSON object whose key names
the value type, e.g. ``{"integerValue": "42"}``. Only the scalar types a task
document needs are modelled here.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Union

_INTEGER_PATTERN = re.compile(r"^[+-]?[0-9]+$")


class WireValueDecodingError(ValueError):
    """Raised when a JSON payload is not a supported Firestore value."""


@dataclass(frozen=True, slots=True)
class StringValue:
    value: str


@dataclass(frozen=True, slots=True)
class IntegerValue:
    value: int


@dataclass(frozen=True, slots=True)
class BooleanValue:
    value: bool


FirestoreValue = Union[StringValue, IntegerValue, BooleanValue]


def wrap(native: str | int | bool) -> FirestoreValue:
    """Wrap a native scalar in the matching Firestore value variant."""
    # bool is a subclass of int and has to be matched first.
    if isinstance(native, bool):
        return BooleanValue(native)
    if isinstance(native, int):
        return IntegerValue(native)
    if isinstance(native, str):
        return StringValue(native)
    raise TypeError(f"Unsupported Firestore value type: {type(native)!r}")


def encode_value(value: FirestoreValue) -> Dict[str, Any]:
    """Encode a value into its Firestore JSON shape."""
    if isinstance(value, StringValue):
        return {"stringValue": value.value}
    if isinstance(value, IntegerValue):
        # Firestore carries 64-bit integers as decimal strings.
        return {"integerValue": str(value.value)}
    if isinstance(value, BooleanValue):
        return {"booleanValue": value.value}
    raise TypeError(f"Unsupported Firestore value: {value!r}")


def decode_value(payload: Any) -> FirestoreValue:
    """
    Decode a Firestore JSON value.

    Keys are inspected in the fixed order ``stringValue``, ``integerValue``,
    ``booleanValue`` and the first one present decides the variant.
    """
    if not isinstance(payload, Mapping):
        raise WireValueDecodingError(
            f"Expected a Firestore value object, got {type(payload).__name__}."
        )

    string_value = payload.get("stringValue")
    if string_value is not None:
        if not isinstance(string_value, str):
            raise WireValueDecodingError("stringValue must be a JSON string.")
        return StringValue(string_value)

    integer_value = payload.get("integerValue")
    if integer_value is not None:
        return IntegerValue(_parse_integer(integer_value))

    boolean_value = payload.get("booleanValue")
    if boolean_value is not None:
        if not isinstance(boolean_value, bool):
            raise WireValueDecodingError("booleanValue must be a JSON boolean.")
        return BooleanValue(boolean_value)

    keys = ", ".join(sorted(payload)) or "<none>"
    raise WireValueDecodingError(f"Unsupported Firestore value type (keys: {keys}).")


def _parse_integer(raw: Any) -> int:
    if isinstance(raw, bool):
        raise WireValueDecodingError("integerValue must be a decimal string.")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and _INTEGER_PATTERN.match(raw):
        return int(raw, 10)
    raise WireValueDecodingError(f"Cannot parse integerValue {raw!r} as an integer.")


__all__ = [
    "BooleanValue",
    "FirestoreValue",
    "IntegerValue",
    "StringValue",
    "WireValueDecodingError",
    "decode_value",
    "encode_value",
    "wrap",
]
