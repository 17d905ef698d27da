"""AMF0 encoding of the value types used in FLV script tags."""

from __future__ import annotations

import struct
from collections.abc import Iterable, Mapping
from typing import Any

NUMBER_MARKER = 0x00
BOOLEAN_MARKER = 0x01
STRING_MARKER = 0x02
ECMA_ARRAY_MARKER = 0x08
OBJECT_END_MARKER = 0x09
LONG_STRING_MARKER = 0x0C

_SHORT_LIMIT = 0xFFFF
_LONG_LIMIT = 0xFFFFFFFF


def _utf8(value: str) -> bytes:
    if not isinstance(value, str):
        raise TypeError("AMF0 strings must be str")
    return value.encode("utf-8")


def _key(name: str) -> bytes:
    raw = _utf8(name)
    if len(raw) > _SHORT_LIMIT:
        raise ValueError("AMF0 property name longer than 65535 bytes")
    return struct.pack(">H", len(raw)) + raw


def encode_number(value: float) -> bytes:
    """Encode a number as a big-endian IEEE 754 double."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError("AMF0 numbers must be int or float")
    return struct.pack(">Bd", NUMBER_MARKER, float(value))


def encode_boolean(value: bool) -> bytes:
    """Encode a boolean as a single flag byte."""
    if not isinstance(value, bool):
        raise TypeError("AMF0 booleans must be bool")
    return bytes((BOOLEAN_MARKER, 1 if value else 0))


def encode_string(value: str) -> bytes:
    """Encode a string; strings over 65535 bytes use the long-string form."""
    raw = _utf8(value)
    if len(raw) <= _SHORT_LIMIT:
        return struct.pack(">BH", STRING_MARKER, len(raw)) + raw
    if len(raw) > _LONG_LIMIT:
        raise ValueError("AMF0 string too long")
    return struct.pack(">BI", LONG_STRING_MARKER, len(raw)) + raw


def encode_ecma_array(entries: Iterable[tuple[str, Any]] | Mapping[str, Any]) -> bytes:
    """Encode key/value pairs, in order, as an ECMA array."""
    pairs = list(entries.items()) if isinstance(entries, Mapping) else list(entries)
    if len(pairs) > _LONG_LIMIT:
        raise ValueError("too many entries for an AMF0 ECMA array")
    body = b"".join(_key(name) + encode(value) for name, value in pairs)
    return (
        struct.pack(">BI", ECMA_ARRAY_MARKER, len(pairs))
        + body
        + _key("")
        + bytes((OBJECT_END_MARKER,))
    )


def encode(value: Any) -> bytes:
    """Encode a bool, number, str, mapping or list of pairs."""
    if isinstance(value, bool):
        return encode_boolean(value)
    if isinstance(value, (int, float)):
        return encode_number(value)
    if isinstance(value, str):
        return encode_string(value)
    if isinstance(value, Mapping):
        return encode_ecma_array(value)
    if isinstance(value, (list, tuple)):
        return encode_ecma_array(value)
    raise TypeError(f"cannot encode {type(value).__name__} as AMF0")