"""Field values: escaping and the text encoding of a field set."""

from __future__ import annotations

import math
import re
from decimal import Decimal
from typing import Any, Mapping

from influxline.escape import escape_string

_UNESCAPE_FIELD_RE = re.compile(r'\\([\\"])')


class Unsigned(int):
    """An integer field value written with the unsigned ``u`` suffix."""

    def __new__(cls, value: int = 0) -> "Unsigned":
        obj = super().__new__(cls, value)
        if obj < 0 or obj >= 1 << 64:
            raise ValueError(f"unsigned value out of range: {int(obj)}")
        return obj


def escape_string_field(text: str) -> str:
    """Escape backslashes and double quotes in a string field value."""
    return text.replace("\\", "\\\\").replace('"', '\\"')


def unescape_string_field(text: str) -> str:
    """Undo :func:`escape_string_field`."""
    if "\\" not in text:
        return text
    return _UNESCAPE_FIELD_RE.sub(r"\1", text)


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _encode_value(value: Any) -> bytes:
    if value is None:
        return b""
    if isinstance(value, bool):
        return b"true" if value else b"false"
    if isinstance(value, Unsigned):
        return str(int(value)).encode() + b"u"
    if isinstance(value, int):
        return str(value).encode() + b"i"
    if isinstance(value, float):
        return _format_float(value).encode()
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    text = value if isinstance(value, str) else str(value)
    return b'"' + escape_string_field(text).encode("utf-8") + b'"'


def append_field(dst: bytes | None, key: str, value: Any) -> bytes:
    """Return ``dst`` followed by the ``key=value`` encoding of one field."""
    return bytes(dst or b"") + escape_string(key).encode("utf-8") + b"=" + _encode_value(value)


def marshal_fields(fields: Mapping[str, Any]) -> bytes:
    """Return the comma-separated text encoding of ``fields``, sorted by key."""
    return b",".join(append_field(b"", key, fields[key]) for key in sorted(fields))