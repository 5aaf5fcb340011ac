"""Low-level scanners for the line protocol.

Every scanner works on a ``bytes`` buffer and a start position and returns
the position where it stopped, usually together with the block it read.
Malformed input raises :class:`~influxline.errors.PointError`. The exception
carries the position at which scanning stopped in its ``pos`` attribute.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import pairwise
from typing import Iterator

from influxline.errors import INVALID_NUMBER, PointError
from influxline.numparse import NumError, parse_float, parse_int, parse_uint

TAG_KEY_STATE = 0
TAG_VALUE_STATE = 1
FIELDS_STATE = 2

MAX_INT64_DIGITS = 19
MIN_INT64_DIGITS = 20
MAX_UINT64_DIGITS = 20
MAX_FLOAT64_DIGITS = 25
MIN_FLOAT64_DIGITS = 27

_COMMA = ord(",")
_SPACE = ord(" ")
_TAB = ord("\t")
_NUL = 0
_EQUALS = ord("=")
_BACKSLASH = ord("\\")
_QUOTE = ord('"')
_NEWLINE = ord("\n")
_MINUS = ord("-")
_PLUS = ord("+")
_DOT = ord(".")
_HASH_NUMERIC = frozenset(b"0123456789.")


@dataclass
class _ParserSettings:
    uint64_support: bool = False


_settings = _ParserSettings()


def enable_uint_support() -> bool:
    """Accept unsigned integer field values (``123u``) from now on.

    Returns whether support was already enabled before the call.
    """
    previous = _settings.uint64_support
    _settings.uint64_support = True
    return previous


def _error(message: str, pos: int) -> PointError:
    exc = PointError(message)
    exc.pos = pos
    return exc


def _byte(stop: int | bytes) -> int:
    if isinstance(stop, (bytes, bytearray)):
        return stop[0]
    return stop


def _is_numeric(c: int) -> bool:
    return c in _HASH_NUMERIC


def _text(data: bytes) -> str:
    return bytes(data).decode("utf-8", "replace")


def skip_whitespace(buf: bytes, i: int) -> int:
    """Return the first position at or after ``i`` that is not blank."""
    while i < len(buf) and buf[i] in (_SPACE, _TAB, _NUL):
        i += 1
    return i


def scan_line(buf: bytes, i: int) -> tuple[int, bytes]:
    """Return the end position and the line starting at ``i``.

    Newlines inside quoted field values do not end the line.
    """
    start = i
    quoted = False
    fields = False
    equals = 0
    commas = 0
    n = len(buf)
    while i < n:
        c = buf[i]
        if c == _BACKSLASH and i + 2 < n:
            i += 2
            continue
        if c == _SPACE:
            fields = True
        if fields:
            if not quoted and c == _EQUALS:
                i += 1
                equals += 1
                continue
            if not quoted and c == _COMMA:
                i += 1
                commas += 1
                continue
            if c == _QUOTE and equals > commas:
                i += 1
                quoted = not quoted
                continue
        if c == _NEWLINE and not quoted:
            break
        i += 1
    return i, buf[start:i]


def scan_measurement(buf: bytes, i: int) -> tuple[int, int]:
    """Scan the measurement name; return the next state and position."""
    n = len(buf)
    if i >= n or buf[i] == _COMMA:
        raise _error("missing measurement", i)
    while True:
        i += 1
        if i >= n:
            raise _error("missing fields", i)
        if buf[i - 1] == _BACKSLASH:
            continue
        if buf[i] == _COMMA:
            return TAG_KEY_STATE, i + 1
        if buf[i] == _SPACE:
            return FIELDS_STATE, i


def _scan_tags_key(buf: bytes, i: int) -> int:
    n = len(buf)
    if i >= n or buf[i] in (_SPACE, _COMMA, _EQUALS):
        raise _error("missing tag key", i)
    while True:
        i += 1
        if i >= n or (buf[i] in (_SPACE, _COMMA) and buf[i - 1] != _BACKSLASH):
            raise _error("missing tag value", i)
        if buf[i] == _EQUALS and buf[i - 1] != _BACKSLASH:
            return i + 1


def _scan_tags_value(buf: bytes, i: int) -> tuple[int, int]:
    n = len(buf)
    if i >= n or buf[i] in (_COMMA, _SPACE):
        raise _error("missing tag value", i)
    while True:
        i += 1
        if i >= n:
            raise _error("missing fields", i)
        escaped = buf[i - 1] == _BACKSLASH
        if buf[i] == _EQUALS and not escaped:
            raise _error("invalid tag format", i)
        if buf[i] == _COMMA and not escaped:
            return TAG_KEY_STATE, i + 1
        if buf[i] == _SPACE and not escaped:
            return FIELDS_STATE, i


def scan_tags(buf: bytes, i: int) -> tuple[int, list[int]]:
    """Scan the tag section starting at ``i``.

    Returns the position of the space before the fields and the start
    position of every tag, followed by one entry equal to that position + 1.
    """
    indices: list[int] = []
    state = TAG_KEY_STATE
    while True:
        if state == TAG_KEY_STATE:
            indices.append(i)
            i = _scan_tags_key(buf, i)
            state = TAG_VALUE_STATE
        elif state == TAG_VALUE_STATE:
            state, i = _scan_tags_value(buf, i)
        else:
            indices.append(i + 1)
            return i, indices


def scan_key(buf: bytes, i: int) -> tuple[int, bytes]:
    """Scan measurement and tags; return the end position and the key.

    Tags are sorted by key in the returned key; duplicate tag keys raise.
    """
    start = skip_whitespace(buf, i)
    state, i = scan_measurement(buf, start)

    indices: list[int] = []
    if state == TAG_KEY_STATE:
        i, indices = scan_tags(buf, i)
    commas = len(indices) - 1 if indices else 0

    in_order = True
    for j in range(commas - 1):
        _, left = scan_to(buf[indices[j]:indices[j + 1] - 1], 0, _EQUALS)
        _, right = scan_to(buf[indices[j + 1]:indices[j + 2] - 1], 0, _EQUALS)
        if left > right:
            in_order = False
            break
        if left == right:
            raise _error("duplicate tags", i)

    if in_order or commas == 0:
        return i, buf[start:i]

    measurement = bytes(buf[start:indices[0] - 1])
    order = sorted(indices[:commas], key=lambda idx: scan_to(buf, idx, _EQUALS)[1])
    parts = [measurement]
    for idx in order:
        parts.append(b",")
        parts.append(bytes(scan_to_space_or(buf, idx, _COMMA)[1]))
    size = i - start
    key = b"".join(parts)[:size].ljust(size, b"\x00")

    for a, b in pairwise(order):
        if scan_to(buf[a:], 0, _EQUALS)[1] == scan_to(buf[b:], 0, _EQUALS)[1]:
            raise _error("duplicate tags", i)
    return i, key


def scan_fields(buf: bytes, i: int) -> tuple[int, bytes]:
    """Scan the field section; return the end position and the fields block."""
    start = skip_whitespace(buf, i)
    i = start
    n = len(buf)
    quoted = False
    equals = 0
    commas = 0

    while i < n:
        c = buf[i]
        if c == _BACKSLASH and i + 1 < n:
            i += 2
            continue
        if c == _QUOTE and equals > commas:
            quoted = not quoted
            i += 1
            continue
        if c == _EQUALS and not quoted:
            equals += 1
            prev = buf[i - 1] if i >= 1 else None
            before_prev = buf[i - 2] if i >= 2 else None
            if prev in (_SPACE, _COMMA) and before_prev != _BACKSLASH:
                raise _error("missing field key", i)
            if i + 1 >= n:
                raise _error("missing field value", i)
            nxt = buf[i + 1]
            if nxt in (_COMMA, _SPACE):
                raise _error("missing field value", i)
            if _is_numeric(nxt) or nxt in (_MINUS, ord("N"), ord("n")):
                i = scan_number(buf, i + 1)
                continue
            if nxt != _QUOTE:
                i, _ = scan_boolean(buf, i + 1)
                continue
        if c == _COMMA and not quoted:
            commas += 1
        if c == _SPACE and not quoted:
            break
        i += 1

    if quoted:
        raise _error("unbalanced quotes", i)
    if equals == 0 or commas != equals - 1:
        raise _error("invalid field format", i)
    return i, buf[start:i]


def scan_time(buf: bytes, i: int) -> tuple[int, bytes]:
    """Scan the optional integer timestamp; return the end position and its text."""
    start = skip_whitespace(buf, i)
    i = start
    n = len(buf)
    while i < n:
        c = buf[i]
        if c in (_NEWLINE, _SPACE):
            break
        if i == start and c == _MINUS:
            i += 1
            continue
        if not ord("0") <= c <= ord("9"):
            raise _error("bad timestamp", i)
        i += 1
    return i, buf[start:i]


def scan_number(buf: bytes, i: int) -> int:
    """Scan an integer, unsigned or float field value; return its end."""
    start = i
    n = len(buf)
    is_int = False
    is_unsigned = False

    if i < n and buf[i] == _MINUS:
        i += 1
        if i == n:
            raise _error(INVALID_NUMBER, i)

    decimal = False
    scientific = False
    while i < n:
        c = buf[i]
        if c in (_COMMA, _SPACE):
            break
        if c == ord("i") and i > start and not (is_int or is_unsigned):
            is_int = True
            i += 1
            continue
        if c == ord("u") and i > start and not (is_int or is_unsigned):
            is_unsigned = True
            i += 1
            continue
        if c == _DOT:
            if decimal:
                raise _error(INVALID_NUMBER, i)
            decimal = True
        if i > start and c in (ord("e"), ord("E")):
            scientific = True
            i += 1
            continue
        if c in (_PLUS, _MINUS) and i > 0 and buf[i - 1] in (ord("e"), ord("E")):
            i += 1
            continue
        if i + 2 < n and c in (ord("N"), ord("n")):
            raise _error(INVALID_NUMBER, i)
        if not _is_numeric(c):
            raise _error(INVALID_NUMBER, i)
        i += 1

    if (is_int or is_unsigned) and (decimal or scientific):
        raise _error(INVALID_NUMBER, i)

    negative = start < n and buf[start] == _MINUS
    numeric_digits = i - start - is_int - decimal - negative
    if numeric_digits == 0:
        raise _error(INVALID_NUMBER, i)

    if is_int:
        if buf[i - 1] != ord("i"):
            raise _error(INVALID_NUMBER, i)
        digits = buf[start:i - 1]
        if len(digits) >= MAX_INT64_DIGITS or len(digits) >= MIN_INT64_DIGITS:
            try:
                parse_int(digits, 10, 64)
            except NumError as exc:
                raise _error(f"unable to parse integer {_text(digits)}: {exc}", i) from exc
    elif is_unsigned:
        if not _settings.uint64_support:
            raise _error(INVALID_NUMBER, i)
        if buf[i - 1] != ord("u"):
            raise _error(INVALID_NUMBER, i)
        if negative:
            raise _error(INVALID_NUMBER, i)
        digits = buf[start:i - 1]
        if len(digits) >= MAX_UINT64_DIGITS:
            try:
                parse_uint(digits, 10, 64)
            except NumError as exc:
                raise _error(f"unable to parse unsigned {_text(digits)}: {exc}", i) from exc
    else:
        text = buf[start:i]
        if scientific or len(text) >= MAX_FLOAT64_DIGITS or len(text) >= MIN_FLOAT64_DIGITS:
            try:
                parse_float(text, 64)
            except NumError as exc:
                raise _error("invalid float", i) from exc
    return i


_BOOLEANS = {
    ord("t"): (b"true",),
    ord("f"): (b"false",),
    ord("T"): (b"TRUE", b"True"),
    ord("F"): (b"FALSE", b"False"),
}


def scan_boolean(buf: bytes, i: int) -> tuple[int, bytes]:
    """Scan a boolean field value; return its end and its text."""
    start = i
    n = len(buf)
    if i < n and buf[i] not in _BOOLEANS:
        raise _error("invalid boolean", i)
    i += 1
    while i < n and buf[i] not in (_COMMA, _SPACE):
        i += 1

    value = buf[start:i]
    if i - start == 1:
        return i, value
    first = buf[start]
    if first in (ord("t"), ord("T")) and i - start != 4:
        raise _error("invalid boolean", i)
    if first in (ord("f"), ord("F")) and i - start != 5:
        raise _error("invalid boolean", i)
    if bytes(value) not in _BOOLEANS.get(first, ()):
        raise _error("invalid boolean", i)
    return i, value


def scan_to(buf: bytes, i: int, stop: int | bytes) -> tuple[int, bytes]:
    """Return the position of the next unescaped ``stop`` byte and the block before it."""
    stop = _byte(stop)
    start = i
    n = len(buf)
    while i < n:
        if buf[i] == stop and (i == 0 or buf[i - 1] != _BACKSLASH):
            break
        i += 1
    return i, buf[start:i]


def scan_to_space_or(buf: bytes, i: int, stop: int | bytes) -> tuple[int, bytes]:
    """Return the block from ``i`` up to an unescaped space or ``stop`` byte."""
    stop = _byte(stop)
    start = i
    n = len(buf)
    if i >= n or buf[i] in (stop, _SPACE):
        return i, buf[start:i]
    while True:
        i += 1
        if i >= n:
            return i, buf[start:i]
        if buf[i - 1] == _BACKSLASH:
            continue
        if buf[i] in (stop, _SPACE):
            return i, buf[start:i]


def scan_tag_value(buf: bytes, i: int) -> tuple[int, bytes]:
    """Return the end of the tag value at ``i`` and the value itself."""
    start = i
    n = len(buf)
    while i < n:
        if buf[i] == _COMMA and (i == 0 or buf[i - 1] != _BACKSLASH):
            break
        i += 1
    return i, buf[start:i]


def scan_field_value(buf: bytes, i: int) -> tuple[int, bytes]:
    """Return the end of the field value at ``i`` and the raw value."""
    start = i
    n = len(buf)
    quoted = False
    while i < n:
        c = buf[i]
        if c == _BACKSLASH and i + 1 < n and buf[i + 1] in (_QUOTE, _BACKSLASH):
            i += 2
            continue
        if c == _QUOTE:
            i += 1
            quoted = not quoted
            continue
        if c == _COMMA and not quoted:
            break
        i += 1
    return i, buf[start:i]


def walk_fields(buf: bytes) -> Iterator[tuple[bytes, bytes]]:
    """Yield the raw ``(key, value)`` pairs of a fields block."""
    while buf:
        i, key = scan_to(buf, 0, _EQUALS)
        if i > len(buf) - 2:
            raise PointError(f"invalid value: field-key={_text(key)}")
        buf = buf[i + 1:]
        i, value = scan_field_value(buf, 0)
        buf = buf[i:]
        yield key, value
        if buf:
            buf = buf[1:]