"""Parsing of line-protocol text into points."""

from __future__ import annotations

import time as _time
from typing import Iterable

from influxline import timeutil
from influxline.errors import INVALID_POINT, PointError
from influxline.numparse import NumError, parse_int
from influxline.point import MAX_KEY_LENGTH, Point
from influxline.scanner import (
    TAG_KEY_STATE,
    scan_fields,
    scan_key,
    scan_line,
    scan_measurement,
    scan_time,
    skip_whitespace,
    walk_fields,
)
from influxline.tags import Tag, Tags, parse_tags, unescape_measurement

# Length of the separator placed between a series key and a field name.
_FIELD_KEY_SEPARATOR_LEN = 4
_SPACE = ord(" ")
_NEWLINE = ord("\n")
_COMMENT = ord("#")


class ParseError(PointError):
    """Raised when one or more lines of a batch fail to parse.

    ``failures`` holds one message per bad line and ``points`` the points
    that did parse.
    """

    def __init__(self, failures: Iterable[str], points: Iterable[Point]) -> None:
        self.failures = list(failures)
        self.points = list(points)
        super().__init__("\n".join(self.failures))


def _as_bytes(buf: bytes | str) -> bytes:
    if isinstance(buf, str):
        return buf.encode("utf-8")
    return bytes(buf)


def parse_point(buf: bytes | str, default_time: int | None, precision: str) -> Point:
    """Parse a single line into a point.

    Lines without a timestamp get ``default_time`` truncated to ``precision``.
    """
    buf = _as_bytes(buf)
    pos, key = scan_key(buf, 0)
    if not key:
        raise PointError("missing measurement")
    if len(key) > MAX_KEY_LENGTH:
        raise PointError(f"max key length exceeded: {len(key)} > {MAX_KEY_LENGTH}")

    pos, fields = scan_fields(buf, pos)
    if not fields:
        raise PointError("missing fields")

    for field_key, _ in walk_fields(fields):
        size = len(key) + _FIELD_KEY_SEPARATOR_LEN + len(field_key)
        if size > MAX_KEY_LENGTH:
            raise PointError(f"max key length exceeded: {size} > {MAX_KEY_LENGTH}")

    pos, ts = scan_time(buf, pos)

    if not ts:
        point = Point(key, fields, default_time)
        point.set_precision(precision)
        return point

    try:
        stamp = parse_int(ts, 10, 64)
    except NumError as exc:
        raise PointError(str(exc)) from exc
    try:
        when = timeutil.safe_calc_time(stamp, precision)
    except timeutil.TimeOutOfRangeError as exc:
        raise PointError(str(exc)) from exc

    if any(c != _SPACE for c in buf[pos:]):
        raise PointError(INVALID_POINT)
    return Point(key, fields, when)


def parse_points_with_precision(
    buf: bytes | str, default_time: int | None, precision: str
) -> list[Point]:
    """Parse newline-separated lines into points.

    Blank lines and lines starting with ``#`` are skipped. If any line fails,
    a :class:`ParseError` is raised that carries the points that did parse.
    """
    buf = _as_bytes(buf)
    points: list[Point] = []
    failures: list[str] = []
    pos = 0
    while pos < len(buf):
        pos, block = scan_line(buf, pos)
        pos += 1
        if not block:
            continue
        start = skip_whitespace(block, 0)
        if start >= len(block):
            continue
        if block[start] == _COMMENT:
            continue
        if block[-1] == _NEWLINE:
            block = block[:-1]
        line = block[start:]
        try:
            points.append(parse_point(line, default_time, precision))
        except PointError as exc:
            text = bytes(line).decode("utf-8", "replace")
            failures.append(f"unable to parse '{text}': {exc}")
    if failures:
        raise ParseError(failures, points)
    return points


def parse_points(buf: bytes | str) -> list[Point]:
    """Parse lines, giving untimed points the current time in nanoseconds."""
    return parse_points_with_precision(buf, _time.time_ns(), "n")


def _measurement_end(buf: bytes) -> tuple[int, bool]:
    try:
        state, i = scan_measurement(buf, 0)
    except PointError as exc:
        return getattr(exc, "pos", 0), False
    if state == TAG_KEY_STATE:
        return i - 1, True
    return i, False


def parse_key(buf: bytes | str) -> tuple[bytes, Tags]:
    """Return the unescaped measurement name and the tags of a series key."""
    buf = _as_bytes(buf)
    end, has_tags = _measurement_end(buf)
    tags = parse_tags(buf) if has_tags else Tags()
    return unescape_measurement(buf[:end]), tags


def parse_name(buf: bytes | str) -> bytes:
    """Return the unescaped measurement name of a series key."""
    buf = _as_bytes(buf)
    end, _ = _measurement_end(buf)
    return unescape_measurement(buf[:end])


def valid_key_token(text: str | bytes) -> bool:
    """Return True if ``text`` is valid UTF-8 made only of printable characters."""
    if isinstance(text, (bytes, bytearray, memoryview)):
        try:
            text = bytes(text).decode("utf-8")
        except UnicodeDecodeError:
            return False
    return all(ch.isprintable() and ch != "\ufffd" for ch in text)


def valid_key_tokens(name: str | bytes, tags: Iterable[Tag] | None) -> bool:
    """Return True if the measurement name and all tag keys and values are valid."""
    if not valid_key_token(name):
        return False
    return all(
        valid_key_token(tag.key) and valid_key_token(tag.value) for tag in tags or ()
    )