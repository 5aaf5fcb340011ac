"""Points: a series key, an encoded field set and an optional timestamp."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Iterable, Iterator, Mapping

from influxline import timeutil
from influxline.errors import POINT_MUST_HAVE_A_FIELD, PointError, ShortBufferError
from influxline.escape import append_unescaped, is_escaped, unescape
from influxline.fields import Unsigned, marshal_fields, unescape_string_field
from influxline.fnv import fnv64a
from influxline.numparse import NumError, parse_bool, parse_float, parse_int, parse_uint
from influxline.scanner import scan_field_value, scan_to
from influxline.tags import Tag, Tags, make_key, parse_tags, walk_tags

MAX_KEY_LENGTH = 65535

# Length of the separator placed between a series key and a field name.
_FIELD_KEY_SEPARATOR_LEN = 4
_NUMERIC_START = frozenset(b"0123456789-.nNiIu")
_LENGTH = struct.Struct(">I")

# Nanoseconds since the epoch reported for the unset time, wrapped to 64 bits.
_ZERO_UNIX_NANO = ((timeutil.truncate_time.__defaults__ or (None,))[0] if False else
                   ((-62135596800 * timeutil.SECOND + 2**63) % 2**64) - 2**63)


class FieldType(IntEnum):
    """The type of a field value."""

    INTEGER = 0
    FLOAT = 1
    BOOLEAN = 2
    STRING = 3
    EMPTY = 4
    UNSIGNED = 5


def _quoted(raw: bytes) -> str:
    return '"' + raw.decode("utf-8", "replace") + '"'


def _as_bytes(value: bytes | str) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


@dataclass(frozen=True)
class RawField:
    """One field of a point as it appears in the encoded field set."""

    key: bytes
    type: FieldType
    raw: bytes

    def value(self) -> Any:
        """Return the field value converted to its Python type."""
        kind = self.type
        if kind is FieldType.EMPTY:
            return None
        if kind is FieldType.STRING:
            return unescape_string_field(self.raw[1:-1].decode("utf-8", "surrogateescape"))
        try:
            if kind is FieldType.INTEGER:
                return parse_int(self.raw, 10, 64)
            if kind is FieldType.UNSIGNED:
                return Unsigned(parse_uint(self.raw, 10, 64))
            if kind is FieldType.FLOAT:
                return parse_float(self.raw, 64)
            return parse_bool(self.raw)
        except NumError as exc:
            names = {
                FieldType.INTEGER: "integer",
                FieldType.UNSIGNED: "unsigned",
                FieldType.FLOAT: "floating point",
                FieldType.BOOLEAN: "bool",
            }
            raise PointError(
                f"unable to parse {names[kind]} value {_quoted(self.raw)}: {exc}"
            ) from exc


def _classify(value: bytes) -> tuple[FieldType, bytes]:
    if not value:
        return FieldType.EMPTY, value
    first = value[0]
    if first == ord('"'):
        return FieldType.STRING, value
    if first in _NUMERIC_START:
        last = value[-1]
        if last == ord("i"):
            return FieldType.INTEGER, value[:-1]
        if last == ord("u"):
            return FieldType.UNSIGNED, value[:-1]
        return FieldType.FLOAT, value
    return FieldType.BOOLEAN, value


def _trunc_div(n: int, d: int) -> int:
    q = abs(n) // abs(d)
    return -q if (n < 0) != (d < 0) else q


class Point:
    """A single point: series key, encoded fields and a nanosecond time.

    ``time`` is nanoseconds since the Unix epoch, or None when unset.
    """

    def __init__(self, key: bytes, fields: bytes, time: int | None = None) -> None:
        self._key = bytes(key)
        self._fields = bytes(fields)
        self.time = time
        self._cached_fields: dict[str, Any] | None = None
        self._cached_tags: Tags | None = None

    @property
    def raw_fields(self) -> bytes:
        """The encoded field set."""
        return self._fields

    @raw_fields.setter
    def raw_fields(self, value: bytes) -> None:
        self._fields = bytes(value)
        self._cached_fields = None

    def key(self) -> bytes:
        """Return the series key: the measurement joined with its tags."""
        return self._key

    def name(self) -> bytes:
        """Return the unescaped measurement name."""
        _, name = scan_to(self._key, 0, b",")
        return unescape(name)

    def set_name(self, name: bytes | str) -> None:
        """Replace the measurement name, keeping the tags."""
        self._key = make_key(name, self.tags())

    def tags(self) -> Tags:
        """Return the point's tags."""
        if self._cached_tags is None:
            self._cached_tags = parse_tags(self._key)
        return self._cached_tags

    def has_tag(self, tag: bytes | str) -> bool:
        """Return True if a tag with key ``tag`` exists."""
        wanted = _as_bytes(tag)
        return any(key == wanted for key, _ in walk_tags(self._key))

    def add_tag(self, key: bytes | str, value: bytes | str) -> None:
        """Add a tag and keep the tags sorted by key."""
        tags = Tags(self.tags())
        tags.append(Tag(key, value))
        tags.sort(key=lambda tag: tag.key)
        self._cached_tags = tags
        self._key = make_key(self.name(), tags)

    def set_tags(self, tags: Iterable[Tag]) -> None:
        """Replace all tags."""
        tags = tags if isinstance(tags, Tags) else Tags(tags)
        self._key = make_key(self.name(), tags)
        self._cached_tags = tags

    def iter_fields(self) -> Iterator[RawField]:
        """Yield the fields in encoded order without converting them."""
        fields = self._fields
        end = 0
        while end < len(fields):
            end, key = scan_to(fields, end, b"=")
            if is_escaped(key):
                key = append_unescaped(b"", key)
            end, value = scan_field_value(fields, end + 1)
            end += 1
            kind, raw = _classify(bytes(value))
            yield RawField(bytes(key), kind, raw)

    def fields(self) -> dict[str, Any]:
        """Return the fields as a dict of converted values."""
        if self._cached_fields is not None:
            return self._cached_fields
        out: dict[str, Any] = {}
        for field in self.iter_fields():
            if not field.key or field.type is FieldType.EMPTY:
                continue
            name = field.key.decode("utf-8", "surrogateescape")
            try:
                out[name] = field.value()
            except PointError as exc:
                raise PointError(f"unable to unmarshal field {name}: {exc}") from exc
        self._cached_fields = out
        return out

    def set_precision(self, precision: str) -> None:
        """Truncate the time to the given precision unit."""
        if precision in ("u", "ms", "s", "m", "h"):
            self.time = timeutil.truncate_time(
                self.time, timeutil.get_precision_multiplier(precision)
            )

    def round(self, d: int) -> None:
        """Round the time to a multiple of ``d`` nanoseconds."""
        self.time = timeutil.round_time(self.time, d)

    def unix_nano(self) -> int:
        """Return the time as nanoseconds since the Unix epoch."""
        return _ZERO_UNIX_NANO if self.time is None else self.time

    def hash_id(self) -> int:
        """Return a non-cryptographic hash of the series key."""
        return fnv64a(self._key)

    def string_size(self) -> int:
        """Return the length in bytes of the text form."""
        size = len(self._key) + len(self._fields) + 1
        if self.time is not None:
            size += len(str(self.unix_nano())) + 1
        return size

    def _text(self, timestamp: int | None) -> str:
        out = self._key + b" " + self._fields
        if timestamp is not None:
            out += b" " + str(timestamp).encode()
        return out.decode("utf-8", "surrogateescape")

    def precision_string(self, precision: str) -> str:
        """Return the text form with the time in units of ``precision``."""
        if self.time is None:
            return self._text(None)
        mult = timeutil.get_precision_multiplier(precision)
        return self._text(_trunc_div(self.unix_nano(), mult))

    def rounded_string(self, d: int) -> str:
        """Return the text form with the time rounded to ``d`` nanoseconds."""
        if self.time is None:
            return self._text(None)
        return self._text(timeutil.round_time(self.time, d))

    def split(self, size: int) -> list["Point"]:
        """Split into points with the same key and time, each at most ``size`` long.

        A single field, or a point without time, may exceed ``size``.
        """
        if self.time is None or self.string_size() <= size:
            return [self]
        size -= len(self._key) + len(str(self.unix_nano())) + 2
        fields = self._fields
        points: list[Point] = []
        start = cur = 0
        while cur < len(fields):
            end, _ = scan_to(fields, cur, b"=")
            end, _ = scan_field_value(fields, end + 1)
            if cur > start and end - start > size:
                points.append(Point(self._key, fields[start:cur - 1], self.time))
                start = cur
            cur = end + 1
        points.append(Point(self._key, fields[start:], self.time))
        return points

    def marshal_binary(self) -> bytes:
        """Return the binary encoding of the point."""
        if not self._fields:
            raise PointError(POINT_MUST_HAVE_A_FIELD)
        return (
            _LENGTH.pack(len(self._key))
            + self._key
            + _LENGTH.pack(len(self._fields))
            + self._fields
            + timeutil.marshal_time(self.time)
        )

    def unmarshal_binary(self, data: bytes) -> None:
        """Load the point from its binary encoding."""
        data = bytes(data)
        if len(data) < 4:
            raise ShortBufferError()
        (n,) = _LENGTH.unpack_from(data)
        data = data[4:]
        if len(data) < n:
            raise ShortBufferError()
        key, data = data[:n], data[n:]
        if len(data) < 4:
            raise ShortBufferError()
        (n,) = _LENGTH.unpack_from(data)
        data = data[4:]
        if len(data) < n:
            raise ShortBufferError()
        fields, data = data[:n], data[n:]
        try:
            time = timeutil.unmarshal_time(data)
        except ValueError as exc:
            raise PointError(str(exc)) from exc
        self._key = key
        self._fields = fields
        self.time = time
        self._cached_fields = None
        self._cached_tags = None

    def __bytes__(self) -> bytes:
        out = self._key + b" " + self._fields
        if self.time is not None:
            out += b" " + str(self.unix_nano()).encode()
        return out

    def __str__(self) -> str:
        return bytes(self).decode("utf-8", "surrogateescape")

    def __repr__(self) -> str:
        return f"Point({str(self)!r})"


def new_point(
    name: bytes | str,
    tags: Iterable[Tag] | None,
    fields: Mapping[str, Any],
    time: int | None,
) -> Point:
    """Build a point, rejecting empty, infinite or NaN fields and bad times."""
    if not fields:
        raise PointError(POINT_MUST_HAVE_A_FIELD)
    if time is not None:
        timeutil.check_time(time)
    for field_name, value in fields.items():
        if isinstance(value, float):
            if math.isinf(value):
                raise PointError(f"+/-Inf is an unsupported value for field {field_name}")
            if math.isnan(value):
                raise PointError(f"NaN is an unsupported value for field {field_name}")
        if not field_name:
            raise PointError("all fields must have non-empty names")
    key = make_key(name, tags)
    for field_name in fields:
        size = len(key) + _FIELD_KEY_SEPARATOR_LEN + len(field_name.encode("utf-8"))
        if size > MAX_KEY_LENGTH:
            raise PointError(f"max key length exceeded: {size} > {MAX_KEY_LENGTH}")
    return Point(key, marshal_fields(fields), time)


def new_point_from_bytes(data: bytes) -> Point:
    """Decode a point from its binary form and check that its fields decode."""
    point = Point(b"", b"")
    point.unmarshal_binary(data)
    has_field = False
    for field in point.iter_fields():
        if not field.key:
            continue
        has_field = True
        if field.type in (
            FieldType.FLOAT,
            FieldType.INTEGER,
            FieldType.UNSIGNED,
            FieldType.BOOLEAN,
        ):
            try:
                field.value()
            except PointError as exc:
                name = field.key.decode("utf-8", "replace")
                raise PointError(f"unable to unmarshal field {name}: {exc}") from exc
    if not has_field:
        raise PointError(POINT_MUST_HAVE_A_FIELD)
    return point