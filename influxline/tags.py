"""Tag sets, series keys and measurement/tag escaping."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Mapping

from influxline.scanner import scan_tag_value, scan_to

_MEASUREMENT_ESCAPES = ((b",", b"\\,"), (b" ", b"\\ "))
_TAG_ESCAPES = ((b",", b"\\,"), (b" ", b"\\ "), (b"=", b"\\="))


def _as_bytes(value: bytes | str | None) -> bytes:
    if value is None:
        return b""
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def _as_text(value: bytes) -> str:
    return value.decode("utf-8", "replace")


def _escape(data: bytes, codes: tuple[tuple[bytes, bytes], ...]) -> bytes:
    for plain, escaped in codes:
        if plain in data:
            data = data.replace(plain, escaped)
    return data


def _unescape(data: bytes, codes: tuple[tuple[bytes, bytes], ...]) -> bytes:
    if b"\\" not in data:
        return data
    for plain, escaped in codes:
        if plain in data:
            data = data.replace(escaped, plain)
    return data


def escape_measurement(data: bytes | str) -> bytes:
    """Escape commas and spaces in a measurement name."""
    return _escape(_as_bytes(data), _MEASUREMENT_ESCAPES)


def unescape_measurement(data: bytes | str) -> bytes:
    """Undo :func:`escape_measurement`."""
    return _unescape(_as_bytes(data), _MEASUREMENT_ESCAPES)


def escape_tag(data: bytes | str) -> bytes:
    """Escape commas, spaces and equals signs in a tag key or value."""
    return _escape(_as_bytes(data), _TAG_ESCAPES)


def unescape_tag(data: bytes | str) -> bytes:
    """Undo :func:`escape_tag`."""
    return _unescape(_as_bytes(data), _TAG_ESCAPES)


@dataclass
class Tag:
    """A single key/value tag pair."""

    key: bytes
    value: bytes

    def __post_init__(self) -> None:
        self.key = _as_bytes(self.key)
        self.value = _as_bytes(self.value)

    def size(self) -> int:
        """Return the combined length of key and value."""
        return len(self.key) + len(self.value)

    def clone(self) -> "Tag":
        """Return a copy holding its own key and value buffers."""
        return Tag(bytes(bytearray(self.key)), bytes(bytearray(self.value)))

    def __str__(self) -> str:
        return "{" + _as_text(self.key) + " " + _as_text(self.value) + "}"


class Tags(list):
    """A list of tags kept sorted by key."""

    def hash_key(self) -> bytes:
        """Return the escaped ``,key=value`` encoding of all tags."""
        return self.append_hash_key(b"")

    def append_hash_key(self, dst: bytes | None) -> bytes:
        """Return ``dst`` followed by the escaped encoding of all tags.

        Tags with an empty value are left out.
        """
        out = bytearray(dst or b"")
        for tag in self:
            value = escape_tag(tag.value)
            if not value:
                continue
            out += b"," + escape_tag(tag.key) + b"=" + value
        return bytes(out)

    def size(self) -> int:
        """Return the total length of all keys and values."""
        return sum(tag.size() for tag in self)

    def clone(self) -> "Tags":
        """Return a copy whose tags are clones of these."""
        return Tags(tag.clone() for tag in self)

    def equal(self, other: Iterable[Tag]) -> bool:
        """Return True if both hold the same keys and values in the same order."""
        other = list(other)
        if len(self) != len(other):
            return False
        return all(a.key == b.key and a.value == b.value for a, b in zip(self, other))

    def get(self, key: bytes | str) -> bytes | None:
        """Return the value stored for ``key``, or None."""
        key = _as_bytes(key)
        for tag in self:
            if tag.key == key:
                return tag.value
        return None

    def get_string(self, key: str) -> str:
        """Return the value for ``key`` as text; empty if it is missing."""
        value = self.get(key)
        return _as_text(value) if value is not None else ""

    def set(self, key: bytes | str, value: bytes | str) -> None:
        """Set the value for ``key``, adding the tag in order if it is new."""
        key = _as_bytes(key)
        value = _as_bytes(value)
        for tag in self:
            if tag.key == key:
                tag.value = value
                return
        self.append(Tag(key, value))
        self.sort(key=lambda tag: tag.key)

    def set_string(self, key: str, value: str) -> None:
        """Set a text value for a text key."""
        self.set(key, value)

    def to_map(self) -> dict[str, str]:
        """Return the tags as a dict of text keys and values."""
        return {_as_text(tag.key): _as_text(tag.value) for tag in self}

    def __str__(self) -> str:
        return "[" + " ".join(str(tag) for tag in self) + "]"


def new_tags(mapping: Mapping[str, str] | None) -> Tags:
    """Return tags built from a mapping, sorted by key."""
    if not mapping:
        return Tags()
    tags = Tags(Tag(key, value) for key, value in mapping.items())
    tags.sort(key=lambda tag: tag.key)
    return tags


def compare_tags(a: Iterable[Tag], b: Iterable[Tag]) -> int:
    """Return -1, 0 or 1 as ``a`` sorts before, equal to or after ``b``."""
    a, b = list(a), list(b)
    for left, right in zip(a, b):
        if left.key != right.key:
            return -1 if left.key < right.key else 1
        if left.value != right.value:
            return -1 if left.value < right.value else 1
    if len(a) < len(b):
        return -1
    if len(a) > len(b):
        return 1
    return 0


def copy_tags(tags: Iterable[Tag]) -> Tags:
    """Return a copy of the tag list with new tag objects."""
    return Tags(Tag(tag.key, tag.value) for tag in tags)


def deep_copy_tags(tags: Iterable[Tag]) -> Tags:
    """Return a copy of the tag list whose keys and values are new buffers."""
    return Tags(tag.clone() for tag in tags)


def walk_tags(buf: bytes) -> Iterator[tuple[bytes, bytes]]:
    """Yield the unescaped ``(key, value)`` pairs of a series key."""
    buf = bytes(buf)
    if not buf:
        return
    pos, name = scan_to(buf, 0, b",")
    if not name:
        return
    has_escape = b"\\" in buf
    i = pos + 1
    while i < len(buf):
        i, key = scan_to(buf, i, b"=")
        i, value = scan_tag_value(buf, i + 1)
        if not value:
            continue
        if has_escape:
            yield unescape_tag(key), unescape_tag(value)
        else:
            yield bytes(key), bytes(value)
        i += 1


def parse_tags(buf: bytes) -> Tags:
    """Return the tags of a series key."""
    return Tags(Tag(key, value) for key, value in walk_tags(buf))


def make_key(name: bytes | str, tags: Iterable[Tag] | None) -> bytes:
    """Return the series key for a measurement name and sorted tags."""
    key = escape_measurement(unescape_measurement(_as_bytes(name)))
    if not tags:
        return key
    if not isinstance(tags, Tags):
        tags = Tags(tags)
    return tags.append_hash_key(key)