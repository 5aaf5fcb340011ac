"""Escaping helpers for measurement names, tag keys and tag values."""

from __future__ import annotations

import re

_ESCAPE_RE = re.compile(rb'([," =])')
_UNESCAPE_RE = re.compile(rb'\\([," =])')
_UNESCAPE_STR_RE = re.compile(r'\\([," =])')

_STRING_ESCAPES = {
    ord(","): "\\,",
    ord('"'): '\\"',
    ord(" "): "\\ ",
    ord("="): "\\=",
}


def escape_bytes(data: bytes) -> bytes:
    """Return ``data`` with commas, quotes, spaces and equals signs escaped."""
    return _ESCAPE_RE.sub(rb"\\\1", bytes(data))


def is_escaped(data: bytes) -> bool:
    """Return True if ``data`` holds at least one escape sequence."""
    return _UNESCAPE_RE.search(bytes(data)) is not None


def append_unescaped(dst: bytes | None, src: bytes) -> bytes:
    """Return ``dst`` followed by the unescaped form of ``src``."""
    prefix = bytes(dst) if dst else b""
    return prefix + _UNESCAPE_RE.sub(rb"\1", bytes(src))


def unescape(data: bytes | None) -> bytes:
    """Return the unescaped form of ``data``."""
    if not data:
        return b""
    raw = bytes(data)
    if b"\\" not in raw:
        return raw
    return _UNESCAPE_RE.sub(rb"\1", raw)


def escape_string(text: str) -> str:
    """Return ``text`` with commas, quotes, spaces and equals signs escaped."""
    return text.translate(_STRING_ESCAPES)


def unescape_string(text: str) -> str:
    """Return the unescaped form of ``text``."""
    if "\\" not in text:
        return text
    return _UNESCAPE_STR_RE.sub(r"\1", text)