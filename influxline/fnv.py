"""64-bit FNV-1a hashing."""

from __future__ import annotations

_PRIME64 = 1099511628211
_OFFSET64 = 14695981039346656037
_MASK64 = (1 << 64) - 1


class InlineFNV64a:
    """Running FNV-1a 64-bit hash."""

    def __init__(self) -> None:
        self._hash = _OFFSET64

    def write(self, data: bytes) -> int:
        """Add ``data`` to the running hash and return its length."""
        value = self._hash
        for byte in bytes(data):
            value ^= byte
            value = (value * _PRIME64) & _MASK64
        self._hash = value
        return len(data)

    def sum64(self) -> int:
        """Return the current hash value."""
        return self._hash


def fnv64a(data: bytes) -> int:
    """Return the FNV-1a 64-bit hash of ``data``."""
    h = InlineFNV64a()
    h.write(data)
    return h.sum64()