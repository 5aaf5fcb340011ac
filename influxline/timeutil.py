"""Nanosecond timestamps: range checks, precision, rounding and binary form.

A timestamp is an ``int`` of nanoseconds since the Unix epoch; ``None``
stands for an unset (zero) time.
"""

from __future__ import annotations

import struct

NANOSECOND = 1
MICROSECOND = 1000 * NANOSECOND
MILLISECOND = 1000 * MICROSECOND
SECOND = 1000 * MILLISECOND
MINUTE = 60 * SECOND
HOUR = 60 * MINUTE

MIN_NANO_TIME = -(2**63) + 2
MAX_NANO_TIME = 2**63 - 2

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

# Seconds from January 1 of year 1 to the Unix epoch.
_UNIX_TO_INTERNAL = 62135596800
_ZERO_TIME_NANOS = -_UNIX_TO_INTERNAL * SECOND
_BINARY_VERSION = 1
_BINARY_LAYOUT = struct.Struct(">Bqih")
_UTC_OFFSET = -1

_PRECISIONS = {
    "u": MICROSECOND,
    "ms": MILLISECOND,
    "s": SECOND,
    "m": MINUTE,
    "h": HOUR,
}


class TimeOutOfRangeError(ValueError):
    """Raised when a time falls outside the representable range."""

    def __init__(self) -> None:
        super().__init__(f"time outside range {MIN_NANO_TIME} - {MAX_NANO_TIME}")


def get_precision_multiplier(precision: str) -> int:
    """Return nanoseconds per unit of ``precision``; unknown means nanoseconds."""
    return _PRECISIONS.get(precision, NANOSECOND)


def check_time(t: int | None) -> None:
    """Raise TimeOutOfRangeError unless ``t`` lies in the supported range."""
    if t is None or t < MIN_NANO_TIME or t > MAX_NANO_TIME:
        raise TimeOutOfRangeError()


def safe_calc_time(timestamp: int, precision: str) -> int:
    """Scale ``timestamp`` by ``precision`` and check the result's range."""
    mult = get_precision_multiplier(precision)
    if timestamp in (0, 1) or mult in (0, 1):
        result = timestamp * mult
    else:
        if timestamp == MIN_NANO_TIME or mult == MAX_NANO_TIME:
            raise TimeOutOfRangeError()
        result = timestamp * mult
        if not _INT64_MIN <= result <= _INT64_MAX:
            raise TimeOutOfRangeError()
    check_time(result)
    return result


def truncate_time(t: int | None, d: int) -> int | None:
    """Round ``t`` down to a multiple of ``d`` counted from the zero time."""
    if t is None or d <= 0:
        return t
    return t - (t - _ZERO_TIME_NANOS) % d


def round_time(t: int | None, d: int) -> int | None:
    """Round ``t`` to the nearest multiple of ``d``; halfway rounds up."""
    if t is None or d <= 0:
        return t
    remainder = (t - _ZERO_TIME_NANOS) % d
    if remainder + remainder < d:
        return t - remainder
    return t + (d - remainder)


def marshal_time(t: int | None) -> bytes:
    """Encode ``t`` in the 15-byte versioned binary time format (UTC)."""
    if t is None:
        seconds, nanos = 0, 0
    else:
        unix_seconds, nanos = divmod(t, SECOND)
        seconds = unix_seconds + _UNIX_TO_INTERNAL
    return _BINARY_LAYOUT.pack(_BINARY_VERSION, seconds, nanos, _UTC_OFFSET)


def unmarshal_time(data: bytes) -> int | None:
    """Decode a time written by :func:`marshal_time`."""
    if not data:
        raise ValueError("Time.UnmarshalBinary: no data")
    if data[0] != _BINARY_VERSION:
        raise ValueError("Time.UnmarshalBinary: unsupported version")
    if len(data) != _BINARY_LAYOUT.size:
        raise ValueError("Time.UnmarshalBinary: invalid length")
    _, seconds, nanos, _offset = _BINARY_LAYOUT.unpack(bytes(data))
    if seconds == 0 and nanos == 0:
        return None
    return (seconds - _UNIX_TO_INTERNAL) * SECOND + nanos