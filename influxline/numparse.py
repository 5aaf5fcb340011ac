"""Number and boolean parsing with strict integer/float syntax rules."""

from __future__ import annotations

import math
import struct

_SYNTAX = "invalid syntax"
_RANGE = "value out of range"

_SPECIAL_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
}


def _quote(text: str) -> str:
    out = ['"']
    for ch in text:
        code = ord(ch)
        if ch in '"\\':
            out.append("\\" + ch)
        elif 0xDC80 <= code <= 0xDCFF:
            out.append(f"\\x{code - 0xDC00:02x}")
        elif ch in _SPECIAL_ESCAPES:
            out.append(_SPECIAL_ESCAPES[ch])
        elif code < 0x20 or code == 0x7F:
            out.append(f"\\x{code:02x}")
        elif ch.isprintable():
            out.append(ch)
        elif code < 0x10000:
            out.append(f"\\u{code:04x}")
        else:
            out.append(f"\\U{code:08x}")
    out.append('"')
    return "".join(out)


class NumError(ValueError):
    """Raised when a number or boolean cannot be parsed."""

    def __init__(self, func: str, num: str, err: str) -> None:
        self.func = func
        self.num = num
        self.err = err
        super().__init__(f"strconv.{func}: parsing {_quote(num)}: {err}")


def _text(data: bytes | str) -> str:
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data).decode("utf-8", "surrogateescape")
    return data


def _lower(ch: str) -> str:
    code = ord(ch)
    return chr(code | 0x20) if code < 0x80 else ch


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _underscore_ok(text: str) -> bool:
    saw = "^"
    i = 0
    if text and text[0] in "+-":
        text = text[1:]
    hexa = False
    if len(text) >= 2 and text[0] == "0" and _lower(text[1]) in "box":
        i = 2
        saw = "0"
        hexa = _lower(text[1]) == "x"
    for ch in text[i:]:
        if _is_digit(ch) or (hexa and "a" <= _lower(ch) <= "f"):
            saw = "0"
            continue
        if ch == "_":
            if saw != "0":
                return False
            saw = "_"
            continue
        if saw == "_":
            return False
        saw = "!"
    return saw != "_"


def _parse_uint(text: str, base: int, bit_size: int, func: str) -> int:
    if not text:
        raise NumError(func, text, _SYNTAX)
    original = text
    base_prefixed = base == 0
    if 2 <= base <= 36:
        pass
    elif base == 0:
        base = 10
        if text[0] == "0":
            marker = _lower(text[1]) if len(text) >= 3 else ""
            if marker == "b":
                base, text = 2, text[2:]
            elif marker == "o":
                base, text = 8, text[2:]
            elif marker == "x":
                base, text = 16, text[2:]
            else:
                base, text = 8, text[1:]
    else:
        raise NumError(func, original, f"invalid base {base}")

    if bit_size == 0:
        bit_size = 64
    elif bit_size < 0 or bit_size > 64:
        raise NumError(func, original, f"invalid bit size {bit_size}")

    max_value = (1 << bit_size) - 1
    value = 0
    underscores = False
    for ch in text:
        if ch == "_" and base_prefixed:
            underscores = True
            continue
        if _is_digit(ch):
            digit = ord(ch) - ord("0")
        else:
            low = _lower(ch)
            if "a" <= low <= "z":
                digit = ord(low) - ord("a") + 10
            else:
                raise NumError(func, original, _SYNTAX)
        if digit >= base:
            raise NumError(func, original, _SYNTAX)
        value = value * base + digit
        if value > max_value:
            raise NumError(func, original, _RANGE)

    if underscores and not _underscore_ok(original):
        raise NumError(func, original, _SYNTAX)
    return value


def parse_uint(data: bytes | str, base: int, bit_size: int) -> int:
    """Parse an unsigned integer in the given base and bit size."""
    return _parse_uint(_text(data), base, bit_size, "ParseUint")


def parse_int(data: bytes | str, base: int, bit_size: int) -> int:
    """Parse a signed integer in the given base and bit size."""
    text = _text(data)
    if not text:
        raise NumError("ParseInt", text, _SYNTAX)
    original = text
    negative = False
    if text[0] in "+-":
        negative = text[0] == "-"
        text = text[1:]
    try:
        magnitude = _parse_uint(text, base, bit_size, "ParseInt")
    except NumError as exc:
        raise NumError("ParseInt", original, exc.err) from None

    if bit_size == 0:
        bit_size = 64
    cutoff = 1 << (bit_size - 1)
    if not negative and magnitude >= cutoff:
        raise NumError("ParseInt", original, _RANGE)
    if negative and magnitude > cutoff:
        raise NumError("ParseInt", original, _RANGE)
    return -magnitude if negative else magnitude


def _special(text: str) -> float | None:
    if not text:
        return None
    sign = 1.0
    rest = text
    signed = text[0] in "+-"
    if signed:
        sign = -1.0 if text[0] == "-" else 1.0
        rest = text[1:]
    lowered = rest.lower()
    if lowered in ("inf", "infinity"):
        return sign * math.inf
    if not signed and lowered == "nan":
        return math.nan
    return None


def _valid_float_syntax(text: str) -> bool:
    i = 0
    n = len(text)
    if i < n and text[i] in "+-":
        i += 1
    base = 10
    exp_char = "e"
    if i + 2 < n and text[i] == "0" and _lower(text[i + 1]) == "x":
        base = 16
        exp_char = "p"
        i += 2
    underscores = False
    saw_dot = False
    saw_digits = False
    while i < n:
        ch = text[i]
        if ch == "_":
            underscores = True
        elif ch == ".":
            if saw_dot:
                break
            saw_dot = True
        elif _is_digit(ch) or (base == 16 and "a" <= _lower(ch) <= "f"):
            saw_digits = True
        else:
            break
        i += 1
    if not saw_digits:
        return False
    if i < n and _lower(text[i]) == exp_char:
        i += 1
        if i < n and text[i] in "+-":
            i += 1
        if i >= n or not _is_digit(text[i]):
            return False
        while i < n and (_is_digit(text[i]) or text[i] == "_"):
            if text[i] == "_":
                underscores = True
            i += 1
    elif base == 16:
        return False
    if underscores and not _underscore_ok(text[:i]):
        return False
    return i == n


def parse_float(data: bytes | str, bit_size: int) -> float:
    """Parse a decimal or hexadecimal floating-point number."""
    text = _text(data)
    special = _special(text)
    if special is not None:
        return special
    if not _valid_float_syntax(text):
        raise NumError("ParseFloat", text, _SYNTAX)

    clean = text.replace("_", "")
    body = clean.lstrip("+-")
    try:
        if body[:2].lower() == "0x":
            value = float.fromhex(clean)
        else:
            value = float(clean)
    except OverflowError:
        raise NumError("ParseFloat", text, _RANGE) from None
    if math.isinf(value):
        raise NumError("ParseFloat", text, _RANGE)

    if bit_size == 32:
        try:
            (value,) = struct.unpack("<f", struct.pack("<f", value))
        except OverflowError:
            raise NumError("ParseFloat", text, _RANGE) from None
    return value


_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def parse_bool(data: bytes | str) -> bool:
    """Parse one of the accepted boolean spellings."""
    text = _text(data)
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise NumError("ParseBool", text, _SYNTAX)