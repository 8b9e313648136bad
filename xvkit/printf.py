"""Minimal formatted output understanding %d, %l, %x, %p, %s, %c and %%."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from typing import IO, Any

_DIGITS = "0123456789ABCDEF"
_MASK32 = 0xFFFFFFFF
_MASK64 = (1 << 64) - 1


def _to_int32(value: int) -> int:
    value &= _MASK32
    return value - (1 << 32) if value >= 1 << 31 else value


def _format_int(value: int, base: int, signed: bool) -> str:
    xx = _to_int32(int(value))
    negative = signed and xx < 0
    x = -xx if negative else xx & _MASK32
    digits = []
    while True:
        x, remainder = divmod(x, base)
        digits.append(_DIGITS[remainder])
        if x == 0:
            break
    if negative:
        digits.append("-")
    return "".join(reversed(digits))


def _format_ptr(value: int) -> str:
    value = int(value) & _MASK64
    return "0x" + "".join(_DIGITS[(value >> shift) & 0xF] for shift in range(60, -4, -4))


def _format_char(value: Any) -> str:
    if isinstance(value, str):
        if len(value) != 1:
            raise TypeError("%c expects a single character")
        return value
    return chr(int(value) & 0xFF)


def _format_str(value: Any) -> str:
    if value is None:
        return "(null)"
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("latin-1")
    return str(value)


def _take(args: Iterator[Any]) -> Any:
    try:
        return next(args)
    except StopIteration:
        raise TypeError("not enough arguments for format string") from None


def format_printf(fmt: str, *args: Any) -> str:
    """Render ``fmt`` with ``args`` and return the text.

    ``%d`` prints a signed 32-bit integer, ``%l`` the low 32 bits as
    unsigned decimal, ``%x`` unsigned upper-case hexadecimal, ``%p`` a
    64-bit pointer.  An unknown conversion is printed as it stands.
    """
    values = iter(args)
    out: list[str] = []
    pending = False
    for c in fmt:
        if not pending:
            if c == "%":
                pending = True
            else:
                out.append(c)
            continue
        if c == "d":
            out.append(_format_int(_take(values), 10, True))
        elif c == "l":
            out.append(_format_int(_take(values), 10, False))
        elif c == "x":
            out.append(_format_int(_take(values), 16, False))
        elif c == "p":
            out.append(_format_ptr(_take(values)))
        elif c == "s":
            out.append(_format_str(_take(values)))
        elif c == "c":
            out.append(_format_char(_take(values)))
        elif c == "%":
            out.append("%")
        else:
            out.append("%" + c)
        pending = False
    return "".join(out)


def fprintf(stream: IO[str], fmt: str, *args: Any) -> None:
    """Write formatted text to ``stream``."""
    stream.write(format_printf(fmt, *args))


def printf(fmt: str, *args: Any) -> None:
    """Write formatted text to standard output."""
    fprintf(sys.stdout, fmt, *args)