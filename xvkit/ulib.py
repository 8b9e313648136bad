"""Small string and input helpers used by user programs."""

from __future__ import annotations

from typing import IO, AnyStr


def _as_bytes(value: str | bytes | bytearray | memoryview) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def atoi(s: str | bytes) -> int:
    """Parse the leading decimal digits of ``s``; 0 if there are none."""
    n = 0
    for ch in _as_bytes(s):
        if not 0x30 <= ch <= 0x39:
            break
        n = n * 10 + ch - 0x30
    return n


def strcmp(p: str | bytes, q: str | bytes) -> int:
    """Compare two NUL-terminated strings by unsigned byte value.

    Returns the difference of the first differing bytes, or 0 if equal.
    """
    a = _as_bytes(p).split(b"\0", 1)[0] + b"\0"
    b = _as_bytes(q).split(b"\0", 1)[0] + b"\0"
    for x, y in zip(a, b):
        if x != y or x == 0:
            return x - y
    return 0


def memcmp(a: bytes | str, b: bytes | str, n: int) -> int:
    """Compare the first ``n`` bytes of two buffers."""
    if n < 0:
        raise ValueError("length must not be negative")
    left, right = _as_bytes(a), _as_bytes(b)
    if len(left) < n or len(right) < n:
        raise ValueError("buffer shorter than the compared length")
    for x, y in zip(left[:n], right[:n]):
        if x != y:
            return x - y
    return 0


def gets(stream: IO[AnyStr], max: int) -> AnyStr:
    """Read one line of at most ``max - 1`` characters from ``stream``.

    Reading stops after a newline or carriage return, which is kept,
    or at end of input.
    """
    empty = stream.read(0)
    chunks = []
    while len(chunks) + 1 < max:
        ch = stream.read(1)
        if not ch:
            break
        chunks.append(ch)
        if ch in ("\n", "\r", b"\n", b"\r"):
            break
    return empty.join(chunks)