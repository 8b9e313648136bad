"""Park-Miller "minimal standard" pseudo-random generator."""

from __future__ import annotations

from collections.abc import Iterator

_MASK64 = (1 << 64) - 1


def do_rand(ctx: int) -> int:
    """Return the successor of state ``ctx``, in ``[0, 0x7ffffffd]``.

    The returned value is also the next state.  Computes
    ``(7**5 * x) mod (2**31 - 1)`` without overflowing 31 bits.
    """
    x = ((ctx & _MASK64) % 0x7FFFFFFE) + 1
    hi, lo = divmod(x, 127773)
    x = 16807 * lo - 2836 * hi
    if x < 0:
        x += 0x7FFFFFFF
    return x - 1


class ParkMiller:
    """Stateful generator built on :func:`do_rand`."""

    def __init__(self, seed: int = 1) -> None:
        self.state = seed & _MASK64

    def next(self) -> int:
        self.state = do_rand(self.state)
        return self.state

    def __iter__(self) -> Iterator[int]:
        while True:
            yield self.next()