"""First-fit free-list allocator over a simulated heap."""

from __future__ import annotations

HEADER_SIZE = 16
# Smallest number of header units requested from the heap at once.
MIN_CORE_UNITS = 4096

_BASE = 0


class Allocator:
    """A circular free list of blocks ordered by address.

    Addresses are byte offsets into a simulated address space.  Block
    headers occupy one unit of :data:`HEADER_SIZE` bytes; the heap grows
    in steps of at least :data:`MIN_CORE_UNITS` units, never beyond
    ``heap_limit`` bytes.
    """

    def __init__(self, heap_limit: int) -> None:
        if heap_limit < 0:
            raise ValueError("heap limit must not be negative")
        self.heap_limit = heap_limit
        self._size: dict[int, int] = {}
        self._next: dict[int, int] = {}
        self._allocated: dict[int, int] = {}
        self._freep: int | None = None
        self._brk = _BASE + 1

    @property
    def heap_units(self) -> int:
        """Units obtained from the heap so far."""
        return self._brk - (_BASE + 1)

    def malloc(self, nbytes: int) -> int:
        """Allocate at least ``nbytes`` bytes and return their address.

        Raises :class:`MemoryError` when the heap cannot grow enough.
        """
        if nbytes < 0:
            raise ValueError("size must not be negative")
        nunits = (nbytes + HEADER_SIZE - 1) // HEADER_SIZE + 1
        if self._freep is None:
            self._next[_BASE] = _BASE
            self._size[_BASE] = 0
            self._freep = _BASE
        prevp = self._freep
        p = self._next[prevp]
        while True:
            if self._size[p] >= nunits:
                if self._size[p] == nunits:
                    self._next[prevp] = self._next.pop(p)
                else:
                    self._size[p] -= nunits
                    p += self._size[p]
                    self._size[p] = nunits
                self._freep = prevp
                self._allocated[p] = nunits
                return (p + 1) * HEADER_SIZE
            if p == self._freep:
                p = self._morecore(nunits)
            prevp, p = p, self._next[p]

    def free(self, addr: int) -> None:
        """Return a block obtained from :meth:`malloc` to the free list."""
        bp, rem = divmod(addr, HEADER_SIZE)
        bp -= 1
        if rem or bp not in self._allocated:
            raise ValueError(f"address {addr:#x} is not an allocated block")
        del self._allocated[bp]
        self._release(bp)

    def free_units(self) -> int:
        """Total units held on the free list."""
        if self._freep is None:
            return 0
        total = 0
        p = self._next[_BASE]
        while p != _BASE:
            total += self._size[p]
            p = self._next[p]
        return total

    def _release(self, bp: int) -> None:
        size, nxt = self._size, self._next
        p = self._freep
        while not (p < bp < nxt[p]):
            if p >= nxt[p] and (bp > p or bp < nxt[p]):
                break
            p = nxt[p]
        q = nxt[p]
        if bp + size[bp] == q:
            size[bp] += size.pop(q)
            nxt[bp] = nxt.pop(q)
        else:
            nxt[bp] = q
        if p + size[p] == bp:
            size[p] += size.pop(bp)
            nxt[p] = nxt.pop(bp)
        else:
            nxt[p] = bp
        self._freep = p

    def _morecore(self, nunits: int) -> int:
        nunits = max(nunits, MIN_CORE_UNITS)
        if (self.heap_units + nunits) * HEADER_SIZE > self.heap_limit:
            raise MemoryError("heap exhausted")
        hp = self._brk
        self._brk += nunits
        self._size[hp] = nunits
        self._release(hp)
        assert self._freep is not None
        return self._freep