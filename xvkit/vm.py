"""Sv39 page tables over a simulated physical memory."""

from __future__ import annotations

import struct
from enum import IntFlag

from xvkit.layout import KERNBASE, MAXVA, PGSIZE

PTES_PER_PAGE = PGSIZE // 8
_PTE = struct.Struct("<Q")
_FLAG_MASK = 0x3FF


class KernelPanic(RuntimeError):
    """An unrecoverable inconsistency in the kernel's own data."""


class OutOfMemory(MemoryError):
    """No physical page was available."""


class BadAddress(ValueError):
    """A virtual or physical address is not accessible."""


class PteFlag(IntFlag):
    """Bits of a page-table entry."""

    V = 1 << 0
    R = 1 << 1
    W = 1 << 2
    X = 1 << 3
    U = 1 << 4


def pg_round_up(a: int) -> int:
    """Round ``a`` up to a page boundary."""
    return (a + PGSIZE - 1) & ~(PGSIZE - 1)


def pg_round_down(a: int) -> int:
    """Round ``a`` down to a page boundary."""
    return a & ~(PGSIZE - 1)


def px(level: int, va: int) -> int:
    """The 9-bit page-table index of ``va`` at ``level`` (0, 1 or 2)."""
    return (va >> (12 + 9 * level)) & 0x1FF


def pte_to_pa(pte: int) -> int:
    """The physical page address held in a PTE."""
    return (pte >> 10) << 12


def pa_to_pte(pa: int) -> int:
    """The PTE bits that point at physical page ``pa``."""
    return (pa >> 12) << 10


def _pte_flags(pte: int) -> int:
    return pte & _FLAG_MASK


class PhysicalMemory:
    """A run of ``npages`` physical pages starting at ``KERNBASE``."""

    def __init__(self, npages: int) -> None:
        if npages < 0:
            raise ValueError("page count must not be negative")
        self.base = KERNBASE
        self.end = KERNBASE + npages * PGSIZE
        self._data = bytearray(npages * PGSIZE)
        self._free = [self.base + i * PGSIZE for i in reversed(range(npages))]
        self._allocated: set[int] = set()

    def kalloc(self) -> int:
        """Allocate one zeroed page and return its physical address."""
        if not self._free:
            raise OutOfMemory("no free physical pages")
        pa = self._free.pop()
        self._allocated.add(pa)
        offset = pa - self.base
        self._data[offset:offset + PGSIZE] = bytes(PGSIZE)
        return pa

    def kfree(self, pa: int) -> None:
        """Return page ``pa`` to the free list."""
        if pa % PGSIZE or not self.base <= pa < self.end or pa not in self._allocated:
            raise KernelPanic("kfree")
        self._allocated.remove(pa)
        self._free.append(pa)

    def read(self, pa: int, n: int) -> bytes:
        """Read ``n`` bytes at physical address ``pa``."""
        offset = self._offset(pa, n)
        return bytes(self._data[offset:offset + n])

    def write(self, pa: int, data: bytes) -> None:
        """Write ``data`` at physical address ``pa``."""
        offset = self._offset(pa, len(data))
        self._data[offset:offset + len(data)] = data

    def free_count(self) -> int:
        """Number of pages not currently allocated."""
        return len(self._free)

    def _offset(self, pa: int, n: int) -> int:
        if n < 0 or pa < self.base or pa + n > self.end:
            raise BadAddress(f"physical address {pa:#x} (+{n}) outside memory")
        return pa - self.base


class PageTable:
    """A three-level Sv39 page table whose pages live in ``memory``."""

    def __init__(self, memory: PhysicalMemory) -> None:
        self.memory = memory
        self.root = memory.kalloc()

    def _load(self, addr: int) -> int:
        return _PTE.unpack(self.memory.read(addr, 8))[0]

    def _store(self, addr: int, value: int) -> None:
        self.memory.write(addr, _PTE.pack(value))

    def walk(self, va: int, alloc: bool) -> int | None:
        """Physical address of the level-0 PTE for ``va``.

        Returns None when an intermediate table is missing and ``alloc``
        is false; raises :class:`OutOfMemory` when one cannot be made.
        """
        if va >= MAXVA:
            raise KernelPanic("walk")
        table = self.root
        for level in (2, 1):
            addr = table + 8 * px(level, va)
            pte = self._load(addr)
            if pte & PteFlag.V:
                table = pte_to_pa(pte)
            else:
                if not alloc:
                    return None
                table = self.memory.kalloc()
                self._store(addr, pa_to_pte(table) | PteFlag.V)
        return table + 8 * px(0, va)

    def walkaddr(self, va: int) -> int | None:
        """Physical page address of user virtual address ``va``, or None."""
        if va >= MAXVA:
            return None
        addr = self.walk(va, False)
        if addr is None:
            return None
        pte = self._load(addr)
        if not pte & PteFlag.V or not pte & PteFlag.U:
            return None
        return pte_to_pa(pte)

    def kvmmap(self, va: int, pa: int, sz: int, perm: int) -> None:
        """Add a mapping at boot; failure is fatal."""
        try:
            self.mappages(va, sz, pa, perm)
        except OutOfMemory:
            raise KernelPanic("kvmmap") from None

    def mappages(self, va: int, size: int, pa: int, perm: int) -> None:
        """Map ``[va, va+size)`` to physical pages starting at ``pa``."""
        if size == 0:
            raise KernelPanic("mappages: size")
        a = pg_round_down(va)
        last = pg_round_down(va + size - 1)
        while True:
            addr = self.walk(a, True)
            if self._load(addr) & PteFlag.V:
                raise KernelPanic("mappages: remap")
            self._store(addr, pa_to_pte(pa) | int(perm) | PteFlag.V)
            if a == last:
                break
            a += PGSIZE
            pa += PGSIZE

    def unmap(self, va: int, npages: int, do_free: bool) -> None:
        """Remove ``npages`` existing mappings from ``va``, optionally freeing them."""
        if va % PGSIZE:
            raise KernelPanic("uvmunmap: not aligned")
        for a in range(va, va + npages * PGSIZE, PGSIZE):
            addr = self.walk(a, False)
            if addr is None:
                raise KernelPanic("uvmunmap: walk")
            pte = self._load(addr)
            if not pte & PteFlag.V:
                raise KernelPanic("uvmunmap: not mapped")
            if _pte_flags(pte) == PteFlag.V:
                raise KernelPanic("uvmunmap: not a leaf")
            if do_free:
                self.memory.kfree(pte_to_pa(pte))
            self._store(addr, 0)

    def load_first(self, src: bytes) -> None:
        """Place ``src``, shorter than a page, at address zero."""
        if len(src) >= PGSIZE:
            raise KernelPanic("uvmfirst: more than a page")
        mem = self.memory.kalloc()
        self.mappages(0, PGSIZE, mem, PteFlag.W | PteFlag.R | PteFlag.X | PteFlag.U)
        self.memory.write(mem, bytes(src))

    def grow(self, oldsz: int, newsz: int, xperm: int) -> int:
        """Grow user memory from ``oldsz`` to ``newsz`` and return the new size."""
        if newsz < oldsz:
            return oldsz
        oldsz = pg_round_up(oldsz)
        for a in range(oldsz, newsz, PGSIZE):
            try:
                mem = self.memory.kalloc()
            except OutOfMemory:
                self.shrink(a, oldsz)
                raise
            try:
                self.mappages(a, PGSIZE, mem, PteFlag.R | PteFlag.U | int(xperm))
            except OutOfMemory:
                self.memory.kfree(mem)
                self.shrink(a, oldsz)
                raise
        return newsz

    def shrink(self, oldsz: int, newsz: int) -> int:
        """Release user pages above ``newsz`` and return the new size."""
        if newsz >= oldsz:
            return oldsz
        if pg_round_up(newsz) < pg_round_up(oldsz):
            npages = (pg_round_up(oldsz) - pg_round_up(newsz)) // PGSIZE
            self.unmap(pg_round_up(newsz), npages, True)
        return newsz

    def _freewalk(self, table: int) -> None:
        page = self.memory.read(table, PGSIZE)
        for i, (pte,) in enumerate(_PTE.iter_unpack(page)):
            if pte & PteFlag.V and not pte & (PteFlag.R | PteFlag.W | PteFlag.X):
                self._freewalk(pte_to_pa(pte))
                self._store(table + 8 * i, 0)
            elif pte & PteFlag.V:
                raise KernelPanic("freewalk: leaf")
        self.memory.kfree(table)

    def free(self, sz: int) -> None:
        """Free ``sz`` bytes of user memory and then every table page."""
        if sz > 0:
            self.unmap(0, pg_round_up(sz) // PGSIZE, True)
        self._freewalk(self.root)

    def copy_to(self, new: "PageTable", sz: int) -> None:
        """Copy the first ``sz`` bytes of mappings and memory into ``new``."""
        i = 0
        try:
            for i in range(0, sz, PGSIZE):
                addr = self.walk(i, False)
                if addr is None:
                    raise KernelPanic("uvmcopy: pte should exist")
                pte = self._load(addr)
                if not pte & PteFlag.V:
                    raise KernelPanic("uvmcopy: page not present")
                pa = pte_to_pa(pte)
                mem = self.memory.kalloc()
                self.memory.write(mem, self.memory.read(pa, PGSIZE))
                try:
                    new.mappages(i, PGSIZE, mem, _pte_flags(pte))
                except OutOfMemory:
                    self.memory.kfree(mem)
                    raise
        except OutOfMemory:
            new.unmap(0, i // PGSIZE, True)
            raise

    def clear_user(self, va: int) -> None:
        """Make the page at ``va`` inaccessible to user mode."""
        addr = self.walk(va, False)
        if addr is None:
            raise KernelPanic("uvmclear")
        self._store(addr, self._load(addr) & ~PteFlag.U)

    def copyout(self, dstva: int, data: bytes) -> None:
        """Copy ``data`` to user virtual address ``dstva``."""
        view = memoryview(bytes(data))
        while view:
            va0 = pg_round_down(dstva)
            pa0 = self.walkaddr(va0)
            if pa0 is None:
                raise BadAddress(f"user address {dstva:#x} not mapped")
            n = min(PGSIZE - (dstva - va0), len(view))
            self.memory.write(pa0 + (dstva - va0), view[:n].tobytes())
            view = view[n:]
            dstva = va0 + PGSIZE

    def copyin(self, srcva: int, n: int) -> bytes:
        """Copy ``n`` bytes from user virtual address ``srcva``."""
        out = bytearray()
        while n > 0:
            va0 = pg_round_down(srcva)
            pa0 = self.walkaddr(va0)
            if pa0 is None:
                raise BadAddress(f"user address {srcva:#x} not mapped")
            step = min(PGSIZE - (srcva - va0), n)
            out += self.memory.read(pa0 + (srcva - va0), step)
            n -= step
            srcva = va0 + PGSIZE
        return bytes(out)

    def copyinstr(self, srcva: int, max: int) -> bytes:
        """Copy a NUL-terminated string of at most ``max`` bytes, without the NUL."""
        out = bytearray()
        while max > 0:
            va0 = pg_round_down(srcva)
            pa0 = self.walkaddr(va0)
            if pa0 is None:
                raise BadAddress(f"user address {srcva:#x} not mapped")
            step = min(PGSIZE - (srcva - va0), max)
            chunk = self.memory.read(pa0 + (srcva - va0), step)
            nul = chunk.find(0)
            if nul >= 0:
                out += chunk[:nul]
                return bytes(out)
            out += chunk
            max -= step
            srcva = va0 + PGSIZE
        raise BadAddress("string not terminated within limit")