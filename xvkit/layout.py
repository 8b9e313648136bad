"""Physical memory layout, open flags and file status records."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum, IntFlag
from typing import ClassVar

PGSIZE = 4096
# One bit less than Sv39 allows, so addresses never need sign extension.
MAXVA = 1 << (9 + 9 + 9 + 12 - 1)

UART0 = 0x10000000
UART0_IRQ = 10

VIRTIO0 = 0x10001000
VIRTIO0_IRQ = 1

CLINT = 0x2000000
CLINT_MTIME = CLINT + 0xBFF8

PLIC = 0x0C000000
PLIC_PRIORITY = PLIC + 0x0
PLIC_PENDING = PLIC + 0x1000

KERNBASE = 0x80000000
PHYSTOP = KERNBASE + 128 * 1024 * 1024

TRAMPOLINE = MAXVA - PGSIZE
TRAPFRAME = TRAMPOLINE - PGSIZE


def clint_mtimecmp(hartid: int) -> int:
    """Address of the timer compare register for a hart."""
    return CLINT + 0x4000 + 8 * hartid


def plic_menable(hart: int) -> int:
    """Address of the machine-mode interrupt enable bits for a hart."""
    return PLIC + 0x2000 + hart * 0x100


def plic_senable(hart: int) -> int:
    """Address of the supervisor-mode interrupt enable bits for a hart."""
    return PLIC + 0x2080 + hart * 0x100


def plic_mpriority(hart: int) -> int:
    """Address of the machine-mode priority threshold for a hart."""
    return PLIC + 0x200000 + hart * 0x2000


def plic_spriority(hart: int) -> int:
    """Address of the supervisor-mode priority threshold for a hart."""
    return PLIC + 0x201000 + hart * 0x2000


def plic_mclaim(hart: int) -> int:
    """Address of the machine-mode claim register for a hart."""
    return PLIC + 0x200004 + hart * 0x2000


def plic_sclaim(hart: int) -> int:
    """Address of the supervisor-mode claim register for a hart."""
    return PLIC + 0x201004 + hart * 0x2000


def kstack(p: int) -> int:
    """Virtual address of the kernel stack for process slot ``p``.

    Each stack sits below the trampoline with an unmapped guard page.
    """
    return TRAMPOLINE - (p + 1) * 2 * PGSIZE


class OpenFlag(IntFlag):
    """Mode bits accepted by ``open``."""

    RDONLY = 0x000
    WRONLY = 0x001
    RDWR = 0x002
    CREATE = 0x200
    TRUNC = 0x400


class FileType(IntEnum):
    """Kinds of inode."""

    DIR = 1
    FILE = 2
    DEVICE = 3


_STAT_FORMAT = struct.Struct("<iIhh4xQ")


@dataclass
class Stat:
    """File status as returned by ``fstat``."""

    dev: int = 0
    ino: int = 0
    type: int = 0
    nlink: int = 0
    size: int = 0

    SIZE: ClassVar[int] = _STAT_FORMAT.size

    def pack(self) -> bytes:
        """Encode in the in-memory little-endian layout."""
        return _STAT_FORMAT.pack(self.dev, self.ino, self.type, self.nlink, self.size)

    @classmethod
    def unpack(cls, data: bytes) -> "Stat":
        """Decode a record produced by :meth:`pack`."""
        if len(data) != cls.SIZE:
            raise ValueError(f"stat record must be {cls.SIZE} bytes, got {len(data)}")
        dev, ino, kind, nlink, size = _STAT_FORMAT.unpack(data)
        return cls(dev=dev, ino=ino, type=kind, nlink=nlink, size=size)