"""ELF executable file and program headers."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntFlag
from typing import ClassVar

ELF_MAGIC = 0x464C457F  # "\x7FELF" little-endian
ELF_PROG_LOAD = 1

_ELF_FORMAT = struct.Struct("<I12sHHIQQQIHHHHHH")
_PROG_FORMAT = struct.Struct("<IIQQQQQQ")


class ElfFormatError(ValueError):
    """Raised when bytes do not hold a well-formed ELF structure."""


class ProgramFlag(IntFlag):
    """Permission bits of a program segment."""

    EXEC = 1
    WRITE = 2
    READ = 4


@dataclass
class ElfHeader:
    """The ELF file header."""

    magic: int = ELF_MAGIC
    elf: bytes = bytes(12)
    type: int = 0
    machine: int = 0
    version: int = 0
    entry: int = 0
    phoff: int = 0
    shoff: int = 0
    flags: int = 0
    ehsize: int = 0
    phentsize: int = 0
    phnum: int = 0
    shentsize: int = 0
    shnum: int = 0
    shstrndx: int = 0

    SIZE: ClassVar[int] = _ELF_FORMAT.size

    def pack(self) -> bytes:
        if len(self.elf) != 12:
            raise ValueError("identification bytes must be exactly 12 long")
        return _ELF_FORMAT.pack(
            self.magic, bytes(self.elf), self.type, self.machine, self.version,
            self.entry, self.phoff, self.shoff, self.flags, self.ehsize,
            self.phentsize, self.phnum, self.shentsize, self.shnum, self.shstrndx,
        )

    @classmethod
    def unpack(cls, data: bytes) -> "ElfHeader":
        """Decode the header at the start of ``data`` and check its magic."""
        if len(data) < cls.SIZE:
            raise ElfFormatError("truncated ELF header")
        header = cls(*_ELF_FORMAT.unpack_from(data))
        if header.magic != ELF_MAGIC:
            raise ElfFormatError(f"bad ELF magic {header.magic:#x}")
        return header


@dataclass
class ProgramHeader:
    """One program segment header."""

    type: int = 0
    flags: int = 0
    off: int = 0
    vaddr: int = 0
    paddr: int = 0
    filesz: int = 0
    memsz: int = 0
    align: int = 0

    SIZE: ClassVar[int] = _PROG_FORMAT.size

    def pack(self) -> bytes:
        return _PROG_FORMAT.pack(
            self.type, self.flags, self.off, self.vaddr,
            self.paddr, self.filesz, self.memsz, self.align,
        )

    @classmethod
    def unpack(cls, data: bytes) -> "ProgramHeader":
        """Decode the program header at the start of ``data``."""
        if len(data) < cls.SIZE:
            raise ElfFormatError("truncated program header")
        return cls(*_PROG_FORMAT.unpack_from(data))


def read_program_headers(data: bytes, header: ElfHeader) -> list[ProgramHeader]:
    """Return the ``header.phnum`` program headers found at ``header.phoff``."""
    view = memoryview(data)
    headers = []
    for index in range(header.phnum):
        start = header.phoff + index * ProgramHeader.SIZE
        end = start + ProgramHeader.SIZE
        if end > len(view):
            raise ElfFormatError(f"program header {index} lies past end of file")
        headers.append(ProgramHeader.unpack(view[start:end]))
    return headers