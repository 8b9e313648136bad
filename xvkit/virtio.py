"""Virtio MMIO registers and virtqueue structures."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum, IntFlag
from typing import ClassVar

# Number of descriptors in each queue; must be a power of two.
NUM = 8

VIRTIO_BLK_F_RO = 5
VIRTIO_BLK_F_SCSI = 7
VIRTIO_BLK_F_CONFIG_WCE = 11
VIRTIO_BLK_F_MQ = 12
VIRTIO_F_ANY_LAYOUT = 27
VIRTIO_RING_F_INDIRECT_DESC = 28
VIRTIO_RING_F_EVENT_IDX = 29

VIRTIO_BLK_T_IN = 0
VIRTIO_BLK_T_OUT = 1


class MmioRegister(IntEnum):
    """Offsets of the virtio MMIO control registers."""

    MAGIC_VALUE = 0x000
    VERSION = 0x004
    DEVICE_ID = 0x008
    VENDOR_ID = 0x00C
    DEVICE_FEATURES = 0x010
    DRIVER_FEATURES = 0x020
    QUEUE_SEL = 0x030
    QUEUE_NUM_MAX = 0x034
    QUEUE_NUM = 0x038
    QUEUE_READY = 0x044
    QUEUE_NOTIFY = 0x050
    INTERRUPT_STATUS = 0x060
    INTERRUPT_ACK = 0x064
    STATUS = 0x070
    QUEUE_DESC_LOW = 0x080
    QUEUE_DESC_HIGH = 0x084
    DRIVER_DESC_LOW = 0x090
    DRIVER_DESC_HIGH = 0x094
    DEVICE_DESC_LOW = 0x0A0
    DEVICE_DESC_HIGH = 0x0A4


class ConfigStatus(IntFlag):
    """Bits of the device status register."""

    ACKNOWLEDGE = 1
    DRIVER = 2
    DRIVER_OK = 4
    FEATURES_OK = 8


class DescFlag(IntFlag):
    """Descriptor flags."""

    NEXT = 1
    WRITE = 2


def _check_size(data: bytes, size: int, what: str) -> None:
    if len(data) != size:
        raise ValueError(f"{what} must be {size} bytes, got {len(data)}")


def _check_ring(ring: list, what: str) -> None:
    if len(ring) != NUM:
        raise ValueError(f"{what} ring must have {NUM} entries, got {len(ring)}")


_DESC = struct.Struct("<QIHH")
_AVAIL = struct.Struct(f"<HH{NUM}HH")
_USED_ELEM = struct.Struct("<II")
_USED_HEAD = struct.Struct("<HH")
_BLK_REQ = struct.Struct("<IIQ")


@dataclass
class VirtqDesc:
    """A single descriptor."""

    addr: int = 0
    len: int = 0
    flags: int = 0
    next: int = 0

    SIZE: ClassVar[int] = _DESC.size

    def pack(self) -> bytes:
        return _DESC.pack(self.addr, self.len, self.flags, self.next)

    @classmethod
    def unpack(cls, data: bytes) -> "VirtqDesc":
        _check_size(data, cls.SIZE, "descriptor")
        return cls(*_DESC.unpack(data))


@dataclass
class VirtqAvail:
    """The whole available ring."""

    flags: int = 0
    idx: int = 0
    ring: list[int] = field(default_factory=lambda: [0] * NUM)
    unused: int = 0

    SIZE: ClassVar[int] = _AVAIL.size

    def pack(self) -> bytes:
        _check_ring(self.ring, "avail")
        return _AVAIL.pack(self.flags, self.idx, *self.ring, self.unused)

    @classmethod
    def unpack(cls, data: bytes) -> "VirtqAvail":
        _check_size(data, cls.SIZE, "avail ring")
        flags, idx, *rest = _AVAIL.unpack(data)
        return cls(flags=flags, idx=idx, ring=list(rest[:NUM]), unused=rest[NUM])


@dataclass
class VirtqUsedElem:
    """One completion entry in the used ring."""

    id: int = 0
    len: int = 0

    SIZE: ClassVar[int] = _USED_ELEM.size

    def pack(self) -> bytes:
        return _USED_ELEM.pack(self.id, self.len)

    @classmethod
    def unpack(cls, data: bytes) -> "VirtqUsedElem":
        _check_size(data, cls.SIZE, "used element")
        return cls(*_USED_ELEM.unpack(data))


@dataclass
class VirtqUsed:
    """The whole used ring."""

    flags: int = 0
    idx: int = 0
    ring: list[VirtqUsedElem] = field(
        default_factory=lambda: [VirtqUsedElem() for _ in range(NUM)]
    )

    SIZE: ClassVar[int] = _USED_HEAD.size + NUM * _USED_ELEM.size

    def pack(self) -> bytes:
        _check_ring(self.ring, "used")
        return _USED_HEAD.pack(self.flags, self.idx) + b"".join(e.pack() for e in self.ring)

    @classmethod
    def unpack(cls, data: bytes) -> "VirtqUsed":
        _check_size(data, cls.SIZE, "used ring")
        flags, idx = _USED_HEAD.unpack_from(data)
        ring = [
            VirtqUsedElem(*elem)
            for elem in _USED_ELEM.iter_unpack(data[_USED_HEAD.size:])
        ]
        return cls(flags=flags, idx=idx, ring=ring)


@dataclass
class BlkRequest:
    """Header of a block device request."""

    type: int = VIRTIO_BLK_T_IN
    reserved: int = 0
    sector: int = 0

    SIZE: ClassVar[int] = _BLK_REQ.size

    def pack(self) -> bytes:
        return _BLK_REQ.pack(self.type, self.reserved, self.sector)

    @classmethod
    def unpack(cls, data: bytes) -> "BlkRequest":
        _check_size(data, cls.SIZE, "block request")
        return cls(*_BLK_REQ.unpack(data))