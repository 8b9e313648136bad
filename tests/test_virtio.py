import pytest
from hypothesis import given
from hypothesis import strategies as st

from xvkit.virtio import (
    NUM,
    VIRTIO_BLK_T_OUT,
    BlkRequest,
    ConfigStatus,
    DescFlag,
    MmioRegister,
    VirtqAvail,
    VirtqDesc,
    VirtqUsed,
    VirtqUsedElem,
)

u16 = st.integers(0, 2**16 - 1)
u32 = st.integers(0, 2**32 - 1)
u64 = st.integers(0, 2**64 - 1)


@given(u64, u32, u16, u16)
def test_desc_round_trip(addr, length, flags, nxt):
    desc = VirtqDesc(addr, length, flags, nxt)
    data = desc.pack()
    assert len(data) == VirtqDesc.SIZE
    assert VirtqDesc.unpack(data) == desc


def test_desc_wire_layout():
    data = VirtqDesc(addr=1, len=2, flags=DescFlag.NEXT | DescFlag.WRITE, next=3).pack()
    assert data[:8] == (1).to_bytes(8, "little")
    assert data[8:12] == (2).to_bytes(4, "little")
    assert int.from_bytes(data[12:14], "little") == DescFlag.NEXT | DescFlag.WRITE


@given(u16, u16, st.lists(u16, min_size=NUM, max_size=NUM), u16)
def test_avail_round_trip(flags, idx, ring, unused):
    avail = VirtqAvail(flags, idx, ring, unused)
    assert VirtqAvail.unpack(avail.pack()) == avail


def test_avail_ring_length_checked():
    with pytest.raises(ValueError):
        VirtqAvail(ring=[0] * (NUM - 1)).pack()


@given(u32, u32)
def test_used_elem_round_trip(ident, length):
    elem = VirtqUsedElem(ident, length)
    assert VirtqUsedElem.unpack(elem.pack()) == elem


@given(u16, u16, st.lists(st.tuples(u32, u32), min_size=NUM, max_size=NUM))
def test_used_round_trip(flags, idx, pairs):
    used = VirtqUsed(flags, idx, [VirtqUsedElem(a, b) for a, b in pairs])
    data = used.pack()
    assert len(data) == VirtqUsed.SIZE
    assert VirtqUsed.unpack(data) == used


def test_used_unpack_wrong_size():
    with pytest.raises(ValueError):
        VirtqUsed.unpack(b"\x00" * (VirtqUsed.SIZE + 1))


@given(st.sampled_from([0, 1]), u32, u64)
def test_blk_request_round_trip(kind, reserved, sector):
    req = BlkRequest(kind, reserved, sector)
    assert BlkRequest.unpack(req.pack()) == req


def test_blk_request_type_first():
    data = BlkRequest(type=VIRTIO_BLK_T_OUT, sector=5).pack()
    assert data[:4] == VIRTIO_BLK_T_OUT.to_bytes(4, "little")
    assert BlkRequest.unpack(data).sector == 5


def test_register_offsets_and_status_bits():
    assert MmioRegister(0x038) == MmioRegister.QUEUE_NUM
    assert MmioRegister(0x034) == MmioRegister.QUEUE_NUM_MAX
    assert MmioRegister.QUEUE_NUM - MmioRegister.QUEUE_NUM_MAX == 4
    status = ConfigStatus(3)
    assert status == ConfigStatus.ACKNOWLEDGE | ConfigStatus.DRIVER
    assert status & ConfigStatus.DRIVER
    assert not status & ConfigStatus.DRIVER_OK