import struct

from secos.tss import (
    TSS_ACCESS,
    TSS_SIZE,
    Tss,
    build_gdt,
    gdt_entry,
    gdt_pointer,
    tss_descriptor,
)


def test_tss_size_and_iomap():
    packed = Tss().pack()
    assert TSS_SIZE == 104
    assert len(packed) == TSS_SIZE
    assert struct.unpack_from("<H", packed, TSS_SIZE - 2)[0] == TSS_SIZE


def test_set_kernel_stack_lands_at_rsp0():
    tss = Tss()
    tss.set_kernel_stack(0xFFFF800000123000)
    assert struct.unpack_from("<Q", tss.pack(), 4)[0] == 0xFFFF800000123000


def test_ist_fields_in_order():
    tss = Tss(ist1=0x1000, ist2=0x2000, ist3=0x3000)
    packed = tss.pack()
    ists = struct.unpack_from("<QQQ", packed, 36)
    assert ists == (0x1000, 0x2000, 0x3000)


def test_null_descriptor_is_zero():
    assert gdt_entry(0, 0, 0, 0).pack() == bytes(8)


def test_kernel_code_descriptor_bytes():
    assert gdt_entry(0, 0x000FFFFF, 0x9A, 0xA0).pack() == bytes.fromhex("ffff0000009aaf00")


def test_gdt_entry_base_and_limit_round_trip():
    entry = gdt_entry(0x12345678, 0x000ABCDE, 0x92, 0xC0)
    base = entry.base_low | (entry.base_middle << 16) | (entry.base_high << 24)
    limit = entry.limit_low | ((entry.granularity & 0x0F) << 16)
    assert base == 0x12345678
    assert limit == 0x000ABCDE
    assert entry.granularity & 0xF0 == 0xC0


def test_tss_descriptor_base_round_trip():
    desc = tss_descriptor(0xFFFF8000DEADB000, TSS_SIZE - 1)
    base = (
        desc.base_low
        | (desc.base_middle << 16)
        | (desc.base_high << 24)
        | (desc.base_upper << 32)
    )
    assert base == 0xFFFF8000DEADB000
    assert desc.limit_low == TSS_SIZE - 1
    assert desc.access == TSS_ACCESS
    assert len(desc.pack()) == 16


def test_build_gdt_layout():
    table = build_gdt(0x5000)
    assert len(table) == 5 * 8 + 16
    assert table[:8] == bytes(8)
    assert table[8:16] == gdt_entry(0, 0x000FFFFF, 0x9A, 0xA0).pack()
    assert table[32:40] == gdt_entry(0, 0x000FFFFF, 0xFA, 0xA0).pack()
    assert table[40:] == tss_descriptor(0x5000, TSS_SIZE - 1).pack()


def test_gdt_pointer_round_trip():
    table = build_gdt(0x5000)
    pointer = gdt_pointer(0x100000, table)
    assert struct.unpack("<HQ", pointer) == (len(table) - 1, 0x100000)