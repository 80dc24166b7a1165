import struct

import pytest

from secos.idt import Idt, IdtEntry, pic_remap_sequence


def _handlers():
    table = {f"isr{n}": 0x1000 + n * 0x10 for n in range(32)}
    table.update(
        isr_stub=0xFFFF800000002000,
        isr_timer=0xFFFF800000003000,
        isr_keyboard=0xFFFF800000004000,
        syscall_entry=0xFFFF800000005000,
    )
    return table


def test_entry_pack_size_and_handler():
    entry = IdtEntry(offset_low=0x5678, offset_mid=0x1234, offset_high=0xDEADBEEF)
    assert len(entry.pack()) == 16
    assert entry.handler() == 0xDEADBEEF12345678


def test_set_gate_round_trip():
    idt = Idt()
    address = 0xFFFFFFFF80102345
    idt.set_gate(42, address, 0x08, 0x8E)
    entry = idt[42]
    assert entry.handler() == address
    assert entry.selector == 0x08
    assert entry.type_attr == 0x8E
    assert entry.ist == 0


def test_set_gate_packed_layout():
    idt = Idt()
    address = 0x0000123456789ABC
    idt.set_gate(3, address, 0x08, 0x8E)
    fields = struct.unpack("<HHBBHII", idt[3].pack())
    assert fields == (0x9ABC, 0x08, 0, 0x8E, 0x5678, 0x1234, 0)


def test_set_gate_ist_keeps_ist():
    idt = Idt()
    idt.set_gate_ist(8, 0x4000, 0x08, 0x8E, 1)
    assert idt[8].ist == 1
    assert idt[8].handler() == 0x4000


def test_vector_out_of_range():
    idt = Idt()
    with pytest.raises(ValueError):
        idt.set_gate(256, 0, 0x08, 0x8E)
    with pytest.raises(ValueError):
        idt.set_gate(-1, 0, 0x08, 0x8E)


def test_init_installs_handlers():
    idt = Idt()
    handlers = _handlers()
    writes = idt.init(handlers)
    assert writes == [(0x21, 0xFC), (0xA1, 0xFF)]
    for n in range(32):
        assert idt[n].handler() == handlers[f"isr{n}"]
    assert idt[0x20].handler() == handlers["isr_timer"]
    assert idt[0x21].handler() == handlers["isr_keyboard"]
    assert idt[0x80].handler() == handlers["syscall_entry"]
    assert idt[0x80].type_attr == 0xEE
    assert idt[0x50].handler() == handlers["isr_stub"]
    assert idt[0x50].type_attr == 0x8E


def test_init_ist_assignments():
    idt = Idt()
    idt.init(_handlers())
    assert (idt[8].ist, idt[13].ist, idt[14].ist) == (1, 3, 2)
    others = [idt[n].ist for n in range(256) if n not in (8, 13, 14)]
    assert set(others) == {0}


def test_init_all_gates_use_kernel_code_selector():
    idt = Idt()
    idt.init(_handlers())
    assert {entry.selector for entry in idt.entries} == {0x08}


def test_init_missing_handler():
    handlers = _handlers()
    del handlers["isr_timer"]
    with pytest.raises(KeyError):
        Idt().init(handlers)


def test_table_and_pointer():
    idt = Idt()
    idt.init(_handlers())
    table = idt.pack()
    assert len(table) == len(idt) * 16
    assert table[0x80 * 16 : 0x81 * 16] == idt[0x80].pack()
    limit, base = struct.unpack("<HQ", idt.pointer(0xFFFF800000100000))
    assert limit == len(table) - 1
    assert base == 0xFFFF800000100000


def test_pic_remap_sequence():
    seq = pic_remap_sequence(0xB8, 0x8F)
    assert seq[:2] == [(0x20, 0x11), (0xA0, 0x11)]
    assert seq[2:4] == [(0x21, 0x20), (0xA1, 0x28)]
    assert seq[-2:] == [(0x21, 0xB8), (0xA1, 0x8F)]
    assert len(seq) == 10