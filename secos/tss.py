"""Task state segment and GDT descriptor encoding for x86-64."""

from __future__ import annotations

import struct
from dataclasses import dataclass

_TSS_FORMAT = "<I" + "Q" * 12 + "HH"
TSS_SIZE = struct.calcsize(_TSS_FORMAT)
_GDT_ENTRY_FORMAT = "<HHBBBB"
_TSS_DESC_FORMAT = "<HHBBBBII"
_GDT_POINTER_FORMAT = "<HQ"

IST_STACK_SIZE = 4096
TSS_SELECTOR = 0x28
TSS_ACCESS = 0x89


@dataclass
class Tss:
    """The 64-bit task state segment; the I/O map lies past its end."""

    rsp0: int = 0
    rsp1: int = 0
    rsp2: int = 0
    ist1: int = 0
    ist2: int = 0
    ist3: int = 0
    ist4: int = 0
    ist5: int = 0
    ist6: int = 0
    ist7: int = 0
    iomap_base: int = TSS_SIZE

    def pack(self) -> bytes:
        """Return the packed in-memory layout."""
        return struct.pack(
            _TSS_FORMAT,
            0,
            self.rsp0,
            self.rsp1,
            self.rsp2,
            0,
            self.ist1,
            self.ist2,
            self.ist3,
            self.ist4,
            self.ist5,
            self.ist6,
            self.ist7,
            0,
            0,
            self.iomap_base,
        )

    def set_kernel_stack(self, stack: int) -> None:
        """Set the stack used when entering ring 0."""
        self.rsp0 = stack


@dataclass(frozen=True)
class GdtEntry:
    """A standard 8-byte segment descriptor."""

    limit_low: int
    base_low: int
    base_middle: int
    access: int
    granularity: int
    base_high: int

    def pack(self) -> bytes:
        return struct.pack(
            _GDT_ENTRY_FORMAT,
            self.limit_low,
            self.base_low,
            self.base_middle,
            self.access,
            self.granularity,
            self.base_high,
        )


@dataclass(frozen=True)
class TssDescriptor:
    """The 16-byte system descriptor that points at a TSS."""

    limit_low: int
    base_low: int
    base_middle: int
    access: int
    granularity: int
    base_high: int
    base_upper: int
    reserved: int = 0

    def pack(self) -> bytes:
        return struct.pack(
            _TSS_DESC_FORMAT,
            self.limit_low,
            self.base_low,
            self.base_middle,
            self.access,
            self.granularity,
            self.base_high,
            self.base_upper,
            self.reserved,
        )


def gdt_entry(base: int, limit: int, access: int, gran: int) -> GdtEntry:
    """Build a segment descriptor; ``gran`` supplies the upper flag nibble."""
    return GdtEntry(
        limit_low=limit & 0xFFFF,
        base_low=base & 0xFFFF,
        base_middle=(base >> 16) & 0xFF,
        access=access & 0xFF,
        granularity=((limit >> 16) & 0x0F) | (gran & 0xF0),
        base_high=(base >> 24) & 0xFF,
    )


def tss_descriptor(base: int, limit: int) -> TssDescriptor:
    """Build an available-TSS descriptor at DPL 0."""
    return TssDescriptor(
        limit_low=limit & 0xFFFF,
        base_low=base & 0xFFFF,
        base_middle=(base >> 16) & 0xFF,
        access=TSS_ACCESS,
        granularity=0,
        base_high=(base >> 24) & 0xFF,
        base_upper=(base >> 32) & 0xFFFFFFFF,
    )


def build_gdt(tss_base: int) -> bytes:
    """Return the GDT: null, kernel code/data, user data/code, then the TSS."""
    entries = (
        gdt_entry(0, 0, 0, 0),
        gdt_entry(0, 0x000FFFFF, 0x9A, 0xA0),
        gdt_entry(0, 0x000FFFFF, 0x92, 0xC0),
        gdt_entry(0, 0x000FFFFF, 0xF2, 0xC0),
        gdt_entry(0, 0x000FFFFF, 0xFA, 0xA0),
    )
    table = b"".join(entry.pack() for entry in entries)
    return table + tss_descriptor(tss_base, TSS_SIZE - 1).pack()


def gdt_pointer(base: int, table: bytes) -> bytes:
    """Return the packed pointer (limit, base) that loads ``table`` at ``base``."""
    return struct.pack(_GDT_POINTER_FORMAT, len(table) - 1, base)