"""Interrupt descriptor table encoding and the PIC remap sequence."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import List, Mapping, Tuple

IDT_ENTRIES = 256
_ENTRY_FORMAT = "<HHBBHII"
ENTRY_SIZE = struct.calcsize(_ENTRY_FORMAT)
_POINTER_FORMAT = "<HQ"

KERNEL_CODE_SELECTOR = 0x08
INTERRUPT_GATE = 0x8E
USER_TRAP_GATE = 0xEE

PIC_MASTER_COMMAND = 0x20
PIC_MASTER_DATA = 0x21
PIC_SLAVE_COMMAND = 0xA0
PIC_SLAVE_DATA = 0xA1

TIMER_VECTOR = 0x20
KEYBOARD_VECTOR = 0x21
SYSCALL_VECTOR = 0x80

# Exceptions that switch to a dedicated interrupt stack.
_IST_VECTORS = {8: 1, 14: 2, 13: 3}

PortWrite = Tuple[int, int]


@dataclass
class IdtEntry:
    """One 16-byte 64-bit gate descriptor."""

    offset_low: int = 0
    selector: int = 0
    ist: int = 0
    type_attr: int = 0
    offset_mid: int = 0
    offset_high: int = 0
    zero: int = 0

    def pack(self) -> bytes:
        """Return the in-memory layout."""
        return struct.pack(
            _ENTRY_FORMAT,
            self.offset_low,
            self.selector,
            self.ist,
            self.type_attr,
            self.offset_mid,
            self.offset_high,
            self.zero,
        )

    def handler(self) -> int:
        """Return the handler address the gate points at."""
        return self.offset_low | (self.offset_mid << 16) | (self.offset_high << 32)


def _check_vector(num: int) -> None:
    if not 0 <= num < IDT_ENTRIES:
        raise ValueError(f"interrupt vector {num} out of range")


class Idt:
    """A table of 256 gates."""

    def __init__(self) -> None:
        self.entries: List[IdtEntry] = [IdtEntry() for _ in range(IDT_ENTRIES)]

    def __getitem__(self, num: int) -> IdtEntry:
        _check_vector(num)
        return self.entries[num]

    def __len__(self) -> int:
        return len(self.entries)

    def set_gate(self, num: int, handler: int, selector: int, flags: int) -> None:
        """Point vector ``num`` at ``handler`` without an interrupt stack."""
        _check_vector(num)
        handler &= 0xFFFFFFFFFFFFFFFF
        self.entries[num] = IdtEntry(
            offset_low=handler & 0xFFFF,
            selector=selector & 0xFFFF,
            ist=0,
            type_attr=flags & 0xFF,
            offset_mid=(handler >> 16) & 0xFFFF,
            offset_high=(handler >> 32) & 0xFFFFFFFF,
            zero=0,
        )

    def set_gate_ist(
        self, num: int, handler: int, selector: int, flags: int, ist: int
    ) -> None:
        """Point vector ``num`` at ``handler`` using interrupt stack ``ist``."""
        self.set_gate(num, handler, selector, flags)
        self.entries[num].ist = ist & 0xFF

    def init(self, handlers: Mapping[str, int]) -> List[PortWrite]:
        """Fill the table from handler addresses keyed by name.

        Required names: ``isr_stub``, ``isr0`` to ``isr31``, ``isr_timer``,
        ``isr_keyboard`` and ``syscall_entry``. Returns the PIC mask writes
        that enable only the timer and keyboard lines.
        """
        stub = handlers["isr_stub"]
        for num in range(IDT_ENTRIES):
            self.set_gate(num, stub, KERNEL_CODE_SELECTOR, INTERRUPT_GATE)
        for num in range(32):
            address = handlers[f"isr{num}"]
            ist = _IST_VECTORS.get(num)
            if ist is None:
                self.set_gate(num, address, KERNEL_CODE_SELECTOR, INTERRUPT_GATE)
            else:
                self.set_gate_ist(
                    num, address, KERNEL_CODE_SELECTOR, INTERRUPT_GATE, ist
                )
        self.set_gate(
            TIMER_VECTOR, handlers["isr_timer"], KERNEL_CODE_SELECTOR, INTERRUPT_GATE
        )
        self.set_gate(
            KEYBOARD_VECTOR,
            handlers["isr_keyboard"],
            KERNEL_CODE_SELECTOR,
            INTERRUPT_GATE,
        )
        self.set_gate(
            SYSCALL_VECTOR,
            handlers["syscall_entry"],
            KERNEL_CODE_SELECTOR,
            USER_TRAP_GATE,
        )
        return [(PIC_MASTER_DATA, 0xFC), (PIC_SLAVE_DATA, 0xFF)]

    def pack(self) -> bytes:
        """Return the whole table as laid out in memory."""
        return b"".join(entry.pack() for entry in self.entries)

    def pointer(self, base: int) -> bytes:
        """Return the packed (limit, base) operand for loading the table."""
        return struct.pack(_POINTER_FORMAT, ENTRY_SIZE * IDT_ENTRIES - 1, base)


def pic_remap_sequence(master_mask: int, slave_mask: int) -> List[PortWrite]:
    """Return the port writes that move IRQs 0-15 to vectors 0x20-0x2F.

    The given masks are restored at the end.
    """
    return [
        (PIC_MASTER_COMMAND, 0x11),
        (PIC_SLAVE_COMMAND, 0x11),
        (PIC_MASTER_DATA, 0x20),
        (PIC_SLAVE_DATA, 0x28),
        (PIC_MASTER_DATA, 0x04),
        (PIC_SLAVE_DATA, 0x02),
        (PIC_MASTER_DATA, 0x01),
        (PIC_SLAVE_DATA, 0x01),
        (PIC_MASTER_DATA, master_mask & 0xFF),
        (PIC_SLAVE_DATA, slave_mask & 0xFF),
    ]