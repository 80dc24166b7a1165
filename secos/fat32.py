"""FAT32 boot parameter block parsing and a diagnostic mount."""

from __future__ import annotations

import contextlib
import struct
from dataclasses import dataclass

from secos.block import BlockDevice, BlockError, BlockRegistry
from secos.ramfs import RamFS, RamFSError
from secos.vfs import FilesystemOps

_MAX_SECTOR = 1024
_BPB_MIN_BYTES = 48
_REPORT_CAP = 128
REPORT_NAME = "fat32_bpb.txt"


@dataclass(frozen=True)
class Fat32Bpb:
    """The essential fields of a FAT32 BIOS parameter block."""

    bytes_per_sector: int
    sectors_per_cluster: int
    reserved_sectors: int
    fat_count: int
    sectors_per_fat: int
    root_cluster: int
    total_sectors_32: int


class Fat32Ops(FilesystemOps):
    """Placeholder FAT32 operations: nothing is visible, nothing can change."""


def parse_bpb(device: BlockDevice) -> Fat32Bpb:
    """Read sector 0 of ``device`` and decode its BPB.

    Raises ValueError when the sector is too large or the BPB is not sane.
    """
    if device.sector_size > _MAX_SECTOR:
        raise ValueError(f"sector size {device.sector_size} is too large")
    sector = device.read(0, 1)
    if len(sector) < _BPB_MIN_BYTES:
        raise ValueError("sector too short for a BPB")
    bpb = Fat32Bpb(
        bytes_per_sector=struct.unpack_from("<H", sector, 11)[0],
        sectors_per_cluster=sector[13],
        reserved_sectors=struct.unpack_from("<H", sector, 14)[0],
        fat_count=sector[16],
        sectors_per_fat=struct.unpack_from("<I", sector, 36)[0],
        root_cluster=struct.unpack_from("<I", sector, 44)[0],
        total_sectors_32=struct.unpack_from("<I", sector, 32)[0],
    )
    if not (bpb.bytes_per_sector and bpb.sectors_per_cluster and bpb.fat_count):
        raise ValueError("invalid FAT32 BPB")
    return bpb


def format_bpb_report(bpb: Fat32Bpb) -> str:
    """Render ``bpb`` as the text of the diagnostic file."""
    fields = (
        ("bytes_per_sector", bpb.bytes_per_sector),
        ("sectors_per_cluster", bpb.sectors_per_cluster),
        ("reserved_sectors", bpb.reserved_sectors),
        ("fat_count", bpb.fat_count),
        ("sectors_per_fat", bpb.sectors_per_fat),
        ("root_cluster", bpb.root_cluster),
        ("total_sectors", bpb.total_sectors_32),
    )
    text = "FAT32 BPB\n" + "".join(f"{label}={value}\n" for label, value in fields)
    return text[: _REPORT_CAP - 1]


def mount_fat32(
    registry: BlockRegistry, ramfs: RamFS, dev_name: str, mount_point: str = "/"
) -> Fat32Bpb:
    """Parse the BPB of ``dev_name`` and publish a report file in ``ramfs``."""
    device = registry.find(dev_name)
    if device is None:
        raise BlockError(f"no block device named {dev_name!r}")
    bpb = parse_bpb(device)
    with contextlib.suppress(RamFSError):
        ramfs.add(REPORT_NAME, format_bpb_report(bpb).encode())
    return bpb