"""EXT2 superblock parsing and a diagnostic root mount."""

from __future__ import annotations

import contextlib
import struct
from dataclasses import dataclass

from secos.block import BlockDevice, BlockError, BlockRegistry
from secos.ramfs import RamFS, RamFSError
from secos.vfs import FilesystemOps, Vfs

EXT2_MAGIC = 0xEF53
SUPERBLOCK_OFFSET = 1024
REPORT_NAME = "ext2_superblock.txt"
_SUPERBLOCK_FORMAT = "<13I3H"
_SUPERBLOCK_SIZE = struct.calcsize(_SUPERBLOCK_FORMAT)
_REPORT_CAP = 192


@dataclass(frozen=True)
class Ext2Superblock:
    """The leading fields of an ext2 superblock."""

    inodes_count: int
    blocks_count: int
    reserved_blocks_count: int
    free_blocks_count: int
    free_inodes_count: int
    first_data_block: int
    log_block_size: int
    log_frag_size: int
    blocks_per_group: int
    frags_per_group: int
    inodes_per_group: int
    mtime: int
    wtime: int
    mount_count: int
    max_mount_count: int
    magic: int


class Ext2Ops(FilesystemOps):
    """Placeholder ext2 operations: nothing is visible, nothing can change."""


def read_superblock(device: BlockDevice) -> Ext2Superblock:
    """Read the superblock at byte 1024 of ``device``.

    Raises ValueError when the data is short or the magic is wrong.
    """
    data = device.read(0, 4)
    if len(data) < SUPERBLOCK_OFFSET + _SUPERBLOCK_SIZE:
        raise ValueError("device too small for an ext2 superblock")
    sb = Ext2Superblock(*struct.unpack_from(_SUPERBLOCK_FORMAT, data, SUPERBLOCK_OFFSET))
    if sb.magic != EXT2_MAGIC:
        raise ValueError(f"bad ext2 magic 0x{sb.magic:04X}")
    return sb


def format_superblock_report(sb: Ext2Superblock) -> str:
    """Render ``sb`` as the text of the diagnostic file."""
    fields = (
        ("inodes_count", sb.inodes_count),
        ("blocks_count", sb.blocks_count),
        ("free_blocks", sb.free_blocks_count),
        ("free_inodes", sb.free_inodes_count),
        ("block_size_log", sb.log_block_size),
        ("magic", sb.magic),
    )
    text = "EXT2 SUPERBLOCK\n" + "".join(f"{k}={v}\n" for k, v in fields)
    return text[: _REPORT_CAP - 1]


def mount_ext2(
    registry: BlockRegistry, ramfs: RamFS, vfs: Vfs, dev_name: str
) -> Ext2Superblock:
    """Read the superblock, publish a report and make ext2 the VFS root."""
    device = registry.find(dev_name)
    if device is None:
        raise BlockError(f"no block device named {dev_name!r}")
    sb = read_superblock(device)
    with contextlib.suppress(RamFSError):
        ramfs.add(REPORT_NAME, format_superblock_report(sb).encode())
    vfs.replace_root(Ext2Ops(), "ext2")
    return sb