"""Block devices and a small fixed-size registry of them."""

from __future__ import annotations

from typing import Callable, Iterator, List, Optional

MAX_DEVICES = 4

EXT2_RAMDEV_NAME = "ext2ram"
EXT2_RAMDEV_SECTOR_SIZE = 512
EXT2_RAMDEV_SECTORS = 8

Reader = Callable[[int, int], bytes]


class BlockError(Exception):
    """Raised when a block device cannot be read or registered."""


class BlockDevice:
    """A named, read-only device addressed in fixed-size sectors.

    Reads are delegated to ``reader(lba, count)``, which must return exactly
    ``count * sector_size`` bytes.
    """

    def __init__(
        self,
        name: str,
        sector_size: int,
        sector_count: int,
        reader: Optional[Reader] = None,
    ) -> None:
        self.name = name
        self.sector_size = sector_size
        self.sector_count = sector_count
        self._reader = reader

    @property
    def readable(self) -> bool:
        """True when the device has a way to read sectors."""
        return self._reader is not None

    def read(self, lba: int, count: int) -> bytes:
        """Read ``count`` sectors starting at ``lba``."""
        if self._reader is None:
            raise BlockError(f"device {self.name!r} has no reader")
        data = self._reader(lba, count)
        if data is None or len(data) != count * self.sector_size:
            raise BlockError(
                f"short read from {self.name!r} at lba {lba} ({count} sectors)"
            )
        return bytes(data)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, "
            f"sector_size={self.sector_size}, sector_count={self.sector_count})"
        )


class RamBlockDevice(BlockDevice):
    """A block device backed by an in-memory buffer."""

    def __init__(self, name: str, storage: bytes, sector_size: int = 512) -> None:
        if sector_size <= 0:
            raise BlockError("sector size must be positive")
        self.storage = bytearray(storage)
        super().__init__(name, sector_size, len(self.storage) // sector_size)

    @property
    def readable(self) -> bool:
        return True

    def read(self, lba: int, count: int) -> bytes:
        """Read ``count`` sectors starting at ``lba`` from the buffer."""
        if lba < 0 or count < 0 or lba + count > self.sector_count:
            raise BlockError(
                f"read of {count} sectors at lba {lba} is beyond {self.name!r}"
            )
        start = lba * self.sector_size
        return bytes(self.storage[start : start + count * self.sector_size])


class BlockRegistry:
    """Holds up to ``MAX_DEVICES`` block devices, looked up by name."""

    def __init__(self) -> None:
        self._devices: List[BlockDevice] = []

    def register(self, device: BlockDevice) -> None:
        """Add a device; registering the same device twice is a no-op."""
        if (
            device is None
            or not device.name
            or not device.readable
            or device.sector_size == 0
        ):
            raise BlockError("invalid block device")
        if any(existing is device for existing in self._devices):
            return
        if len(self._devices) >= MAX_DEVICES:
            raise BlockError("block device table is full")
        self._devices.append(device)

    def find(self, name: Optional[str]) -> Optional[BlockDevice]:
        """Return the device registered under ``name``, or None."""
        if not name:
            return None
        return next((dev for dev in self._devices if dev.name == name), None)

    def __len__(self) -> int:
        return len(self._devices)

    def __iter__(self) -> Iterator[BlockDevice]:
        return iter(list(self._devices))


def make_ext2_ramdev() -> RamBlockDevice:
    """Create the zero-filled RAM device used for ext2 mount attempts."""
    return RamBlockDevice(
        EXT2_RAMDEV_NAME,
        bytes(EXT2_RAMDEV_SECTOR_SIZE * EXT2_RAMDEV_SECTORS),
        EXT2_RAMDEV_SECTOR_SIZE,
    )